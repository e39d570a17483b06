# quizzes.py
"""
Quiz lifecycle: first-time generation, revisions and the publish flag.

Revisions never touch the parent row. An edit produces a new quiz that keeps
the surviving items in order, appends freshly generated ones, and carries an
ever-growing list of discarded items so the generator does not bring them back.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

import models
import prompts
import slugs
import store
from errors import InvalidRequest, NotFound, NothingToDo
from llm import parse_json
from schemas import ITEMS_PER_QUIZ, QuizInsert
from utils import parse_items_payload, parse_quiz_payload

logger = logging.getLogger(__name__)


def create_quiz(generator, webpage: models.Webpage) -> QuizInsert:
    context = prompts.build_context(webpage.title, webpage.text)
    task = prompts.build_create_task(ITEMS_PER_QUIZ)

    raw = parse_json(generator.generate(context, task))
    generated = parse_quiz_payload(raw, ITEMS_PER_QUIZ)

    return QuizInsert(
        title=generated.title.strip(),
        slug=slugs.allocate(generated.slug or generated.title),
        items=generated.items,
        deleted_items=[],
        source_id=webpage.id,
        parent_id=None,
    )


def _check_indices(deleted_item_idxs: List[int], n_items: int) -> None:
    for idx in deleted_item_idxs:
        if not 0 <= idx < n_items:
            raise InvalidRequest(f"deleted item index {idx} out of range 0..{n_items - 1}")
    if len(set(deleted_item_idxs)) != len(deleted_item_idxs):
        raise InvalidRequest(f"duplicate deleted item indices {deleted_item_idxs}")


def edit_quiz(
    generator,
    webpage: models.Webpage,
    quiz: models.Quiz,
    deleted_item_idxs: List[int],
    extra_instructions: Optional[str] = "",
) -> QuizInsert:
    items = store.load_items(quiz.items)
    _check_indices(deleted_item_idxs, len(items))

    removed_set = set(deleted_item_idxs)
    kept = [item for i, item in enumerate(items) if i not in removed_set]
    removed = [items[i] for i in deleted_item_idxs]
    if len(kept) >= ITEMS_PER_QUIZ:
        raise NothingToDo(f"quiz {quiz.id}: {len(kept)} items kept, nothing to regenerate")

    all_deleted = store.load_items(quiz.deleted_items) + removed
    needed = ITEMS_PER_QUIZ - len(kept)

    context = prompts.build_context(webpage.title, webpage.text)
    task = prompts.build_revise_task(
        needed,
        [item.stem for item in kept],
        [item.stem for item in all_deleted],
        extra_instructions or "",
    )
    raw = parse_json(generator.generate(context, task))
    new_items = parse_items_payload(raw, needed)

    return QuizInsert(
        title=quiz.title,
        slug=slugs.reallocate(quiz.slug),
        items=kept + new_items,
        deleted_items=all_deleted,
        source_id=quiz.source_id,
        parent_id=quiz.id,
    )


def get_or_create_quiz(db: Session, generator, webpage: models.Webpage) -> models.Quiz:
    existing = store.latest_quiz_for_source(db, webpage.id)
    if existing:
        logger.info("Reusing quiz %s for webpage %s", existing.slug, webpage.id)
        return existing

    row = store.insert_quiz(db, create_quiz(generator, webpage))
    logger.info("Created quiz %s for webpage %s", row.slug, webpage.id)
    return row


def revise_quiz(db: Session, generator, quiz_id, deleted_item_idxs, extra_instructions="") -> models.Quiz:
    quiz = store.get_quiz(db, quiz_id)
    row = store.insert_quiz(db, edit_quiz(generator, quiz.source, quiz, deleted_item_idxs, extra_instructions))
    logger.info("Revised quiz %s -> %s (replaced %d items)", quiz.slug, row.slug, len(deleted_item_idxs))
    return row


def toggle_publish(db: Session, quiz_id) -> Optional[datetime]:
    quiz = db.query(models.Quiz).filter(models.Quiz.id == quiz_id).with_for_update().first()
    if quiz is None:
        raise NotFound(f"quiz {quiz_id} not found")

    quiz.published_at = None if quiz.published_at else datetime.now(timezone.utc)
    db.commit()
    logger.info("Quiz %s %s", quiz.slug, "published" if quiz.published_at else "unpublished")
    return quiz.published_at
