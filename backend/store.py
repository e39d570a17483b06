# store.py
"""Quiz store: inserts and reads of quiz revisions."""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

import config
import models
import slugs
from db import dialect_insert
from errors import ConflictFailure, NotFound, StorageFailure
from schemas import QuizInsert, QuizItem

logger = logging.getLogger(__name__)

MAX_CHAIN_LENGTH = 10000


def _dump_items(items):
    return [item.model_dump(by_alias=True) for item in items]


def load_items(raw) -> list:
    return [QuizItem.model_validate(x) for x in (raw or [])]


def _slug_taken(db: Session, slug: str) -> bool:
    return db.execute(select(models.Quiz.id).where(models.Quiz.slug == slug)).first() is not None


def get_quiz(db: Session, quiz_id) -> models.Quiz:
    quiz = db.get(models.Quiz, quiz_id)
    if quiz is None:
        raise NotFound(f"quiz {quiz_id} not found")
    return quiz


def get_quiz_by_slug(db: Session, slug: str) -> models.Quiz:
    quiz = db.execute(
        select(models.Quiz).options(joinedload(models.Quiz.source)).where(models.Quiz.slug == slug)
    ).scalar_one_or_none()
    if quiz is None:
        raise NotFound(f"quiz slug {slug!r} not found")
    return quiz


def get_root_quiz(db: Session, source_id):
    return db.execute(
        select(models.Quiz).where(models.Quiz.source_id == source_id, models.Quiz.parent_id.is_(None))
    ).scalar_one_or_none()


def latest_quiz_for_source(db: Session, source_id):
    return db.execute(
        select(models.Quiz)
        .where(models.Quiz.source_id == source_id)
        .order_by(models.Quiz.created_at.desc())
        .limit(1)
    ).scalar_one_or_none()


def list_published(db: Session):
    return db.execute(
        select(models.Quiz)
        .options(joinedload(models.Quiz.source))
        .where(models.Quiz.published_at.is_not(None))
        .order_by(models.Quiz.created_at.desc())
    ).scalars().all()


def insert_quiz(db: Session, quiz: QuizInsert) -> models.Quiz:
    """
    Inserts a revision and returns the stored row.

    A root revision (parent_id None) is inserted only if its source has no
    root yet; otherwise the existing root is returned. A slug collision
    re-allocates the suffix and retries up to SLUG_INSERT_ATTEMPTS times.
    """
    slug = quiz.slug
    for attempt in range(1, config.SLUG_INSERT_ATTEMPTS + 1):
        quiz_id = uuid.uuid4()
        stmt = dialect_insert(db, models.Quiz).values(
            id=quiz_id,
            title=quiz.title,
            slug=slug,
            items=_dump_items(quiz.items),
            deleted_items=_dump_items(quiz.deleted_items),
            source_id=quiz.source_id,
            parent_id=quiz.parent_id,
        )
        if quiz.parent_id is None:
            stmt = stmt.on_conflict_do_nothing(
                index_elements=["source_id"],
                index_where=models.Quiz.parent_id.is_(None),
            )
        try:
            db.execute(stmt)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if not _slug_taken(db, slug):
                raise ConflictFailure(f"quiz insert violated a constraint: {e}") from e
            logger.warning("Slug %s taken (attempt %d/%d), re-allocating", slug, attempt, config.SLUG_INSERT_ATTEMPTS)
            slug = slugs.reallocate(slug)
            continue

        row = db.get(models.Quiz, quiz_id)
        if row is None and quiz.parent_id is None:
            row = get_root_quiz(db, quiz.source_id)
            logger.info("Source %s already had root quiz %s; discarding generated one", quiz.source_id, row and row.id)
        if row is None:
            raise StorageFailure(f"quiz {quiz_id} missing after insert")
        return row

    raise ConflictFailure(f"no free slug after {config.SLUG_INSERT_ATTEMPTS} attempts (last {slug})")


def revision_chain(db: Session, quiz: models.Quiz) -> list:
    """Walks parent pointers from `quiz` to its root, newest first."""
    chain = [quiz]
    seen = {quiz.id}
    while chain[-1].parent_id is not None:
        if len(chain) >= MAX_CHAIN_LENGTH:
            raise StorageFailure(f"revision chain from {quiz.id} exceeds {MAX_CHAIN_LENGTH}")
        parent = db.get(models.Quiz, chain[-1].parent_id)
        if parent is None:
            raise StorageFailure(f"quiz {chain[-1].id} points at missing parent {chain[-1].parent_id}")
        if parent.id in seen:
            raise StorageFailure(f"revision chain from {quiz.id} has a cycle at {parent.id}")
        seen.add(parent.id)
        chain.append(parent)
    return chain


def quiz_with_source(quiz: models.Quiz) -> dict:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "slug": quiz.slug,
        "items": load_items(quiz.items),
        "deleted_items": load_items(quiz.deleted_items),
        "source_id": quiz.source_id,
        "parent_id": quiz.parent_id,
        "created_at": quiz.created_at,
        "published_at": quiz.published_at,
        "source": {
            "url": quiz.source.url,
            "title": quiz.source.title,
            "favicon": quiz.source.favicon,
        },
    }
