# utils.py
import random
from typing import List

from pydantic import ValidationError

from errors import GenerationParseFailure
from schemas import GeneratedQuiz, QuizItem, ITEMS_PER_QUIZ


def _check_count(items: list, n: int) -> None:
    if len(items) != n:
        raise GenerationParseFailure(f"expected exactly {n} items, got {len(items)}")


def parse_quiz_payload(raw, n: int = ITEMS_PER_QUIZ) -> GeneratedQuiz:
    """Validate a decoded create-quiz response: {title, slug?, items[n]}."""
    if not isinstance(raw, dict):
        raise GenerationParseFailure(f"expected a JSON object, got {type(raw).__name__}")
    try:
        quiz = GeneratedQuiz.model_validate(raw)
    except ValidationError as e:
        raise GenerationParseFailure(f"malformed quiz: {e}")
    _check_count(quiz.items, n)
    return quiz


def parse_items_payload(raw, n: int) -> List[QuizItem]:
    """Validate a decoded revise response: a JSON array of n items (or {"items": [...]})."""
    if isinstance(raw, dict) and isinstance(raw.get("items"), list):
        raw = raw["items"]
    if not isinstance(raw, list):
        raise GenerationParseFailure(f"expected a JSON array, got {type(raw).__name__}")
    try:
        items = [QuizItem.model_validate(x) for x in raw]
    except ValidationError as e:
        raise GenerationParseFailure(f"malformed item: {e}")
    _check_count(items, n)
    return items


def shuffle_options(items: List[QuizItem], seed) -> List[QuizItem]:
    """
    Returns copies of `items` with each item's options permuted and
    correct_option remapped to follow the correct answer. Deterministic for a
    given seed; the input list and items are left untouched.
    """
    rng = random.Random(seed)
    out = []
    for item in items:
        order = list(range(len(item.options)))
        rng.shuffle(order)
        out.append(item.model_copy(update={
            "options": [item.options[i] for i in order],
            "correct_option": order.index(item.correct_option),
        }))
    return out
