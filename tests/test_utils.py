import pytest

from conftest import item_dict, items_json
from errors import GenerationParseFailure
from schemas import QuizItem
from utils import parse_items_payload, parse_quiz_payload, shuffle_options


class TestParseQuizPayload:

    def test_valid(self):
        quiz = parse_quiz_payload({"title": "T", "slug": "t", "items": items_json(10)})
        assert quiz.title == "T"
        assert len(quiz.items) == 10
        assert quiz.items[1].correct_option == 1

    def test_slug_is_optional(self):
        quiz = parse_quiz_payload({"title": "T", "items": items_json(10)})
        assert quiz.slug is None

    @pytest.mark.parametrize("n", [9, 11])
    def test_wrong_item_count(self, n):
        with pytest.raises(GenerationParseFailure):
            parse_quiz_payload({"title": "T", "items": items_json(n)})

    def test_not_an_object(self):
        with pytest.raises(GenerationParseFailure):
            parse_quiz_payload(items_json(10))

    def test_three_options_rejected(self):
        items = items_json(10)
        items[4]["options"] = items[4]["options"][:3]
        with pytest.raises(GenerationParseFailure):
            parse_quiz_payload({"title": "T", "items": items})

    def test_correct_option_out_of_range(self):
        items = items_json(10)
        items[0]["correctOption"] = 4
        with pytest.raises(GenerationParseFailure):
            parse_quiz_payload({"title": "T", "items": items})

    def test_missing_snippet(self):
        items = items_json(10)
        del items[2]["sourceSnippet"]
        with pytest.raises(GenerationParseFailure):
            parse_quiz_payload({"title": "T", "items": items})


class TestParseItemsPayload:

    def test_array(self):
        assert len(parse_items_payload(items_json(2), 2)) == 2

    def test_object_with_items(self):
        assert len(parse_items_payload({"items": items_json(3)}, 3)) == 3

    def test_count_mismatch(self):
        with pytest.raises(GenerationParseFailure):
            parse_items_payload(items_json(3), 2)

    def test_scalar(self):
        with pytest.raises(GenerationParseFailure):
            parse_items_payload("nope", 1)


class TestShuffleOptions:

    def _items(self):
        return [QuizItem.model_validate(item_dict(f"Q{i}?", correct=i % 4)) for i in range(10)]

    def test_deterministic_for_seed(self):
        items = self._items()
        assert shuffle_options(items, 42) == shuffle_options(items, 42)

    def test_correct_answer_follows_option(self):
        items = self._items()
        for before, after in zip(items, shuffle_options(items, 7)):
            assert sorted(after.options) == sorted(before.options)
            assert after.options[after.correct_option] == before.options[before.correct_option]

    def test_does_not_mutate_input(self):
        items = self._items()
        snapshot = [item.model_copy(deep=True) for item in items]
        shuffle_options(items, 3)
        assert items == snapshot
