"""Tests for condition evaluation."""

import pytest

from ringrules.application.condition_evaluator import (
    MISSING,
    evaluate,
    evaluate_condition,
    resolve_path,
)
from ringrules.core.domain.rule import Condition


def _cond(field: str, operator: str, value=None) -> Condition:
    return Condition(field=field, operator=operator, value=value)


class TestResolvePath:
    """Tests for dot-path resolution."""

    def test_nested(self) -> None:
        assert resolve_path({"lead": {"score": 80}}, "lead.score") == 80

    def test_missing_segment(self) -> None:
        assert resolve_path({"lead": {}}, "lead.score") is MISSING

    def test_walk_through_scalar(self) -> None:
        assert resolve_path({"lead": "x"}, "lead.score") is MISSING


class TestOperators:
    """Tests for each operator."""

    def test_equals_string_and_number(self) -> None:
        assert evaluate_condition(_cond("status", "equals", "NEW"), {"status": "NEW"})
        assert evaluate_condition(_cond("score", "equals", "80"), {"score": 80})
        assert evaluate_condition(_cond("score", "equals", 80), {"score": 80.0})
        assert not evaluate_condition(_cond("status", "equals", "new"), {"status": "NEW"})

    def test_equals_boolean(self) -> None:
        assert evaluate_condition(_cond("vip", "equals", "true"), {"vip": True})
        assert not evaluate_condition(_cond("vip", "equals", True), {"vip": False})

    def test_not_equals(self) -> None:
        assert evaluate_condition(_cond("status", "notEquals", "LOST"), {"status": "NEW"})
        assert not evaluate_condition(_cond("status", "notEquals", "NEW"), {"status": "NEW"})

    def test_contains_is_case_insensitive(self) -> None:
        payload = {"summary": "Caller wants a QUOTE for roofing"}
        assert evaluate_condition(_cond("summary", "contains", "quote"), payload)
        assert not evaluate_condition(_cond("summary", "contains", "plumbing"), payload)

    def test_greater_and_less_than(self) -> None:
        payload = {"lead": {"score": "75"}}
        assert evaluate_condition(_cond("lead.score", "greaterThan", 70), payload)
        assert not evaluate_condition(_cond("lead.score", "greaterThan", 75), payload)
        assert evaluate_condition(_cond("lead.score", "lessThan", "80"), payload)

    def test_comparison_with_non_numeric_is_false(self) -> None:
        assert not evaluate_condition(_cond("name", "greaterThan", 3), {"name": "Jane"})

    def test_in_with_list_and_delimited_string(self) -> None:
        payload = {"temperature": "HOT"}
        assert evaluate_condition(_cond("temperature", "in", ["WARM", "HOT"]), payload)
        assert evaluate_condition(_cond("temperature", "in", "WARM, HOT"), payload)
        assert not evaluate_condition(_cond("temperature", "in", "COLD"), payload)

    @pytest.mark.parametrize("value", [0, False, ""])
    def test_exists_true_for_falsy_values(self, value) -> None:
        assert evaluate_condition(_cond("field", "exists"), {"field": value})


class TestMissingFieldPolicy:
    """A missing (or null) field matches only notEquals."""

    @pytest.mark.parametrize(
        "operator", ["equals", "contains", "greaterThan", "lessThan", "exists", "in"]
    )
    def test_missing_field_does_not_match(self, operator: str) -> None:
        assert not evaluate_condition(_cond("absent", operator, "x"), {})

    def test_not_equals_on_missing_field_matches(self) -> None:
        assert evaluate_condition(_cond("absent", "notEquals", "x"), {})

    def test_null_counts_as_missing(self) -> None:
        assert not evaluate_condition(_cond("phone", "exists"), {"phone": None})
        assert evaluate_condition(_cond("phone", "notEquals", "x"), {"phone": None})


class TestAnomalies:
    """Malformed conditions fail closed."""

    def test_unknown_operator(self) -> None:
        assert not evaluate_condition(_cond("status", "matches", ".*"), {"status": "NEW"})

    def test_blank_field(self) -> None:
        assert not evaluate_condition(_cond("  ", "exists"), {"": 1})


def test_evaluate_uses_and_semantics() -> None:
    conditions = [
        _cond("status", "equals", "NEW"),
        _cond("score", "greaterThan", 50),
    ]
    assert evaluate(conditions, {"status": "NEW", "score": 90})
    assert not evaluate(conditions, {"status": "NEW", "score": 10})


@pytest.mark.parametrize("payload", [{}, {"anything": 1}, {"nested": {"deep": [1, 2]}}])
def test_empty_conditions_always_match(payload) -> None:
    assert evaluate([], payload)
