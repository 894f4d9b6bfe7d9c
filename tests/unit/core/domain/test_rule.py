"""Tests for AutomationRule and Condition."""

from datetime import timedelta

import pytest

from ringrules.core.domain.errors import ValidationError
from ringrules.core.domain.rule import AutomationRule, Condition


def test_priority_bounds(make_rule) -> None:
    make_rule(priority=0)
    make_rule(priority=100)
    with pytest.raises(ValidationError):
        make_rule(priority=101)
    with pytest.raises(ValidationError):
        make_rule(priority=-1)


@pytest.mark.parametrize(
    "overrides",
    [{"enabled": None}, {"enabled": "yes"}, {"priority": None}, {"priority": True}],
)
def test_field_types_checked(make_rule, overrides) -> None:
    with pytest.raises(ValidationError):
        make_rule(**overrides)


def test_rule_without_actions_is_inactive(make_rule) -> None:
    assert make_rule(actions=[]).is_active is False
    assert make_rule().is_active is True
    assert make_rule(enabled=False).is_active is False


def test_sort_key_orders_priority_then_age(make_rule) -> None:
    older = make_rule(name="older", priority=5)
    newer = make_rule(
        name="newer", priority=5, created_at=older.created_at + timedelta(seconds=1)
    )
    urgent = make_rule(name="urgent", priority=10)
    ordered = sorted([newer, urgent, older], key=AutomationRule.sort_key)
    assert [r.name for r in ordered] == ["urgent", "older", "newer"]


def test_with_changes_refreshes_updated_at(make_rule) -> None:
    rule = make_rule()
    changed = rule.with_changes(name="renamed")
    assert changed.name == "renamed"
    assert changed.id == rule.id
    assert changed.updated_at >= rule.updated_at


def test_dict_round_trip(make_rule) -> None:
    rule = make_rule(
        conditions=[{"field": "lead.score", "operator": "greaterThan", "value": 70}],
        actions=[{"type": "sendSms", "phoneField": "phone", "message": "Hi"}],
        description="hot leads",
        priority=40,
    )
    data = rule.to_dict()
    assert data["triggerEvent"] == "lead:created"
    assert data["tenantId"] == "acme"
    assert AutomationRule.from_dict(data) == rule


def test_condition_keeps_unknown_operator() -> None:
    condition = Condition.from_dict({"field": "x", "operator": "matches", "value": 1})
    assert condition.operator == "matches"
    assert condition.is_known_operator is False
