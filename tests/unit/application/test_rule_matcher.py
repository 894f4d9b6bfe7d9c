"""Tests for RuleMatcher."""

from datetime import datetime, timedelta, timezone

import pytest

from ringrules.application.rule_matcher import RuleMatcher
from ringrules.core.domain.event import Event
from ringrules.infrastructure.persistence.file_rule_store import FileRuleStore


@pytest.fixture
def store(tmp_path) -> FileRuleStore:
    return FileRuleStore(str(tmp_path))


@pytest.fixture
def matcher(store) -> RuleMatcher:
    return RuleMatcher(store)


def _event(payload=None, event_type="lead:created", tenant_id="acme") -> Event:
    return Event(tenant_id=tenant_id, type=event_type, payload=payload or {})


async def test_rule_without_conditions_matches_every_event(store, matcher, make_rule) -> None:
    rule = await store.create(make_rule())

    assert [r.id for r in await matcher.match("acme", _event())] == [rule.id]
    assert [r.id for r in await matcher.match("acme", _event({"x": 1}))] == [rule.id]


async def test_disabled_rule_never_matches(store, matcher, make_rule) -> None:
    await store.create(make_rule(enabled=False))
    assert await matcher.match("acme", _event()) == []


async def test_rule_without_actions_never_matches(store, matcher, make_rule) -> None:
    await store.create(make_rule(actions=[]))
    assert await matcher.match("acme", _event()) == []


async def test_other_trigger_event_ignored(store, matcher, make_rule) -> None:
    await store.create(make_rule(trigger_event="call:missed"))
    assert await matcher.match("acme", _event()) == []


async def test_conditions_filter(store, matcher, make_rule) -> None:
    await store.create(
        make_rule(conditions=[{"field": "temperature", "operator": "equals", "value": "HOT"}])
    )
    assert await matcher.match("acme", _event({"temperature": "COLD"})) == []
    assert len(await matcher.match("acme", _event({"temperature": "HOT"}))) == 1


async def test_tenants_are_isolated(store, matcher, make_rule) -> None:
    await store.create(make_rule(tenant_id="other"))
    assert await matcher.match("acme", _event()) == []


async def test_order_is_priority_then_age(store, matcher, make_rule) -> None:
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    newer_low = await store.create(make_rule(name="low", priority=5, created_at=base))
    older_high = await store.create(
        make_rule(name="high-old", priority=10, created_at=base - timedelta(days=1))
    )
    newer_high = await store.create(make_rule(name="high-new", priority=10, created_at=base))

    matched = await matcher.match("acme", _event())

    assert [r.id for r in matched] == [older_high.id, newer_high.id, newer_low.id]
