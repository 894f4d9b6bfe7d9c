"""Test configuration and shared fixtures."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from ringrules.application.runtime_builder import AutomationRuntime, build_runtime
from ringrules.core.domain.actions import parse_action
from ringrules.core.domain.config_schema import EngineConfigSchema
from ringrules.core.domain.rule import AutomationRule, Condition
from ringrules.infrastructure.integrations.in_memory_outbox import InMemoryOutbox

TENANT = "acme"


@pytest.fixture
def tenant_id() -> str:
    return TENANT


@pytest.fixture
def make_rule() -> Callable[..., AutomationRule]:
    """Build rules from wire-shaped conditions/actions."""

    def _make(
        *,
        tenant_id: str = TENANT,
        name: str = "rule",
        trigger_event: str = "lead:created",
        conditions: list[dict[str, Any]] | None = None,
        actions: list[dict[str, Any]] | None = None,
        **overrides: Any,
    ) -> AutomationRule:
        if actions is None:
            actions = [{"type": "notify", "message": "New lead {{name}}"}]
        return AutomationRule(
            tenant_id=tenant_id,
            name=name,
            trigger_event=trigger_event,
            conditions=tuple(Condition.from_dict(c) for c in conditions or []),
            actions=tuple(parse_action(a) for a in actions),
            **overrides,
        )

    return _make


@pytest.fixture
def outbox() -> InMemoryOutbox:
    return InMemoryOutbox(agents=["agent-1", "agent-2"])


@pytest.fixture
def engine_config(tmp_path) -> EngineConfigSchema:
    return EngineConfigSchema(work_dir=str(tmp_path / "store"))


@pytest.fixture
def runtime(engine_config, outbox) -> AutomationRuntime:
    return build_runtime(engine_config, integrations=outbox)
