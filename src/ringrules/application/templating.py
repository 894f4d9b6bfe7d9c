"""``{{field}}`` substitution for action fields.

Tokens are dot paths into the event payload. A token that does not
resolve is left verbatim so rule authors can spot malformed templates in
the messages that go out.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any

from ringrules.application.condition_evaluator import MISSING, resolve_path
from ringrules.core.domain.actions import BaseAction

_TOKEN = re.compile(r"\{\{\s*(\w+(?:\.\w+)*)\s*\}\}")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_template(template: str, payload: dict[str, Any]) -> str:
    """Replace every resolvable ``{{path}}`` token in ``template``."""

    def _replace(match: re.Match[str]) -> str:
        value = resolve_path(payload, match.group(1))
        if value is MISSING or value is None:
            return match.group(0)
        return _stringify(value)

    return _TOKEN.sub(_replace, template)


def _render_value(value: Any, payload: dict[str, Any]) -> Any:
    if isinstance(value, str):
        return render_template(value, payload)
    if isinstance(value, dict):
        return {key: _render_value(item, payload) for key, item in value.items()}
    if isinstance(value, list):
        return [_render_value(item, payload) for item in value]
    return value


def render_action(action: BaseAction, payload: dict[str, Any]) -> BaseAction:
    """Return a copy of ``action`` with all string fields substituted."""
    changes = {
        f.name: _render_value(getattr(action, f.name), payload)
        for f in dataclasses.fields(action)
    }
    return dataclasses.replace(action, **changes)
