"""Webhook action handler posting the event payload over HTTP."""

from __future__ import annotations

from typing import Any

import aiohttp
import structlog

from ringrules.core.domain.actions import WebhookAction
from ringrules.core.domain.errors import ActionValidationError, ProviderError
from ringrules.core.interfaces.action_handler import ActionContext

logger = structlog.get_logger(__name__)

_ALLOWED_METHODS = frozenset({"POST", "PUT", "PATCH"})


class WebhookHandler:
    """Send the triggering event's payload as JSON to a tenant URL.

    Responses with status >= 400 raise ``ProviderError``; an aiohttp
    timeout surfaces as ``asyncio.TimeoutError`` and becomes a TIMEOUT
    outcome in the dispatcher.
    """

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def execute(self, action: WebhookAction, context: ActionContext) -> dict[str, Any]:
        method = (action.method or "POST").upper()
        if method not in _ALLOWED_METHODS:
            raise ActionValidationError(
                f"Unsupported webhook method: {method}",
                action_type=action.action_type.value,
            )
        if not action.url.startswith(("http://", "https://")):
            raise ActionValidationError(
                f"Webhook URL must be http(s): {action.url}",
                action_type=action.action_type.value,
            )

        headers = {"Content-Type": "application/json"}
        headers.update({str(k): str(v) for k, v in action.headers.items()})

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.request(
                    method, action.url, json=context.payload, headers=headers
                ) as response:
                    status = response.status
        except aiohttp.ClientError as exc:
            raise ProviderError(
                f"Webhook request failed: {exc}",
                provider="webhook",
                details={"url": action.url},
            ) from exc

        logger.info(
            "action_handler.webhook_sent",
            tenant_id=context.tenant_id,
            rule_id=context.rule_id,
            url=action.url,
            status=status,
        )
        if status >= 400:
            raise ProviderError(
                f"Webhook returned HTTP {status}",
                provider="webhook",
                details={"url": action.url, "status": status},
            )
        return {"sent": True, "status": status}
