"""FastAPI dependency injection providers.

Centralizes dependency creation for API routes. The runtime is created
lazily once per process and can be swapped in tests through
``app.dependency_overrides[get_runtime]``.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Header, status

from ringrules.api.errors import http_exception
from ringrules.application.config_loader import load_config
from ringrules.application.runtime_builder import AutomationRuntime, build_runtime
from ringrules.core.domain.errors import ValidationError
from ringrules.core.domain.tenant import validate_tenant_id

TENANT_HEADER = "X-Tenant-ID"


@lru_cache(maxsize=1)
def get_runtime() -> AutomationRuntime:
    """Provide the shared automation runtime.

    Uses ``lru_cache`` so the runtime is created once and reused across
    requests (testable via ``get_runtime.cache_clear()``).
    """
    return build_runtime(load_config())


def get_tenant_id(
    x_tenant_id: str | None = Header(default=None, alias=TENANT_HEADER),
) -> str:
    """Tenant from the ``X-Tenant-ID`` header set by the auth gateway."""
    if not x_tenant_id:
        raise http_exception(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="missing_tenant",
            message=f"Missing {TENANT_HEADER} header",
        )
    try:
        return validate_tenant_id(x_tenant_id)
    except ValidationError as exc:
        raise http_exception(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=exc.code,
            message=exc.message,
            details=exc.details or None,
        ) from exc

