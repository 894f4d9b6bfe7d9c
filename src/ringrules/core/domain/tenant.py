"""Tenant identifier rules."""

from __future__ import annotations

import re

from ringrules.core.domain.errors import ValidationError

_TENANT_ID = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def validate_tenant_id(tenant_id: str | None) -> str:
    """Return ``tenant_id`` if usable as a storage key, else raise ``ValidationError``."""
    if not tenant_id or not _TENANT_ID.match(tenant_id):
        raise ValidationError(
            "Invalid tenant id; use 1-128 letters, digits, '-' or '_'",
            details={"tenant_id": tenant_id},
        )
    return tenant_id
