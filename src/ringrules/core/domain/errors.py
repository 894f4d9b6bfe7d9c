"""Domain-specific exception types for ringrules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class RingrulesError(Exception):
    """Base exception for ringrules domain errors."""

    message: str
    code: str = "ringrules_error"
    details: Dict[str, Any] | None = None
    status_code: int | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.details is None:
            self.details = {}


class CatalogError(RingrulesError):
    """Unknown event type or action type at a pipeline boundary."""

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        identifier: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if kind:
            details.setdefault("kind", kind)
        if identifier is not None:
            details.setdefault("identifier", identifier)
        super().__init__(message=message, code="catalog_error", details=details)


class ValidationError(RingrulesError):
    """Error raised for malformed input (rules, tenants, config values)."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="validation_error", details=details)


class NotFoundError(RingrulesError):
    """Error raised when a rule, template or job does not exist."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="not_found", details=details)


class ConflictError(RingrulesError):
    """Error raised when an operation collides with work already in progress."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "conflict",
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class PersistenceError(RingrulesError):
    """Error raised when the rule store or execution log cannot be accessed."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="persistence_error", details=details)


class ConfigError(RingrulesError):
    """Error raised for configuration failures."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="config_error", details=details)


class ActionValidationError(RingrulesError):
    """Raised by an action handler when its inputs are unusable."""

    def __init__(
        self,
        message: str,
        *,
        action_type: str | None = None,
        missing_fields: list[str] | None = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if action_type:
            details["action_type"] = action_type
        if missing_fields:
            details["missing_fields"] = list(missing_fields)
        self.action_type = action_type
        self.missing_fields = list(missing_fields or [])
        super().__init__(message=message, code="action_validation_error", details=details)


class ProviderError(RingrulesError):
    """Raised when an external provider (SMS, email, CRM, webhook) fails."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if provider:
            details.setdefault("provider", provider)
        self.provider = provider
        super().__init__(message=message, code="provider_error", details=details)
