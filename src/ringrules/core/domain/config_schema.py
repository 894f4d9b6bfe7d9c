"""
Configuration Schema Validation

Pydantic models for the engine configuration file. Unknown keys are
rejected so that typos surface at startup instead of silently falling
back to defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ringrules.core.domain.errors import ConfigError
from ringrules.core.domain.schedule import BUILTIN_JOBS

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfigSchema(BaseModel):
    """Schema for the ``logging`` section."""

    model_config = ConfigDict(extra="forbid")

    level: str = Field("INFO", description="Root log level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(_LOG_LEVELS)}")
        return upper


class DispatcherConfigSchema(BaseModel):
    """Schema for the ``dispatcher`` section."""

    model_config = ConfigDict(extra="forbid")

    action_timeout_seconds: float = Field(
        5.0,
        gt=0,
        le=60,
        description="Ceiling for a single action handler call",
    )


class SchedulerConfigSchema(BaseModel):
    """Schema for the ``scheduler`` section."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = Field(False, description="Start interval timers with the API process")
    intervals: dict[str, int] = Field(
        default_factory=dict,
        description="Job name -> interval in milliseconds override",
    )

    @field_validator("intervals")
    @classmethod
    def validate_intervals(cls, value: dict[str, int]) -> dict[str, int]:
        known = {job.name for job in BUILTIN_JOBS}
        unknown = sorted(set(value) - known)
        if unknown:
            raise ValueError(f"unknown scheduler jobs: {', '.join(unknown)}")
        for name, interval in value.items():
            if interval < 1000:
                raise ValueError(f"interval for {name} must be at least 1000 ms")
        return value


class EngineConfigSchema(BaseModel):
    """Top-level configuration for the automation engine."""

    model_config = ConfigDict(extra="forbid")

    work_dir: str = Field(".ringrules", min_length=1, description="Storage root")
    logging: LoggingConfigSchema = Field(default_factory=LoggingConfigSchema)
    dispatcher: DispatcherConfigSchema = Field(default_factory=DispatcherConfigSchema)
    scheduler: SchedulerConfigSchema = Field(default_factory=SchedulerConfigSchema)


def validate_engine_config(
    data: dict[str, Any], source: Optional[Path] = None
) -> EngineConfigSchema:
    """Validate raw config data, raising ``ConfigError`` with context.

    Args:
        data: Parsed YAML mapping.
        source: File the data came from, included in the error details.
    """
    try:
        return EngineConfigSchema.model_validate(data)
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        where = f" in {source}" if source else ""
        raise ConfigError(
            f"Invalid configuration{where}",
            details={"errors": errors, "source": str(source) if source else None},
        ) from exc
