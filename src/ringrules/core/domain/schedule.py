"""Schedule domain models for the interval job scheduler.

Jobs are named, fixed-interval timers. When one fires it publishes a
``scheduler:tick`` event per tenant; rules decide what a tick means by
matching on ``jobName``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

_SECOND_MS = 1000
_MINUTE_MS = 60 * _SECOND_MS
_HOUR_MS = 60 * _MINUTE_MS
_DAY_MS = 24 * _HOUR_MS


class JobState(str, Enum):
    """Run state of a scheduler job."""

    IDLE = "IDLE"
    RUNNING = "RUNNING"


class RunResult(str, Enum):
    """Answer to a manual "run now" request."""

    ACCEPTED = "accepted"
    ALREADY_RUNNING = "already_running"


def _fmt_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def format_interval(interval_ms: int) -> str:
    """Render an interval the way the management UI shows it.

    Examples: ``30000 -> "30 seconds"``, ``300000 -> "5 minutes"``,
    ``86400000 -> "1 days"``.
    """
    if interval_ms < _MINUTE_MS:
        return f"{_fmt_number(interval_ms / _SECOND_MS)} seconds"
    if interval_ms < _HOUR_MS:
        return f"{_fmt_number(interval_ms / _MINUTE_MS)} minutes"
    if interval_ms < _DAY_MS:
        return f"{_fmt_number(interval_ms / _HOUR_MS)} hours"
    return f"{_fmt_number(interval_ms / _DAY_MS)} days"


@dataclass(frozen=True)
class SchedulerJob:
    """A named interval job definition.

    Attributes:
        name: Stable identifier, also the ``jobName`` carried by tick events.
        interval_ms: Time between ticks.
        description: What rules bound to this job are expected to do.
    """

    name: str
    interval_ms: int
    description: str = ""

    @property
    def interval_human(self) -> str:
        return format_interval(self.interval_ms)


@dataclass(frozen=True)
class JobStatus:
    """Snapshot of a job's definition plus runtime state."""

    job: SchedulerJob
    state: JobState
    last_run_at: datetime | None = None
    last_finished_at: datetime | None = None
    run_count: int = 0
    skipped_count: int = 0
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.job.name,
            "interval": self.job.interval_ms,
            "intervalHuman": self.job.interval_human,
            "description": self.job.description,
            "state": self.state.value,
            "lastRunAt": self.last_run_at.isoformat() if self.last_run_at else None,
            "lastFinishedAt": (
                self.last_finished_at.isoformat() if self.last_finished_at else None
            ),
            "runCount": self.run_count,
            "skippedCount": self.skipped_count,
            "lastError": self.last_error,
        }


BUILTIN_JOBS: tuple[SchedulerJob, ...] = (
    SchedulerJob("appointmentReminders", _MINUTE_MS, "Remind callers of upcoming appointments"),
    SchedulerJob("sequenceProcessor", 5 * _MINUTE_MS, "Advance drip sequence enrollments"),
    SchedulerJob("staleLeadFollowup", 30 * _MINUTE_MS, "Follow up on leads untouched for days"),
    SchedulerJob("usageAlerts", _HOUR_MS, "Check usage thresholds"),
    SchedulerJob("trialAlerts", _HOUR_MS, "Check trial expirations"),
    SchedulerJob("noShowDetection", _HOUR_MS, "Flag missed appointments"),
    SchedulerJob("feedbackProcessor", 4 * _HOUR_MS, "Process the AI feedback queue"),
    SchedulerJob("leadScoring", 6 * _HOUR_MS, "Re-score open leads"),
    SchedulerJob("dataCleanup", _DAY_MS, "Apply retention cleanup"),
    SchedulerJob("analyticsReports", _DAY_MS, "Generate daily reports"),
)
