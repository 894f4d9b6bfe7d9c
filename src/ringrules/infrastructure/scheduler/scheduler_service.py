"""Asyncio-based interval scheduler feeding tick events into the engine.

Each job runs its own asyncio task that sleeps for the job's interval and
then fires. A fire starts a background run which publishes one
``scheduler:tick`` event per tenant and waits for the engine to process
each of them. A job has at most one active run: ticks that arrive while a
run is still in progress are skipped and counted, never queued.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING

import structlog

from ringrules.core.domain.errors import NotFoundError
from ringrules.core.domain.event import EventType
from ringrules.core.domain.schedule import (
    BUILTIN_JOBS,
    JobState,
    JobStatus,
    RunResult,
    SchedulerJob,
)
from ringrules.core.utils.time import utc_now

if TYPE_CHECKING:
    from ringrules.application.automation_engine import AutomationEngine
    from ringrules.core.interfaces.rule_store import RuleStoreProtocol

logger = structlog.get_logger(__name__)


@dataclass
class _JobRuntime:
    state: JobState = JobState.IDLE
    last_run_at: datetime | None = None
    last_finished_at: datetime | None = None
    run_count: int = 0
    skipped_count: int = 0
    last_error: str | None = None


class SchedulerService:
    """Interval scheduler with an IDLE/RUNNING guard per job."""

    def __init__(
        self,
        engine: AutomationEngine,
        rule_store: RuleStoreProtocol,
        jobs: tuple[SchedulerJob, ...] = BUILTIN_JOBS,
        intervals: dict[str, int] | None = None,
    ) -> None:
        overrides = intervals or {}
        self._engine = engine
        self._rule_store = rule_store
        self._jobs: dict[str, SchedulerJob] = {
            job.name: replace(job, interval_ms=overrides.get(job.name, job.interval_ms))
            for job in jobs
        }
        self._runtime: dict[str, _JobRuntime] = {name: _JobRuntime() for name in self._jobs}
        self._loops: dict[str, asyncio.Task[None]] = {}
        self._runs: dict[str, asyncio.Task[None]] = {}
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the interval loops are active."""
        return self._running

    async def start(self) -> None:
        """Start one interval loop per job."""
        if self._running:
            return
        self._running = True
        for job in self._jobs.values():
            self._loops[job.name] = asyncio.create_task(
                self._run_interval(job), name=f"scheduler-{job.name}"
            )
        logger.info("scheduler.started", job_count=len(self._jobs))

    async def stop(self) -> None:
        """Cancel the interval loops and wait for active runs to finish."""
        self._running = False
        for task in self._loops.values():
            task.cancel()
        if self._loops:
            await asyncio.gather(*self._loops.values(), return_exceptions=True)
        self._loops.clear()
        await self.join()
        logger.info("scheduler.stopped")

    async def join(self) -> None:
        """Wait until no job has an active run."""
        while self._runs:
            await asyncio.gather(*list(self._runs.values()), return_exceptions=True)

    def jobs(self) -> list[SchedulerJob]:
        return list(self._jobs.values())

    def get_status(self, name: str) -> JobStatus:
        job = self._require(name)
        runtime = self._runtime[name]
        return JobStatus(
            job=job,
            state=runtime.state,
            last_run_at=runtime.last_run_at,
            last_finished_at=runtime.last_finished_at,
            run_count=runtime.run_count,
            skipped_count=runtime.skipped_count,
            last_error=runtime.last_error,
        )

    def status(self) -> list[JobStatus]:
        """Definition and runtime state of every job."""
        return [self.get_status(name) for name in self._jobs]

    async def run_now(self, name: str) -> RunResult:
        """Trigger a job immediately.

        Raises:
            NotFoundError: No job named ``name``.
        """
        job = self._require(name)
        return self._trigger(job, manual=True)

    def _require(self, name: str) -> SchedulerJob:
        job = self._jobs.get(name)
        if job is None:
            raise NotFoundError(
                f"Scheduler job not found: {name}",
                details={"job": name, "available": sorted(self._jobs)},
            )
        return job

    async def _run_interval(self, job: SchedulerJob) -> None:
        """Fire ``job`` every interval until stopped."""
        try:
            while self._running:
                await asyncio.sleep(job.interval_ms / 1000)
                if self._running:
                    self._trigger(job, manual=False)
        except asyncio.CancelledError:
            pass

    def _trigger(self, job: SchedulerJob, *, manual: bool) -> RunResult:
        runtime = self._runtime[job.name]
        if runtime.state == JobState.RUNNING:
            runtime.skipped_count += 1
            logger.warning(
                "scheduler.tick_skipped",
                job=job.name,
                manual=manual,
                skipped_count=runtime.skipped_count,
            )
            return RunResult.ALREADY_RUNNING

        # The state flips before the task exists so a second trigger in the
        # same loop iteration already sees RUNNING.
        runtime.state = JobState.RUNNING
        runtime.last_run_at = utc_now()
        self._runs[job.name] = asyncio.create_task(
            self._run_job(job, manual), name=f"scheduler-run-{job.name}"
        )
        logger.info("scheduler.job_fired", job=job.name, manual=manual)
        return RunResult.ACCEPTED

    async def _run_job(self, job: SchedulerJob, manual: bool) -> None:
        """Publish one tick per tenant and wait for each to be processed."""
        runtime = self._runtime[job.name]
        fired_at = runtime.last_run_at or utc_now()
        payload = {
            "jobName": job.name,
            "intervalMs": job.interval_ms,
            "manual": manual,
            "firedAt": fired_at.isoformat(),
        }
        errors: list[str] = []
        try:
            tenants = await self._rule_store.list_tenants()
            for tenant_id in tenants:
                try:
                    event = self._engine.create_event(
                        tenant_id, EventType.SCHEDULER_TICK.value, payload, allow_reserved=True
                    )
                    await self._engine.process(event)
                except Exception as exc:
                    errors.append(f"{tenant_id}: {exc}")
                    logger.error(
                        "scheduler.tenant_tick_failed",
                        job=job.name,
                        tenant_id=tenant_id,
                        error=str(exc),
                    )
        except Exception as exc:
            errors.append(str(exc))
            logger.error("scheduler.job_error", job=job.name, error=str(exc))
        finally:
            runtime.last_error = "; ".join(errors) or None
            runtime.last_finished_at = utc_now()
            runtime.run_count += 1
            runtime.state = JobState.IDLE
            self._runs.pop(job.name, None)
            logger.info(
                "scheduler.job_finished",
                job=job.name,
                run_count=runtime.run_count,
                failed=bool(errors),
            )
