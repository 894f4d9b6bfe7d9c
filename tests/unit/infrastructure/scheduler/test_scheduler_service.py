"""Tests for SchedulerService."""

import asyncio

import pytest

from ringrules.core.domain.errors import NotFoundError
from ringrules.core.domain.schedule import JobState, RunResult, SchedulerJob
from ringrules.infrastructure.scheduler.scheduler_service import SchedulerService


class BlockingEngine:
    """Engine stand-in whose processing waits on a gate."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.events = []

    def create_event(self, tenant_id, event_type, payload, *, allow_reserved=False):
        assert allow_reserved
        return (tenant_id, event_type, dict(payload))

    async def process(self, event):
        self.events.append(event)
        await self.gate.wait()
        return []


class StaticTenants:
    def __init__(self, tenants) -> None:
        self.tenants = tenants

    async def list_tenants(self):
        return list(self.tenants)


JOB = SchedulerJob("leadScoring", 60_000, "Re-score open leads")


@pytest.fixture
def engine() -> BlockingEngine:
    return BlockingEngine()


@pytest.fixture
def scheduler(engine) -> SchedulerService:
    return SchedulerService(engine, StaticTenants(["acme", "globex"]), jobs=(JOB,))


async def test_run_now_publishes_tick_per_tenant(scheduler, engine) -> None:
    engine.gate.set()

    assert await scheduler.run_now("leadScoring") == RunResult.ACCEPTED
    await scheduler.join()

    assert [e[0] for e in engine.events] == ["acme", "globex"]
    tenant, event_type, payload = engine.events[0]
    assert event_type == "scheduler:tick"
    assert payload["jobName"] == "leadScoring"
    assert payload["intervalMs"] == 60_000
    assert payload["manual"] is True
    status = scheduler.get_status("leadScoring")
    assert status.state == JobState.IDLE
    assert status.run_count == 1
    assert status.last_finished_at is not None


async def test_second_trigger_while_running_is_skipped(scheduler, engine) -> None:
    assert await scheduler.run_now("leadScoring") == RunResult.ACCEPTED
    assert scheduler.get_status("leadScoring").state == JobState.RUNNING

    assert await scheduler.run_now("leadScoring") == RunResult.ALREADY_RUNNING
    assert scheduler.get_status("leadScoring").skipped_count == 1

    engine.gate.set()
    await scheduler.join()
    assert scheduler.get_status("leadScoring").state == JobState.IDLE
    assert await scheduler.run_now("leadScoring") == RunResult.ACCEPTED
    await scheduler.join()


async def test_unknown_job(scheduler) -> None:
    with pytest.raises(NotFoundError):
        await scheduler.run_now("nope")


async def test_tenant_failure_recorded_and_state_reset() -> None:
    class FailingEngine(BlockingEngine):
        async def process(self, event):
            raise RuntimeError("store offline")

    scheduler = SchedulerService(FailingEngine(), StaticTenants(["acme"]), jobs=(JOB,))

    await scheduler.run_now("leadScoring")
    await scheduler.join()

    status = scheduler.get_status("leadScoring")
    assert status.state == JobState.IDLE
    assert "store offline" in status.last_error


async def test_interval_loop_fires(engine) -> None:
    engine.gate.set()
    fast = SchedulerJob("appointmentReminders", 60_000)
    scheduler = SchedulerService(
        engine, StaticTenants(["acme"]), jobs=(fast,), intervals={"appointmentReminders": 10}
    )

    await scheduler.start()
    assert scheduler.is_running
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert not scheduler.is_running
    assert scheduler.get_status("appointmentReminders").run_count >= 1
    assert engine.events[0][2]["manual"] is False


def test_status_lists_builtin_jobs(engine) -> None:
    scheduler = SchedulerService(engine, StaticTenants([]))
    names = [s.job.name for s in scheduler.status()]
    assert len(names) == 10
    assert all(s.state == JobState.IDLE for s in scheduler.status())
