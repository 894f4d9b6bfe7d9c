"""End-to-end flows through the assembled runtime."""

from ringrules.core.domain.execution import ExecutionStatus


async def test_lead_created_sends_sms_and_logs(runtime, outbox) -> None:
    rule = await runtime.rules.create_rule(
        "acme",
        {
            "name": "Welcome",
            "trigger_event": "lead:created",
            "conditions": [],
            "actions": [{"type": "sendSms", "phoneField": "phone", "message": "Hi {{name}}"}],
        },
    )

    payload = {"name": "Jane", "phone": "+15551234567"}
    await runtime.engine.publish("acme", "lead:created", payload)
    await runtime.engine.drain()

    sms = outbox.by_channel("sms")
    assert len(sms) == 1
    assert sms[0].data == {
        "to": "+15551234567",
        "body": "Hi Jane",
        "message_id": sms[0].data["message_id"],
    }
    entries, total = await runtime.execution_log.list_entries("acme")
    assert total == 1
    assert entries[0].rule_id == rule.id
    assert entries[0].status == ExecutionStatus.SUCCESS


async def test_missing_phone_is_logged_as_failure(runtime, outbox) -> None:
    await runtime.installer.install("acme", "missed_call_followup")

    await runtime.engine.publish("acme", "call:missed", {"callId": "c1"})
    await runtime.engine.drain()

    assert outbox.by_channel("sms") == []
    entries, _ = await runtime.execution_log.list_entries("acme")
    assert entries[0].status == ExecutionStatus.FAILED
    assert entries[0].results[0]["failure"] == "validation"


async def test_rules_of_other_tenants_do_not_fire(runtime, outbox) -> None:
    await runtime.installer.install("globex", "welcome_sms")

    await runtime.engine.publish("acme", "lead:created", {"name": "Jane", "phone": "+1555"})
    await runtime.engine.drain()

    assert outbox.records == []
    assert await runtime.execution_log.list_entries("acme") == ([], 0)


async def test_scheduler_tick_drives_tick_rules(runtime, outbox) -> None:
    await runtime.rules.create_rule(
        "acme",
        {
            "name": "Stale leads",
            "trigger_event": "scheduler:tick",
            "conditions": [
                {"field": "jobName", "operator": "equals", "value": "staleLeadFollowup"}
            ],
            "actions": [{"type": "notify", "message": "Tick from {{jobName}}"}],
        },
    )

    await runtime.scheduler.run_now("leadScoring")
    await runtime.scheduler.join()
    assert outbox.by_channel("notification") == []

    await runtime.scheduler.run_now("staleLeadFollowup")
    await runtime.scheduler.join()

    notes = outbox.by_channel("notification")
    assert len(notes) == 1
    assert notes[0].data["message"] == "Tick from staleLeadFollowup"
    assert notes[0].data["data"]["manual"] is True


async def test_round_robin_template_assigns_agents(runtime, outbox) -> None:
    await runtime.installer.install("acme", "auto_assign_lead")

    for lead_id in ("L1", "L2", "L3"):
        await runtime.engine.process(
            runtime.engine.create_event("acme", "lead:created", {"leadId": lead_id})
        )

    agents = [r.data["agent_id"] for r in outbox.by_channel("lead_assign")]
    assert agents == ["agent-1", "agent-2", "agent-1"]
