"""Unit tests for the automation routes."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from ringrules.api.dependencies import get_runtime
from ringrules.api.errors import ERROR_HEADER
from ringrules.api.server import create_app
from ringrules.core.domain.execution import ExecutionStatus
from ringrules.core.domain.schedule import RunResult

HEADERS = {"X-Tenant-ID": "acme"}

RULE_BODY = {
    "name": "Welcome SMS",
    "triggerEvent": "lead:created",
    "conditions": [{"field": "phone", "operator": "exists"}],
    "actions": [{"type": "sendSms", "phoneField": "phone", "message": "Hi {{name}}"}],
    "priority": 10,
}


@pytest.fixture
def client(runtime):
    app = create_app()
    app.dependency_overrides[get_runtime] = lambda: runtime
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestTenantHeader:
    """Tests for X-Tenant-ID handling."""

    def test_missing_header(self, client):
        response = client.get("/api/v1/automation/rules")
        assert response.status_code == 400
        assert response.headers[ERROR_HEADER] == "1"
        assert response.json()["code"] == "missing_tenant"

    def test_invalid_header(self, client):
        response = client.get("/api/v1/automation/rules", headers={"X-Tenant-ID": "a/b"})
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"


class TestRules:
    """Tests for rule CRUD."""

    def test_create_list_get(self, client):
        created = client.post("/api/v1/automation/rules", json=RULE_BODY, headers=HEADERS)
        assert created.status_code == 201
        body = created.json()
        assert body["triggerEvent"] == "lead:created"
        assert body["tenantId"] == "acme"
        assert body["enabled"] is True

        listed = client.get("/api/v1/automation/rules", headers=HEADERS).json()
        assert listed["total"] == 1
        assert listed["rules"][0]["id"] == body["id"]

        fetched = client.get(f"/api/v1/automation/rules/{body['id']}", headers=HEADERS)
        assert fetched.json()["name"] == "Welcome SMS"

    def test_other_tenant_cannot_see_rule(self, client):
        rule_id = client.post(
            "/api/v1/automation/rules", json=RULE_BODY, headers=HEADERS
        ).json()["id"]

        response = client.get(
            f"/api/v1/automation/rules/{rule_id}", headers={"X-Tenant-ID": "globex"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_partial_update(self, client):
        rule_id = client.post(
            "/api/v1/automation/rules", json=RULE_BODY, headers=HEADERS
        ).json()["id"]

        response = client.put(
            f"/api/v1/automation/rules/{rule_id}", json={"enabled": False}, headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json()["enabled"] is False
        assert response.json()["priority"] == 10

    @pytest.mark.parametrize("field", ["enabled", "priority", "name", "actions"])
    def test_update_rejects_null(self, client, field):
        rule_id = client.post(
            "/api/v1/automation/rules", json=RULE_BODY, headers=HEADERS
        ).json()["id"]
        url = f"/api/v1/automation/rules/{rule_id}"

        response = client.put(url, json={field: None}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"
        stored = client.get(url, headers=HEADERS).json()
        assert stored["enabled"] is True
        assert stored["priority"] == 10
        assert len(stored["actions"]) == 1

    def test_update_clears_description(self, client):
        body = {**RULE_BODY, "description": "greets new leads"}
        rule_id = client.post(
            "/api/v1/automation/rules", json=body, headers=HEADERS
        ).json()["id"]

        response = client.put(
            f"/api/v1/automation/rules/{rule_id}", json={"description": None}, headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json().get("description") is None

    def test_delete(self, client):
        rule_id = client.post(
            "/api/v1/automation/rules", json=RULE_BODY, headers=HEADERS
        ).json()["id"]

        url = f"/api/v1/automation/rules/{rule_id}"
        assert client.delete(url, headers=HEADERS).status_code == 204
        assert client.delete(url, headers=HEADERS).status_code == 404

    def test_unknown_trigger_event(self, client):
        body = {**RULE_BODY, "triggerEvent": "lead:vanished"}
        response = client.post("/api/v1/automation/rules", json=body, headers=HEADERS)
        assert response.status_code == 400
        assert response.json()["code"] == "catalog_error"

    def test_priority_out_of_range(self, client):
        body = {**RULE_BODY, "priority": 500}
        response = client.post("/api/v1/automation/rules", json=body, headers=HEADERS)
        assert response.status_code == 422


class TestLogs:
    """Tests for GET /logs."""

    def test_filters_and_paging(self, client, runtime, make_rule):
        rule = make_rule()

        async def _seed():
            await runtime.execution_log.record("acme", rule, ExecutionStatus.SUCCESS)
            await runtime.execution_log.record("acme", rule, ExecutionStatus.FAILED, "boom")

        asyncio.run(_seed())

        response = client.get(
            "/api/v1/automation/logs", params={"status": "FAILED", "limit": 5}, headers=HEADERS
        )

        body = response.json()
        assert body["total"] == 1
        assert body["limit"] == 5
        assert body["logs"][0]["error"] == "boom"
        assert body["logs"][0]["ruleName"] == "rule"

    def test_limit_bounds(self, client):
        response = client.get("/api/v1/automation/logs", params={"limit": 0}, headers=HEADERS)
        assert response.status_code == 422


class TestTemplates:
    def test_list_and_install(self, client):
        templates = client.get("/api/v1/automation/templates").json()["templates"]
        assert any(t["id"] == "welcome_sms" for t in templates)

        response = client.post(
            "/api/v1/automation/templates/welcome_sms/install", headers=HEADERS
        )

        assert response.status_code == 201
        assert response.json()["priority"] == 0

    def test_install_unknown(self, client):
        response = client.post("/api/v1/automation/templates/nope/install", headers=HEADERS)
        assert response.status_code == 404


class TestScheduler:
    def test_status(self, client):
        body = client.get("/api/v1/automation/scheduler/status").json()
        assert body["running"] is False
        job = next(j for j in body["jobs"] if j["name"] == "appointmentReminders")
        assert job["intervalHuman"] == "1 minutes"
        assert job["state"] == "IDLE"

    def test_run_accepted(self, client):
        response = client.post("/api/v1/automation/scheduler/run/leadScoring")
        assert response.status_code == 202
        assert response.json() == {"accepted": True, "job": "leadScoring"}

    def test_run_conflict(self, client, runtime, monkeypatch):
        async def _already_running(name):
            return RunResult.ALREADY_RUNNING

        monkeypatch.setattr(runtime.scheduler, "run_now", _already_running)

        response = client.post("/api/v1/automation/scheduler/run/leadScoring")

        assert response.status_code == 409
        assert response.json()["code"] == "already_running"

    def test_run_unknown_job(self, client):
        response = client.post("/api/v1/automation/scheduler/run/nope")
        assert response.status_code == 404


class TestCatalogs:
    def test_events(self, client):
        events = client.get("/api/v1/automation/events").json()["events"]
        values = {e["value"] for e in events}
        assert "lead:created" in values
        assert "scheduler:tick" in values

    def test_actions(self, client):
        actions = client.get("/api/v1/automation/actions").json()["actions"]
        assert {a["type"] for a in actions} >= {"sendSms", "webhook", "addToSequence"}
        assert all(a["available"] for a in actions)


class TestTrigger:
    def test_accepted(self, client):
        response = client.post(
            "/api/v1/automation/trigger",
            json={"eventType": "lead:created", "payload": {"name": "Jane"}},
            headers=HEADERS,
        )
        assert response.status_code == 202
        assert response.json()["eventType"] == "lead:created"

    @pytest.mark.parametrize("event_type", ["scheduler:tick", "lead:vanished"])
    def test_rejected(self, client, event_type):
        response = client.post(
            "/api/v1/automation/trigger", json={"eventType": event_type}, headers=HEADERS
        )
        assert response.status_code == 400
        assert response.json()["code"] == "catalog_error"


class TestDryRun:
    def test_renders_actions(self, client, outbox):
        response = client.post(
            "/api/v1/automation/test",
            json={"rule": RULE_BODY, "sampleData": {"name": "Jane", "phone": "+1555"}},
            headers=HEADERS,
        )

        body = response.json()
        assert body["matched"] is True
        assert body["actions"][0]["message"] == "Hi Jane"
        assert outbox.records == []

    def test_not_matched(self, client):
        response = client.post(
            "/api/v1/automation/test", json={"rule": RULE_BODY, "sampleData": {}}, headers=HEADERS
        )
        assert response.json()["matched"] is False
