"""Tests for the closed action set."""

import pytest

from ringrules.core.domain.actions import (
    ACTION_CLASSES,
    ActionType,
    AddToSequenceAction,
    AssignLeadAction,
    CreateTaskAction,
    SendEmailAction,
    SendSmsAction,
    WebhookAction,
    parse_action,
)
from ringrules.core.domain.errors import CatalogError, ValidationError


class TestParseAction:
    """Tests for parse_action."""

    def test_parses_variant_with_camel_case_fields(self) -> None:
        action = parse_action(
            {"type": "sendSms", "phoneField": "phone", "message": "Hi {{name}}"}
        )
        assert isinstance(action, SendSmsAction)
        assert action.phone_field == "phone"
        assert action.message == "Hi {{name}}"

    def test_unknown_type_is_catalog_error(self) -> None:
        with pytest.raises(CatalogError) as exc_info:
            parse_action({"type": "sendFax"})
        assert exc_info.value.details["identifier"] == "sendFax"

    def test_missing_type_is_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            parse_action({"message": "hello"})

    def test_non_object_is_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            parse_action(["sendSms"])

    def test_unknown_keys_are_ignored(self) -> None:
        action = parse_action({"type": "webhook", "url": "https://x.test", "retries": 3})
        assert isinstance(action, WebhookAction)
        assert "retries" not in action.to_dict()

    def test_defaults_applied(self) -> None:
        email = parse_action({"type": "sendEmail", "subject": "s", "body": "b"})
        assert isinstance(email, SendEmailAction)
        assert email.email_field == "email"

        task = parse_action({"type": "createTask", "title": "Call back"})
        assert isinstance(task, CreateTaskAction)
        assert task.priority == "MEDIUM"
        assert task.due_in_hours is None

        seq = parse_action({"type": "addToSequence", "sequenceId": "drip"})
        assert isinstance(seq, AddToSequenceAction)
        assert seq.delay_minutes == 60

    def test_numeric_fields_coerced(self) -> None:
        task = parse_action({"type": "createTask", "title": "t", "dueInHours": "24"})
        assert task.due_in_hours == 24.0

    def test_bad_number_is_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            parse_action({"type": "addToSequence", "sequenceId": "s", "delayMinutes": "soon"})

    def test_every_action_type_has_a_variant(self) -> None:
        assert set(ACTION_CLASSES) == set(ActionType)


class TestRequiredFields:
    """Tests for required-field validation."""

    def test_blank_required_fields_reported(self) -> None:
        action = SendSmsAction(phone_field="phone", message="   ")
        assert action.missing_fields() == ["message"]

    def test_update_lead_requires_non_empty_updates(self) -> None:
        action = parse_action({"type": "updateLead", "updates": {}})
        assert action.missing_fields() == ["updates"]

    def test_specific_assignment_requires_agent(self) -> None:
        action = AssignLeadAction(strategy="specific")
        assert action.missing_fields() == ["agentId"]
        assert AssignLeadAction(strategy="specific", agent_id="u1").missing_fields() == []

    def test_round_robin_needs_nothing(self) -> None:
        assert AssignLeadAction().missing_fields() == []

    def test_unknown_strategy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AssignLeadAction(strategy="random")

    def test_required_fields_listing(self) -> None:
        assert SendSmsAction.required_fields() == ["phoneField", "message"]
        assert WebhookAction.required_fields() == ["url"]


def test_to_dict_round_trips_wire_shape() -> None:
    data = {
        "type": "webhook",
        "url": "https://hooks.test/in",
        "method": "PUT",
        "headers": {"X-Key": "k"},
    }
    assert parse_action(data).to_dict() == data
