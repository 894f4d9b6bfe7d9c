"""Tests for TemplateInstaller."""

import pytest

from ringrules.application.template_installer import TemplateInstaller
from ringrules.core.domain.errors import NotFoundError
from ringrules.core.domain.template import BUILTIN_TEMPLATES
from ringrules.infrastructure.persistence.file_rule_store import FileRuleStore


@pytest.fixture
def store(tmp_path) -> FileRuleStore:
    return FileRuleStore(str(tmp_path))


@pytest.fixture
def installer(store) -> TemplateInstaller:
    return TemplateInstaller(store)


def test_lists_builtin_templates(installer) -> None:
    ids = [t.id for t in installer.list_templates()]
    assert ids == [t.id for t in BUILTIN_TEMPLATES]
    assert "welcome_sms" in ids


async def test_install_copies_blueprint(installer, store) -> None:
    template = installer.get_template("welcome_sms")

    rule = await installer.install("acme", "welcome_sms")

    assert rule.tenant_id == "acme"
    assert rule.enabled is True
    assert rule.priority == 0
    assert rule.id != template.id
    assert rule.name == template.name
    assert rule.trigger_event == template.trigger_event
    assert rule.conditions == template.conditions
    assert rule.actions == template.actions
    assert await store.get("acme", rule.id) == rule


async def test_installing_twice_creates_two_rules(installer, store) -> None:
    first = await installer.install("acme", "crm_sync")
    second = await installer.install("acme", "crm_sync")

    assert first.id != second.id
    assert first.actions == second.actions
    assert len(await store.list_rules("acme")) == 2


async def test_unknown_template(installer) -> None:
    with pytest.raises(NotFoundError):
        await installer.install("acme", "does_not_exist")
