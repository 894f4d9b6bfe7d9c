"""Template installer turning built-in blueprints into tenant rules."""

from __future__ import annotations

import copy

import structlog

from ringrules.core.domain.errors import NotFoundError
from ringrules.core.domain.rule import AutomationRule
from ringrules.core.domain.template import BUILTIN_TEMPLATES, Template
from ringrules.core.interfaces.rule_store import RuleStoreProtocol

logger = structlog.get_logger(__name__)


class TemplateInstaller:
    """Lists templates and installs them as new rules.

    Installing the same template twice yields two independent rules.
    """

    def __init__(
        self,
        rule_store: RuleStoreProtocol,
        templates: tuple[Template, ...] = BUILTIN_TEMPLATES,
    ) -> None:
        self._rule_store = rule_store
        self._templates = {t.id: t for t in templates}

    def list_templates(self) -> list[Template]:
        return list(self._templates.values())

    def get_template(self, template_id: str) -> Template:
        template = self._templates.get(template_id)
        if template is None:
            raise NotFoundError(
                f"Template not found: {template_id}", details={"template_id": template_id}
            )
        return template

    async def install(self, tenant_id: str, template_id: str) -> AutomationRule:
        """Create a tenant-owned, enabled, priority-0 copy of a template."""
        template = self.get_template(template_id)
        rule = AutomationRule(
            tenant_id=tenant_id,
            name=template.name,
            description=template.description,
            trigger_event=template.trigger_event,
            conditions=copy.deepcopy(template.conditions),
            actions=copy.deepcopy(template.actions),
            enabled=True,
            priority=0,
        )
        created = await self._rule_store.create(rule)
        logger.info(
            "template_installer.installed",
            tenant_id=tenant_id,
            template_id=template_id,
            rule_id=created.id,
        )
        return created
