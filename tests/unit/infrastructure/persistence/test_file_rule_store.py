"""Tests for FileRuleStore."""

import json

import pytest

from ringrules.core.domain.errors import NotFoundError, PersistenceError, ValidationError
from ringrules.infrastructure.persistence.file_rule_store import FileRuleStore


@pytest.fixture
def store(tmp_path) -> FileRuleStore:
    return FileRuleStore(str(tmp_path))


async def test_create_persists_to_tenant_file(store, tmp_path, make_rule) -> None:
    rule = await store.create(make_rule())

    path = tmp_path / "tenants" / "acme" / "rules.json"
    data = json.loads(path.read_text())
    assert [item["id"] for item in data] == [rule.id]
    assert not path.with_suffix(".json.tmp").exists()


async def test_reload_from_disk(store, tmp_path, make_rule) -> None:
    rule = await store.create(
        make_rule(conditions=[{"field": "score", "operator": "greaterThan", "value": 50}])
    )

    reloaded = await FileRuleStore(str(tmp_path)).get("acme", rule.id)

    assert reloaded == rule


async def test_update_and_delete(store, make_rule) -> None:
    rule = await store.create(make_rule())

    await store.update(rule.with_changes(name="renamed"))
    assert (await store.get("acme", rule.id)).name == "renamed"

    assert await store.delete("acme", rule.id) is True
    assert await store.delete("acme", rule.id) is False
    assert await store.get("acme", rule.id) is None


async def test_update_unknown_rule(store, make_rule) -> None:
    with pytest.raises(NotFoundError):
        await store.update(make_rule())


async def test_find_enabled_filters_by_trigger(store, make_rule) -> None:
    wanted = await store.create(make_rule())
    await store.create(make_rule(enabled=False))
    await store.create(make_rule(trigger_event="call:missed"))

    found = await store.find_enabled("acme", "lead:created")

    assert [r.id for r in found] == [wanted.id]


async def test_tenants_do_not_share_rules(store, make_rule) -> None:
    await store.create(make_rule(tenant_id="acme"))
    await store.create(make_rule(tenant_id="globex"))

    assert len(await store.list_rules("acme")) == 1
    assert await store.list_tenants() == ["acme", "globex"]


async def test_list_tenants_includes_files_on_disk(store, tmp_path, make_rule) -> None:
    await store.create(make_rule(tenant_id="initech"))
    assert await FileRuleStore(str(tmp_path)).list_tenants() == ["initech"]


async def test_corrupt_file_raises_persistence_error(tmp_path) -> None:
    path = tmp_path / "tenants" / "acme" / "rules.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json")

    with pytest.raises(PersistenceError):
        await FileRuleStore(str(tmp_path)).list_rules("acme")


@pytest.mark.parametrize(
    "damage",
    [
        {"actions": [{"type": "sendFax"}]},
        {"priority": None},
        {"createdAt": "yesterday"},
    ],
)
async def test_bad_record_skipped_and_kept(store, tmp_path, make_rule, damage) -> None:
    good = await store.create(make_rule(name="good"))
    bad = await store.create(make_rule(name="bad"))
    path = tmp_path / "tenants" / "acme" / "rules.json"
    records = json.loads(path.read_text())
    for record in records:
        if record["id"] == bad.id:
            record.update(damage)
    path.write_text(json.dumps(records))

    reloaded = FileRuleStore(str(tmp_path))
    found = await reloaded.find_enabled("acme", "lead:created")
    assert [r.id for r in found] == [good.id]

    await reloaded.update(good.with_changes(name="renamed"))
    stored = {r["id"]: r for r in json.loads(path.read_text())}
    assert stored[good.id]["name"] == "renamed"
    assert stored[bad.id]["name"] == "bad"


async def test_rules_document_not_a_list(tmp_path) -> None:
    path = tmp_path / "tenants" / "acme" / "rules.json"
    path.parent.mkdir(parents=True)
    path.write_text('{"id": "r1"}')

    with pytest.raises(PersistenceError):
        await FileRuleStore(str(tmp_path)).list_rules("acme")


async def test_path_traversal_tenant_rejected(store) -> None:
    with pytest.raises(ValidationError):
        await store.list_rules("../other")
