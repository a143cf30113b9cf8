"""
Tests de los casos de uso de sincronizacion con dobles en memoria.
"""
import pytest

from app.application.dto.sync_dto import OperationsDTO, UpdateOperationDTO
from app.application.use_cases.catalog_sync_use_cases import CatalogSyncUseCases
from app.domain.entities.catalog import DependentRecord, ExternalRecord, LocalRecord
from app.shared.constants.field_manifests import ITEM_CATALOG, MONSTER_CATALOG
from app.shared.exceptions.sync import FetchError


def _ext(external_id, content_loaded=True, **fields):
    return ExternalRecord(external_id=external_id, fields=fields, content_loaded=content_loaded)


def _local(local_id, external_id, **fields):
    return LocalRecord(id=local_id, external_id=external_id, fields=fields)


def _potion_inventory():
    return {
        "equipment": [],
        "consumables": [{"catalog_external_id": "e1", "name": "Potion", "description": None, "quantity": 2}],
        "items": [],
    }


@pytest.mark.asyncio
async def test_preview_skips_content_field_when_not_loaded(fakes):
    source = fakes.Source([_ext("e1", content_loaded=False, name="Potion", category="consumable")])
    store = fakes.Store(ITEM_CATALOG, [
        _local(1, "e1", name="Potion", category="consumable", description="Rend 2d4+2 PV."),
    ])

    change_set = await CatalogSyncUseCases(source, store, ITEM_CATALOG).build_preview()

    assert change_set.summary.unchanged == 1
    assert change_set.summary.to_update == 0
    assert source.fetch_calls == [False]


@pytest.mark.asyncio
async def test_preview_compares_content_when_loaded(fakes):
    source = fakes.Source([_ext("e1", name="Potion", category="consumable", description="Rend 4d4+4 PV.")])
    store = fakes.Store(ITEM_CATALOG, [
        _local(1, "e1", name="Potion", category="consumable", description="Rend 2d4+2 PV."),
    ])

    change_set = await CatalogSyncUseCases(source, store, ITEM_CATALOG).build_preview(fetch_content=True)

    assert source.fetch_calls == [True]
    assert change_set.items[0].changed_field_names == ("description",)


@pytest.mark.asyncio
async def test_preview_default_selection_never_deletes(fakes):
    source = fakes.Source([_ext("e1", name="Goblin", hit_points=9), _ext("e2", name="Orc")])
    store = fakes.Store(MONSTER_CATALOG, [
        _local(1, "e1", name="Goblin", hit_points=7),
        _local(2, "gone", name="Rat"),
    ])

    response = await CatalogSyncUseCases(source, store, MONSTER_CATALOG).preview()

    assert response.summary.to_add == 1
    assert response.summary.to_update == 1
    assert response.summary.to_delete == 1
    assert response.default_selection.add == ["e2"]
    assert response.default_selection.update[0].fields == ["hit_points"]
    assert response.default_selection.delete == []


@pytest.mark.asyncio
async def test_apply_runs_selected_operations(fakes):
    source = fakes.Source([_ext("e1", name="Goblin", hit_points=9, armor_class=15)])
    store = fakes.Store(MONSTER_CATALOG, [
        _local(1, "e1", name="Goblin", hit_points=7, armor_class=12),
        _local(2, "gone", name="Rat"),
    ])
    operations = OperationsDTO(
        update=[UpdateOperationDTO(external_id="e1", local_id=1, fields=["hit_points"])],
        delete=[2],
    )

    response = await CatalogSyncUseCases(source, store, MONSTER_CATALOG).apply(operations)

    assert (response.updated, response.deleted, response.outcome) == (1, 1, "success")
    assert store.rows[1].fields["hit_points"] == 9
    assert store.rows[1].fields["armor_class"] == 12
    assert 2 not in store.rows


@pytest.mark.asyncio
async def test_sync_all_applies_adds_and_updates_but_keeps_orphans(fakes):
    source = fakes.Source(
        [_ext("e1", content_loaded=False, name="Potion", category="consumable", rarity="Rare")],
        contents={"e1": "Rend 2d4+2 PV."},
    )
    store = fakes.Store(ITEM_CATALOG, [
        _local(1, "e1", name="Potion", category="consumable", rarity="Commun"),
        _local(2, "gone", name="Corde", category="misc"),
    ])

    response = await CatalogSyncUseCases(source, store, ITEM_CATALOG).sync_all()

    assert (response.added, response.updated, response.deleted) == (0, 1, 0)
    assert response.success is True
    assert 2 in store.rows
    assert all(call[0] != "delete" for call in store.calls)
    assert store.rows[1].fields["rarity"] == "Rare"


@pytest.mark.asyncio
async def test_sync_all_with_nothing_to_apply(fakes):
    source = fakes.Source([_ext("e1", name="Goblin")])
    store = fakes.Store(MONSTER_CATALOG, [_local(1, "e1", name="Goblin")])

    response = await CatalogSyncUseCases(source, store, MONSTER_CATALOG).sync_all()

    assert response.outcome == "success"
    assert (response.added, response.updated, response.deleted) == (0, 0, 0)
    assert source.fetch_calls == [False]
    assert store.calls == []


@pytest.mark.asyncio
async def test_fetch_error_propagates(fakes):
    source = fakes.Source(fetch_error=FetchError("Notion no responde"))
    store = fakes.Store(MONSTER_CATALOG)

    with pytest.raises(FetchError):
        await CatalogSyncUseCases(source, store, MONSTER_CATALOG).preview()


@pytest.mark.asyncio
async def test_refresh_descriptions_fills_missing_and_cascades(fakes):
    source = fakes.Source(contents={"e1": "Rend 2d4+2 PV.", "e3": None}, failing_content=["e4"])
    store = fakes.Store(ITEM_CATALOG, [
        _local(1, "e1", name="Potion", description=None),
        _local(2, "e2", name="Epee", description="Une lame"),
        _local(3, "e3", name="Corde", description=""),
        _local(4, "e4", name="Cape", description="  "),
        _local(5, None, name="Homebrew", description=None),
    ])
    dependents = fakes.Dependents([DependentRecord(id=1, name="Aria", inventory=_potion_inventory())])

    response = await CatalogSyncUseCases(source, store, ITEM_CATALOG, dependents=dependents).refresh_descriptions()

    assert (response.updated, response.total) == (1, 3)
    assert len(response.errors) == 1
    assert "Cape" in response.errors[0]
    assert sorted(source.content_calls) == ["e1", "e3", "e4"]
    assert store.rows[1].fields["description"] == "Rend 2d4+2 PV."
    assert store.rows[3].fields["description"] == ""
    assert dependents.saved == [1]
    entry = dependents.rows[1].inventory["consumables"][0]
    assert entry["description"] == "Rend 2d4+2 PV."
    assert entry["quantity"] == 2


@pytest.mark.asyncio
async def test_refresh_descriptions_when_nothing_is_missing(fakes):
    store = fakes.Store(ITEM_CATALOG, [_local(1, "e1", name="Epee", description="Une lame")])
    source = fakes.Source()

    response = await CatalogSyncUseCases(source, store, ITEM_CATALOG).refresh_descriptions()

    assert response.updated == 0
    assert response.message
    assert source.content_calls == []


@pytest.mark.asyncio
async def test_refresh_descriptions_on_catalog_without_content(fakes):
    response = await CatalogSyncUseCases(
        fakes.Source(), fakes.Store(MONSTER_CATALOG), MONSTER_CATALOG,
    ).refresh_descriptions()
    assert response.success is True
    assert response.total == 0


def test_monsters_never_cascade(fakes):
    use_cases = CatalogSyncUseCases(
        fakes.Source(), fakes.Store(MONSTER_CATALOG), MONSTER_CATALOG, dependents=fakes.Dependents(),
    )
    assert use_cases.cascade is None


@pytest.mark.asyncio
async def test_status(fakes):
    response = await CatalogSyncUseCases(fakes.Source([_ext("e1", name="Goblin")]), fakes.Store(MONSTER_CATALOG),
                                         MONSTER_CATALOG).status()
    assert response.success is True
    assert response.databases[0].count == 1
