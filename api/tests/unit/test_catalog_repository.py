"""
Tests de los repositorios de catalogo y personajes contra SQLite en memoria.
"""
import pytest
from sqlalchemy import select

from app.domain.entities.catalog import ExternalRecord
from app.infrastructure.database.models import CharacterModel, MonsterModel
from app.infrastructure.repositories.catalog_repository import (
    CatalogItemRepository,
    MonsterRepository,
)
from app.infrastructure.repositories.character_repository import CharacterRepository
from app.shared.exceptions.sync import ItemNotFoundError, ValidationError


async def _add_monster(db_session, **values):
    monster = MonsterModel(**values)
    db_session.add(monster)
    await db_session.commit()
    return monster.id


@pytest.mark.asyncio
async def test_get_all_maps_manifest_and_local_fields(db_session):
    await _add_monster(db_session, external_id="e1", name="Goblin", hit_points=7, ai_generated="img.png")
    await _add_monster(db_session, external_id=None, name="Homebrew")

    records = await MonsterRepository(db_session).get_all()

    assert [r.name for r in records] == ["Goblin", "Homebrew"]
    assert records[0].fields["hit_points"] == 7
    assert records[0].local_fields == {"ai_generated": "img.png"}
    assert "ai_generated" not in records[0].fields
    assert records[1].is_linked is False


@pytest.mark.asyncio
async def test_upsert_inserts_then_updates_by_external_id(db_session):
    repo = CatalogItemRepository(db_session)

    created = await repo.upsert(ExternalRecord("e1", {
        "name": "Potion de soins", "category": "consumable", "properties": {"Prix": 50},
    }))
    updated = await repo.upsert(ExternalRecord("e1", {
        "name": "Potion de soins", "category": "consumable", "rarity": "Commun", "properties": {"Prix": 60},
    }))

    assert updated.id == created.id
    assert updated.fields["rarity"] == "Commun"
    assert updated.fields["properties"] == {"Prix": 60}
    assert len(await repo.get_all()) == 1


@pytest.mark.asyncio
async def test_upsert_preserves_local_owned_columns(db_session):
    monster_id = await _add_monster(db_session, external_id="e1", name="Goblin", ai_generated="img.png")
    repo = MonsterRepository(db_session)

    saved = await repo.upsert(ExternalRecord("e1", {"name": "Goblin Grunt", "hit_points": 9}))

    assert saved.id == monster_id
    assert saved.fields["name"] == "Goblin Grunt"
    assert saved.local_fields["ai_generated"] == "img.png"


@pytest.mark.asyncio
async def test_update_fields_touches_only_given_keys(db_session):
    monster_id = await _add_monster(
        db_session, external_id="e1", name="Goblin", hit_points=7, armor_class=15, ai_generated="img.png",
    )
    repo = MonsterRepository(db_session)

    await repo.update_fields(monster_id, {"hit_points": 9, "external_id": "e1"})

    record = await repo.get_by_id(monster_id)
    assert record.fields["hit_points"] == 9
    assert record.fields["armor_class"] == 15
    assert record.local_fields["ai_generated"] == "img.png"


@pytest.mark.asyncio
async def test_update_fields_rejects_non_manifest_keys(db_session):
    monster_id = await _add_monster(db_session, external_id="e1", name="Goblin")

    with pytest.raises(ValidationError):
        await MonsterRepository(db_session).update_fields(monster_id, {"ai_generated": "x"})


@pytest.mark.asyncio
async def test_update_fields_on_missing_row(db_session):
    with pytest.raises(ItemNotFoundError):
        await MonsterRepository(db_session).update_fields(404, {"name": "Fantome"})


@pytest.mark.asyncio
async def test_delete_by_ids_reports_missing_rows(db_session):
    monster_id = await _add_monster(db_session, external_id="e1", name="Goblin")
    repo = MonsterRepository(db_session)

    result = await repo.delete_by_ids([monster_id, 999])

    assert result.deleted_count == 1
    assert len(result.errors) == 1
    assert await repo.get_by_id(monster_id) is None


@pytest.mark.asyncio
async def test_character_repository_round_trip(db_session):
    character = CharacterModel(name="Aria", inventory={"equipment": [{"catalog_external_id": "e1", "name": "Goblin"}]})
    db_session.add(character)
    await db_session.commit()
    repo = CharacterRepository(db_session)

    dependents = await repo.get_all_dependents()
    assert len(dependents) == 1
    dependent = dependents[0]
    dependent.inventory["equipment"][0]["name"] = "Goblin Grunt"
    await repo.save_dependent(dependent)

    result = await db_session.execute(
        select(CharacterModel).execution_options(populate_existing=True)
    )
    stored = result.scalar_one()
    assert stored.inventory["equipment"][0]["name"] == "Goblin Grunt"
    assert stored.updated_at is not None
