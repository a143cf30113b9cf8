"""
Tests unitarios del comparador de campos.

Cubre:
- Balde vacio para escalares (None, "", espacios).
- Igualdad JSON independiente del orden de claves.
- Supresion de campos via ComparisonPolicy.
"""
from app.application.services.field_comparator import (
    EMPTY,
    ComparisonPolicy,
    canonical_json,
    diff,
    normalize_scalar,
    values_equal,
)
from app.shared.constants.field_manifests import (
    ITEM_FIELD_MANIFEST,
    MONSTER_FIELD_MANIFEST,
    EqualityKind,
    FieldSpec,
)

SCALAR = FieldSpec("speed", "Velocidad")
JSON_FIELD = FieldSpec("traits", "Rasgos", EqualityKind.JSON_LIKE)


def test_scalar_empty_bucket():
    assert normalize_scalar(None) is EMPTY
    assert normalize_scalar("") is EMPTY
    assert normalize_scalar("   ") is EMPTY
    assert values_equal(SCALAR, None, "")
    assert values_equal(SCALAR, "", "  ")


def test_scalar_strings_are_trimmed():
    assert values_equal(SCALAR, "9 m", " 9 m ")
    assert not values_equal(SCALAR, "9 m", "12 m")


def test_scalar_numbers_compare_by_value():
    assert values_equal(SCALAR, 7, 7)
    assert not values_equal(SCALAR, 7, 10)
    assert not values_equal(SCALAR, None, 0)


def test_json_key_order_is_ignored():
    old = {"skills": ["Discretion"], "senses": ["vision"]}
    new = {"senses": ["vision"], "skills": ["Discretion"]}
    assert values_equal(JSON_FIELD, old, new)


def test_json_string_is_parsed_before_comparing():
    assert values_equal(JSON_FIELD, '{"b": 1, "a": 2}', {"a": 2, "b": 1})


def test_json_empty_values_share_bucket():
    for old in (None, "", {}, []):
        for new in (None, "", {}, []):
            assert values_equal(JSON_FIELD, old, new)
    assert canonical_json([]) is EMPTY


def test_json_detects_real_changes():
    assert not values_equal(JSON_FIELD, [{"name": "Morsure"}], [{"name": "Griffes"}])
    assert not values_equal(JSON_FIELD, None, [{"name": "Morsure"}])


def test_diff_reports_raw_values_in_manifest_order():
    external = {"name": "Goblin", "hit_points": 7, "armor_class": 15, "speed": " 9 m"}
    local = {"name": "Goblin", "hit_points": 10, "armor_class": 13, "speed": "9 m"}

    changes = diff(external, local, MONSTER_FIELD_MANIFEST)

    assert [c.field for c in changes] == ["armor_class", "hit_points"]
    hp = changes[1]
    assert hp.old_value == 10
    assert hp.new_value == 7
    assert hp.label == "Puntos de golpe (PG)"
    assert hp.is_json_like is False


def test_diff_marks_json_like_fields():
    changes = diff({"actions": [{"name": "Cimeterre"}]}, {"actions": []}, MONSTER_FIELD_MANIFEST)
    assert len(changes) == 1
    assert changes[0].is_json_like is True


def test_policy_suppresses_skipped_fields():
    external = {"name": "Potion de soins", "description": None}
    local = {"name": "Potion de soins", "description": "Rend 2d4+2 PV."}

    assert [c.field for c in diff(external, local, ITEM_FIELD_MANIFEST)] == ["description"]

    policy = ComparisonPolicy.skipping(["description"])
    assert diff(external, local, ITEM_FIELD_MANIFEST, policy) == []
    assert policy.skip_field("description")
    assert not policy.skip_field("name")
