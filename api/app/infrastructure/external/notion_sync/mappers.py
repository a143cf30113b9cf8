"""
Mapeos de paginas de Notion a campos del manifiesto.

Funciones puras, libres de I/O, para poder testearlas facilmente.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ItemDatabase:
    """Base de Notion que alimenta el catalogo de objetos."""

    key: str
    label: str
    default_category: str
    default_subcategory: Optional[str]


ITEM_DATABASES: Tuple[ItemDatabase, ...] = (
    ItemDatabase("armes", "Armes Magiques", "equipment", "weapon"),
    ItemDatabase("objets", "Objets et Objets Magiques", "misc", "objet_magique"),
    ItemDatabase("plantes", "Plantes", "misc", "plante"),
    ItemDatabase("poisons", "Poisons", "misc", "poison"),
)

# Tipos de "objets" que se equipan
EQUIPMENT_TYPES = ("anneau", "amulette", "bottes", "cape", "gants", "lunettes")

# Propiedades ya mapeadas a columnas: no van a "properties"
ITEM_MAPPED_PROPERTIES = (
    "Nom", "Name", "Titre", "Description", "Détails", "Notes", "Rareté", "Rarity", "Type",
)

EMPTY_TRAITS: Dict[str, List[Any]] = {
    "skills": [],
    "senses": [],
    "languages": [],
    "damage_resistances": [],
    "damage_immunities": [],
    "condition_immunities": [],
    "special_abilities": [],
}

# Bloques de texto que se vuelcan a la descripcion
TEXT_BLOCK_TYPES = (
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "bulleted_list_item",
    "numbered_list_item",
    "quote",
    "callout",
    "to_do",
    "toggle",
)


def plain_text(rich_text: Any) -> str:
    if not isinstance(rich_text, list):
        return ""
    return "".join((rt or {}).get("plain_text") or "" for rt in rich_text)


def prop_text(prop: Optional[Dict[str, Any]]) -> str:
    """Texto de una propiedad title o rich_text."""
    if not prop:
        return ""
    if "title" in prop:
        return plain_text(prop.get("title"))
    return plain_text(prop.get("rich_text"))


def prop_number(prop: Optional[Dict[str, Any]]) -> Optional[float]:
    if not prop:
        return None
    value = prop.get("number")
    if value is None and isinstance(prop.get("formula"), dict):
        value = prop["formula"].get("number")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if float(value).is_integer() else value


def prop_select(prop: Optional[Dict[str, Any]]) -> str:
    """Nombre de un select, o del primer valor de un multi_select."""
    if not prop:
        return ""
    select = prop.get("select")
    if isinstance(select, dict):
        return select.get("name") or ""
    options = prop.get("multi_select")
    if isinstance(options, list) and options:
        return (options[0] or {}).get("name") or ""
    return ""


def cover_url(page: Dict[str, Any]) -> Optional[str]:
    cover = page.get("cover") or {}
    return (cover.get("external") or {}).get("url") or (cover.get("file") or {}).get("url") or None


def _parse_json_or(text: str, fallback: Any) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return fallback


def map_monster_page(page: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convierte una pagina del bestiario de Notion a campos del manifiesto.

    Las propiedades usan los nombres franceses de la base (Nom, CA, PV, ...).
    Actions / Actions legendaires / Description pueden contener JSON; si no,
    el texto se envuelve en la estructura esperada.
    """
    props = page.get("properties") or {}

    actions_text = prop_text(props.get("Actions"))
    legendary_text = prop_text(props.get("Actions légendaires"))
    description_text = prop_text(props.get("Description"))

    actions = (
        _parse_json_or(actions_text, None) or [{"name": "Actions", "description": actions_text}]
        if actions_text else []
    )
    legendary_actions = (
        _parse_json_or(legendary_text, None)
        or [{"name": "Actions légendaires", "description": legendary_text}]
        if legendary_text else []
    )
    if description_text:
        traits = _parse_json_or(description_text, None) or {
            **EMPTY_TRAITS,
            "special_abilities": [{"name": "Description", "description": description_text}],
        }
    else:
        traits = dict(EMPTY_TRAITS)

    return {
        "name": prop_text(props.get("Nom")),
        "armor_class": prop_number(props.get("CA")),
        "hit_points": prop_number(props.get("PV")),
        "speed": prop_text(props.get("Vitesse")),
        "strength": prop_number(props.get("FOR")),
        "dexterity": prop_number(props.get("DEX")),
        "constitution": prop_number(props.get("CON")),
        "intelligence": prop_number(props.get("INT")),
        "wisdom": prop_number(props.get("SAG")),
        "charisma": prop_number(props.get("CHAR")),
        "strength_mod": prop_number(props.get("Modif. FOR")),
        "dexterity_mod": prop_number(props.get("Modif. DEX")),
        "constitution_mod": prop_number(props.get("Modif. CON")),
        "intelligence_mod": prop_number(props.get("Modif. INT")),
        "wisdom_mod": prop_number(props.get("Modif. SAG")),
        "charisma_mod": prop_number(props.get("Modif. CHAR")),
        "creature_type": prop_select(props.get("Race")) or prop_text(props.get("Race")),
        "size": prop_select(props.get("Taille")) or prop_text(props.get("Taille")),
        "challenge_rating_xp": prop_number(props.get("Puissance (XP)")),
        "actions": actions,
        "legendary_actions": legendary_actions,
        "traits": traits,
        "image_url": cover_url(page),
    }


def classify_item(database: ItemDatabase, item_type: str) -> Tuple[str, Optional[str]]:
    """
    Categoria y subcategoria de un objeto.
    Solo la base "objets" se reclasifica segun su propiedad Type.
    """
    if database.key != "objets" or not item_type:
        return database.default_category, database.default_subcategory

    lowered = item_type.strip().lower()
    if "potion" in lowered:
        return "consumable", "potion"
    if "flèche" in lowered or "fleche" in lowered:
        return "consumable", "fleche"
    if "parchemin" in lowered:
        return "consumable", "parchemin"
    if lowered in EQUIPMENT_TYPES:
        return "equipment", "objet_magique"
    return "misc", "objet_magique"


def _extra_property(prop: Dict[str, Any]) -> Any:
    if "rich_text" in prop:
        return plain_text(prop.get("rich_text")) or None
    if prop.get("number") is not None:
        return prop["number"]
    if prop.get("select"):
        return prop_select(prop) or None
    if "checkbox" in prop:
        return prop["checkbox"]
    formula = prop.get("formula")
    if isinstance(formula, dict):
        if formula.get("number") is not None:
            return formula["number"]
        return formula.get("string") or None
    return None


def map_item_page(page: Dict[str, Any], database: ItemDatabase) -> Dict[str, Any]:
    """
    Convierte una pagina de una base de objetos a campos del manifiesto.

    Returns:
        Dict: Campos; name es None si la pagina no tiene nombre
    """
    props = page.get("properties") or {}

    # Sin nombre se conserva igual: el apply lo rechaza con ValidationError
    name = prop_text(props.get("Nom")) or prop_text(props.get("Name")) or prop_text(props.get("Titre")) or None

    description = (
        prop_text(props.get("Description"))
        or prop_text(props.get("Détails"))
        or prop_text(props.get("Notes"))
        or None
    )
    rarity = prop_select(props.get("Rareté")) or prop_select(props.get("Rarity")) or None
    category, subcategory = classify_item(database, prop_select(props.get("Type")))

    properties: Dict[str, Any] = {}
    for key, prop in props.items():
        if key in ITEM_MAPPED_PROPERTIES or not isinstance(prop, dict):
            continue
        value = _extra_property(prop)
        if value is not None:
            properties[key] = value

    return {
        "name": name,
        "category": category,
        "subcategory": subcategory,
        "source_database": database.key,
        "description": description,
        "rarity": rarity,
        "properties": properties,
        "image_url": cover_url(page),
    }


def blocks_to_text(blocks: List[Dict[str, Any]]) -> str:
    """Texto plano de los bloques de una pagina, una linea por bloque."""
    lines: List[str] = []
    for block in blocks:
        block_type = block.get("type")
        if block_type not in TEXT_BLOCK_TYPES:
            continue
        text = plain_text((block.get(block_type) or {}).get("rich_text"))
        if not text:
            continue
        if block_type in ("bulleted_list_item", "numbered_list_item"):
            text = f"- {text}"
        lines.append(text)
    return "\n".join(lines).strip()
