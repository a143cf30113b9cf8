"""
Manifiestos de campos comparables por catalogo.

Cada manifiesto es una lista cerrada y ordenada de (campo, etiqueta, tipo de
igualdad). Agregar un campo comparable = agregar una entrada aqui.
Los campos propios del lado local (p.ej. ai_generated) NO se listan: nunca
aparecen en un diff ni se sobreescriben desde la fuente externa.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class EqualityKind(str, Enum):
    """Regla de comparacion de un campo."""
    SCALAR = "scalar"
    JSON_LIKE = "json_like"


class CatalogKind(str, Enum):
    """Catalogos sincronizados con Notion."""
    MONSTERS = "monsters"
    ITEMS = "items"


@dataclass(frozen=True)
class FieldSpec:
    """Entrada del manifiesto."""

    name: str
    label: str
    kind: EqualityKind = EqualityKind.SCALAR

    @property
    def is_json_like(self) -> bool:
        return self.kind is EqualityKind.JSON_LIKE


FieldManifest = Tuple[FieldSpec, ...]


MONSTER_FIELD_MANIFEST: FieldManifest = (
    FieldSpec("name", "Nombre"),
    FieldSpec("armor_class", "Clase de armadura (CA)"),
    FieldSpec("hit_points", "Puntos de golpe (PG)"),
    FieldSpec("speed", "Velocidad"),
    FieldSpec("strength", "Fuerza"),
    FieldSpec("dexterity", "Destreza"),
    FieldSpec("constitution", "Constitucion"),
    FieldSpec("intelligence", "Inteligencia"),
    FieldSpec("wisdom", "Sabiduria"),
    FieldSpec("charisma", "Carisma"),
    FieldSpec("strength_mod", "Mod. FUE"),
    FieldSpec("dexterity_mod", "Mod. DES"),
    FieldSpec("constitution_mod", "Mod. CON"),
    FieldSpec("intelligence_mod", "Mod. INT"),
    FieldSpec("wisdom_mod", "Mod. SAB"),
    FieldSpec("charisma_mod", "Mod. CAR"),
    FieldSpec("creature_type", "Tipo de criatura"),
    FieldSpec("size", "Tamaño"),
    FieldSpec("challenge_rating_xp", "Desafio (XP)"),
    FieldSpec("actions", "Acciones", EqualityKind.JSON_LIKE),
    FieldSpec("legendary_actions", "Acciones legendarias", EqualityKind.JSON_LIKE),
    FieldSpec("traits", "Rasgos", EqualityKind.JSON_LIKE),
    FieldSpec("image_url", "URL de imagen"),
)

ITEM_FIELD_MANIFEST: FieldManifest = (
    FieldSpec("name", "Nombre"),
    FieldSpec("category", "Categoria"),
    FieldSpec("subcategory", "Subcategoria"),
    FieldSpec("source_database", "Base de origen"),
    FieldSpec("description", "Descripcion"),
    FieldSpec("rarity", "Rareza"),
    FieldSpec("properties", "Propiedades", EqualityKind.JSON_LIKE),
    FieldSpec("image_url", "Imagen"),
)

# Campo que Notion solo entrega pidiendo el contenido de la pagina
ITEM_CONTENT_FIELD = "description"

# Campos cacheados dentro de los inventarios de personajes
CASCADE_FIELDS: Tuple[str, ...] = ("name", "description", "rarity")

# Campo identificador requerido en altas y actualizaciones
REQUIRED_FIELD = "name"

# Clave del link al registro externo en las tablas locales
EXTERNAL_ID_FIELD = "external_id"


@dataclass(frozen=True)
class CatalogDefinition:
    """Describe un catalogo sincronizable."""

    kind: CatalogKind
    entity_label: str
    manifest: FieldManifest
    content_field: Optional[str] = None
    cascade_enabled: bool = False

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.manifest)


MONSTER_CATALOG = CatalogDefinition(
    kind=CatalogKind.MONSTERS,
    entity_label="Monstruo",
    manifest=MONSTER_FIELD_MANIFEST,
)

ITEM_CATALOG = CatalogDefinition(
    kind=CatalogKind.ITEMS,
    entity_label="Objeto",
    manifest=ITEM_FIELD_MANIFEST,
    content_field=ITEM_CONTENT_FIELD,
    cascade_enabled=True,
)

CATALOGS = {
    CatalogKind.MONSTERS: MONSTER_CATALOG,
    CatalogKind.ITEMS: ITEM_CATALOG,
}
