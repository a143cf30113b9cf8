"""
Entidades de catalogo: registros externos (Notion), registros locales y
registros dependientes que cachean campos del catalogo.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ExternalRecord:
    """
    Registro tal como lo entrega la fuente externa, normalizado a nombres de
    campo del manifiesto.

    content_loaded es False cuando los campos de contenido pesado (p.ej.
    description) no se pidieron; en ese caso su valor no es confiable.
    """

    external_id: str
    fields: Dict[str, Any]
    content_loaded: bool = True

    @property
    def name(self) -> Optional[str]:
        return self.fields.get("name")

    def with_content(self, content: Dict[str, Any]) -> "ExternalRecord":
        """Retorna una copia con los campos de contenido cargados."""
        return replace(self, fields={**self.fields, **content}, content_loaded=True)


@dataclass
class LocalRecord:
    """Registro del almacen relacional."""

    id: int
    external_id: Optional[str]
    fields: Dict[str, Any]
    local_fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        return self.fields.get("name")

    @property
    def is_linked(self) -> bool:
        """True si el registro proviene de la fuente externa."""
        return bool(self.external_id)


@dataclass
class DependentRecord:
    """
    Registro con copias desnormalizadas de campos del catalogo
    (inventario de un personaje).

    inventory mantiene la forma del JSON persistido:
    {"equipment": [...], "consumables": [...], "items": [...], "currency": {...}}
    """

    id: int
    name: str
    inventory: Dict[str, Any]
    updated_at: Optional[datetime] = None
