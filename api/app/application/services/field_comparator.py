"""
Comparador campo a campo entre un registro externo y uno local.

Reglas de igualdad (por tipo del manifiesto):
- SCALAR: None, "" y strings en blanco caen en el mismo balde "vacio";
  los strings se comparan sin espacios extremos.
- JSON_LIKE: se compara la serializacion canonica (claves ordenadas).
  Un string con JSON se parsea antes. None, "", {} y [] son "vacio".

Los valores reportados en FieldChange son los originales, sin normalizar,
para mostrarlos al usuario.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, List, Mapping

from app.domain.entities.sync import FieldChange
from app.shared.constants.field_manifests import EqualityKind, FieldSpec


class _Empty:
    """Centinela del balde vacio."""

    def __repr__(self) -> str:
        return "<EMPTY>"


EMPTY = _Empty()


@dataclass(frozen=True)
class ComparisonPolicy:
    """
    Politica de comparacion.

    skipped_fields suprime campos completos del diff. Se usa cuando la fuente
    externa no trajo el contenido pesado: un valor local poblado nunca debe
    marcarse como cambiado contra un valor externo ausente.
    """

    skipped_fields: FrozenSet[str] = frozenset()

    def skip_field(self, field_name: str) -> bool:
        return field_name in self.skipped_fields

    @classmethod
    def skipping(cls, field_names: Iterable[str]) -> "ComparisonPolicy":
        return cls(skipped_fields=frozenset(field_names))


DEFAULT_POLICY = ComparisonPolicy()


def normalize_scalar(value: Any) -> Any:
    if value is None:
        return EMPTY
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else EMPTY
    return value


def canonical_json(value: Any) -> Any:
    """
    Serializacion canonica de un valor tipo JSON, o EMPTY.
    """
    if value is None:
        return EMPTY
    if isinstance(value, str):
        if not value.strip():
            return EMPTY
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            # Texto plano: se compara tal cual
            return json.dumps(value.strip(), ensure_ascii=False)
    if isinstance(value, (dict, list, tuple)) and len(value) == 0:
        return EMPTY
    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)


def values_equal(spec: FieldSpec, old_value: Any, new_value: Any) -> bool:
    """Igualdad normalizada segun el tipo del campo."""
    if spec.kind is EqualityKind.JSON_LIKE:
        return canonical_json(old_value) == canonical_json(new_value)
    return normalize_scalar(old_value) == normalize_scalar(new_value)


def diff(
    external: Mapping[str, Any],
    local: Mapping[str, Any],
    manifest: Iterable[FieldSpec],
    policy: ComparisonPolicy = DEFAULT_POLICY,
) -> List[FieldChange]:
    """
    Compara los campos del manifiesto y retorna los que difieren.

    Args:
        external: Campos del registro externo (valores nuevos)
        local: Campos del registro local (valores actuales)
        manifest: Campos a comparar, en orden
        policy: Campos suprimidos

    Returns:
        List[FieldChange]: Cambios en el orden del manifiesto
    """
    changes: List[FieldChange] = []
    for spec in manifest:
        if policy.skip_field(spec.name):
            continue

        old_value = local.get(spec.name)
        new_value = external.get(spec.name)
        if values_equal(spec, old_value, new_value):
            continue

        changes.append(
            FieldChange(
                field=spec.name,
                label=spec.label,
                old_value=old_value,
                new_value=new_value,
                is_json_like=spec.is_json_like,
            )
        )
    return changes
