"""
Servicios de aplicacion.

Contiene la logica de reconciliacion reutilizable que no pertenece
a un caso de uso especifico.
"""
from app.application.services.field_comparator import ComparisonPolicy, diff, values_equal
from app.application.services.preview_builder import build_change_set, summarize
from app.application.services.selection import (
    default_selection,
    is_item_selected,
    set_item_selected,
    set_field_selected,
)
from app.application.services.content_loader import ContentBatchResult, fetch_contents
from app.application.services.cascade_updater import CascadeUpdater
from app.application.services.apply_engine import ApplyEngine

__all__ = [
    # Comparacion y preview
    "ComparisonPolicy",
    "diff",
    "values_equal",
    "build_change_set",
    "summarize",
    # Seleccion
    "default_selection",
    "is_item_selected",
    "set_item_selected",
    "set_field_selected",
    # Apply
    "ContentBatchResult",
    "fetch_contents",
    "CascadeUpdater",
    "ApplyEngine",
]
