"""
CLI: Notion -> base local (sync de catalogos).

Uso recomendado:
  - Revisar primero con --preview.
  - Ejecutar sin flags para aplicar la seleccion por defecto (altas y
    actualizaciones, nunca borrados).

Variables de entorno requeridas:
  - NOTION_API_TOKEN
  - NOTION_MONSTERS_DATABASE_ID (monsters)
  - NOTION_ITEMS_*_DATABASE_ID (items, al menos una)
  - DATABASE_URL

Ejecucion:
  python scripts/notion_sync.py monsters --preview
  python scripts/notion_sync.py items
  python scripts/notion_sync.py items --refresh-descriptions
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raiz `app/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

load_dotenv(_API_ROOT / ".env", override=False)

from app.api.v1.dependencies.use_case_deps import build_catalog_sync_use_cases, get_notion_client
from app.infrastructure.database.session import AsyncSessionLocal, close_db
from app.shared.constants.field_manifests import CatalogKind
from app.shared.exceptions.sync import FetchError


async def _run(catalog: CatalogKind, preview: bool, refresh_descriptions: bool) -> int:
    clients = get_notion_client()
    client = await clients.__anext__()
    try:
        async with AsyncSessionLocal() as session:
            use_cases = build_catalog_sync_use_cases(catalog, session, client)

            if preview:
                result = await use_cases.preview(fetch_content=False)
                for item in result.items:
                    if item.action == "unchanged":
                        continue
                    fields = ", ".join(change.field for change in item.changed_fields)
                    logger.info(f"[{item.action}] {item.name} ({item.external_id}) {fields}")
                summary = result.summary
                logger.info(
                    f"Total={summary.total} add={summary.to_add} update={summary.to_update} "
                    f"delete={summary.to_delete} unchanged={summary.unchanged}"
                )
                return 0

            if refresh_descriptions:
                refreshed = await use_cases.refresh_descriptions()
                logger.info(f"Descripciones actualizadas: {refreshed.updated}/{refreshed.total}")
                for error in refreshed.errors:
                    logger.warning(error)
                return 0

            applied = await use_cases.sync_all()
            logger.info(
                f"Sync {applied.outcome}: added={applied.added}, updated={applied.updated}, "
                f"deleted={applied.deleted}"
            )
            for error in applied.errors:
                logger.warning(error)
            return 0 if applied.success else 1
    except FetchError as e:
        logger.error(f"No se pudo leer Notion: {e.message}")
        return 2
    finally:
        await clients.aclose()
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("catalog", choices=[kind.value for kind in CatalogKind])
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Solo muestra los cambios detectados (no escribe).",
    )
    parser.add_argument(
        "--refresh-descriptions",
        action="store_true",
        help="Completa descripciones faltantes desde el contenido de las paginas.",
    )
    args = parser.parse_args()

    return asyncio.run(_run(CatalogKind(args.catalog), args.preview, args.refresh_descriptions))


if __name__ == "__main__":
    raise SystemExit(main())
