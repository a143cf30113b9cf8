"""
Endpoints para sincronizacion de catalogos con Notion.
Permite revisar los cambios (preview) y aplicar una seleccion desde la UI.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.v1.dependencies.use_case_deps import (
    get_catalog_sync_use_cases,
    get_item_sync_use_cases,
)
from app.application.dto.sync_dto import (
    RefreshDescriptionsResponseDTO,
    SyncApplyRequestDTO,
    SyncApplyResponseDTO,
    SyncPreviewResponseDTO,
    SyncStatusResponseDTO,
)
from app.application.use_cases.catalog_sync_use_cases import CatalogSyncUseCases
from app.shared.constants.field_manifests import CatalogKind


router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post(
    "/items/refresh-descriptions",
    response_model=RefreshDescriptionsResponseDTO,
    summary="Completar descripciones faltantes desde Notion"
)
async def refresh_item_descriptions(
    use_cases: CatalogSyncUseCases = Depends(get_item_sync_use_cases),
) -> RefreshDescriptionsResponseDTO:
    """
    Trae el contenido de las paginas de Notion para los objetos locales sin
    descripcion y actualiza los inventarios que los referencian.
    """
    return await use_cases.refresh_descriptions()


@router.post(
    "/{catalog}/preview",
    response_model=SyncPreviewResponseDTO,
    summary="Previsualizar cambios entre Notion y la base local"
)
async def preview_sync(
    catalog: CatalogKind,
    fetch_content: Optional[bool] = Query(
        default=None,
        description="Si True, trae tambien el contenido de cada pagina (mas lento)."
    ),
    use_cases: CatalogSyncUseCases = Depends(get_catalog_sync_use_cases),
) -> SyncPreviewResponseDTO:
    """
    Compara Notion con la base local sin escribir nada.
    Devuelve los items clasificados y la seleccion por defecto.
    """
    return await use_cases.preview(fetch_content=fetch_content)


@router.post(
    "/{catalog}/apply",
    response_model=SyncApplyResponseDTO,
    summary="Aplicar los cambios seleccionados"
)
async def apply_sync(
    catalog: CatalogKind,
    dto: SyncApplyRequestDTO,
    use_cases: CatalogSyncUseCases = Depends(get_catalog_sync_use_cases),
) -> SyncApplyResponseDTO:
    """
    Aplica la seleccion en orden delete -> update -> add con datos frescos
    de Notion. Los fallos por item se devuelven en errors.
    """
    return await use_cases.apply(dto.operations)


@router.get(
    "/{catalog}/status",
    response_model=SyncStatusResponseDTO,
    summary="Estado de conexion con las bases de Notion"
)
async def sync_status(
    catalog: CatalogKind,
    use_cases: CatalogSyncUseCases = Depends(get_catalog_sync_use_cases),
) -> SyncStatusResponseDTO:
    return await use_cases.status()


@router.post(
    "/{catalog}",
    response_model=SyncApplyResponseDTO,
    status_code=status.HTTP_200_OK,
    summary="Sincronizar todo (altas y actualizaciones)"
)
async def sync_catalog(
    catalog: CatalogKind,
    use_cases: CatalogSyncUseCases = Depends(get_catalog_sync_use_cases),
) -> SyncApplyResponseDTO:
    """
    Preview + seleccion por defecto + apply en una sola llamada.
    Nunca elimina registros locales.
    """
    return await use_cases.sync_all()
