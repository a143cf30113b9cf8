"""
Punto de entrada principal de la aplicación FastAPI.
Sincronizacion de los catalogos de la campaña (bestiario y objetos) desde Notion.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings, get_cors_origins
from app.core.events import lifespan
from app.api.v1.router import api_router
from app.api.middlewares.error_handler import ErrorHandlerMiddleware
from app.shared.exceptions.base import AppException


def _notion_databases() -> dict:
    """Bases de Notion configuradas por catalogo (sin exponer IDs)."""
    item_ids = (
        settings.NOTION_ITEMS_ARMES_DATABASE_ID,
        settings.NOTION_ITEMS_OBJETS_DATABASE_ID,
        settings.NOTION_ITEMS_PLANTES_DATABASE_ID,
        settings.NOTION_ITEMS_POISONS_DATABASE_ID,
    )
    return {
        "token": bool(settings.NOTION_API_TOKEN),
        "monsters": 1 if settings.NOTION_MONSTERS_DATABASE_ID else 0,
        "items": sum(1 for database_id in item_ids if database_id),
    }


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Backend de sincronizacion de catalogos (bestiario y objetos) con Notion",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    cors_origins = get_cors_origins(settings.CORS_ORIGINS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(ErrorHandlerMiddleware)

    application.include_router(api_router, prefix="/api")

    # FetchError -> 502, ItemNotFoundError -> 404, ...
    @application.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response()
        )

    # Mismo formato de error para parametros invalidos (p.ej. catalogo desconocido)
    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "REQUEST_VALIDATION_ERROR",
                "message": "Parametros invalidos",
                "details": {"errors": jsonable_errors(exc)},
            },
        )

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Estado de la aplicación y de la configuracion de Notion."""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "notion_databases": _notion_databases(),
        }

    return application


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# Crear instancia de la aplicación
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
