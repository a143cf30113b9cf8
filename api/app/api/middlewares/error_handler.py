"""
Middleware para manejo centralizado de errores no controlados.

Las AppException las resuelve el exception handler de main.py; aqui solo
llegan errores inesperados (bugs, base caida, etc.).
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from app.shared.exceptions.base import AppException


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware para capturar y manejar errores de forma centralizada."""

    async def dispatch(self, request: Request, call_next):
        """
        Procesa la petición y captura errores.

        Args:
            request: Petición HTTP
            call_next: Siguiente middleware/handler

        Returns:
            Response: Respuesta HTTP
        """
        try:
            return await call_next(request)
        except AppException as exc:
            return JSONResponse(status_code=exc.status_code, content=exc.to_response())
        except SQLAlchemyError:
            logger.exception(f"Error de base de datos en {request.method} {request.url.path}")
            return _error_response(
                "DATABASE_ERROR",
                "No se pudo acceder a la base de datos local",
            )
        except Exception:
            logger.exception(f"Error no manejado en {request.method} {request.url.path}")
            return _error_response(
                "INTERNAL_SERVER_ERROR",
                "Ha ocurrido un error interno del servidor",
            )


def _error_response(error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": error_code,
            "message": message,
            "details": {},
        },
    )
