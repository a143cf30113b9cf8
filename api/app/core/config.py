"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.
Soporta configuracion dinamica para desarrollo (ENVIRONMENT=development)
y produccion (ENVIRONMENT=production).
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    Configuracion de desarrollo vs produccion:
    - ENVIRONMENT: 'development' o 'production'
    - DATABASE_URL se puede especificar completa o por componentes
    - Las bases de Notion sin ID configurado se omiten en la sincronizacion
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="Compendio de Campaña - Sincronizacion de Catalogo")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos - Componentes separados (recomendado para flexibilidad)
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="dnd")
    DATABASE_PASSWORD: str = Field(default="dnd")
    DATABASE_NAME: str = Field(default="dnd_tracker")

    # Base de datos - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # Notion (fuente externa del catalogo)
    NOTION_API_TOKEN: str = Field(default="")
    NOTION_API_URL: str = Field(default="https://api.notion.com/v1")
    NOTION_VERSION: str = Field(default="2022-06-28")
    NOTION_MONSTERS_DATABASE_ID: str = Field(default="")
    NOTION_ITEMS_ARMES_DATABASE_ID: str = Field(default="")
    NOTION_ITEMS_OBJETS_DATABASE_ID: str = Field(default="")
    NOTION_ITEMS_PLANTES_DATABASE_ID: str = Field(default="")
    NOTION_ITEMS_POISONS_DATABASE_ID: str = Field(default="")
    # Timeout por request (segundos) y reintentos ante 429/5xx
    NOTION_TIMEOUT_S: float = Field(default=30.0)
    NOTION_MAX_RETRIES: int = Field(default=4)
    NOTION_MIN_BACKOFF_S: float = Field(default=0.5)
    NOTION_MAX_BACKOFF_S: float = Field(default=10.0)

    # Sincronizacion
    # Tamaño de lote para traer contenido de paginas (limite de Notion ~3 req/s)
    SYNC_CONTENT_BATCH_SIZE: int = Field(default=10)
    # El preview no trae contenido pesado por defecto (descripciones)
    SYNC_PREVIEW_FETCH_CONTENT: bool = Field(default=False)

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la URL de base de datos efectiva.
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la URL desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


# Instancia global de configuracion
settings = Settings()
