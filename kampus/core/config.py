"""Configuración de la aplicación mediante variables de entorno."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuración cargada desde .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Kampus API"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # MODO DESARROLLO: desactiva la verificación de permisos y autentica las
    # peticiones sin token con un administrador creado automáticamente.
    # Nunca activar en producción.
    modo_desarrollo: bool = False
    admin_dev_email: str = "admin@example.com"
    admin_dev_password: str = "123456"

    # JWT
    jwt_secret_key: str = "cambiar-en-produccion-clave-secreta-muy-segura"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24  # 24 horas
    token_refresh_minutes: int = 60

    # Paginación
    per_page_default: int = 10
    per_page_max: int = 100

    # Cliente HTTP
    api_base_url: str = "http://localhost:8000/api/v1"
    cliente_timeout_segundos: float = 10.0
    cliente_per_page_referencias: int = 100

    # PostgreSQL
    database_url: str | None = None
    postgres_host: str = "127.0.0.1"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "kampus"

    @property
    def database_url_async(self) -> str:
        """URL para SQLAlchemy con driver asyncpg (uso en la app)."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
