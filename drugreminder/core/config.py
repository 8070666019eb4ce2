"""
Configuración de la aplicación (base de datos, JWT y recordatorios)
"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, validator


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # Información del proyecto
    PROJECT_NAME: str = Field(default="Drug Reminder API", env="PROJECT_NAME")
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="production", env="ENVIRONMENT")
    DEBUG: bool = Field(default=False, env="DEBUG")

    # Configuración del servidor
    HOST: str = Field(default="0.0.0.0", env="HOST")
    PORT: int = Field(default=8081, env="PORT")

    # Seguridad
    SECRET_KEY: str = Field(env="SECRET_KEY")
    ALGORITHM: str = Field(default="HS256", env="ALGORITHM")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30, env="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Base de datos MySQL
    DB_HOST: str = Field(default="localhost", env="DB_HOST")
    DB_PORT: int = Field(default=3306, env="DB_PORT")
    DB_NAME: str = Field(default="drugreminder", env="DB_NAME")
    DB_USER: str = Field(default="drugreminder", env="DB_USER")
    DB_PASSWORD: str = Field(default="", env="DB_PASSWORD")
    DB_CHARSET: str = Field(default="utf8mb4", env="DB_CHARSET")

    # URL completa (sobrescribe DB_*; útil para SQLite en desarrollo y tests)
    DATABASE_URL: str = Field(default="", env="DATABASE_URL")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173"
        ],
        env="CORS_ORIGINS"
    )

    # Recordatorios
    REMINDERS_ENABLED: bool = Field(default=True, env="REMINDERS_ENABLED")
    REMINDER_INTERVAL_MINUTES: int = Field(default=15, env="REMINDER_INTERVAL_MINUTES")
    REMINDER_TOLERANCE_MINUTES: int = Field(default=5, env="REMINDER_TOLERANCE_MINUTES")
    REMINDER_RETRY_BACKOFF_SECONDS: float = Field(default=60.0, env="REMINDER_RETRY_BACKOFF_SECONDS")
    REMINDER_RUN_TIMEOUT_SECONDS: float = Field(default=600.0, env="REMINDER_RUN_TIMEOUT_SECONDS")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")

    # Zona horaria del reloj de pared ("hoy" y "ahora" de los recordatorios)
    DEFAULT_TIMEZONE: str = Field(default="Europe/Warsaw", env="DEFAULT_TIMEZONE")

    @validator('REMINDER_INTERVAL_MINUTES')
    def validate_interval(cls, v):
        # Intervalo mínimo que admite el planificador en segundo plano
        if v < 15:
            raise ValueError('El intervalo de recordatorios debe ser de al menos 15 minutos')
        return v

    @validator('REMINDER_TOLERANCE_MINUTES')
    def validate_tolerance(cls, v):
        if v < 0:
            raise ValueError('La tolerancia no puede ser negativa')
        return v

    @property
    def database_url(self) -> str:
        """Construir URL de conexión"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            f"?charset={self.DB_CHARSET}"
        )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Obtener configuración con cache"""
    return Settings()
