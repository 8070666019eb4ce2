"""
Configuración de base de datos con SQLAlchemy
"""
import contextlib
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool
import logging

# Crear Base ANTES de importar config para evitar import circular
Base = declarative_base()

from drugreminder.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _build_engine():
    """Crear engine según el dialecto configurado"""
    if settings.is_sqlite:
        # SQLite: las sesiones se abren desde el threadpool de FastAPI
        return create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False, "timeout": 10.0},
            echo=settings.DEBUG,
        )

    return create_engine(
        settings.database_url,
        poolclass=QueuePool,
        pool_size=20,
        max_overflow=30,
        pool_pre_ping=True,
        pool_recycle=3600,  # Reciclar conexiones cada hora
        echo=settings.DEBUG,  # Solo mostrar SQL en debug
    )


engine = _build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """
    Dependency para obtener sesión de base de datos
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextlib.contextmanager
def session_scope() -> Iterator[Session]:
    """
    Sesión con alcance (para uso con with).

    Commit al terminar sin errores, rollback si hay excepción.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_tables():
    """
    Crear todas las tablas si no existen
    """
    try:
        # Importar todos los modelos para que se registren
        from drugreminder.models import user, medication, adherence_event, notification  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("✅ Tablas creadas/verificadas exitosamente")

    except Exception as e:
        logger.error(f"❌ Error al crear tablas: {e}")
        raise


def drop_tables():
    """
    Eliminar todas las tablas (usar con cuidado)
    """
    Base.metadata.drop_all(bind=engine)
    logger.warning("⚠️ Todas las tablas han sido eliminadas")


def test_connection() -> bool:
    """
    Probar conexión a la base de datos
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.error(f"❌ Error de conexión a la base de datos: {e}")
        return False


def get_db_info():
    """
    Obtener información de la base de datos
    """
    try:
        with engine.connect() as conn:
            version = conn.dialect.server_version_info
        return {
            "dialect": engine.dialect.name,
            "server_version": ".".join(str(part) for part in version) if version else None,
            "database_name": engine.url.database,
        }
    except Exception as e:
        logger.error(f"Error al obtener info de DB: {e}")
        return None
