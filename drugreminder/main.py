"""
Archivo principal de la aplicación FastAPI - Drug Reminder
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from drugreminder.core.clock import get_clock
from drugreminder.core.config import get_settings
from drugreminder.core.database import create_tables, test_connection, get_db_info
from drugreminder.core.scheduler import start_periodic_task, stop_periodic_tasks
from drugreminder.api import api_router
from drugreminder.services.reminder_evaluator import ReminderEvaluator
from drugreminder.store.base import StoreUnavailableError
from drugreminder.store.sql import SqlAdherenceLog, SqlNotificationSink, SqlScheduleStore
import logging

settings = get_settings()

# Configurar logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_reminder_evaluator() -> ReminderEvaluator:
    """Evaluador con los almacenes SQL y el reloj de la aplicación"""
    return ReminderEvaluator(
        schedule_store=SqlScheduleStore(),
        adherence_log=SqlAdherenceLog(),
        notification_sink=SqlNotificationSink(),
        clock=get_clock(),
        tolerance_minutes=settings.REMINDER_TOLERANCE_MINUTES
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestión del ciclo de vida de la aplicación"""
    # Startup
    logger.info("🚀 Iniciando Drug Reminder API...")
    logger.info(f"🌍 Ambiente: {settings.ENVIRONMENT}")
    logger.info(f"🔑 Debug: {settings.DEBUG}")

    if test_connection():
        logger.info("✅ Conexión a la base de datos exitosa")

        db_info = get_db_info()
        if db_info:
            logger.info(f"📊 {db_info['dialect']} {db_info['server_version']} - DB: {db_info['database_name']}")

        try:
            create_tables()
            logger.info("✅ Esquema de base de datos verificado")
        except Exception as e:
            logger.error(f"❌ Error al verificar esquema: {e}")
    else:
        logger.error("❌ Error de conexión a la base de datos")
        logger.warning("⚠️ La aplicación continuará pero sin base de datos")

    if settings.REMINDERS_ENABLED:
        evaluator = build_reminder_evaluator()
        start_periodic_task(
            app,
            name="medication-reminders",
            interval_minutes=settings.REMINDER_INTERVAL_MINUTES,
            handler=evaluator.handle,
            logger=logger,
            retry_backoff_seconds=settings.REMINDER_RETRY_BACKOFF_SECONDS,
            run_timeout_seconds=settings.REMINDER_RUN_TIMEOUT_SECONDS,
        )
        logger.info(f"⏰ Recordatorios cada {settings.REMINDER_INTERVAL_MINUTES} minutos")
    else:
        logger.info("⏸️ Recordatorios desactivados")

    logger.info("🎯 Drug Reminder API lista para recibir requests")
    yield

    # Shutdown
    logger.info("🛑 Cerrando Drug Reminder API...")
    await stop_periodic_tasks(app, logger=logger)


def create_application() -> FastAPI:
    """Factory function para crear la aplicación FastAPI"""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="""
## Drug Reminder API

Recordatorios diarios de medicamentos para pacientes y sus cuidadores.

### Características principales:
- 💊 Medicamentos con hora diaria y rango de fechas
- ⏰ Evaluación periódica y notificaciones (una por medicamento y día)
- ✅ Respuestas "tomado" / "no tomado" en el historial
- 👥 Cuidadores con acceso a los medicamentos de sus pacientes
        """,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    setup_middlewares(app)
    setup_exception_handlers(app)
    setup_routes(app)

    return app


def setup_middlewares(app: FastAPI):
    """Configurar middlewares de la aplicación"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info(f"🌐 Orígenes permitidos: {settings.CORS_ORIGINS}")


def setup_exception_handlers(app: FastAPI):
    """Errores del almacén como 503"""

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
        logger.error(f"❌ Almacén no disponible en {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Base de datos no disponible"}
        )


def setup_routes(app: FastAPI):
    """Configurar rutas de la aplicación"""

    @app.get("/")
    async def root():
        return {
            "message": "💊 Drug Reminder API",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs",
            "health": "/health",
            "api": "/api"
        }

    @app.get("/health")
    async def health_check():
        """Health check completo de la aplicación"""
        db_status = "connected" if test_connection() else "disconnected"

        health_status = {
            "status": "healthy" if db_status == "connected" else "degraded",
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "database": {
                "status": db_status
            },
            "reminders": {
                "enabled": settings.REMINDERS_ENABLED,
                "interval_minutes": settings.REMINDER_INTERVAL_MINUTES
            },
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        if settings.DEBUG:
            db_info = get_db_info()
            if db_info:
                health_status["database"].update(db_info)

        return health_status

    app.include_router(
        api_router,
        prefix="/api"
    )

    logger.info("🛣️ Rutas configuradas correctamente")


# Crear la aplicación
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "drugreminder.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=settings.DEBUG,
    )
