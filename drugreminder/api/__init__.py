"""
Router principal de la API
"""
from fastapi import APIRouter, Depends
from drugreminder.core.config import get_settings
from drugreminder.core.dependencies import get_current_user

# Importar todos los routers
from . import auth, medications, caregivers, history, notifications, reminders

settings = get_settings()

# Router principal de la API
api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    medications.router,
    prefix="/medications",
    tags=["medications"],
    dependencies=[Depends(get_current_user)]
)

api_router.include_router(
    caregivers.router,
    prefix="/caregivers",
    tags=["caregivers"],
    dependencies=[Depends(get_current_user)]
)

api_router.include_router(
    history.router,
    prefix="/history",
    tags=["history"],
    dependencies=[Depends(get_current_user)]
)

api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["notifications"],
    dependencies=[Depends(get_current_user)]
)

api_router.include_router(
    reminders.router,
    prefix="/reminders",
    tags=["reminders"],
    dependencies=[Depends(get_current_user)]
)


@api_router.get("/health")
async def api_health():
    """Health check específico de la API"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION
    }
