"""
Endpoints del historial de tomas
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from drugreminder.core.clock import Clock
from drugreminder.core.database import get_db
from drugreminder.core.dependencies import get_app_clock, get_current_user, verify_patient_access
from drugreminder.models.user import User
from drugreminder.schemas.adherence import AdherenceEventRecord
from drugreminder.services.history_service import HistoryService, format_history_as_text

router = APIRouter()


def _resolve_patient(current_user: User, patient_email: Optional[str], db: Session) -> str:
    target = patient_email or current_user.email
    verify_patient_access(current_user, target, db)
    return target


@router.get("/", response_model=List[AdherenceEventRecord])
async def get_history(
        patient_email: Optional[str] = Query(None, description="Paciente (solo para cuidadores)"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Historial de tomas, más reciente primero
    """
    target = _resolve_patient(current_user, patient_email, db)
    return HistoryService(db).get_history(target)


@router.get("/export", response_class=PlainTextResponse)
async def export_history(
        patient_email: Optional[str] = Query(None),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_app_clock)
):
    """
    Exportar el historial como texto plano
    """
    target = _resolve_patient(current_user, patient_email, db)
    events = HistoryService(db).get_history(target)
    return format_history_as_text(target, events, clock.now())
