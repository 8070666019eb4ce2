"""
Dependencias globales de la aplicación
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional

from drugreminder.core.clock import Clock, get_clock
from drugreminder.core.config import get_settings
from drugreminder.core.database import get_db
from drugreminder.core.security import verify_token
from drugreminder.models.medication import Medication
from drugreminder.models.user import User, UserRole
from drugreminder.services.auth_service import AuthService
from drugreminder.services.reminder_evaluator import ReminderEvaluator
from drugreminder.store.base import AdherenceLog, NotificationSink, ScheduleStore
from drugreminder.store.sql import SqlAdherenceLog, SqlNotificationSink, SqlScheduleStore

settings = get_settings()

# Configurar OAuth2
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="api/auth/login",
    auto_error=False
)


async def get_current_user(
        token: Optional[str] = Depends(oauth2_scheme),
        db: Session = Depends(get_db)
) -> User:
    """
    Obtener usuario actual del token JWT
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudo validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    payload = verify_token(token)
    email: Optional[str] = payload.get("sub")
    if email is None:
        raise credentials_exception

    user = AuthService(db).get_user_by_email(email)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Usuario inactivo"
        )

    return user


async def get_patient_user(
        current_user: User = Depends(get_current_user)
) -> User:
    """
    Verificar que el usuario sea paciente
    """
    if current_user.role != UserRole.PATIENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo el paciente puede realizar esta acción"
        )
    return current_user


async def get_caregiver_user(
        current_user: User = Depends(get_current_user)
) -> User:
    """
    Verificar que el usuario sea cuidador
    """
    if current_user.role != UserRole.CAREGIVER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No tienes permisos de cuidador"
        )
    return current_user


def verify_patient_access(user: User, patient_email: str, db: Session):
    """
    Verificar que el usuario pueda ver los datos del paciente:
    el propio paciente o uno de sus cuidadores.
    """
    if user.email == patient_email:
        return True

    if user.is_caregiver and AuthService(db).is_caregiver_of(user.email, patient_email):
        return True

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="No tienes acceso a este paciente"
    )


def verify_medication_owner(user: User, medication: Medication):
    """
    Solo el propietario puede modificar o marcar su medicamento
    """
    if medication.owner_email != user.email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo el propietario puede modificar este medicamento"
        )


# Almacenes (sustituibles con app.dependency_overrides)
def get_schedule_store() -> ScheduleStore:
    return SqlScheduleStore()


def get_adherence_log() -> AdherenceLog:
    return SqlAdherenceLog()


def get_notification_sink() -> NotificationSink:
    return SqlNotificationSink()


def get_app_clock() -> Clock:
    return get_clock()


def get_reminder_evaluator(
        schedule_store: ScheduleStore = Depends(get_schedule_store),
        adherence_log: AdherenceLog = Depends(get_adherence_log),
        notification_sink: NotificationSink = Depends(get_notification_sink),
        clock: Clock = Depends(get_app_clock)
) -> ReminderEvaluator:
    """
    Evaluador con los almacenes de la aplicación
    """
    return ReminderEvaluator(
        schedule_store=schedule_store,
        adherence_log=adherence_log,
        notification_sink=notification_sink,
        clock=clock,
        tolerance_minutes=settings.REMINDER_TOLERANCE_MINUTES
    )
