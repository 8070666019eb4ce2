"""
Implementaciones SQLAlchemy de las interfaces del almacén.

Cada llamada abre una sesión corta dentro del threadpool de FastAPI para no
bloquear el event loop; los errores de SQLAlchemy se convierten en
StoreUnavailableError (fallo transitorio).
"""
from contextlib import AbstractContextManager
from typing import Callable, List, TypeVar
import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from drugreminder.core.database import session_scope
from drugreminder.schemas.adherence import AdherenceEventCreate, AdherenceEventRecord
from drugreminder.schemas.medication import MedicationRecord
from drugreminder.schemas.user import UserRecord
from drugreminder.services.auth_service import AuthService
from drugreminder.services.history_service import HistoryService
from drugreminder.services.medication_service import MedicationService
from drugreminder.services.notification_service import NotificationService
from drugreminder.store.base import (
    AdherenceLog,
    NotificationPermissionError,
    NotificationSink,
    RoutingIdentity,
    ScheduleStore,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
SessionFactory = Callable[[], AbstractContextManager]


class _SqlStore:
    """Base común: ejecutar trabajo con sesión fuera del event loop"""

    def __init__(self, session_factory: SessionFactory = session_scope):
        self._session_factory = session_factory

    async def _run(self, work: Callable[[Session], T]) -> T:
        def _call() -> T:
            with self._session_factory() as db:
                return work(db)

        try:
            return await run_in_threadpool(_call)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(str(e)) from e


class SqlScheduleStore(_SqlStore, ScheduleStore):
    """Medicamentos y cuentas en la base de datos"""

    async def fetch_all_medications(self) -> List[MedicationRecord]:
        return await self._run(
            lambda db: [MedicationRecord.model_validate(m) for m in MedicationService(db).get_all_medications()]
        )

    async def find_medications_by_owner(self, owner_email: str) -> List[MedicationRecord]:
        return await self._run(
            lambda db: [
                MedicationRecord.model_validate(m)
                for m in MedicationService(db).get_medications_by_owner(owner_email)
            ]
        )

    async def find_patients_with_caregiver(self, caregiver_email: str) -> List[UserRecord]:
        return await self._run(
            lambda db: [
                UserRecord.model_validate(u)
                for u in AuthService(db).find_patients_with_caregiver(caregiver_email)
            ]
        )


class SqlAdherenceLog(_SqlStore, AdherenceLog):
    """Historial de tomas en la base de datos"""

    async def has_taken_event(self, owner_email: str, medication_name: str, date: str) -> bool:
        return await self._run(
            lambda db: HistoryService(db).has_taken_event(owner_email, medication_name, date)
        )

    async def append(self, event: AdherenceEventCreate) -> AdherenceEventRecord:
        return await self._run(
            lambda db: AdherenceEventRecord.model_validate(HistoryService(db).record_event(event))
        )


class SqlNotificationSink(_SqlStore, NotificationSink):
    """
    Bandeja de notificaciones en la base de datos.

    Re-emitir el mismo ID reemplaza la notificación en lugar de duplicarla.
    """

    async def emit(self, title: str, body: str, routing: RoutingIdentity, notification_id: str) -> None:
        def _work(db: Session):
            recipient = AuthService(db).get_user_by_email(routing.owner_email)
            if recipient is None or not recipient.push_notifications:
                raise NotificationPermissionError(
                    f"{routing.owner_email} no permite notificaciones"
                )
            notification = NotificationService(db).upsert_notification(
                notification_id=notification_id,
                title=title,
                body=body,
                owner_email=routing.owner_email,
                medication_id=routing.medication_id,
                medication_name=routing.medication_name,
                dosage=routing.dosage
            )
            return notification.emit_count

        emit_count = await self._run(_work)
        logger.info(
            f"🔔 Notificación {notification_id} para {routing.owner_email}: "
            f"{routing.medication_name} (emisiones: {emit_count})"
        )

    async def dismiss(self, notification_id: str) -> None:
        await self._run(lambda db: NotificationService(db).dismiss_notification(notification_id))
