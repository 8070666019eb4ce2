"""
Servicio de notificaciones pendientes
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from drugreminder.models.notification import Notification, NotificationStatus

logger = logging.getLogger(__name__)


class NotificationService:
    """Bandeja de notificaciones que consultan los dispositivos"""

    def __init__(self, db: Session):
        self.db = db

    def get_notification_by_id(self, notification_id: str) -> Optional[Notification]:
        return self.db.query(Notification).filter(Notification.id == notification_id).first()

    def get_pending_for_owner(self, owner_email: str) -> List[Notification]:
        """Notificaciones pendientes del usuario"""
        return self.db.query(Notification).filter(
            Notification.owner_email == owner_email,
            Notification.status == NotificationStatus.PENDING
        ).order_by(Notification.created_at, Notification.id).all()

    def upsert_notification(
            self,
            notification_id: str,
            title: str,
            body: str,
            owner_email: str,
            medication_id: str,
            medication_name: str,
            dosage: str
    ) -> Notification:
        """Crear la notificación o reemplazar la existente con el mismo ID"""

        notification = self.get_notification_by_id(notification_id)
        if notification is None:
            notification = Notification(
                id=notification_id,
                owner_email=owner_email,
                medication_id=medication_id,
                medication_name=medication_name,
                dosage=dosage,
                title=title,
                body=body,
                status=NotificationStatus.PENDING,
                emit_count=1
            )
            self.db.add(notification)
            try:
                self.db.commit()
            except IntegrityError:
                # Otra pasada concurrente insertó el mismo ID primero
                self.db.rollback()
                notification = self.get_notification_by_id(notification_id)
                self._replace(notification, title, body, dosage)
        else:
            self._replace(notification, title, body, dosage)

        self.db.refresh(notification)
        return notification

    def _replace(self, notification: Notification, title: str, body: str, dosage: str):
        notification.title = title
        notification.body = body
        notification.dosage = dosage
        notification.status = NotificationStatus.PENDING
        notification.emit_count = (notification.emit_count or 0) + 1
        self.db.commit()

    def dismiss_notification(self, notification_id: str) -> bool:
        """Marcar como atendida"""
        notification = self.get_notification_by_id(notification_id)
        if not notification:
            return False

        notification.status = NotificationStatus.DISMISSED
        self.db.commit()
        return True
