"""
Modelo de notificación pendiente (bandeja de salida hacia el dispositivo)
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum
from sqlalchemy.sql import func
import enum

from drugreminder.core.database import Base


class NotificationStatus(str, enum.Enum):
    """Estados de notificación"""
    PENDING = "pending"
    DISMISSED = "dismissed"


class Notification(Base):
    """Una fila por identificador: re-emitir reemplaza en vez de acumular"""
    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True)

    owner_email = Column(String(255), nullable=False, index=True)
    medication_id = Column(String(32), nullable=False)
    medication_name = Column(String(255), nullable=False)
    dosage = Column(String(100), nullable=False, default="")

    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)

    status = Column(Enum(NotificationStatus), default=NotificationStatus.PENDING, nullable=False)
    emit_count = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Notification(id={self.id}, owner='{self.owner_email}', status={self.status.value})>"
