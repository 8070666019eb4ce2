"""
Esquemas Pydantic para notificaciones y ejecuciones del evaluador
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from drugreminder.models.notification import NotificationStatus


class NotificationResponse(BaseModel):
    """Notificación pendiente para el dispositivo"""
    id: str
    owner_email: str
    medication_id: str
    medication_name: str
    dosage: str
    title: str
    body: str
    status: NotificationStatus
    emit_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmittedReminder(BaseModel):
    """Recordatorio emitido en una pasada"""
    notification_id: str
    medication_id: str
    medication_name: str
    owner_email: str


class ReminderRunReport(BaseModel):
    """Resumen de una pasada del evaluador"""
    result: str
    date: str
    time: str
    scanned: int = 0
    settled: int = 0
    active: int = 0
    due: int = 0
    suppressed: int = 0
    emitted: int = 0
    skipped: int = 0
    dedup_failures: int = 0
    delivery_failures: int = 0
    reminders: List[EmittedReminder] = []
