"""
Esquemas Pydantic para el historial de adherencia
"""
from pydantic import BaseModel
from typing import Optional
import enum


class ResponseKind(str, enum.Enum):
    """Respuesta del usuario a una notificación"""
    TAKEN = "taken"
    NOT_TAKEN = "not_taken"


class AdherenceEventCreate(BaseModel):
    """Evento nuevo para el historial"""
    medication_name: str
    owner_email: str
    date: str
    time_taken: str
    taken: bool
    medication_id: Optional[str] = None


class AdherenceEventRecord(AdherenceEventCreate):
    """Evento guardado"""
    id: str

    class Config:
        from_attributes = True


class NotificationResponseRequest(BaseModel):
    """Cuerpo de la respuesta a una notificación"""
    response: ResponseKind
