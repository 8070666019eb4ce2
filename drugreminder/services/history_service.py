"""
Servicio del historial de adherencia (eventos tomado / no tomado)
"""
from sqlalchemy.orm import Session
from typing import List
from datetime import datetime
from itertools import groupby
import logging

from drugreminder.models.adherence_event import AdherenceEvent
from drugreminder.schemas.adherence import AdherenceEventCreate

logger = logging.getLogger(__name__)


class HistoryService:
    """Servicio para el historial de tomas"""

    def __init__(self, db: Session):
        self.db = db

    def record_event(self, event_data: AdherenceEventCreate) -> AdherenceEvent:
        """Agregar evento al historial (nunca se actualiza ni se borra)"""

        db_event = AdherenceEvent(
            medication_id=event_data.medication_id,
            medication_name=event_data.medication_name,
            owner_email=event_data.owner_email,
            date=event_data.date,
            time_taken=event_data.time_taken,
            taken=event_data.taken
        )

        self.db.add(db_event)
        self.db.commit()
        self.db.refresh(db_event)

        logger.info(
            f"Evento registrado: {db_event.medication_name} ({db_event.owner_email}) "
            f"{db_event.date} {db_event.time_taken} tomado={db_event.taken}"
        )
        return db_event

    def has_taken_event(self, owner_email: str, medication_name: str, date: str) -> bool:
        """¿Existe al menos un evento 'tomado' para ese paciente, medicamento y fecha?"""
        return self.db.query(AdherenceEvent.id).filter(
            AdherenceEvent.owner_email == owner_email,
            AdherenceEvent.medication_name == medication_name,
            AdherenceEvent.date == date,
            AdherenceEvent.taken.is_(True)
        ).first() is not None

    def get_history(self, owner_email: str) -> List[AdherenceEvent]:
        """Historial del paciente, más reciente primero"""
        events = self.db.query(AdherenceEvent).filter(AdherenceEvent.owner_email == owner_email).all()
        return sorted(events, key=lambda e: f"{e.date} {e.time_taken}", reverse=True)


def format_history_as_text(owner_email: str, events: List[AdherenceEvent], generated_at: datetime) -> str:
    """
    Reporte de texto del historial, agrupado por fecha (más reciente primero)
    y con las tomas de cada día ordenadas por hora.
    """
    lines = [
        f"Historial de medicamentos - Paciente: {owner_email}",
        f"Fecha de generación: {generated_at.strftime('%d/%m/%Y %H:%M')}",
        "",
        "=== HISTORIAL DE TOMAS ===",
        "",
    ]

    by_date = sorted(events, key=lambda e: e.date, reverse=True)
    for date, entries in groupby(by_date, key=lambda e: e.date):
        lines.append(f"📅 {date}")
        for event in sorted(entries, key=lambda e: e.time_taken):
            status = "✅ Tomado" if event.taken else "❌ No tomado"
            lines.append(f"  • {event.medication_name} - {event.time_taken} {status}")
        lines.append("")

    if not events:
        lines.append("No hay registros de tomas.")

    return "\n".join(lines) + "\n"
