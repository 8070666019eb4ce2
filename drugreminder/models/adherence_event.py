# drugreminder/models/adherence_event.py
"""
Modelo de evento de adherencia (historial de tomas)
"""
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Index
from sqlalchemy.sql import func

from drugreminder.core.database import Base


class AdherenceEvent(Base):
    """Registro de 'tomado / no tomado'. Solo se insertan, nunca se modifican."""
    __tablename__ = "adherence_events"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)

    # El id del medicamento solo existe en marcas manuales; el nombre se copia
    # siempre (el historial sobrevive al borrado del medicamento)
    medication_id = Column(String(32), nullable=True)
    medication_name = Column(String(255), nullable=False)
    owner_email = Column(String(255), nullable=False, index=True)

    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time_taken = Column(String(5), nullable=False)  # HH:MM
    taken = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_adherence_lookup", "owner_email", "medication_name", "date", "taken"),
    )

    def __repr__(self):
        return (
            f"<AdherenceEvent(id={self.id}, medication='{self.medication_name}', "
            f"date={self.date}, taken={self.taken})>"
        )
