"""
Modelo de Medicamento
"""
import uuid

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func

from drugreminder.core.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Medication(Base):
    """Modelo de Medicamento de un paciente"""
    __tablename__ = "medications"

    id = Column(String(32), primary_key=True, default=_new_id)

    # Información básica
    name = Column(String(255), nullable=False, index=True)
    dosage = Column(String(100), nullable=False)  # ej: "1 tabletka", "5 ml"
    note = Column(Text, nullable=True, default="")

    # Propietario (email del paciente)
    owner_email = Column(String(255), nullable=False, index=True)

    # Horario diario y rango activo. Texto plano: los datos mal formados deben
    # poder existir (el evaluador los descarta sin fallar).
    time = Column(String(5), nullable=False)  # Formato HH:MM (ej: "08:30")
    start_date = Column(String(10), nullable=False)  # Formato YYYY-MM-DD
    end_date = Column(String(10), nullable=False)  # Formato YYYY-MM-DD, inclusive

    # Metadatos
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Medication(id={self.id}, name='{self.name}', time='{self.time}', owner='{self.owner_email}')>"

    @property
    def full_name(self) -> str:
        """Nombre con dosis"""
        return f"{self.name} - {self.dosage}"
