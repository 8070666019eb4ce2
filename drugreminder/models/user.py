"""
Modelo de Usuario (paciente o cuidador)
"""
from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from drugreminder.core.database import Base


class UserRole(str, enum.Enum):
    """Roles de usuario"""
    PATIENT = "patient"
    CAREGIVER = "caregiver"


class User(Base):
    """Modelo de Usuario. El email es la identidad."""
    __tablename__ = "users"

    email = Column(String(255), primary_key=True, index=True)
    hashed_password = Column(String(255), nullable=False)

    role = Column(
        Enum(UserRole, name="userrole"),
        nullable=False,
        default=UserRole.PATIENT
    )

    is_active = Column(Boolean, default=True)

    # Configuraciones de notificaciones
    push_notifications = Column(Boolean, default=True, nullable=False)

    # Metadatos
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relaciones
    caregiver_links = relationship("CaregiverLink", cascade="all, delete-orphan", lazy="selectin")

    def __repr__(self):
        return f"<User(email='{self.email}', role='{self.role.value}')>"

    @property
    def caregivers(self) -> list:
        """Emails de los cuidadores (solo pacientes)"""
        return sorted(link.caregiver_email for link in self.caregiver_links)

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.PATIENT

    @property
    def is_caregiver(self) -> bool:
        return self.role == UserRole.CAREGIVER


class CaregiverLink(Base):
    """
    Conjunto de cuidadores de un paciente.

    Solo se guarda del lado del paciente; los pacientes de un cuidador se
    obtienen buscando su email en esta tabla.
    """
    __tablename__ = "patient_caregivers"

    patient_email = Column(String(255), ForeignKey("users.email", ondelete="CASCADE"), primary_key=True)
    caregiver_email = Column(String(255), primary_key=True, index=True)

    def __repr__(self):
        return f"<CaregiverLink(patient='{self.patient_email}', caregiver='{self.caregiver_email}')>"
