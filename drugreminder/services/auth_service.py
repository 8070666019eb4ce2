"""
Servicio de cuentas de usuario y relación paciente-cuidador
"""
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import List, Optional
import logging

from drugreminder.models.user import User, UserRole, CaregiverLink
from drugreminder.schemas.user import UserCreate
from drugreminder.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """Servicio para manejo de cuentas"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Obtener usuario por email"""
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, user_data: UserCreate) -> User:
        """Crear nuevo usuario"""
        db_user = User(
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            role=user_data.role,
        )

        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)

        logger.info(f"Usuario registrado: {db_user.email} ({db_user.role.value})")
        return db_user

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Autenticar usuario"""
        user = self.get_user_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def update_last_login(self, email: str):
        """Actualizar último login"""
        user = self.get_user_by_email(email)
        if user:
            user.last_login = datetime.now(timezone.utc)
            self.db.commit()

    def set_push_notifications(self, email: str, enabled: bool) -> Optional[User]:
        """Activar/desactivar notificaciones del usuario"""
        user = self.get_user_by_email(email)
        if not user:
            return None

        user.push_notifications = enabled
        self.db.commit()
        self.db.refresh(user)
        return user

    def add_caregiver(self, patient_email: str, caregiver_email: str) -> bool:
        """
        Agregar cuidador al conjunto del paciente.

        Devuelve False si ya estaba (no se duplica).
        """
        exists = self.db.query(CaregiverLink).filter(
            CaregiverLink.patient_email == patient_email,
            CaregiverLink.caregiver_email == caregiver_email
        ).first()
        if exists:
            return False

        self.db.add(CaregiverLink(patient_email=patient_email, caregiver_email=caregiver_email))
        self.db.commit()

        logger.info(f"Cuidador {caregiver_email} agregado al paciente {patient_email}")
        return True

    def find_patients_with_caregiver(self, caregiver_email: str) -> List[User]:
        """Pacientes que tienen a caregiver_email en su conjunto de cuidadores"""
        return self.db.query(User).join(
            CaregiverLink, CaregiverLink.patient_email == User.email
        ).filter(
            CaregiverLink.caregiver_email == caregiver_email,
            User.role == UserRole.PATIENT
        ).order_by(User.email).all()

    def is_caregiver_of(self, caregiver_email: str, patient_email: str) -> bool:
        """Verificar si el cuidador tiene acceso al paciente"""
        return self.db.query(CaregiverLink).join(
            User, CaregiverLink.patient_email == User.email
        ).filter(
            CaregiverLink.patient_email == patient_email,
            CaregiverLink.caregiver_email == caregiver_email,
            User.role == UserRole.PATIENT
        ).first() is not None
