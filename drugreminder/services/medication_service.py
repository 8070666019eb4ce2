"""
Servicio de gestión de medicamentos
"""
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from drugreminder.models.medication import Medication
from drugreminder.schemas.medication import MedicationCreate, MedicationReplace

logger = logging.getLogger(__name__)


class MedicationService:
    """Servicio para gestión de medicamentos"""

    def __init__(self, db: Session):
        self.db = db

    def get_all_medications(self) -> List[Medication]:
        """Todos los medicamentos (todos los pacientes)"""
        return self.db.query(Medication).all()

    def get_medications_by_owner(self, owner_email: str) -> List[Medication]:
        """Medicamentos de un paciente"""
        return self.db.query(Medication).filter(Medication.owner_email == owner_email).all()

    def get_medication_by_id(self, medication_id: str) -> Optional[Medication]:
        """Obtener medicamento por ID"""
        return self.db.query(Medication).filter(Medication.id == medication_id).first()

    def create_medication(self, medication_data: MedicationCreate, owner_email: str) -> Medication:
        """Crear nuevo medicamento para el paciente"""

        db_medication = Medication(
            name=medication_data.name,
            dosage=medication_data.dosage,
            note=medication_data.note or "",
            owner_email=owner_email,
            time=medication_data.time,
            start_date=medication_data.start_date,
            end_date=medication_data.end_date
        )

        self.db.add(db_medication)
        self.db.commit()
        self.db.refresh(db_medication)

        logger.info(f"Medicamento creado: {db_medication.full_name} (ID: {db_medication.id})")
        return db_medication

    def replace_medication(self, medication_id: str, medication_data: MedicationReplace) -> Optional[Medication]:
        """Reemplazar el registro completo (el propietario no cambia)"""

        medication = self.get_medication_by_id(medication_id)
        if not medication:
            return None

        for field, value in medication_data.dict().items():
            setattr(medication, field, value if value is not None else "")

        self.db.commit()
        self.db.refresh(medication)

        logger.info(f"Medicamento reemplazado: {medication.full_name} (ID: {medication.id})")
        return medication

    def delete_medication(self, medication_id: str) -> bool:
        """Eliminar medicamento. El historial no se toca."""

        medication = self.get_medication_by_id(medication_id)
        if not medication:
            return False

        self.db.delete(medication)
        self.db.commit()

        logger.info(f"Medicamento eliminado: {medication.full_name} (ID: {medication_id})")
        return True
