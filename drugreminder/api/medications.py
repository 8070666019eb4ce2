"""
Endpoints de medicamentos
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from drugreminder.core.clock import Clock
from drugreminder.core.database import get_db
from drugreminder.core.dependencies import (
    get_adherence_log,
    get_app_clock,
    get_current_user,
    get_notification_sink,
    get_patient_user,
    get_schedule_store,
    verify_medication_owner,
    verify_patient_access
)
from drugreminder.models.user import User
from drugreminder.schemas.adherence import AdherenceEventRecord, ResponseKind
from drugreminder.schemas.medication import (
    MedicationCreate,
    MedicationReplace,
    MedicationResponse
)
from drugreminder.services.access_service import MedicationVisibilityResolver, plan_visibility
from drugreminder.services.adherence_service import AdherenceResponseHandler
from drugreminder.services.medication_service import MedicationService
from drugreminder.store.base import AdherenceLog, NotificationSink, ScheduleStore

router = APIRouter()


def _get_medication_or_404(medication_service: MedicationService, medication_id: str):
    medication = medication_service.get_medication_by_id(medication_id)
    if not medication:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicamento no encontrado"
        )
    return medication


@router.get("/", response_model=List[MedicationResponse])
async def list_medications(
        current_user: User = Depends(get_current_user),
        schedule_store: ScheduleStore = Depends(get_schedule_store)
):
    """
    Medicamentos visibles: los propios (paciente) o los de sus pacientes (cuidador)
    """
    resolver = MedicationVisibilityResolver(schedule_store)
    visible = await resolver.resolve(plan_visibility(current_user.role, current_user.email))

    if not visible.complete:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No se pudieron cargar los medicamentos de todos los pacientes"
        )

    return visible.medications


@router.post("/", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
async def create_medication(
        medication_data: MedicationCreate,
        current_user: User = Depends(get_patient_user),
        db: Session = Depends(get_db)
):
    """
    Crear nuevo medicamento (solo el paciente, para sí mismo)
    """
    medication_service = MedicationService(db)
    return medication_service.create_medication(medication_data, owner_email=current_user.email)


@router.get("/{medication_id}", response_model=MedicationResponse)
async def get_medication(
        medication_id: str,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Obtener un medicamento
    """
    medication = _get_medication_or_404(MedicationService(db), medication_id)
    verify_patient_access(current_user, medication.owner_email, db)
    return medication


@router.put("/{medication_id}", response_model=MedicationResponse)
async def replace_medication(
        medication_id: str,
        medication_data: MedicationReplace,
        current_user: User = Depends(get_patient_user),
        db: Session = Depends(get_db)
):
    """
    Reemplazar el registro completo del medicamento
    """
    medication_service = MedicationService(db)

    medication = _get_medication_or_404(medication_service, medication_id)
    verify_medication_owner(current_user, medication)

    return medication_service.replace_medication(medication_id, medication_data)


@router.delete("/{medication_id}")
async def delete_medication(
        medication_id: str,
        current_user: User = Depends(get_patient_user),
        db: Session = Depends(get_db)
):
    """
    Eliminar medicamento (el historial se conserva)
    """
    medication_service = MedicationService(db)

    medication = _get_medication_or_404(medication_service, medication_id)
    verify_medication_owner(current_user, medication)

    medication_service.delete_medication(medication_id)
    return {"message": "Medicamento eliminado exitosamente"}


@router.post("/{medication_id}/taken", response_model=AdherenceEventRecord, status_code=status.HTTP_201_CREATED)
async def mark_medication_taken(
        medication_id: str,
        current_user: User = Depends(get_patient_user),
        db: Session = Depends(get_db),
        adherence_log: AdherenceLog = Depends(get_adherence_log),
        notification_sink: NotificationSink = Depends(get_notification_sink),
        clock: Clock = Depends(get_app_clock)
):
    """
    Marcar manualmente el medicamento como tomado ahora
    """
    medication = _get_medication_or_404(MedicationService(db), medication_id)
    verify_medication_owner(current_user, medication)

    handler = AdherenceResponseHandler(adherence_log, notification_sink, clock)
    return await handler.record_response(
        medication_name=medication.name,
        owner_email=medication.owner_email,
        notification_id=None,
        response=ResponseKind.TAKEN,
        medication_id=medication.id
    )
