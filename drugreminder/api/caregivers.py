"""
Endpoints de la relación paciente-cuidador
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from drugreminder.core.database import get_db
from drugreminder.core.dependencies import get_caregiver_user, get_patient_user
from drugreminder.models.user import User
from drugreminder.schemas.user import CaregiverAdd, UserProfile, UserRecord
from drugreminder.services.auth_service import AuthService

router = APIRouter()


@router.post("/", response_model=UserProfile)
async def add_caregiver(
        caregiver_data: CaregiverAdd,
        current_user: User = Depends(get_patient_user),
        db: Session = Depends(get_db)
):
    """
    Agregar un cuidador al paciente actual
    """
    auth_service = AuthService(db)
    caregiver_email = caregiver_data.caregiver_email

    if caregiver_email == current_user.email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No puedes agregarte como tu propio cuidador"
        )

    caregiver = auth_service.get_user_by_email(caregiver_email)
    if not caregiver:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cuidador no encontrado"
        )

    if not caregiver.is_caregiver:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El usuario no está registrado como cuidador"
        )

    auth_service.add_caregiver(current_user.email, caregiver_email)

    db.refresh(current_user)
    return current_user


@router.get("/", response_model=List[str])
async def list_caregivers(
        current_user: User = Depends(get_patient_user)
):
    """
    Cuidadores del paciente actual
    """
    return current_user.caregivers


@router.get("/wards", response_model=List[UserRecord])
async def list_wards(
        current_user: User = Depends(get_caregiver_user),
        db: Session = Depends(get_db)
):
    """
    Pacientes que tienen al usuario actual como cuidador
    """
    return AuthService(db).find_patients_with_caregiver(current_user.email)
