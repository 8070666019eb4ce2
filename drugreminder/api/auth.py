"""
Endpoints de autenticación
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from drugreminder.core.database import get_db
from drugreminder.core.security import create_access_token
from drugreminder.core.dependencies import get_current_user
from drugreminder.models.user import User
from drugreminder.schemas.user import (
    UserCreate, UserProfile, LoginResponse, NotificationSettings
)
from drugreminder.services.auth_service import AuthService

router = APIRouter()


# =========================
# REGISTER
# =========================
@router.post("/register", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Registrar nuevo usuario (paciente o cuidador)
    """
    auth_service = AuthService(db)

    # Verificar si el email ya existe
    if auth_service.get_user_by_email(user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El email ya está registrado"
        )

    return auth_service.create_user(user_data)


# =========================
# LOGIN
# =========================
@router.post("/login", response_model=LoginResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    Login de usuario
    """
    auth_service = AuthService(db)

    user = auth_service.authenticate_user(
        form_data.username,
        form_data.password
    )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email o contraseña incorrectos",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Usuario inactivo"
        )

    auth_service.update_last_login(user.email)

    access_token = create_access_token(
        data={"sub": user.email, "role": user.role.value}
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user
    }


# =========================
# PERFIL
# =========================
@router.get("/me", response_model=UserProfile)
async def get_current_user_profile(
    current_user: User = Depends(get_current_user)
):
    return current_user


@router.put("/me/notifications", response_model=UserProfile)
async def update_notification_settings(
    notification_settings: NotificationSettings,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Activar o desactivar las notificaciones de recordatorio
    """
    auth_service = AuthService(db)
    return auth_service.set_push_notifications(
        current_user.email,
        notification_settings.push_notifications
    )
