"""
Esquemas Pydantic para Usuario y Autenticación
"""
from pydantic import BaseModel, EmailStr, validator
from typing import List, Optional
from datetime import datetime
from drugreminder.models.user import UserRole


class UserCreate(BaseModel):
    """Esquema para registrar usuario"""
    email: EmailStr
    password: str
    confirm_password: str
    role: UserRole = UserRole.PATIENT

    @validator('confirm_password')
    def passwords_match(cls, v, values):
        if 'password' in values and v != values['password']:
            raise ValueError('Las contraseñas no coinciden')
        return v

    @validator('password')
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError('La contraseña debe tener al menos 8 caracteres')
        return v


class UserRecord(BaseModel):
    """Cuenta tal como la ve la capa de almacenamiento"""
    email: str
    role: UserRole
    caregivers: List[str] = []
    push_notifications: bool = True

    class Config:
        from_attributes = True


class UserProfile(UserRecord):
    """Esquema de perfil de usuario"""
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class LoginResponse(BaseModel):
    """Esquema de respuesta de login"""
    access_token: str
    token_type: str = "bearer"
    user: UserProfile


class NotificationSettings(BaseModel):
    """Configuración de notificaciones"""
    push_notifications: bool = True


class CaregiverAdd(BaseModel):
    """Esquema para agregar un cuidador al paciente actual"""
    caregiver_email: EmailStr
