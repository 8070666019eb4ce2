"""
Esquemas Pydantic para Medicamentos
"""
from pydantic import BaseModel, validator, Field
from typing import Optional
from datetime import datetime

from drugreminder.services.dose_schedule import parse_date, parse_time


class MedicationBase(BaseModel):
    """Base para esquemas de medicamento"""
    name: str = Field(..., min_length=1, max_length=255, description="Nombre del medicamento")
    dosage: str = Field(..., min_length=1, max_length=100, description="Dosis (ej: 1 tabletka)")
    time: str = Field(..., description="Hora diaria HH:MM")
    start_date: str = Field(..., description="Inicio YYYY-MM-DD")
    end_date: str = Field(..., description="Fin YYYY-MM-DD (inclusive)")
    note: Optional[str] = Field("", max_length=1000, description="Información adicional")

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('El nombre del medicamento es requerido')
        return v.strip()

    @validator('dosage')
    def validate_dosage(cls, v):
        if not v or not v.strip():
            raise ValueError('La dosis es requerida')
        return v.strip()

    @validator('time')
    def validate_time_format(cls, v):
        if parse_time(v.strip()) is None:
            raise ValueError('La hora debe estar en formato HH:MM')
        return v.strip()

    @validator('start_date', 'end_date')
    def validate_date_format(cls, v):
        if parse_date(v.strip()) is None:
            raise ValueError('Formato de fecha inválido. Use YYYY-MM-DD')
        return v.strip()

    @validator('end_date')
    def validate_date_range(cls, v, values):
        # Solo se valida al crear/reemplazar por la API; la tabla acepta rangos invertidos
        start = values.get('start_date')
        if start and parse_date(v) < parse_date(start):
            raise ValueError('La fecha de fin no puede ser anterior a la de inicio')
        return v


class MedicationCreate(MedicationBase):
    """Esquema para crear medicamento"""
    pass


class MedicationReplace(MedicationBase):
    """Reemplazo completo del registro (no hay actualización parcial)"""
    pass


class MedicationRecord(BaseModel):
    """Registro crudo del almacén. Sin validar: puede traer fechas u horas mal formadas."""
    id: str
    name: str
    dosage: str
    owner_email: str
    time: str
    start_date: str
    end_date: str
    note: Optional[str] = ""

    class Config:
        from_attributes = True


class MedicationResponse(MedicationRecord):
    """Esquema de respuesta de medicamento"""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
