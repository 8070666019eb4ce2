"""
Reglas de horario de dosis: rango activo, ventana de tolerancia e ID de notificación.

Funciones puras sobre los textos tal como están guardados. Cualquier valor que
no se pueda interpretar cuenta como "no activo" / "no toca": con datos mal
formados no se avisa.
"""
from datetime import date, datetime, time
from typing import Optional
import hashlib
import re

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

# strptime acepta "2024-6-1" y "8:5"; se exigen dígitos con cero a la izquierda
DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
TIME_PATTERN = re.compile(r"^[0-9]{2}:[0-9]{2}$")

DEFAULT_TOLERANCE_MINUTES = 5


def parse_date(value: str) -> Optional[date]:
    """YYYY-MM-DD -> date, o None si no es válido"""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def parse_time(value: str) -> Optional[time]:
    """HH:MM (24h) -> time, o None si no es válido"""
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        return None
    try:
        return datetime.strptime(value, TIME_FORMAT).time()
    except ValueError:
        return None


def is_active_today(start_date: str, end_date: str, today: str) -> bool:
    """
    El medicamento está activo si start_date <= today <= end_date (fechas de
    calendario, ambos extremos inclusive). Un rango invertido nunca está activo.
    """
    start = parse_date(start_date)
    end = parse_date(end_date)
    current = parse_date(today)
    if start is None or end is None or current is None:
        return False
    return start <= current <= end


def minutes_apart(drug_time: str, current_time: str) -> Optional[int]:
    """
    Distancia absoluta en minutos entre dos horas del día.

    No se corrige el cruce de medianoche: 23:58 y 00:02 están a 1436 minutos.
    """
    scheduled = parse_time(drug_time)
    current = parse_time(current_time)
    if scheduled is None or current is None:
        return None
    scheduled_minutes = scheduled.hour * 60 + scheduled.minute
    current_minutes = current.hour * 60 + current.minute
    return abs(current_minutes - scheduled_minutes)


def is_due_now(drug_time: str, current_time: str, tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES) -> bool:
    """La dosis toca ahora si la diferencia es <= tolerance_minutes"""
    diff = minutes_apart(drug_time, current_time)
    return diff is not None and diff <= tolerance_minutes


def notification_id_for(medication_id: str, on_date: str) -> str:
    """
    ID estable para (medicamento, fecha): todas las pasadas del mismo día
    producen el mismo ID y el canal reemplaza la notificación.
    """
    return hashlib.sha256(f"{medication_id}:{on_date}".encode()).hexdigest()[:16]
