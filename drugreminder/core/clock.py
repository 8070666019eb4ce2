"""
Reloj de pared de la aplicación.

Los medicamentos guardan la hora sin zona horaria ("08:00" local), así que
"hoy" y "ahora" se calculan en la zona configurada (DEFAULT_TIMEZONE).
"""
from datetime import datetime
from functools import lru_cache

import pytz

from drugreminder.core.config import get_settings


class Clock:
    """Reloj en una zona horaria fija"""

    def __init__(self, timezone: str):
        self.timezone = pytz.timezone(timezone)

    def now(self) -> datetime:
        return datetime.now(self.timezone)


@lru_cache()
def get_clock() -> Clock:
    """Reloj compartido con la zona de la configuración"""
    return Clock(get_settings().DEFAULT_TIMEZONE)
