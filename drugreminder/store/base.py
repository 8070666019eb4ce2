"""
Interfaces del almacén de documentos y del canal de notificaciones.

El evaluador de recordatorios recibe estas interfaces en el constructor; en
producción se usan las implementaciones SQLAlchemy (store/sql.py) y en los
tests se sustituyen por versiones en memoria.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from drugreminder.schemas.adherence import AdherenceEventCreate, AdherenceEventRecord
from drugreminder.schemas.medication import MedicationRecord
from drugreminder.schemas.user import UserRecord


class StoreUnavailableError(Exception):
    """Fallo transitorio del almacén (red, conexión, timeout)"""


class NotificationPermissionError(Exception):
    """El destinatario no permite notificaciones"""


@dataclass(frozen=True)
class RoutingIdentity:
    """Datos con los que la respuesta del usuario vuelve al historial"""
    medication_id: str
    medication_name: str
    owner_email: str
    dosage: str = ""


class ScheduleStore(ABC):
    """Colección de medicamentos y cuentas de usuario"""

    @abstractmethod
    async def fetch_all_medications(self) -> List[MedicationRecord]:
        """Todos los medicamentos de todos los pacientes"""

    @abstractmethod
    async def find_medications_by_owner(self, owner_email: str) -> List[MedicationRecord]:
        """Medicamentos cuyo propietario es owner_email"""

    @abstractmethod
    async def find_patients_with_caregiver(self, caregiver_email: str) -> List[UserRecord]:
        """Pacientes cuyo conjunto de cuidadores contiene caregiver_email"""


class AdherenceLog(ABC):
    """Historial de tomas (solo inserción)"""

    @abstractmethod
    async def has_taken_event(self, owner_email: str, medication_name: str, date: str) -> bool:
        """True si existe al menos un evento tomado para (paciente, medicamento, fecha)"""

    @abstractmethod
    async def append(self, event: AdherenceEventCreate) -> AdherenceEventRecord:
        """Insertar un evento nuevo"""


class NotificationSink(ABC):
    """Canal de entrega de notificaciones (dispara y olvida)"""

    @abstractmethod
    async def emit(self, title: str, body: str, routing: RoutingIdentity, notification_id: str) -> None:
        """Entregar o reemplazar la notificación notification_id"""

    @abstractmethod
    async def dismiss(self, notification_id: str) -> None:
        """Retirar la notificación tras la respuesta del usuario"""
