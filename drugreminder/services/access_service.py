"""
Qué medicamentos puede ver cada usuario.

- Paciente: sus propios medicamentos.
- Cuidador: la unión de los medicamentos de sus pacientes (los pacientes que
  lo tienen en su conjunto de cuidadores).
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Set, Union

from drugreminder.models.user import UserRole
from drugreminder.schemas.medication import MedicationRecord
from drugreminder.store.base import ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnMedications:
    """Plan: medicamentos cuyo propietario es owner_email"""
    owner_email: str


@dataclass(frozen=True)
class WardsMedications:
    """Plan: buscar pacientes del cuidador y unir sus medicamentos"""
    caregiver_email: str


VisibilityPlan = Union[OwnMedications, WardsMedications]


def plan_visibility(role: UserRole, identity: str) -> VisibilityPlan:
    """Función pura {rol, identidad} -> plan de consulta"""
    if role == UserRole.PATIENT:
        return OwnMedications(owner_email=identity)
    if role == UserRole.CAREGIVER:
        return WardsMedications(caregiver_email=identity)
    raise ValueError(f"Rol desconocido: {role!r}")


@dataclass
class VisibleMedications:
    """Resultado de ejecutar un plan"""
    medications: List[MedicationRecord] = field(default_factory=list)
    failed_owners: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_owners


def _sort_key(medication: MedicationRecord):
    return (medication.owner_email, medication.time, medication.name, medication.id)


class MedicationVisibilityResolver:
    """Ejecuta un VisibilityPlan contra el almacén"""

    def __init__(self, schedule_store: ScheduleStore):
        self.schedule_store = schedule_store

    async def resolve_owners(self, plan: VisibilityPlan) -> Set[str]:
        """Emails de los pacientes cuyos datos puede ver el usuario"""
        if isinstance(plan, OwnMedications):
            return {plan.owner_email}

        wards = await self.schedule_store.find_patients_with_caregiver(plan.caregiver_email)
        return {ward.email for ward in wards}

    async def resolve(self, plan: VisibilityPlan) -> VisibleMedications:
        if isinstance(plan, OwnMedications):
            medications = await self.schedule_store.find_medications_by_owner(plan.owner_email)
            return VisibleMedications(medications=sorted(medications, key=_sort_key))

        ward_emails = sorted(await self.resolve_owners(plan))

        results = await asyncio.gather(
            *(self.schedule_store.find_medications_by_owner(email) for email in ward_emails),
            return_exceptions=True
        )

        # gather espera a todas; el orden de llegada no importa
        visible = VisibleMedications()
        for email, result in zip(ward_emails, results):
            if isinstance(result, BaseException):
                logger.warning(f"⚠️ No se pudieron obtener los medicamentos de {email}: {result!r}")
                visible.failed_owners.append(email)
                continue
            visible.medications.extend(result)

        visible.medications.sort(key=_sort_key)
        return visible
