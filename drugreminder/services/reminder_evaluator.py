"""
Evaluador periódico de recordatorios

En cada pasada:
1. Obtiene todos los medicamentos (todos los pacientes, una sola consulta).
2. Filtra los activos hoy y los que tocan ahora (±tolerancia).
3. Consulta el historial: si ya hay una toma registrada hoy, no avisa.
4. Emite una notificación por medicamento con ID estable (medicamento, fecha).

No guarda estado entre pasadas: lo que ya se resolvió vive en el historial.
Política de errores:
- fechas/horas mal formadas: el registro no avisa (falla cerrado)
- fallo al consultar el historial: se avisa igual (falla abierto)
- sin permiso de notificaciones: se registra en el log y se sigue
- fallo al obtener los medicamentos: la pasada entera pide reintento
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from drugreminder.core.scheduler import RunResult
from drugreminder.schemas.medication import MedicationRecord
from drugreminder.schemas.notification import EmittedReminder, ReminderRunReport
from drugreminder.services.dose_schedule import (
    DATE_FORMAT,
    DEFAULT_TOLERANCE_MINUTES,
    TIME_FORMAT,
    is_active_today,
    is_due_now,
    notification_id_for,
)
from drugreminder.store.base import (
    AdherenceLog,
    NotificationPermissionError,
    NotificationSink,
    RoutingIdentity,
    ScheduleStore,
)

logger = logging.getLogger(__name__)

REMINDER_TITLE = "¡Hora de tu medicamento!"


@dataclass
class _RecordOutcome:
    """Resultado de evaluar un medicamento"""
    active: bool = False
    due: bool = False
    suppressed: bool = False
    dedup_failed: bool = False
    delivery_failed: bool = False
    reminder: Optional[EmittedReminder] = None


class ReminderEvaluator:
    """Pasada sin estado sobre la colección de medicamentos"""

    def __init__(
            self,
            schedule_store: ScheduleStore,
            adherence_log: AdherenceLog,
            notification_sink: NotificationSink,
            clock,
            tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES
    ):
        self.schedule_store = schedule_store
        self.adherence_log = adherence_log
        self.notification_sink = notification_sink
        self.clock = clock
        self.tolerance_minutes = tolerance_minutes

    async def handle(self) -> RunResult:
        """Handler para el planificador periódico"""
        report = await self.run()
        return RunResult(report.result)

    async def run(self) -> ReminderRunReport:
        """Ejecutar una pasada completa"""
        now = self.clock.now()
        today = now.strftime(DATE_FORMAT)
        current_time = now.strftime(TIME_FORMAT)

        report = ReminderRunReport(result=RunResult.SUCCESS.value, date=today, time=current_time)

        try:
            medications = await self.schedule_store.fetch_all_medications()
        except Exception as e:
            logger.error(f"❌ No se pudieron obtener los medicamentos, se reintentará: {e}")
            report.result = RunResult.RETRY.value
            return report

        report.scanned = len(medications)

        # Subconsultas concurrentes; la pasada termina cuando todas terminaron
        outcomes = await asyncio.gather(
            *(self._evaluate(medication, today, current_time) for medication in medications),
            return_exceptions=True
        )

        for medication, outcome in zip(medications, outcomes):
            report.settled += 1
            if isinstance(outcome, BaseException):
                report.skipped += 1
                logger.warning(f"⚠️ Medicamento {medication.id} omitido por error: {outcome!r}")
                continue

            report.active += int(outcome.active)
            report.due += int(outcome.due)
            report.suppressed += int(outcome.suppressed)
            report.dedup_failures += int(outcome.dedup_failed)
            report.delivery_failures += int(outcome.delivery_failed)
            if outcome.reminder is not None:
                report.emitted += 1
                report.reminders.append(outcome.reminder)

        report.reminders.sort(key=lambda r: (r.owner_email, r.medication_name, r.notification_id))

        logger.info(
            f"💊 Pasada {today} {current_time}: {report.scanned} medicamentos, "
            f"{report.due} tocan ahora, {report.emitted} avisos, "
            f"{report.suppressed} ya tomados, {report.skipped} con error"
        )
        return report

    async def _evaluate(self, medication: MedicationRecord, today: str, current_time: str) -> _RecordOutcome:
        outcome = _RecordOutcome()

        if not is_active_today(medication.start_date, medication.end_date, today):
            return outcome
        outcome.active = True

        if not is_due_now(medication.time, current_time, self.tolerance_minutes):
            return outcome
        outcome.due = True

        try:
            already_taken = await self.adherence_log.has_taken_event(
                medication.owner_email, medication.name, today
            )
        except Exception as e:
            # Falla abierto: se emite igual
            logger.warning(f"⚠️ No se pudo consultar el historial de {medication.id}, se avisa igual: {e}")
            outcome.dedup_failed = True
            already_taken = False

        if already_taken:
            outcome.suppressed = True
            return outcome

        notification_id = notification_id_for(medication.id, today)
        routing = RoutingIdentity(
            medication_id=medication.id,
            medication_name=medication.name,
            owner_email=medication.owner_email,
            dosage=medication.dosage
        )

        try:
            await self.notification_sink.emit(
                REMINDER_TITLE,
                f"{medication.name} - {medication.dosage}",
                routing,
                notification_id
            )
        except NotificationPermissionError as e:
            logger.warning(f"🔕 Notificación {notification_id} no entregada: {e}")
            outcome.delivery_failed = True
            return outcome

        outcome.reminder = EmittedReminder(
            notification_id=notification_id,
            medication_id=medication.id,
            medication_name=medication.name,
            owner_email=medication.owner_email
        )
        return outcome
