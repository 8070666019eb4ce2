"""
Respuestas a las notificaciones ("tomado" / "no tomado")
"""
import logging
from typing import Optional

from drugreminder.schemas.adherence import AdherenceEventCreate, AdherenceEventRecord, ResponseKind
from drugreminder.services.dose_schedule import DATE_FORMAT, TIME_FORMAT
from drugreminder.store.base import AdherenceLog, NotificationSink

logger = logging.getLogger(__name__)


class AdherenceResponseHandler:
    """
    Registra la respuesta del usuario como un evento nuevo del historial.

    Fecha y hora del evento = momento de la respuesta (no la hora programada).
    La siguiente pasada del evaluador ve el evento en su consulta de historial.
    """

    def __init__(self, adherence_log: AdherenceLog, notification_sink: NotificationSink, clock):
        self.adherence_log = adherence_log
        self.notification_sink = notification_sink
        self.clock = clock

    async def record_response(
            self,
            medication_name: str,
            owner_email: str,
            notification_id: Optional[str],
            response: ResponseKind,
            medication_id: Optional[str] = None
    ) -> AdherenceEventRecord:
        """Guardar el evento y retirar la notificación"""
        now = self.clock.now()

        event = await self.adherence_log.append(
            AdherenceEventCreate(
                medication_name=medication_name,
                owner_email=owner_email,
                date=now.strftime(DATE_FORMAT),
                time_taken=now.strftime(TIME_FORMAT),
                taken=response == ResponseKind.TAKEN,
                medication_id=medication_id
            )
        )

        if notification_id:
            await self.notification_sink.dismiss(notification_id)

        logger.info(
            f"📝 {owner_email} respondió '{response.value}' para {medication_name} "
            f"({event.date} {event.time_taken})"
        )
        return event
