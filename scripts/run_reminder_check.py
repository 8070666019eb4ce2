#!/usr/bin/env python3
"""
Ejecutar una pasada del evaluador de recordatorios (para cron / systemd timers)

Código de salida: 0 si la pasada terminó, 75 (EX_TEMPFAIL) si hay que reintentar.
"""
import sys
import os
import asyncio

# Agregar el directorio raíz al path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from drugreminder.core.clock import get_clock
from drugreminder.core.config import get_settings
from drugreminder.core.scheduler import RunResult
from drugreminder.services.reminder_evaluator import ReminderEvaluator
from drugreminder.store.sql import SqlAdherenceLog, SqlNotificationSink, SqlScheduleStore
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

EXIT_RETRY = 75


def main() -> int:
    """Función principal"""
    settings = get_settings()

    evaluator = ReminderEvaluator(
        schedule_store=SqlScheduleStore(),
        adherence_log=SqlAdherenceLog(),
        notification_sink=SqlNotificationSink(),
        clock=get_clock(),
        tolerance_minutes=settings.REMINDER_TOLERANCE_MINUTES
    )

    report = asyncio.run(evaluator.run())
    logger.info(f"📋 Resultado: {report.result} ({report.emitted} avisos emitidos)")

    if report.result == RunResult.RETRY.value:
        return EXIT_RETRY
    return 0


if __name__ == "__main__":
    sys.exit(main())
