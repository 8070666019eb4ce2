"""
Ejecución manual del evaluador de recordatorios
"""
from fastapi import APIRouter, Depends

from drugreminder.core.dependencies import get_current_user, get_reminder_evaluator, get_schedule_store
from drugreminder.models.user import User
from drugreminder.schemas.notification import ReminderRunReport
from drugreminder.services.access_service import MedicationVisibilityResolver, plan_visibility
from drugreminder.services.reminder_evaluator import ReminderEvaluator
from drugreminder.store.base import ScheduleStore

router = APIRouter()


@router.post("/run", response_model=ReminderRunReport)
async def run_reminder_check(
        current_user: User = Depends(get_current_user),
        evaluator: ReminderEvaluator = Depends(get_reminder_evaluator),
        schedule_store: ScheduleStore = Depends(get_schedule_store)
):
    """
    Ejecutar una pasada del evaluador ahora (misma lógica que la tarea periódica).

    Los contadores son de toda la pasada; la lista de recordatorios solo
    incluye los del usuario (paciente) o los de sus pacientes (cuidador).
    """
    report = await evaluator.run()

    resolver = MedicationVisibilityResolver(schedule_store)
    visible_owners = await resolver.resolve_owners(plan_visibility(current_user.role, current_user.email))
    report.reminders = [r for r in report.reminders if r.owner_email in visible_owners]

    return report
