import asyncio
from datetime import datetime

from drugreminder.models.adherence_event import AdherenceEvent
from drugreminder.schemas.adherence import AdherenceEventCreate, ResponseKind
from drugreminder.services.adherence_service import AdherenceResponseHandler
from drugreminder.services.history_service import HistoryService, format_history_as_text

from tests.fakes import FixedClock, InMemoryAdherenceLog, RecordingNotificationSink


def test_response_uses_response_time_not_schedule():
    log = InMemoryAdherenceLog()
    sink = RecordingNotificationSink()
    handler = AdherenceResponseHandler(log, sink, FixedClock("2024-06-15 09:41"))

    event = asyncio.run(handler.record_response(
        medication_name="Metformin",
        owner_email="anna@mail.com",
        notification_id="n-1",
        response=ResponseKind.TAKEN,
        medication_id="med-1",
    ))

    assert (event.date, event.time_taken, event.taken) == ("2024-06-15", "09:41", True)
    assert event.medication_id == "med-1"
    assert sink.dismissed == ["n-1"]
    assert asyncio.run(log.has_taken_event("anna@mail.com", "Metformin", "2024-06-15"))


def test_not_taken_response_is_logged_but_not_resolved():
    log = InMemoryAdherenceLog()
    handler = AdherenceResponseHandler(log, RecordingNotificationSink(), FixedClock("2024-06-15 08:10"))

    event = asyncio.run(handler.record_response("Metformin", "anna@mail.com", None, ResponseKind.NOT_TAKEN))

    assert event.taken is False
    assert len(log.events) == 1
    assert not asyncio.run(log.has_taken_event("anna@mail.com", "Metformin", "2024-06-15"))


def test_duplicate_taken_events_are_kept(db_session):
    service = HistoryService(db_session)
    for time_taken in ("08:02", "08:03"):
        service.record_event(AdherenceEventCreate(
            medication_name="Metformin", owner_email="anna@mail.com",
            date="2024-06-15", time_taken=time_taken, taken=True,
        ))

    history = service.get_history("anna@mail.com")

    assert [e.time_taken for e in history] == ["08:03", "08:02"]
    assert service.has_taken_event("anna@mail.com", "Metformin", "2024-06-15")


def _event(name, date, time_taken, taken):
    return AdherenceEvent(
        medication_name=name, owner_email="anna@mail.com", date=date, time_taken=time_taken, taken=taken
    )


def test_history_text_groups_by_date():
    events = [
        _event("Metformin", "2024-06-14", "08:02", True),
        _event("Aspirin", "2024-06-15", "20:01", False),
        _event("Metformin", "2024-06-15", "08:04", True),
    ]

    text = format_history_as_text("anna@mail.com", events, datetime(2024, 6, 15, 21, 0))
    lines = text.splitlines()

    assert lines[0] == "Historial de medicamentos - Paciente: anna@mail.com"
    assert lines[1] == "Fecha de generación: 15/06/2024 21:00"
    assert lines.index("📅 2024-06-15") < lines.index("📅 2024-06-14")
    day = lines[lines.index("📅 2024-06-15") + 1:lines.index("📅 2024-06-15") + 3]
    assert day == ["  • Metformin - 08:04 ✅ Tomado", "  • Aspirin - 20:01 ❌ No tomado"]


def test_history_text_without_events():
    text = format_history_as_text("anna@mail.com", [], datetime(2024, 6, 15, 21, 0))

    assert "No hay registros de tomas." in text
