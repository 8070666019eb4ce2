import asyncio

import pytest

from drugreminder.core.scheduler import RunResult
from drugreminder.schemas.adherence import ResponseKind
from drugreminder.services.adherence_service import AdherenceResponseHandler
from drugreminder.services.dose_schedule import notification_id_for
from drugreminder.services.reminder_evaluator import REMINDER_TITLE, ReminderEvaluator

from tests.fakes import (
    FixedClock,
    InMemoryAdherenceLog,
    InMemoryScheduleStore,
    RecordingNotificationSink,
    medication,
)


@pytest.fixture
def metformin():
    return medication(name="Metformin", time="08:00", start_date="2024-01-01",
                      end_date="2024-12-31", medication_id="med-metformin")


@pytest.fixture
def store(metformin):
    return InMemoryScheduleStore([metformin])


@pytest.fixture
def adherence_log():
    return InMemoryAdherenceLog()


@pytest.fixture
def sink():
    return RecordingNotificationSink()


@pytest.fixture
def clock():
    return FixedClock("2024-06-15 08:03")


@pytest.fixture
def evaluator(store, adherence_log, sink, clock):
    return ReminderEvaluator(store, adherence_log, sink, clock)


def run(evaluator):
    return asyncio.run(evaluator.run())


def test_due_medication_emits_one_notification(evaluator, sink, metformin):
    report = run(evaluator)

    assert report.result == "success"
    assert report.date == "2024-06-15"
    assert report.time == "08:03"
    assert report.emitted == 1

    [call] = sink.emit_calls
    assert call["title"] == REMINDER_TITLE
    assert call["body"] == "Metformin - 1 tabletka"
    assert call["routing"].medication_id == metformin.id
    assert call["routing"].owner_email == "anna@mail.com"
    assert call["notification_id"] == notification_id_for(metformin.id, "2024-06-15")


def test_past_end_date_never_emits(evaluator, sink, clock):
    for moment in ("2025-01-01 08:00", "2025-01-01 08:03", "2025-01-01 20:00"):
        clock.set(moment)
        report = run(evaluator)
        assert report.active == 0
        assert report.emitted == 0

    assert sink.emit_calls == []


def test_outside_tolerance_does_not_emit(evaluator, sink, clock):
    clock.set("2024-06-15 08:06")

    report = run(evaluator)

    assert report.active == 1
    assert report.due == 0
    assert sink.emit_calls == []


def test_repeated_runs_reuse_notification_id(evaluator, sink, clock):
    run(evaluator)
    clock.set("2024-06-15 08:05")
    run(evaluator)

    ids = sink.emitted_ids()
    assert len(ids) == 2
    assert ids[0] == ids[1]
    assert len(sink.active) == 1


def test_taken_event_suppresses_later_runs(evaluator, adherence_log, sink, clock, metformin):
    handler = AdherenceResponseHandler(adherence_log, sink, clock)
    asyncio.run(handler.record_response(
        medication_name=metformin.name,
        owner_email=metformin.owner_email,
        notification_id=None,
        response=ResponseKind.TAKEN,
    ))

    report = run(evaluator)

    assert report.due == 1
    assert report.suppressed == 1
    assert report.emitted == 0
    assert sink.emit_calls == []


def test_not_taken_event_does_not_suppress(evaluator, adherence_log, sink, clock, metformin):
    handler = AdherenceResponseHandler(adherence_log, sink, clock)
    asyncio.run(handler.record_response(
        medication_name=metformin.name,
        owner_email=metformin.owner_email,
        notification_id=None,
        response=ResponseKind.NOT_TAKEN,
    ))

    report = run(evaluator)

    assert report.suppressed == 0
    assert report.emitted == 1


def test_taken_event_from_another_day_does_not_suppress(evaluator, adherence_log, sink, clock, metformin):
    clock.set("2024-06-14 08:00")
    handler = AdherenceResponseHandler(adherence_log, sink, clock)
    asyncio.run(handler.record_response(metformin.name, metformin.owner_email, None, ResponseKind.TAKEN))

    clock.set("2024-06-15 08:03")
    report = run(evaluator)

    assert report.emitted == 1


def test_dedup_failure_still_emits(evaluator, adherence_log, sink):
    adherence_log.queries_fail = True

    report = run(evaluator)

    assert report.result == "success"
    assert report.dedup_failures == 1
    assert report.emitted == 1
    assert len(sink.emit_calls) == 1


def test_malformed_records_are_skipped_without_failing(store, evaluator, sink):
    store.medications.extend([
        medication(name="Broken date", start_date="2024/01/01"),
        medication(name="Broken time", time="8h"),
        medication(name="Inverted", start_date="2024-12-31", end_date="2024-01-01"),
    ])

    report = run(evaluator)

    assert report.result == "success"
    assert report.scanned == 4
    assert report.settled == 4
    assert report.emitted == 1
    assert [call["routing"].medication_name for call in sink.emit_calls] == ["Metformin"]


def test_fetch_failure_asks_for_retry(evaluator, store, sink):
    store.unavailable = True

    report = run(evaluator)

    assert report.result == "retry"
    assert report.scanned == 0
    assert sink.emit_calls == []
    assert asyncio.run(evaluator.handle()) == RunResult.RETRY


def test_handle_reports_success(evaluator):
    assert asyncio.run(evaluator.handle()) == RunResult.SUCCESS


def test_permission_failure_is_counted_and_batch_continues(store, evaluator, sink):
    store.medications.append(medication(name="Aspirin", owner_email="jan@mail.com"))
    sink.denied_owners.add("anna@mail.com")

    report = run(evaluator)

    assert report.result == "success"
    assert report.delivery_failures == 1
    assert report.emitted == 1
    assert [r.owner_email for r in report.reminders] == ["jan@mail.com"]


def test_unexpected_record_failure_is_isolated(store, evaluator, sink):
    broken = medication(name="Aspirin", medication_id="med-broken")
    store.medications.append(broken)
    sink.broken_medications.add(broken.id)

    report = run(evaluator)

    assert report.result == "success"
    assert report.settled == 2
    assert report.skipped == 1
    assert report.emitted == 1


def test_reminders_are_sorted(store, evaluator):
    store.medications[:] = [
        medication(name="Zinc", owner_email="zofia@mail.com"),
        medication(name="Ibuprofen", owner_email="anna@mail.com"),
        medication(name="Aspirin", owner_email="anna@mail.com"),
    ]

    report = run(evaluator)

    assert [(r.owner_email, r.medication_name) for r in report.reminders] == [
        ("anna@mail.com", "Aspirin"),
        ("anna@mail.com", "Ibuprofen"),
        ("zofia@mail.com", "Zinc"),
    ]


def test_custom_tolerance(store, adherence_log, sink, clock):
    clock.set("2024-06-15 08:10")
    evaluator = ReminderEvaluator(store, adherence_log, sink, clock, tolerance_minutes=10)

    assert run(evaluator).emitted == 1
