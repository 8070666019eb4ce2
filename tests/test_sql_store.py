import asyncio
from contextlib import contextmanager

import pytest
from sqlalchemy.exc import OperationalError

from drugreminder.models.medication import Medication
from drugreminder.models.notification import Notification, NotificationStatus
from drugreminder.models.user import CaregiverLink, User, UserRole
from drugreminder.schemas.adherence import AdherenceEventCreate
from drugreminder.services.reminder_evaluator import ReminderEvaluator
from drugreminder.store.base import NotificationPermissionError, RoutingIdentity, StoreUnavailableError
from drugreminder.store.sql import SqlAdherenceLog, SqlNotificationSink, SqlScheduleStore

from tests.fakes import FixedClock


@pytest.fixture
def seeded(db_session):
    db_session.add_all([
        User(email="anna@mail.com", hashed_password="x", role=UserRole.PATIENT),
        User(email="jan@mail.com", hashed_password="x", role=UserRole.PATIENT, push_notifications=False),
        User(email="marek@mail.com", hashed_password="x", role=UserRole.CAREGIVER),
    ])
    db_session.flush()
    db_session.add(CaregiverLink(patient_email="anna@mail.com", caregiver_email="marek@mail.com"))
    db_session.add_all([
        Medication(id="med-anna", name="Metformin", dosage="1 tabletka", owner_email="anna@mail.com",
                   time="08:00", start_date="2024-01-01", end_date="2024-12-31"),
        Medication(id="med-jan", name="Aspirin", dosage="2 tabletki", owner_email="jan@mail.com",
                   time="08:00", start_date="2024-01-01", end_date="2024-12-31"),
        # Rango invertido: la tabla lo acepta
        Medication(id="med-inverted", name="Zinc", dosage="1", owner_email="anna@mail.com",
                   time="08:00", start_date="2024-12-31", end_date="2024-01-01"),
    ])
    db_session.commit()
    return db_session


def test_schedule_store_queries(seeded):
    store = SqlScheduleStore()

    all_medications = asyncio.run(store.fetch_all_medications())
    anna = asyncio.run(store.find_medications_by_owner("anna@mail.com"))
    wards = asyncio.run(store.find_patients_with_caregiver("marek@mail.com"))

    assert {m.id for m in all_medications} == {"med-anna", "med-jan", "med-inverted"}
    assert {m.id for m in anna} == {"med-anna", "med-inverted"}
    assert [w.email for w in wards] == ["anna@mail.com"]
    assert wards[0].caregivers == ["marek@mail.com"]


def test_adherence_log_append_then_query(seeded):
    log = SqlAdherenceLog()

    assert not asyncio.run(log.has_taken_event("anna@mail.com", "Metformin", "2024-06-15"))

    record = asyncio.run(log.append(AdherenceEventCreate(
        medication_name="Metformin",
        owner_email="anna@mail.com",
        date="2024-06-15",
        time_taken="08:04",
        taken=True,
    )))

    assert record.id
    assert asyncio.run(log.has_taken_event("anna@mail.com", "Metformin", "2024-06-15"))
    assert not asyncio.run(log.has_taken_event("anna@mail.com", "Metformin", "2024-06-16"))
    assert not asyncio.run(log.has_taken_event("jan@mail.com", "Metformin", "2024-06-15"))


def test_not_taken_event_does_not_count(seeded):
    log = SqlAdherenceLog()
    asyncio.run(log.append(AdherenceEventCreate(
        medication_name="Metformin", owner_email="anna@mail.com",
        date="2024-06-15", time_taken="08:04", taken=False,
    )))

    assert not asyncio.run(log.has_taken_event("anna@mail.com", "Metformin", "2024-06-15"))


def test_notification_sink_replaces_same_id(seeded):
    sink = SqlNotificationSink()
    routing = RoutingIdentity("med-anna", "Metformin", "anna@mail.com", "1 tabletka")

    asyncio.run(sink.emit("t", "primero", routing, "n-1"))
    asyncio.run(sink.dismiss("n-1"))
    asyncio.run(sink.emit("t", "segundo", routing, "n-1"))

    seeded.expire_all()
    notifications = seeded.query(Notification).all()
    assert len(notifications) == 1
    assert notifications[0].body == "segundo"
    assert notifications[0].emit_count == 2
    assert notifications[0].status == NotificationStatus.PENDING


def test_notification_sink_respects_push_setting(seeded):
    sink = SqlNotificationSink()
    routing = RoutingIdentity("med-jan", "Aspirin", "jan@mail.com")

    with pytest.raises(NotificationPermissionError):
        asyncio.run(sink.emit("t", "b", routing, "n-2"))

    with pytest.raises(NotificationPermissionError):
        asyncio.run(sink.emit("t", "b", RoutingIdentity("x", "y", "ghost@mail.com"), "n-3"))


def test_database_errors_become_store_unavailable():
    @contextmanager
    def broken_session():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        yield  # pragma: no cover

    store = SqlScheduleStore(session_factory=broken_session)

    with pytest.raises(StoreUnavailableError):
        asyncio.run(store.fetch_all_medications())


def test_evaluator_against_database(seeded):
    evaluator = ReminderEvaluator(
        SqlScheduleStore(), SqlAdherenceLog(), SqlNotificationSink(), FixedClock("2024-06-15 08:03")
    )

    report = asyncio.run(evaluator.run())

    assert report.result == "success"
    assert report.scanned == 3
    assert report.active == 2
    assert report.delivery_failures == 1
    assert [r.medication_id for r in report.reminders] == ["med-anna"]

    asyncio.run(SqlAdherenceLog().append(AdherenceEventCreate(
        medication_name="Metformin", owner_email="anna@mail.com",
        date="2024-06-15", time_taken="08:05", taken=True,
    )))

    second = asyncio.run(evaluator.run())
    assert second.suppressed == 1
    assert second.emitted == 0
