from __future__ import annotations

from datetime import datetime

import pytest

from src.qr_attendance.qr_attendance.attendance.model import ScanRequest
from src.qr_attendance.qr_attendance.attendance.session_finder import OpenSessionFinder
from src.qr_attendance.qr_attendance.core.enums import Outcome, ScanMode
from src.qr_attendance.qr_attendance.core.exceptions import (
    AmbiguousEvent,
    EventNotFound,
    InvalidScan,
    NoOpenSession,
    SessionAlreadyClosed,
    UserInactive,
    UserNotFound,
)


def _in(ts, location="Aurora", user_id="u1", **kw) -> ScanRequest:
    return ScanRequest(user_id=user_id, mode=ScanMode.IN, timestamp=ts, location=location, **kw)


def _out(ts, location=None, user_id="u1") -> ScanRequest:
    return ScanRequest(user_id=user_id, mode=ScanMode.OUT, timestamp=ts, location=location)


def _open_entries(store, user_id="u1"):
    sessions = store.read(f"users/{user_id}/sessions") or {}
    return [k for k, v in sessions.items() if "clockOutTime" not in v]


def _add_event(store, event_id, start, end, location="Aurora", category="workshops"):
    store.write(
        f"events/{event_id}",
        {"title": event_id.upper(), "start": start, "end": end, "location": location, "category": category},
    )


def test_first_clock_in_opens_session_and_counts_day(engine, store, at):
    result = engine.reconcile(_in(at(9, 0)))

    assert result.outcome == Outcome.OPENED
    assert result.location == "aurora"
    assert result.is_late is False
    assert store.read("users/u1/stats/daysPresent") == 1
    assert store.read("users/u1/stats/daysLate") == 0
    assert store.read("users/u1/stats/attendanceRate") == 100.0

    record = store.read(f"attendance/aurora/2024-03-03/{result.session_key}")
    assert record["userId"] == "u1"
    assert record["status"] == "clocked-in"
    assert record["eventType"] == "general"
    assert store.read("locations/aurora") == {"name": "Aurora"}


def test_second_clock_in_is_no_op(engine, store, at):
    first = engine.reconcile(_in(at(9, 0)))
    second = engine.reconcile(_in(at(9, 1)))

    assert second.outcome == Outcome.NO_OP
    assert second.session_key == first.session_key
    assert store.read("users/u1/stats/daysPresent") == 1
    assert len(store.read("attendance/aurora/2024-03-03")) == 1


def test_clock_in_after_grace_against_event_is_late(engine, store, at):
    _add_event(store, "e1", "2024-03-03T09:00:00-06:00", "2024-03-03T10:00:00-06:00")

    result = engine.reconcile(_in(at(9, 20)))

    assert result.outcome == Outcome.OPENED
    assert result.event_id == "e1"
    assert result.category == "workshops"
    assert result.is_late is True
    assert store.read("users/u1/stats/daysLate") == 1
    assert store.read("users/u1/stats/onTimeRate") == 0.0
    assert store.read("users/u1/events/workshops/e1/attended") is True
    assert store.read("events/e1/participants/u1") is True


def test_clock_in_within_grace_is_on_time(engine, store, at):
    _add_event(store, "e1", "2024-03-03T09:00:00-06:00", "2024-03-03T10:00:00-06:00")

    result = engine.reconcile(_in(at(9, 15)))

    assert result.is_late is False
    assert store.read("users/u1/stats/onTimeRate") == 100.0


def test_two_matching_events_without_hint_is_ambiguous(engine, store, at):
    _add_event(store, "e1", "2024-03-03T09:00:00-06:00", "2024-03-03T10:00:00-06:00")
    _add_event(store, "e2", "2024-03-03T11:00:00-06:00", "2024-03-03T12:00:00-06:00", category="meetings")
    before = store.snapshot()

    with pytest.raises(AmbiguousEvent) as exc:
        engine.reconcile(_in(at(9, 5)))

    assert sorted(exc.value.candidates) == ["e1", "e2"]
    assert store.snapshot() == before
    assert store.read("attendance") is None


def test_event_hint_disambiguates(engine, store, at):
    _add_event(store, "e1", "2024-03-03T09:00:00-06:00", "2024-03-03T10:00:00-06:00")
    _add_event(store, "e2", "2024-03-03T11:00:00-06:00", "2024-03-03T12:00:00-06:00", category="meetings")

    result = engine.reconcile(_in(at(10, 55), event_hint="e2"))

    assert result.event_id == "e2"
    assert result.category == "meetings"
    assert result.is_late is False


def test_unknown_event_hint_fails(engine, store, at):
    with pytest.raises(EventNotFound):
        engine.reconcile(_in(at(9, 0), event_hint="missing"))
    assert store.read("attendance") is None


def test_category_hint_used_when_no_event(engine, store, at):
    result = engine.reconcile(_in(at(9, 0), category_hint="Group Meeting"))

    assert result.category == "meetings"
    assert result.event_id is None


def test_overnight_clock_out_found_in_user_index(engine, store, at):
    opened = engine.reconcile(_in(at(23, 50, day=3)))

    closed = engine.reconcile(_out(at(0, 10, day=4)))

    assert closed.outcome == Outcome.CLOSED
    assert closed.session_key == opened.session_key
    assert closed.hours_worked == pytest.approx(0.33)
    record = store.read(f"attendance/aurora/2024-03-03/{opened.session_key}")
    assert record["status"] == "completed"
    assert record["hoursWorked"] == pytest.approx(0.33)
    assert store.read("users/u1/stats/totalHours") == pytest.approx(0.33)
    assert _open_entries(store) == []


def test_clock_out_before_clock_in_is_clamped(engine, store, at):
    opened = engine.reconcile(_in(at(10, 0)))

    closed = engine.reconcile(_out(at(9, 30)))

    assert closed.hours_worked == 0.1
    assert closed.hours_clamped is True
    record = store.read(f"attendance/aurora/2024-03-03/{opened.session_key}")
    assert record["hoursWorked"] == 0.1
    assert record["hoursClamped"] is True
    assert record["rawHours"] == -0.5


def test_clock_out_without_open_session_mutates_nothing(engine, store, at):
    before = store.snapshot()

    with pytest.raises(NoOpenSession):
        engine.reconcile(_out(at(17, 0), location="Aurora"))

    assert store.snapshot() == before


def test_double_clock_out_is_rejected(engine, store, at):
    engine.reconcile(_in(at(9, 0)))
    engine.reconcile(_out(at(12, 0)))
    hours_after_first = store.read("users/u1/stats/totalHours")

    with pytest.raises(NoOpenSession):
        engine.reconcile(_out(at(12, 1)))

    assert store.read("users/u1/stats/totalHours") == hours_after_first == 3.0


def test_clock_out_of_already_closed_record_repairs_index(engine, store):
    store.batch_write(
        {
            "users/u1/sessions/1709478000000-u1": {
                "clockInTime": "2024-03-03T09:00:00-06:00",
                "location": "aurora",
                "date": "2024-03-03",
            },
            "attendance/aurora/2024-03-03/1709478000000-u1": {
                "userId": "u1",
                "clockInTime": "2024-03-03T09:00:00-06:00",
                "clockOutTime": "2024-03-03T11:00:00-06:00",
                "hoursWorked": 2.0,
                "status": "completed",
            },
        }
    )

    with pytest.raises(SessionAlreadyClosed):
        engine.reconcile(_out(datetime.fromisoformat("2024-03-03T12:00:00-06:00")))

    entry = store.read("users/u1/sessions/1709478000000-u1")
    assert entry["clockOutTime"] == "2024-03-03T11:00:00-06:00"
    assert store.read("attendance/aurora/2024-03-03/1709478000000-u1/hoursWorked") == 2.0


def test_location_required_without_location(engine, store, at):
    before = store.snapshot()

    result = engine.reconcile(_in(at(9, 0), location=None))

    assert result.outcome == Outcome.LOCATION_REQUIRED
    assert store.snapshot() == before


def test_unknown_user(engine, at):
    with pytest.raises(UserNotFound):
        engine.reconcile(_in(at(9, 0), user_id="nobody"))


def test_inactive_user_is_rejected(engine, store, at):
    before = store.snapshot()
    with pytest.raises(UserInactive):
        engine.reconcile(_in(at(9, 0), user_id="u2"))
    assert store.snapshot() == before


def test_user_id_with_path_characters_is_invalid(engine, at):
    with pytest.raises(InvalidScan):
        engine.reconcile(_in(at(9, 0), user_id="u1/stats"))


def test_only_first_session_of_day_counts_a_day(engine, store, at):
    engine.reconcile(_in(at(9, 0)))
    engine.reconcile(_out(at(10, 0)))
    engine.reconcile(_in(at(13, 0)))

    assert store.read("users/u1/stats/daysPresent") == 1
    assert store.read("users/u1/stats/lastClockIn") == at(13, 0).isoformat()
    assert store.read("users/u1/stats/totalHours") == 1.0


def test_at_most_one_open_session_across_sequences(engine, store, at):
    scans = [
        _in(at(9, 0)),
        _in(at(9, 5)),
        _out(at(11, 0)),
        _in(at(13, 0), location="Elgin"),
        _in(at(13, 30)),
        _out(at(15, 0), location="Aurora"),
        _in(at(8, 0, day=4)),
    ]
    for scan in scans:
        engine.reconcile(scan)
        assert len(_open_entries(store)) <= 1


def test_stale_open_session_is_auto_closed_on_next_clock_in(engine, store, at):
    store.batch_write(
        {
            "users/u1/sessions/1709132400000-u1": {
                "clockInTime": "2024-02-28T09:00:00-06:00",
                "location": "aurora",
                "date": "2024-02-28",
            },
            "attendance/aurora/2024-02-28/1709132400000-u1": {
                "userId": "u1",
                "clockInTime": "2024-02-28T09:00:00-06:00",
                "status": "clocked-in",
            },
        }
    )

    result = engine.reconcile(_in(at(9, 0)))

    assert result.outcome == Outcome.OPENED
    assert _open_entries(store) == [result.session_key]
    stale = store.read("attendance/aurora/2024-02-28/1709132400000-u1")
    assert stale["status"] == "auto-closed"
    assert stale["hoursWorked"] == 0
    assert stale["clockOutTime"] == stale["clockInTime"]
    assert store.read("users/u1/sessions/1709132400000-u1/autoClosed") is True
    assert store.read("users/u1/stats/totalHours") is None


def test_clock_out_falls_back_to_location_log(engine, store, at):
    # Record written without the user index entry (e.g. an older client).
    store.write(
        "attendance/aurora/2024-03-03/1709478000000-u1",
        {"userId": "u1", "clockInTime": "2024-03-03T09:00:00-06:00", "eventType": "general"},
    )

    closed = engine.reconcile(_out(at(11, 0), location="Aurora"))

    assert closed.session_key == "1709478000000-u1"
    assert closed.hours_worked == 2.0
    assert store.read("users/u1/sessions/1709478000000-u1/clockOutTime") == at(11, 0).isoformat()


def test_clock_out_falls_back_to_global_sweep(engine, store, at):
    store.batch_write(
        {
            "locations/elgin": {"name": "Elgin"},
            "attendance/elgin/2024-03-02/1709420400000-u1": {
                "userId": "u1",
                "clockInTime": "2024-03-02T17:00:00-06:00",
            },
        }
    )

    closed = engine.reconcile(_out(at(1, 0), location="Aurora"))

    assert closed.location == "elgin"
    assert closed.hours_worked == 8.0


def test_event_time_without_offset_is_org_wall_time(engine, store, at):
    _add_event(store, "e1", "2024-03-03T09:00:00", "2024-03-03T10:00:00")

    result = engine.reconcile(_in(at(9, 5)))

    assert result.event_id == "e1"
    assert result.is_late is False


def test_date_only_retreat_resolves_on_its_last_day(engine, store, at):
    _add_event(store, "r1", "2024-03-03", "2024-03-05", category="haciendas")

    result = engine.reconcile(_in(at(9, 10, day=5)))

    assert result.event_id == "r1"
    assert result.category == "haciendas"
    # Bare dates carry no start time; the default expected start applies.
    assert result.is_late is False


def test_hint_for_event_on_another_day_is_rejected(engine, store, at):
    _add_event(store, "old", "2024-02-25T09:00:00-06:00", "2024-02-25T10:00:00-06:00")
    before = store.snapshot()

    with pytest.raises(InvalidScan):
        engine.reconcile(_in(at(9, 0), event_hint="old"))

    assert store.snapshot() == before


def test_hint_for_event_at_another_location_is_rejected(engine, store, at):
    _add_event(store, "e1", "2024-03-03T09:00:00-06:00", "2024-03-03T10:00:00-06:00", location="Elgin")

    with pytest.raises(InvalidScan):
        engine.reconcile(_in(at(9, 0), event_hint="e1"))


def test_session_opened_after_lookup_turns_clock_in_into_no_op(container, store, at, monkeypatch):
    # Reads taken before another writer committed the 09:00 session.
    outdated = container.users_repo.get_by_id("u1")
    first = container.engine.reconcile(_in(at(9, 0)))
    monkeypatch.setattr(container.users_repo, "get_by_id", lambda user_id: outdated)
    monkeypatch.setattr(OpenSessionFinder, "find_open_session", lambda self, *args, **kwargs: None)

    second = container.engine.reconcile(_in(at(9, 1), location="Elgin"))

    assert second.outcome == Outcome.NO_OP
    assert second.session_key == first.session_key
    assert _open_entries(store) == [first.session_key]
    assert store.read("attendance/elgin") is None
    assert store.read("users/u1/stats/daysPresent") == 1
