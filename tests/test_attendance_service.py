from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from crmhub.core.exceptions import (
    AlreadyClosed,
    AlreadyMarkedToday,
    AlreadyOpen,
    Forbidden,
    InvalidOrdering,
    NotFound,
)
from crmhub.models.attendance import Attendance
from crmhub.services.attendance import AttendanceService
from crmhub.services.policy import ROLE_GATE, Operation, Principal
from crmhub.utils.datetime_utils import as_utc

TZ = "Asia/Kolkata"
# 09:00 in Kolkata on 6 May 2024
MORNING = datetime(2024, 5, 6, 3, 30, tzinfo=timezone.utc)


def principal(user):
    return Principal(user_id=user.id, role=user.role)


@pytest.fixture
def service(db):
    return AttendanceService(db, TZ)


def test_mark_in_uses_reference_timezone_date(service, make_user):
    user = make_user()
    # 20:00 UTC on the 5th is already the 6th in Kolkata
    record = service.mark_in(user, now=datetime(2024, 5, 5, 20, 0, tzinfo=timezone.utc))

    assert record.date == "2024-05-06"
    assert record.mark_out_time is None


def test_second_mark_in_while_open_fails(service, make_user):
    user = make_user()
    service.mark_in(user, now=MORNING)

    with pytest.raises(AlreadyOpen):
        service.mark_in(user, now=MORNING + timedelta(hours=1))


def test_open_interval_from_previous_day_blocks_mark_in(service, make_user):
    user = make_user()
    service.mark_in(user, now=MORNING)

    with pytest.raises(AlreadyOpen):
        service.mark_in(user, now=MORNING + timedelta(days=1))


def test_mark_in_after_mark_out_same_day_fails(service, make_user):
    user = make_user()
    record = service.mark_in(user, now=MORNING)
    service.mark_out(record.id, principal(user), now=MORNING + timedelta(hours=8))

    with pytest.raises(AlreadyMarkedToday):
        service.mark_in(user, now=MORNING + timedelta(hours=9))


def test_mark_in_next_day_after_mark_out(service, make_user):
    user = make_user()
    record = service.mark_in(user, now=MORNING)
    service.mark_out(record.id, principal(user), now=MORNING + timedelta(hours=8))

    next_day = service.mark_in(user, now=MORNING + timedelta(days=1))
    assert next_day.date == "2024-05-07"


def test_repeated_mark_out_keeps_first_time(service, make_user):
    user = make_user()
    record = service.mark_in(user, now=MORNING)
    first_out = MORNING + timedelta(hours=8)
    service.mark_out(record.id, principal(user), now=first_out)

    with pytest.raises(AlreadyClosed):
        service.mark_out(record.id, principal(user), now=first_out + timedelta(hours=1))

    assert as_utc(service.db.get(Attendance, record.id).mark_out_time) == first_out


def test_mark_out_must_follow_mark_in(service, make_user):
    user = make_user()
    record = service.mark_in(user, now=MORNING)

    with pytest.raises(InvalidOrdering):
        service.mark_out(record.id, principal(user), now=MORNING)
    with pytest.raises(InvalidOrdering):
        service.mark_out(record.id, principal(user), now=MORNING - timedelta(minutes=5))


def test_mark_out_unknown_record(service, make_user):
    user = make_user()
    with pytest.raises(NotFound):
        service.mark_out(12345, principal(user), now=MORNING)


def test_only_owner_or_admin_can_mark_out(service, make_user):
    manager = make_user(role="manager")
    owner = make_user(manager=manager)
    admin = make_user(role="admin")
    record = service.mark_in(owner, now=MORNING)

    with pytest.raises(Forbidden):
        service.mark_out(record.id, Principal(user_id=manager.id, role="manager", team_member_ids=frozenset({owner.id})))

    closed = service.mark_out(record.id, principal(admin), now=MORNING + timedelta(hours=1))
    assert closed.mark_out_time is not None


def test_concurrent_mark_in_is_translated(service, make_user, monkeypatch):
    user = make_user()
    service.mark_in(user, now=MORNING)

    # A second request that passed the checks before the first insert landed
    real_open_interval = service._open_interval
    calls = []

    def stale_open_interval(user_id):
        calls.append(user_id)
        return None if len(calls) == 1 else real_open_interval(user_id)

    monkeypatch.setattr(service, "_open_interval", stale_open_interval)
    monkeypatch.setattr(service, "_record_for_day", lambda user_id, day: None)

    with pytest.raises(AlreadyOpen):
        service.mark_in(user, now=MORNING + timedelta(minutes=1))

    assert service.db.query(Attendance).filter(Attendance.user_id == user.id).count() == 1


def test_storage_allows_one_open_interval_per_user(db, make_user):
    user = make_user()
    db.add(Attendance(user_id=user.id, date="2024-05-06", mark_in_time=MORNING))
    db.commit()

    db.add(Attendance(user_id=user.id, date="2024-05-07", mark_in_time=MORNING + timedelta(days=1)))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_list_attendance_is_scoped(service, make_user):
    admin = make_user(role="admin")
    manager = make_user(role="manager")
    member = make_user(manager=manager)
    outsider = make_user()
    for user in (manager, member, outsider):
        service.mark_in(user, now=MORNING)

    team_view = Principal(user_id=manager.id, role="manager", team_member_ids=frozenset({member.id}))
    assert {row["user_id"] for row in service.list_attendance(team_view)} == {manager.id, member.id}
    assert {row["user_id"] for row in service.list_attendance(principal(outsider))} == {outsider.id}
    assert len(service.list_attendance(principal(admin))) == 3

    row = service.list_attendance(principal(outsider))[0]
    assert row["user_name"] == outsider.name
    assert row["user_email"] == outsider.email


def test_unscoped_attendance_follows_role_gate(service, make_user, monkeypatch):
    manager = make_user(role="manager")
    for user in (manager, make_user(), make_user()):
        service.mark_in(user, now=MORNING)

    assert len(service.list_attendance(principal(manager))) == 1

    monkeypatch.setitem(ROLE_GATE, Operation.VIEW_ALL_ATTENDANCE, frozenset({"manager"}))
    assert len(service.list_attendance(principal(manager))) == 3


def test_my_attendance_date_filter(service, make_user):
    user = make_user()
    for day in range(3):
        record = service.mark_in(user, now=MORNING + timedelta(days=day))
        service.mark_out(record.id, principal(user), now=MORNING + timedelta(days=day, hours=8))

    rows = service.my_attendance(user.id, start_date=date(2024, 5, 7), end_date=date(2024, 5, 8))
    assert [row.date for row in rows] == ["2024-05-08", "2024-05-07"]
