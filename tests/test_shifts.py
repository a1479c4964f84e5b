from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from core.exceptions import ConflictDetected, InvalidTransition, NotPermitted
from staff.conflicts import ShiftConflictChecker
from staff.models import Employee, Shift
from staff.services import ShiftScheduler
from tests.factories import EmployeeFactory, ShiftFactory


def _day():
    return timezone.localdate() + timedelta(days=3)


@pytest.mark.django_db
@pytest.mark.parametrize(
    "start,end,break_minutes,expected",
    [
        ("09:00", "13:00", 30, Shift.TYPE_MORNING),
        ("12:00", "16:00", 30, Shift.TYPE_AFTERNOON),
        ("17:00", "22:00", 30, Shift.TYPE_EVENING),
        ("08:00", "16:30", 30, Shift.TYPE_FULL_DAY),
        ("22:00", "07:00", 30, Shift.TYPE_FULL_DAY),
    ],
)
def test_shift_type_is_derived_when_unset(start, end, break_minutes, expected):
    shift = ShiftFactory(start_time=start, end_time=end, break_duration=break_minutes)
    assert shift.shift_type == expected


@pytest.mark.django_db
def test_explicit_shift_type_is_kept():
    shift = ShiftFactory(start_time="09:00", end_time="13:00", shift_type=Shift.TYPE_SPLIT)
    assert shift.shift_type == Shift.TYPE_SPLIT


@pytest.mark.django_db
def test_durations_subtract_break_and_wrap_midnight():
    overnight = ShiftFactory(start_time="22:00", end_time="06:00", break_duration=30)
    assert overnight.scheduled_duration == 450
    assert overnight.actual_duration is None

    short = ShiftFactory(start_time="09:00", end_time="09:20", break_duration=30)
    assert short.scheduled_duration == 0


@pytest.mark.django_db
def test_overtime_is_actual_time_beyond_eight_hours():
    shift = ShiftFactory(
        start_time="08:00", end_time="17:00", break_duration=30,
        status=Shift.STATUS_COMPLETED, actual_start_time="08:00", actual_end_time="18:00",
    )
    assert shift.actual_duration == 570
    assert shift.overtime_minutes == 90
    assert shift.is_overtime is True
    assert shift.overtime_hours == Decimal("1.50")

    regular = ShiftFactory(
        start_time="08:00", end_time="16:00",
        status=Shift.STATUS_COMPLETED, actual_start_time="08:00", actual_end_time="16:00",
    )
    assert regular.is_overtime is False
    assert regular.overtime_hours == Decimal("0.00")


@pytest.mark.django_db
def test_overtime_threshold_follows_settings(settings):
    settings.SHIFT_OVERTIME_THRESHOLD_MINUTES = 600
    shift = ShiftFactory(
        start_time="08:00", end_time="17:00", break_duration=30,
        status=Shift.STATUS_COMPLETED, actual_start_time="08:00", actual_end_time="18:00",
    )
    assert shift.actual_duration == 570
    assert shift.is_overtime is False
    assert shift.overtime_hours == Decimal("0.00")

    shift.actual_end_time = "19:00"
    shift.save()
    assert shift.overtime_minutes == 30
    assert shift.overtime_hours == Decimal("0.50")


@pytest.mark.django_db
def test_conflict_check_returns_the_overlapping_shift():
    first = ShiftFactory(start_time="09:00", end_time="13:00", date=_day())
    conflicts = ShiftConflictChecker().check(first.employee_id, _day(), "12:30", "16:00")
    assert conflicts == [first]

    # Touching at 13:00 is fine, as is another day
    assert ShiftConflictChecker().check(first.employee_id, _day(), "13:00", "17:00") == []
    assert ShiftConflictChecker().check(first.employee_id, _day() + timedelta(days=1), "12:30", "16:00") == []


@pytest.mark.django_db
def test_only_scheduled_and_in_progress_shifts_block():
    employee = EmployeeFactory()
    for status in (Shift.STATUS_CANCELLED, Shift.STATUS_NO_SHOW, Shift.STATUS_COMPLETED):
        ShiftFactory(employee=employee, date=_day(), start_time="09:00", end_time="13:00", status=status)
    assert ShiftConflictChecker().check(employee.pk, _day(), "10:00", "11:00") == []

    running = ShiftFactory(
        employee=employee, date=_day(), start_time="09:00", end_time="13:00",
        status=Shift.STATUS_IN_PROGRESS, actual_start_time="09:00",
    )
    assert ShiftConflictChecker().check(employee.pk, _day(), "10:00", "11:00") == [running]


@pytest.mark.django_db
def test_create_refuses_double_booking():
    scheduler = ShiftScheduler()
    first = ShiftFactory(start_time="09:00", end_time="13:00", date=_day())

    with pytest.raises(ConflictDetected) as exc:
        scheduler.create(
            employee=first.employee, date=_day(), start_time="12:30", end_time="16:00", position="Barista",
        )
    assert exc.value.conflicts == [first]
    assert exc.value.extra()["conflicts"][0]["id"] == first.pk
    assert Shift.objects.count() == 1

    later = scheduler.create(
        employee=first.employee, date=_day(), start_time="13:00", end_time="17:00", position="Barista",
    )
    assert later.shift_type == Shift.TYPE_AFTERNOON


@pytest.mark.django_db
def test_create_requires_active_employee():
    employee = EmployeeFactory(status=Employee.STATUS_ON_LEAVE)
    with pytest.raises(NotPermitted):
        ShiftScheduler().create(
            employee=employee, date=_day(), start_time="09:00", end_time="13:00", position="Barista",
        )


@pytest.mark.django_db
def test_update_does_not_conflict_with_itself():
    shift = ShiftFactory(start_time="09:00", end_time="13:00", date=_day())
    assert ShiftConflictChecker().check(
        shift.employee_id, shift.date, "10:00", "14:00", exclude_shift_id=shift.pk,
    ) == []

    ShiftScheduler().update(shift, start_time="10:00", end_time="14:00")
    shift.refresh_from_db()
    assert (shift.start_time, shift.end_time) == ("10:00", "14:00")


@pytest.mark.django_db
def test_failed_update_restores_the_shift():
    morning = ShiftFactory(start_time="09:00", end_time="13:00", date=_day())
    afternoon = ShiftFactory(employee=morning.employee, start_time="14:00", end_time="18:00", date=_day())

    with pytest.raises(ConflictDetected):
        ShiftScheduler().update(afternoon, start_time="12:00")
    assert afternoon.start_time == "14:00"
    afternoon.refresh_from_db()
    assert afternoon.start_time == "14:00"


@pytest.mark.django_db
def test_clock_in_and_out():
    scheduler = ShiftScheduler()
    shift = ShiftFactory(start_time="08:00", end_time="16:00", break_duration=30)

    with pytest.raises(InvalidTransition):
        scheduler.clock_out(shift, at="16:00")
    assert shift.status == Shift.STATUS_SCHEDULED
    assert shift.actual_end_time == ""

    scheduler.clock_in(shift, at="08:05")
    assert shift.status == Shift.STATUS_IN_PROGRESS
    assert shift.actual_start_time == "08:05"
    with pytest.raises(InvalidTransition):
        scheduler.clock_in(shift, at="08:10")

    scheduler.clock_out(shift, at="17:35")
    shift.refresh_from_db()
    assert shift.status == Shift.STATUS_COMPLETED
    assert shift.actual_duration == 540
    assert shift.is_overtime is True
    assert shift.overtime_hours == Decimal("1.00")


@pytest.mark.django_db
def test_no_show_only_from_scheduled():
    scheduler = ShiftScheduler()
    shift = ShiftFactory()
    scheduler.clock_in(shift, at="09:00")
    with pytest.raises(InvalidTransition):
        scheduler.mark_no_show(shift)
    assert Shift.objects.get(pk=shift.pk).status == Shift.STATUS_IN_PROGRESS


@pytest.mark.django_db
def test_in_progress_and_completed_shifts_cannot_be_deleted():
    scheduler = ShiftScheduler()
    shift = ShiftFactory()
    scheduler.clock_in(shift, at="09:00")
    with pytest.raises(InvalidTransition):
        scheduler.delete(shift)

    cancelled = ShiftFactory(employee=shift.employee, start_time="14:00", end_time="18:00")
    scheduler.cancel(cancelled)
    scheduler.delete(cancelled)
    assert not Shift.objects.filter(pk=cancelled.pk).exists()


@pytest.mark.django_db
def test_employee_codes_are_sequential():
    first = EmployeeFactory()
    second = EmployeeFactory()
    assert first.employee_code == "EMP0001"
    assert second.employee_code == "EMP0002"
