from __future__ import annotations

from rest_framework import serializers

from core.intervals import is_valid_time, normalize_time

from .models import Employee, Shift


def _validate_hhmm(value: str) -> str:
    if not is_valid_time(value):
        raise serializers.ValidationError("Time must be HH:MM (24h).")
    return normalize_time(value)


class EmployeeSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Employee
        fields = [
            "id",
            "employee_code",
            "user",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "phone",
            "position",
            "department",
            "hire_date",
            "date_of_birth",
            "salary",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "employee_code", "full_name", "created_at", "updated_at"]


class ShiftSerializer(serializers.ModelSerializer):
    """Read representation with the derived durations."""
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    employee_code = serializers.CharField(source="employee.employee_code", read_only=True)
    scheduled_duration = serializers.IntegerField(read_only=True)
    actual_duration = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Shift
        fields = [
            "id",
            "employee",
            "employee_name",
            "employee_code",
            "date",
            "start_time",
            "end_time",
            "shift_type",
            "position",
            "notes",
            "status",
            "actual_start_time",
            "actual_end_time",
            "break_duration",
            "scheduled_duration",
            "actual_duration",
            "is_overtime",
            "overtime_hours",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ShiftWriteSerializer(serializers.Serializer):
    employee = serializers.PrimaryKeyRelatedField(queryset=Employee.objects.all())
    date = serializers.DateField()
    start_time = serializers.CharField(max_length=5)
    end_time = serializers.CharField(max_length=5)
    shift_type = serializers.ChoiceField(choices=Shift.SHIFT_TYPE_CHOICES, required=False, allow_blank=True)
    position = serializers.ChoiceField(choices=Shift.POSITION_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)
    break_duration = serializers.IntegerField(min_value=0, max_value=120, required=False)

    def validate_start_time(self, value: str) -> str:
        return _validate_hhmm(value)

    def validate_end_time(self, value: str) -> str:
        return _validate_hhmm(value)


class ConflictQuerySerializer(serializers.Serializer):
    employee = serializers.IntegerField()
    date = serializers.DateField()
    start_time = serializers.CharField(max_length=5)
    end_time = serializers.CharField(max_length=5)
    exclude_shift_id = serializers.IntegerField(required=False)

    def validate_start_time(self, value: str) -> str:
        return _validate_hhmm(value)

    def validate_end_time(self, value: str) -> str:
        return _validate_hhmm(value)


class ClockSerializer(serializers.Serializer):
    time = serializers.CharField(max_length=5, required=False)

    def validate_time(self, value: str) -> str:
        return _validate_hhmm(value)


class ScheduleQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=Shift.STATUS_CHOICES, required=False)
