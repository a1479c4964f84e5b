from __future__ import annotations

from typing import Any

from django.utils import timezone
from rest_framework import serializers

from core.intervals import is_valid_time, normalize_time
from core.models import RestaurantSettings

from .models import Reservation, ReservationNote


def _validate_hhmm(value: str) -> str:
    if not is_valid_time(value):
        raise serializers.ValidationError("Time must be HH:MM (24h).")
    return normalize_time(value)


class ReservationNoteSerializer(serializers.ModelSerializer):
    author_name = serializers.SerializerMethodField()

    class Meta:
        model = ReservationNote
        fields = ["id", "content", "author", "author_name", "created_at"]
        read_only_fields = ["id", "author", "author_name", "created_at"]

    def get_author_name(self, obj: ReservationNote) -> str:
        if obj.author is None:
            return ""
        return obj.author.get_full_name() or obj.author.get_username()


class ReservationSerializer(serializers.ModelSerializer):
    """Read representation; writes go through the input serializers below."""
    notes = ReservationNoteSerializer(many=True, read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    starts_at = serializers.SerializerMethodField()
    can_be_cancelled = serializers.SerializerMethodField()

    class Meta:
        model = Reservation
        fields = [
            "id",
            "confirmation_code",
            "user",
            "date",
            "time",
            "starts_at",
            "estimated_duration",
            "party_size",
            "table_number",
            "table_type",
            "occasion",
            "preferences",
            "special_requests",
            "contact_name",
            "contact_phone",
            "contact_email",
            "status",
            "status_display",
            "can_be_cancelled",
            "reminder_sent",
            "reminder_sent_at",
            "checked_in_at",
            "completed_at",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_starts_at(self, obj: Reservation) -> str:
        return timezone.localtime(obj.starts_at).isoformat()

    def get_can_be_cancelled(self, obj: Reservation) -> bool:
        return obj.can_be_cancelled()

    def to_representation(self, instance: Reservation) -> dict[str, Any]:
        data = super().to_representation(instance)
        for f in ("reminder_sent_at", "checked_in_at", "completed_at", "cancelled_at", "created_at", "updated_at"):
            val = getattr(instance, f, None)
            if val is not None:
                data[f] = timezone.localtime(val).isoformat()
        return data


class ReservationCreateSerializer(serializers.Serializer):
    """
    Booking input. Contact fields fall back to the signed-in user's
    profile when omitted.
    """
    date = serializers.DateField()
    time = serializers.CharField(max_length=5)
    party_size = serializers.IntegerField(min_value=1, max_value=20)
    estimated_duration = serializers.IntegerField(min_value=30, max_value=180, required=False, default=90)
    table_type = serializers.ChoiceField(choices=Reservation.TABLE_TYPE_CHOICES, required=False, default=Reservation.TABLE_REGULAR)
    occasion = serializers.ChoiceField(choices=Reservation.OCCASION_CHOICES, required=False, default="none")
    preferences = serializers.ListField(child=serializers.CharField(max_length=50), required=False, default=list)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)
    contact_name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    contact_phone = serializers.CharField(max_length=30)
    contact_email = serializers.EmailField(required=False, allow_blank=True)

    def validate_time(self, value: str) -> str:
        return _validate_hhmm(value)

    def validate(self, attrs):
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            if not attrs.get("contact_name"):
                attrs["contact_name"] = user.get_full_name() or user.get_username()
            if not attrs.get("contact_email"):
                attrs["contact_email"] = user.email
        if not attrs.get("contact_name"):
            raise serializers.ValidationError({"contact_name": "This field is required."})
        if not attrs.get("contact_email"):
            raise serializers.ValidationError({"contact_email": "This field is required."})
        return attrs


class ReservationUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    time = serializers.CharField(max_length=5, required=False)
    party_size = serializers.IntegerField(min_value=1, max_value=20, required=False)
    estimated_duration = serializers.IntegerField(min_value=30, max_value=180, required=False)
    table_type = serializers.ChoiceField(choices=Reservation.TABLE_TYPE_CHOICES, required=False)
    occasion = serializers.ChoiceField(choices=Reservation.OCCASION_CHOICES, required=False)
    preferences = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    special_requests = serializers.CharField(required=False, allow_blank=True, max_length=500)
    contact_name = serializers.CharField(required=False, max_length=120)
    contact_phone = serializers.CharField(required=False, max_length=30)
    contact_email = serializers.EmailField(required=False)

    def validate_time(self, value: str) -> str:
        return _validate_hhmm(value)


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    time = serializers.CharField(max_length=5)
    party_size = serializers.IntegerField(min_value=1)

    def validate_time(self, value: str) -> str:
        return _validate_hhmm(value)


class AvailableSlotsQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    party_size = serializers.IntegerField(min_value=1, required=False, default=2)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class CheckInSerializer(serializers.Serializer):
    table_number = serializers.CharField(max_length=10)


class NoteInputSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=1000)


# ---------------------------------------------------------------------------
# Capacity administration
# ---------------------------------------------------------------------------

class CapacitySettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = RestaurantSettings
        fields = [
            "enable_reservations",
            "max_capacity",
            "dining_duration",
            "min_party_size",
            "max_party_size",
            "max_advance_days",
            "time_slots",
            "slot_capacity_overrides",
            "blocked_dates",
            "blocked_slots",
            "updated_at",
        ]
        read_only_fields = ["slot_capacity_overrides", "blocked_dates", "blocked_slots", "updated_at"]

    def validate_time_slots(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of HH:MM times.")
        return [_validate_hhmm(v) for v in value]


class SlotOverrideSerializer(serializers.Serializer):
    date = serializers.DateField()
    time = serializers.CharField(max_length=5)
    # null clears the override
    capacity = serializers.IntegerField(min_value=0, max_value=500, allow_null=True)

    def validate_time(self, value: str) -> str:
        return _validate_hhmm(value)


class SlotBlockSerializer(serializers.Serializer):
    date = serializers.DateField()
    time = serializers.CharField(max_length=5)
    blocked = serializers.BooleanField(required=False, default=True)

    def validate_time(self, value: str) -> str:
        return _validate_hhmm(value)


class DateBlockSerializer(serializers.Serializer):
    date = serializers.DateField()
    blocked = serializers.BooleanField(required=False, default=True)


class LookupQuerySerializer(serializers.Serializer):
    code = serializers.CharField(max_length=8)
    email = serializers.EmailField()


class ExportQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=Reservation.STATUS_CHOICES, required=False)
