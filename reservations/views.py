from __future__ import annotations

import csv
import io
import logging

import django_filters
from django.db import transaction
from django.http import HttpResponse
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.exceptions import NotFound
from core.models import RestaurantSettings
from core.permissions import IsOwnerOrStaff, IsStaffMember
from reports.services import reservation_stats

from . import notifications
from .availability import AvailabilityChecker
from .lifecycle import ReservationLifecycle
from .models import Reservation
from .serializers import (
    AvailabilityQuerySerializer,
    AvailableSlotsQuerySerializer,
    CancelSerializer,
    CapacitySettingsSerializer,
    CheckInSerializer,
    DateBlockSerializer,
    ExportQuerySerializer,
    LookupQuerySerializer,
    NoteInputSerializer,
    ReservationCreateSerializer,
    ReservationNoteSerializer,
    ReservationSerializer,
    ReservationUpdateSerializer,
    SlotBlockSerializer,
    SlotOverrideSerializer,
)

logger = logging.getLogger(__name__)


class ReservationFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = Reservation
        fields = ["status", "date", "date_from", "date_to", "table_number"]


class ReservationViewSet(viewsets.ModelViewSet):
    """
    Reservations.

    Booking, availability and lookup by confirmation code are public.
    Guests see and change their own bookings; the floor (confirm, seat,
    complete, no-show, notes, reminders) is staff-only.
    """
    queryset = Reservation.objects.select_related("user", "cancelled_by").prefetch_related("notes__author")
    serializer_class = ReservationSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ReservationFilter
    search_fields = ["contact_name", "contact_phone", "contact_email", "confirmation_code"]
    ordering_fields = ["date", "time", "party_size", "created_at"]
    ordering = ["date", "time", "id"]
    lookup_value_regex = r"\d+"

    PUBLIC_ACTIONS = ("create", "check_availability", "available_slots", "lookup")
    OWNER_ACTIONS = ("retrieve", "update", "partial_update", "cancel")

    def get_permissions(self):
        if self.action in self.PUBLIC_ACTIONS:
            return [AllowAny()]
        if self.action in self.OWNER_ACTIONS:
            return [IsAuthenticated(), IsOwnerOrStaff()]
        if self.action == "my_reservations":
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsStaffMember()]

    def get_lifecycle(self) -> ReservationLifecycle:
        return ReservationLifecycle()

    def _paginated(self, qs) -> Response:
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ReservationSerializer(page, many=True).data)
        return Response(ReservationSerializer(qs, many=True).data)

    # ---------------- CRUD ----------------

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = ReservationCreateSerializer(data=request.data, context={"request": request})
        ser.is_valid(raise_exception=True)
        user = request.user if request.user and request.user.is_authenticated else None
        reservation = self.get_lifecycle().book(user=user, **ser.validated_data)
        notifications.send_booking_received(reservation)
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, *args, **kwargs) -> Response:
        reservation = self.get_object()
        ser = ReservationUpdateSerializer(data=request.data, partial=kwargs.pop("partial", False))
        ser.is_valid(raise_exception=True)
        reservation = self.get_lifecycle().update(reservation, actor=request.user, **ser.validated_data)
        return Response(ReservationSerializer(reservation).data)

    def perform_destroy(self, instance: Reservation) -> None:
        code = instance.confirmation_code
        instance.delete()
        logger.info(f"Reservation {code} deleted by {self.request.user}")

    # ---------------- Public ----------------

    @action(detail=False, methods=["get"], url_path="check-availability")
    def check_availability(self, request: Request) -> Response:
        """GET ?date=YYYY-MM-DD&time=HH:MM&party_size=N"""
        params = AvailabilityQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        result = AvailabilityChecker().check(data["date"], data["time"], data["party_size"])
        return Response(result.as_dict())

    @action(detail=False, methods=["get"], url_path="available-slots")
    def available_slots(self, request: Request) -> Response:
        """Every configured time slot on ``date`` with its availability for ``party_size``."""
        params = AvailableSlotsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        slots = AvailabilityChecker().available_slots(data["date"], data["party_size"])
        return Response({
            "date": data["date"].isoformat(),
            "party_size": data["party_size"],
            "slots": slots,
        })

    @action(detail=False, methods=["get"])
    def lookup(self, request: Request) -> Response:
        """GET ?code=ABCD1234&email=guest@example.com"""
        params = LookupQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        reservation = (
            self.get_queryset()
            .filter(
                confirmation_code=params.validated_data["code"].strip().upper(),
                contact_email__iexact=params.validated_data["email"],
            )
            .first()
        )
        if reservation is None:
            raise NotFound("No reservation matches that code and email.")
        return Response(ReservationSerializer(reservation).data)

    # ---------------- Guest ----------------

    @action(detail=False, methods=["get"], url_path="my-reservations")
    def my_reservations(self, request: Request) -> Response:
        """Own bookings. Query: upcoming=true, status, date_from, date_to."""
        qs = self.filter_queryset(self.get_queryset()).filter(user=request.user)
        if str(request.query_params.get("upcoming", "")).lower() in ("1", "true", "yes"):
            qs = qs.upcoming()
        return self._paginated(qs)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        reservation = self.get_object()
        ser = CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        self.get_lifecycle().cancel(reservation, reason=ser.validated_data["reason"], actor=request.user)
        notifications.send_cancellation(reservation)
        return Response(ReservationSerializer(reservation).data)

    # ---------------- Staff ----------------

    @action(detail=False, methods=["get"])
    def today(self, request: Request) -> Response:
        qs = self.filter_queryset(self.get_queryset()).on_date(timezone.localdate())
        return Response(ReservationSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        params = ExportQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        return Response(reservation_stats(data.get("date_from"), data.get("date_to")))

    @action(detail=False, methods=["get"], url_path="export-csv")
    def export_csv(self, request: Request) -> HttpResponse:
        """Export reservations between date_from and date_to (YYYY-MM-DD)."""
        params = ExportQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        qs = Reservation.objects.all()
        if data.get("date_from"):
            qs = qs.filter(date__gte=data["date_from"])
        if data.get("date_to"):
            qs = qs.filter(date__lte=data["date_to"])
        if data.get("status"):
            qs = qs.filter(status=data["status"])

        sio = io.StringIO()
        w = csv.writer(sio)
        w.writerow([
            "confirmation_code", "date", "time", "party_size", "status", "table_number",
            "contact_name", "contact_phone", "contact_email", "occasion", "special_requests",
        ])
        for r in qs.order_by("date", "time", "id"):
            w.writerow([
                r.confirmation_code, r.date, r.time, r.party_size, r.status, r.table_number,
                r.contact_name, r.contact_phone, r.contact_email, r.occasion, r.special_requests,
            ])
        resp = HttpResponse(sio.getvalue(), content_type="text/csv")
        resp["Content-Disposition"] = 'attachment; filename="reservations.csv"'
        return resp

    @action(detail=True, methods=["post"])
    def confirm(self, request: Request, pk: str | None = None) -> Response:
        reservation = self.get_object()
        self.get_lifecycle().confirm(reservation, actor=request.user)
        notifications.send_confirmation(reservation)
        return Response(ReservationSerializer(reservation).data)

    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request: Request, pk: str | None = None) -> Response:
        reservation = self.get_object()
        ser = CheckInSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        self.get_lifecycle().check_in(reservation, ser.validated_data["table_number"], actor=request.user)
        return Response(ReservationSerializer(reservation).data)

    @action(detail=True, methods=["post"])
    def complete(self, request: Request, pk: str | None = None) -> Response:
        reservation = self.get_object()
        self.get_lifecycle().complete(reservation, actor=request.user)
        return Response(ReservationSerializer(reservation).data)

    @action(detail=True, methods=["post"], url_path="no-show")
    def no_show(self, request: Request, pk: str | None = None) -> Response:
        reservation = self.get_object()
        self.get_lifecycle().mark_no_show(reservation, actor=request.user)
        return Response(ReservationSerializer(reservation).data)

    @action(detail=True, methods=["post"])
    def notes(self, request: Request, pk: str | None = None) -> Response:
        reservation = self.get_object()
        ser = NoteInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        note = self.get_lifecycle().add_note(reservation, ser.validated_data["content"], author=request.user)
        return Response(ReservationNoteSerializer(note).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="send-reminder")
    def send_reminder(self, request: Request, pk: str | None = None) -> Response:
        reservation = self.get_object()
        self.get_lifecycle().mark_reminder_sent(reservation, actor=request.user)
        data = ReservationSerializer(reservation).data
        data["email_sent"] = notifications.send_reminder(reservation)
        return Response(data)


class CapacityViewSet(viewsets.ViewSet):
    """
    Capacity administration (staff).

    GET/PATCH  settings/     enable flag, max capacity, dining duration, slots
    POST       overrides/    {date, time, capacity}; a null capacity clears it
    POST       block-slot/   {date, time, blocked}
    POST       block-date/   {date, blocked}
    """
    permission_classes = [IsAuthenticated, IsStaffMember]

    def _save(self, row: RestaurantSettings, message: str) -> Response:
        row.save()
        logger.info(f"Capacity settings changed by {self.request.user}: {message}")
        return Response(CapacitySettingsSerializer(row).data)

    def list(self, request: Request) -> Response:
        return Response(CapacitySettingsSerializer(RestaurantSettings.get_or_create_defaults()).data)

    @action(detail=False, methods=["get", "patch"], url_path="settings")
    def capacity_settings(self, request: Request) -> Response:
        if request.method == "GET":
            return self.list(request)
        with transaction.atomic():
            row = RestaurantSettings.get_or_create_defaults(for_update=True)
            ser = CapacitySettingsSerializer(row, data=request.data, partial=True)
            ser.is_valid(raise_exception=True)
            ser.save()
        logger.info(f"Capacity settings changed by {request.user}: {', '.join(sorted(ser.validated_data))}")
        return Response(ser.data)

    @action(detail=False, methods=["post"])
    def overrides(self, request: Request) -> Response:
        ser = SlotOverrideSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        with transaction.atomic():
            row = RestaurantSettings.get_or_create_defaults(for_update=True)
            if data["capacity"] is None:
                row.clear_slot_override(data["date"], data["time"])
                return self._save(row, f"cleared override {data['date']} {data['time']}")
            row.set_slot_override(data["date"], data["time"], data["capacity"])
            return self._save(row, f"override {data['date']} {data['time']} = {data['capacity']}")

    @action(detail=False, methods=["post"], url_path="block-slot")
    def block_slot(self, request: Request) -> Response:
        ser = SlotBlockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        with transaction.atomic():
            row = RestaurantSettings.get_or_create_defaults(for_update=True)
            if data["blocked"]:
                row.block_slot(data["date"], data["time"])
            else:
                row.unblock_slot(data["date"], data["time"])
            verb = "blocked" if data["blocked"] else "unblocked"
            return self._save(row, f"{verb} slot {data['date']} {data['time']}")

    @action(detail=False, methods=["post"], url_path="block-date")
    def block_date(self, request: Request) -> Response:
        ser = DateBlockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        with transaction.atomic():
            row = RestaurantSettings.get_or_create_defaults(for_update=True)
            if data["blocked"]:
                row.block_date(data["date"])
            else:
                row.unblock_date(data["date"])
            verb = "blocked" if data["blocked"] else "unblocked"
            return self._save(row, f"{verb} date {data['date']}")
