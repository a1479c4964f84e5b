from __future__ import annotations

import logging

import django_filters
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.exceptions import NotFound
from core.permissions import IsStaffMember
from reports.services import shift_summary, summarize_shifts

from .conflicts import ShiftConflictChecker
from .models import Employee, Shift
from .serializers import (
    ClockSerializer,
    ConflictQuerySerializer,
    EmployeeSerializer,
    ScheduleQuerySerializer,
    ShiftSerializer,
    ShiftWriteSerializer,
)
from .services import ShiftScheduler

logger = logging.getLogger(__name__)


class EmployeeViewSet(viewsets.ModelViewSet):
    queryset = Employee.objects.select_related("user").all()
    serializer_class = EmployeeSerializer
    permission_classes = [IsAuthenticated, IsStaffMember]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["status", "position", "department"]
    search_fields = ["employee_code", "first_name", "last_name", "email"]
    ordering_fields = ["last_name", "hire_date", "employee_code"]

    def perform_create(self, serializer):
        employee = serializer.save()
        logger.info(f"Employee {employee.employee_code} created by {self.request.user}")

    @action(detail=True, methods=["get"])
    def schedule(self, request: Request, pk: str | None = None) -> Response:
        """Shifts for one employee with hour totals. Query: date_from, date_to, status."""
        # ?status= filters shifts here, not employees
        employee = get_object_or_404(self.get_queryset(), pk=pk)
        params = ScheduleQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data

        shifts = employee.shifts.all()
        if data.get("date_from"):
            shifts = shifts.filter(date__gte=data["date_from"])
        if data.get("date_to"):
            shifts = shifts.filter(date__lte=data["date_to"])
        if data.get("status"):
            shifts = shifts.filter(status=data["status"])

        shifts = list(shifts.order_by("date", "start_time", "id"))
        return Response({
            "employee": {
                "id": employee.id,
                "employee_code": employee.employee_code,
                "name": employee.full_name,
                "position": employee.position,
                "department": employee.department,
            },
            "shifts": ShiftSerializer(shifts, many=True).data,
            "statistics": summarize_shifts(shifts),
        })


class ShiftFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = Shift
        fields = ["employee", "date", "date_from", "date_to", "status", "shift_type", "position"]


class ShiftViewSet(viewsets.ModelViewSet):
    """
    Shift scheduling (staff).

    Writes go through ``ShiftScheduler`` so the double-booking check runs
    under the employee's row lock.
    """
    queryset = Shift.objects.select_related("employee").all()
    serializer_class = ShiftSerializer
    permission_classes = [IsAuthenticated, IsStaffMember]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ShiftFilter
    search_fields = ["employee__first_name", "employee__last_name", "employee__employee_code", "notes"]
    ordering_fields = ["date", "start_time", "status"]
    ordering = ["date", "start_time", "id"]

    def get_scheduler(self) -> ShiftScheduler:
        return ShiftScheduler()

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = ShiftWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        shift = self.get_scheduler().create(created_by=request.user, **ser.validated_data)
        return Response(ShiftSerializer(shift).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, *args, **kwargs) -> Response:
        shift = self.get_object()
        ser = ShiftWriteSerializer(data=request.data, partial=kwargs.pop("partial", False))
        ser.is_valid(raise_exception=True)
        shift = self.get_scheduler().update(shift, **ser.validated_data)
        return Response(ShiftSerializer(shift).data)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        self.get_scheduler().delete(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"], url_path="check-conflicts")
    def check_conflicts(self, request: Request) -> Response:
        """Body: {employee, date, start_time, end_time, exclude_shift_id?}"""
        ser = ConflictQuerySerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        if not Employee.objects.filter(pk=data["employee"]).exists():
            raise NotFound(f"Employee {data['employee']} does not exist.")
        conflicts = ShiftConflictChecker().check(
            data["employee"], data["date"], data["start_time"], data["end_time"],
            exclude_shift_id=data.get("exclude_shift_id"),
        )
        return Response({
            "has_conflicts": bool(conflicts),
            "conflicts": ShiftSerializer(conflicts, many=True).data,
        })

    @action(detail=False, methods=["get"])
    def summary(self, request: Request) -> Response:
        """Counts by status and type with hour totals. Query: date_from, date_to."""
        params = ScheduleQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        return Response(shift_summary(data.get("date_from"), data.get("date_to")))

    @action(detail=True, methods=["post"], url_path="clock-in")
    def clock_in(self, request: Request, pk: str | None = None) -> Response:
        shift = self.get_object()
        ser = ClockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        self.get_scheduler().clock_in(shift, at=ser.validated_data.get("time"))
        return Response(ShiftSerializer(shift).data)

    @action(detail=True, methods=["post"], url_path="clock-out")
    def clock_out(self, request: Request, pk: str | None = None) -> Response:
        shift = self.get_object()
        ser = ClockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        self.get_scheduler().clock_out(shift, at=ser.validated_data.get("time"))
        return Response(ShiftSerializer(shift).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        shift = self.get_object()
        self.get_scheduler().cancel(shift)
        return Response(ShiftSerializer(shift).data)

    @action(detail=True, methods=["post"], url_path="no-show")
    def no_show(self, request: Request, pk: str | None = None) -> Response:
        shift = self.get_object()
        self.get_scheduler().mark_no_show(shift)
        return Response(ShiftSerializer(shift).data)
