from __future__ import annotations

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from .serializers import DateRangeSerializer
from .services import reservation_stats, schedule_statistics, shift_summary


class SchedulingReportViewSet(viewsets.ViewSet):
    """
    Admin-only scheduling statistics.
    Query params: date_from, date_to (YYYY-MM-DD), both inclusive.
    """
    permission_classes = [IsAdminUser]

    def _range(self, request):
        params = DateRangeSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return params.validated_data.get("date_from"), params.validated_data.get("date_to")

    def list(self, request):
        return Response(schedule_statistics(*self._range(request)))

    @action(detail=False, methods=["get"])
    def reservations(self, request):
        return Response(reservation_stats(*self._range(request)))

    @action(detail=False, methods=["get"])
    def shifts(self, request):
        return Response(shift_summary(*self._range(request)))
