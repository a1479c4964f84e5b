from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsStaffMember, is_staff_member

from .models import LoyaltyProfile
from .serializers import LoyaltyPointsLedgerSerializer, LoyaltyProfileSerializer, PointsAdjustmentSerializer
from .services import adjust_points


class LoyaltyProfileViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.UpdateModelMixin, viewsets.GenericViewSet):
    queryset = LoyaltyProfile.objects.select_related("user").all()
    serializer_class = LoyaltyProfileSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["tier"]
    search_fields = ["user__username", "user__email"]
    ordering_fields = ["points"]
    ordering = ["-points"]

    def get_queryset(self):
        qs = super().get_queryset()
        if is_staff_member(self.request.user):
            return qs
        # Non-staff only sees their own profile
        return qs.filter(user=self.request.user)

    def get_permissions(self):
        if self.action in ("update", "partial_update", "adjust"):
            return [IsStaffMember()]
        return super().get_permissions()

    @action(detail=False, methods=["get"])
    def me(self, request):
        profile, _ = LoyaltyProfile.objects.get_or_create(user=request.user)
        return Response(self.get_serializer(profile).data)

    @action(detail=True, methods=["post"])
    def adjust(self, request, pk=None):
        """Manual adjustment with reason. Body: {delta:int, reason:str, reference?:str}"""
        profile = self.get_object()
        ser = PointsAdjustmentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        adjust_points(profile, created_by=request.user, **ser.validated_data)
        profile.refresh_from_db()
        return Response({"ok": True, "profile_id": profile.id, "points": profile.points, "tier": profile.tier})

    @action(detail=True, methods=["get"])
    def ledger(self, request, pk=None):
        profile = self.get_object()
        ser = LoyaltyPointsLedgerSerializer(profile.ledger.all()[:200], many=True)
        return Response(ser.data)
