# reservations/urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CapacityViewSet, ReservationViewSet

app_name = "reservations"

router = DefaultRouter()
router.register(r"reservations/capacity", CapacityViewSet, basename="reservations-capacity")
router.register(r"reservations", ReservationViewSet, basename="reservations")

urlpatterns = [
    path("", include(router.urls)),
]
