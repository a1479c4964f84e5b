from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import EmployeeViewSet, ShiftViewSet

app_name = "staff"

router = DefaultRouter()
router.register(r"employees", EmployeeViewSet, basename="employees")
router.register(r"shifts", ShiftViewSet, basename="shifts")

urlpatterns = [
    path("", include(router.urls)),
]
