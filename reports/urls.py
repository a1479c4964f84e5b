from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import SchedulingReportViewSet

app_name = "reports"

router = DefaultRouter()
router.register(r"scheduling", SchedulingReportViewSet, basename="scheduling")

urlpatterns = [
    path("", include(router.urls)),
]
