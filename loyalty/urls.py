from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import LoyaltyProfileViewSet

app_name = "loyalty"

router = DefaultRouter()
router.register(r"profiles", LoyaltyProfileViewSet, basename="loyalty-profile")

urlpatterns = [
    path("", include(router.urls)),
]
