from django.urls import path

from .views import health_check, public_settings

app_name = "core"

urlpatterns = [
    path('health/', health_check, name='health_check'),
    path('settings/public/', public_settings, name='public_settings'),
]
