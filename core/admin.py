from django.contrib import admin

from .models import RestaurantSettings


@admin.register(RestaurantSettings)
class RestaurantSettingsAdmin(admin.ModelAdmin):
    list_display = ("business_name", "enable_reservations", "max_capacity", "dining_duration", "updated_at")
    readonly_fields = ("updated_at",)

    fieldsets = (
        ("Business", {
            "fields": ("business_name", "contact_email", "contact_phone")
        }),
        ("Reservations", {
            "fields": (
                "enable_reservations", "max_capacity", "dining_duration",
                "min_party_size", "max_party_size", "max_advance_days", "time_slots",
            )
        }),
        ("Overrides & Blocks", {
            "fields": ("slot_capacity_overrides", "blocked_dates", "blocked_slots"),
            "classes": ("collapse",)
        }),
        ("Timestamps", {
            "fields": ("updated_at",),
            "classes": ("collapse",)
        }),
    )

    def has_add_permission(self, request):
        return not RestaurantSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
