from __future__ import annotations

from django.contrib import admin, messages
from django.core.exceptions import ValidationError

from core.exceptions import SchedulingError

from .lifecycle import ReservationLifecycle
from .models import Reservation, ReservationNote


class ReservationNoteInline(admin.TabularInline):
    model = ReservationNote
    extra = 0
    readonly_fields = ("content", "author", "created_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "confirmation_code", "date", "time", "party_size", "contact_name",
        "table_number", "status", "reminder_sent", "user",
    )
    list_filter = ("status", "date", "table_type", "occasion", "reminder_sent")
    search_fields = ("=confirmation_code", "contact_name", "contact_phone", "contact_email")
    readonly_fields = (
        "confirmation_code", "status", "checked_in_at", "completed_at", "cancelled_at",
        "cancelled_by", "reminder_sent_at", "created_at", "updated_at",
    )
    date_hierarchy = "date"
    inlines = [ReservationNoteInline]

    actions = ("action_confirm", "action_complete", "action_mark_no_show", "action_cancel")

    # ----- Admin actions -----
    def _apply(self, request, queryset, method: str, label: str):
        lifecycle = ReservationLifecycle()
        done = 0
        for r in queryset:
            try:
                getattr(lifecycle, method)(r, actor=request.user)
                done += 1
            except (SchedulingError, ValidationError) as exc:
                self.message_user(request, f"{r.confirmation_code}: {exc}", level=messages.WARNING)
        self.message_user(request, f"{label} {done} reservation(s).", level=messages.SUCCESS)

    def action_confirm(self, request, queryset):
        self._apply(request, queryset, "confirm", "Confirmed")
    action_confirm.short_description = "Confirm selected reservations"

    def action_complete(self, request, queryset):
        self._apply(request, queryset, "complete", "Completed")
    action_complete.short_description = "Complete selected reservations"

    def action_mark_no_show(self, request, queryset):
        self._apply(request, queryset, "mark_no_show", "Marked no-show on")
    action_mark_no_show.short_description = "Mark selected as no-show"

    def action_cancel(self, request, queryset):
        self._apply(request, queryset, "cancel", "Cancelled")
    action_cancel.short_description = "Cancel selected reservations"


@admin.register(ReservationNote)
class ReservationNoteAdmin(admin.ModelAdmin):
    list_display = ("reservation", "author", "created_at")
    search_fields = ("reservation__confirmation_code", "content")
    readonly_fields = ("reservation", "content", "author", "created_at")

    def has_change_permission(self, request, obj=None):
        return False
