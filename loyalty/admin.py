from django.contrib import admin

from .models import LoyaltyPointsLedger, LoyaltyProfile


class LedgerInline(admin.TabularInline):
    model = LoyaltyPointsLedger
    fk_name = "profile"
    extra = 0
    readonly_fields = ("delta", "type", "reason", "reference", "created_by", "created_at")
    can_delete = False


@admin.register(LoyaltyProfile)
class LoyaltyProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "points", "tier", "updated_at")
    list_filter = ("tier",)
    search_fields = ("user__username", "user__email")
    readonly_fields = ("points", "tier", "updated_at")
    inlines = [LedgerInline]


@admin.register(LoyaltyPointsLedger)
class LoyaltyPointsLedgerAdmin(admin.ModelAdmin):
    list_display = ("profile", "type", "delta", "reason", "reference", "created_at")
    list_filter = ("type",)
    search_fields = ("reason", "reference", "profile__user__username")
    readonly_fields = ("created_at",)
