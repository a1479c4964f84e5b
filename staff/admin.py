from __future__ import annotations

from django.contrib import admin

from .models import Employee, Shift


class ShiftInline(admin.TabularInline):
    model = Shift
    extra = 0
    fields = ("date", "start_time", "end_time", "shift_type", "position", "status")
    readonly_fields = ("status",)
    show_change_link = True


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("employee_code", "full_name", "position", "department", "status", "hire_date")
    list_filter = ("status", "position", "department")
    search_fields = ("=employee_code", "first_name", "last_name", "email")
    readonly_fields = ("employee_code", "created_at", "updated_at")
    inlines = [ShiftInline]


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ("employee", "date", "start_time", "end_time", "shift_type", "position", "status", "is_overtime")
    list_filter = ("status", "shift_type", "position", "date")
    search_fields = ("employee__employee_code", "employee__first_name", "employee__last_name")
    readonly_fields = ("is_overtime", "overtime_hours", "created_by", "created_at", "updated_at")
    date_hierarchy = "date"
