import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("employee_code", models.CharField(editable=False, max_length=12, unique=True)),
                ("first_name", models.CharField(max_length=60)),
                ("last_name", models.CharField(max_length=60)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("phone", models.CharField(max_length=30)),
                ("position", models.CharField(choices=[("Manager", "Manager"), ("Barista", "Barista"), ("Chef", "Chef"), ("Waiter", "Waiter"), ("Cashier", "Cashier"), ("Cleaner", "Cleaner")], max_length=20)),
                ("department", models.CharField(choices=[("Kitchen", "Kitchen"), ("Service", "Service"), ("Management", "Management"), ("Cleaning", "Cleaning")], max_length=20)),
                ("hire_date", models.DateField(default=django.utils.timezone.localdate)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                ("salary", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ("status", models.CharField(choices=[("Active", "Active"), ("On Leave", "On Leave"), ("Terminated", "Terminated")], default="Active", max_length=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="employee", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["last_name", "first_name", "id"],
            },
        ),
        migrations.CreateModel(
            name="Shift",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("start_time", models.CharField(max_length=5, validators=[django.core.validators.RegexValidator(message="Time must be HH:MM (24h).", regex="^([01]\\d|2[0-3]):([0-5]\\d)$")])),
                ("end_time", models.CharField(max_length=5, validators=[django.core.validators.RegexValidator(message="Time must be HH:MM (24h).", regex="^([01]\\d|2[0-3]):([0-5]\\d)$")])),
                ("shift_type", models.CharField(blank=True, choices=[("morning", "Morning"), ("afternoon", "Afternoon"), ("evening", "Evening"), ("full-day", "Full Day"), ("split", "Split")], default="", max_length=10)),
                ("position", models.CharField(choices=[("Manager", "Manager"), ("Assistant Manager", "Assistant Manager"), ("Head Barista", "Head Barista"), ("Barista", "Barista"), ("Kitchen Staff", "Kitchen Staff"), ("Social Media Manager", "Social Media Manager"), ("Blog Content Creator", "Blog Content Creator"), ("Event Coordinator", "Event Coordinator"), ("Customer Relations Manager", "Customer Relations Manager"), ("Front of House Staff", "Front of House Staff")], max_length=30)),
                ("notes", models.TextField(blank=True, default="", help_text="HTML tags will be stripped")),
                ("status", models.CharField(choices=[("scheduled", "Scheduled"), ("in-progress", "In Progress"), ("completed", "Completed"), ("cancelled", "Cancelled"), ("no-show", "No Show")], default="scheduled", max_length=12)),
                ("actual_start_time", models.CharField(blank=True, default="", max_length=5, validators=[django.core.validators.RegexValidator(message="Time must be HH:MM (24h).", regex="^([01]\\d|2[0-3]):([0-5]\\d)$")])),
                ("actual_end_time", models.CharField(blank=True, default="", max_length=5, validators=[django.core.validators.RegexValidator(message="Time must be HH:MM (24h).", regex="^([01]\\d|2[0-3]):([0-5]\\d)$")])),
                ("break_duration", models.PositiveIntegerField(default=30, help_text="Unpaid break in minutes (0-120)", validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(120)])),
                ("is_overtime", models.BooleanField(default=False)),
                ("overtime_hours", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="shifts", to="staff.employee")),
            ],
            options={
                "ordering": ["date", "start_time", "id"],
                "indexes": [
                    models.Index(fields=["employee", "date"], name="shift_employee_date_idx"),
                    models.Index(fields=["date", "status"], name="shift_date_status_idx"),
                ],
            },
        ),
    ]
