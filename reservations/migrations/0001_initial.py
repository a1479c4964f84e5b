import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("time", models.CharField(help_text="Start time, HH:MM (24h)", max_length=5, validators=[django.core.validators.RegexValidator(message="Time must be HH:MM (24h).", regex="^([01]\\d|2[0-3]):([0-5]\\d)$")])),
                ("estimated_duration", models.PositiveIntegerField(default=90, help_text="Expected stay in minutes (30-180)", validators=[django.core.validators.MinValueValidator(30), django.core.validators.MaxValueValidator(180)])),
                ("party_size", models.PositiveIntegerField(help_text="Number of guests (1-20)", validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(20)])),
                ("table_number", models.CharField(blank=True, default="", max_length=10)),
                ("table_type", models.CharField(choices=[("regular", "Regular"), ("high-top", "High-top"), ("booth", "Booth"), ("outdoor", "Outdoor"), ("private", "Private")], default="regular", max_length=10)),
                ("occasion", models.CharField(choices=[("none", "None"), ("birthday", "Birthday"), ("anniversary", "Anniversary"), ("business", "Business"), ("date", "Date"), ("celebration", "Celebration"), ("other", "Other")], default="none", max_length=12)),
                ("preferences", models.JSONField(blank=True, default=list, help_text="Seating preferences, e.g. window, quiet")),
                ("special_requests", models.TextField(blank=True, default="", help_text="HTML tags will be stripped")),
                ("contact_name", models.CharField(max_length=120)),
                ("contact_phone", models.CharField(max_length=30, validators=[django.core.validators.RegexValidator(message="Phone number must be valid. Use digits with optional +, spaces or dashes.", regex="^[\\+]?[0-9\\s\\-()]{7,20}$")])),
                ("contact_email", models.EmailField(max_length=254)),
                ("confirmation_code", models.CharField(editable=False, max_length=8, unique=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("seated", "Seated"), ("completed", "Completed"), ("cancelled", "Cancelled"), ("no-show", "No Show")], default="pending", max_length=12)),
                ("reminder_sent", models.BooleanField(default=False)),
                ("reminder_sent_at", models.DateTimeField(blank=True, null=True)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("cancelled_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("user", models.ForeignKey(blank=True, help_text="Owning account; empty for guest bookings", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reservations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["date", "time", "id"],
                "indexes": [
                    models.Index(fields=["date", "status"], name="reservation_date_status_idx"),
                    models.Index(fields=["user", "status"], name="reservation_user_status_idx"),
                    models.Index(fields=["status"], name="reservation_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationNote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content", models.TextField(help_text="HTML tags will be stripped")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("author", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reservation_notes", to=settings.AUTH_USER_MODEL)),
                ("reservation", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notes", to="reservations.reservation")),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
    ]
