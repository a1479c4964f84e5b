import core.models
import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RestaurantSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("business_name", models.CharField(default="Cafe", max_length=200)),
                ("contact_email", models.EmailField(blank=True, default="", max_length=254)),
                ("contact_phone", models.CharField(blank=True, default="", max_length=30)),
                ("enable_reservations", models.BooleanField(default=True)),
                ("max_capacity", models.PositiveIntegerField(default=50, help_text="Guests that may be seated at the same time (1-500)", validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(500)])),
                ("dining_duration", models.PositiveIntegerField(default=90, help_text="Minutes a booking occupies capacity (30-180)", validators=[django.core.validators.MinValueValidator(30), django.core.validators.MaxValueValidator(180)])),
                ("min_party_size", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("max_party_size", models.PositiveIntegerField(default=20, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(20)])),
                ("max_advance_days", models.PositiveIntegerField(default=60, help_text="How many days ahead guests may book", validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(365)])),
                ("time_slots", models.JSONField(blank=True, default=core.models.default_time_slots)),
                ("slot_capacity_overrides", models.JSONField(blank=True, default=dict)),
                ("blocked_dates", models.JSONField(blank=True, default=list)),
                ("blocked_slots", models.JSONField(blank=True, default=dict)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Restaurant settings",
                "verbose_name_plural": "Restaurant settings",
            },
        ),
    ]
