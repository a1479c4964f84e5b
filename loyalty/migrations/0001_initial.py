import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LoyaltyProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("points", models.PositiveIntegerField(default=0)),
                ("tier", models.CharField(choices=[("bronze", "Bronze"), ("silver", "Silver"), ("gold", "Gold"), ("platinum", "Platinum")], default="bronze", max_length=10)),
                ("notes", models.TextField(blank=True, default="")),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="loyalty_profile", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Loyalty Profile",
                "verbose_name_plural": "Loyalty Profiles",
            },
        ),
        migrations.CreateModel(
            name="LoyaltyPointsLedger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("delta", models.IntegerField(help_text="Points change (positive or negative)")),
                ("type", models.CharField(choices=[("EARN", "Earn"), ("BURN", "Burn"), ("ADJUST", "Adjust")], default="EARN", max_length=8)),
                ("reason", models.CharField(blank=True, default="", max_length=200)),
                ("reference", models.CharField(blank=True, default="", help_text="Reservation code or external reference", max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="loyalty_adjustments", to=settings.AUTH_USER_MODEL)),
                ("profile", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger", to="loyalty.loyaltyprofile")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["profile", "-created_at"], name="loyalty_loy_profile_9c1f2e_idx"),
                    models.Index(fields=["type", "-created_at"], name="loyalty_loy_type_5b7d1a_idx"),
                ],
            },
        ),
    ]
