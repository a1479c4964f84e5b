from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from reservations import notifications
from reservations.lifecycle import ReservationLifecycle
from reservations.models import Reservation


class Command(BaseCommand):
    help = "Email reminders for confirmed reservations starting within the next N hours (dry-run by default)."

    def add_arguments(self, parser):
        parser.add_argument("--apply", action="store_true", help="Send emails and mark reminders. Without this, runs as dry-run.")
        parser.add_argument("--hours", type=int, default=24, help="Look-ahead window in hours")

    def handle(self, *args, **options):
        apply = options["apply"]
        now = timezone.now()
        horizon = now + timedelta(hours=options["hours"])

        qs = Reservation.objects.filter(
            status=Reservation.STATUS_CONFIRMED,
            reminder_sent=False,
            date__gte=timezone.localtime(now).date(),
            date__lte=timezone.localtime(horizon).date(),
        ).order_by("date", "time")

        lifecycle = ReservationLifecycle()
        due = [r for r in qs if now <= r.starts_at <= horizon]
        sent = 0
        for reservation in due:
            if not apply:
                self.stdout.write(f"Would remind {reservation.confirmation_code} ({reservation.contact_email})")
                continue
            if not notifications.send_reminder(reservation):
                self.stderr.write(f"Reminder for {reservation.confirmation_code} failed; will retry on the next run")
                continue
            lifecycle.mark_reminder_sent(reservation)
            sent += 1

        verb = "Sent" if apply else "Found"
        self.stdout.write(self.style.SUCCESS(f"{verb} {sent if apply else len(due)} reminder(s)."))
