import factory
from datetime import timedelta
from django.utils import timezone

from reservations import models as reservation_models


class ReservationFactory(factory.django.DjangoModelFactory):
    """Pending reservation a week out, far from any cutoff."""

    class Meta:
        model = reservation_models.Reservation

    user = None
    date = factory.LazyFunction(lambda: timezone.localdate() + timedelta(days=7))
    time = "19:00"
    party_size = 2
    contact_name = factory.Sequence(lambda n: f"Guest {n}")
    contact_phone = "+1 555 0100"
    contact_email = factory.Sequence(lambda n: f"guest{n}@example.com")
    status = reservation_models.Reservation.STATUS_PENDING
