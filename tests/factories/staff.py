import factory
from datetime import timedelta
from django.utils import timezone

from staff import models as staff_models


class EmployeeFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = staff_models.Employee

    first_name = "Sam"
    last_name = factory.Sequence(lambda n: f"Barista{n}")
    email = factory.Sequence(lambda n: f"employee{n}@example.com")
    phone = "+1 555 0200"
    position = "Barista"
    department = "Service"


class ShiftFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = staff_models.Shift

    employee = factory.SubFactory(EmployeeFactory)
    date = factory.LazyFunction(lambda: timezone.localdate() + timedelta(days=3))
    start_time = "09:00"
    end_time = "13:00"
    position = "Barista"
    status = staff_models.Shift.STATUS_SCHEDULED
