from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.db import models
from django.utils import timezone
from django.utils.html import strip_tags

from core.intervals import Window, is_valid_time, normalize_time, span_minutes, to_minutes
from core.transitions import TransitionTable

time_regex = RegexValidator(
    regex=r'^([01]\d|2[0-3]):([0-5]\d)$',
    message="Time must be HH:MM (24h)."
)


class Employee(models.Model):
    STATUS_ACTIVE = "Active"
    STATUS_ON_LEAVE = "On Leave"
    STATUS_TERMINATED = "Terminated"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_ON_LEAVE, "On Leave"),
        (STATUS_TERMINATED, "Terminated"),
    ]

    POSITION_CHOICES = [(p, p) for p in ("Manager", "Barista", "Chef", "Waiter", "Cashier", "Cleaner")]
    DEPARTMENT_CHOICES = [(d, d) for d in ("Kitchen", "Service", "Management", "Cleaning")]

    CODE_PREFIX = "EMP"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employee",
    )
    employee_code = models.CharField(max_length=12, unique=True, editable=False)
    first_name = models.CharField(max_length=60)
    last_name = models.CharField(max_length=60)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=30)
    position = models.CharField(max_length=20, choices=POSITION_CHOICES)
    department = models.CharField(max_length=20, choices=DEPARTMENT_CHOICES)
    hire_date = models.DateField(default=timezone.localdate)
    date_of_birth = models.DateField(null=True, blank=True)
    salary = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"), validators=[MinValueValidator(0)])
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["last_name", "first_name", "id"]

    def __str__(self):
        return f"{self.employee_code} {self.full_name}"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def clean(self):
        self.first_name = strip_tags(self.first_name or "").strip()
        self.last_name = strip_tags(self.last_name or "").strip()
        self.email = (self.email or "").strip().lower()

    def save(self, *args, **kwargs):
        if not self.employee_code:
            self.employee_code = self._next_code()
        self.full_clean()
        super().save(*args, **kwargs)

    @classmethod
    def _next_code(cls) -> str:
        """EMP0001, EMP0002, ... one past the highest code in use."""
        codes = cls.objects.filter(employee_code__startswith=cls.CODE_PREFIX).values_list("employee_code", flat=True)
        numbers = [int(c[len(cls.CODE_PREFIX):]) for c in codes if c[len(cls.CODE_PREFIX):].isdigit()]
        return f"{cls.CODE_PREFIX}{max(numbers, default=0) + 1:04d}"


class Shift(models.Model):
    """
    A block of work for one employee on one date.

    Times are "HH:MM"; an end before the start runs past midnight. The
    scheduled window ``[start_time, end_time)`` of a scheduled or
    in-progress shift must not overlap another such shift of the same
    employee on the same date (see ``staff.conflicts``).
    """
    STATUS_SCHEDULED = "scheduled"
    STATUS_IN_PROGRESS = "in-progress"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_NO_SHOW = "no-show"

    STATUS_CHOICES = [
        (STATUS_SCHEDULED, "Scheduled"),
        (STATUS_IN_PROGRESS, "In Progress"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_NO_SHOW, "No Show"),
    ]

    # Statuses that hold the employee's time
    BLOCKING_STATUSES = (STATUS_SCHEDULED, STATUS_IN_PROGRESS)

    TRANSITIONS = TransitionTable({
        STATUS_SCHEDULED: (STATUS_IN_PROGRESS, STATUS_CANCELLED, STATUS_NO_SHOW),
        STATUS_IN_PROGRESS: (STATUS_COMPLETED,),
        STATUS_COMPLETED: (),
        STATUS_CANCELLED: (),
        STATUS_NO_SHOW: (),
    })

    TYPE_MORNING = "morning"
    TYPE_AFTERNOON = "afternoon"
    TYPE_EVENING = "evening"
    TYPE_FULL_DAY = "full-day"
    TYPE_SPLIT = "split"
    SHIFT_TYPE_CHOICES = [
        (TYPE_MORNING, "Morning"),
        (TYPE_AFTERNOON, "Afternoon"),
        (TYPE_EVENING, "Evening"),
        (TYPE_FULL_DAY, "Full Day"),
        (TYPE_SPLIT, "Split"),
    ]

    POSITION_CHOICES = [(p, p) for p in (
        "Manager",
        "Assistant Manager",
        "Head Barista",
        "Barista",
        "Kitchen Staff",
        "Social Media Manager",
        "Blog Content Creator",
        "Event Coordinator",
        "Customer Relations Manager",
        "Front of House Staff",
    )]

    REGULAR_MINUTES = 8 * 60

    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name="shifts")
    date = models.DateField()
    start_time = models.CharField(max_length=5, validators=[time_regex])
    end_time = models.CharField(max_length=5, validators=[time_regex])
    shift_type = models.CharField(max_length=10, choices=SHIFT_TYPE_CHOICES, blank=True, default="")
    position = models.CharField(max_length=30, choices=POSITION_CHOICES)
    notes = models.TextField(blank=True, default="", help_text="HTML tags will be stripped")
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)

    actual_start_time = models.CharField(max_length=5, blank=True, default="", validators=[time_regex])
    actual_end_time = models.CharField(max_length=5, blank=True, default="", validators=[time_regex])
    break_duration = models.PositiveIntegerField(
        default=30,
        validators=[MinValueValidator(0), MaxValueValidator(120)],
        help_text="Unpaid break in minutes (0-120)",
    )
    is_overtime = models.BooleanField(default=False)
    overtime_hours = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "start_time", "id"]
        indexes = [
            models.Index(fields=["employee", "date"], name="shift_employee_date_idx"),
            models.Index(fields=["date", "status"], name="shift_date_status_idx"),
        ]

    def __str__(self):
        return f"{self.employee_id} {self.date} {self.start_time}-{self.end_time} ({self.status})"

    # ---------------- Derived values ----------------

    @property
    def window(self) -> Window:
        return Window.between(self.start_time, self.end_time)

    @property
    def scheduled_duration(self) -> int:
        """Scheduled minutes net of the break."""
        return max(span_minutes(self.start_time, self.end_time) - (self.break_duration or 0), 0)

    @property
    def actual_duration(self) -> int | None:
        """Worked minutes net of the break, once clocked in and out."""
        if not self.actual_start_time or not self.actual_end_time:
            return None
        return max(span_minutes(self.actual_start_time, self.actual_end_time) - (self.break_duration or 0), 0)

    @property
    def overtime_minutes(self) -> int:
        actual = self.actual_duration
        if actual is None:
            return 0
        return max(actual - self.overtime_threshold(), 0)

    @classmethod
    def overtime_threshold(cls) -> int:
        return getattr(settings, "SHIFT_OVERTIME_THRESHOLD_MINUTES", cls.REGULAR_MINUTES)

    def derive_shift_type(self) -> str:
        if self.scheduled_duration >= self.REGULAR_MINUTES:
            return self.TYPE_FULL_DAY
        start_hour = to_minutes(self.start_time) // 60
        if start_hour < 12:
            return self.TYPE_MORNING
        if start_hour < 17:
            return self.TYPE_AFTERNOON
        return self.TYPE_EVENING

    def as_summary(self) -> dict:
        return {
            "id": self.pk,
            "employee": self.employee_id,
            "date": self.date.isoformat() if hasattr(self.date, "isoformat") else self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "status": self.status,
            "shift_type": self.shift_type,
        }

    # ---------------- Validation ----------------

    def clean(self):
        self.notes = strip_tags(self.notes or "").strip()
        for name in ("start_time", "end_time", "actual_start_time", "actual_end_time"):
            value = getattr(self, name)
            if value and is_valid_time(value):
                setattr(self, name, normalize_time(value))
        if self.start_time and self.end_time and is_valid_time(self.start_time) and is_valid_time(self.end_time):
            if self.start_time == self.end_time:
                raise ValidationError({"end_time": "End time must differ from start time."})

    def save(self, *args, **kwargs):
        self.full_clean()
        if not self.shift_type:
            self.shift_type = self.derive_shift_type()
        overtime = self.overtime_minutes
        self.is_overtime = overtime > 0
        self.overtime_hours = (Decimal(overtime) / Decimal(60)).quantize(Decimal("0.01"))
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = list({*update_fields, "shift_type", "is_overtime", "overtime_hours"})
        super().save(*args, **kwargs)
