from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from django.db import models
from django.db.models import UniqueConstraint
from django.utils import timezone
from .mixins import TimeStampedModel, PeriodType, money_field

def _hours_field():
    return models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0.00"))

class PeriodSummary(TimeStampedModel):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"
        LOCKED = "locked", "Locked"

    TOTAL_FIELDS = (
        "days_worked", "ot_hours", "off_days", "late_under_minutes", "nsd_hours", "slvl_days",
        "retro", "travel_order_hours", "holiday_hours", "ot_reg_holiday_hours",
        "ot_special_holiday_hours", "offset_hours", "trip_count",
    )
    FLAG_FIELDS = ("has_ct", "has_cs", "has_ob")
    DEDUCTION_FIELDS = ("advance", "charge_store", "charge", "meals", "miscellaneous", "other_deductions")
    BENEFIT_FIELDS = ("mf_shares", "mf_loan", "sss_loan", "hmdf_loan", "hmdf_prem", "sss_prem", "philhealth", "allowances")

    employee = models.ForeignKey("payroll.Employee", on_delete=models.PROTECT, related_name="period_summaries")
    employee_no = models.CharField(max_length=32, blank=True, default="")
    employee_name = models.CharField(max_length=200, blank=True, default="")
    cost_center = models.CharField(max_length=64, blank=True, default="")
    department = models.CharField(max_length=120, blank=True, default="", db_index=True)
    line = models.CharField(max_length=64, blank=True, default="")

    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField()
    period_type = models.CharField(max_length=16, choices=PeriodType.choices)
    period_start = models.DateField()
    period_end = models.DateField()

    days_worked = _hours_field()
    ot_hours = _hours_field()
    off_days = _hours_field()
    late_under_minutes = _hours_field()
    nsd_hours = _hours_field()
    slvl_days = _hours_field()
    retro = money_field()
    travel_order_hours = _hours_field()
    holiday_hours = _hours_field()
    ot_reg_holiday_hours = _hours_field()
    ot_special_holiday_hours = _hours_field()
    offset_hours = _hours_field()
    trip_count = _hours_field()
    has_ct = models.BooleanField(default=False)
    has_cs = models.BooleanField(default=False)
    has_ob = models.BooleanField(default=False)

    # Copied from the employee's Deduction record for the cutoff
    advance = money_field()
    charge_store = money_field()
    charge = money_field()
    meals = money_field()
    miscellaneous = money_field()
    other_deductions = money_field()
    # Copied from the employee's Benefit record for the cutoff
    mf_shares = money_field()
    mf_loan = money_field()
    sss_loan = money_field()
    hmdf_loan = money_field()
    hmdf_prem = money_field()
    sss_prem = money_field()
    philhealth = money_field()
    allowances = money_field()

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.DRAFT, db_index=True)
    generated_by = models.IntegerField(null=True, blank=True)
    posted_by = models.IntegerField(null=True, blank=True)
    posted_at = models.DateTimeField(null=True, blank=True)
    locked_by = models.IntegerField(null=True, blank=True)
    locked_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "PeriodSummary"
        ordering = ["-year", "-month", "period_type", "employee_name"]
        constraints = [
            UniqueConstraint(fields=["employee", "year", "month", "period_type"], name="uniq_summary_employee_period"),
        ]
        indexes = [models.Index(fields=["year", "month", "period_type", "status"])]

    # ----- read helpers -----
    @property
    def is_draft(self) -> bool:
        return self.status == self.Status.DRAFT

    @property
    def is_posted(self) -> bool:
        return self.status == self.Status.POSTED

    @property
    def is_locked(self) -> bool:
        return self.status == self.Status.LOCKED

    @property
    def period_label(self) -> str:
        return "1-15" if self.period_type == PeriodType.FIRST_HALF else f"16-{self.period_end.day}"

    @property
    def full_period(self) -> str:
        return f"{date(self.year, self.month, 1):%B %Y} ({self.period_label})"

    @property
    def late_under_hours(self) -> Decimal:
        return (Decimal(self.late_under_minutes or 0) / Decimal(60)).quantize(Decimal("0.01"), ROUND_HALF_UP)

    @property
    def total_deductions(self) -> Decimal:
        names = self.DEDUCTION_FIELDS + ("mf_loan", "sss_loan", "hmdf_loan", "hmdf_prem", "sss_prem", "philhealth")
        return sum((Decimal(getattr(self, n) or 0) for n in names), Decimal("0.00"))

    @property
    def total_benefits(self) -> Decimal:
        return Decimal(self.mf_shares or 0) + Decimal(self.allowances or 0)

    # ----- transitions -----
    def mark_posted(self, actor_id):
        self.status = self.Status.POSTED
        self.posted_by = actor_id
        self.posted_at = timezone.now()

    def mark_locked(self, actor_id):
        self.status = self.Status.LOCKED
        self.locked_by = actor_id
        self.locked_at = timezone.now()

    def __str__(self):
        return f"SUM {self.employee_id} {self.year}-{self.month:02d} {self.period_type} [{self.get_status_display()}]"
