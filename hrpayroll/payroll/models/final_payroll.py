from datetime import date
from decimal import Decimal
from django.db import models
from django.db.models import UniqueConstraint
from django.utils import timezone
from .mixins import TimeStampedModel, PeriodType, money_field

def _qty(places: int = 2):
    return models.DecimalField(max_digits=8, decimal_places=places, default=Decimal("0"))

class FinalPayroll(TimeStampedModel):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        FINALIZED = "finalized", "Finalized"
        PAID = "paid", "Paid"

    class ApprovalStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    # Fields a payroll officer may change by hand while the payroll is editable.
    ADJUSTABLE_FIELDS = (
        "hours_worked", "absence_days", "ot_rest_day_hours", "other_earnings",
        "mf_shares", "mf_loan", "sss_loan", "hdmf_loan",
        "advance_deduction", "charge_store", "charge_deduction", "meals_deduction",
        "miscellaneous_deduction", "other_deductions", "calculation_notes",
    )
    # Always derived by the calculator; never user-supplied.
    COMPUTED_FIELDS = (
        "basic_pay", "allowances", "late_under_deduction", "absence_deduction",
        "ot_regular_amount", "ot_rest_day_amount", "ot_special_holiday_amount", "ot_regular_holiday_amount",
        "overtime_pay", "nsd_amount", "holiday_amount", "travel_order_amount", "slvl_amount",
        "offset_amount", "trip_amount", "premium_pay", "total_company_deductions", "total_other_deductions",
        "sss_contribution", "philhealth_contribution", "hdmf_contribution", "total_government_deductions",
        "withholding_tax", "taxable_income", "gross_earnings", "total_deductions", "net_pay",
    )

    employee = models.ForeignKey("payroll.Employee", on_delete=models.PROTECT, related_name="final_payrolls")
    employee_no = models.CharField(max_length=32, blank=True, default="")
    employee_name = models.CharField(max_length=200, blank=True, default="")
    cost_center = models.CharField(max_length=64, blank=True, default="")
    department = models.CharField(max_length=120, blank=True, default="", db_index=True)
    line = models.CharField(max_length=64, blank=True, default="")
    job_title = models.CharField(max_length=120, blank=True, default="")
    rank_file = models.CharField(max_length=64, blank=True, default="")

    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField()
    period_type = models.CharField(max_length=16, choices=PeriodType.choices)
    period_start = models.DateField()
    period_end = models.DateField()

    # Employee profile snapshot
    pay_type = models.CharField(max_length=16, default="daily")
    basic_rate = money_field()
    pay_allowance = money_field()
    is_taxable = models.BooleanField(default=False)

    # Inputs mapped from the period summary
    days_worked = _qty()
    hours_worked = _qty()
    late_under_minutes = _qty()
    late_under_hours = _qty()
    ot_regular_hours = _qty()
    ot_rest_day_hours = _qty()
    ot_special_holiday_hours = _qty()
    ot_regular_holiday_hours = _qty()
    nsd_hours = _qty()
    holiday_hours = _qty()
    travel_order_hours = _qty()
    slvl_days = _qty(1)
    absence_days = _qty(1)
    retro_amount = money_field()
    offset_hours = _qty()
    trip_count = _qty(1)
    other_earnings = money_field()
    has_ct = models.BooleanField(default=False)
    has_cs = models.BooleanField(default=False)
    has_ob = models.BooleanField(default=False)

    # Earnings
    basic_pay = money_field()
    allowances = money_field()
    ot_regular_amount = money_field()
    ot_rest_day_amount = money_field()
    ot_special_holiday_amount = money_field()
    ot_regular_holiday_amount = money_field()
    overtime_pay = money_field()
    nsd_amount = money_field()
    holiday_amount = money_field()
    travel_order_amount = money_field()
    slvl_amount = money_field()
    offset_amount = money_field()
    trip_amount = money_field()
    premium_pay = money_field()
    gross_earnings = money_field()

    # Deductions
    late_under_deduction = money_field()
    absence_deduction = money_field()
    sss_contribution = money_field()
    philhealth_contribution = money_field()
    hdmf_contribution = money_field()
    withholding_tax = money_field()
    mf_shares = money_field()
    mf_loan = money_field()
    sss_loan = money_field()
    hdmf_loan = money_field()
    advance_deduction = money_field()
    charge_store = money_field()
    charge_deduction = money_field()
    meals_deduction = money_field()
    miscellaneous_deduction = money_field()
    other_deductions = money_field()
    total_government_deductions = money_field()
    total_company_deductions = money_field()
    total_other_deductions = money_field()
    total_deductions = money_field()
    taxable_income = money_field()
    net_pay = money_field()

    has_adjustments = models.BooleanField(default=False)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.DRAFT, db_index=True)
    approval_status = models.CharField(max_length=16, choices=ApprovalStatus.choices,
                                       default=ApprovalStatus.PENDING, db_index=True)
    created_by = models.IntegerField(null=True, blank=True)
    approved_by = models.IntegerField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    finalized_by = models.IntegerField(null=True, blank=True)
    finalized_at = models.DateTimeField(null=True, blank=True)
    paid_by = models.IntegerField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    payroll_summary = models.ForeignKey("payroll.PeriodSummary", on_delete=models.PROTECT, related_name="final_payrolls")
    benefit = models.ForeignKey("payroll.Benefit", null=True, blank=True, on_delete=models.SET_NULL)
    deduction = models.ForeignKey("payroll.Deduction", null=True, blank=True, on_delete=models.SET_NULL)

    calculation_notes = models.TextField(blank=True, default="")
    approval_remarks = models.TextField(blank=True, default="")
    calculation_breakdown = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = "FinalPayroll"
        ordering = ["department", "employee_name"]
        constraints = [
            UniqueConstraint(fields=["employee", "year", "month", "period_type"], name="uniq_final_payroll_employee_period"),
        ]
        indexes = [
            models.Index(fields=["year", "month", "period_type"]),
            models.Index(fields=["status", "approval_status"]),
        ]

    # ----- predicates -----
    @property
    def is_editable(self) -> bool:
        return self.status == self.Status.DRAFT and self.approval_status == self.ApprovalStatus.PENDING

    @property
    def can_be_approved(self) -> bool:
        return self.status == self.Status.DRAFT and self.approval_status == self.ApprovalStatus.PENDING

    @property
    def can_be_finalized(self) -> bool:
        return self.status == self.Status.DRAFT and self.approval_status == self.ApprovalStatus.APPROVED

    @property
    def can_be_marked_paid(self) -> bool:
        return self.status == self.Status.FINALIZED

    @property
    def period_label(self) -> str:
        return "1-15" if self.period_type == PeriodType.FIRST_HALF else f"16-{self.period_end.day}"

    @property
    def full_period(self) -> str:
        return f"{date(self.year, self.month, 1):%B %Y} ({self.period_label})"

    # ----- transitions (callers check the predicates) -----
    def approve(self, actor_id, remarks: str = ""):
        self.approval_status = self.ApprovalStatus.APPROVED
        self.approved_by = actor_id
        self.approved_at = timezone.now()
        self.approval_remarks = remarks or ""

    def reject(self, actor_id, remarks: str = ""):
        self.approval_status = self.ApprovalStatus.REJECTED
        self.approved_by = actor_id
        self.approved_at = timezone.now()
        self.approval_remarks = remarks or ""

    def finalize(self, actor_id):
        self.status = self.Status.FINALIZED
        self.finalized_by = actor_id
        self.finalized_at = timezone.now()

    def mark_paid(self, actor_id):
        self.status = self.Status.PAID
        self.paid_by = actor_id
        self.paid_at = timezone.now()

    def __str__(self):
        return (f"PAY {self.employee_id} {self.year}-{self.month:02d} {self.period_type} "
                f"[{self.get_status_display()}/{self.get_approval_status_display()}]")
