from django.db import models
from django.utils import timezone
from .mixins import TimeStampedModel, Cutoff, money_field

class CutoffRecord(TimeStampedModel):
    """Per-employee, per-cutoff amounts. ``is_default`` rows are templates, not period data."""
    AMOUNT_FIELDS: tuple = ()

    employee = models.ForeignKey("payroll.Employee", on_delete=models.CASCADE, related_name="%(class)ss")
    cutoff = models.CharField(max_length=8, choices=Cutoff.choices)
    date = models.DateField(db_index=True)
    date_posted = models.DateField(null=True, blank=True)
    is_posted = models.BooleanField(default=False)
    is_default = models.BooleanField(default=False)

    class Meta:
        abstract = True
        ordering = ["-date", "-id"]

    def mark_posted(self):
        self.is_posted = True
        self.date_posted = timezone.localdate()

    def amounts(self) -> dict:
        return {name: getattr(self, name) for name in self.AMOUNT_FIELDS}


class Benefit(CutoffRecord):
    AMOUNT_FIELDS = ("mf_shares", "mf_loan", "sss_loan", "hmdf_loan", "hmdf_prem", "sss_prem", "philhealth", "allowances")

    mf_shares = money_field()
    mf_loan = money_field()
    sss_loan = money_field()
    hmdf_loan = money_field()
    hmdf_prem = money_field()
    sss_prem = money_field()
    philhealth = money_field()
    allowances = money_field()

    class Meta(CutoffRecord.Meta):
        db_table = "Benefit"
        indexes = [models.Index(fields=["employee", "cutoff", "date"])]

    def __str__(self):
        return f"BEN {self.employee_id} {self.cutoff} {self.date}{' (default)' if self.is_default else ''}"


class Deduction(CutoffRecord):
    AMOUNT_FIELDS = ("advance", "charge_store", "charge", "meals", "miscellaneous", "other_deductions")

    advance = money_field()
    charge_store = money_field()
    charge = money_field()
    meals = money_field()
    miscellaneous = money_field()
    other_deductions = money_field()

    class Meta(CutoffRecord.Meta):
        db_table = "Deduction"
        indexes = [models.Index(fields=["employee", "cutoff", "date"])]

    def __str__(self):
        return f"DED {self.employee_id} {self.cutoff} {self.date}{' (default)' if self.is_default else ''}"
