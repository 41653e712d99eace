from django.db import models
from .mixins import TimeStampedModel, money_field

class Employee(TimeStampedModel):
    class PayType(models.TextChoices):
        DAILY = "daily", "Daily"
        HOURLY = "hourly", "Hourly"
        MONTHLY = "monthly", "Monthly"

    employee_no = models.CharField(max_length=32, unique=True)
    first_name = models.CharField(max_length=80)
    last_name = models.CharField(max_length=80)
    department = models.CharField(max_length=120, blank=True, default="", db_index=True)
    cost_center = models.CharField(max_length=64, blank=True, default="")
    line = models.CharField(max_length=64, blank=True, default="")
    job_title = models.CharField(max_length=120, blank=True, default="")
    rank_file = models.CharField(max_length=64, blank=True, default="")

    pay_type = models.CharField(max_length=16, choices=PayType.choices, default=PayType.DAILY)
    basic_rate = money_field()
    pay_allowance = money_field()
    is_taxable = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["last_name", "first_name"]
        db_table = "Employee"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return f"{self.employee_no} - {self.full_name}"
