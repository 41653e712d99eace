from decimal import Decimal
from django.db import models
from django.db.models import UniqueConstraint
from django.utils import timezone
from .mixins import TimeStampedModel

class AttendanceRecord(TimeStampedModel):
    class PostingStatus(models.TextChoices):
        NOT_POSTED = "not_posted", "Not posted"
        POSTED = "posted", "Posted"

    # Raw clock fields; any change forces the derived metrics to be recomputed.
    RAW_TIME_FIELDS = ("time_in", "time_out", "break_in", "break_out", "next_day_timeout", "is_nightshift")
    DERIVED_FIELDS = ("late_minutes", "undertime_minutes", "hours_worked")

    employee = models.ForeignKey("payroll.Employee", on_delete=models.PROTECT, related_name="attendance_records")
    attendance_date = models.DateField(db_index=True)
    day = models.CharField(max_length=16, blank=True, default="")

    time_in = models.DateTimeField(null=True, blank=True)
    time_out = models.DateTimeField(null=True, blank=True)
    # break_out = break start, break_in = back from break
    break_out = models.DateTimeField(null=True, blank=True)
    break_in = models.DateTimeField(null=True, blank=True)
    next_day_timeout = models.DateTimeField(null=True, blank=True)
    is_nightshift = models.BooleanField(default=False)

    late_minutes = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True, default=Decimal("0"))
    undertime_minutes = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True, default=Decimal("0"))
    hours_worked = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True, default=Decimal("0"))

    overtime = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    travel_order = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    slvl = models.DecimalField(max_digits=4, decimal_places=2, null=True, blank=True,
                               help_text="Leave as a fraction of a day (0.5 = half day).")
    holiday = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    ot_reg_holiday = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    ot_special_holiday = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    retromultiplier = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    restday = models.BooleanField(default=False)
    offset = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    trip = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    ct = models.BooleanField(default=False)
    cs = models.BooleanField(default=False)
    ob = models.BooleanField(default=False)

    source = models.CharField(max_length=32, blank=True, default="manual")
    remarks = models.CharField(max_length=255, blank=True, default="")

    posting_status = models.CharField(max_length=16, choices=PostingStatus.choices,
                                      default=PostingStatus.NOT_POSTED, db_index=True)
    posted_at = models.DateTimeField(null=True, blank=True)
    posted_by = models.IntegerField(null=True, blank=True)

    class Meta:
        db_table = "AttendanceRecord"
        ordering = ["attendance_date", "employee_id"]
        constraints = [
            UniqueConstraint(fields=["employee", "attendance_date"], name="uniq_attendance_employee_date"),
        ]
        indexes = [
            models.Index(fields=["employee", "attendance_date", "posting_status"]),
        ]

    @property
    def is_posted(self) -> bool:
        return self.posting_status == self.PostingStatus.POSTED

    def mark_posted(self, actor_id):
        self.posting_status = self.PostingStatus.POSTED
        self.posted_at = timezone.now()
        self.posted_by = actor_id

    def __str__(self):
        return f"ATTD {self.employee_id} {self.attendance_date} [{self.get_posting_status_display()}]"
