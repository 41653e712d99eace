# Load all models into the payroll.models namespace
from .mixins import TimeStampedModel, PeriodType, Cutoff

from .employee import Employee
from .attendance import AttendanceRecord
from .contributions import Benefit, Deduction
from .summary import PeriodSummary
from .final_payroll import FinalPayroll
from .audit import AuditLog

__all__ = [
    "TimeStampedModel", "PeriodType", "Cutoff",
    "Employee",
    "AttendanceRecord",
    "Benefit", "Deduction",
    "PeriodSummary",
    "FinalPayroll",
    "AuditLog",
]
