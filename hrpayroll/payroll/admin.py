from django.contrib import admin
from .models import Employee, AttendanceRecord, PeriodSummary, FinalPayroll, Benefit, Deduction, AuditLog

@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("employee_no", "last_name", "first_name", "department", "pay_type", "basic_rate", "is_taxable", "is_active")
    search_fields = ("employee_no", "last_name", "first_name")
    list_filter = ("department", "pay_type", "is_active")

@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ("employee", "attendance_date", "time_in", "time_out", "late_minutes", "hours_worked", "posting_status")
    list_filter = ("posting_status", "is_nightshift")
    date_hierarchy = "attendance_date"

@admin.register(PeriodSummary)
class PeriodSummaryAdmin(admin.ModelAdmin):
    list_display = ("employee_name", "year", "month", "period_type", "days_worked", "status")
    list_filter = ("status", "period_type", "department")
    readonly_fields = ("posted_by", "posted_at", "locked_by", "locked_at")

@admin.register(FinalPayroll)
class FinalPayrollAdmin(admin.ModelAdmin):
    list_display = ("employee_name", "year", "month", "period_type", "gross_earnings", "net_pay", "status", "approval_status")
    list_filter = ("status", "approval_status", "period_type", "department")
    readonly_fields = ("calculation_breakdown",)

@admin.register(Benefit, Deduction)
class CutoffRecordAdmin(admin.ModelAdmin):
    list_display = ("employee", "cutoff", "date", "is_default", "is_posted")
    list_filter = ("cutoff", "is_default", "is_posted")

@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "actor", "action", "object_type", "object_id")
    list_filter = ("action", "object_type")
