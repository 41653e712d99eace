from rest_framework.routers import DefaultRouter
from .views.attendance_view import AttendanceRecordViewSet
from .views.summary_view import PeriodSummaryViewSet
from .views.payroll_view import FinalPayrollViewSet
from .views.contribution_view import BenefitViewSet, DeductionViewSet

router = DefaultRouter()
router.register(r"attendance", AttendanceRecordViewSet, basename="attendance")
router.register(r"summaries", PeriodSummaryViewSet, basename="summary")
router.register(r"final-payrolls", FinalPayrollViewSet, basename="final-payroll")
router.register(r"benefits", BenefitViewSet, basename="benefit")
router.register(r"deductions", DeductionViewSet, basename="deduction")

urlpatterns = router.urls
