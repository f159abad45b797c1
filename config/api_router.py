from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from sp_ops.attendance.api.views import AttendanceViewSet
from sp_ops.payroll.api.views import PayrollRecordViewSet
from sp_ops.payroll.api.views import PayrollViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("attendance", AttendanceViewSet, basename="attendance")
# Register records before the payroll viewset so "payroll/records/" is not
# swallowed by the payroll detail routes.
router.register("payroll/records", PayrollRecordViewSet, basename="payroll-records")
router.register("payroll", PayrollViewSet, basename="payroll")


app_name = "api"
urlpatterns = router.urls
