from celery import shared_task

from sp_ops.payroll.services import finalize_month


@shared_task(name="payroll.finalize_month")
def finalize_month_task(month, year) -> dict:
    """Finalize the month's payroll slip for every active employee."""
    return finalize_month(month, year)
