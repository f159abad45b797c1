"""API errors raised by attendance services.

Business-rule conflicts render as ``{"detail", "code", "current"}`` so clients
can explain why a request was refused.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.exceptions import ErrorDetail
from rest_framework.exceptions import NotFound


class ConflictError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("The request conflicts with the current attendance state.")
    default_code = "conflict"

    def __init__(self, detail=None, code=None, current=None):
        detail = detail or self.default_detail
        code = code or self.default_code
        super().__init__(detail, code)
        self.current = current or {}
        self.detail = {
            "detail": ErrorDetail(str(detail), code),
            "code": code,
            "current": self.current,
        }


class AlreadyCheckedIn(ConflictError):
    default_detail = _("Already checked in today.")
    default_code = "already_checked_in"


class AlreadyCheckedOut(ConflictError):
    default_detail = _("Already checked out.")
    default_code = "already_checked_out"


class RequestAlreadyPending(ConflictError):
    default_detail = _("A request of this kind is already pending.")
    default_code = "request_already_pending"


class NotCheckedIn(ConflictError):
    default_detail = _("You must be checked in first.")
    default_code = "not_checked_in"


class StaleRecord(ConflictError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _("The record was modified by someone else. Reload and retry.")
    default_code = "stale_record"


class RecordNotFound(NotFound):
    default_detail = _("Record not found.")
    default_code = "record_not_found"
