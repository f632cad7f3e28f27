"""
API Exceptions - Custom Exception Classes for the Mano-Pro API

This module provides the error taxonomy raised by services and viewsets:
- Lifecycle exceptions (forward-only status moves)
- Business rule exceptions
- Role and participant exceptions
- Payment gateway exceptions
- The exception handler producing standardized error responses

All errors follow a consistent format (keys camelized on output):
{
    "success": false,
    "data": null,
    "message": "Human-readable message",
    "error_code": "MACHINE_READABLE_CODE",
    "errors": [...],
    "meta": {"timestamp": "ISO8601", ...}
}
"""

import logging
from typing import Dict, List, Optional

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import exceptions, status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.casing import to_camel

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION
# =============================================================================

class ManoProAPIException(APIException):
    """
    Base exception for all Mano-Pro API errors.

    Attributes:
        status_code: HTTP status code
        default_detail: Default error message
        default_code: Machine-readable error code
        error_code: Specific error code for this instance
        extra_data: Additional data merged into the response meta
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("An unexpected error occurred.")
    default_code = "ERROR"

    def __init__(
        self,
        detail: str = None,
        code: str = None,
        extra_data: Dict = None,
    ):
        self.error_code = code or self.default_code
        self.extra_data = extra_data or {}

        if detail is None:
            detail = str(self.default_detail)

        super().__init__(detail=detail, code=self.error_code)


# =============================================================================
# LIFECYCLE EXCEPTIONS
# =============================================================================

class InvalidStatusTransition(ManoProAPIException):
    """Raised when a status field would move outside its lifecycle table."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = _("This status change is not allowed.")
    default_code = "INVALID_STATUS_TRANSITION"

    def __init__(
        self,
        entity: str = None,
        current_status: str = None,
        target_status: str = None,
        allowed: List[str] = None,
        **kwargs
    ):
        detail = kwargs.pop('detail', None) or str(self.default_detail)
        extra_data = kwargs.pop('extra_data', {})

        if entity and current_status and target_status:
            detail = f"{entity} cannot move from '{current_status}' to '{target_status}'."
            extra_data.update({
                'entity': entity,
                'current_status': current_status,
                'target_status': target_status,
            })

        if allowed is not None:
            extra_data['allowed_statuses'] = allowed

        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


# =============================================================================
# BUSINESS RULE EXCEPTIONS
# =============================================================================

class BusinessRuleViolation(ManoProAPIException):
    """Raised when a request is well-formed but breaks a marketplace rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("This action violates business rules.")
    default_code = "BUSINESS_RULE_VIOLATION"

    def __init__(self, detail: str = None, rule: str = None, **kwargs):
        extra_data = kwargs.pop('extra_data', {})
        if rule:
            extra_data['rule'] = rule
        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


# =============================================================================
# PERMISSION EXCEPTIONS
# =============================================================================

class RoleRequired(ManoProAPIException):
    """Raised when the caller's role does not allow the action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Your role does not allow this action.")
    default_code = "ROLE_REQUIRED"

    def __init__(self, required_role: str = None, **kwargs):
        detail = kwargs.pop('detail', None)
        extra_data = kwargs.pop('extra_data', {})
        if required_role:
            extra_data['required_role'] = required_role
            detail = detail or f"This action requires the '{required_role}' role."
        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


class NotParticipant(ManoProAPIException):
    """Raised when the caller is not a party to the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("You are not a participant of this resource.")
    default_code = "NOT_PARTICIPANT"


# =============================================================================
# EXTERNAL SERVICE EXCEPTIONS
# =============================================================================

class PaymentGatewayError(ManoProAPIException):
    """Raised by payment gateways when a charge cannot be completed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = _("Payment processing failed.")
    default_code = "PAYMENT_GATEWAY_ERROR"

    def __init__(self, reason: Optional[str] = None, **kwargs):
        self.reason = reason or str(self.default_detail)
        super().__init__(detail=kwargs.pop('detail', None) or self.reason, **kwargs)


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def _drf_error_code(exc: APIException) -> str:
    codes = exc.get_codes()
    if isinstance(codes, str):
        return codes.upper()
    return str(exc.default_code).upper()


def manopro_exception_handler(exc, context):
    """
    Custom exception handler for standardized error responses.

    Unhandled exceptions are logged with their traceback and reported as a
    500 INTERNAL_ERROR without leaking details.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception(
            f"Unhandled exception in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        return Response(
            {
                "success": False,
                "data": None,
                "message": "An unexpected error occurred.",
                "error_code": "INTERNAL_ERROR",
                "errors": [],
                "meta": {
                    "timestamp": timezone.now().isoformat(),
                }
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    error_data = {
        "success": False,
        "data": None,
        "message": "",
        "error_code": "ERROR",
        "errors": [],
        "meta": {
            "timestamp": timezone.now().isoformat(),
        }
    }

    if isinstance(exc, ManoProAPIException):
        error_data["message"] = str(exc.detail)
        error_data["error_code"] = exc.error_code
        if exc.extra_data:
            error_data["meta"].update(exc.extra_data)

    elif isinstance(exc, ValidationError):
        error_data["error_code"] = "VALIDATION_ERROR"
        if isinstance(exc.detail, dict):
            error_data["errors"] = [
                {"field": to_camel(str(field)), "messages": msgs if isinstance(msgs, list) else [str(msgs)]}
                for field, msgs in exc.detail.items()
            ]
            error_data["message"] = "Validation failed."
        elif isinstance(exc.detail, list):
            error_data["errors"] = [{"field": "nonFieldErrors", "messages": [str(e) for e in exc.detail]}]
            error_data["message"] = str(exc.detail[0]) if exc.detail else "Validation failed."
        else:
            error_data["message"] = str(exc.detail)

    else:
        error_data["message"] = str(exc.detail)
        error_data["error_code"] = _drf_error_code(exc)

    if response.status_code >= 500:
        logger.error(f"API_ERROR: code={error_data['error_code']} message={error_data['message']}")

    response.data = error_data
    return response
