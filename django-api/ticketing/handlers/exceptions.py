"""Maps domain errors to HTTP responses.

Every error body has the same shape:
``{"success": false, "error": <code>, "message": ..., "details": ...}``.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ticketing.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_TYPE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.UNAUTHORIZED_UNDO: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_CONFIGURED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_STARTED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_ENDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_AUTHORIZED_TODAY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_USED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_CHECKED_IN_TODAY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNDO_EXPIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOTHING_TO_UNDO: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PAYMENT_NOT_COMPLETED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.PAYMENT_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.ACCOUNT_CREATION_FAILED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_LINKED: status.HTTP_409_CONFLICT,
    ErrorCode.TICKET_LOCKED: status.HTTP_409_CONFLICT,
    ErrorCode.DOCUMENT_GENERATION_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.DOCUMENT_MISSING: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EMAIL_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def _body(code: str, message: str, details="") -> dict:
    return {"success": False, "error": code, "message": message, "details": details}


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        return Response(
            _body(exc.code.value, exc.message, exc.details),
            status=STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST),
        )

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s",
            type(view).__name__,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return Response(
            _body("INTERNAL_ERROR", "Internal server error"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = _body(ErrorCode.INVALID_INPUT.value, "Invalid input", response.data)
    elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = _body(ErrorCode.UNAUTHORIZED.value, "Unauthorized", str(exc.detail))
    elif isinstance(exc, exceptions.PermissionDenied):
        response.data = _body(ErrorCode.FORBIDDEN.value, "Forbidden", str(exc.detail))
    elif isinstance(exc, exceptions.APIException):
        response.data = _body(exc.default_code.upper(), str(exc.detail))
    return response
