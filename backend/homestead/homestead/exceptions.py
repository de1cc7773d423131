import logging

from django.db import IntegrityError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ConflictError(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with existing data."
    default_code = "conflict"


class Gone(exceptions.APIException):
    status_code = status.HTTP_410_GONE
    default_detail = "The resource is no longer available."
    default_code = "gone"

    def __init__(self, detail=None, code=None, payload=None):
        super().__init__(detail, code)
        self.payload = payload or {}


class PayloadTooLarge(exceptions.APIException):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_detail = "File is too large."
    default_code = "payload_too_large"


def api_exception_handler(exc, context):
    """
    Shape every API error as ``{"message": ...}`` or, for validation
    failures, ``{"errors": {field: [messages]}}``.
    """
    if isinstance(exc, IntegrityError):
        logger.info("Integrity error in %s: %s", _view_name(context), exc)
        return Response({"message": "A record with those values already exists."}, status=status.HTTP_409_CONFLICT)

    response = exception_handler(exc, context)
    if response is None:
        logger.exception("Unhandled error in %s", _view_name(context), exc_info=exc)
        return Response({"message": "Unable to process request."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, exceptions.ValidationError):
        detail = exc.detail if isinstance(exc.detail, dict) else {"non_field_errors": exc.detail}
        response.data = {"errors": detail}
    elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = {"message": "Unauthorized"}
    elif isinstance(exc, Http404):
        response.data = {"message": "Not found."}
    else:
        detail = getattr(exc, "detail", None)
        response.data = {"message": str(detail) if detail is not None else str(exc)}
        response.data.update(getattr(exc, "payload", {}))
    return response


def _view_name(context):
    view = context.get("view") if context else None
    return view.__class__.__name__ if view is not None else "unknown view"
