"""
Standardized API responses for the requisition approval API.

Every response leaves the API in the envelope:
{
    "status": "success" | "error",
    "message": "string message or empty",
    "data": {...} | [] | null
}

Approval engine failures (core.approval.exceptions.ApprovalError) are
translated here so views and the DRF exception handler agree on status
codes and payloads.
"""
import logging

from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status as http_status
from rest_framework.renderers import JSONRenderer

from core.approval.exceptions import ApprovalError

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Format every error that escapes a view into the standard envelope.

    ApprovalError subclasses are mapped to their own status codes, with the
    error detail (workflow / rule / PR identifiers) returned under "data".
    Everything else goes through DRF's default handler first.
    """
    if isinstance(exc, ApprovalError):
        view = context.get('view') if context else None
        logger.info(
            "Approval error in %s: %s %s",
            getattr(view, '__name__', view.__class__.__name__ if view else 'unknown'),
            exc.__class__.__name__,
            exc.detail,
        )
        return approval_error_response(exc)

    response = exception_handler(exc, context)

    if response is not None:
        response.data = format_error_response(response.data, response.status_code)

    return response


def format_error_response(errors, status_code):
    """
    Format error payloads into the standard envelope.

    Handles:
    - {"field": ["error1", "error2"]} -> "field: error1, error2"
    - {"detail": "message"} -> "message"
    - {"error": "message"} -> "message"
    - ["error1", "error2"] -> "error1, error2"
    """
    message = ""

    if isinstance(errors, dict):
        error_messages = []
        for field, field_errors in errors.items():
            if field in ('detail', 'error'):
                message = str(field_errors)
            elif isinstance(field_errors, list):
                error_messages.append(f"{field}: {', '.join(str(e) for e in field_errors)}")
            elif isinstance(field_errors, dict):
                error_messages.append(f"{field}: {format_nested_errors(field_errors)}")
            else:
                error_messages.append(f"{field}: {str(field_errors)}")

        if error_messages:
            message = "; ".join(error_messages)

    elif isinstance(errors, list):
        message = ", ".join(str(e) for e in errors)

    else:
        message = str(errors)

    return {
        "status": "error",
        "message": message,
        "data": None
    }


def format_nested_errors(errors_dict):
    """Format nested error dictionaries."""
    messages = []
    for key, value in errors_dict.items():
        if isinstance(value, list):
            messages.append(f"{key}: {', '.join(str(v) for v in value)}")
        elif isinstance(value, dict):
            messages.append(f"{key}: {format_nested_errors(value)}")
        else:
            messages.append(f"{key}: {str(value)}")
    return "; ".join(messages)


class StandardizedJSONRenderer(JSONRenderer):
    """
    JSON renderer that wraps responses not already in the standard envelope.
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = renderer_context.get('response') if renderer_context else None
        # 204 No Content keeps an empty body
        if response is not None and response.status_code == 204:
            return b''
        if response is not None and not self.is_already_formatted(data):
            if response.status_code >= 400:
                data = format_error_response(data, response.status_code)
            else:
                data = self.format_success_response(data)

        return super().render(data, accepted_media_type, renderer_context)

    def is_already_formatted(self, data):
        """Check if response already carries status, message and data keys."""
        if isinstance(data, dict):
            return 'status' in data and 'message' in data and 'data' in data
        return False

    def format_success_response(self, data):
        if isinstance(data, dict) and 'detail' in data:
            message = str(data['detail'])
            response_data = None
        elif data is None or (isinstance(data, dict) and not data):
            message = ""
            response_data = None
        else:
            message = ""
            response_data = data

        return {
            "status": "success",
            "message": message,
            "data": response_data
        }


def success_response(data=None, message="", status_code=http_status.HTTP_200_OK):
    """
    Build a standardized success response.

    Usage:
        return success_response(
            data=ApprovalSerializer(approvals, many=True).data,
            message="Approvals initialized",
            status_code=status.HTTP_201_CREATED
        )
    """
    return Response({
        "status": "success",
        "message": message,
        "data": data
    }, status=status_code)


def error_response(message, data=None, status_code=http_status.HTTP_400_BAD_REQUEST):
    """
    Build a standardized error response.

    Usage:
        return error_response(
            message="PR not found",
            status_code=status.HTTP_404_NOT_FOUND
        )
    """
    return Response({
        "status": "error",
        "message": message,
        "data": data
    }, status=status_code)


def approval_error_response(exc):
    """Translate an ApprovalError into a standardized error response."""
    return error_response(
        message=exc.message,
        data={'error': exc.__class__.__name__, **exc.detail},
        status_code=exc.status_code,
    )
