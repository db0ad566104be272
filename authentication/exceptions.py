# exceptions.py
import logging
import re

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError, ObjectDoesNotExist
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

UNIQUE_FIELD_PATTERNS = (
    re.compile(r'UNIQUE constraint failed: \w+\.(\w+)'),
    re.compile(r'Key \((\w+)\)=\(.*\) already exists'),
    re.compile(r"Duplicate entry '.*' for key '(?:\w+\.)?(\w+)'"),
)


class BusinessRuleError(APIException):
    """A request that is well formed but breaks a business rule."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request violates a business rule'
    default_code = 'business_rule'


class ResourceNotFound(NotFound):
    default_detail = 'Resource not found'


def get_or_404(queryset, message, **lookup):
    """Fetch one object or raise ResourceNotFound with ``message``."""
    if hasattr(queryset, 'objects'):
        queryset = queryset.objects.all()
    try:
        return queryset.get(**lookup)
    except (ObjectDoesNotExist, TypeError, ValueError, DjangoValidationError):
        raise ResourceNotFound(message)


def flatten_errors(detail, prefix=''):
    """Turn DRF's nested error structure into a flat list of messages."""
    if isinstance(detail, dict):
        messages = []
        for field, value in detail.items():
            label = field if field != 'non_field_errors' else ''
            if prefix and label:
                label = f"{prefix}.{label}"
            elif prefix:
                label = prefix
            messages.extend(flatten_errors(value, label))
        return messages
    if isinstance(detail, (list, tuple)):
        messages = []
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)) and prefix:
                messages.extend(flatten_errors(value, f"{prefix}[{index}]"))
            else:
                messages.extend(flatten_errors(value, prefix))
        return messages
    text = str(detail)
    return [f"{prefix}: {text}" if prefix else text]


def unique_field_from(exc):
    text = str(exc)
    for pattern in UNIQUE_FIELD_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def error_response(message, status_code, errors=None, details=None):
    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    if details:
        body['details'] = details
    return Response(body, status=status_code)


def custom_exception_handler(exc, context):
    """
    Exception handler that renders every failure in the API envelope
    ``{success: false, message, errors?}``.
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, ValidationError):
            errors = flatten_errors(exc.detail)
            response.data = {
                'success': False,
                'message': 'Validation error',
                'errors': errors,
            }
            return response

        detail = response.data.get('detail') if isinstance(response.data, dict) else None
        message = str(detail) if detail else 'An error occurred'
        if response.status_code == status.HTTP_401_UNAUTHORIZED and not detail:
            message = 'Authentication required'
        elif response.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
            message = 'Too many requests from this IP, please try again later.'

        response.data = {'success': False, 'message': message}
        return response

    # Handle Django ValidationError
    if isinstance(exc, DjangoValidationError):
        logger.warning("Validation Error: %s", exc)
        return error_response('Validation error', status.HTTP_400_BAD_REQUEST, errors=exc.messages)

    # Handle Django IntegrityError
    if isinstance(exc, IntegrityError):
        logger.warning("Integrity Error: %s", exc)
        field = unique_field_from(exc)
        if field:
            return error_response(f"{field} already exists", status.HTTP_400_BAD_REQUEST)
        return error_response('This operation violates database constraints', status.HTTP_400_BAD_REQUEST)

    # Handle unexpected errors
    view = context.get('view')
    logger.exception("Unexpected Error in %s: %s", view.__class__.__name__ if view else 'unknown view', exc)
    return error_response(
        'An unexpected error occurred',
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        details={'error': str(exc)} if settings.DEBUG else None,
    )
