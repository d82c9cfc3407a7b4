import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class DomainError(APIException):
    """A request that is well formed but refers to something unusable."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'invalid request'
    default_code = 'invalid'


class UnknownPatient(DomainError):
    default_detail = 'Patient not found'
    default_code = 'unknown_patient'


class UnknownStaff(DomainError):
    default_detail = 'User not found'
    default_code = 'unknown_staff'


class InvalidStaffRole(DomainError):
    default_detail = 'User does not have the required role'
    default_code = 'invalid_staff_role'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.error("Unhandled error in %s", context.get('view').__class__.__name__, exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    if isinstance(exc, APIException) and isinstance(getattr(exc, 'detail', None), str):
        code = getattr(exc.detail, 'code', None) or code
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
