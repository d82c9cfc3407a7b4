"""Helpers shared by the API views."""
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from clinical.services.outcomes import Outcome


def error(code: str, message, http_status: int) -> Response:
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=http_status)


def outcome_response(outcome: Outcome, body=None, *, success_status: int = status.HTTP_200_OK) -> Response:
    """Map a service :class:`Outcome` to a response.

    ``not_found`` -> 404, ``no_change`` -> 409, ``success`` -> ``body`` with
    ``success_status`` (no body for 204).
    """
    if outcome.not_found:
        return error('not_found', outcome.detail or 'not found', status.HTTP_404_NOT_FOUND)
    if outcome.no_change:
        return error('no_change', outcome.detail or 'no change', status.HTTP_409_CONFLICT)
    if success_status == status.HTTP_204_NO_CONTENT:
        return Response(status=success_status)
    return Response(body, status=success_status)


def get_or_404(model, pk, related=()):
    obj = model.objects.select_related(*related).filter(pk=pk).first()
    if obj is None:
        raise NotFound(f'{model._meta.verbose_name} not found')
    return obj
