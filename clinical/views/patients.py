"""
Patient endpoints.

Any staff member may list, register and update patients; only
administrators may deactivate one.  The critical flag is never written
here directly: ``isCritical`` in an update and the explicit
mark-critical / mark-stable actions all go through
``clinical.services.critical``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.models import Patient
from clinical.permissions import IsAdminRole, IsStaff
from clinical.serializers.patient import MarkCriticalSerializer, PatientListQuerySerializer, PatientWriteSerializer
from clinical.services import critical
from clinical.services import patients as svc
from clinical.services.audit import history_for
from clinical.views.common import get_or_404, outcome_response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def patients_collection(request):
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        rows = svc.list_patients(is_critical=vd.get('isCritical'), status=vd.get('status'), search=vd.get('search'))
        return Response([svc.format_patient(p) for p in rows])

    s = PatientWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    wants_critical = data.pop('is_critical', None)
    patient = svc.create_patient(data, actor=request.user)
    # a patient admitted as critical alerts the staff like any other escalation
    critical.apply_patient_critical_flag(patient, wants_critical, actor=request.user)
    return Response(svc.format_patient(patient), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def critical_patients(request):
    return Response([svc.format_patient(p) for p in critical.critical_patients()])


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaff])
def patient_detail(request, patient_id: int):
    if request.method == 'GET':
        return Response(svc.format_patient(get_or_404(Patient, patient_id)))

    if request.method == 'DELETE':
        if not IsAdminRole().has_permission(request, None):
            raise PermissionDenied('only administrators may deactivate patients')
        outcome = svc.deactivate_patient(patient_id, actor=request.user)
        return outcome_response(outcome, success_status=status.HTTP_204_NO_CONTENT)

    s = PatientWriteSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    wants_critical = data.pop('is_critical', None)
    outcome = svc.update_patient(patient_id, data, is_critical=wants_critical, actor=request.user)
    body = svc.format_patient(outcome.value) if outcome.ok else None
    return outcome_response(outcome, body)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaff])
def mark_critical(request, patient_id: int):
    # a bare JSON string body is taken as the reason
    payload = {'reason': request.data} if isinstance(request.data, str) else request.data
    s = MarkCriticalSerializer(data=payload)
    s.is_valid(raise_exception=True)
    outcome = critical.mark_critical(patient_id, s.validated_data['reason'], actor=request.user)
    return outcome_response(outcome, success_status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaff])
def mark_stable(request, patient_id: int):
    outcome = critical.mark_stable(patient_id, actor=request.user)
    return outcome_response(outcome, success_status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def patient_history(request, patient_id: int):
    """Audit trail for a patient, newest first."""
    get_or_404(Patient, patient_id)
    return Response(history_for('patient', patient_id))
