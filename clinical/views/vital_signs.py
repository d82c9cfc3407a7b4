"""
Vital sign endpoints.

Readings are classified on the way in; the stored severity is always the
computed one.  Recording a reading may escalate the patient.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.permissions import IsClinicalStaff, IsStaff
from clinical.serializers.vital import VitalReadingSerializer, VitalSignCreateSerializer, VitalSignQuerySerializer
from clinical.services import vitals as svc


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def vitals_collection(request):
    if request.method == 'GET':
        q = VitalSignQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        rows = svc.list_vitals(patient_id=q.validated_data.get('patientId'),
                               severity=q.validated_data.get('severity'))
        return Response([svc.format_vital(v) for v in rows])

    if not IsClinicalStaff().has_permission(request, None):
        raise PermissionDenied('only doctors and nurses may record vital signs')
    s = VitalSignCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    vital, notifications = svc.record_vital_sign(
        patient_id=data.pop('patient_id'),
        recorded_by_id=data.pop('recorded_by_id', request.user.id),
        actor=request.user,
        **data,
    )
    body = svc.format_vital(svc.get_vital(vital.id))
    body['notifications'] = notifications
    return Response(body, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaff])
def classify_reading(request):
    """Grade a reading without storing it."""
    s = VitalReadingSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(svc.preview(s.validated_data))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def critical_vitals(request):
    return Response([svc.format_vital(v) for v in svc.critical_readings()])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def vital_detail(request, vital_id: int):
    vital = svc.get_vital(vital_id)
    if vital is None:
        raise NotFound('vital sign not found')
    return Response(svc.format_vital(vital))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def patient_vitals(request, patient_id: int):
    return Response([svc.format_vital(v) for v in svc.list_vitals(patient_id=patient_id)])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def latest_patient_vitals(request, patient_id: int):
    vital = svc.latest_for_patient(patient_id)
    if vital is None:
        raise NotFound('no vital signs recorded for this patient')
    return Response(svc.format_vital(vital))
