"""
Medical record endpoints.

Records are written by doctors (and administrators).  Creating or editing a
record runs the critical-state coordinator, so a critical diagnosis
escalates its patient and clearing it stabilizes them.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.permissions import IsDoctorOrAdmin, IsStaff
from clinical.serializers.record import MedicalRecordQuerySerializer, MedicalRecordSerializer
from clinical.services import records as svc
from clinical.views.common import outcome_response


def _require_writer(request):
    if not IsDoctorOrAdmin().has_permission(request, None):
        raise PermissionDenied('only doctors and administrators may edit medical records')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def records_collection(request):
    if request.method == 'GET':
        q = MedicalRecordQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        rows = svc.list_records(patient_id=vd.get('patientId'), doctor_id=vd.get('doctorId'),
                                is_critical=vd.get('isCritical'))
        return Response([svc.format_record(r) for r in rows])

    _require_writer(request)
    s = MedicalRecordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    record, notifications = svc.create_record(
        patient_id=data.pop('patient_id'),
        doctor_id=data.pop('doctor_id'),
        is_critical=bool(data.pop('is_critical', False)),
        actor=request.user,
        **data,
    )
    body = svc.format_record(svc.get_record(record.id))
    body['notifications'] = notifications
    return Response(body, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def critical_records(request):
    return Response([svc.format_record(r) for r in svc.list_records(is_critical=True)])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def patient_records(request, patient_id: int):
    return Response([svc.format_record(r) for r in svc.list_records(patient_id=patient_id)])


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaff])
def record_detail(request, record_id: int):
    if request.method == 'GET':
        record = svc.get_record(record_id)
        if record is None:
            raise NotFound('medical record not found')
        return Response(svc.format_record(record))

    _require_writer(request)
    if request.method == 'DELETE':
        if not svc.delete_record(record_id):
            raise NotFound('medical record not found')
        return Response(status=status.HTTP_204_NO_CONTENT)

    s = MedicalRecordSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    # patient and author of a record are fixed once written
    data.pop('patient_id', None)
    data.pop('doctor_id', None)
    is_critical = data.pop('is_critical', None)
    outcome = svc.update_record(record_id, data, is_critical=is_critical, actor=request.user)
    body = None
    if outcome.ok:
        body = svc.format_record(outcome.value)
        body['notifications'] = outcome.notifications
    return outcome_response(outcome, body)
