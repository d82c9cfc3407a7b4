"""
Appointments, prescriptions, lab results and progress notes.

Plain CRUD for any staff member, filtered by ``patientId``.  When the author
field (``prescribedById``, ``orderedById``, ``createdById``) is omitted the
requesting user is recorded.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.models import Appointment, LabResult, Prescription, ProgressNote
from clinical.permissions import IsStaff
from clinical.serializers.care import (
    AppointmentSerializer, LabResultSerializer, PatientFilterSerializer,
    PrescriptionSerializer, ProgressNoteSerializer,
)
from clinical.services import care as svc
from clinical.services.notifications import appointment_reminder
from clinical.views.common import get_or_404, outcome_response


def _filters(request) -> dict:
    q = PatientFilterSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return {'patient_id': q.validated_data.get('patientId'), 'status': q.validated_data.get('status')}


def _validated(serializer_cls, request, *, partial=False) -> dict:
    s = serializer_cls(data=request.data, partial=partial)
    s.is_valid(raise_exception=True)
    return dict(s.validated_data)


# --- appointments ---------------------------------------------------------

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def appointments_collection(request):
    if request.method == 'GET':
        return Response([svc.format_appointment(a) for a in svc.list_appointments(**_filters(request))])
    appt = svc.create_appointment(**_validated(AppointmentSerializer, request))
    return Response(svc.format_appointment(appt), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaff])
def appointment_detail(request, appointment_id: int):
    appt = get_or_404(Appointment, appointment_id, ('patient', 'doctor'))
    if request.method == 'GET':
        return Response(svc.format_appointment(appt))
    if request.method == 'DELETE':
        appt.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    appt = svc.update_appointment(appt, _validated(AppointmentSerializer, request, partial=True))
    return Response(svc.format_appointment(appt))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaff])
def remind_appointment(request, appointment_id: int):
    outcome = appointment_reminder(appointment_id)
    return outcome_response(outcome, outcome.value, success_status=status.HTTP_201_CREATED)


# --- prescriptions --------------------------------------------------------

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def prescriptions_collection(request):
    if request.method == 'GET':
        return Response([svc.format_prescription(p) for p in svc.list_prescriptions(**_filters(request))])
    data = _validated(PrescriptionSerializer, request)
    data.setdefault('prescribed_by_id', request.user.id)
    return Response(svc.format_prescription(svc.create_prescription(**data)), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaff])
def prescription_detail(request, prescription_id: int):
    p = get_or_404(Prescription, prescription_id, ('patient', 'prescribed_by'))
    if request.method == 'GET':
        return Response(svc.format_prescription(p))
    if request.method == 'DELETE':
        p.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    p = svc.update_prescription(p, _validated(PrescriptionSerializer, request, partial=True))
    return Response(svc.format_prescription(p))


# --- lab results ----------------------------------------------------------

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def lab_results_collection(request):
    if request.method == 'GET':
        return Response([svc.format_lab_result(r) for r in svc.list_lab_results(**_filters(request))])
    data = _validated(LabResultSerializer, request)
    data.setdefault('ordered_by_id', request.user.id)
    result, alerts = svc.create_lab_result(**data)
    body = svc.format_lab_result(result)
    body['notifications'] = alerts
    return Response(body, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaff])
def lab_result_detail(request, lab_result_id: int):
    result = get_or_404(LabResult, lab_result_id, ('patient', 'ordered_by'))
    if request.method == 'GET':
        return Response(svc.format_lab_result(result))
    if request.method == 'DELETE':
        result.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    result, alerts = svc.update_lab_result(result, _validated(LabResultSerializer, request, partial=True))
    body = svc.format_lab_result(result)
    body['notifications'] = alerts
    return Response(body)


# --- progress notes -------------------------------------------------------

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def progress_notes_collection(request):
    if request.method == 'GET':
        f = _filters(request)
        rows = svc.list_progress_notes(patient_id=f['patient_id'])
        return Response([svc.format_progress_note(n) for n in rows])
    data = _validated(ProgressNoteSerializer, request)
    data.setdefault('created_by_id', request.user.id)
    return Response(svc.format_progress_note(svc.create_progress_note(**data)), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaff])
def progress_note_detail(request, note_id: int):
    note = get_or_404(ProgressNote, note_id, ('patient', 'created_by'))
    if request.method == 'GET':
        return Response(svc.format_progress_note(note))
    if request.method == 'DELETE':
        note.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    note = svc.update_progress_note(note, _validated(ProgressNoteSerializer, request, partial=True))
    return Response(svc.format_progress_note(note))
