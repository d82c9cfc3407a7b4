"""
Appointments, prescriptions, lab results and progress notes.

These are plain patient-owned records; none of them changes a patient's
critical flag.  A lab result reported with critical severity raises one
staff-wide lab-result alert.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import DatabaseError
from django.utils import timezone

from clinical.exceptions import InvalidStaffRole, UnknownPatient, UnknownStaff
from clinical.models import (
    Appointment, LabResult, Notification, Patient, Prescription, ProgressNote,
    SeverityChoices, User,
)
from clinical.services.notifications import NotificationDraft, dispatch

logger = logging.getLogger(__name__)

APPOINTMENT_FIELDS = ('appointment_date', 'appointment_type', 'notes', 'status')
PRESCRIPTION_FIELDS = ('medication_name', 'dosage', 'frequency', 'instructions',
                       'start_date', 'end_date', 'status', 'notes')
LAB_FIELDS = ('test_name', 'test_value', 'normal_range', 'unit', 'status', 'severity', 'notes')
NOTE_FIELDS = ('title', 'content', 'category', 'note_type', 'is_critical', 'critical_notes')


def _iso(value):
    return value.isoformat() if value else None


def _patient_or_raise(patient_id: int) -> Patient:
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        raise UnknownPatient()
    return patient


def _staff_or_raise(user_id: int, roles=User.CLINICAL_ROLES) -> User:
    staff = User.objects.filter(pk=user_id, is_active=True).first()
    if staff is None:
        raise UnknownStaff()
    if staff.role not in roles:
        raise InvalidStaffRole()
    return staff


def _pick(data: dict, fields) -> dict:
    return {k: v for k, v in data.items() if k in fields and v is not None}


def _changes(data: dict, fields) -> dict:
    # keys present in a partial update, explicit nulls included
    return {k: v for k, v in data.items() if k in fields}


def _apply(obj, data: dict, fields, *, stamp: Optional[str] = None):
    for k, v in _changes(data, fields).items():
        setattr(obj, k, v)
    if stamp:
        setattr(obj, stamp, timezone.now())
    obj.save()
    return obj


# --- appointments ---------------------------------------------------------

def format_appointment(a: Appointment) -> dict:
    return {
        'id': a.id,
        'patientId': a.patient_id,
        'doctorId': a.doctor_id,
        'appointmentDate': _iso(a.appointment_date),
        'appointmentType': a.appointment_type,
        'notes': a.notes,
        'status': a.status,
        'createdAt': _iso(a.created_at),
        'updatedAt': _iso(a.updated_at),
        'patientName': a.patient.full_name,
        'doctorName': f"Dr. {a.doctor.last_name or a.doctor.username}",
    }


def list_appointments(*, patient_id: Optional[int] = None, doctor_id: Optional[int] = None,
                      status: Optional[str] = None) -> list[Appointment]:
    qs = Appointment.objects.select_related('patient', 'doctor')
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if doctor_id is not None:
        qs = qs.filter(doctor_id=doctor_id)
    if status:
        qs = qs.filter(status=status)
    return list(qs.order_by('appointment_date', 'id'))


def appointments_on(day) -> int:
    return Appointment.objects.filter(appointment_date__date=day).exclude(status='cancelled').count()


def create_appointment(*, patient_id: int, doctor_id: int, **data) -> Appointment:
    patient = _patient_or_raise(patient_id)
    doctor = _staff_or_raise(doctor_id, roles=(User.ROLE_DOCTOR,))
    appt = Appointment.objects.create(patient=patient, doctor=doctor, **_pick(data, APPOINTMENT_FIELDS))
    logger.info("Scheduled appointment %s for patient %s", appt.id, patient.id)
    return appt


def update_appointment(appt: Appointment, data: dict) -> Appointment:
    return _apply(appt, data, APPOINTMENT_FIELDS, stamp='updated_at')


# --- prescriptions --------------------------------------------------------

def format_prescription(p: Prescription) -> dict:
    return {
        'id': p.id,
        'patientId': p.patient_id,
        'prescribedById': p.prescribed_by_id,
        'medicationName': p.medication_name,
        'dosage': p.dosage,
        'frequency': p.frequency,
        'instructions': p.instructions,
        'prescribedAt': _iso(p.prescribed_at),
        'startDate': _iso(p.start_date),
        'endDate': _iso(p.end_date),
        'status': p.status,
        'notes': p.notes,
        'patientName': p.patient.full_name,
        'prescribedByName': p.prescribed_by.display_name,
    }


def list_prescriptions(*, patient_id: Optional[int] = None, status: Optional[str] = None) -> list[Prescription]:
    qs = Prescription.objects.select_related('patient', 'prescribed_by')
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if status:
        qs = qs.filter(status=status)
    return list(qs.order_by('-prescribed_at', '-id'))


def create_prescription(*, patient_id: int, prescribed_by_id: int, **data) -> Prescription:
    patient = _patient_or_raise(patient_id)
    doctor = _staff_or_raise(prescribed_by_id, roles=(User.ROLE_DOCTOR,))
    return Prescription.objects.create(patient=patient, prescribed_by=doctor, **_pick(data, PRESCRIPTION_FIELDS))


def update_prescription(p: Prescription, data: dict) -> Prescription:
    return _apply(p, data, PRESCRIPTION_FIELDS)


# --- lab results ----------------------------------------------------------

def format_lab_result(r: LabResult) -> dict:
    return {
        'id': r.id,
        'patientId': r.patient_id,
        'orderedById': r.ordered_by_id,
        'testName': r.test_name,
        'testValue': r.test_value,
        'normalRange': r.normal_range,
        'unit': r.unit,
        'status': r.status,
        'severity': r.severity,
        'notes': r.notes,
        'orderedAt': _iso(r.ordered_at),
        'completedAt': _iso(r.completed_at),
        'reportedAt': _iso(r.reported_at),
        'patientName': r.patient.full_name,
        'orderedByName': r.ordered_by.display_name,
    }


def list_lab_results(*, patient_id: Optional[int] = None, status: Optional[str] = None) -> list[LabResult]:
    qs = LabResult.objects.select_related('patient', 'ordered_by')
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if status:
        qs = qs.filter(status=status)
    return list(qs.order_by('-ordered_at', '-id'))


def _alert_critical_lab(result: LabResult) -> list[dict]:
    try:
        payload = dispatch(NotificationDraft(
            title='Critical Lab Result',
            message=f"Critical lab result for {result.patient.full_name}: {result.test_name} = {result.test_value or 'n/a'}",
            type=Notification.TYPE_LAB_RESULT_ALERT,
            priority=Notification.PRIORITY_HIGH,
            patient_id=result.patient_id,
        ))
    except DatabaseError:
        logger.exception("Lab result alert for result %s was not created", result.id)
        return []
    return [payload]


def _stamp_completion(result: LabResult, was_completed: bool) -> None:
    if result.status == 'completed' and not was_completed:
        now = timezone.now()
        result.completed_at = result.completed_at or now
        result.reported_at = now


def create_lab_result(*, patient_id: int, ordered_by_id: int, **data) -> tuple[LabResult, list[dict]]:
    patient = _patient_or_raise(patient_id)
    staff = _staff_or_raise(ordered_by_id)
    result = LabResult(patient=patient, ordered_by=staff, **_pick(data, LAB_FIELDS))
    _stamp_completion(result, False)
    result.save()
    alerts = _alert_critical_lab(result) if result.severity == SeverityChoices.CRITICAL else []
    return result, alerts


def update_lab_result(result: LabResult, data: dict) -> tuple[LabResult, list[dict]]:
    was_critical = result.severity == SeverityChoices.CRITICAL
    was_completed = result.status == 'completed'
    for k, v in _changes(data, LAB_FIELDS).items():
        setattr(result, k, v)
    _stamp_completion(result, was_completed)
    result.save()
    alerts = []
    if result.severity == SeverityChoices.CRITICAL and not was_critical:
        alerts = _alert_critical_lab(result)
    return result, alerts


# --- progress notes -------------------------------------------------------

def format_progress_note(n: ProgressNote) -> dict:
    return {
        'id': n.id,
        'patientId': n.patient_id,
        'createdById': n.created_by_id,
        'title': n.title,
        'content': n.content,
        'category': n.category,
        'noteType': n.note_type,
        'isCritical': n.is_critical,
        'criticalNotes': n.critical_notes,
        'createdAt': _iso(n.created_at),
        'updatedAt': _iso(n.updated_at),
        'patientName': n.patient.full_name,
        'createdByName': n.created_by.display_name,
    }


def list_progress_notes(*, patient_id: Optional[int] = None, note_type: Optional[str] = None) -> list[ProgressNote]:
    qs = ProgressNote.objects.select_related('patient', 'created_by')
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if note_type:
        qs = qs.filter(note_type=note_type)
    return list(qs.order_by('-created_at', '-id'))


def create_progress_note(*, patient_id: int, created_by_id: int, **data) -> ProgressNote:
    patient = _patient_or_raise(patient_id)
    staff = _staff_or_raise(created_by_id)
    return ProgressNote.objects.create(patient=patient, created_by=staff, **_pick(data, NOTE_FIELDS))


def update_progress_note(n: ProgressNote, data: dict) -> ProgressNote:
    return _apply(n, data, NOTE_FIELDS, stamp='updated_at')
