import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from clinical.exceptions import InvalidStaffRole, UnknownPatient
from clinical.models import MedicalRecord, Patient, User
from clinical.services import critical
from clinical.services.notifications import notify_medical_record_update
from clinical.services.outcomes import Outcome

logger = logging.getLogger(__name__)

RECORD_FIELDS = (
    'diagnosis', 'symptoms', 'treatment', 'prescriptions', 'temperature',
    'blood_pressure_systolic', 'blood_pressure_diastolic', 'heart_rate',
    'weight', 'height', 'critical_notes',
)


def format_record(r: MedicalRecord) -> dict:
    return {
        'id': r.id,
        'patientId': r.patient_id,
        'doctorId': r.doctor_id,
        'diagnosis': r.diagnosis,
        'symptoms': r.symptoms,
        'treatment': r.treatment,
        'prescriptions': r.prescriptions,
        'temperature': r.temperature,
        'bloodPressureSystolic': r.blood_pressure_systolic,
        'bloodPressureDiastolic': r.blood_pressure_diastolic,
        'heartRate': r.heart_rate,
        'weight': r.weight,
        'height': r.height,
        'isCritical': r.is_critical,
        'criticalNotes': r.critical_notes,
        'createdAt': r.created_at.isoformat() if r.created_at else None,
        'updatedAt': r.updated_at.isoformat() if r.updated_at else None,
        'patientName': r.patient.full_name,
        'doctorName': f"Dr. {r.doctor.last_name or r.doctor.username}",
    }


def list_records(*, patient_id: Optional[int] = None, doctor_id: Optional[int] = None,
                 is_critical: Optional[bool] = None) -> list[MedicalRecord]:
    qs = MedicalRecord.objects.select_related('patient', 'doctor')
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if doctor_id is not None:
        qs = qs.filter(doctor_id=doctor_id)
    if is_critical is not None:
        qs = qs.filter(is_critical=is_critical)
    return list(qs.order_by('-created_at', '-id'))


def get_record(record_id: int) -> Optional[MedicalRecord]:
    return MedicalRecord.objects.select_related('patient', 'doctor').filter(pk=record_id).first()


def create_record(*, patient_id: int, doctor_id: int, is_critical: bool = False, actor=None, **fields) -> tuple[MedicalRecord, list[dict]]:
    """Store a record, escalate the patient if it is critical, announce it."""
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        raise UnknownPatient()
    doctor = User.objects.filter(pk=doctor_id, is_active=True).first()
    if doctor is None or doctor.role != User.ROLE_DOCTOR:
        raise InvalidStaffRole('Doctor not found or invalid')
    with transaction.atomic():
        record = MedicalRecord.objects.create(
            patient=patient, doctor=doctor, is_critical=is_critical,
            **{k: v for k, v in fields.items() if k in RECORD_FIELDS},
        )
    logger.info("Created medical record %s for patient %s", record.id, patient.id)
    outcome = critical.on_medical_record_saved(
        patient.id, doctor.id, record.diagnosis, is_critical, False, actor=actor,
    )
    announced = notify_medical_record_update(patient.id, doctor.id, record.diagnosis)
    return record, outcome.notifications + announced.notifications


def update_record(record_id: int, data: dict, *, is_critical: Optional[bool] = None, actor=None) -> Outcome:
    record = get_record(record_id)
    if record is None:
        return Outcome.missing('medical record not found')
    was_critical = record.is_critical
    for field in RECORD_FIELDS:
        # an explicit null clears the field
        if field in data:
            setattr(record, field, data[field])
    if is_critical is not None:
        record.is_critical = is_critical
    record.updated_at = timezone.now()
    record.save()
    outcome = critical.on_medical_record_saved(
        record.patient_id, record.doctor_id, record.diagnosis, record.is_critical, was_critical, actor=actor,
    )
    return Outcome.success(record, outcome.notifications)


def delete_record(record_id: int) -> bool:
    deleted, _ = MedicalRecord.objects.filter(pk=record_id).delete()
    return bool(deleted)
