import logging
from typing import Optional

from django.db import transaction

from clinical.exceptions import InvalidStaffRole, UnknownPatient, UnknownStaff
from clinical.models import Patient, SeverityChoices, User, VitalSign
from clinical.services import critical
from clinical.services.severity import THRESHOLDS, UNGRADED_SIGNS, classify_severity, sign_levels

logger = logging.getLogger(__name__)

VITAL_FIELDS = tuple(THRESHOLDS) + UNGRADED_SIGNS + ('notes',)


def format_vital(v: VitalSign) -> dict:
    return {
        'id': v.id,
        'patientId': v.patient_id,
        'recordedById': v.recorded_by_id,
        'temperature': v.temperature,
        'bloodPressureSystolic': v.blood_pressure_systolic,
        'bloodPressureDiastolic': v.blood_pressure_diastolic,
        'heartRate': v.heart_rate,
        'oxygenSaturation': v.oxygen_saturation,
        'respiratoryRate': v.respiratory_rate,
        'weight': v.weight,
        'height': v.height,
        'severity': v.severity,
        'notes': v.notes,
        'recordedAt': v.recorded_at.isoformat() if v.recorded_at else None,
        'patientName': v.patient.full_name,
        'recordedByName': v.recorded_by.display_name,
    }


def preview(reading: dict) -> dict:
    """Classify a reading without storing it."""
    levels = sign_levels(reading)
    return {
        'severity': classify_severity(reading).label,
        'signs': {name: level.label for name, level in levels.items()},
    }


def record_vital_sign(*, patient_id: int, recorded_by_id: int, actor=None, **reading) -> tuple[VitalSign, list[dict]]:
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        raise UnknownPatient()
    staff = User.objects.filter(pk=recorded_by_id, is_active=True).first()
    if staff is None:
        raise UnknownStaff()
    if staff.role not in User.CLINICAL_ROLES:
        raise InvalidStaffRole('Vital signs must be recorded by a doctor or nurse')
    fields = {k: v for k, v in reading.items() if k in VITAL_FIELDS}
    severity = classify_severity(fields)
    with transaction.atomic():
        vital = VitalSign.objects.create(
            patient=patient, recorded_by=staff, severity=severity.label, **fields,
        )
    logger.info("Recorded vitals %s for patient %s: %s", vital.id, patient.id, vital.severity)
    outcome = critical.on_vital_sign_recorded(vital, actor=actor)
    return vital, outcome.notifications


def _base():
    return VitalSign.objects.select_related('patient', 'recorded_by')


def list_vitals(*, patient_id: Optional[int] = None, severity: Optional[str] = None) -> list[VitalSign]:
    qs = _base()
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if severity:
        qs = qs.filter(severity=severity)
    return list(qs.order_by('-recorded_at', '-id'))


def get_vital(vital_id: int) -> Optional[VitalSign]:
    return _base().filter(pk=vital_id).first()


def latest_for_patient(patient_id: int) -> Optional[VitalSign]:
    return _base().filter(patient_id=patient_id).order_by('-recorded_at', '-id').first()


def critical_readings() -> list[VitalSign]:
    return list_vitals(severity=SeverityChoices.CRITICAL)
