"""
Critical-state coordination for patients.

``Patient.is_critical`` changes only through this module.  Every
false -> true change broadcasts a critical alert to the active doctors and
nurses; every true -> false change dispatches a "now stable" notification.
The flag is saved before any notification is created and is not reverted
when a dispatch fails.

Nothing here raises for a missing patient or for a transition that already
holds; those come back as ``not_found`` / ``no_change`` outcomes.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from django.db import DatabaseError
from django.utils import timezone

from clinical.models import Notification, Patient, VitalSign
from clinical.services.audit import log_action
from clinical.services.notifications import NotificationDraft, broadcast_to_staff, dispatch
from clinical.services.outcomes import Outcome
from clinical.services.severity import SeverityLevel, worst_signs

logger = logging.getLogger(__name__)

SIGN_LABELS = {
    'temperature': 'temperature',
    'blood_pressure_systolic': 'systolic BP',
    'heart_rate': 'heart rate',
    'oxygen_saturation': 'SpO2',
    'respiratory_rate': 'respiratory rate',
}


def _set_flag(patient: Patient, value: bool, *, actor, cause: str, detail: dict[str, Any]) -> None:
    now = timezone.now()
    patient.is_critical = value
    patient.critical_since = now if value else None
    patient.last_updated_at = now
    patient.save(update_fields=['is_critical', 'critical_since', 'last_updated_at'])
    log_action(
        user=actor,
        action='patient_mark_critical' if value else 'patient_mark_stable',
        object_type='patient', object_id=patient.id,
        detail={'cause': cause, **detail},
    )
    logger.info("Patient %s is_critical -> %s (%s)", patient.id, value, cause)


def _escalate(patient: Patient, message: str, *, actor, cause: str, detail: dict[str, Any]) -> Outcome:
    _set_flag(patient, True, actor=actor, cause=cause, detail=detail)
    broadcast = broadcast_to_staff(message, patient.id)
    if not broadcast.notifications:
        logger.warning("Patient %s marked critical but no active staff were notified", patient.id)
    return Outcome.success(patient, broadcast.notifications)


def _stabilize(patient: Patient, message: str, *, actor, cause: str, detail: dict[str, Any]) -> Outcome:
    _set_flag(patient, False, actor=actor, cause=cause, detail=detail)
    try:
        payload = dispatch(NotificationDraft(
            title='Patient Status Update',
            message=message,
            type=Notification.TYPE_PATIENT_UPDATE,
            priority=Notification.PRIORITY_NORMAL,
            patient_id=patient.id,
        ))
    except DatabaseError:
        logger.exception("Stable notification for patient %s was not created", patient.id)
        return Outcome.success(patient)
    return Outcome.success(patient, [payload])


def mark_critical(patient_id: int, reason: str, *, actor=None) -> Outcome:
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        return Outcome.missing('patient not found')
    if patient.is_critical:
        return Outcome.unchanged(patient, 'patient is already critical')
    return _escalate(
        patient,
        f"Patient {patient.full_name} marked as critical. Reason: {reason}",
        actor=actor, cause='manual', detail={'reason': reason},
    )


def mark_stable(patient_id: int, *, actor=None) -> Outcome:
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        return Outcome.missing('patient not found')
    if not patient.is_critical:
        return Outcome.unchanged(patient, 'patient is already stable')
    return _stabilize(
        patient,
        f"Patient {patient.full_name} is now stable.",
        actor=actor, cause='manual', detail={},
    )


def on_medical_record_saved(patient_id: int, doctor_id: Optional[int], diagnosis: str,
                            is_critical: bool, was_critical: bool, *, actor=None) -> Outcome:
    """Propagate a medical record's critical flag to its patient.

    Only an edge on the record flag matters: newly critical escalates a
    stable patient, no-longer-critical stabilizes a critical patient.
    """
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        return Outcome.missing('patient not found')
    detail = {'doctorId': doctor_id, 'diagnosis': diagnosis}
    if is_critical and not was_critical:
        if patient.is_critical:
            return Outcome.unchanged(patient, 'patient is already critical')
        return _escalate(
            patient,
            f"Patient {patient.full_name} has critical medical condition: {diagnosis}",
            actor=actor, cause='medical_record', detail=detail,
        )
    if was_critical and not is_critical:
        if not patient.is_critical:
            return Outcome.unchanged(patient, 'patient is already stable')
        return _stabilize(
            patient,
            f"Patient {patient.full_name} medical condition is now stable.",
            actor=actor, cause='medical_record', detail=detail,
        )
    return Outcome.unchanged(patient)


def _describe_signs(vital: VitalSign) -> str:
    parts = []
    for name in worst_signs(vital):
        parts.append(f"{SIGN_LABELS[name]} {getattr(vital, name)}")
    return ', '.join(parts)


def on_vital_sign_recorded(vital: VitalSign, *, actor=None) -> Outcome:
    """React to a freshly classified reading.

    A Critical reading escalates a stable patient.  A High or Critical reading
    for a patient who is already critical raises one vital-sign alert without
    touching the flag.  Lower readings never stabilize a patient.
    """
    patient = Patient.objects.filter(pk=vital.patient_id).first()
    if patient is None:
        return Outcome.missing('patient not found')
    severity = SeverityLevel.from_label(vital.severity)
    signs = _describe_signs(vital)
    if severity == SeverityLevel.CRITICAL and not patient.is_critical:
        return _escalate(
            patient,
            f"Patient {patient.full_name} has critical vital signs: {signs}",
            actor=actor, cause='vital_sign', detail={'vitalSignId': vital.id, 'severity': vital.severity},
        )
    if severity >= SeverityLevel.HIGH and patient.is_critical:
        try:
            payload = dispatch(NotificationDraft(
                title='Vital Sign Alert',
                message=f"Patient {patient.full_name} recorded {severity.label} vital signs: {signs}",
                type=Notification.TYPE_VITAL_SIGN_ALERT,
                priority=Notification.PRIORITY_HIGH,
                patient_id=patient.id,
            ))
        except DatabaseError:
            logger.exception("Vital sign alert for patient %s was not created", patient.id)
            return Outcome.unchanged(patient)
        return Outcome.unchanged(patient, notifications=[payload])
    return Outcome.unchanged(patient)


def apply_patient_critical_flag(patient: Patient, requested: Optional[bool], *, actor=None) -> Outcome:
    """Route an ``isCritical`` value sent with a general patient update.

    ``None`` (not sent) and a value equal to the current flag do nothing.
    """
    if requested is None or bool(requested) == patient.is_critical:
        return Outcome.unchanged(patient)
    if requested:
        return _escalate(
            patient,
            f"Patient {patient.full_name} has been marked as critical.",
            actor=actor, cause='patient_update', detail={},
        )
    return _stabilize(
        patient,
        f"Patient {patient.full_name} is now stable.",
        actor=actor, cause='patient_update', detail={},
    )


def critical_patients():
    return Patient.objects.filter(is_critical=True).order_by('-critical_since', 'id')
