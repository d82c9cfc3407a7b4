import logging
from typing import Optional

from django.db.models import Q
from django.utils import timezone

from clinical.models import Patient
from clinical.services import critical
from clinical.services.audit import log_action
from clinical.services.outcomes import Outcome

logger = logging.getLogger(__name__)

# Fields a general create/update may write.  ``is_critical`` goes through
# clinical.services.critical instead.
EDITABLE_FIELDS = (
    'first_name', 'last_name', 'date_of_birth', 'gender', 'address', 'phone_number',
    'email', 'emergency_contact', 'emergency_phone', 'medical_history', 'allergies',
    'blood_type', 'room', 'department', 'condition',
)


def format_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'firstName': p.first_name,
        'lastName': p.last_name,
        'fullName': p.full_name,
        'dateOfBirth': p.date_of_birth.isoformat() if p.date_of_birth else None,
        'gender': p.gender,
        'address': p.address,
        'phoneNumber': p.phone_number,
        'email': p.email,
        'emergencyContact': p.emergency_contact,
        'emergencyPhone': p.emergency_phone,
        'medicalHistory': p.medical_history,
        'allergies': p.allergies,
        'bloodType': p.blood_type,
        'room': p.room,
        'department': p.department,
        'condition': p.condition,
        'status': p.status,
        'isCritical': p.is_critical,
        'criticalSince': p.critical_since.isoformat() if p.critical_since else None,
        'createdAt': p.created_at.isoformat() if p.created_at else None,
        'lastUpdatedAt': p.last_updated_at.isoformat() if p.last_updated_at else None,
    }


def list_patients(*, is_critical: Optional[bool] = None, status: Optional[str] = None,
                  search: Optional[str] = None) -> list[Patient]:
    qs = Patient.objects.all()
    if search:
        qs = qs.filter(
            Q(first_name__icontains=search) | Q(last_name__icontains=search)
            | Q(phone_number__icontains=search) | Q(email__icontains=search)
        )
    if is_critical is not None:
        qs = qs.filter(is_critical=is_critical)
    if status:
        qs = qs.filter(status=status)
    patients = list(qs.order_by('last_name', 'first_name', 'id'))
    logger.info("Listed %d patients (critical=%s, status=%s, search=%r)", len(patients), is_critical, status, search)
    return patients


def create_patient(data: dict, *, actor=None) -> Patient:
    patient = Patient.objects.create(
        status=Patient.STATUS_ACTIVE,
        is_critical=False,
        **{k: v for k, v in data.items() if k in EDITABLE_FIELDS},
    )
    log_action(user=actor, action='patient_create', object_type='patient', object_id=patient.id)
    logger.info("Created patient %s", patient.id)
    return patient


def update_patient(patient_id: int, data: dict, *, is_critical: Optional[bool] = None, actor=None) -> Outcome:
    """Apply a partial update.

    An ``is_critical`` value that differs from the stored flag runs the
    matching coordinator path, so raising it here alerts the staff exactly
    like an explicit mark-critical.
    """
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        return Outcome.missing('patient not found')
    changed = []
    for field in EDITABLE_FIELDS + ('status',):
        if field in data:
            setattr(patient, field, data[field])
            changed.append(field)
    patient.last_updated_at = timezone.now()
    patient.save(update_fields=changed + ['last_updated_at'])
    log_action(user=actor, action='patient_update', object_type='patient', object_id=patient.id,
               detail={'fields': changed})
    flag = critical.apply_patient_critical_flag(patient, is_critical, actor=actor)
    return Outcome.success(patient, flag.notifications)


def deactivate_patient(patient_id: int, *, actor=None) -> Outcome:
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        return Outcome.missing('patient not found')
    patient.status = Patient.STATUS_INACTIVE
    patient.last_updated_at = timezone.now()
    patient.save(update_fields=['status', 'last_updated_at'])
    log_action(user=actor, action='patient_delete', object_type='patient', object_id=patient.id)
    return Outcome.success(patient)
