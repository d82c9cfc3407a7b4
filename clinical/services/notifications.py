"""
Notification dispatch.

Every notification row is created here.  ``dispatch`` persists one draft;
``broadcast_to_staff`` fans a draft out to each active doctor and nurse with
one independent insert per recipient, so a failing insert only loses that
recipient's copy.  Created notifications are pushed to connected websocket
clients once the surrounding transaction commits.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from clinical.models import Appointment, Notification, Patient, User
from clinical.services.outcomes import Outcome

logger = logging.getLogger(__name__)

BROADCAST_GROUP = 'notifications'


@dataclass
class NotificationDraft:
    title: str
    message: str
    type: str
    priority: str = Notification.PRIORITY_NORMAL
    patient_id: Optional[int] = None
    user_id: Optional[int] = None


def format_notification(n: Notification) -> dict:
    return {
        'id': n.id,
        'title': n.title,
        'message': n.message,
        'type': n.type,
        'priority': n.priority,
        'patientId': n.patient_id,
        'userId': n.user_id,
        'isRead': n.is_read,
        'createdAt': n.created_at.isoformat() if n.created_at else None,
        'readAt': n.read_at.isoformat() if n.read_at else None,
        'patientName': n.patient.full_name if n.patient_id and n.patient else None,
        'userName': n.user.display_name if n.user_id and n.user else None,
    }


def user_group(user_id: int) -> str:
    return f"{BROADCAST_GROUP}.user.{user_id}"


def _push(payload: dict) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {'type': 'notification.created', 'notification': payload}
    target = user_group(payload['userId']) if payload.get('userId') else BROADCAST_GROUP
    try:
        async_to_sync(channel_layer.group_send)(target, event)
    except Exception:
        logger.exception("Failed to push notification %s to %s", payload.get('id'), target)


def _schedule_push(payload: dict) -> None:
    if getattr(settings, 'NOTIFICATION_PUSH_ENABLED', True):
        transaction.on_commit(lambda: _push(payload))


def dispatch(draft: NotificationDraft) -> dict:
    """Persist ``draft`` and return its materialized form."""
    with transaction.atomic():
        n = Notification.objects.create(
            title=draft.title.strip(),
            message=draft.message.strip(),
            type=draft.type,
            priority=draft.priority,
            patient_id=draft.patient_id,
            user_id=draft.user_id,
        )
    logger.info("Created notification %s (%s) for user %s", n.id, n.type, n.user_id or 'all')
    payload = format_notification(n)
    _schedule_push(payload)
    return payload


def active_staff():
    return User.objects.filter(role__in=User.CLINICAL_ROLES, is_active=True).order_by('id')


def broadcast_to_staff(message: str, patient_id: Optional[int] = None, *,
                       title: str = 'Critical Patient Alert',
                       type: str = Notification.TYPE_CRITICAL_ALERT,
                       priority: str = Notification.PRIORITY_CRITICAL) -> Outcome:
    """Send one copy of ``message`` to every active doctor and nurse.

    Zero active staff is a success with nothing created.  Recipients whose
    insert fails are listed in ``outcome.value['failed']``.
    """
    if patient_id is not None and not Patient.objects.filter(pk=patient_id).exists():
        return Outcome.missing('patient not found')
    created: list[dict] = []
    failed: list[int] = []
    for member in active_staff():
        try:
            created.append(dispatch(NotificationDraft(
                title=title, message=message, type=type, priority=priority,
                patient_id=patient_id, user_id=member.id,
            )))
        except DatabaseError:
            logger.exception("Broadcast to staff %s failed (patient %s)", member.id, patient_id)
            failed.append(member.id)
    if failed:
        logger.warning("Broadcast for patient %s reached %d of %d staff", patient_id, len(created), len(created) + len(failed))
    return Outcome.success({'failed': failed}, created)


def get_notification(notification_id: int) -> Optional[dict]:
    n = Notification.objects.select_related('patient', 'user').filter(pk=notification_id).first()
    return format_notification(n) if n else None


def mark_read(notification_id: int) -> Outcome:
    """Flip the read flag; ``read_at`` keeps the time of the first read."""
    n = Notification.objects.select_related('patient', 'user').filter(pk=notification_id).first()
    if n is None:
        return Outcome.missing('notification not found')
    if not n.is_read:
        n.is_read = True
        n.read_at = timezone.now()
        n.save(update_fields=['is_read', 'read_at'])
    return Outcome.success(format_notification(n))


def mark_all_read(user_id: Optional[int] = None) -> int:
    qs = Notification.objects.filter(is_read=False)
    if user_id is not None:
        qs = qs.filter(user_id=user_id)
    return qs.update(is_read=True, read_at=timezone.now())


def list_notifications(*, user_id: Optional[int] = None, is_read: Optional[bool] = None,
                       priority: Optional[str] = None) -> list[dict]:
    qs = Notification.objects.select_related('patient', 'user')
    if user_id is not None:
        qs = qs.filter(user_id=user_id)
    if is_read is not None:
        qs = qs.filter(is_read=is_read)
    if priority:
        qs = qs.filter(priority=priority)
    return [format_notification(n) for n in qs.order_by('-created_at', '-id')]


def notify_medical_record_update(patient_id: int, doctor_id: int, diagnosis: str) -> Outcome:
    patient = Patient.objects.filter(pk=patient_id).first()
    doctor = User.objects.filter(pk=doctor_id).first()
    if patient is None or doctor is None:
        return Outcome.missing('patient or doctor not found')
    payload = dispatch(NotificationDraft(
        title='Medical Record Updated',
        message=f"Dr. {doctor.last_name or doctor.username} updated medical record for {patient.full_name}. Diagnosis: {diagnosis}",
        type=Notification.TYPE_MEDICAL_RECORD_UPDATE,
        patient_id=patient.id,
    ))
    return Outcome.success(payload, [payload])


def appointment_reminder(appointment_id: int) -> Outcome:
    appt = Appointment.objects.select_related('patient').filter(pk=appointment_id).first()
    if appt is None:
        return Outcome.missing('appointment not found')
    when = timezone.localtime(appt.appointment_date).strftime('%Y-%m-%d %H:%M')
    payload = dispatch(NotificationDraft(
        title='Appointment Reminder',
        message=f"Reminder: Appointment with {appt.patient.full_name} on {when}",
        type=Notification.TYPE_APPOINTMENT_REMINDER,
        patient_id=appt.patient_id,
        user_id=appt.doctor_id,
    ))
    return Outcome.success(payload, [payload])
