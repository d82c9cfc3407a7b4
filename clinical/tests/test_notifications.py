import pytest

from clinical.models import Notification
from clinical.services import notifications as svc
from clinical.services.notifications import NotificationDraft

pytestmark = pytest.mark.django_db


def _draft(**kw):
    data = {'title': 'Heads up', 'message': 'Check bed 4', 'type': Notification.TYPE_SYSTEM_ALERT}
    data.update(kw)
    return NotificationDraft(**data)


def test_dispatch_returns_materialized_notification(patient, nurse):
    payload = svc.dispatch(_draft(patient_id=patient.id, user_id=nurse.id, priority=Notification.PRIORITY_HIGH))

    assert payload['id'] == Notification.objects.get().id
    assert payload['patientName'] == 'Sarah Johnson'
    assert payload['userName'] == 'Sarah Jones'
    assert payload['priority'] == 'high'
    assert payload['isRead'] is False
    assert payload['readAt'] is None


def test_broadcast_with_no_active_staff_creates_nothing(patient, admin):
    outcome = svc.broadcast_to_staff('Anyone there?', patient.id)
    assert outcome.ok
    assert outcome.notifications == []
    assert Notification.objects.count() == 0


def test_broadcast_to_unknown_patient_is_not_found(doctor):
    assert svc.broadcast_to_staff('lost', 98765).not_found
    assert Notification.objects.count() == 0


def test_mark_read_is_idempotent_and_keeps_first_read_time(nurse):
    payload = svc.dispatch(_draft(user_id=nurse.id))

    first = svc.mark_read(payload['id'])
    assert first.ok
    read_at = Notification.objects.get().read_at
    assert read_at is not None

    second = svc.mark_read(payload['id'])
    assert second.ok
    assert second.value['isRead'] is True
    assert Notification.objects.get().read_at == read_at


def test_mark_read_unknown_id_is_not_found():
    assert svc.mark_read(5555).not_found


def test_list_notifications_filters_combine_and_newest_first(doctor, nurse):
    a = svc.dispatch(_draft(user_id=doctor.id, title='first'))
    b = svc.dispatch(_draft(user_id=doctor.id, title='second'))
    c = svc.dispatch(_draft(user_id=nurse.id, title='third'))
    svc.mark_read(a['id'])

    assert [n['id'] for n in svc.list_notifications()] == [c['id'], b['id'], a['id']]
    assert [n['id'] for n in svc.list_notifications(user_id=doctor.id)] == [b['id'], a['id']]
    assert [n['id'] for n in svc.list_notifications(is_read=False)] == [c['id'], b['id']]
    assert [n['id'] for n in svc.list_notifications(user_id=doctor.id, is_read=True)] == [a['id']]


def test_mark_all_read_scoped_to_user(doctor, nurse):
    svc.dispatch(_draft(user_id=doctor.id))
    svc.dispatch(_draft(user_id=doctor.id))
    svc.dispatch(_draft(user_id=nurse.id))

    assert svc.mark_all_read(doctor.id) == 2
    assert Notification.objects.filter(is_read=False).count() == 1
    assert svc.mark_all_read() == 1


def test_appointment_reminder_targets_the_doctor(patient, doctor):
    from django.utils import timezone
    from clinical.services.care import create_appointment

    appt = create_appointment(patient_id=patient.id, doctor_id=doctor.id,
                              appointment_date=timezone.now(), appointment_type='Follow-up')
    outcome = svc.appointment_reminder(appt.id)

    assert outcome.ok
    n = Notification.objects.get()
    assert n.user_id == doctor.id
    assert n.type == Notification.TYPE_APPOINTMENT_REMINDER
    assert n.message.startswith('Reminder: Appointment with Sarah Johnson on ')
    assert svc.appointment_reminder(99999).not_found
