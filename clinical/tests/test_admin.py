"""Writes through the Django admin must not bypass the critical-state rules."""
import pytest
from django.test import Client
from django.urls import reverse

from clinical.models import MedicalRecord, Notification, User, VitalSign
from clinical.services import records, vitals
from clinical.tests.conftest import PASSWORD

pytestmark = pytest.mark.django_db


@pytest.fixture
def site_admin():
    user = User.objects.create_superuser('root', 'root@hospital.com', PASSWORD, role=User.ROLE_ADMIN)
    client = Client()
    client.force_login(user)
    return client


def test_vital_signs_cannot_be_added_or_edited(site_admin, patient, nurse):
    r = site_admin.post(reverse('admin:clinical_vitalsign_add'), {
        'patient': patient.id, 'recorded_by': nurse.id, 'temperature': '41.0', 'heart_rate': 140,
    })
    assert r.status_code == 403
    assert not VitalSign.objects.exists()

    vital, _ = vitals.record_vital_sign(patient_id=patient.id, recorded_by_id=nurse.id, temperature=41.0)
    r = site_admin.post(reverse('admin:clinical_vitalsign_change', args=[vital.id]), {
        'patient': patient.id, 'recorded_by': nurse.id, 'temperature': '36.8',
    })
    assert r.status_code == 403
    vital.refresh_from_db()
    assert vital.severity == 'critical'


def test_notifications_cannot_be_added(site_admin, patient, nurse):
    r = site_admin.post(reverse('admin:clinical_notification_add'), {
        'title': 'Fake', 'message': 'Not from the dispatcher', 'type': Notification.TYPE_CRITICAL_ALERT,
        'priority': Notification.PRIORITY_CRITICAL, 'user': nurse.id, 'patient': patient.id,
    })
    assert r.status_code == 403
    assert not Notification.objects.exists()


def test_critical_record_added_in_admin_escalates_patient(site_admin, patient, doctor, nurse):
    r = site_admin.post(reverse('admin:clinical_medicalrecord_add'), {
        'patient': patient.id, 'doctor': doctor.id, 'diagnosis': 'Septic shock', 'is_critical': 'on',
    })
    assert r.status_code == 302
    assert MedicalRecord.objects.count() == 1
    patient.refresh_from_db()
    assert patient.is_critical
    alerts = Notification.objects.filter(type=Notification.TYPE_CRITICAL_ALERT)
    assert sorted(alerts.values_list('user_id', flat=True)) == sorted([doctor.id, nurse.id])
    assert Notification.objects.filter(type=Notification.TYPE_MEDICAL_RECORD_UPDATE).count() == 1


def test_clearing_record_flag_in_admin_stabilizes_patient(site_admin, patient, doctor, nurse):
    record, _ = records.create_record(patient_id=patient.id, doctor_id=doctor.id,
                                      diagnosis='Septic shock', is_critical=True)
    patient.refresh_from_db()
    assert patient.is_critical

    r = site_admin.post(reverse('admin:clinical_medicalrecord_change', args=[record.id]), {
        'patient': patient.id, 'doctor': doctor.id, 'diagnosis': 'Septic shock, resolved',
    })
    assert r.status_code == 302
    patient.refresh_from_db()
    assert not patient.is_critical
    assert Notification.objects.filter(type=Notification.TYPE_PATIENT_UPDATE).count() == 1
