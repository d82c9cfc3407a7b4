"""
Integration tests for the hospital API.

These exercise the HTTP surface end to end: authentication, role checks,
the critical-patient workflow and notification handling.  They use Django
REST framework's APIClient, either through APITestCase or through the
pytest fixtures in ``conftest.py``.

To run the tests:

```
pytest -q clinical/tests
```
"""
import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from clinical.models import LabResult, MedicalRecord, Notification, Patient, User, VitalSign
from clinical.tests.conftest import PASSWORD, client_for, make_patient, make_user


class CriticalWorkflowAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = make_user('admin', User.ROLE_ADMIN, first_name='System', last_name='Administrator')
        self.doctor = make_user('dr.smith', User.ROLE_DOCTOR, first_name='John', last_name='Smith')
        self.nurse = make_user('nurse.jones', User.ROLE_NURSE, first_name='Sarah', last_name='Jones')
        self.patient = make_patient()
        self.client = client_for(self.nurse)

    def test_mark_critical_then_stable(self):
        url = reverse('patient_mark_critical', args=[self.patient.id])
        resp = self.client.post(url, {'reason': 'BP 200/120'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.patient.refresh_from_db()
        self.assertTrue(self.patient.is_critical)
        alerts = Notification.objects.filter(type=Notification.TYPE_CRITICAL_ALERT)
        self.assertEqual(set(alerts.values_list('user_id', flat=True)), {self.doctor.id, self.nurse.id})

        again = self.client.post(url, {'reason': 'still bad'}, format='json')
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data['error']['code'], 'no_change')
        self.assertEqual(alerts.count(), 2)

        stable_url = reverse('patient_mark_stable', args=[self.patient.id])
        self.assertEqual(self.client.post(stable_url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.post(stable_url).status_code, status.HTTP_409_CONFLICT)
        self.patient.refresh_from_db()
        self.assertFalse(self.patient.is_critical)

    def test_mark_critical_unknown_patient_is_404(self):
        resp = self.client.post(reverse('patient_mark_critical', args=[424242]), {'reason': 'x'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data['error']['code'], 'not_found')
        self.assertEqual(Notification.objects.count(), 0)

    def test_mark_critical_accepts_bare_string_reason(self):
        resp = self.client.post(reverse('patient_mark_critical', args=[self.patient.id]), 'Chest pain', format='json')
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        n = Notification.objects.filter(user=self.doctor).get()
        self.assertEqual(n.message, 'Patient Sarah Johnson marked as critical. Reason: Chest pain')

    def test_mark_critical_requires_reason(self):
        resp = self.client.post(reverse('patient_mark_critical', args=[self.patient.id]), {}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(resp.data['ok'])

    def test_patient_update_with_is_critical_broadcasts(self):
        url = reverse('patient_detail', args=[self.patient.id])
        resp = self.client.put(url, {'room': 'ICU-1', 'isCritical': True}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['room'], 'ICU-1')
        self.assertTrue(resp.data['isCritical'])
        self.assertEqual(Notification.objects.filter(type=Notification.TYPE_CRITICAL_ALERT).count(), 2)

        resp = self.client.put(url, {'isCritical': False}, format='json')
        self.assertFalse(resp.data['isCritical'])
        self.assertEqual(Notification.objects.filter(type=Notification.TYPE_PATIENT_UPDATE).count(), 1)

    def test_plain_patient_update_sends_nothing(self):
        resp = self.client.put(reverse('patient_detail', args=[self.patient.id]), {'condition': 'Recovering'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['condition'], 'Recovering')
        self.assertEqual(Notification.objects.count(), 0)

    def test_vital_sign_severity_is_computed_server_side(self):
        resp = self.client.post(reverse('vital_signs'), {
            'patientId': self.patient.id,
            'temperature': '38.0',
            'heartRate': 130,
            'severity': 'normal',
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['severity'], 'critical')
        self.assertEqual(resp.data['recordedById'], self.nurse.id)
        self.assertEqual(len(resp.data['notifications']), 2)
        self.assertEqual(VitalSign.objects.get().severity, 'critical')
        self.patient.refresh_from_db()
        self.assertTrue(self.patient.is_critical)

    def test_critical_record_from_doctor_escalates_patient(self):
        client = client_for(self.doctor)
        resp = client.post(reverse('medical_records'), {
            'patientId': self.patient.id,
            'doctorId': self.doctor.id,
            'diagnosis': 'Septic shock',
            'isCritical': True,
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['doctorName'], 'Dr. Smith')
        self.patient.refresh_from_db()
        self.assertTrue(self.patient.is_critical)
        self.assertEqual(Notification.objects.filter(type=Notification.TYPE_MEDICAL_RECORD_UPDATE).count(), 1)

        record_id = resp.data['id']
        resp = client.put(reverse('medical_record_detail', args=[record_id]), {'isCritical': False}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.patient.refresh_from_db()
        self.assertFalse(self.patient.is_critical)


def test_login_returns_token_and_jwt(doctor):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'dr.smith', 'password': PASSWORD}, format='json')
    assert r.status_code == 200
    assert r.data['token']
    assert r.data['jwtAccess'] and r.data['jwtRefresh']
    assert r.data['user']['role'] == 'doctor'
    doctor.refresh_from_db()
    assert doctor.last_login is not None


def test_login_rejects_bad_password(doctor):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'dr.smith', 'password': 'nope'}, format='json')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'invalid_credentials'


def test_login_ignores_role_in_body(nurse):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'nurse.jones', 'password': PASSWORD, 'role': 'admin'}, format='json')
    assert r.status_code == 200
    nurse.refresh_from_db()
    assert nurse.role == 'nurse'


def test_jwt_access_token_authenticates(nurse, patient):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'nurse.jones', 'password': PASSWORD}, format='json')
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwtAccess']}")
    assert client.get(reverse('patients')).status_code == 200


def test_requests_without_credentials_are_rejected(db):
    r = APIClient().get(reverse('patients'))
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_patient_list_filters(nurse_client, patient, critical_patient):
    r = nurse_client.get(reverse('patients'))
    assert [p['lastName'] for p in r.data] == ['Chen', 'Johnson']
    r = nurse_client.get(reverse('patients'), {'isCritical': 'true'})
    assert [p['id'] for p in r.data] == [critical_patient.id]
    r = nurse_client.get(reverse('patients'), {'search': 'sarah', 'isCritical': 'false'})
    assert [p['id'] for p in r.data] == [patient.id]
    r = nurse_client.get(reverse('patients_critical'))
    assert [p['fullName'] for p in r.data] == ['Michael Chen']


def test_create_patient_strips_markup(nurse_client):
    r = nurse_client.post(reverse('patients'), {
        'firstName': '<b>Ada</b>',
        'lastName': 'Lovelace',
        'dateOfBirth': '1985-12-10',
        'gender': 'Female',
        'address': '1 Analytical Way',
        'phoneNumber': '555-0100',
    }, format='json')
    assert r.status_code == 201
    assert r.data['firstName'] == 'Ada'
    assert r.data['isCritical'] is False
    assert r.data['status'] == 'active'


def test_only_admin_may_deactivate_patient(nurse_client, admin_client, patient):
    url = reverse('patient_detail', args=[patient.id])
    r = nurse_client.delete(url)
    assert r.status_code == 403
    assert r.data['error']['code'] == 'permission_denied'
    assert admin_client.delete(url).status_code == 204
    patient.refresh_from_db()
    assert patient.status == Patient.STATUS_INACTIVE


def test_admin_cannot_record_vitals(admin_client, patient):
    r = admin_client.post(reverse('vital_signs'), {'patientId': patient.id, 'heartRate': 80}, format='json')
    assert r.status_code == 403


def test_vital_sign_for_unknown_patient_is_rejected(nurse_client):
    r = nurse_client.post(reverse('vital_signs'), {'patientId': 9999, 'heartRate': 80}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'unknown_patient'


def test_classify_endpoint_stores_nothing(nurse_client):
    r = nurse_client.post(reverse('vital_signs_classify'), {'temperature': 38.0, 'oxygenSaturation': 95}, format='json')
    assert r.status_code == 200
    assert r.data == {'severity': 'high', 'signs': {'temperature': 'elevated', 'oxygen_saturation': 'high'}}
    assert VitalSign.objects.count() == 0


def test_latest_vitals_for_patient(nurse_client, patient):
    assert nurse_client.get(reverse('vital_signs_latest', args=[patient.id])).status_code == 404
    nurse_client.post(reverse('vital_signs'), {'patientId': patient.id, 'heartRate': 80}, format='json')
    nurse_client.post(reverse('vital_signs'), {'patientId': patient.id, 'heartRate': 95}, format='json')
    r = nurse_client.get(reverse('vital_signs_latest', args=[patient.id]))
    assert r.data['heartRate'] == 95
    assert r.data['severity'] == 'elevated'
    assert len(nurse_client.get(reverse('vital_signs_patient', args=[patient.id])).data) == 2


def test_nurse_cannot_write_medical_records(nurse_client, patient, doctor):
    r = nurse_client.post(reverse('medical_records'), {
        'patientId': patient.id, 'doctorId': doctor.id, 'diagnosis': 'Flu',
    }, format='json')
    assert r.status_code == 403
    assert MedicalRecord.objects.count() == 0


def test_medical_record_requires_a_doctor(admin_client, patient, nurse):
    r = admin_client.post(reverse('medical_records'), {
        'patientId': patient.id, 'doctorId': nurse.id, 'diagnosis': 'Flu',
    }, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid_staff_role'


def test_notification_read_lifecycle(nurse_client, nurse, patient):
    r = nurse_client.post(reverse('notifications'), {
        'title': 'Bed check', 'message': 'Bed 4 needs linen', 'type': 'system_alert',
        'userId': nurse.id, 'patientId': patient.id,
    }, format='json')
    assert r.status_code == 201
    nid = r.data['id']
    assert r.data['patientName'] == 'Sarah Johnson'

    assert [n['id'] for n in nurse_client.get(reverse('notifications_unread')).data] == [nid]
    r = nurse_client.post(reverse('notification_mark_read', args=[nid]))
    assert r.status_code == 200
    assert r.data['isRead'] is True
    first_read = r.data['readAt']
    r = nurse_client.post(reverse('notification_mark_read', args=[nid]))
    assert r.data['readAt'] == first_read
    assert nurse_client.get(reverse('notifications_unread')).data == []
    assert nurse_client.post(reverse('notification_mark_read', args=[987654])).status_code == 404


def test_notification_listing_filters(nurse_client, doctor, nurse, patient):
    nurse_client.post(reverse('patient_mark_critical', args=[patient.id]), {'reason': 'Hypoxia'}, format='json')
    r = nurse_client.get(reverse('notifications'), {'userId': doctor.id})
    assert len(r.data) == 1
    assert r.data[0]['priority'] == 'critical'
    assert len(nurse_client.get(reverse('notifications_critical')).data) == 2

    r = nurse_client.post(reverse('notifications_mark_all_read'), {'userId': doctor.id}, format='json')
    assert r.data['updated'] == 1
    assert len(nurse_client.get(reverse('notifications'), {'isRead': 'false'}).data) == 1


def test_user_management_is_admin_only(admin_client, nurse_client, doctor):
    assert nurse_client.get(reverse('users')).status_code == 403
    r = admin_client.post(reverse('users'), {
        'username': 'nurse.kim', 'email': 'kim@hospital.com', 'password': PASSWORD,
        'firstName': 'Grace', 'lastName': 'Kim', 'role': 'nurse',
    }, format='json')
    assert r.status_code == 201
    assert r.data['role'] == 'nurse'

    dup = admin_client.post(reverse('users'), {
        'username': 'nurse.kim', 'email': 'other@hospital.com', 'password': PASSWORD,
        'firstName': 'Grace', 'lastName': 'Kim', 'role': 'nurse',
    }, format='json')
    assert dup.status_code == 400

    roster = nurse_client.get(reverse('users_nurses')).data
    assert {u['username'] for u in roster} == {'nurse.jones', 'nurse.kim'}

    assert admin_client.delete(reverse('user_detail', args=[doctor.id])).status_code == 204
    assert admin_client.delete(reverse('user_detail', args=[doctor.id])).status_code == 409
    assert nurse_client.get(reverse('users_doctors')).data == []


def test_deactivated_staff_receive_no_alerts(admin_client, nurse_client, doctor, nurse, patient):
    admin_client.delete(reverse('user_detail', args=[doctor.id]))
    nurse_client.post(reverse('patient_mark_critical', args=[patient.id]), {'reason': 'Shock'}, format='json')
    assert list(Notification.objects.values_list('user_id', flat=True)) == [nurse.id]


def test_appointment_and_reminder(nurse_client, doctor, patient):
    r = nurse_client.post(reverse('appointments'), {
        'patientId': patient.id, 'doctorId': doctor.id,
        'appointmentDate': '2030-01-15T09:30:00Z', 'appointmentType': 'Follow-up',
    }, format='json')
    assert r.status_code == 201
    appt_id = r.data['id']
    assert r.data['doctorName'] == 'Dr. Smith'

    r = nurse_client.post(reverse('appointment_remind', args=[appt_id]))
    assert r.status_code == 201
    assert r.data['userId'] == doctor.id
    assert r.data['message'] == 'Reminder: Appointment with Sarah Johnson on 2030-01-15 09:30'


def test_critical_lab_result_alerts_without_touching_the_flag(doctor_client, patient):
    r = doctor_client.post(reverse('lab_results'), {
        'patientId': patient.id, 'testName': 'Potassium', 'testValue': '6.9',
        'unit': 'mmol/L', 'status': 'completed', 'severity': 'critical',
    }, format='json')
    assert r.status_code == 201
    assert r.data['completedAt'] is not None
    assert len(r.data['notifications']) == 1
    assert Notification.objects.get().type == Notification.TYPE_LAB_RESULT_ALERT
    patient.refresh_from_db()
    assert patient.is_critical is False
    assert LabResult.objects.get().ordered_by.username == 'dr.smith'


def test_prescription_and_progress_note_crud(doctor_client, patient):
    r = doctor_client.post(reverse('prescriptions'), {
        'patientId': patient.id, 'medicationName': 'Metoprolol', 'dosage': '25 mg', 'frequency': 'BID',
    }, format='json')
    assert r.status_code == 201
    pid = r.data['id']
    r = doctor_client.patch(reverse('prescription_detail', args=[pid]), {'status': 'discontinued'}, format='json')
    assert r.data['status'] == 'discontinued'

    r = doctor_client.post(reverse('progress_notes'), {
        'patientId': patient.id, 'title': 'Day 2', 'content': 'Ambulating with assistance.',
    }, format='json')
    assert r.status_code == 201
    note_id = r.data['id']
    assert [n['id'] for n in doctor_client.get(reverse('progress_notes'), {'patientId': patient.id}).data] == [note_id]
    assert doctor_client.delete(reverse('progress_note_detail', args=[note_id])).status_code == 204


def test_dashboard_counts(nurse_client, patient, critical_patient):
    r = nurse_client.get(reverse('dashboard'))
    assert r.status_code == 200
    assert r.data['totalPatients'] == 2
    assert r.data['criticalPatients'] == 1
    assert r.data['unreadNotifications'] == 0


@pytest.mark.django_db
def test_healthz():
    r = APIClient().get('/healthz')
    assert r.status_code == 200
    assert r.json()['ok'] is True


def test_unread_notifications_rejects_malformed_user_id(nurse_client, nurse):
    r = nurse_client.get(reverse('notifications_unread'), {'userId': 'abc'})
    assert r.status_code == 400
    assert r.data['ok'] is False
    assert nurse_client.get(reverse('notifications_unread'), {'userId': nurse.id}).status_code == 200


def test_explicit_null_clears_optional_fields(doctor_client, doctor, patient):
    r = doctor_client.post(reverse('medical_records'), {
        'patientId': patient.id, 'doctorId': doctor.id,
        'diagnosis': 'Pneumonia', 'treatment': 'Amoxicillin',
    }, format='json')
    rid = r.data['id']
    r = doctor_client.patch(reverse('medical_record_detail', args=[rid]), {'treatment': None}, format='json')
    assert r.status_code == 200
    assert r.data['treatment'] is None
    assert r.data['diagnosis'] == 'Pneumonia'

    r = doctor_client.post(reverse('progress_notes'), {
        'patientId': patient.id, 'title': 'Day 1', 'content': 'Stable overnight.', 'category': 'Nursing',
    }, format='json')
    note_id = r.data['id']
    r = doctor_client.patch(reverse('progress_note_detail', args=[note_id]), {'category': None}, format='json')
    assert r.data['category'] is None
    assert r.data['title'] == 'Day 1'

    r = doctor_client.patch(reverse('patient_detail', args=[patient.id]), {'room': '12B'}, format='json')
    assert r.data['room'] == '12B'
    r = doctor_client.patch(reverse('patient_detail', args=[patient.id]), {'room': None}, format='json')
    assert r.data['room'] is None
