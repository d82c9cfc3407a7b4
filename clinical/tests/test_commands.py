import pytest
from django.core.management import call_command

from clinical.models import Notification, Patient, User

pytestmark = pytest.mark.django_db


def test_seed_hospital_is_idempotent():
    call_command('seed_hospital')
    call_command('seed_hospital')

    assert set(User.objects.values_list('username', 'role')) == {
        ('admin', 'admin'), ('dr.smith', 'doctor'), ('nurse.jones', 'nurse'),
    }
    assert User.objects.get(username='dr.smith').check_password('doctor123')
    chen = Patient.objects.get(last_name='Chen')
    assert chen.is_critical
    assert not Patient.objects.get(last_name='Johnson').is_critical
    # the admission alert went out once, to the doctor and the nurse
    assert Notification.objects.filter(patient=chen, type=Notification.TYPE_CRITICAL_ALERT).count() == 2
