import datetime

import pytest
from django.core.cache import cache
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from clinical.models import Patient, User

PASSWORD = 'Ward-Round-2024!'


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    # throttle counters live in the default cache
    cache.clear()
    yield
    cache.clear()


def make_user(username, role, **extra):
    defaults = {'first_name': username.split('.')[-1].title(), 'last_name': username.split('.')[-1].title()}
    defaults.update(extra)
    return User.objects.create_user(username=username, password=PASSWORD, role=role, **defaults)


def make_patient(first='Sarah', last='Johnson', **extra):
    data = {
        'first_name': first,
        'last_name': last,
        'date_of_birth': datetime.date(1990, 5, 15),
        'gender': 'Female',
        'address': '123 Main St',
        'phone_number': '(555) 123-4567',
    }
    data.update(extra)
    return Patient.objects.create(**data)


@pytest.fixture
def admin(db):
    return make_user('admin', User.ROLE_ADMIN, first_name='System', last_name='Administrator')


@pytest.fixture
def doctor(db):
    return make_user('dr.smith', User.ROLE_DOCTOR, first_name='John', last_name='Smith')


@pytest.fixture
def nurse(db):
    return make_user('nurse.jones', User.ROLE_NURSE, first_name='Sarah', last_name='Jones')


@pytest.fixture
def patient(db):
    return make_patient()


@pytest.fixture
def critical_patient(db):
    return make_patient('Michael', 'Chen', is_critical=True)


def client_for(user):
    client = APIClient()
    token, _ = Token.objects.get_or_create(user=user)
    client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')
    return client


@pytest.fixture
def admin_client(admin):
    return client_for(admin)


@pytest.fixture
def doctor_client(doctor):
    return client_for(doctor)


@pytest.fixture
def nurse_client(nurse):
    return client_for(nurse)
