import datetime

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import Patient, Role, User
from clinic.services.accounts import issue_token


@pytest.fixture(autouse=True)
def _reset_throttles():
    # throttle counters live in the local-memory cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(role=Role.DOCTOR, email=None, password='secret123', name=None, department=None, **extra):
        email = email or f'{role}{User.objects.count() + 1}@medicore.test'
        return User.objects.create_user(
            email=email, password=password, name=name or f'Test {role}', role=role,
            department=department, **extra,
        )
    return _make


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')
        return client
    return _client


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN, email='admin@medicore.test', name='Admin User')


@pytest.fixture
def doctor(make_user):
    return make_user(Role.DOCTOR, email='sarah@medicore.test', name='Dr. Sarah Johnson', department='Cardiology')


@pytest.fixture
def receptionist(make_user):
    return make_user(Role.RECEPTIONIST, email='emily@medicore.test', name='Emily Davis')


@pytest.fixture
def make_patient(db):
    def _make(pid='P001', name='John Smith', email=None, **extra):
        fields = dict(
            name=name, age=45, gender='Male', blood_group='O+', phone='+1-555-0101',
            email=email or f'{pid.lower()}@email.test', address='123 Main St',
            emergency_contact='Jane Smith', registration_date=datetime.date(2024, 1, 10),
        )
        fields.update(extra)
        return Patient.objects.create(id=pid, **fields)
    return _make
