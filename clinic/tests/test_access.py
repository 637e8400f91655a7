"""
Access gate: bearer token verification and role checks.
"""
import datetime

import jwt
import pytest
from django.conf import settings
from rest_framework.test import APIClient

from clinic.models import Role
from clinic.permissions import role_allows

pytestmark = pytest.mark.django_db


def _token(user, *, expires_in, key=None):
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {'id': user.pk, 'role': user.role, 'token_type': 'access',
               'iat': now, 'exp': now + expires_in}
    return jwt.encode(payload, key or settings.SIMPLE_JWT['SIGNING_KEY'], algorithm='HS256')


def test_missing_token_is_rejected():
    r = APIClient().get('/api/patients')
    assert r.status_code == 401
    assert r.data['success'] is False
    assert r.data['message'] == 'Authentication required. No token provided.'


def test_expired_and_malformed_tokens_are_distinguishable(doctor):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {_token(doctor, expires_in=datetime.timedelta(hours=-1))}')
    expired = client.get('/api/patients')

    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    malformed = client.get('/api/patients')

    assert expired.status_code == 401 and malformed.status_code == 401
    assert expired.data['message'] == 'Token expired'
    assert malformed.data['message'] == 'Invalid token'


def test_bad_signature_is_invalid(doctor):
    client = APIClient()
    forged = _token(doctor, expires_in=datetime.timedelta(hours=1), key='x' * 48)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {forged}')
    r = client.get('/api/patients')
    assert r.status_code == 401
    assert r.data['message'] == 'Invalid token'


def test_token_of_deactivated_user_is_invalid(doctor, client_for):
    client = client_for(doctor)
    doctor.is_active = False
    doctor.save()
    r = client.get('/api/auth/me')
    assert r.status_code == 401
    assert r.data['message'] == 'Invalid token'


def test_valid_token_reaches_handler(doctor, client_for):
    r = client_for(doctor).get('/api/auth/me')
    assert r.status_code == 200
    assert r.data['data']['email'] == doctor.email
    assert 'password' not in r.data['data']


def test_receptionist_denied_admin_doctor_handler(receptionist, client_for):
    r = client_for(receptionist).get('/api/reports/stats')
    assert r.status_code == 403
    assert r.data['success'] is False
    (err,) = r.data['errors']
    assert err['field'] == 'role'
    assert err['value'] == 'receptionist'
    assert err['requiredRoles'] == ['admin', 'doctor']


def test_method_scoped_roles(doctor, make_patient, client_for):
    make_patient('P001')
    client = client_for(doctor)
    assert client.get('/api/patients/P001').status_code == 200
    r = client.delete('/api/patients/P001')
    assert r.status_code == 403
    assert r.data['errors'][0]['requiredRoles'] == ['admin']


def test_unknown_api_route_gets_json_404():
    r = APIClient().get('/api/does-not-exist')
    assert r.status_code == 404
    body = r.json()
    assert body['success'] is False
    assert 'timestamp' in body


def test_role_policy_is_total():
    assert role_allows(Role.ADMIN, ['admin', 'doctor'])
    assert not role_allows('receptionist', ['admin', 'doctor'])
    assert not role_allows('superuser', ['superuser'])
    assert not role_allows(None, ['admin'])
