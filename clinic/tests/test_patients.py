"""
Patient registry flows exercised through the HTTP API.
"""
import datetime
from unittest import mock

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from clinic.models import Patient, Role, User
from clinic.services.accounts import issue_token
from clinic.services import identifiers
from clinic.services.identifiers import next_identifier


def _client(user) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')
    return client


class PatientAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(email='admin@medicore.test', password='secret123',
                                              name='Admin User', role=Role.ADMIN)
        self.desk = User.objects.create_user(email='desk@medicore.test', password='secret123',
                                             name='Emily Davis', role=Role.RECEPTIONIST)
        self.doctor = User.objects.create_user(email='doc@medicore.test', password='secret123',
                                               name='Dr. Chen', role=Role.DOCTOR, department='Neurology')
        self.payload = {
            'name': 'John Smith',
            'age': 45,
            'gender': 'Male',
            'bloodGroup': 'O+',
            'phone': '+1-555-0101',
            'email': 'john.smith@email.test',
            'address': '123 Main St, New York, NY',
            'emergencyContact': 'Jane Smith (+1-555-0102)',
            'medicalHistory': ['Hypertension'],
        }

    def test_receptionist_registers_patient(self):
        r = _client(self.desk).post('/api/patients', self.payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        data = r.data['data']
        self.assertEqual(data['id'], 'P001')
        self.assertEqual(data['bloodGroup'], 'O+')
        self.assertEqual(data['status'], 'Active')
        self.assertEqual(data['medicalHistory'], ['Hypertension'])
        self.assertIn('registrationDate', data)
        self.assertTrue(data['createdAt'].endswith('Z'))

    def test_doctor_cannot_register_patient(self):
        r = _client(self.doctor).post('/api/patients', self.payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(r.data['errors'][0]['requiredRoles'], ['admin', 'receptionist'])

    def test_duplicate_email_conflicts(self):
        client = _client(self.desk)
        self.assertEqual(client.post('/api/patients', self.payload, format='json').status_code, 201)
        r = client.post('/api/patients', dict(self.payload, name='Other Person'), format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)

    def test_invalid_payload_lists_fields(self):
        r = _client(self.desk).post('/api/patients', dict(self.payload, age=-1, bloodGroup='Z'), format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        fields = {e['field'] for e in r.data['errors']}
        self.assertEqual(fields, {'age', 'bloodGroup'})
        age_error = next(e for e in r.data['errors'] if e['field'] == 'age')
        self.assertEqual(age_error['value'], -1)

    def test_list_search_and_pagination(self):
        for i in range(1, 13):
            Patient.objects.create(
                id=f'P{i:03d}', name=f'Patient {i}', age=30 + i, gender='Female', blood_group='A+',
                phone=f'555-{i:04d}', email=f'p{i}@email.test', address='x', emergency_contact='y',
                registration_date=datetime.date(2024, 1, i),
            )
        client = _client(self.doctor)
        r = client.get('/api/patients', {'page': 2, 'limit': 5, 'sortBy': 'age', 'sortOrder': 'asc'})
        self.assertEqual(r.status_code, 200)
        self.assertEqual([p['id'] for p in r.data['data']], ['P006', 'P007', 'P008', 'P009', 'P010'])
        self.assertEqual(r.data['pagination']['total'], 12)
        self.assertEqual(r.data['pagination']['totalPages'], 3)
        self.assertTrue(r.data['pagination']['hasPrev'])

        r = client.get('/api/patients', {'search': 'Patient 11'})
        self.assertEqual([p['id'] for p in r.data['data']], ['P011'])

    def test_update_archive_restore_delete(self):
        desk = _client(self.desk)
        pid = desk.post('/api/patients', self.payload, format='json').data['data']['id']

        r = desk.put(f'/api/patients/{pid}', {'phone': '555-9999'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['data']['phone'], '555-9999')

        r = desk.patch(f'/api/patients/{pid}/archive')
        self.assertEqual(r.data['data']['status'], 'Archived')

        self.assertEqual(desk.patch(f'/api/patients/{pid}/restore').status_code, 403)
        r = _client(self.admin).patch(f'/api/patients/{pid}/restore')
        self.assertEqual(r.data['data']['status'], 'Active')

        self.assertEqual(desk.delete(f'/api/patients/{pid}').status_code, 403)
        self.assertEqual(_client(self.admin).delete(f'/api/patients/{pid}').status_code, 200)
        r = desk.get(f'/api/patients/{pid}')
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.data['message'], 'Patient not found')

    def test_update_to_taken_email_conflicts(self):
        desk = _client(self.desk)
        desk.post('/api/patients', self.payload, format='json')
        desk.post('/api/patients', dict(self.payload, email='second@email.test'), format='json')
        r = desk.put('/api/patients/P002', {'email': 'john.smith@email.test'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)

    def test_identifiers_follow_highest_suffix(self):
        for pid in ('P001', 'P005'):
            Patient.objects.create(
                id=pid, name=pid, age=1, gender='Other', blood_group='O-', phone='1',
                email=f'{pid}@email.test', address='a', emergency_contact='b',
                registration_date=datetime.date(2024, 1, 1),
            )
        self.assertEqual(next_identifier(Patient, 'P'), 'P006')

    def test_claimed_identifier_is_skipped_not_reported_as_email_clash(self):
        Patient.objects.create(
            id='P001', name='Walk In', age=30, gender='Female', blood_group='A+', phone='1',
            email='walk.in@email.test', address='a', emergency_contact='b',
            registration_date=datetime.date(2024, 1, 1),
        )
        stale = iter(['P001'])
        with mock.patch.object(identifiers, 'next_identifier',
                               side_effect=lambda model, prefix: next(stale, None) or next_identifier(model, prefix)):
            r = _client(self.desk).post('/api/patients', self.payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['data']['id'], 'P002')

    def test_identifier_allocation_gives_up_with_conflict(self):
        Patient.objects.create(
            id='P001', name='Walk In', age=30, gender='Female', blood_group='A+', phone='1',
            email='walk.in@email.test', address='a', emergency_contact='b',
            registration_date=datetime.date(2024, 1, 1),
        )
        with mock.patch.object(identifiers, 'next_identifier', return_value='P001'):
            r = _client(self.desk).post('/api/patients', self.payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertNotIn('email', r.data['message'])
        self.assertEqual(Patient.objects.count(), 1)
