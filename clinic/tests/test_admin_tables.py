import pytest

from clinic.models import Patient

pytestmark = pytest.mark.django_db


@pytest.fixture
def console(admin, client_for):
    return client_for(admin)


def test_unknown_table_is_rejected(console):
    r = console.get('/api/admin/auth_tokens')
    assert r.status_code == 400
    assert r.data['message'] == 'Invalid table name'
    assert r.data['errors'][0]['value'] == 'auth_tokens'


def test_console_is_admin_only(doctor, client_for):
    r = client_for(doctor).get('/api/admin/patients')
    assert r.status_code == 403


def test_list_search_and_page_size(console, make_patient):
    make_patient('P001')
    make_patient('P002', name='Emma Wilson')
    r = console.get('/api/admin/patients', {'search': 'emma'})
    assert [p['id'] for p in r.data['data']] == ['P002']
    assert r.data['pagination']['total'] == 1


def test_users_table_hides_password(console, doctor):
    r = console.get('/api/admin/users')
    assert r.status_code == 200
    assert {u['email'] for u in r.data['data']} == {'admin@medicore.test', 'sarah@medicore.test'}
    for row in r.data['data']:
        assert 'password' not in row


def test_update_uses_wire_names(console, make_patient):
    make_patient('P001')
    r = console.put('/api/admin/patients/P001', {'bloodGroup': 'AB+', 'id': 'P999'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['bloodGroup'] == 'AB+'
    assert r.data['data']['id'] == 'P001'
    assert Patient.objects.get(pk='P001').blood_group == 'AB+'


def test_update_rejects_unknown_and_protected_columns(console, make_patient, doctor):
    make_patient('P001')
    r = console.put('/api/admin/patients/P001', {'shoeSize': 44}, format='json')
    assert r.status_code == 400
    assert r.data['errors'][0]['field'] == 'shoe_size'

    r = console.put(f'/api/admin/users/{doctor.pk}', {'password': 'plain'}, format='json')
    assert r.status_code == 400
    doctor.refresh_from_db()
    assert doctor.check_password('secret123')


def test_read_only_columns_are_ignored(console, make_patient):
    make_patient('P001')
    r = console.put('/api/admin/patients/P001', {'createdAt': '2020-01-01 00:00:00'}, format='json')
    assert r.status_code == 200
    assert not r.data['data']['createdAt'].startswith('2020')


def test_delete_and_missing_record(console, make_patient):
    make_patient('P001')
    assert console.delete('/api/admin/patients/P001').status_code == 200
    assert not Patient.objects.exists()
    r = console.get('/api/admin/patients/P001')
    assert r.status_code == 404
    assert r.data['message'] == 'Record not found'


def test_sort_key_does_not_leak_into_rendering(console, make_patient):
    make_patient('P001')
    r = console.get('/api/admin/patients', {'sortBy': 'Name', 'sortOrder': 'ASC'})
    assert r.status_code == 200
    r = console.get('/api/patients/P001')
    assert r.data['data']['name'] == 'John Smith'
    assert 'Name' not in r.data['data']


def test_update_enforces_choices(console, doctor):
    r = console.put(f'/api/admin/users/{doctor.pk}', {'role': 'superuser'}, format='json')
    assert r.status_code == 400
    assert r.data['errors'][0]['field'] == 'role'
    doctor.refresh_from_db()
    assert doctor.role == 'doctor'


def test_update_rejects_null_for_required_column(console, make_patient):
    make_patient('P001')
    r = console.put('/api/admin/patients/P001', {'name': None}, format='json')
    assert r.status_code == 400
    assert r.data['errors'][0]['field'] == 'name'
