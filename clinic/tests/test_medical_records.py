import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from clinic.models import MedicalRecord

pytestmark = pytest.mark.django_db


@pytest.fixture
def doc_client(doctor, make_patient, client_for):
    make_patient('P001')
    return client_for(doctor)


def _record(**extra):
    data = {
        'patientId': 'P001',
        'date': '2024-03-01',
        'diagnosis': 'Hypertension - Stage 1',
        'symptoms': ['Headache'],
        'prescriptions': [
            {'medication': 'Lisinopril', 'dosage': '10mg', 'frequency': 'Once daily', 'duration': '30 days'},
            {'medication': 'Aspirin', 'dosage': '', 'frequency': 'Once daily', 'duration': '7 days'},
        ],
        'labResults': [
            {'testName': 'Blood Pressure', 'value': '140/90', 'unit': 'mmHg', 'normalRange': '120/80',
             'status': 'High'},
        ],
    }
    data.update(extra)
    return data


def test_create_skips_incomplete_children(doc_client, doctor):
    r = doc_client.post('/api/medical-records', _record(), format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['id'] == 'MR001'
    assert data['doctorId'] == doctor.pk
    assert data['version'] == 1
    assert [p['medication'] for p in data['prescriptions']] == ['Lisinopril']
    assert data['prescriptions'][0]['id'] == 'RX001'
    assert data['labResults'][0]['testName'] == 'Blood Pressure'
    assert data['attachments'] == []


def test_update_requires_updated_by_and_bumps_version(doc_client):
    doc_client.post('/api/medical-records', _record(), format='json')
    r = doc_client.put('/api/medical-records/MR001', {'diagnosis': 'Hypertension - Stage 2'}, format='json')
    assert r.status_code == 400
    assert r.data['errors'][0]['field'] == 'updatedBy'

    r = doc_client.put('/api/medical-records/MR001',
                       {'diagnosis': 'Hypertension - Stage 2', 'updatedBy': 'Dr. Sarah Johnson'}, format='json')
    assert r.status_code == 200
    data = r.data['data']
    assert data['version'] == 2
    assert data['diagnosis'] == 'Hypertension - Stage 2'
    assert data['symptoms'] == ['Headache']
    assert len(data['prescriptions']) == 1


def test_receptionist_cannot_read_records(receptionist, client_for):
    r = client_for(receptionist).get('/api/medical-records')
    assert r.status_code == 403


def test_list_filters_by_patient(doc_client, make_patient):
    make_patient('P002', name='Emma Wilson')
    doc_client.post('/api/medical-records', _record(), format='json')
    doc_client.post('/api/medical-records', _record(patientId='P002'), format='json')
    r = doc_client.get('/api/medical-records', {'patientId': 'P002'})
    assert [m['patientId'] for m in r.data['data']] == ['P002']
    assert r.data['data'][0]['patientName'] == 'Emma Wilson'


def test_admin_must_name_the_doctor(admin, make_patient, client_for):
    make_patient('P001')
    r = client_for(admin).post('/api/medical-records', _record(), format='json')
    assert r.status_code == 400
    assert r.data['errors'][0]['field'] == 'doctorId'


def test_attachment_upload(doc_client, settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    doc_client.post('/api/medical-records', _record(), format='json')
    upload = SimpleUploadedFile('scan.pdf', b'%PDF-1.4 test', content_type='application/pdf')
    r = doc_client.post('/api/medical-records/MR001/attachments', {'file': upload}, format='multipart')
    assert r.status_code == 201
    assert r.data['data']['fileName'] == 'scan.pdf'
    assert r.data['data']['contentType'] == 'application/pdf'
    assert MedicalRecord.objects.get(pk='MR001').attachments.count() == 1


def test_attachment_rejects_type_and_size(doc_client, settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    settings.MAX_FILE_SIZE = 10
    doc_client.post('/api/medical-records', _record(), format='json')
    text = SimpleUploadedFile('notes.txt', b'hi', content_type='text/plain')
    r = doc_client.post('/api/medical-records/MR001/attachments', {'file': text}, format='multipart')
    assert r.status_code == 400
    assert r.data['message'] == 'File type not allowed'

    big = SimpleUploadedFile('scan.pdf', b'x' * 11, content_type='application/pdf')
    r = doc_client.post('/api/medical-records/MR001/attachments', {'file': big}, format='multipart')
    assert r.status_code == 400
    assert r.data['message'] == 'File too large'
