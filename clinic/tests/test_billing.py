import pytest

from clinic.models import Invoice, InvoiceItem

pytestmark = pytest.mark.django_db


@pytest.fixture
def desk(receptionist, make_patient, client_for):
    make_patient('P001')
    return client_for(receptionist)


def _invoice(**extra):
    data = {
        'patientId': 'P001',
        'date': '2024-03-01',
        'dueDate': '2024-03-31',
        'items': [
            {'description': 'Consultation', 'category': 'Consultation', 'quantity': 2, 'price': '50.00'},
            {'description': 'Blood Test', 'quantity': 1, 'price': '30.50'},
        ],
    }
    data.update(extra)
    return data


def test_create_invoice_computes_totals(desk):
    r = desk.post('/api/invoices', _invoice(), format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['id'] == 'INV001'
    assert data['totalAmount'] == 130.5
    assert data['status'] == 'pending'
    assert [i['id'] for i in data['items']] == ['ITEM001', 'ITEM002']
    assert data['items'][0]['total'] == 100.0
    assert data['items'][1]['category'] == 'General'
    assert data['patientName'] == 'John Smith'


def test_invoice_needs_items(desk):
    r = desk.post('/api/invoices', _invoice(items=[]), format='json')
    assert r.status_code == 400
    assert r.data['errors'][0]['field'].startswith('items')
    assert not Invoice.objects.exists()


def test_invoice_for_unknown_patient(desk):
    r = desk.post('/api/invoices', _invoice(patientId='P999'), format='json')
    assert r.status_code == 404
    assert not InvoiceItem.objects.exists()


def test_partial_then_full_payment(desk):
    desk.post('/api/invoices', _invoice(), format='json')
    r = desk.patch('/api/invoices/INV001/payment', {'amount': 100, 'paymentMethod': 'Card'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['paidAmount'] == 100.0
    assert r.data['data']['status'] == 'pending'
    assert r.data['data']['paidAt'] is None

    r = desk.patch('/api/invoices/INV001/payment', {'amount': '30.50'}, format='json')
    assert r.data['data']['status'] == 'paid'
    assert r.data['data']['paymentMethod'] == 'Cash'
    assert r.data['data']['paidAt'].endswith('Z')


def test_payment_must_be_positive(desk):
    desk.post('/api/invoices', _invoice(), format='json')
    r = desk.patch('/api/invoices/INV001/payment', {'amount': 0}, format='json')
    assert r.status_code == 400


def test_status_change_and_listing(desk):
    desk.post('/api/invoices', _invoice(), format='json')
    desk.post('/api/invoices', _invoice(date='2024-04-01', dueDate='2024-04-30'), format='json')
    r = desk.patch('/api/invoices/INV002/status', {'status': 'overdue'}, format='json')
    assert r.data['data']['status'] == 'overdue'

    r = desk.get('/api/invoices', {'status': 'overdue'})
    assert [i['id'] for i in r.data['data']] == ['INV002']
    r = desk.get('/api/invoices')
    assert [i['id'] for i in r.data['data']] == ['INV002', 'INV001']


def test_doctor_has_no_billing_access(doctor, client_for):
    r = client_for(doctor).get('/api/invoices')
    assert r.status_code == 403
    assert r.data['errors'][0]['value'] == 'doctor'


def test_only_admin_deletes_invoice(desk, admin, client_for):
    desk.post('/api/invoices', _invoice(), format='json')
    assert desk.delete('/api/invoices/INV001').status_code == 403
    assert client_for(admin).delete('/api/invoices/INV001').status_code == 200
    assert not InvoiceItem.objects.exists()
