import datetime
from decimal import Decimal

import pytest
from django.utils import timezone

from clinic.models import Appointment, Invoice
from clinic.services.audit import log_action
from clinic.services.reports import department_color, log_status
from clinic.timestamps import current_display_date

pytestmark = pytest.mark.django_db


def test_log_status_classification():
    assert log_status('INSERT') == 'success'
    assert log_status('login') == 'success'
    assert log_status('DELETE') == 'warning'
    assert log_status('FAILED_LOGIN') == 'warning'
    assert log_status('ERROR') == 'error'
    assert log_status('LOGOUT') == 'info'
    assert log_status(None) == 'info'


def test_department_color_fallback():
    assert department_color('Cardiology') == '#3b82f6'
    assert department_color('Dermatology') == '#9ca3af'
    assert department_color(None) == '#9ca3af'


def test_dashboard_stats(receptionist, doctor, make_patient, client_for):
    patient = make_patient('P001')
    make_patient('P002', status='Archived')
    Appointment.objects.create(id='A001', patient=patient, doctor=doctor, scheduled_at=timezone.now(),
                               duration=30, reason='Checkup')
    Invoice.objects.create(id='INV001', patient=patient, date=current_display_date(),
                           due_date=current_display_date(), total_amount=Decimal('200'),
                           paid_amount=Decimal('200'), status='paid')
    Invoice.objects.create(id='INV002', patient=patient, date=current_display_date(),
                           due_date=current_display_date(), total_amount=Decimal('50'))

    r = client_for(receptionist).get('/api/dashboard/stats')
    assert r.status_code == 200
    data = r.data['data']
    assert data['totalPatients'] == 2
    assert data['activePatients'] == 1
    assert data['todayAppointments'] == 1
    assert data['pendingInvoices'] == 1
    assert data['monthlyRevenue'] == 200.0
    assert data['patientGrowth'] == 12.5


def test_recent_activity_lists_active_patients(doctor, make_patient, client_for):
    make_patient('P001')
    make_patient('P002', status='Archived')
    r = client_for(doctor).get('/api/dashboard/recent', {'limit': 5})
    assert [p['id'] for p in r.data['data']['recentPatients']] == ['P001']
    assert r.data['data']['recentAppointments'] == []


def test_report_stats_for_doctor(doctor, make_user, make_patient, client_for):
    make_user(department='Neurology')
    patient = make_patient('P001')
    Invoice.objects.create(id='INV001', patient=patient, date=datetime.date(2024, 1, 15),
                           due_date=datetime.date(2024, 2, 15), total_amount=Decimal('100'),
                           paid_amount=Decimal('100'), status='paid')

    r = client_for(doctor).get('/api/reports/stats')
    assert r.status_code == 200
    data = r.data['data']
    assert data['overview']['totalPatients'] == 1
    assert data['overview']['totalRevenue'] == 100.0
    assert data['overview']['systemUptime'] == 99.9
    jan = [m for m in data['monthlyData'] if m['month'] == 'Jan']
    assert jan and jan[0]['revenue'] == 100.0 and jan[0]['expenses'] == 65
    assert {d['name'] for d in data['departmentData']} == {'Cardiology', 'Neurology'}
    assert sum(d['count'] for d in data['departmentData']) == 2


def test_receptionist_cannot_see_reports(receptionist, client_for):
    assert client_for(receptionist).get('/api/reports/stats').status_code == 403


def test_system_logs_are_admin_only(admin, doctor, client_for):
    log_action(user=admin, action='INSERT', table_name='patients', record_id='P001')
    log_action(user=admin, action='FAILED_LOGIN', detail={'email': 'x@y.z'})

    assert client_for(doctor).get('/api/reports/logs').status_code == 403
    r = client_for(admin).get('/api/reports/logs', {'limit': 5})
    assert r.status_code == 200
    events = [(e['event'], e['status']) for e in r.data['data']]
    assert events == [('FAILED_LOGIN', 'warning'), ('INSERT', 'success')]
    assert r.data['data'][1]['recordId'] == 'P001'
    assert r.data['data'][0]['timestamp'].endswith('Z')
