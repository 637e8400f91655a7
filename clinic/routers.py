"""
URL mappings for the MediCore API.

Mounted under ``settings.API_BASE_URL``.  Paths carry no trailing slash,
matching what the front-end requests.
"""
from django.urls import path

from .auth_views import login_view, logout_view, me_view, register_view
from .views import admin_tables, appointments, billing, dashboard, health, medical_records, patients, reports

urlpatterns = [
    path('health', health.health, name='health'),

    path('auth/login', login_view, name='auth-login'),
    path('auth/register', register_view, name='auth-register'),
    path('auth/me', me_view, name='auth-me'),
    path('auth/logout', logout_view, name='auth-logout'),

    path('patients', patients.patients, name='patients'),
    path('patients/<str:patient_id>', patients.patient_detail, name='patient-detail'),
    path('patients/<str:patient_id>/archive', patients.archive_patient, name='patient-archive'),
    path('patients/<str:patient_id>/restore', patients.restore_patient, name='patient-restore'),

    path('appointments', appointments.appointments, name='appointments'),
    path('appointments/today', appointments.today_appointments, name='appointments-today'),
    path('appointments/<str:appointment_id>', appointments.appointment_detail, name='appointment-detail'),
    path('appointments/<str:appointment_id>/status', appointments.appointment_status, name='appointment-status'),

    path('invoices', billing.invoices, name='invoices'),
    path('invoices/<str:invoice_id>', billing.invoice_detail, name='invoice-detail'),
    path('invoices/<str:invoice_id>/payment', billing.invoice_payment, name='invoice-payment'),
    path('invoices/<str:invoice_id>/status', billing.invoice_status, name='invoice-status'),

    path('medical-records', medical_records.medical_records, name='medical-records'),
    path('medical-records/<str:record_id>', medical_records.medical_record_detail, name='medical-record-detail'),
    path('medical-records/<str:record_id>/attachments', medical_records.record_attachments,
         name='medical-record-attachments'),

    path('dashboard/stats', dashboard.stats, name='dashboard-stats'),
    path('dashboard/recent', dashboard.recent, name='dashboard-recent'),

    path('reports/stats', reports.reports_stats, name='reports-stats'),
    path('reports/logs', reports.system_logs, name='reports-logs'),

    path('admin/<str:table>', admin_tables.table_records, name='admin-table'),
    path('admin/<str:table>/<str:record_id>', admin_tables.table_record_detail, name='admin-table-record'),
]
