"""
Aggregates behind ``/reports``: overview counters, a six month series and
the doctor distribution per department.
"""
from __future__ import annotations

from datetime import date

from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncMonth

from clinic.models import ActivityLog, Appointment, Invoice, Patient, Role, User
from clinic.timestamps import get_zone, present, to_external_format

MONTHS_SHOWN = 6
# Placeholder until expenses are tracked.
EXPENSE_RATIO = 0.65
SYSTEM_UPTIME = 99.9

DEPARTMENT_COLORS = {
    'Cardiology': '#3b82f6',
    'Neurology': '#10b981',
    'Orthopedics': '#f59e0b',
    'Pediatrics': '#ef4444',
    'Emergency': '#8b5cf6',
    'General Medicine': '#6366f1',
    'Surgery': '#ec4899',
    'Radiology': '#14b8a6',
    'Oncology': '#f97316',
}
DEFAULT_COLOR = '#9ca3af'

LOG_STATUS = {
    'INSERT': 'success', 'UPDATE': 'success', 'SELECT': 'success', 'LOGIN': 'success',
    'DELETE': 'warning', 'FAILED_LOGIN': 'warning',
    'ERROR': 'error', 'EXCEPTION': 'error',
}


def department_color(name) -> str:
    return DEFAULT_COLOR if not name else DEPARTMENT_COLORS.get(name, DEFAULT_COLOR)


def log_status(action: str) -> str:
    return LOG_STATUS.get((action or '').upper(), 'info')


def _month_key(value) -> str:
    if value is None:
        return ''
    return value.strftime('%Y-%m')


def _by_month(qs, field, **aggregates) -> dict:
    rows = qs.annotate(month=TruncMonth(field)).values('month').annotate(**aggregates)
    return {_month_key(r['month']): r for r in rows if r['month'] is not None}


def monthly_series(months: int = MONTHS_SHOWN) -> list[dict]:
    patients = _by_month(Patient.objects.all(), 'registration_date', patients=Count('id'))
    appointments = _by_month(Appointment.objects.all(), 'scheduled_at', appointments=Count('id'))
    revenue = _by_month(Invoice.objects.all(), 'date', collected=Sum('paid_amount'))

    keys = sorted(set(patients) | set(appointments) | set(revenue))[-months:]
    series = []
    for key in keys:
        collected = float(revenue.get(key, {}).get('collected') or 0)
        series.append({
            'month': date(int(key[:4]), int(key[5:7]), 1).strftime('%b'),
            'patients': patients.get(key, {}).get('patients', 0),
            'appointments': appointments.get(key, {}).get('appointments', 0),
            'revenue': collected,
            'expenses': round(collected * EXPENSE_RATIO),
        })
    return series


def department_distribution() -> list[dict]:
    doctors = User.objects.filter(role=Role.DOCTOR, department__isnull=False)
    total = doctors.count()
    rows = doctors.values('department').annotate(count=Count('id')).order_by('-count', 'department')
    return [
        {
            'name': r['department'] or 'General',
            'value': round(r['count'] * 100.0 / total, 2) if total else 0,
            'count': r['count'],
            'color': department_color(r['department']),
        }
        for r in rows
    ]


def overview() -> dict:
    invoices = Invoice.objects.aggregate(total=Sum('total_amount'), paid=Sum('paid_amount'))
    return {
        'totalPatients': Patient.objects.count(),
        'activePatients': Patient.objects.filter(status=Patient.STATUS_ACTIVE).count(),
        'totalDoctors': User.objects.filter(Q(role=Role.DOCTOR) & Q(is_active=True)).count(),
        'totalRevenue': float(invoices['total'] or 0),
        'totalPaid': float(invoices['paid'] or 0),
        'systemUptime': SYSTEM_UPTIME,
    }


def report_stats() -> dict:
    series = monthly_series()
    return {
        'overview': overview(),
        'monthlyData': series,
        'departmentData': department_distribution(),
        'patientTrend': [{'month': m['month'], 'patients': m['patients'], 'appointments': m['appointments']}
                         for m in series],
        'revenueTrend': [{'month': m['month'], 'revenue': m['revenue'], 'expenses': m['expenses']}
                         for m in series],
    }


def activity_logs(limit: int = 20, zone=None) -> list[dict]:
    tz = get_zone(zone)
    entries = ActivityLog.objects.order_by('-created_at', '-id')[:limit]
    return [
        {
            'id': log.pk,
            'time': present(log.created_at, tz)[11:16],
            'event': log.action,
            'user': log.user_id,
            'table': log.table_name,
            'recordId': log.record_id,
            'status': log_status(log.action),
            'timestamp': to_external_format(log.created_at),
        }
        for log in entries
    ]
