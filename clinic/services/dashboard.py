from django.db.models import Sum

from clinic.models import Appointment, Invoice, Patient
from clinic.services.appointments import appointment_row
from clinic.services.patients import patient_row
from clinic.timestamps import current_display_date, display_day_bounds

# Growth figures are fixed until historical snapshots exist.
PATIENT_GROWTH = 12.5
APPOINTMENT_GROWTH = 8.3
REVENUE_GROWTH = 15.2


def dashboard_stats(zone=None) -> dict:
    start, end = display_day_bounds(zone=zone)
    month_start = current_display_date(zone).replace(day=1)
    revenue = Invoice.objects.filter(date__gte=month_start, status=Invoice.STATUS_PAID).aggregate(
        total=Sum('paid_amount')
    )['total']
    return {
        'totalPatients': Patient.objects.count(),
        'activePatients': Patient.objects.filter(status=Patient.STATUS_ACTIVE).count(),
        'todayAppointments': Appointment.objects.filter(scheduled_at__gte=start, scheduled_at__lt=end).count(),
        'pendingInvoices': Invoice.objects.filter(
            status__in=[Invoice.STATUS_PENDING, Invoice.STATUS_OVERDUE]
        ).count(),
        'monthlyRevenue': float(revenue or 0),
        'patientGrowth': PATIENT_GROWTH,
        'appointmentGrowth': APPOINTMENT_GROWTH,
        'revenueGrowth': REVENUE_GROWTH,
    }


def recent_activity(limit: int = 10, zone=None) -> dict:
    appointments = Appointment.objects.select_related('patient', 'doctor').order_by('-created_at')[:limit]
    patients = Patient.objects.filter(status=Patient.STATUS_ACTIVE).order_by('-created_at')[:limit]
    return {
        'recentAppointments': [appointment_row(a, zone) for a in appointments],
        'recentPatients': [patient_row(p) for p in patients],
    }
