"""
Appointment endpoints.

``date`` and ``time`` travel as wall-clock values in the display zone (or
in the zone named by the ``timezone`` parameter); storage is always UTC.
"""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from clinic.exceptions import ResourceNotFound
from clinic.models import Appointment, Role
from clinic.permissions import allow_roles
from clinic.responses import page_params, paginated_response, success_response
from clinic.serializers.appointment import (
    AppointmentListQuerySerializer,
    AppointmentSerializer,
    AppointmentStatusSerializer,
)
from clinic.services.appointments import appointment_row, reschedule, schedule, set_status
from clinic.services.audit import log_action
from clinic.timestamps import display_day_bounds, get_zone


def _get_appointment(appointment_id) -> Appointment:
    appt = Appointment.objects.select_related('patient', 'doctor').filter(pk=appointment_id).first()
    if appt is None:
        raise ResourceNotFound('Appointment not found')
    return appt


@api_view(['GET', 'POST'])
def appointments(request):
    if request.method == 'POST':
        return _create(request)

    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    zone = get_zone(vd.get('timezone') or None)
    page, limit, offset = page_params(request)

    qs = Appointment.objects.select_related('patient', 'doctor')
    search = (vd.get('search') or '').strip()
    if search:
        qs = qs.filter(Q(patient__name__icontains=search) | Q(doctor__name__icontains=search)
                       | Q(reason__icontains=search) | Q(id__icontains=search))
    if vd.get('status'):
        qs = qs.filter(status=vd['status'])
    if vd.get('date'):
        start, end = display_day_bounds(vd['date'], zone)
        qs = qs.filter(scheduled_at__gte=start, scheduled_at__lt=end)
    if vd.get('doctorId'):
        qs = qs.filter(doctor_id=vd['doctorId'])
    if vd.get('patientId'):
        qs = qs.filter(patient_id=vd['patientId'])

    total = qs.count()
    rows = [appointment_row(a, zone) for a in qs.order_by('-scheduled_at', 'id')[offset:offset + limit]]
    return paginated_response(rows, page, limit, total)


def _create(request):
    s = AppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = schedule(s.validated_data)
    log_action(user=request.user, action='INSERT', table_name='appointments', record_id=appt.pk)
    return success_response(
        appointment_row(appt, s.validated_data.get('timezone')),
        'Appointment created successfully',
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
def today_appointments(request):
    zone = get_zone(request.query_params.get('timezone') or None)
    start, end = display_day_bounds(zone=zone)
    qs = (Appointment.objects.select_related('patient', 'doctor')
          .filter(scheduled_at__gte=start, scheduled_at__lt=end)
          .order_by('scheduled_at', 'id'))
    return success_response([appointment_row(a, zone) for a in qs], "Today's appointments retrieved successfully")


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([allow_roles(Role.ADMIN, methods=('DELETE',))])
def appointment_detail(request, appointment_id):
    appt = _get_appointment(appointment_id)

    if request.method == 'GET':
        zone = get_zone(request.query_params.get('timezone') or None)
        return success_response(appointment_row(appt, zone), 'Appointment retrieved successfully')

    if request.method == 'DELETE':
        appt.delete()
        log_action(user=request.user, action='DELETE', table_name='appointments', record_id=appointment_id)
        return success_response(None, 'Appointment deleted successfully')

    s = AppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = reschedule(appt, s.validated_data)
    log_action(user=request.user, action='UPDATE', table_name='appointments', record_id=appt.pk)
    return success_response(appointment_row(appt, s.validated_data.get('timezone')),
                            'Appointment updated successfully')


@api_view(['PATCH'])
def appointment_status(request, appointment_id):
    s = AppointmentStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = set_status(_get_appointment(appointment_id), s.validated_data['status'])
    log_action(user=request.user, action='UPDATE', table_name='appointments', record_id=appt.pk,
               detail={'status': appt.status})
    return success_response(appointment_row(appt), 'Appointment status updated successfully')
