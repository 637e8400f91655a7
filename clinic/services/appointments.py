"""
Booking rules: a doctor cannot be in two non-cancelled appointments at
once, and the department of an appointment is taken from the doctor.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from django.db import transaction
from django.utils import timezone

from clinic.exceptions import ResourceNotFound, SchedulingConflict
from clinic.fields import flatten, rename_fields_and_timestamps
from clinic.models import Appointment, Patient, Role, User
from clinic.serializers.appointment import MAX_DURATION
from clinic.services.identifiers import create_with_identifier
from clinic.timestamps import combine_date_and_time, reference_datetime, split_display

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENT = 'General'


def appointment_row(appt: Appointment, zone=None) -> dict:
    row = flatten(appt, exclude=('scheduled_at',))
    row['patient_name'] = appt.patient.name
    row['doctor_name'] = appt.doctor.name
    row['date'], row['time'] = split_display(appt.scheduled_at, zone)
    return rename_fields_and_timestamps(row)


def find_conflict(doctor_id: str, start: datetime, duration: int,
                  exclude_id: Optional[str] = None) -> Optional[Appointment]:
    """The first non-cancelled appointment of ``doctor_id`` overlapping the slot."""
    end = start + timedelta(minutes=duration)
    candidates = (
        Appointment.objects.filter(
            doctor_id=doctor_id,
            scheduled_at__lt=end,
            scheduled_at__gt=start - timedelta(minutes=MAX_DURATION),
        )
        .exclude(status=Appointment.STATUS_CANCELLED)
        .order_by('scheduled_at')
    )
    if exclude_id:
        candidates = candidates.exclude(pk=exclude_id)
    for other in candidates:
        if other.ends_at > start:
            return other
    return None


def _doctor(doctor_id: str) -> User:
    doctor = User.objects.filter(pk=doctor_id, role=Role.DOCTOR).first()
    if doctor is None:
        raise ResourceNotFound('Doctor not found')
    return doctor


def _lock_doctor(doctor: User) -> User:
    """Hold the doctor's row until commit so overlapping bookings are checked one at a time."""
    return User.objects.select_for_update().get(pk=doctor.pk)


def _patient(patient_id: str) -> Patient:
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        raise ResourceNotFound('Patient not found')
    return patient


def _slot(data: dict, zone) -> datetime:
    return reference_datetime(combine_date_and_time(data['date'], data['time'], zone))


def _raise_conflict(other: Appointment, zone):
    day, at = split_display(other.scheduled_at, zone)
    raise SchedulingConflict(
        'Time slot conflict detected',
        errors=[{'field': 'time', 'message': f'Doctor already has appointment {other.id} at {day} {at}',
                 'value': other.id}],
    )


def schedule(data: dict) -> Appointment:
    """Book a new appointment from validated :class:`AppointmentSerializer` data."""
    zone = data.get('timezone')
    patient = _patient(data['patientId'])
    doctor = _doctor(data['doctorId'])
    start = _slot(data, zone)
    duration = data.get('duration') or 30

    with transaction.atomic():
        _lock_doctor(doctor)
        other = find_conflict(doctor.pk, start, duration)
        if other is not None:
            _raise_conflict(other, zone)
        appt = create_with_identifier(
            Appointment, 'A',
            patient=patient,
            doctor=doctor,
            department=doctor.department or DEFAULT_DEPARTMENT,
            scheduled_at=start,
            duration=duration,
            status=data.get('status') or Appointment.STATUS_SCHEDULED,
            reason=data['reason'],
            notes=data.get('notes') or '',
        )
    logger.info('Booked %s for %s with %s at %s', appt.id, patient.pk, doctor.pk, start)
    return appt


def reschedule(appt: Appointment, data: dict) -> Appointment:
    zone = data.get('timezone')
    doctor = _doctor(data['doctorId'])
    patient = _patient(data['patientId'])
    start = _slot(data, zone)
    duration = data.get('duration') or appt.duration

    with transaction.atomic():
        _lock_doctor(doctor)
        other = find_conflict(doctor.pk, start, duration, exclude_id=appt.pk)
        if other is not None:
            _raise_conflict(other, zone)
        appt.patient = patient
        appt.doctor = doctor
        appt.department = doctor.department or DEFAULT_DEPARTMENT
        appt.scheduled_at = start
        appt.duration = duration
        appt.reason = data['reason']
        appt.notes = data.get('notes') or ''
        if data.get('status'):
            _apply_status(appt, data['status'])
        appt.save()
    return appt


def _apply_status(appt: Appointment, status: str):
    appt.status = status
    if status == Appointment.STATUS_COMPLETED and appt.completed_at is None:
        appt.completed_at = timezone.now()


def set_status(appt: Appointment, status: str) -> Appointment:
    _apply_status(appt, status)
    appt.save(update_fields=['status', 'completed_at', 'updated_at'])
    return appt
