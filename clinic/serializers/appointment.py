import re

import bleach
from rest_framework import serializers

from clinic.models import Appointment
from clinic.timestamps import get_zone, is_valid_date

TIME_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$')
MAX_DURATION = 480


class AppointmentSerializer(serializers.Serializer):
    """``date`` and ``time`` are wall-clock values in ``timezone`` (display zone by default)."""
    patientId = serializers.CharField(max_length=20)
    doctorId = serializers.CharField(max_length=32)
    date = serializers.CharField()
    time = serializers.CharField()
    duration = serializers.IntegerField(min_value=15, max_value=MAX_DURATION, required=False, default=30)
    reason = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)
    timezone = serializers.CharField(required=False, allow_blank=True)

    def validate_date(self, v):
        if not is_valid_date(v):
            raise serializers.ValidationError('Date must be YYYY-MM-DD')
        return v

    def validate_time(self, v):
        if not TIME_RE.match(v):
            raise serializers.ValidationError('Time must be HH:MM')
        return v

    def validate_timezone(self, v):
        if v:
            get_zone(v)
        return v or None

    def validate_reason(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Reason is required')
        return v

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES)


class AppointmentListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)
    date = serializers.CharField(required=False)
    doctorId = serializers.CharField(required=False)
    patientId = serializers.CharField(required=False)
    timezone = serializers.CharField(required=False, allow_blank=True)

    def validate_date(self, v):
        if not is_valid_date(v):
            raise serializers.ValidationError('Date must be YYYY-MM-DD')
        return v
