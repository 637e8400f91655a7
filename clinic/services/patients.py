from django.db import IntegrityError

from clinic.exceptions import DuplicateEntry
from clinic.fields import flatten, rename_fields_and_timestamps, to_storage_keys
from clinic.models import Patient
from clinic.services.identifiers import create_with_identifier
from clinic.timestamps import current_display_date


def patient_row(patient: Patient) -> dict:
    return rename_fields_and_timestamps(flatten(patient))


def _ensure_email_free(email: str, exclude_id=None):
    qs = Patient.objects.filter(email__iexact=email)
    if exclude_id:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise DuplicateEntry('Patient with this email already exists')


def create_patient(data: dict) -> Patient:
    """``data`` is validated :class:`PatientSerializer` output (wire names)."""
    fields = to_storage_keys(data)
    fields.setdefault('medical_history', [])
    fields.setdefault('status', Patient.STATUS_ACTIVE)
    _ensure_email_free(fields['email'])
    try:
        return create_with_identifier(Patient, 'P', registration_date=current_display_date(), **fields)
    except IntegrityError:
        # email is the only unique column besides the id
        raise DuplicateEntry('Patient with this email already exists')


def update_patient(patient: Patient, data: dict) -> Patient:
    fields = to_storage_keys(data)
    if 'email' in fields:
        _ensure_email_free(fields['email'], exclude_id=patient.pk)
    for name, value in fields.items():
        setattr(patient, name, value)
    patient.save()
    return patient


def set_patient_status(patient: Patient, status: str) -> Patient:
    patient.status = status
    patient.save(update_fields=['status', 'updated_at'])
    return patient
