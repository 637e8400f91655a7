"""
Row shaping between storage (``snake_case``) and the wire (``camelCase``).

Renaming goes through the explicit :data:`FIELD_NAMES` table.  Keys that
are not in the table are converted mechanically on every call.  The
tables are read-only, so keys taken from a request can never change how
later rows are rendered.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping

from django.db import models
from django.db.models.fields.files import FieldFile

from .timestamps import to_external_format

FIELD_NAMES: Mapping[str, str] = MappingProxyType({
    'created_at': 'createdAt',
    'updated_at': 'updatedAt',
    'uploaded_at': 'uploadedAt',
    'paid_at': 'paidAt',
    'completed_at': 'completedAt',
    'scheduled_at': 'scheduledAt',
    'patient_id': 'patientId',
    'doctor_id': 'doctorId',
    'appointment_id': 'appointmentId',
    'invoice_id': 'invoiceId',
    'medical_record_id': 'recordId',
    'user_id': 'userId',
    'uploaded_by_id': 'uploadedBy',
    'patient_name': 'patientName',
    'doctor_name': 'doctorName',
    'blood_group': 'bloodGroup',
    'emergency_contact': 'emergencyContact',
    'medical_history': 'medicalHistory',
    'registration_date': 'registrationDate',
    'due_date': 'dueDate',
    'total_amount': 'totalAmount',
    'paid_amount': 'paidAmount',
    'payment_method': 'paymentMethod',
    'test_name': 'testName',
    'normal_range': 'normalRange',
    'lab_results': 'labResults',
    'updated_by': 'updatedBy',
    'email_verified': 'emailVerified',
    'is_active': 'isActive',
    'last_login': 'lastLogin',
    'table_name': 'tableName',
    'record_id': 'recordId',
    'file_name': 'fileName',
    'content_type': 'contentType',
})

# Emitted through ``to_external_format`` under their renamed key.
TIMESTAMP_FIELDS = frozenset({'created_at', 'updated_at', 'uploaded_at', 'paid_at', 'completed_at'})


def _inverse(names: Mapping[str, str]) -> Mapping[str, str]:
    inverse: dict[str, str] = {}
    for storage, external in names.items():
        inverse.setdefault(external, storage)
    # ``record_id`` and ``medical_record_id`` share a wire name; the
    # generic column wins on the way back.
    inverse['recordId'] = 'record_id'
    return MappingProxyType(inverse)


WIRE_NAMES: Mapping[str, str] = _inverse(FIELD_NAMES)

_SNAKE_PART = re.compile(r'_([a-z0-9])')
_CAMEL_PART = re.compile(r'(?<!^)([A-Z])')


def external_name(key: str) -> str:
    name = FIELD_NAMES.get(key)
    if name is None:
        name = _SNAKE_PART.sub(lambda m: m.group(1).upper(), key)
    return name


def storage_name(key: str) -> str:
    name = WIRE_NAMES.get(key)
    if name is None:
        name = _CAMEL_PART.sub(r'_\1', key).lower()
    return name


def rename_fields_and_timestamps(record: Any) -> Any:
    """Rename a storage row (or a list of rows) for the wire.

    Audit timestamps are rendered as ISO-8601 UTC.  Nested rows and lists
    of rows are renamed as well; keys that are absent stay absent.
    """
    if isinstance(record, (list, tuple)):
        return [rename_fields_and_timestamps(item) for item in record]
    if not isinstance(record, dict):
        return record
    out = {}
    for key, value in record.items():
        if key in TIMESTAMP_FIELDS:
            out[external_name(key)] = to_external_format(value)
        elif isinstance(value, (dict, list, tuple)):
            out[external_name(key)] = rename_fields_and_timestamps(value)
        else:
            out[external_name(key)] = value
    return out


def to_storage_keys(record: dict) -> dict:
    """Inverse renaming of top-level keys, used for writes."""
    return {storage_name(key): value for key, value in record.items()}


def _plain(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, FieldFile):
        return value.name or None
    return value


def flatten(instance: models.Model, exclude: tuple[str, ...] = ()) -> dict:
    """A model instance as a flat row keyed by column (``patient_id`` etc.)."""
    row = {}
    for field in instance._meta.concrete_fields:
        if field.name in exclude or field.attname in exclude:
            continue
        row[field.attname] = _plain(getattr(instance, field.attname))
    return row
