"""
Generic table management for the admin console.

Only the tables in :data:`TABLES` are reachable.  Writes go through the
model fields so values are type-checked, and timestamps given without an
offset are taken as UTC.
"""
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models, transaction
from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes

from clinic.exceptions import ResourceNotFound, ValidationFailed
from clinic.fields import flatten, rename_fields_and_timestamps, storage_name, to_storage_keys
from clinic.models import Appointment, Invoice, InvoiceItem, MedicalRecord, Patient, User
from clinic.permissions import IsAdmin
from clinic.responses import page_params, paginated_response, success_response
from clinic.services.accounts import PRIVATE_USER_FIELDS, user_payload
from clinic.services.audit import log_action
from clinic.timestamps import reference_datetime

TABLES: dict[str, type[models.Model]] = {
    'users': User,
    'patients': Patient,
    'appointments': Appointment,
    'medical_records': MedicalRecord,
    'invoices': Invoice,
    'invoice_items': InvoiceItem,
}

SEARCH_COLUMNS = {
    'users': ['name', 'email', 'role'],
    'patients': ['name', 'email', 'phone', 'id'],
    'appointments': ['patient_id', 'doctor_id', 'reason'],
    'medical_records': ['patient_id', 'doctor_id', 'diagnosis'],
    'invoices': ['patient_id', 'id', 'status'],
    'invoice_items': ['description', 'category'],
}

READ_ONLY = {'id', 'created_at', 'updated_at'}
ADMIN_PAGE_SIZE = 50


def _model(table: str) -> type[models.Model]:
    model = TABLES.get(table)
    if model is None:
        raise ValidationFailed('Invalid table name', errors=[
            {'field': 'table', 'message': f"Allowed: {', '.join(TABLES)}", 'value': table},
        ])
    return model


def _row(instance) -> dict:
    if isinstance(instance, User):
        return user_payload(instance)
    return rename_fields_and_timestamps(flatten(instance))


def _get(model, record_id):
    instance = model.objects.filter(pk=record_id).first()
    if instance is None:
        raise ResourceNotFound('Record not found')
    return instance


def _coerce(field: models.Field, value, instance):
    """Convert and validate ``value`` for ``field``, choices and nullability included."""
    if value is None or not isinstance(field, (models.DateTimeField, models.ForeignKey)):
        return field.clean(value, instance)
    if isinstance(field, models.DateTimeField):
        return reference_datetime(value)
    return field.target_field.to_python(value)


def _apply_updates(instance, updates: dict):
    columns = {f.attname: f for f in instance._meta.concrete_fields}
    hidden = set(PRIVATE_USER_FIELDS) if isinstance(instance, User) else set()
    errors = []
    for key, value in to_storage_keys(updates).items():
        if key in READ_ONLY:
            continue
        field = columns.get(key)
        if field is None or key in hidden:
            errors.append({'field': key, 'message': 'Unknown or protected column', 'value': value})
            continue
        try:
            setattr(instance, key, _coerce(field, value, instance))
        except DjangoValidationError as exc:
            errors.append({'field': key, 'message': '; '.join(exc.messages), 'value': value})
    if errors:
        raise ValidationFailed(errors=errors)


@api_view(['GET'])
@permission_classes([IsAdmin])
def table_records(request, table):
    model = _model(table)
    page, limit, offset = page_params(request)
    if 'limit' not in request.query_params:
        limit, offset = ADMIN_PAGE_SIZE, (page - 1) * ADMIN_PAGE_SIZE

    qs = model.objects.all()
    search = (request.query_params.get('search') or '').strip()
    if search:
        cond = Q()
        for column in SEARCH_COLUMNS[table]:
            cond |= Q(**{f'{column}__icontains': search})
        qs = qs.filter(cond)

    columns = {f.attname for f in model._meta.concrete_fields}
    sort_by = storage_name(request.query_params.get('sortBy') or 'created_at')
    if sort_by not in columns:
        sort_by = 'created_at' if 'created_at' in columns else 'id'
    if (request.query_params.get('sortOrder') or 'DESC').upper() == 'DESC':
        sort_by = f'-{sort_by}'

    total = qs.count()
    rows = [_row(r) for r in qs.order_by(sort_by, 'pk')[offset:offset + limit]]
    return paginated_response(rows, page, limit, total)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdmin])
def table_record_detail(request, table, record_id):
    model = _model(table)
    instance = _get(model, record_id)

    if request.method == 'GET':
        return success_response(_row(instance), 'Record retrieved successfully')

    if request.method == 'DELETE':
        instance.delete()
        log_action(user=request.user, action='DELETE', table_name=table, record_id=record_id)
        return success_response(None, 'Record deleted successfully')

    if not isinstance(request.data, dict):
        raise ValidationFailed(errors=[{'field': None, 'message': 'Expected an object', 'value': None}])
    _apply_updates(instance, request.data)
    with transaction.atomic():
        instance.save()
    log_action(user=request.user, action='UPDATE', table_name=table, record_id=record_id,
               detail={'fields': sorted(request.data)})
    return success_response(_row(_get(model, record_id)), 'Record updated successfully')
