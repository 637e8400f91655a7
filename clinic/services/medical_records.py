"""
Medical records with their prescriptions, lab results and attachments.

A record and its children are always written together in one
transaction; every update bumps ``version``.
"""
from __future__ import annotations

import logging

import bleach
from django.conf import settings
from django.db import transaction
from django.db.models import F

from clinic.exceptions import ResourceNotFound, ValidationFailed
from clinic.fields import flatten, rename_fields_and_timestamps
from clinic.models import Attachment, LabResult, MedicalRecord, Patient, Prescription, Role, User
from clinic.services.identifiers import create_with_identifier

logger = logging.getLogger(__name__)


def attachment_row(att: Attachment) -> dict:
    row = flatten(att, exclude=('medical_record',))
    row['url'] = att.file.url if att.file else None
    return row


def record_row(record: MedicalRecord) -> dict:
    row = flatten(record)
    row['patient_name'] = record.patient.name
    row['doctor_name'] = record.doctor.name
    row['prescriptions'] = [flatten(p, exclude=('medical_record',)) for p in record.prescriptions.order_by('id')]
    row['lab_results'] = [flatten(r, exclude=('medical_record',)) for r in record.lab_results.order_by('id')]
    row['attachments'] = [attachment_row(a) for a in record.attachments.order_by('id')]
    return rename_fields_and_timestamps(row)


def _author(data: dict, user: User) -> User:
    doctor_id = data.get('doctorId') or (user.pk if user.role == Role.DOCTOR else None)
    if not doctor_id:
        raise ValidationFailed(errors=[{'field': 'doctorId', 'message': 'Doctor is required', 'value': None}])
    doctor = User.objects.filter(pk=doctor_id, role=Role.DOCTOR).first()
    if doctor is None:
        raise ResourceNotFound('Doctor not found')
    return doctor


def _write_children(record: MedicalRecord, data: dict):
    if 'prescriptions' in data and data['prescriptions'] is not None:
        record.prescriptions.all().delete()
        for rx in data['prescriptions']:
            create_with_identifier(
                Prescription, 'RX',
                medical_record=record,
                medication=rx['medication'],
                dosage=rx['dosage'],
                frequency=rx['frequency'],
                duration=rx['duration'],
                instructions=rx.get('instructions') or '',
            )
    if 'labResults' in data and data['labResults'] is not None:
        record.lab_results.all().delete()
        for lab in data['labResults']:
            create_with_identifier(
                LabResult, 'LAB',
                medical_record=record,
                test_name=lab['testName'],
                value=str(lab['value']),
                unit=lab['unit'],
                normal_range=lab['normalRange'],
                status=lab.get('status') or 'Normal',
            )


def create_record(data: dict, user: User) -> MedicalRecord:
    patient = Patient.objects.filter(pk=data['patientId']).first()
    if patient is None:
        raise ResourceNotFound('Patient not found')
    doctor = _author(data, user)
    with transaction.atomic():
        record = create_with_identifier(
            MedicalRecord, 'MR',
            patient=patient,
            doctor=doctor,
            date=data['date'],
            diagnosis=data['diagnosis'],
            symptoms=data.get('symptoms') or [],
            notes=data.get('notes') or '',
            updated_by=user.name or user.email,
        )
        _write_children(record, data)
    return record


def update_record(record: MedicalRecord, data: dict) -> MedicalRecord:
    with transaction.atomic():
        if data.get('patientId'):
            patient = Patient.objects.filter(pk=data['patientId']).first()
            if patient is None:
                raise ResourceNotFound('Patient not found')
            record.patient = patient
        if data.get('doctorId'):
            doctor = User.objects.filter(pk=data['doctorId'], role=Role.DOCTOR).first()
            if doctor is None:
                raise ResourceNotFound('Doctor not found')
            record.doctor = doctor
        for wire, column in (('date', 'date'), ('diagnosis', 'diagnosis'), ('symptoms', 'symptoms'), ('notes', 'notes')):
            if wire in data:
                setattr(record, column, data[wire])
        record.updated_by = data['updatedBy']
        record.version = F('version') + 1
        record.save()
        _write_children(record, data)
    record.refresh_from_db()
    return record


def add_attachment(record: MedicalRecord, upload, user: User) -> Attachment:
    """Store an uploaded file against ``record`` after size and type checks."""
    if upload is None:
        raise ValidationFailed(errors=[{'field': 'file', 'message': 'No file uploaded', 'value': None}])
    if upload.size > settings.MAX_FILE_SIZE:
        raise ValidationFailed(
            'File too large',
            errors=[{'field': 'file', 'message': f'Maximum size is {settings.MAX_FILE_SIZE} bytes', 'value': upload.size}],
        )
    content_type = (upload.content_type or '').split(';')[0].strip()
    if content_type not in settings.ALLOWED_UPLOAD_TYPES:
        raise ValidationFailed(
            'File type not allowed',
            errors=[{'field': 'file', 'message': 'Unsupported file type', 'value': content_type}],
        )
    att = Attachment.objects.create(
        medical_record=record,
        file=upload,
        file_name=bleach.clean(upload.name, strip=True)[:255],
        content_type=content_type,
        size=upload.size,
        uploaded_by=user,
    )
    logger.info('Stored attachment %s (%s bytes) on %s', att.pk, att.size, record.pk)
    return att
