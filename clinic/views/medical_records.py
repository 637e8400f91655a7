"""
Medical record endpoints for administrators and doctors.
"""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser

from clinic.exceptions import ResourceNotFound
from clinic.fields import rename_fields_and_timestamps
from clinic.models import MedicalRecord, Role
from clinic.permissions import IsAdminOrDoctor, allow_roles
from clinic.responses import page_params, paginated_response, success_response
from clinic.serializers.medical_record import (
    MedicalRecordListQuerySerializer,
    MedicalRecordSerializer,
    MedicalRecordUpdateSerializer,
)
from clinic.services.audit import log_action
from clinic.services.medical_records import add_attachment, attachment_row, create_record, record_row, update_record


def _records():
    return MedicalRecord.objects.select_related('patient', 'doctor').prefetch_related(
        'prescriptions', 'lab_results', 'attachments'
    )


def _get_record(record_id) -> MedicalRecord:
    record = _records().filter(pk=record_id).first()
    if record is None:
        raise ResourceNotFound('Medical record not found')
    return record


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrDoctor])
def medical_records(request):
    if request.method == 'POST':
        s = MedicalRecordSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        record = create_record(s.validated_data, request.user)
        log_action(user=request.user, action='INSERT', table_name='medical_records', record_id=record.pk)
        return success_response(record_row(_get_record(record.pk)), 'Medical record created successfully',
                                status=status.HTTP_201_CREATED)

    q = MedicalRecordListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    page, limit, offset = page_params(request)

    qs = _records()
    search = (vd.get('search') or '').strip()
    if search:
        qs = qs.filter(Q(diagnosis__icontains=search) | Q(patient__name__icontains=search)
                       | Q(id__icontains=search))
    if vd.get('patientId'):
        qs = qs.filter(patient_id=vd['patientId'])
    if vd.get('doctorId'):
        qs = qs.filter(doctor_id=vd['doctorId'])

    total = qs.count()
    rows = [record_row(r) for r in qs.order_by('-date', '-id')[offset:offset + limit]]
    return paginated_response(rows, page, limit, total)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminOrDoctor, allow_roles(Role.ADMIN, methods=('DELETE',))])
def medical_record_detail(request, record_id):
    record = _get_record(record_id)

    if request.method == 'GET':
        return success_response(record_row(record), 'Medical record retrieved successfully')

    if request.method == 'DELETE':
        record.delete()
        log_action(user=request.user, action='DELETE', table_name='medical_records', record_id=record_id)
        return success_response(None, 'Medical record deleted successfully')

    s = MedicalRecordUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    record = update_record(record, s.validated_data)
    log_action(user=request.user, action='UPDATE', table_name='medical_records', record_id=record.pk,
               detail={'version': record.version})
    return success_response(record_row(_get_record(record.pk)), 'Medical record updated successfully')


@api_view(['POST'])
@permission_classes([IsAdminOrDoctor])
@parser_classes([MultiPartParser, FormParser])
def record_attachments(request, record_id):
    record = _get_record(record_id)
    att = add_attachment(record, request.FILES.get('file'), request.user)
    log_action(user=request.user, action='INSERT', table_name='medical_record_attachments',
               record_id=att.pk, detail={'record': record.pk, 'file': att.file_name})
    return success_response(rename_fields_and_timestamps(attachment_row(att)), 'File uploaded successfully',
                            status=status.HTTP_201_CREATED)
