"""
Patient registry endpoints.

Every signed-in role may read patients; creating and editing is for
administrators and receptionists, restoring an archived patient and hard
deletion for administrators only.
"""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from clinic.exceptions import ResourceNotFound
from clinic.fields import storage_name
from clinic.models import Patient, Role
from clinic.permissions import IsAdmin, IsAdminOrReceptionist, allow_roles
from clinic.responses import page_params, paginated_response, success_response
from clinic.serializers.patient import PatientListQuerySerializer, PatientSerializer
from clinic.services.audit import log_action
from clinic.services.patients import create_patient, patient_row, set_patient_status, update_patient


def _get_patient(patient_id) -> Patient:
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        raise ResourceNotFound('Patient not found')
    return patient


@api_view(['GET', 'POST'])
@permission_classes([allow_roles(Role.ADMIN, Role.RECEPTIONIST, methods=('POST',))])
def patients(request):
    if request.method == 'POST':
        return _create(request)

    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    page, limit, offset = page_params(request)

    qs = Patient.objects.all()
    search = (vd.get('search') or '').strip()
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search)
                       | Q(phone__icontains=search) | Q(id__icontains=search))
    if vd.get('status'):
        qs = qs.filter(status=vd['status'])
    if vd.get('bloodGroup'):
        qs = qs.filter(blood_group=vd['bloodGroup'])

    order = storage_name(vd['sortBy'])
    if vd['sortOrder'].lower() == 'desc':
        order = f'-{order}'
    total = qs.count()
    rows = [patient_row(p) for p in qs.order_by(order, 'id')[offset:offset + limit]]
    return paginated_response(rows, page, limit, total)


def _create(request):
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = create_patient(s.validated_data)
    log_action(user=request.user, action='INSERT', table_name='patients', record_id=patient.pk)
    return success_response(patient_row(patient), 'Patient created successfully', status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([
    allow_roles(Role.ADMIN, Role.RECEPTIONIST, methods=('PUT',)),
    allow_roles(Role.ADMIN, methods=('DELETE',)),
])
def patient_detail(request, patient_id):
    patient = _get_patient(patient_id)

    if request.method == 'GET':
        return success_response(patient_row(patient), 'Patient retrieved successfully')

    if request.method == 'DELETE':
        patient.delete()
        log_action(user=request.user, action='DELETE', table_name='patients', record_id=patient_id)
        return success_response(None, 'Patient deleted successfully')

    s = PatientSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    patient = update_patient(patient, s.validated_data)
    log_action(user=request.user, action='UPDATE', table_name='patients', record_id=patient.pk)
    return success_response(patient_row(patient), 'Patient updated successfully')


@api_view(['PATCH'])
@permission_classes([IsAdminOrReceptionist])
def archive_patient(request, patient_id):
    patient = set_patient_status(_get_patient(patient_id), Patient.STATUS_ARCHIVED)
    log_action(user=request.user, action='UPDATE', table_name='patients', record_id=patient.pk,
               detail={'status': Patient.STATUS_ARCHIVED})
    return success_response(patient_row(patient), 'Patient archived successfully')


@api_view(['PATCH'])
@permission_classes([IsAdmin])
def restore_patient(request, patient_id):
    patient = set_patient_status(_get_patient(patient_id), Patient.STATUS_ACTIVE)
    log_action(user=request.user, action='UPDATE', table_name='patients', record_id=patient.pk,
               detail={'status': Patient.STATUS_ACTIVE})
    return success_response(patient_row(patient), 'Patient restored successfully')
