"""
Invoice endpoints, limited to administrators and receptionists (deletion
to administrators).
"""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from clinic.exceptions import ResourceNotFound
from clinic.models import Invoice, Role
from clinic.permissions import IsAdminOrReceptionist, allow_roles
from clinic.responses import page_params, paginated_response, success_response
from clinic.serializers.billing import (
    InvoiceListQuerySerializer,
    InvoiceSerializer,
    InvoiceStatusSerializer,
    PaymentSerializer,
)
from clinic.services.audit import log_action
from clinic.services.billing import create_invoice, invoice_row, record_payment, set_invoice_status


def _get_invoice(invoice_id) -> Invoice:
    invoice = Invoice.objects.select_related('patient').filter(pk=invoice_id).first()
    if invoice is None:
        raise ResourceNotFound('Invoice not found')
    return invoice


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReceptionist])
def invoices(request):
    if request.method == 'POST':
        s = InvoiceSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        invoice = create_invoice(s.validated_data)
        log_action(user=request.user, action='INSERT', table_name='invoices', record_id=invoice.pk)
        return success_response(invoice_row(invoice), 'Invoice created successfully', status=status.HTTP_201_CREATED)

    q = InvoiceListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    page, limit, offset = page_params(request)

    qs = Invoice.objects.select_related('patient').prefetch_related('items')
    search = (vd.get('search') or '').strip()
    if search:
        qs = qs.filter(Q(id__icontains=search) | Q(patient__name__icontains=search)
                       | Q(patient_id__icontains=search))
    if vd.get('status'):
        qs = qs.filter(status=vd['status'])

    total = qs.count()
    rows = [invoice_row(i) for i in qs.order_by('-date', '-id')[offset:offset + limit]]
    return paginated_response(rows, page, limit, total)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAdminOrReceptionist, allow_roles(Role.ADMIN, methods=('DELETE',))])
def invoice_detail(request, invoice_id):
    invoice = _get_invoice(invoice_id)
    if request.method == 'DELETE':
        invoice.delete()
        log_action(user=request.user, action='DELETE', table_name='invoices', record_id=invoice_id)
        return success_response(None, 'Invoice deleted successfully')
    return success_response(invoice_row(invoice), 'Invoice retrieved successfully')


@api_view(['PATCH'])
@permission_classes([IsAdminOrReceptionist])
def invoice_payment(request, invoice_id):
    s = PaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    invoice = record_payment(_get_invoice(invoice_id), s.validated_data['amount'],
                             s.validated_data['paymentMethod'])
    log_action(user=request.user, action='UPDATE', table_name='invoices', record_id=invoice.pk,
               detail={'payment': str(s.validated_data['amount'])})
    return success_response(invoice_row(invoice), 'Payment recorded successfully')


@api_view(['PATCH'])
@permission_classes([IsAdminOrReceptionist])
def invoice_status(request, invoice_id):
    s = InvoiceStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    invoice = set_invoice_status(_get_invoice(invoice_id), s.validated_data['status'])
    log_action(user=request.user, action='UPDATE', table_name='invoices', record_id=invoice.pk,
               detail={'status': invoice.status})
    return success_response(invoice_row(invoice), 'Invoice status updated successfully')
