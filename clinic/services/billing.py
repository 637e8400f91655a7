import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from clinic.exceptions import ResourceNotFound
from clinic.fields import flatten, rename_fields_and_timestamps
from clinic.models import Appointment, Invoice, InvoiceItem, Patient
from clinic.services.identifiers import create_with_identifier

logger = logging.getLogger(__name__)


def invoice_row(invoice: Invoice) -> dict:
    row = flatten(invoice)
    row['patient_name'] = invoice.patient.name
    row['items'] = [flatten(item, exclude=('invoice',)) for item in invoice.items.order_by('id')]
    return rename_fields_and_timestamps(row)


def create_invoice(data: dict) -> Invoice:
    """Invoice plus line items in one transaction; totals are computed here."""
    patient = Patient.objects.filter(pk=data['patientId']).first()
    if patient is None:
        raise ResourceNotFound('Patient not found')
    appointment = None
    if data.get('appointmentId'):
        appointment = Appointment.objects.filter(pk=data['appointmentId']).first()
        if appointment is None:
            raise ResourceNotFound('Appointment not found')

    with transaction.atomic():
        invoice = create_with_identifier(
            Invoice, 'INV',
            patient=patient,
            appointment=appointment,
            date=data['date'],
            due_date=data['dueDate'],
            notes=data.get('notes') or '',
        )
        grand_total = Decimal('0')
        for item in data['items']:
            line_total = item['quantity'] * item['price']
            create_with_identifier(
                InvoiceItem, 'ITEM',
                invoice=invoice,
                description=item['description'],
                category=item.get('category') or 'General',
                quantity=item['quantity'],
                price=item['price'],
                total=line_total,
            )
            grand_total += line_total
        invoice.total_amount = grand_total
        invoice.save(update_fields=['total_amount'])
    logger.info('Created invoice %s for %s total=%s', invoice.id, patient.pk, grand_total)
    return invoice


def record_payment(invoice: Invoice, amount: Decimal, method: str = 'Cash') -> Invoice:
    """Add ``amount``; the invoice turns ``paid`` once the total is covered."""
    with transaction.atomic():
        invoice = Invoice.objects.select_for_update().get(pk=invoice.pk)
        invoice.paid_amount = (invoice.paid_amount or Decimal('0')) + amount
        invoice.payment_method = method or 'Cash'
        if invoice.paid_amount >= invoice.total_amount:
            invoice.status = Invoice.STATUS_PAID
            invoice.paid_at = timezone.now()
        invoice.save()
    return invoice


def set_invoice_status(invoice: Invoice, status: str) -> Invoice:
    invoice.status = status
    if status == Invoice.STATUS_PAID and invoice.paid_at is None:
        invoice.paid_at = timezone.now()
    invoice.save(update_fields=['status', 'paid_at', 'updated_at'])
    return invoice
