from decimal import Decimal

import bleach
from rest_framework import serializers

from clinic.models import Invoice


class InvoiceItemSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=100, required=False, default='General')
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))

    def validate_description(self, v):
        return bleach.clean(v.strip(), strip=True)


class InvoiceSerializer(serializers.Serializer):
    patientId = serializers.CharField(max_length=20)
    appointmentId = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True)
    date = serializers.DateField()
    dueDate = serializers.DateField()
    items = InvoiceItemSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['dueDate'] < attrs['date']:
            raise serializers.ValidationError({'dueDate': 'Due date cannot be before the invoice date'})
        return attrs


class PaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    paymentMethod = serializers.CharField(max_length=50, required=False, default='Cash')


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Invoice.STATUS_CHOICES)


class InvoiceListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Invoice.STATUS_CHOICES, required=False)
