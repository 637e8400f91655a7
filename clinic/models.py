"""
Database models for the MediCore hospital API.

The tables mirror the records the front-end works with: staff users,
patients, appointments, invoices with line items, and medical records with
prescriptions, lab results and attachments.  Primary keys are short
prefixed strings (``P001``, ``A014``, ``INV003``) because those are what
staff read out over the phone and print on paper.

All ``DateTimeField`` values are stored in UTC (``USE_TZ = True``); see
:mod:`clinic.timestamps` for the conversion rules at the API boundary.
"""
from __future__ import annotations

import os
import uuid
from datetime import timedelta

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class Role(models.TextChoices):
    """The closed set of staff roles."""
    ADMIN = 'admin', 'Administrator'
    DOCTOR = 'doctor', 'Doctor'
    RECEPTIONIST = 'receptionist', 'Receptionist'


class StaffManager(UserManager):
    """Email is the login identifier; ``username`` is kept for Django admin."""

    def create_user(self, username=None, email=None, password=None, **extra_fields):
        email = self.normalize_email(email)
        username = username or email
        return super().create_user(username, email, password, **extra_fields)

    def create_superuser(self, username=None, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', Role.ADMIN)
        email = self.normalize_email(email)
        username = username or email
        return super().create_superuser(username, email, password, **extra_fields)


def _user_id() -> str:
    from django.utils import timezone
    return f"U{int(timezone.now().timestamp() * 1000)}{uuid.uuid4().hex[:4]}"


class User(AbstractUser):
    """Hospital staff account.

    ``role`` drives every access decision; ``department`` is only
    meaningful for doctors.
    """
    id = models.CharField(max_length=32, primary_key=True, default=_user_id, editable=False)
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.DOCTOR, db_index=True)
    department = models.CharField(max_length=100, null=True, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StaffManager()

    REQUIRED_FIELDS = ['email']

    class Meta:
        db_table = 'users'

    def __str__(self) -> str:
        return f"{self.name or self.email} ({self.role})"


class Patient(models.Model):
    STATUS_ACTIVE = 'Active'
    STATUS_ARCHIVED = 'Archived'
    STATUS_INACTIVE = 'Inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_ARCHIVED, 'Archived'),
        (STATUS_INACTIVE, 'Inactive'),
    ]
    GENDER_CHOICES = [('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')]

    id = models.CharField(max_length=20, primary_key=True)
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField()
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    blood_group = models.CharField(max_length=5)
    phone = models.CharField(max_length=32)
    email = models.EmailField(unique=True)
    address = models.TextField()
    emergency_contact = models.CharField(max_length=255)
    medical_history = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    registration_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'patients'

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Appointment(models.Model):
    STATUS_SCHEDULED = 'Scheduled'
    STATUS_COMPLETED = 'Completed'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_NO_SHOW = 'No Show'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No Show'),
    ]

    id = models.CharField(max_length=20, primary_key=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appointments')
    department = models.CharField(max_length=100, default='General')
    # Start of the visit (UTC).  The wire format splits it into a
    # display-zone ``date`` and ``time``.
    scheduled_at = models.DateTimeField(db_index=True)
    duration = models.PositiveIntegerField(default=30, help_text="Length in minutes")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    reason = models.TextField()
    notes = models.TextField(blank=True, default='')
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'appointments'
        indexes = [
            models.Index(fields=['doctor', 'scheduled_at'], name='appointments_doctor_slot_idx'),
        ]

    @property
    def ends_at(self):
        return self.scheduled_at + timedelta(minutes=self.duration)

    def __str__(self) -> str:
        return f"{self.id}: {self.patient_id} with {self.doctor_id} @ {self.scheduled_at:%F %T}"


class Invoice(models.Model):
    STATUS_PAID = 'paid'
    STATUS_PENDING = 'pending'
    STATUS_OVERDUE = 'overdue'
    STATUS_CHOICES = [
        (STATUS_PAID, 'paid'),
        (STATUS_PENDING, 'pending'),
        (STATUS_OVERDUE, 'overdue'),
    ]

    id = models.CharField(max_length=20, primary_key=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='invoices')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='invoices'
    )
    date = models.DateField(db_index=True)
    due_date = models.DateField()
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    payment_method = models.CharField(max_length=50, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'

    def __str__(self) -> str:
        return f"{self.id} ({self.status})"


class InvoiceItem(models.Model):
    id = models.CharField(max_length=20, primary_key=True)
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    description = models.CharField(max_length=255)
    category = models.CharField(max_length=100, default='General')
    quantity = models.DecimalField(max_digits=10, decimal_places=2, default=1)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    class Meta:
        db_table = 'invoice_items'

    def __str__(self) -> str:
        return f"{self.id} on {self.invoice_id}"


class MedicalRecord(models.Model):
    id = models.CharField(max_length=20, primary_key=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medical_records')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='medical_records')
    date = models.DateField(db_index=True)
    diagnosis = models.TextField()
    symptoms = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True, default='')
    version = models.PositiveIntegerField(default=1)
    updated_by = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'medical_records'

    def __str__(self) -> str:
        return f"{self.id} v{self.version} ({self.patient_id})"


class Prescription(models.Model):
    id = models.CharField(max_length=20, primary_key=True)
    medical_record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name='prescriptions')
    medication = models.CharField(max_length=255)
    dosage = models.CharField(max_length=100)
    frequency = models.CharField(max_length=100)
    duration = models.CharField(max_length=100)
    instructions = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'medical_record_prescriptions'


class LabResult(models.Model):
    id = models.CharField(max_length=20, primary_key=True)
    medical_record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name='lab_results')
    test_name = models.CharField(max_length=255)
    value = models.CharField(max_length=100)
    unit = models.CharField(max_length=50)
    normal_range = models.CharField(max_length=100)
    status = models.CharField(max_length=20, default='Normal')

    class Meta:
        db_table = 'medical_record_lab_results'


def _attachment_upload(instance, filename: str) -> str:
    from django.utils import timezone
    ext = os.path.splitext(filename)[1]
    return f"records/{timezone.now().strftime('%Y/%m')}/{uuid.uuid4().hex}{ext}"


class Attachment(models.Model):
    medical_record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name='attachments')
    file = models.FileField(upload_to=_attachment_upload, max_length=512)
    file_name = models.CharField(max_length=255)
    content_type = models.CharField(max_length=128, blank=True, default='')
    size = models.PositiveIntegerField(default=0)
    uploaded_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'medical_record_attachments'

    def __str__(self) -> str:
        return f"att {self.id} record={self.medical_record_id}"


class ActivityLog(models.Model):
    """Audit trail surfaced by ``GET /reports/logs``."""
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL)
    action = models.CharField(max_length=32)
    table_name = models.CharField(max_length=64, blank=True, null=True)
    record_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'logs'
        indexes = [
            models.Index(fields=['action', 'created_at'], name='logs_action_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
