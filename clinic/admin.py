"""
Django admin registrations so superusers can inspect and fix data by
hand at ``/django-admin/``.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    ActivityLog,
    Appointment,
    Attachment,
    Invoice,
    InvoiceItem,
    LabResult,
    MedicalRecord,
    Patient,
    Prescription,
    User,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('id', 'email', 'name', 'role', 'department', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('id', 'email', 'name')
    ordering = ('email',)
    fieldsets = BaseUserAdmin.fieldsets + (
        ('MediCore', {'fields': ('name', 'role', 'department', 'phone', 'email_verified')}),
    )


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'age', 'gender', 'blood_group', 'status', 'registration_date')
    list_filter = ('status', 'gender', 'blood_group')
    search_fields = ('id', 'name', 'email', 'phone')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'department', 'scheduled_at', 'duration', 'status')
    list_filter = ('status', 'department')
    search_fields = ('id', 'patient__name', 'doctor__name', 'reason')


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'date', 'due_date', 'total_amount', 'paid_amount', 'status')
    list_filter = ('status',)
    search_fields = ('id', 'patient__name')
    inlines = [InvoiceItemInline]


class PrescriptionInline(admin.TabularInline):
    model = Prescription
    extra = 0


class LabResultInline(admin.TabularInline):
    model = LabResult
    extra = 0


class AttachmentInline(admin.TabularInline):
    model = Attachment
    extra = 0


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'date', 'diagnosis', 'version')
    search_fields = ('id', 'patient__name', 'diagnosis')
    inlines = [PrescriptionInline, LabResultInline, AttachmentInline]


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'user', 'table_name', 'record_id')
    list_filter = ('action',)
    search_fields = ('record_id', 'table_name')
