# clinic/management/commands/seed_data.py
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from clinic.models import Appointment, Invoice, MedicalRecord, Patient, Role, User
from clinic.services.appointments import schedule
from clinic.services.billing import create_invoice
from clinic.services.medical_records import create_record
from clinic.timestamps import current_display_date

SEED_PASSWORD = "password"

USERS = [
    ("Dr. Sarah Johnson", "sarah.johnson@medicore.com", Role.DOCTOR, "Cardiology"),
    ("Dr. Michael Chen", "michael.chen@medicore.com", Role.DOCTOR, "Neurology"),
    ("Emily Davis", "emily.davis@medicore.com", Role.RECEPTIONIST, None),
    ("Admin User", "admin@medicore.com", Role.ADMIN, None),
]

PATIENTS = [
    ("P001", "John Smith", 45, "Male", "O+", "+1-555-0101", "john.smith@email.com",
     "123 Main St, New York, NY", "Jane Smith (+1-555-0102)", ["Hypertension", "Type 2 Diabetes"]),
    ("P002", "Emma Wilson", 32, "Female", "A+", "+1-555-0103", "emma.wilson@email.com",
     "456 Oak Ave, Brooklyn, NY", "Tom Wilson (+1-555-0104)", ["Asthma"]),
    ("P003", "Robert Brown", 58, "Male", "B+", "+1-555-0105", "robert.brown@email.com",
     "789 Pine Rd, Queens, NY", "Mary Brown (+1-555-0106)", ["Coronary Artery Disease", "High Cholesterol"]),
    ("P004", "Lisa Anderson", 29, "Female", "AB-", "+1-555-0107", "lisa.anderson@email.com",
     "321 Elm St, Manhattan, NY", "David Anderson (+1-555-0108)", []),
]


class Command(BaseCommand):
    help = "Load sample staff, patients, appointments, invoices and medical records (password=password)."

    def add_arguments(self, parser):
        parser.add_argument("--flush", action="store_true", help="Delete existing clinical data first.")

    @transaction.atomic
    def handle(self, *args, **opts):
        if opts["flush"]:
            for model in (Invoice, MedicalRecord, Appointment, Patient):
                model.objects.all().delete()
            self.stdout.write(self.style.WARNING("flushed clinical tables"))

        staff = {}
        for name, email, role, department in USERS:
            user = User.objects.filter(email__iexact=email).first()
            if user is None:
                user = User.objects.create_user(email=email, password=SEED_PASSWORD, name=name,
                                                role=role, department=department)
            staff[email] = user
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))

        today = current_display_date()
        for pid, name, age, gender, blood, phone, email, address, contact, history in PATIENTS:
            Patient.objects.get_or_create(id=pid, defaults=dict(
                name=name, age=age, gender=gender, blood_group=blood, phone=phone, email=email,
                address=address, emergency_contact=contact, medical_history=history,
                registration_date=today - timedelta(days=30),
            ))
        self.stdout.write(self.style.SUCCESS(f"ok: {len(PATIENTS)} patients"))

        sarah = staff["sarah.johnson@medicore.com"]
        michael = staff["michael.chen@medicore.com"]
        if not Appointment.objects.exists():
            for patient_id, doctor, at, reason in [
                ("P001", sarah, "09:00", "Regular checkup"),
                ("P002", michael, "10:30", "Follow-up consultation"),
                ("P003", sarah, "14:00", "Chest pain evaluation"),
            ]:
                schedule({"patientId": patient_id, "doctorId": doctor.pk, "date": today.isoformat(),
                          "time": at, "duration": 30, "reason": reason})
            self.stdout.write(self.style.SUCCESS("ok: appointments"))

        if not Invoice.objects.exists():
            create_invoice({
                "patientId": "P001", "date": today, "dueDate": today + timedelta(days=30),
                "items": [
                    {"description": "Consultation", "category": "Consultation",
                     "quantity": Decimal("1"), "price": Decimal("150.00")},
                    {"description": "Blood Test", "category": "Laboratory",
                     "quantity": Decimal("1"), "price": Decimal("85.00")},
                ],
            })
            self.stdout.write(self.style.SUCCESS("ok: invoices"))

        if not MedicalRecord.objects.exists():
            create_record({
                "patientId": "P001", "doctorId": sarah.pk, "date": today,
                "diagnosis": "Hypertension - Stage 1",
                "symptoms": ["Headache", "Dizziness"],
                "notes": "Patient advised to reduce salt intake.",
                "prescriptions": [{"medication": "Lisinopril", "dosage": "10mg",
                                   "frequency": "Once daily", "duration": "30 days"}],
                "labResults": [{"testName": "Blood Pressure", "value": "140/90",
                                "unit": "mmHg", "normalRange": "120/80", "status": "High"}],
            }, sarah)
            self.stdout.write(self.style.SUCCESS("ok: medical records"))

        self.stdout.write(self.style.SUCCESS("Seed data loaded."))
