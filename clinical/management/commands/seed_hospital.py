# clinical/management/commands/seed_hospital.py
import datetime

from django.core.management.base import BaseCommand
from django.db import transaction

from clinical.models import Patient, User
from clinical.services import critical

STAFF = [
    # username, password, role, first, last, phone
    ("admin", "admin123", User.ROLE_ADMIN, "System", "Administrator", "+1234567890"),
    ("dr.smith", "doctor123", User.ROLE_DOCTOR, "John", "Smith", "+1234567891"),
    ("nurse.jones", "nurse123", User.ROLE_NURSE, "Sarah", "Jones", "+1234567892"),
]

PATIENTS = [
    {
        "first_name": "Sarah", "last_name": "Johnson", "date_of_birth": datetime.date(1990, 5, 15),
        "gender": "Female", "address": "123 Main St, City, ST 12345", "phone_number": "(555) 123-4567",
        "email": "patient@email.com", "emergency_contact": "John Doe (Spouse)",
        "emergency_phone": "(555) 987-6543", "medical_history": "Post-Surgery",
        "allergies": "Penicillin, Latex", "blood_type": "O+", "room": "A-101",
        "department": "Cardiology", "condition": "Post-Surgery",
    },
    {
        "first_name": "Michael", "last_name": "Chen", "date_of_birth": datetime.date(1975, 8, 22),
        "gender": "Male", "address": "456 Oak Ave, City, ST 12345", "phone_number": "(555) 234-5678",
        "email": "michael.chen@email.com", "emergency_contact": "Lisa Chen (Spouse)",
        "emergency_phone": "(555) 876-5432", "medical_history": "Hypertension, Diabetes",
        "allergies": "Sulfa drugs", "blood_type": "A+", "room": "B-205",
        "department": "Cardiology", "condition": "Hypertensive Crisis",
    },
]
# patients admitted in a critical state, with the reason sent to staff
CRITICAL_ON_ADMISSION = {("Michael", "Chen"): "Hypertensive Crisis"}


class Command(BaseCommand):
    help = "Create the demo staff accounts and sample patients (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--reset-passwords", action="store_true",
                            help="Reset existing demo accounts to their default passwords.")

    @transaction.atomic
    def handle(self, *args, **opts):
        for username, password, role, first, last, phone in STAFF:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"email": f"{username}@hospital.com", "role": role, "first_name": first,
                          "last_name": last, "phone_number": phone, "is_active": True,
                          "is_staff": role == User.ROLE_ADMIN, "is_superuser": role == User.ROLE_ADMIN},
            )
            if created or opts["reset_passwords"]:
                user.set_password(password)
                user.role = role
                user.is_active = True
                user.save()
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role}){' created' if created else ''}"))

        for data in PATIENTS:
            patient, created = Patient.objects.get_or_create(
                first_name=data["first_name"], last_name=data["last_name"],
                date_of_birth=data["date_of_birth"], defaults=data,
            )
            reason = CRITICAL_ON_ADMISSION.get((patient.first_name, patient.last_name))
            if created and reason:
                critical.mark_critical(patient.id, reason)
                patient.refresh_from_db()
            self.stdout.write(self.style.SUCCESS(
                f"ok: patient {patient.full_name}{' created' if created else ''}"
                f"{' (critical)' if patient.is_critical else ''}"
            ))
        self.stdout.write(self.style.SUCCESS("Hospital seed data ensured."))
