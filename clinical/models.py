"""
Database models for the hospital API.

Patients own their clinical children (records, vital signs, appointments,
prescriptions, lab results, progress notes) through a foreign key on the
child side; nothing on :class:`Patient` points back at them.  Query the
children by ``patient_id`` instead of walking reverse relations.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class SeverityChoices(models.TextChoices):
    NORMAL = 'normal', 'Normal'
    ELEVATED = 'elevated', 'Elevated'
    HIGH = 'high', 'High'
    CRITICAL = 'critical', 'Critical'


class User(AbstractUser):
    """Medical staff account.

    Roles mirror the ward roles: 'admin', 'doctor' and 'nurse'.  Deactivated
    accounts keep their row (``is_active=False``) so historical records and
    notifications still resolve a name.
    """
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_NURSE = 'nurse'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_NURSE, 'Nurse'),
    ]
    CLINICAL_ROLES = (ROLE_DOCTOR, ROLE_NURSE)

    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_NURSE, db_index=True)
    phone_number = models.CharField(max_length=20, blank=True)
    last_updated_at = models.DateTimeField(auto_now=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_DISCHARGED = 'discharged'
    STATUS_DECEASED = 'deceased'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_DISCHARGED, 'Discharged'),
        (STATUS_DECEASED, 'Deceased'),
    ]

    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=20)
    address = models.CharField(max_length=200)
    phone_number = models.CharField(max_length=20)
    email = models.EmailField(max_length=100, blank=True, null=True)
    emergency_contact = models.CharField(max_length=100, blank=True, null=True)
    emergency_phone = models.CharField(max_length=20, blank=True, null=True)
    medical_history = models.CharField(max_length=500, blank=True, null=True)
    allergies = models.CharField(max_length=500, blank=True, null=True)
    blood_type = models.CharField(max_length=10, blank=True, null=True)
    room = models.CharField(max_length=20, blank=True, null=True)
    department = models.CharField(max_length=50, blank=True, null=True)
    condition = models.CharField(max_length=100, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    # Only written by clinical.services.critical
    is_critical = models.BooleanField(default=False, db_index=True)
    critical_since = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['last_name', 'first_name'], name='patient_name_idx'),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return f"{self.full_name} (#{self.pk})"


class MedicalRecord(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='+')
    doctor = models.ForeignKey(User, on_delete=models.PROTECT, related_name='+')
    diagnosis = models.CharField(max_length=200)
    symptoms = models.CharField(max_length=1000, blank=True, null=True)
    treatment = models.CharField(max_length=1000, blank=True, null=True)
    prescriptions = models.CharField(max_length=500, blank=True, null=True)
    temperature = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    blood_pressure_systolic = models.PositiveIntegerField(null=True, blank=True)
    blood_pressure_diastolic = models.PositiveIntegerField(null=True, blank=True)
    heart_rate = models.PositiveIntegerField(null=True, blank=True)
    weight = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)
    height = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)
    is_critical = models.BooleanField(default=False, db_index=True)
    critical_notes = models.CharField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'created_at'], name='record_patient_time_idx'),
        ]

    def __str__(self) -> str:
        return f"Record #{self.pk} for patient {self.patient_id}: {self.diagnosis}"


class VitalSign(models.Model):
    """One observation of a patient's vital signs.

    Rows are append-only; ``severity`` is computed by the classifier when the
    row is recorded.
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='+')
    recorded_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='+')
    temperature = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    blood_pressure_systolic = models.PositiveIntegerField(null=True, blank=True)
    blood_pressure_diastolic = models.PositiveIntegerField(null=True, blank=True)
    heart_rate = models.PositiveIntegerField(null=True, blank=True)
    oxygen_saturation = models.PositiveIntegerField(null=True, blank=True)
    respiratory_rate = models.PositiveIntegerField(null=True, blank=True)
    weight = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)
    height = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)
    severity = models.CharField(max_length=10, choices=SeverityChoices.choices, default=SeverityChoices.NORMAL, db_index=True)
    notes = models.CharField(max_length=500, blank=True, null=True)
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'recorded_at'], name='vitals_patient_time_idx'),
        ]

    def __str__(self) -> str:
        return f"Vitals #{self.pk} patient={self.patient_id} {self.severity}"


class Appointment(models.Model):
    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('confirmed', 'Confirmed'),
        ('in_progress', 'In progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('no_show', 'No show'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='+')
    doctor = models.ForeignKey(User, on_delete=models.PROTECT, related_name='+')
    appointment_date = models.DateTimeField(db_index=True)
    appointment_type = models.CharField(max_length=100)
    notes = models.CharField(max_length=500, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='scheduled')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"Appointment #{self.pk} patient={self.patient_id} @ {self.appointment_date:%F %R}"


class Prescription(models.Model):
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('discontinued', 'Discontinued'),
        ('completed', 'Completed'),
        ('on_hold', 'On hold'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='+')
    prescribed_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='+')
    medication_name = models.CharField(max_length=100)
    dosage = models.CharField(max_length=50)
    frequency = models.CharField(max_length=50)
    instructions = models.CharField(max_length=200, blank=True, null=True)
    prescribed_at = models.DateTimeField(auto_now_add=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    notes = models.CharField(max_length=500, blank=True, null=True)

    def __str__(self) -> str:
        return f"{self.medication_name} {self.dosage} for patient {self.patient_id}"


class LabResult(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_progress', 'In progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='+')
    ordered_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='+')
    test_name = models.CharField(max_length=100)
    test_value = models.CharField(max_length=50, blank=True, null=True)
    normal_range = models.CharField(max_length=50, blank=True, null=True)
    unit = models.CharField(max_length=20, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    severity = models.CharField(max_length=10, choices=SeverityChoices.choices, default=SeverityChoices.NORMAL)
    notes = models.CharField(max_length=500, blank=True, null=True)
    ordered_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    reported_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.test_name} for patient {self.patient_id} ({self.status})"


class ProgressNote(models.Model):
    TYPE_CHOICES = [
        ('general', 'General'),
        ('assessment', 'Assessment'),
        ('plan', 'Plan'),
        ('evaluation', 'Evaluation'),
        ('discharge', 'Discharge'),
        ('consultation', 'Consultation'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='+')
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='+')
    title = models.CharField(max_length=200)
    content = models.TextField(max_length=2000)
    category = models.CharField(max_length=100, blank=True, null=True)
    note_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='general')
    is_critical = models.BooleanField(default=False)
    critical_notes = models.CharField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.title} (patient {self.patient_id})"


class Notification(models.Model):
    """An alert addressed to one staff member, or to all staff when ``user`` is null.

    Created only by :mod:`clinical.services.notifications`; afterwards only
    the read flag changes.
    """
    TYPE_CRITICAL_ALERT = 'critical_alert'
    TYPE_PATIENT_UPDATE = 'patient_update'
    TYPE_APPOINTMENT_REMINDER = 'appointment_reminder'
    TYPE_SYSTEM_ALERT = 'system_alert'
    TYPE_MEDICAL_RECORD_UPDATE = 'medical_record_update'
    TYPE_VITAL_SIGN_ALERT = 'vital_sign_alert'
    TYPE_LAB_RESULT_ALERT = 'lab_result_alert'
    TYPE_MEDICATION_ALERT = 'medication_alert'
    TYPE_EMERGENCY_ALERT = 'emergency_alert'
    TYPE_CHOICES = (
        (TYPE_CRITICAL_ALERT, 'Critical alert'),
        (TYPE_PATIENT_UPDATE, 'Patient update'),
        (TYPE_APPOINTMENT_REMINDER, 'Appointment reminder'),
        (TYPE_SYSTEM_ALERT, 'System alert'),
        (TYPE_MEDICAL_RECORD_UPDATE, 'Medical record update'),
        (TYPE_VITAL_SIGN_ALERT, 'Vital sign alert'),
        (TYPE_LAB_RESULT_ALERT, 'Lab result alert'),
        (TYPE_MEDICATION_ALERT, 'Medication alert'),
        (TYPE_EMERGENCY_ALERT, 'Emergency alert'),
    )

    PRIORITY_LOW = 'low'
    PRIORITY_NORMAL = 'normal'
    PRIORITY_HIGH = 'high'
    PRIORITY_CRITICAL = 'critical'
    PRIORITY_CHOICES = (
        (PRIORITY_LOW, 'Low'),
        (PRIORITY_NORMAL, 'Normal'),
        (PRIORITY_HIGH, 'High'),
        (PRIORITY_CRITICAL, 'Critical'),
    )

    title = models.CharField(max_length=200)
    message = models.CharField(max_length=1000)
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=PRIORITY_NORMAL, db_index=True)
    patient = models.ForeignKey(Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['user', 'is_read', 'created_at'], name='notif_user_read_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} -> {self.user_id or 'all'}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_time_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.object_type}#{self.object_id}"
