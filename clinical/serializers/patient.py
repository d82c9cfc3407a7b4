from rest_framework import serializers

from clinical.models import Patient
from clinical.serializers.fields import CleanCharField


class PatientWriteSerializer(serializers.Serializer):
    """Create/update payload.

    With ``partial=True`` every field becomes optional.  ``isCritical`` is
    read separately by the view so the flag never bypasses the coordinator.
    """
    firstName = CleanCharField(source='first_name', max_length=50)
    lastName = CleanCharField(source='last_name', max_length=50)
    dateOfBirth = serializers.DateField(source='date_of_birth')
    gender = serializers.CharField(max_length=20)
    address = CleanCharField(max_length=200)
    phoneNumber = serializers.CharField(source='phone_number', max_length=20)
    email = serializers.EmailField(max_length=100, required=False, allow_null=True, allow_blank=True)
    emergencyContact = CleanCharField(source='emergency_contact', max_length=100, required=False, allow_null=True, allow_blank=True)
    emergencyPhone = serializers.CharField(source='emergency_phone', max_length=20, required=False, allow_null=True, allow_blank=True)
    medicalHistory = CleanCharField(source='medical_history', max_length=500, required=False, allow_null=True, allow_blank=True)
    allergies = CleanCharField(max_length=500, required=False, allow_null=True, allow_blank=True)
    bloodType = serializers.CharField(source='blood_type', max_length=10, required=False, allow_null=True, allow_blank=True)
    room = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True)
    department = CleanCharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    condition = CleanCharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    status = serializers.ChoiceField(choices=[s for s, _ in Patient.STATUS_CHOICES], required=False)
    isCritical = serializers.BooleanField(source='is_critical', required=False, allow_null=True)


class PatientListQuerySerializer(serializers.Serializer):
    isCritical = serializers.BooleanField(required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(choices=[s for s, _ in Patient.STATUS_CHOICES], required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)


class MarkCriticalSerializer(serializers.Serializer):
    reason = CleanCharField(max_length=500)

    def validate_reason(self, v):
        v = v.strip()
        if not v:
            raise serializers.ValidationError('A reason is required')
        return v
