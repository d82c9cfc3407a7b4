from rest_framework import serializers

from clinical.serializers.fields import CleanCharField


class MedicalRecordSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(source='patient_id')
    doctorId = serializers.IntegerField(source='doctor_id')
    diagnosis = CleanCharField(max_length=200)
    symptoms = CleanCharField(max_length=1000, required=False, allow_null=True, allow_blank=True)
    treatment = CleanCharField(max_length=1000, required=False, allow_null=True, allow_blank=True)
    prescriptions = CleanCharField(max_length=500, required=False, allow_null=True, allow_blank=True)
    temperature = serializers.DecimalField(max_digits=4, decimal_places=1, min_value=25, max_value=45, required=False, allow_null=True)
    bloodPressureSystolic = serializers.IntegerField(source='blood_pressure_systolic', min_value=0, max_value=350, required=False, allow_null=True)
    bloodPressureDiastolic = serializers.IntegerField(source='blood_pressure_diastolic', min_value=0, max_value=250, required=False, allow_null=True)
    heartRate = serializers.IntegerField(source='heart_rate', min_value=0, max_value=300, required=False, allow_null=True)
    weight = serializers.DecimalField(max_digits=5, decimal_places=1, min_value=0, max_value=1000, required=False, allow_null=True)
    height = serializers.DecimalField(max_digits=5, decimal_places=1, min_value=0, max_value=300, required=False, allow_null=True)
    isCritical = serializers.BooleanField(source='is_critical', required=False, allow_null=True)
    criticalNotes = CleanCharField(source='critical_notes', max_length=500, required=False, allow_null=True, allow_blank=True)


class MedicalRecordQuerySerializer(serializers.Serializer):
    patientId = serializers.IntegerField(required=False)
    doctorId = serializers.IntegerField(required=False)
    isCritical = serializers.BooleanField(required=False, allow_null=True, default=None)
