from rest_framework import serializers

from clinical.models import SeverityChoices
from clinical.serializers.fields import CleanCharField


class VitalReadingSerializer(serializers.Serializer):
    """The measured signs.  Every sign is optional; absent ones are not graded."""
    temperature = serializers.DecimalField(max_digits=4, decimal_places=1, min_value=25, max_value=45, required=False, allow_null=True)
    bloodPressureSystolic = serializers.IntegerField(source='blood_pressure_systolic', min_value=0, max_value=350, required=False, allow_null=True)
    bloodPressureDiastolic = serializers.IntegerField(source='blood_pressure_diastolic', min_value=0, max_value=250, required=False, allow_null=True)
    heartRate = serializers.IntegerField(source='heart_rate', min_value=0, max_value=300, required=False, allow_null=True)
    oxygenSaturation = serializers.IntegerField(source='oxygen_saturation', min_value=0, max_value=100, required=False, allow_null=True)
    respiratoryRate = serializers.IntegerField(source='respiratory_rate', min_value=0, max_value=100, required=False, allow_null=True)
    weight = serializers.DecimalField(max_digits=5, decimal_places=1, min_value=0, max_value=1000, required=False, allow_null=True)
    height = serializers.DecimalField(max_digits=5, decimal_places=1, min_value=0, max_value=300, required=False, allow_null=True)


class VitalSignCreateSerializer(VitalReadingSerializer):
    # any client-sent severity is ignored; it is always computed
    patientId = serializers.IntegerField(source='patient_id')
    recordedById = serializers.IntegerField(source='recorded_by_id', required=False)
    notes = CleanCharField(max_length=500, required=False, allow_null=True, allow_blank=True)


class VitalSignQuerySerializer(serializers.Serializer):
    patientId = serializers.IntegerField(required=False)
    severity = serializers.ChoiceField(choices=SeverityChoices.values, required=False)
