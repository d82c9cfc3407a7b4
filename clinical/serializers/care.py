from rest_framework import serializers

from clinical.models import Appointment, LabResult, Prescription, ProgressNote, SeverityChoices
from clinical.serializers.fields import CleanCharField


def _choices(model, field='status'):
    return [c for c, _ in model._meta.get_field(field).choices]


class AppointmentSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(source='patient_id')
    doctorId = serializers.IntegerField(source='doctor_id')
    appointmentDate = serializers.DateTimeField(source='appointment_date')
    appointmentType = CleanCharField(source='appointment_type', max_length=100)
    notes = CleanCharField(max_length=500, required=False, allow_null=True, allow_blank=True)
    status = serializers.ChoiceField(choices=_choices(Appointment), required=False)


class PrescriptionSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(source='patient_id')
    prescribedById = serializers.IntegerField(source='prescribed_by_id', required=False)
    medicationName = CleanCharField(source='medication_name', max_length=100)
    dosage = CleanCharField(max_length=50)
    frequency = CleanCharField(max_length=50)
    instructions = CleanCharField(max_length=200, required=False, allow_null=True, allow_blank=True)
    startDate = serializers.DateTimeField(source='start_date', required=False, allow_null=True)
    endDate = serializers.DateTimeField(source='end_date', required=False, allow_null=True)
    status = serializers.ChoiceField(choices=_choices(Prescription), required=False)
    notes = CleanCharField(max_length=500, required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs):
        start, end = attrs.get('start_date'), attrs.get('end_date')
        if start and end and end < start:
            raise serializers.ValidationError({'endDate': ['End date must not precede start date']})
        return attrs


class LabResultSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(source='patient_id')
    orderedById = serializers.IntegerField(source='ordered_by_id', required=False)
    testName = CleanCharField(source='test_name', max_length=100)
    testValue = CleanCharField(source='test_value', max_length=50, required=False, allow_null=True, allow_blank=True)
    normalRange = CleanCharField(source='normal_range', max_length=50, required=False, allow_null=True, allow_blank=True)
    unit = CleanCharField(max_length=20, required=False, allow_null=True, allow_blank=True)
    status = serializers.ChoiceField(choices=_choices(LabResult), required=False)
    severity = serializers.ChoiceField(choices=SeverityChoices.values, required=False)
    notes = CleanCharField(max_length=500, required=False, allow_null=True, allow_blank=True)


class ProgressNoteSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(source='patient_id')
    createdById = serializers.IntegerField(source='created_by_id', required=False)
    title = CleanCharField(max_length=200)
    content = CleanCharField(max_length=2000)
    category = CleanCharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    noteType = serializers.ChoiceField(source='note_type', choices=_choices(ProgressNote, 'note_type'), required=False)
    isCritical = serializers.BooleanField(source='is_critical', required=False)
    criticalNotes = CleanCharField(source='critical_notes', max_length=500, required=False, allow_null=True, allow_blank=True)


class PatientFilterSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(required=False)
    status = serializers.CharField(required=False, max_length=20)
