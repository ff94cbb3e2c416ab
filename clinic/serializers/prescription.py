from django.utils import timezone
from rest_framework import serializers

from .common import DATETIME_INPUT_FORMATS, CleanCharField


class MedicationSerializer(serializers.Serializer):
    name = CleanCharField(
        max_length=100,
        error_messages={'required': 'Medication name is required', 'blank': 'Medication name is required',
                        'max_length': 'Medication name cannot exceed 100 characters'},
    )
    dosage = CleanCharField(
        max_length=50,
        error_messages={'required': 'Dosage is required', 'blank': 'Dosage is required',
                        'max_length': 'Dosage cannot exceed 50 characters'},
    )
    frequency = CleanCharField(
        max_length=50,
        error_messages={'required': 'Frequency is required', 'blank': 'Frequency is required',
                        'max_length': 'Frequency cannot exceed 50 characters'},
    )
    duration = CleanCharField(
        max_length=50,
        error_messages={'required': 'Duration is required', 'blank': 'Duration is required',
                        'max_length': 'Duration cannot exceed 50 characters'},
    )
    instructions = CleanCharField(max_length=200, required=False, allow_blank=True, default='')


class PrescriptionSerializer(serializers.Serializer):
    """Body of a prescription write; used as-is for updates."""
    diagnosis = CleanCharField(
        min_length=5, max_length=1000,
        error_messages={'required': 'Diagnosis is required',
                        'min_length': 'Diagnosis must be at least 5 characters long',
                        'max_length': 'Diagnosis cannot exceed 1000 characters'},
    )
    medications = MedicationSerializer(many=True, error_messages={'required': 'Medications are required'})
    followUpInstructions = CleanCharField(
        source='follow_up_instructions', min_length=10, max_length=1000,
        error_messages={'required': 'Follow-up instructions are required',
                        'min_length': 'Follow-up instructions must be at least 10 characters long',
                        'max_length': 'Follow-up instructions cannot exceed 1000 characters'},
    )
    nextAppointment = serializers.DateTimeField(
        source='next_appointment', input_formats=DATETIME_INPUT_FORMATS, required=False, allow_null=True,
    )

    def validate_medications(self, v):
        if not v:
            raise serializers.ValidationError('At least one medication is required')
        return v

    def validate_nextAppointment(self, v):
        if v is not None and v <= timezone.now():
            raise serializers.ValidationError('Next appointment must be in the future')
        return v


class PrescriptionCreateSerializer(PrescriptionSerializer):
    appointmentId = serializers.IntegerField(
        source='appointment_id', min_value=1,
        error_messages={'required': 'Appointment ID is required'},
    )
