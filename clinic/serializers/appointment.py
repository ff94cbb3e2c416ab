from django.utils import timezone
from rest_framework import serializers

from clinic.models import Appointment
from .common import DATETIME_INPUT_FORMATS, CleanCharField, PageQuerySerializer

STATUS_VALUES = [c[0] for c in Appointment.STATUS_CHOICES]
PRIORITY_VALUES = [c[0] for c in Appointment.PRIORITY_CHOICES]


class AppointmentCreateSerializer(serializers.Serializer):
    phone = serializers.CharField(
        min_length=10, max_length=15, required=False,
        error_messages={
            'min_length': 'Phone number must be at least 10 digits',
            'max_length': 'Phone number cannot exceed 15 digits',
        },
    )
    petName = CleanCharField(
        source='pet_name', max_length=50,
        error_messages={'required': 'Pet name is required', 'blank': 'Pet name is required',
                        'max_length': 'Pet name cannot exceed 50 characters'},
    )
    animalType = CleanCharField(
        source='animal_type', max_length=50,
        error_messages={'required': 'Animal type is required', 'blank': 'Animal type is required'},
    )
    breed = CleanCharField(
        max_length=50,
        error_messages={'required': 'Breed is required', 'blank': 'Breed is required',
                        'max_length': 'Breed cannot exceed 50 characters'},
    )
    petAge = CleanCharField(
        source='pet_age', max_length=20,
        error_messages={'required': 'Pet age is required', 'blank': 'Pet age is required',
                        'max_length': 'Pet age cannot exceed 20 characters'},
    )
    reason = CleanCharField(
        min_length=10, max_length=500,
        error_messages={'required': 'Reason for appointment is required',
                        'min_length': 'Reason must be at least 10 characters long',
                        'max_length': 'Reason cannot exceed 500 characters'},
    )
    doctorSpecialty = CleanCharField(
        source='doctor_specialty', max_length=100,
        error_messages={'required': 'Doctor specialty is required', 'blank': 'Doctor specialty is required'},
    )
    date = serializers.DateTimeField(
        input_formats=DATETIME_INPUT_FORMATS,
        error_messages={'required': 'Appointment date is required'},
    )
    time = CleanCharField(
        max_length=20,
        error_messages={'required': 'Appointment time is required', 'blank': 'Appointment time is required'},
    )
    additionalNotes = CleanCharField(source='additional_notes', max_length=500, required=False, allow_blank=True)
    priority = serializers.ChoiceField(choices=PRIORITY_VALUES, required=False, default=Appointment.PRIORITY_MEDIUM)

    def validate_phone(self, v):
        return v.strip()

    def validate_date(self, v):
        if v <= timezone.now():
            raise serializers.ValidationError('Appointment date must be in the future')
        return v


class AppointmentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_VALUES, required=False)
    doctorNotes = CleanCharField(source='doctor_notes', max_length=1000, required=False, allow_blank=True)
    priority = serializers.ChoiceField(choices=PRIORITY_VALUES, required=False)


class AppointmentListQuerySerializer(PageQuerySerializer):
    status = serializers.ChoiceField(choices=STATUS_VALUES + ['all'], required=False)
