from rest_framework import serializers

from .common import CleanCharField, PageQuerySerializer


class DoctorListQuerySerializer(PageQuerySerializer):
    specialty = CleanCharField(max_length=100, required=False, allow_blank=True)


class PatientListQuerySerializer(PageQuerySerializer):
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)


class ProfileUpdateSerializer(serializers.Serializer):
    name = CleanCharField(min_length=2, max_length=50, required=False)
    phone = serializers.CharField(min_length=10, max_length=15, required=False, allow_blank=True)
    specialty = CleanCharField(max_length=100, required=False, allow_blank=True)

    def validate_phone(self, v):
        return v.strip()


class PasswordChangeSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(
        source='current_password', trim_whitespace=False,
        error_messages={'required': 'Current password and new password are required'},
    )
    newPassword = serializers.CharField(
        source='new_password', trim_whitespace=False,
        error_messages={'required': 'Current password and new password are required'},
    )
