from rest_framework import serializers

from clinic.models import User
from .common import CleanCharField


class SignupSerializer(serializers.Serializer):
    name = CleanCharField(
        min_length=2, max_length=50,
        error_messages={'min_length': 'Name must be at least 2 characters long',
                        'max_length': 'Name cannot exceed 50 characters'},
    )
    email = serializers.EmailField(error_messages={'invalid': 'Please provide a valid email address'})
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    phone = serializers.CharField(min_length=10, max_length=15, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False, default=User.ROLE_PATIENT)
    specialty = CleanCharField(max_length=100, required=False, allow_blank=True)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_phone(self, v):
        return v.strip()


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class RefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False)
