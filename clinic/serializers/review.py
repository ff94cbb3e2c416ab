from rest_framework import serializers

from .common import CleanCharField, PageQuerySerializer

_RATING_ERRORS = {
    'required': 'Rating is required',
    'invalid': 'Rating must be a whole number',
    'min_value': 'Rating must be at least 1',
    'max_value': 'Rating cannot exceed 5',
}
_COMMENT_ERRORS = {
    'required': 'Comment is required',
    'min_length': 'Comment must be at least 10 characters long',
    'max_length': 'Comment cannot exceed 500 characters',
}


class ReviewCreateSerializer(serializers.Serializer):
    appointmentId = serializers.IntegerField(
        source='appointment_id', min_value=1,
        error_messages={'required': 'Appointment ID is required'},
    )
    rating = serializers.IntegerField(min_value=1, max_value=5, error_messages=_RATING_ERRORS)
    comment = CleanCharField(min_length=10, max_length=500, error_messages=_COMMENT_ERRORS)


class ReviewUpdateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False, error_messages=_RATING_ERRORS)
    comment = CleanCharField(min_length=10, max_length=500, required=False, error_messages=_COMMENT_ERRORS)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Provide a rating or a comment to update')
        return attrs


class ReviewListQuerySerializer(PageQuerySerializer):
    doctorId = serializers.IntegerField(source='doctor_id', min_value=1, required=False)
