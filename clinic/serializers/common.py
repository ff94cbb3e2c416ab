import bleach
from rest_framework import ISO_8601, serializers

# Accept bare dates ("2030-01-31") as well as full ISO-8601 datetimes.
DATETIME_INPUT_FORMATS = [ISO_8601, '%Y-%m-%d']


def clean_text(value: str) -> str:
    """Strip any HTML markup and surrounding whitespace."""
    return bleach.clean((value or '').strip(), tags=set(), strip=True).strip()


class CleanCharField(serializers.CharField):
    """CharField for free text.

    Markup is stripped before the length validators run, so ``min_length``,
    ``max_length`` and the blank check apply to the value that is stored
    (entities such as ``&amp;`` count at their escaped length).
    """

    def to_internal_value(self, data):
        value = clean_text(super().to_internal_value(data))
        if not value and not self.allow_blank:
            self.fail('blank')
        return value


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, required=False)
