from rest_framework import serializers

from .homepage import HOMEPAGE_FIELDS, URL_FIELDS
from .i18n import is_supported_locale
from .models import HomepagePreset


def _homepage_fields():
    fields = {}
    for name in HOMEPAGE_FIELDS:
        if name in URL_FIELDS:
            fields[name] = serializers.URLField(max_length=500, required=False, allow_blank=True, default="")
        else:
            fields[name] = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=False)
    return fields


# One optional string field per homepage copy key; URL keys must be valid or empty.
HomepageContentSerializer = serializers.SerializerMetaclass(
    "HomepageContentSerializer", (serializers.Serializer,), _homepage_fields()
)


class HomepagePresetSerializer(serializers.ModelSerializer):
    class Meta:
        model = HomepagePreset
        fields = ["id", "name", "updated_at", "data"]


class HomepagePresetWriteSerializer(serializers.Serializer):
    locale = serializers.CharField()
    name = serializers.CharField(max_length=120)
    data = HomepageContentSerializer()

    def validate_locale(self, value):
        if not is_supported_locale(value):
            raise serializers.ValidationError("Unsupported locale.")
        return value

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Preset name is required")
        return value

    def create(self, validated_data):
        preset, _ = HomepagePreset.objects.update_or_create(
            locale=validated_data["locale"],
            name=validated_data["name"],
            defaults={"data": dict(validated_data["data"])},
        )
        return preset
