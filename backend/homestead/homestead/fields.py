from rest_framework import serializers


class OptionalDateTimeField(serializers.DateTimeField):
    """DateTimeField that reads an empty string as "no value"."""

    def __init__(self, **kwargs):
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_null", True)
        super().__init__(**kwargs)

    def to_internal_value(self, value):
        if value in ("", None):
            return None
        return super().to_internal_value(value)
