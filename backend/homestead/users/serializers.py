# users/serializers.py
from rest_framework import serializers

from homestead.fields import OptionalDateTimeField
from .models import User, Invitation


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "role", "created_at", "updated_at"]


class UserCreateSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=150, error_messages={
        "min_length": "Username must be at least 3 characters",
    })
    password = serializers.CharField(write_only=True, min_length=8, error_messages={
        "min_length": "Password must be at least 8 characters",
    })
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)


class UserUpdateSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=150, error_messages={
        "min_length": "Username must be at least 3 characters",
    })
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)

    def validate_password(self, value):
        # blank keeps the current password
        if value and len(value) < 8:
            raise serializers.ValidationError("Password must be at least 8 characters")
        return value or None


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        user = User.objects.find_by_login(attrs["username"])
        if not user or not user.is_active or not user.check_password(attrs["password"]):
            raise serializers.ValidationError("Invalid credentials")
        attrs["user"] = user
        return attrs


class InvitationSerializer(serializers.ModelSerializer):
    status = serializers.CharField(read_only=True)

    class Meta:
        model = Invitation
        fields = ["id", "token", "email", "role", "expires_at", "used_at", "created_at", "status"]


class InvitationCreateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True, error_messages={
        "invalid": "Please provide a valid email address",
    })
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)
    expires_at = OptionalDateTimeField(error_messages={
        "invalid": "Expiration must be a valid date and time",
    })


class InvitationRedeemSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=150, error_messages={
        "min_length": "Username must be at least 3 characters",
    })
    password = serializers.CharField(write_only=True, min_length=8, error_messages={
        "min_length": "Password must be at least 8 characters",
    })
