"""
Serializers for authentication models.

This module provides DRF serializers for:
- User public profile (what other chat participants see)
- Email/password registration

Related files:
    - models.py: User model
    - views.py: RegisterView
    - chat/serializers.py: Embeds the public profile in conversations and messages

Security:
    - Email and account flags are never part of the public profile
    - Passwords are checked against AUTH_PASSWORD_VALIDATORS
"""

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from authentication.models import Gender, User


class UserPublicSerializer(serializers.ModelSerializer):
    """
    Public profile of a user, camelCase for the realtime protocol.

    Output:
        {"id": "...", "name": "...", "profilePicture": "...", "gender": "other"}
    """

    id = serializers.UUIDField(read_only=True)
    profilePicture = serializers.CharField(source="profile_picture", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "profilePicture", "gender"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """
    Serializer for user registration.

    Used by RegisterView for the /api/v1/auth/register/ endpoint.
    Profile picture is not part of sign-up; it is set later.
    """

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Password must be at least 8 characters.",
    )
    name = serializers.CharField(min_length=3, max_length=150)
    gender = serializers.ChoiceField(
        choices=Gender.choices, required=False, default=Gender.OTHER
    )

    def validate_email(self, value):
        """Validate that email is not already in use."""
        email = value.lower().strip()
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return email

    def validate(self, attrs):
        """Run the configured password validators against the new account."""
        candidate = User(email=attrs["email"], name=attrs["name"])
        try:
            validate_password(attrs["password"], user=candidate)
        except DjangoValidationError as e:
            raise serializers.ValidationError({"password": list(e.messages)})
        return attrs

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data["name"],
            gender=validated_data["gender"],
        )
