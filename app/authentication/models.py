"""
Authentication models.

This module defines the user model the rest of the system references:
- User: Custom user model with email-based login and a public profile
  (display name, avatar, gender)

Related files:
    - managers.py: Custom user manager for email-based creation
    - tokens.py: Bearer token verification for the realtime gateway
    - serializers.py: Public profile representation

Security:
    - User passwords hashed with Django's configured hashers
"""

import uuid

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class Gender(models.TextChoices):
    """Gender values exposed on the public profile."""

    MALE = "male", "Male"
    FEMALE = "female", "Female"
    OTHER = "other", "Other"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the login identifier.

    The chat core treats users as read-only lookups: it resolves
    participants by id and exposes {id, name, profilePicture, gender}
    to other participants.

    Fields:
        id: UUID primary key (also the JWT subject)
        email: Login identifier, unique
        name: Display name
        profile_picture: Avatar reference (URL or storage path)
        gender: One of Gender
        date_of_birth: Optional birth date
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email="user@example.com",
            password="securepassword",
            name="Jane",
        )
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this user",
    )

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (login identifier)",
    )

    name = models.CharField(
        max_length=150,
        blank=True,
        default="",
        help_text="Display name shown to other users",
    )

    profile_picture = models.CharField(
        max_length=500,
        blank=True,
        default="",
        help_text="Avatar reference (URL or storage path)",
    )

    gender = models.CharField(
        max_length=10,
        choices=Gender.choices,
        default=Gender.OTHER,
        help_text="Gender shown on the public profile",
    )

    date_of_birth = models.DateField(
        null=True,
        blank=True,
        help_text="Optional date of birth",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        """Return the user's email as string representation."""
        return self.email

    def get_full_name(self):
        """Return the display name, falling back to the email."""
        return self.name or self.email

    def get_short_name(self):
        """Return the display name or the email local part."""
        return self.name or self.email.split("@")[0]
