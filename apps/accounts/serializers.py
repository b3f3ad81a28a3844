from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password

from .services import UserProfile

LOGIN_REGEX = r'^[_.@A-Za-z0-9-]+$'


class UserProfileSerializer(serializers.Serializer):
    """Projected view of an account, used for display and administration."""

    id = serializers.UUIDField(required=False, allow_null=True)
    login = serializers.RegexField(LOGIN_REGEX, max_length=50)
    email = serializers.EmailField(max_length=254)
    first_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    last_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    image_url = serializers.CharField(max_length=256, required=False, allow_blank=True, default='')
    lang_key = serializers.CharField(max_length=10, required=False, allow_blank=True, allow_null=True, default=None)
    activated = serializers.BooleanField(required=False, default=False)
    authorities = serializers.ListField(
        child=serializers.CharField(max_length=50),
        required=False,
        default=list,
    )
    created_date = serializers.DateTimeField(read_only=True)
    last_modified_date = serializers.DateTimeField(read_only=True)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['authorities'] = sorted(data['authorities'])
        return data

    def to_profile(self) -> UserProfile:
        """Build a UserProfile from validated data."""
        data = self.validated_data
        return UserProfile(
            id=data.get('id'),
            login=data['login'],
            email=data['email'],
            first_name=data.get('first_name', ''),
            last_name=data.get('last_name', ''),
            image_url=data.get('image_url', ''),
            lang_key=data.get('lang_key'),
            activated=data.get('activated', False),
            authorities=set(data.get('authorities', [])),
        )


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for self-registration."""

    login = serializers.RegexField(LOGIN_REGEX, max_length=50)
    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(
        write_only=True,
        required=True,
        max_length=100,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    first_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    last_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    image_url = serializers.CharField(max_length=256, required=False, allow_blank=True, default='')
    lang_key = serializers.CharField(max_length=10, required=False, allow_blank=True, default='')


class AccountUpdateSerializer(serializers.Serializer):
    """Serializer for the current user's basic profile."""

    first_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    last_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    email = serializers.EmailField(max_length=254)
    lang_key = serializers.CharField(max_length=10, required=False, allow_blank=True, default='')
    image_url = serializers.CharField(max_length=256, required=False, allow_blank=True, default='')


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    login = serializers.CharField(required=True, max_length=50)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class PasswordChangeSerializer(serializers.Serializer):
    """Serializer for changing the current user's password."""

    new_password = serializers.CharField(
        required=True,
        max_length=100,
        validators=[validate_password],
        style={'input_type': 'password'}
    )


class PasswordResetRequestSerializer(serializers.Serializer):
    """Serializer for password reset request."""

    email = serializers.EmailField(required=True)


class PasswordResetFinishSerializer(serializers.Serializer):
    """Serializer for password reset completion."""

    key = serializers.CharField(required=True, max_length=20)
    new_password = serializers.CharField(
        required=True,
        max_length=100,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
