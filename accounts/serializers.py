"""
Accounts Serializers - Profiles, registration and authentication.
"""

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from core.validators import sanitize_text, validate_arrondissement_list, validate_trade_list

User = get_user_model()


def _run_django_validator(validator, value):
    try:
        validator(value)
    except DjangoValidationError as exc:
        raise serializers.ValidationError(exc.messages)
    return value


class ArtisanProfileFieldsMixin:
    """Validation shared by every serializer that writes trades/arrondissements."""

    def validate_trades(self, value):
        return _run_django_validator(validate_trade_list, value)

    def validate_arrondissements(self, value):
        return sorted(set(_run_django_validator(validate_arrondissement_list, value)))

    def validate_company(self, value):
        return sanitize_text(value)


# ==================== PROFILE SERIALIZERS ====================

class UserSummarySerializer(serializers.ModelSerializer):
    """Public view of a user, embedded in emergencies, proposals and projects."""
    full_name = serializers.CharField(source='display_name', read_only=True)
    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name',
            'phone', 'company', 'role', 'is_verified', 'is_certified',
            'trades', 'arrondissements', 'rating', 'completed_projects',
            'avatar_url',
        ]
        read_only_fields = fields

    def get_avatar_url(self, obj):
        return obj.avatar_url()


class CurrentUserSerializer(ArtisanProfileFieldsMixin, serializers.ModelSerializer):
    """
    Serializer for the authenticated user's own profile.

    Role, verification and certification flags are read-only here; platform
    admins change them through the users endpoint.
    """
    full_name = serializers.CharField(source='display_name', read_only=True)
    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name',
            'phone', 'company', 'role', 'is_verified', 'is_certified',
            'trades', 'arrondissements', 'rating', 'completed_projects',
            'avatar_url', 'iban', 'bic', 'account_holder',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'email', 'role', 'is_verified', 'is_certified',
            'rating', 'completed_projects', 'created_at', 'updated_at',
        ]

    def get_avatar_url(self, obj):
        return obj.avatar_url()


class AvatarUploadSerializer(serializers.ModelSerializer):
    avatar = serializers.ImageField(required=True)

    class Meta:
        model = User
        fields = ['avatar']


class AdminUserSerializer(CurrentUserSerializer):
    """Platform admin view: verification, certification, role and activation are writable."""

    class Meta(CurrentUserSerializer.Meta):
        fields = CurrentUserSerializer.Meta.fields + ['is_active', 'last_login']
        read_only_fields = [
            'id', 'email', 'rating', 'completed_projects',
            'created_at', 'updated_at', 'last_login',
        ]


# ==================== AUTHENTICATION SERIALIZERS ====================

class UserRegistrationSerializer(ArtisanProfileFieldsMixin, serializers.ModelSerializer):
    """
    User registration serializer with password validation.

    Only the two marketplace roles can be chosen; admin is never self-assigned.
    """
    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    role = serializers.ChoiceField(
        choices=[User.Role.GESTIONNAIRE, User.Role.ARTISAN],
        default=User.Role.GESTIONNAIRE
    )

    class Meta:
        model = User
        fields = [
            'email', 'password', 'first_name', 'last_name',
            'phone', 'company', 'role', 'trades', 'arrondissements',
        ]
        extra_kwargs = {
            'email': {'required': True, 'validators': []},
            'first_name': {'required': True},
            'last_name': {'required': True},
        }

    def validate_email(self, value):
        """Ensure email is unique, ignoring case."""
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(
                _("A user with this email already exists.")
            )
        return value

    def validate(self, attrs):
        candidate = User(
            email=attrs.get('email', ''),
            first_name=attrs.get('first_name', ''),
            last_name=attrs.get('last_name', ''),
        )
        try:
            validate_password(attrs['password'], user=candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({'password': exc.messages})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(
            password=password,
            is_verified=False,
            is_certified=False,
            **validated_data
        )


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get('request'),
            username=attrs['email'].lower(),
            password=attrs['password']
        )

        if not user:
            raise serializers.ValidationError(
                _("Unable to log in with provided credentials."),
                code='authorization'
            )

        if not user.is_active:
            raise serializers.ValidationError(
                _("User account is disabled."),
                code='authorization'
            )

        attrs['user'] = user
        return attrs


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=True)
