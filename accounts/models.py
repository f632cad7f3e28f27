"""
Accounts Models - Platform users

A single User model carries both sides of the marketplace:
- gestionnaire: property manager posting emergencies
- artisan: tradesperson bidding on them
- admin: platform staff verifying and certifying accounts

Users are never hard-deleted; deactivation goes through `is_active`.
"""

import uuid
from decimal import Decimal
from typing import Optional

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """Manager for email-identified users."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email address must be set')
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.Role.ADMIN)
        extra_fields.setdefault('is_verified', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self._create_user(email, password, **extra_fields)

    def get_by_natural_key(self, username):
        return self.get(**{f'{self.model.USERNAME_FIELD}__iexact': username})


class User(AbstractUser):
    """
    Platform user, identified by email.

    Artisans declare the trades they practise and the arrondissements they
    serve; both lists drive opportunity matching. `rating` is the average of
    the ratings received on their projects and stays null until the first one.
    """

    class Role(models.TextChoices):
        GESTIONNAIRE = 'gestionnaire', _('Gestionnaire')
        ARTISAN = 'artisan', _('Artisan')
        ADMIN = 'admin', _('Admin')

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )
    username = None
    email = models.EmailField(
        unique=True,
        db_index=True,
        help_text=_('Email address (used for login)')
    )

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.GESTIONNAIRE,
        db_index=True
    )
    phone = models.CharField(max_length=30, blank=True)
    company = models.CharField(max_length=200, blank=True)

    is_verified = models.BooleanField(
        default=False,
        help_text=_('Identity checked by platform staff')
    )
    is_certified = models.BooleanField(
        default=False,
        help_text=_('Artisan qualifications checked by platform staff')
    )

    # Artisan profile
    trades = models.JSONField(default=list, blank=True)
    arrondissements = models.JSONField(default=list, blank=True)
    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))]
    )
    completed_projects = models.PositiveIntegerField(default=0)

    avatar = models.ImageField(upload_to='avatars/', blank=True, null=True)

    # Bank details for payouts
    iban = models.CharField(max_length=34, blank=True)
    bic = models.CharField(max_length=11, blank=True)
    account_holder = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role', 'is_active'], name='accounts_user_role_active_idx'),
        ]

    def __str__(self):
        return self.email

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.email

    @property
    def is_gestionnaire(self) -> bool:
        return self.role == self.Role.GESTIONNAIRE

    @property
    def is_artisan(self) -> bool:
        return self.role == self.Role.ARTISAN

    @property
    def is_platform_admin(self) -> bool:
        return self.role == self.Role.ADMIN or self.is_superuser

    def serves(self, trade: str, arrondissement: int) -> bool:
        """True when an emergency with this trade and location matches the artisan's profile."""
        if self.trades and trade not in self.trades:
            return False
        if self.arrondissements and arrondissement not in self.arrondissements:
            return False
        return True

    def avatar_url(self) -> Optional[str]:
        return self.avatar.url if self.avatar else None
