"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Custom User model with the two billing roles. Administrators
             manage every household; regular users act only for the
             household (Mahal ID) they own.
-------------------------------------------------------------------------
"""
import uuid
from typing import Optional

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import RegexValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


mahal_id_validator = RegexValidator(
    regex=r'^\d+/\d+$',
    message=_('Mahal ID must be in format: number/number (e.g., 1/2).')
)


class UserRole(models.TextChoices):
    """Roles recognised by the billing core."""

    ADMIN = 'admin', _('Administrator')
    USER = 'user', _('Member')


class CustomUserManager(BaseUserManager):
    """
    Custom manager for CustomUser model.

    Provides methods to create regular users and superusers with
    proper validation of required fields.
    """

    def create_user(
        self,
        email: str,
        password: Optional[str] = None,
        **extra_fields
    ) -> 'CustomUser':
        """
        Create and return a regular user.

        Args:
            email: User's email address (login identifier).
            password: User's password.
            **extra_fields: Additional fields for the user model.

        Returns:
            The created CustomUser instance.

        Raises:
            ValueError: If email is not provided.
        """
        if not email:
            raise ValueError(_('Email is required for user creation.'))

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(
        self,
        email: str,
        password: Optional[str] = None,
        **extra_fields
    ) -> 'CustomUser':
        """Create and return a superuser with the admin role."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    """
    Custom User model for the KMJ Billing System.

    Uses email as the unique identifier instead of username.

    Attributes:
        email: Login identifier.
        role: admin or user.
        mahal_id: Household the user owns (blank for administrators).
        phone: Contact phone number.
    """

    username = None

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        db_index=True,
        verbose_name=_('Public ID'),
        help_text=_('Unique UUID for external reference.')
    )
    email = models.EmailField(
        unique=True,
        verbose_name=_('Email Address')
    )
    role = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        default=UserRole.USER,
        verbose_name=_('Role')
    )
    mahal_id = models.CharField(
        max_length=20,
        blank=True,
        validators=[mahal_id_validator],
        db_index=True,
        verbose_name=_('Mahal ID'),
        help_text=_('Household owned by this user, e.g. 5/10.')
    )
    phone = models.CharField(
        max_length=20,
        blank=True,
        verbose_name=_('Phone Number')
    )

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['first_name', 'last_name']

    def __str__(self) -> str:
        return f"{self.get_full_name() or self.email} ({self.get_role_display()})"

    def get_full_name(self) -> str:
        """Return the user's full name."""
        return f"{self.first_name} {self.last_name}".strip()

    def is_admin(self) -> bool:
        """Administrators and superusers may act on any household."""
        return self.is_superuser or self.role == UserRole.ADMIN

    def can_access_household(self, mahal_id: str) -> bool:
        """
        Check if the user may read or bill the given household.

        Args:
            mahal_id: Household identifier (ward/house).

        Returns:
            True for administrators or the owning user.
        """
        if self.is_admin():
            return True
        return bool(self.mahal_id) and self.mahal_id == mahal_id
