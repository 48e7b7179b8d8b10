"""
Core models for the paddock record keeper: accounts, owners and horses.
"""

from django.db import models
from django.utils import timezone


class Stable(models.Model):
    """Barn or yard; logs in with the ``stable`` role and sees only its own horses."""

    name = models.CharField(max_length=200, unique=True)
    contact = models.CharField(max_length=200, null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    pin = models.CharField(max_length=32, default='1234')
    active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Vet(models.Model):
    """Veterinarian who may be assigned to horses."""

    name = models.CharField(max_length=200)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    pin = models.CharField(max_length=32, default='1234')
    active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Administrator(models.Model):
    """Practice administrator (the ``admin`` role)."""

    name = models.CharField(max_length=200)
    email = models.EmailField(null=True, blank=True)
    pin = models.CharField(max_length=32, default='0000')
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        db_table = 'core_admin'

    def __str__(self):
        return self.name


class Owner(models.Model):
    """Horse owner, optionally kept at a stable."""

    name = models.CharField(max_length=200, unique=True)
    contact = models.CharField(max_length=200, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    stable = models.ForeignKey(
        Stable,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='owners'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def active_horse_count(self):
        return self.horses.filter(active=True).count()


class Horse(models.Model):
    """Individual horse record."""

    name = models.CharField(max_length=200)
    barn_name = models.CharField(
        max_length=200, null=True, blank=True,
        help_text="Stable name shown in the grid"
    )
    owner = models.ForeignKey(
        Owner,
        on_delete=models.PROTECT,
        related_name='horses'
    )
    vet = models.ForeignKey(
        Vet,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='horses'
    )
    notes = models.TextField(null=True, blank=True)
    active = models.BooleanField(
        default=True, db_index=True,
        help_text="False once the horse is archived"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def display_name(self):
        return self.barn_name or self.name


class Session(models.Model):
    """Bearer token issued at login for one of the three roles."""

    class Role(models.TextChoices):
        VET = 'vet', 'Vet'
        STABLE = 'stable', 'Stable'
        ADMIN = 'admin', 'Admin'

    token = models.CharField(max_length=128, unique=True)
    role = models.CharField(max_length=10, choices=Role.choices)
    ref_id = models.PositiveBigIntegerField(help_text="Primary key in the role's account table")
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(db_index=True)

    class Meta:
        ordering = ['-created_at']
        db_table = 'core_api_session'

    def __str__(self):
        return f"{self.role}:{self.ref_id}"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()
