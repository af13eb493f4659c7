import uuid
from django.db import models


class Role(models.TextChoices):
    ADMIN = 'admin', 'Administrator'
    MANAGER = 'manager', 'Manager'
    REQUESTER = 'requester', 'Requester'
    EXECUTOR = 'executor', 'Executor'


class CredentialStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    BLOCKED = 'blocked', 'Blocked'


class Account(models.Model):
    """
    A named identity with a role. Secrets live on the paired Credential.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    # Stored trimmed and lower-cased, so uniqueness is case-insensitive
    email = models.EmailField(unique=True)
    mobile = models.CharField(max_length=20, unique=True)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.EXECUTOR,
        db_index=True,
    )
    is_active = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='created_accounts',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.email


class Credential(models.Model):
    """
    Authentication record paired 1:1 with an Account.

    reset_token_hash is only set while an activation or reset flow is
    outstanding; expired values are swept by the clear_expired_reset_tokens job.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.OneToOneField(
        Account,
        on_delete=models.CASCADE,
        related_name='credential',
    )
    password_hash = models.CharField(max_length=255, blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=CredentialStatus.choices,
        default=CredentialStatus.PENDING,
    )
    last_login = models.DateTimeField(null=True, blank=True)
    reset_token_hash = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    reset_token_expiration = models.DateTimeField(null=True, blank=True, db_index=True)
    login_attempts = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Credential for {self.account_id} ({self.status})"
