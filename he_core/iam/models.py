# he_core/iam/models.py
from django.conf import settings
from django.db import models

from he_core.common.models import TenantScopedModel, TimeStampedModel


class MemberRole(models.TextChoices):
    ADMIN = "Admin", "Admin"
    MEMBER = "Member", "Member"


class Membership(TenantScopedModel):
    """
    A person's seat in a tenant.

    Invitations are created by email with no user and is_active=False; the row is
    bound to a user and activated when that person signs in.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
        null=True,
        blank=True,
    )
    email = models.EmailField()
    role = models.CharField(max_length=16, choices=MemberRole.choices, default=MemberRole.MEMBER)
    is_active = models.BooleanField(default=False, db_index=True)

    first_name = models.CharField(max_length=128, blank=True, default="")
    last_name = models.CharField(max_length=128, blank=True, default="")

    invited_at = models.DateTimeField(null=True, blank=True)
    activated_at = models.DateTimeField(null=True, blank=True)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "iam_membership"
        constraints = [
            models.UniqueConstraint(fields=["tenant", "email"], name="uq_membership_tenant_email"),
        ]
        indexes = [
            models.Index(fields=["user", "is_active"]),
            models.Index(fields=["email", "is_active"]),
        ]

    @property
    def member_key(self) -> int:
        return self.pk

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email

    def __str__(self) -> str:
        return f"{self.email} @ {self.tenant_id} ({self.role})"


class Account(TimeStampedModel):
    """
    Organization profile owned by the user who set the tenant up.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="account")
    tenant = models.OneToOneField(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="account",
        null=True,
        blank=True,
    )

    email = models.EmailField(blank=True, default="")
    organization = models.CharField(max_length=200)
    organization_type = models.CharField(max_length=64, blank=True, default="")
    organization_phone = models.CharField(max_length=32, blank=True, default="")

    address1 = models.CharField(max_length=255, blank=True, default="")
    address2 = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=128, blank=True, default="")
    county = models.CharField(max_length=128, blank=True, default="")
    state = models.CharField(max_length=64, blank=True, default="")
    postal_code = models.CharField(max_length=16, blank=True, default="")

    class Meta:
        db_table = "iam_account"

    def __str__(self) -> str:
        return self.organization
