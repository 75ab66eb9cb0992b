# he_core/tenants/models.py
from django.db import models


class Tenant(models.Model):
    """
    Top-level customer organization.
    Root of all partitioning in the system; its integer key is the `tenant_key` clients send.
    NOT a TenantScopedModel (it *is* the tenant).
    """

    tenant_code = models.SlugField(max_length=64, unique=True)
    tenant_name = models.CharField(max_length=200)

    is_active = models.BooleanField(default=True, db_index=True)

    created_utc = models.DateTimeField(auto_now_add=True, db_index=True)
    last_updated_utc = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "tenants_tenant"

    @property
    def tenant_key(self) -> int:
        return self.pk

    def __str__(self) -> str:
        return f"{self.tenant_name} ({self.tenant_code})"
