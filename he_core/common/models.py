# he_core/common/models.py
from __future__ import annotations

from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    `last_updated_utc` is the ordering key for every tenant list endpoint.
    """
    created_utc = models.DateTimeField(auto_now_add=True, db_index=True)
    last_updated_utc = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True


class TenantScopedModel(TimeStampedModel):
    """
    Enforces tenant partitioning at the data layer.
    Selectors/services always filter on tenant_id explicitly; nothing reads an ambient tenant.
    """
    tenant = models.ForeignKey("tenants.Tenant", on_delete=models.PROTECT, related_name="+")

    class Meta:
        abstract = True
