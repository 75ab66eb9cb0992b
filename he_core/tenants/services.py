# he_core/tenants/services.py
from __future__ import annotations

import logging

from django.db import transaction
from django.utils.text import slugify
from rest_framework.exceptions import ValidationError

from he_core.tenants.models import Tenant

logger = logging.getLogger(__name__)


class TenantService:
    """
    All Tenant mutations live here (write-model boundary).
    """

    @staticmethod
    @transaction.atomic
    def create(*, name: str, code: str = "") -> Tenant:
        name = (name or "").strip()
        code = (code or "").strip() or slugify(name)[:64]

        if not name:
            raise ValidationError({"tenant_name": "This field is required."})
        if not code:
            raise ValidationError({"tenant_code": "This field is required."})
        if Tenant.objects.filter(tenant_code=code).exists():
            raise ValidationError({"tenant_code": "A tenant with this code already exists."})

        obj = Tenant.objects.create(tenant_name=name, tenant_code=code, is_active=True)
        logger.info("Tenant created key=%s code=%s", obj.id, obj.tenant_code)
        return obj

    @staticmethod
    @transaction.atomic
    def set_active(*, tenant_id: int, is_active: bool) -> Tenant:
        t = Tenant.objects.select_for_update().get(id=tenant_id)

        # idempotent no-op
        if t.is_active == is_active:
            return t

        t.is_active = is_active
        t.save(update_fields=["is_active", "last_updated_utc"])
        logger.info("Tenant key=%s is_active=%s", t.id, is_active)
        return t
