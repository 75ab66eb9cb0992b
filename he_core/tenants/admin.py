# he_core/tenants/admin.py
from django.contrib import admin

from he_core.tenants.models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("id", "tenant_name", "tenant_code", "is_active", "created_utc")
    list_filter = ("is_active", "created_utc")
    search_fields = ("tenant_name", "tenant_code")
    ordering = ("-created_utc",)
    readonly_fields = ("id", "created_utc", "last_updated_utc")
