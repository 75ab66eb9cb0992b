# he_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from he_core.iam.models import Account, Membership


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ("email", "tenant", "user", "role", "is_active", "invited_at", "activated_at")
    list_filter = ("tenant", "role", "is_active")
    search_fields = ("email", "first_name", "last_name", "user__username")
    raw_id_fields = ("user", "invited_by")
    ordering = ("tenant", "email")


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("organization", "user", "tenant", "organization_type", "state", "created_utc")
    search_fields = ("organization", "email", "user__username")
    raw_id_fields = ("user",)
    ordering = ("organization",)
