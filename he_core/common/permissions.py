# he_core/common/permissions.py

from __future__ import annotations

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission, SAFE_METHODS

from he_core.common.tenancy import resolve_view_tenant_id

# Membership roles (stored on iam.Membership.role)
ROLE_ADMIN = "Admin"
ROLE_MEMBER = "Member"

ALL_ROLES = {ROLE_ADMIN, ROLE_MEMBER}

NO_TENANT_ACCESS_MSG = "You do not have access to this tenant."


def tenant_role_for(user, tenant_id: int) -> str | None:
    """
    Role of `user` inside `tenant_id`, or None when not an active member.
    Staff/superusers act as tenant admins in every existing, active tenant.
    """
    if getattr(user, "is_superuser", False) or getattr(user, "is_staff", False):
        from he_core.tenants.models import Tenant

        return ROLE_ADMIN if Tenant.objects.filter(id=tenant_id, is_active=True).exists() else None

    from he_core.iam.services.membership import get_active_membership

    membership = get_active_membership(user_id=user.id, tenant_id=tenant_id)
    return membership.role if membership else None


class BaseRolePermission(BasePermission):
    """
    Tenant-scoped role-based access control.

    Key behavior:
    - Resolves the tenant (header -> JWT claim -> tenantKey query -> route/body) and attaches
      request.tenant_id / request.tenant_role for the view.
    - Missing tenant is a 400, non-member is a 403.
    - Uses allowed_roles_per_action; unknown SAFE actions fall back to list/retrieve.
    """
    message = "You do not have permission to perform this action."

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        tenant_id = resolve_view_tenant_id(request, view)
        role = tenant_role_for(user, tenant_id)
        if role is None:
            raise PermissionDenied(NO_TENANT_ACCESS_MSG)

        request.tenant_id = tenant_id
        request.tenant_role = role

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            read_action = "retrieve" if "pk" in kwargs else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is not None:
            return role in allowed

        # Unknown action => deny by default
        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return getattr(obj, "tenant_id", None) == getattr(request, "tenant_id", None)


class TenantDataPermission(BaseRolePermission):
    """Patients, encounters, hospitals, audit: any member reads and writes feed data."""
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "by_tenant": ALL_ROLES,
        "by_patient": ALL_ROLES,
        "upsert": ALL_ROLES,
        "create": ALL_ROLES,
    }


class CareTransitionPermission(BaseRolePermission):
    """Care coordination is open to every member; closing is too (UI has no extra gate)."""
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "metrics": ALL_ROLES,
        "log_outreach": ALL_ROLES,
        "assign": ALL_ROLES,
        "update_priority": ALL_ROLES,
        "schedule_outreach": ALL_ROLES,
        "close": ALL_ROLES,
        "summary": ALL_ROLES,
    }


class MemberAdminPermission(BaseRolePermission):
    """Membership administration: members may list, only admins change anything."""
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "create": {ROLE_ADMIN},
        "deactivate": {ROLE_ADMIN},
        "set_role": {ROLE_ADMIN},
    }
