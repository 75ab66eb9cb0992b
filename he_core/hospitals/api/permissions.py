from __future__ import annotations

from he_core.common.permissions import ALL_ROLES, BaseRolePermission, ROLE_ADMIN


class HospitalPermission(BaseRolePermission):
    """
    Hospitals are tenant reference data.
      - read: every member
      - write: tenant Admin only
    """
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "by_tenant": ALL_ROLES,
        "sources": ALL_ROLES,
        "create": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "deactivate": {ROLE_ADMIN},
        "register_source": {ROLE_ADMIN},
    }
