# he_core/iam/auth.py
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken

from he_core.common.tenancy import TENANT_CLAIM


class TenantJWTAuthentication(JWTAuthentication):
    """
    Bearer JWT authentication.

    The validated token stays on request.auth so the tenant resolver can read the
    `tenant_id` claim; membership in that tenant is enforced by the permission layer.
    """

    def authenticate(self, request):
        auth_result = super().authenticate(request)
        if auth_result is None:
            return None

        user, token = auth_result
        tenant_id = token.get(TENANT_CLAIM)
        if tenant_id not in (None, ""):
            try:
                valid = int(tenant_id) > 0
            except (TypeError, ValueError):
                valid = False
            if not valid:
                raise InvalidToken("Token has an invalid tenant claim.")

        return user, token
