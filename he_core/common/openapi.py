# he_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter


class HEAutoSchema(AutoSchema):
    """
    Global OpenAPI improvements:

    - Adds the optional X-Tenant-Id header to tenant-scoped endpoints
    - Skips it for auth/me/account endpoints (module he_core.iam.api.*) and schema/docs views
    """

    TENANT_HEADER = OpenApiParameter(
        name="X-Tenant-Id",
        type=OpenApiTypes.INT,
        location=OpenApiParameter.HEADER,
        required=False,
        description=(
            "Tenant key. Falls back to the token's tenant_id claim, then the tenantKey query parameter."
        ),
    )

    UNSCOPED_MODULES = {
        "he_core.iam.api.auth",
        "he_core.iam.api.account",
        "he_core.iam.api.me",
        "he_core.tenants.api.views",
    }

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        if view.__class__.__name__ in {"SpectacularAPIView", "SpectacularSwaggerView", "HealthView"}:
            return True

        module = view.__class__.__module__ or ""
        return module in self.UNSCOPED_MODULES

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])

        if not self._is_unscoped_endpoint():
            existing = {p.name.lower() for p in params}
            if self.TENANT_HEADER.name.lower() not in existing:
                params.append(self.TENANT_HEADER)

        return params
