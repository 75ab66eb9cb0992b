from drf_spectacular.extensions import OpenApiAuthenticationExtension


class TenantJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    target_class = "he_core.iam.auth.TenantJWTAuthentication"
    name = "BearerJWT"

    def get_security_definition(self, auto_schema):
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": (
                "Send the access token via `Authorization: Bearer <token>`. "
                "Tokens issued for a tenant carry a `tenant_id` claim."
            ),
        }
