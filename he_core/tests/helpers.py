# he_core/tests/helpers.py

def scoped(tenant):
    return {"HTTP_X_TENANT_ID": str(tenant.id)}
