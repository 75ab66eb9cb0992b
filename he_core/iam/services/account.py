# he_core/iam/services/account.py
from __future__ import annotations

import logging
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.timezone import now

from he_core.iam.models import Account, MemberRole, Membership
from he_core.iam.services.membership import normalize_email
from he_core.tenants.services import TenantService

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = (
    "email",
    "organization",
    "organization_type",
    "organization_phone",
    "address1",
    "address2",
    "city",
    "county",
    "state",
    "postal_code",
)


def get_account(*, user_id: int) -> Optional[Account]:
    return Account.objects.select_related("tenant").filter(user_id=user_id).first()


def organization_name_for_tenant(*, tenant_id: int) -> Optional[str]:
    return Account.objects.filter(tenant_id=tenant_id).values_list("organization", flat=True).first()


@transaction.atomic
def setup_account(*, user, organization: str, tenant_code: str = "", **profile) -> Account:
    """
    First-run bootstrap: Account + Tenant + the owner's Admin membership, all or nothing.
    """
    unknown = set(profile) - set(ACCOUNT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown account fields: {sorted(unknown)}")

    if Account.objects.filter(user_id=user.id).exists():
        raise ValidationError("Account already exists for this user.")

    organization = (organization or "").strip()
    if not organization:
        raise ValidationError({"organization": "This field is required."})

    email = normalize_email(profile.get("email") or user.email)
    if not email:
        raise ValidationError({"email": "An email address is required."})
    profile["email"] = email

    tenant = TenantService.create(name=organization, code=tenant_code)

    account = Account(user=user, tenant=tenant, organization=organization, **profile)
    account.full_clean(exclude=["user", "tenant"], validate_unique=False)
    account.save()

    ts = now()
    Membership.objects.create(
        tenant=tenant,
        user=user,
        email=email,
        role=MemberRole.ADMIN,
        is_active=True,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        invited_at=ts,
        activated_at=ts,
    )

    logger.info("Account set up user=%s tenant=%s", user.id, tenant.id)
    return account


@transaction.atomic
def update_account(*, user_id: int, **fields) -> Account:
    unknown = set(fields) - set(ACCOUNT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown account fields: {sorted(unknown)}")

    account = Account.objects.select_for_update().get(user_id=user_id)

    changed = []
    for name, value in fields.items():
        if value is None:
            continue
        if name == "email":
            value = normalize_email(value)
        if getattr(account, name) != value:
            setattr(account, name, value)
            changed.append(name)

    if not changed:
        return account

    account.full_clean(exclude=["user", "tenant"], validate_unique=False)
    account.save(update_fields=[*changed, "last_updated_utc"])
    logger.info("Account updated user=%s fields=%s", user_id, ",".join(changed))
    return account
