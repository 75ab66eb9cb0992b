# he_core/iam/services/membership.py
from __future__ import annotations

import logging
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils.timezone import now

from he_core.iam.models import MemberRole, Membership

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _check_role(role: str) -> None:
    if role not in MemberRole.values:
        raise ValidationError({"role": f"'{role}' is not a valid role. Allowed: {MemberRole.values}"})


# ---------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------
def get_active_membership(*, user_id: int, tenant_id: int) -> Optional[Membership]:
    """
    Single source of truth for "may this user act in this tenant".
    """
    return (
        Membership.objects.filter(user_id=user_id, tenant_id=tenant_id, is_active=True, tenant__is_active=True)
        .only("id", "role", "tenant_id", "user_id")
        .first()
    )


def is_member_of_tenant(*, tenant_id: int, email: Optional[str] = None, user_id: Optional[int] = None) -> bool:
    """
    By email: any membership row, pending or active (blocks duplicate invites).
    By user: active memberships only.
    """
    if user_id is not None:
        return get_active_membership(user_id=user_id, tenant_id=tenant_id) is not None
    return Membership.objects.filter(tenant_id=tenant_id, email=normalize_email(email)).exists()


def list_members(*, tenant_id: int, include_inactive: bool = True) -> QuerySet[Membership]:
    qs = Membership.objects.filter(tenant_id=tenant_id).select_related("user")
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("-is_active", "last_name", "first_name", "email")


def user_tenant_options(user) -> list[dict]:
    """
    Tenants the user can pick from: active memberships plus invitations waiting for them.
    """
    email = normalize_email(getattr(user, "email", ""))

    cond = Q(user_id=user.id, is_active=True)
    if email:
        cond |= Q(email=email, is_active=False, user__isnull=True)

    qs = (
        Membership.objects.filter(cond, tenant__is_active=True)
        .select_related("tenant")
        .order_by("tenant__tenant_name", "tenant_id")
    )

    items: list[dict] = []
    for m in qs:
        items.append(
            {
                "tenant_key": m.tenant_id,
                "tenant_code": m.tenant.tenant_code,
                "tenant_name": m.tenant.tenant_name,
                "member_key": m.id,
                "role": m.role,
                "is_active": m.is_active,
                "pending": not m.is_active,
            }
        )
    return items


# ---------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------
@transaction.atomic
def invite_member(
    *,
    tenant_id: int,
    email: str,
    role: str = MemberRole.MEMBER,
    first_name: str = "",
    last_name: str = "",
    invited_by_id: Optional[int] = None,
) -> Membership:
    email = normalize_email(email)
    if not email:
        raise ValidationError({"email": "This field is required."})
    _check_role(role)

    if is_member_of_tenant(tenant_id=tenant_id, email=email):
        raise ValidationError("User is already a member or has been invited.")

    m = Membership.objects.create(
        tenant_id=tenant_id,
        email=email,
        role=role,
        is_active=False,
        first_name=first_name or "",
        last_name=last_name or "",
        invited_at=now(),
        invited_by_id=invited_by_id,
    )
    logger.info("Member invited tenant=%s member=%s role=%s", tenant_id, m.id, role)
    return m


@transaction.atomic
def add_existing_user_as_member(
    *,
    tenant_id: int,
    user,
    role: str = MemberRole.MEMBER,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    invited_by_id: Optional[int] = None,
) -> Membership:
    email = normalize_email(user.email)
    if not email:
        raise ValidationError({"email": "User has no email address."})
    _check_role(role)

    if is_member_of_tenant(tenant_id=tenant_id, email=email) or Membership.objects.filter(
        tenant_id=tenant_id, user_id=user.id
    ).exists():
        raise ValidationError("User is already a member.")

    ts = now()
    m = Membership.objects.create(
        tenant_id=tenant_id,
        user=user,
        email=email,
        role=role,
        is_active=True,
        first_name=first_name if first_name is not None else (user.first_name or ""),
        last_name=last_name if last_name is not None else (user.last_name or ""),
        invited_at=ts,
        activated_at=ts,
        invited_by_id=invited_by_id,
    )
    logger.info("Member added tenant=%s member=%s user=%s role=%s", tenant_id, m.id, user.id, role)
    return m


@transaction.atomic
def activate_member(
    *,
    tenant_id: int,
    email: str,
    user,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> Membership:
    m = (
        Membership.objects.select_for_update()
        .filter(tenant_id=tenant_id, email=normalize_email(email))
        .first()
    )
    if m is None:
        raise ValidationError("Member invitation not found.")
    if m.user_id is not None and m.user_id != user.id:
        raise ValidationError("Invitation has already been claimed by another user.")

    m.user = user
    m.is_active = True
    m.activated_at = now()
    if first_name is not None:
        m.first_name = first_name
    if last_name is not None:
        m.last_name = last_name
    # fill names from the user profile when the invite had none
    if not m.first_name and user.first_name:
        m.first_name = user.first_name
    if not m.last_name and user.last_name:
        m.last_name = user.last_name

    m.save()
    logger.info("Member activated tenant=%s member=%s user=%s", tenant_id, m.id, user.id)
    return m


def activate_pending_invitations(user) -> list[int]:
    """
    Claims every pending invitation addressed to the user's email.
    Returns the tenant keys that were activated.
    """
    email = normalize_email(getattr(user, "email", ""))
    if not email:
        return []

    pending = list(
        Membership.objects.filter(email=email, is_active=False, user__isnull=True)
        .order_by("tenant_id")
        .values_list("tenant_id", flat=True)
    )

    activated: list[int] = []
    for tenant_id in pending:
        activate_member(tenant_id=tenant_id, email=email, user=user)
        activated.append(tenant_id)
    return activated


def _ensure_not_last_admin(m: Membership) -> None:
    if m.role != MemberRole.ADMIN or not m.is_active:
        return
    others = (
        Membership.objects.filter(tenant_id=m.tenant_id, role=MemberRole.ADMIN, is_active=True)
        .exclude(id=m.id)
        .exists()
    )
    if not others:
        raise ValidationError("A tenant must keep at least one active Admin.")


@transaction.atomic
def deactivate_member(*, tenant_id: int, membership_id: int) -> Membership:
    m = Membership.objects.select_for_update().get(id=membership_id, tenant_id=tenant_id)
    if not m.is_active and m.user_id is None:
        # pending invite: deactivating revokes it
        m.delete()
        m.is_active = False
        return m
    if not m.is_active:
        return m

    _ensure_not_last_admin(m)
    m.is_active = False
    m.save(update_fields=["is_active", "last_updated_utc"])
    logger.info("Member deactivated tenant=%s member=%s", tenant_id, m.id)
    return m


@transaction.atomic
def set_role(*, tenant_id: int, membership_id: int, role: str) -> Membership:
    _check_role(role)
    m = Membership.objects.select_for_update().get(id=membership_id, tenant_id=tenant_id)
    if m.role == role:
        return m
    if role != MemberRole.ADMIN:
        _ensure_not_last_admin(m)

    m.role = role
    m.save(update_fields=["role", "last_updated_utc"])
    logger.info("Member role changed tenant=%s member=%s role=%s", tenant_id, m.id, role)
    return m
