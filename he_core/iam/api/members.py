# he_core/iam/api/members.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from he_core.common.api.pagination import paginate
from he_core.common.permissions import MemberAdminPermission
from he_core.common.tenancy import require_request_tenant_id
from he_core.iam.api.serializers import InviteMemberSerializer, MembershipSerializer, SetRoleSerializer
from he_core.iam.models import Membership
from he_core.iam.services import membership as membership_service

MEMBER_NOT_FOUND_MSG = "Member not found in this tenant."


@extend_schema_view(
    list=extend_schema(tags=["Members"], responses=MembershipSerializer(many=True)),
    retrieve=extend_schema(tags=["Members"], responses=MembershipSerializer),
    create=extend_schema(tags=["Members"], request=InviteMemberSerializer, responses=MembershipSerializer),
)
class MembersViewSet(viewsets.ViewSet):
    """
    Tenant membership administration.

    Adding an email that already belongs to a user activates the seat right away;
    any other email becomes a pending invitation claimed at that person's next sign-in.
    """
    permission_classes = [MemberAdminPermission]
    serializer_class = MembershipSerializer
    queryset = Membership.objects.none()
    lookup_value_regex = r"[0-9]+"

    def _get_object(self, request, pk) -> Membership:
        tenant_id = require_request_tenant_id(request)
        try:
            return Membership.objects.get(id=int(pk), tenant_id=tenant_id)
        except (Membership.DoesNotExist, TypeError, ValueError):
            raise NotFound(MEMBER_NOT_FOUND_MSG)

    def list(self, request):
        tenant_id = require_request_tenant_id(request)
        qs = membership_service.list_members(tenant_id=tenant_id)
        return paginate(request, qs, MembershipSerializer)

    def retrieve(self, request, pk=None):
        return Response(MembershipSerializer(self._get_object(request, pk)).data)

    def create(self, request):
        tenant_id = require_request_tenant_id(request)

        s = InviteMemberSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        existing_user = get_user_model().objects.filter(email__iexact=d["email"]).first()
        if existing_user is not None:
            m = membership_service.add_existing_user_as_member(
                tenant_id=tenant_id,
                user=existing_user,
                role=d["role"],
                first_name=d["first_name"] or None,
                last_name=d["last_name"] or None,
                invited_by_id=request.user.id,
            )
        else:
            m = membership_service.invite_member(
                tenant_id=tenant_id,
                email=d["email"],
                role=d["role"],
                first_name=d["first_name"],
                last_name=d["last_name"],
                invited_by_id=request.user.id,
            )
        return Response(MembershipSerializer(m).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Members"], request=None, responses=MembershipSerializer)
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        m = self._get_object(request, pk)

        m = membership_service.deactivate_member(tenant_id=tenant_id, membership_id=m.id)
        return Response(MembershipSerializer(m).data)

    @extend_schema(tags=["Members"], request=SetRoleSerializer, responses=MembershipSerializer)
    @action(detail=True, methods=["post"], url_path="set-role")
    def set_role(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        m = self._get_object(request, pk)

        s = SetRoleSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        m = membership_service.set_role(tenant_id=tenant_id, membership_id=m.id, role=s.validated_data["role"])
        return Response(MembershipSerializer(m).data)
