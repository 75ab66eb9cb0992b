# he_core/iam/api/me.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from he_core.iam.api.serializers import ActivatedInvitationsSerializer, TenantOptionSerializer
from he_core.iam.services.membership import activate_pending_invitations, user_tenant_options


class MyTenantsView(APIView):
    """
    Tenants the caller can switch into: active memberships plus pending invitations.
    No tenant header is needed here.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: TenantOptionSerializer(many=True)}, tags=["Me"])
    def get(self, request):
        items = user_tenant_options(request.user)
        return Response(TenantOptionSerializer(items, many=True).data, status=status.HTTP_200_OK)


class ActivateInvitationsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: ActivatedInvitationsSerializer}, tags=["Me"])
    def post(self, request):
        activated = activate_pending_invitations(request.user)
        return Response({"activated_tenant_keys": activated}, status=status.HTTP_200_OK)
