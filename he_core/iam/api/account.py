# he_core/iam/api/account.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from he_core.iam.api.serializers import AccountSerializer, AccountSetupSerializer, AccountUpdateSerializer
from he_core.iam.services.account import get_account, setup_account, update_account

ACCOUNT_NOT_FOUND_MSG = "Account not set up."


class AccountView(APIView):
    """
    The caller's organization profile.
    POST bootstraps Account + Tenant + Admin membership; PATCH edits the profile.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: AccountSerializer}, tags=["Account"])
    def get(self, request):
        account = get_account(user_id=request.user.id)
        if account is None:
            raise NotFound(ACCOUNT_NOT_FOUND_MSG)
        return Response(AccountSerializer(account).data)

    @extend_schema(request=AccountSetupSerializer, responses={201: AccountSerializer}, tags=["Account"])
    def post(self, request):
        ser = AccountSetupSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        account = setup_account(user=request.user, **ser.validated_data)
        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AccountUpdateSerializer, responses={200: AccountSerializer}, tags=["Account"])
    def patch(self, request):
        if get_account(user_id=request.user.id) is None:
            raise NotFound(ACCOUNT_NOT_FOUND_MSG)

        ser = AccountUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        update_account(user_id=request.user.id, **ser.validated_data)
        return Response(AccountSerializer(get_account(user_id=request.user.id)).data)
