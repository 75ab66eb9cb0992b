# he_core/iam/api/auth.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import AccessToken
from rest_framework_simplejwt.utils import datetime_from_epoch

from he_core.common.tenancy import TENANT_CLAIM
from he_core.iam.api.serializers import TenantTokenObtainSerializer, TokenResponseSerializer


def _token_payload(*, access: str, refresh: str, username: str | None = None) -> dict:
    token = AccessToken(access)

    if username is None:
        user_id = token.get(jwt_settings.USER_ID_CLAIM)
        user = get_user_model().objects.filter(**{jwt_settings.USER_ID_FIELD: user_id}).first()
        username = user.get_username() if user else ""

    return {
        "access": access,
        "refresh": refresh,
        "expires": datetime_from_epoch(token["exp"]),
        "tenant_id": token.get(TENANT_CLAIM),
        "username": username,
    }


class TokenView(APIView):
    """
    Issue an access/refresh pair. Optional `tenant_id` binds both tokens to a tenant.
    """
    permission_classes = [AllowAny]

    @extend_schema(request=TenantTokenObtainSerializer, responses={200: TokenResponseSerializer}, tags=["Auth"])
    def post(self, request):
        ser = TenantTokenObtainSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        payload = _token_payload(access=data["access"], refresh=data["refresh"], username=data["username"])
        return Response(TokenResponseSerializer(payload).data, status=status.HTTP_200_OK)


class RefreshView(APIView):
    """
    Exchange a refresh token; the tenant binding carries over to the new access token.
    """
    permission_classes = [AllowAny]

    @extend_schema(request=TokenRefreshSerializer, responses={200: TokenResponseSerializer}, tags=["Auth"])
    def post(self, request):
        ser = TokenRefreshSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        access = ser.validated_data["access"]
        refresh = ser.validated_data.get("refresh", request.data.get("refresh"))

        payload = _token_payload(access=access, refresh=refresh)
        return Response(TokenResponseSerializer(payload).data, status=status.HTTP_200_OK)
