# he_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from he_core.common.permissions import NO_TENANT_ACCESS_MSG, tenant_role_for
from he_core.common.tenancy import TENANT_CLAIM
from he_core.iam.models import Account, MemberRole, Membership


class TenantTokenObtainSerializer(TokenObtainPairSerializer):
    """
    Username/password login. With `tenant_id` the issued tokens are bound to that tenant,
    which requires an active membership (staff may bind to any active tenant).
    """
    tenant_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    default_error_messages = {
        "no_tenant_access": NO_TENANT_ACCESS_MSG,
    }

    def validate(self, attrs):
        tenant_id = attrs.pop(TENANT_CLAIM, None)
        data = super().validate(attrs)

        if tenant_id is not None:
            if tenant_role_for(self.user, tenant_id) is None:
                raise PermissionDenied(self.error_messages["no_tenant_access"])

            refresh = self.get_token(self.user)
            refresh[TENANT_CLAIM] = tenant_id
            data["refresh"] = str(refresh)
            data["access"] = str(refresh.access_token)

        data[TENANT_CLAIM] = tenant_id
        data["username"] = self.user.get_username()
        return data


class TokenResponseSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()
    expires = serializers.DateTimeField()
    tenant_id = serializers.IntegerField(allow_null=True)
    username = serializers.CharField()


class TenantOptionSerializer(serializers.Serializer):
    tenant_key = serializers.IntegerField()
    tenant_code = serializers.CharField()
    tenant_name = serializers.CharField()
    member_key = serializers.IntegerField()
    role = serializers.CharField()
    is_active = serializers.BooleanField()
    pending = serializers.BooleanField()


class ActivatedInvitationsSerializer(serializers.Serializer):
    activated_tenant_keys = serializers.ListField(child=serializers.IntegerField())


class MembershipSerializer(serializers.ModelSerializer):
    member_key = serializers.IntegerField(source="id", read_only=True)
    tenant_key = serializers.IntegerField(source="tenant_id", read_only=True)
    user_key = serializers.IntegerField(source="user_id", read_only=True, allow_null=True)
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = Membership
        fields = [
            "member_key",
            "tenant_key",
            "user_key",
            "email",
            "first_name",
            "last_name",
            "display_name",
            "role",
            "is_active",
            "invited_at",
            "activated_at",
        ]
        read_only_fields = fields


class InviteMemberSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=MemberRole.choices, default=MemberRole.MEMBER)
    first_name = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    last_name = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")


class SetRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=MemberRole.choices)


class AccountSerializer(serializers.ModelSerializer):
    account_key = serializers.IntegerField(source="id", read_only=True)
    tenant_key = serializers.IntegerField(source="tenant_id", read_only=True, allow_null=True)
    tenant_code = serializers.CharField(source="tenant.tenant_code", read_only=True, default=None)

    class Meta:
        model = Account
        fields = [
            "account_key",
            "tenant_key",
            "tenant_code",
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
            "created_utc",
            "last_updated_utc",
        ]
        read_only_fields = fields


class AccountSetupSerializer(serializers.Serializer):
    organization = serializers.CharField(max_length=200)
    tenant_code = serializers.SlugField(max_length=64, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True)
    organization_type = serializers.CharField(max_length=64, required=False, allow_blank=True)
    organization_phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    address1 = serializers.CharField(max_length=255, required=False, allow_blank=True)
    address2 = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=128, required=False, allow_blank=True)
    county = serializers.CharField(max_length=128, required=False, allow_blank=True)
    state = serializers.CharField(max_length=64, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=16, required=False, allow_blank=True)


class AccountUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False, allow_blank=True)
    organization = serializers.CharField(max_length=200, required=False)
    organization_type = serializers.CharField(max_length=64, required=False, allow_blank=True)
    organization_phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    address1 = serializers.CharField(max_length=255, required=False, allow_blank=True)
    address2 = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=128, required=False, allow_blank=True)
    county = serializers.CharField(max_length=128, required=False, allow_blank=True)
    state = serializers.CharField(max_length=64, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=16, required=False, allow_blank=True)
