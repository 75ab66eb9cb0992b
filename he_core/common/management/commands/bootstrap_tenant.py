from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from he_core.iam.models import MemberRole, Membership
from he_core.tenants.models import Tenant
from he_core.tenants.services import TenantService


class Command(BaseCommand):
    help = "Ensure a tenant exists and the given user is an active Admin in it (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("tenant_code")
        parser.add_argument("--name", default="", help="Tenant name when the tenant is created.")
        parser.add_argument("--admin", dest="admin_username", required=True, help="Username to grant Admin.")

    @transaction.atomic
    def handle(self, *args, **options):
        code = options["tenant_code"]
        User = get_user_model()

        try:
            user = User.objects.get(**{User.USERNAME_FIELD: options["admin_username"]})
        except User.DoesNotExist:
            raise CommandError(f"User '{options['admin_username']}' does not exist.")
        if not user.email:
            raise CommandError("Admin user needs an email address.")

        tenant = Tenant.objects.filter(tenant_code=code).first()
        if tenant is None:
            tenant = TenantService.create(name=options["name"] or code, code=code)
            self.stdout.write(f"Created tenant {tenant.tenant_code} (key={tenant.id})")

        m, created = Membership.objects.update_or_create(
            tenant=tenant,
            email=user.email.lower(),
            defaults={"user": user, "role": MemberRole.ADMIN, "is_active": True},
        )

        self.stdout.write(
            self.style.SUCCESS(
                f"{'Added' if created else 'Ensured'} Admin {user.get_username()} in tenant key={tenant.id}"
            )
        )
