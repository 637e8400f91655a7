# clinic/management/commands/ensure_admin.py
from django.conf import settings
from django.core.management.base import BaseCommand

from clinic.models import Role, User


class Command(BaseCommand):
    help = "Ensure the configured admin account exists (ADMIN_EMAIL / ADMIN_USERNAME / ADMIN_PASSWORD). Idempotent."

    def add_arguments(self, parser):
        parser.add_argument("--reset-password", action="store_true",
                            help="Reset the password of an existing admin to ADMIN_PASSWORD.")

    def handle(self, *args, **opts):
        email = settings.ADMIN_EMAIL.lower()
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            User.objects.create_superuser(
                username=settings.ADMIN_USERNAME,
                email=email,
                password=settings.ADMIN_PASSWORD,
                name="Admin User",
                role=Role.ADMIN,
            )
            self.stdout.write(self.style.SUCCESS(f"created: {email} (admin)"))
            return

        fields = []
        if user.role != Role.ADMIN:
            user.role = Role.ADMIN
            fields.append("role")
        if not user.is_active:
            user.is_active = True
            fields.append("is_active")
        if opts["reset_password"]:
            user.set_password(settings.ADMIN_PASSWORD)
            fields.append("password")
        if fields:
            user.save(update_fields=fields)
        self.stdout.write(self.style.SUCCESS(f"ok: {email} (admin){' updated ' + ', '.join(fields) if fields else ''}"))
