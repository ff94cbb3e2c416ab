from django.core.management.base import BaseCommand

from clinic.models import User

DEMO_PASSWORD = "demo123456"

DEMO_SET = [
    ("patient@demo.vet", "Demo Patient", User.ROLE_PATIENT, ""),
    ("doctor@demo.vet", "Demo Doctor", User.ROLE_DOCTOR, "General Practice"),
]


class Command(BaseCommand):
    help = f"Ensure demo users exist with password={DEMO_PASSWORD} (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default=DEMO_PASSWORD, help="Password to set on every demo account.")

    def handle(self, *args, **opts):
        password = opts["password"]
        for email, name, role, specialty in DEMO_SET:
            u = User.objects.filter(email=email).first()
            if u is None:
                User.objects.create_user(email=email, password=password, name=name, role=role, specialty=specialty)
                verb = "created"
            else:
                # reset credentials, role and activation
                u.set_password(password)
                u.role = role
                u.specialty = specialty
                u.is_active = True
                u.save(update_fields=["password", "role", "specialty", "is_active", "updated_at"])
                verb = "reset"
            self.stdout.write(self.style.SUCCESS(f"{verb}: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))
