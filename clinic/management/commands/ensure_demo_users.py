# clinic/management/commands/ensure_demo_users.py
from django.core.management.base import BaseCommand
from django.db import transaction

from clinic.models import AdminProfile, DoctorProfile, StudentProfile, User

DEMO_PASSWORD = "123456"

DEMO_SET = [
    ("student@campus.edu", User.ROLE_STUDENT),
    ("doctor@campus.edu", User.ROLE_DOCTOR),
    ("admin@campus.edu", User.ROLE_ADMIN),
]


class Command(BaseCommand):
    help = "Ensure one demo user per role exists with password=123456 (idempotent)."

    @transaction.atomic
    def handle(self, *args, **opts):
        for email, role in DEMO_SET:
            u, created = User.objects.get_or_create(
                email=email,
                defaults={"username": email, "role": role, "is_active": True},
            )
            u.set_password(DEMO_PASSWORD)
            u.role = role
            u.is_active = True
            u.save(update_fields=["password", "role", "is_active"])
            self._ensure_profile(u)
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role}{', created' if created else ''})"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))

    def _ensure_profile(self, user):
        if user.role == User.ROLE_STUDENT:
            StudentProfile.objects.get_or_create(
                user=user,
                defaults={"registration_number": "DEMO-0001", "name": "Demo Student", "hostel": "Hostel A"},
            )
        elif user.role == User.ROLE_DOCTOR:
            DoctorProfile.objects.get_or_create(
                user=user,
                defaults={"name": "Dr. Demo", "qualification": "MBBS", "available_timings": "09:00-17:00"},
            )
        else:
            AdminProfile.objects.get_or_create(user=user, defaults={"name": "Demo Admin"})
