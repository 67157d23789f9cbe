"""
Management command to populate the database with demo surveillance data.

Creates a roster of students spread across hostels and a few weeks of
random health logs so the analytics endpoints have something to show.
One hostel is deliberately over-reported so an outbreak alert fires.
"""
import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from clinic.models import HealthLog, StudentProfile, User

HOSTELS = ['Hostel A', 'Hostel B', 'Hostel C', 'Hostel D']
SYMPTOMS = ['fever', 'cough', 'headache', 'sore throat', 'fatigue', 'nausea', 'body ache']
FEELINGS = ['good', 'okay', 'unwell', 'sick']
SEVERITIES = ['mild', 'moderate', 'severe']


class Command(BaseCommand):
    help = 'Populate database with demo students and health logs'

    def add_arguments(self, parser):
        parser.add_argument('--students', type=int, default=20, help='students per hostel')
        parser.add_argument('--days', type=int, default=30, help='how far back logs go')
        parser.add_argument('--seed', type=int, default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        rng = random.Random(options['seed'])
        students = self.create_students(options['students'])
        created = self.create_logs(rng, students, options['days'])
        self.stdout.write(self.style.SUCCESS(
            f'{len(students)} students, {created} health logs across {len(HOSTELS)} hostels'
        ))

    def create_students(self, per_hostel):
        students = []
        for h, hostel in enumerate(HOSTELS):
            for i in range(per_hostel):
                reg = f'S{h + 1:02d}{i + 1:04d}'
                email = f'{reg.lower()}@campus.edu'
                user, created = User.objects.get_or_create(
                    email=email, defaults={'username': email, 'role': User.ROLE_STUDENT},
                )
                if created:
                    user.set_password('123456')
                    user.save(update_fields=['password'])
                profile, _ = StudentProfile.objects.get_or_create(
                    user=user,
                    defaults={'registration_number': reg, 'name': f'Student {reg}', 'hostel': hostel},
                )
                students.append(profile)
        return students

    def create_logs(self, rng, students, days):
        now = timezone.now()
        logs = []
        for student in students:
            # The first hostel reports far more often, enough to cross the alert threshold
            chance = 0.5 if student.hostel == HOSTELS[0] else 0.1
            for _ in range(rng.randint(1, 4)):
                unwell = rng.random() < chance
                logs.append(HealthLog(
                    student=student,
                    hostel=student.hostel,
                    feeling=rng.choice(FEELINGS[2:] if unwell else FEELINGS[:2]),
                    symptoms=rng.sample(SYMPTOMS, rng.randint(1, 3)) if unwell else [],
                    severity=rng.choice(SEVERITIES),
                ))
        HealthLog.objects.bulk_create(logs)
        # auto_now_add ignores explicit values; spread the timestamps afterwards
        for log in logs:
            offset = timedelta(days=rng.randint(0, max(days, 1) - 1), hours=rng.randint(0, 23))
            HealthLog.objects.filter(pk=log.pk).update(created_at=now - offset)
        return len(logs)
