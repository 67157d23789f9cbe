"""
Database models for the campus health backend.

These models capture the records the clinic works with: users and their
role specific profiles, the daily health logs students submit,
appointments, chat messages between students and doctors, hostel
notifications and an audit trail.  Field names mirror the JSON keys the
dashboards consume so that serialisation stays a plain mapping.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model keyed by e-mail with a single role.

    Roles mirror the dashboards: 'student', 'doctor' (which covers the
    nursing staff) and 'admin'.  The username is set to the e-mail address
    on registration so Django's authentication backend can be used as is.
    """
    ROLE_STUDENT = 'student'
    ROLE_DOCTOR = 'doctor'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_STUDENT, 'Student'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_STUDENT, db_index=True)

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class StudentProfile(models.Model):
    """Student specific information.  The set of rows is the hostel roster."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='student_profile')
    registration_number = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    # Used verbatim as the grouping key for surveillance analytics
    hostel = models.CharField(max_length=100, db_index=True)
    phone_number = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.registration_number}, {self.hostel})"


class DoctorProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=20, blank=True)
    qualification = models.CharField(max_length=255, blank=True)
    available_timings = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class AdminProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='admin_profile')
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


SEVERITY_CHOICES = [
    ('mild', 'Mild'),
    ('moderate', 'Moderate'),
    ('severe', 'Severe'),
]


class HealthLog(models.Model):
    """A self-reported daily wellness entry.

    ``hostel`` is copied from the student's profile when the log is created
    so that later roster changes do not rewrite history.  Logs are never
    updated or deleted by the API.
    """
    FEELING_CHOICES = [
        ('good', 'Good'),
        ('okay', 'Okay'),
        ('unwell', 'Unwell'),
        ('sick', 'Sick'),
    ]
    student = models.ForeignKey(StudentProfile, on_delete=models.CASCADE, related_name='health_logs')
    hostel = models.CharField(max_length=100, db_index=True)
    feeling = models.CharField(max_length=10, choices=FEELING_CHOICES)
    # Distinct symptom strings in the order the student picked them
    symptoms = models.JSONField(default=list, blank=True)
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, default='mild')
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        indexes = [
            models.Index(fields=['hostel', 'created_at'], name='hlog_hostel_created_idx'),
        ]

    def __str__(self) -> str:
        return f"log {self.id} {self.hostel} {self.feeling}"


class Appointment(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    # Allowed next states; completed and cancelled are terminal
    TRANSITIONS = {
        STATUS_PENDING: {STATUS_CONFIRMED, STATUS_CANCELLED},
        STATUS_CONFIRMED: {STATUS_COMPLETED, STATUS_CANCELLED},
        STATUS_COMPLETED: set(),
        STATUS_CANCELLED: set(),
    }

    student = models.ForeignKey(StudentProfile, on_delete=models.CASCADE, related_name='appointments')
    hostel = models.CharField(max_length=100)
    preferred_date = models.DateField()
    preferred_time = models.CharField(max_length=20)
    symptoms = models.JSONField(default=list, blank=True)
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, default='mild')
    notes = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    nurse_notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def can_transition_to(self, status: str) -> bool:
        return status in self.TRANSITIONS.get(self.status, set())

    @property
    def is_terminal(self) -> bool:
        return not self.TRANSITIONS.get(self.status)

    def __str__(self) -> str:
        return f"appointment {self.id} {self.status}"


class ChatMessage(models.Model):
    SENDER_CHOICES = [
        ('student', 'Student'),
        ('doctor', 'Doctor'),
    ]
    student = models.ForeignKey(StudentProfile, on_delete=models.CASCADE, related_name='messages')
    doctor = models.ForeignKey(DoctorProfile, on_delete=models.CASCADE, related_name='messages')
    message = models.TextField()
    sender_type = models.CharField(max_length=10, choices=SENDER_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['student', 'doctor', 'created_at'], name='chat_pair_created_idx'),
            models.Index(fields=['doctor', 'created_at'], name='chat_doctor_created_idx'),
        ]

    def __str__(self) -> str:
        return f"msg {self.id} s={self.student_id} d={self.doctor_id}"


class Notification(models.Model):
    """A broadcast from an administrator to the students of one hostel."""
    SEVERITY_CHOICES = [
        ('info', 'Info'),
        ('warning', 'Warning'),
        ('critical', 'Critical'),
    ]
    hostel = models.CharField(max_length=100, db_index=True)
    message = models.TextField()
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, default='info')
    sent_by = models.ForeignKey(User, null=True, on_delete=models.SET_NULL, related_name='notifications_sent')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.hostel}: {self.message[:30]}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
