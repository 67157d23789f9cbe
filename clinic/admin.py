"""
Django admin registrations for the clinic models.

Superusers can inspect rosters, health logs and appointments at
``/admin/``; list filters follow the fields the dashboards group by.
"""

from django.contrib import admin

from .models import (
    AdminProfile,
    Appointment,
    AuditEvent,
    ChatMessage,
    DoctorProfile,
    HealthLog,
    Notification,
    StudentProfile,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('email', 'username')


@admin.register(StudentProfile)
class StudentProfileAdmin(admin.ModelAdmin):
    list_display = ('registration_number', 'name', 'hostel', 'phone_number')
    list_filter = ('hostel',)
    search_fields = ('registration_number', 'name', 'user__email')


@admin.register(DoctorProfile)
class DoctorProfileAdmin(admin.ModelAdmin):
    list_display = ('name', 'qualification', 'available_timings')
    search_fields = ('name', 'user__email')


@admin.register(AdminProfile)
class AdminProfileAdmin(admin.ModelAdmin):
    list_display = ('name', 'user')


@admin.register(HealthLog)
class HealthLogAdmin(admin.ModelAdmin):
    list_display = ('student', 'hostel', 'feeling', 'severity', 'created_at')
    list_filter = ('hostel', 'feeling', 'severity')
    date_hierarchy = 'created_at'


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('student', 'preferred_date', 'preferred_time', 'status', 'severity')
    list_filter = ('status', 'severity', 'hostel')


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ('student', 'doctor', 'sender_type', 'created_at')
    list_filter = ('sender_type',)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('hostel', 'severity', 'sent_by', 'created_at')
    list_filter = ('hostel', 'severity')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
