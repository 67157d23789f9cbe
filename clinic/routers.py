"""
URL mappings for the campus health API.

Paths follow the front-end client: ``/api/<role>/...`` for role scoped
endpoints and ``/api/auth/...`` for accounts.  Trailing slashes are
deliberately omitted.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, register_view
from .views import admin_profile, analytics, chat, doctors, health, students
from .views.dashboard import admin_dashboard

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('api/health', health.healthz),

    # Accounts
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),

    # Student
    path('api/student/profile', students.student_profile),
    path('api/student/health-log', students.create_log),
    path('api/student/health-logs', students.my_health_logs),
    path('api/student/appointments', students.my_appointments),
    path('api/student/doctors', students.doctors),
    path('api/student/notifications', students.my_notifications),

    # Doctor
    path('api/doctor/profile', doctors.doctor_profile),
    path('api/doctor/appointments', doctors.doctor_appointments),
    path('api/doctor/appointments/<int:appointment_id>', doctors.doctor_appointment_update),

    # Chat
    path('api/chat/messages', chat.chat_send),
    path('api/chat/messages/<int:doctor_id>', chat.chat_history),
    path('api/chat/conversations', chat.chat_conversations),

    # Admin
    path('api/admin/profile', admin_profile.admin_profile_get),
    path('api/admin/health-logs', admin_profile.admin_health_logs),
    path('api/admin/analytics/hostel', analytics.hostel_stats),
    path('api/admin/analytics/disease', analytics.disease_stats),
    path('api/admin/alerts', analytics.alerts),
    path('api/admin/appointments', admin_profile.admin_appointments),
    path('api/admin/notifications', admin_profile.admin_send_notification),
    path('api/admin/dashboard', admin_dashboard),
]
