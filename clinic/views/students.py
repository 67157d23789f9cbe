"""
Student endpoints.

Students read their own profile, submit daily health logs, book and list
appointments, browse doctors and read the notifications sent to their
hostel.  Every handler resolves the caller's :class:`StudentProfile`
first; a student account without a profile gets a 404.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from ..exceptions import fails_as
from ..permissions import IsStudentRole
from ..serializers.health import AppointmentCreateSerializer, HealthLogCreateSerializer
from ..services.accounts import format_student, list_doctors, student_profile_for
from ..services.messaging import format_notification, notifications_for_hostel
from ..services.records import (
    book_appointment,
    create_health_log,
    format_appointment,
    format_health_log,
    student_appointments,
    student_health_logs,
)


def _profile_or_404(request):
    profile = student_profile_for(request.user)
    if profile is None:
        raise NotFound('student profile not found')
    return profile


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStudentRole])
@fails_as('Failed to fetch profile')
def student_profile(request):
    return Response(format_student(_profile_or_404(request)))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudentRole])
@throttle_classes([ScopedRateThrottle])
def create_log(request):
    """Record today's wellness entry; the hostel comes from the profile."""
    student = _profile_or_404(request)
    s = HealthLogCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    log = create_health_log(student, **s.validated_data)
    return Response(format_health_log(log), status=status.HTTP_201_CREATED)

create_log.cls.throttle_scope = 'health_log'


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStudentRole])
@fails_as('Failed to fetch health logs')
def my_health_logs(request):
    student = _profile_or_404(request)
    return Response([format_health_log(log) for log in student_health_logs(student)])


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStudentRole])
@fails_as('Failed to fetch appointments')
def my_appointments(request):
    student = _profile_or_404(request)
    if request.method == 'GET':
        return Response([format_appointment(a) for a in student_appointments(student)])
    # POST
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = book_appointment(student, **s.validated_data)
    return Response(format_appointment(appt), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStudentRole])
@fails_as('Failed to fetch doctors')
def doctors(request):
    return Response(list_doctors())


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStudentRole])
@fails_as('Failed to fetch notifications')
def my_notifications(request):
    student = _profile_or_404(request)
    return Response([format_notification(n) for n in notifications_for_hostel(student.hostel)])
