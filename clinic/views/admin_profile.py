"""
Administrative profile and record endpoints.

Administrators read their own profile, browse every health log and
appointment with the submitting student joined in, and broadcast
notifications to the students of one hostel.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import fails_as
from ..permissions import IsAdminRole
from ..serializers.messaging import NotificationCreateSerializer
from ..services.accounts import admin_profile_for, format_admin
from ..services.messaging import format_notification, send_notification
from ..services.records import all_appointments, all_health_logs, format_appointment, format_health_log


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_profile_get(request):
    """Return the current administrator's profile."""
    profile = admin_profile_for(request.user)
    if profile is None:
        raise NotFound('admin profile not found')
    return Response(format_admin(profile))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
@fails_as('Failed to fetch health logs')
def admin_health_logs(request):
    return Response([format_health_log(log, with_student=True) for log in all_health_logs()])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
@fails_as('Failed to fetch appointments')
def admin_appointments(request):
    return Response([format_appointment(a, with_student=True) for a in all_appointments()])


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_send_notification(request):
    """Broadcast a message to one hostel."""
    s = NotificationCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    n = send_notification(sender=request.user, **s.validated_data)
    return Response(format_notification(n), status=status.HTTP_201_CREATED)
