"""
Administrative dashboard endpoint.

Provides a high level overview of recent health logs, the busiest
symptoms and how many hostels are currently over the outbreak threshold.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import fails_as
from ..permissions import IsAdminRole
from ..services.surveillance import dashboard_summary


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
@fails_as('Failed to fetch dashboard')
def admin_dashboard(request):
    """Return dashboard metrics for administrators.

    ``total_logs`` and ``hostels`` cover the analytics window,
    ``alerts`` counts hostels over the threshold in the alert window and
    ``top_symptoms`` lists the most reported symptoms, busiest first.
    """
    return Response(dashboard_summary())
