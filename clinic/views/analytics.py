from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.exceptions import fails_as
from clinic.permissions import IsAdminRole
from clinic.services.surveillance import disease_analytics, hostel_analytics, outbreak_alerts


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
@fails_as('Failed to fetch analytics')
def hostel_stats(request):
    """Per-hostel case counts and symptom breakdown over the analytics window."""
    return Response({hostel: agg.to_dict() for hostel, agg in hostel_analytics().items()})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
@fails_as('Failed to fetch analytics')
def disease_stats(request):
    """Per-symptom counts and hostel breakdown over the analytics window."""
    return Response({symptom: agg.to_dict() for symptom, agg in disease_analytics().items()})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
@fails_as('Failed to fetch alerts')
def alerts(request):
    return Response([a.to_dict() for a in outbreak_alerts()])
