from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.exceptions import fails_as
from clinic.models import Appointment
from clinic.permissions import IsDoctorRole
from clinic.serializers.health import AppointmentUpdateSerializer
from clinic.serializers.messaging import DoctorProfileUpdateSerializer
from clinic.services.accounts import doctor_profile_for, format_doctor, update_doctor_profile
from clinic.services.records import (
    InvalidTransition,
    all_appointments,
    format_appointment,
    update_appointment_status,
)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_profile(request):
    """Read or update the calling doctor's profile.

    PUT accepts any of ``name``, ``phone_number``, ``qualification`` and
    ``available_timings``; omitted fields are left unchanged.
    """
    profile = doctor_profile_for(request.user)
    if profile is None:
        raise NotFound('doctor profile not found')
    if request.method == 'PUT':
        s = DoctorProfileUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        profile = update_doctor_profile(profile, s.validated_data)
    return Response(format_doctor(profile))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
@fails_as('Failed to fetch appointments')
def doctor_appointments(request):
    return Response([format_appointment(a, with_student=True) for a in all_appointments()])


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_appointment_update(request, appointment_id: int):
    s = AppointmentUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        appt = update_appointment_status(
            appointment_id,
            status=s.validated_data['status'],
            notes=s.validated_data.get('notes'),
            by=request.user,
        )
    except Appointment.DoesNotExist:
        raise NotFound('appointment not found')
    except InvalidTransition as e:
        raise ValidationError({'status': str(e)})
    return Response(format_appointment(appt, with_student=True))
