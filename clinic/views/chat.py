"""
Student/doctor chat.

A student always talks as themselves and names the doctor; a doctor
always talks as themselves and names the student.  A doctor may only read
conversations they are part of.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import fails_as
from ..models import DoctorProfile, StudentProfile
from ..permissions import IsChatParticipant, IsDoctorRole
from ..serializers.messaging import ChatHistoryQuerySerializer, ChatSendSerializer
from ..services.accounts import doctor_profile_for, student_profile_for
from ..services.messaging import conversation, conversations_for_doctor, format_message, send_message


def _own_profile(user):
    if user.role == 'student':
        profile = student_profile_for(user)
    else:
        profile = doctor_profile_for(user)
    if profile is None:
        raise NotFound(f'{user.role} profile not found')
    return profile


def _lookup(model, pk, label):
    obj = model.objects.filter(id=pk).first()
    if obj is None:
        raise NotFound(f'{label} not found')
    return obj


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsChatParticipant])
def chat_send(request):
    s = ChatSendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    me = _own_profile(request.user)
    if request.user.role == 'student':
        if not vd.get('doctor_id'):
            raise ValidationError({'doctor_id': 'This field is required.'})
        student, doctor = me, _lookup(DoctorProfile, vd['doctor_id'], 'doctor')
    else:
        if not vd.get('student_id'):
            raise ValidationError({'student_id': 'This field is required.'})
        student, doctor = _lookup(StudentProfile, vd['student_id'], 'student'), me
    msg = send_message(student=student, doctor=doctor, sender_type=request.user.role, message=vd['message'])
    return Response(format_message(msg), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsChatParticipant])
@fails_as('Failed to fetch messages')
def chat_history(request, doctor_id: int):
    """Messages between a student and ``doctor_id``, oldest first.

    Doctors pass the other party as ``?studentId=``.
    """
    me = _own_profile(request.user)
    if request.user.role == 'student':
        student = me
        doctor = _lookup(DoctorProfile, doctor_id, 'doctor')
    else:
        if me.id != doctor_id:
            raise PermissionDenied('not your conversation')
        q = ChatHistoryQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        if not q.validated_data.get('studentId'):
            raise ValidationError({'studentId': 'This query parameter is required.'})
        student = _lookup(StudentProfile, q.validated_data['studentId'], 'student')
        doctor = me
    return Response([format_message(m) for m in conversation(student, doctor)])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
@fails_as('Failed to fetch conversations')
def chat_conversations(request):
    return Response(conversations_for_doctor(_own_profile(request.user)))
