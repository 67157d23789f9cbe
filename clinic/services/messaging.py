from typing import Optional

import structlog

from clinic.models import ChatMessage, DoctorProfile, Notification, StudentProfile
from clinic.services.audit import log_action

logger = structlog.get_logger(__name__)


def format_message(msg: ChatMessage) -> dict:
    return {
        'id': msg.id,
        'student_id': msg.student_id,
        'doctor_id': msg.doctor_id,
        'message': msg.message,
        'sender_type': msg.sender_type,
        'created_at': msg.created_at.isoformat() if msg.created_at else None,
        'students': {'name': msg.student.name},
        'doctors': {'name': msg.doctor.name},
    }


def send_message(*, student: StudentProfile, doctor: DoctorProfile, sender_type: str, message: str) -> ChatMessage:
    msg = ChatMessage.objects.create(student=student, doctor=doctor, sender_type=sender_type, message=message)
    logger.info('chat_message_sent', message_id=msg.id, sender_type=sender_type)
    return msg


def conversation(student: StudentProfile, doctor: DoctorProfile):
    return (ChatMessage.objects.filter(student=student, doctor=doctor)
            .select_related('student', 'doctor').order_by('created_at', 'id'))


def conversations_for_doctor(doctor: DoctorProfile) -> list[dict]:
    """Distinct students who exchanged messages with ``doctor``, most recent first."""
    seen: dict[int, dict] = {}
    qs = ChatMessage.objects.filter(doctor=doctor).select_related('student').order_by('-created_at', '-id')
    for msg in qs:
        if msg.student_id not in seen:
            seen[msg.student_id] = {
                'student_id': msg.student_id,
                'name': msg.student.name,
                'registration_number': msg.student.registration_number,
                'last_message_at': msg.created_at.isoformat() if msg.created_at else None,
            }
    return list(seen.values())


def format_notification(n: Notification) -> dict:
    return {
        'id': n.id,
        'hostel': n.hostel,
        'message': n.message,
        'severity': n.severity,
        'sent_by': n.sent_by_id,
        'created_at': n.created_at.isoformat() if n.created_at else None,
    }


def send_notification(*, sender, hostel: str, message: str, severity: str) -> Notification:
    n = Notification.objects.create(hostel=hostel, message=message, severity=severity, sent_by=sender)
    log_action(user=sender, action='notification_send', object_type='notification', object_id=n.id,
               detail={'hostel': hostel, 'severity': severity})
    logger.info('notification_sent', notification_id=n.id, hostel=hostel, severity=severity)
    return n


def notifications_for_hostel(hostel: Optional[str]):
    return Notification.objects.filter(hostel=hostel).order_by('-created_at', '-id')
