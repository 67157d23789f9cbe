"""Health logs and appointments: creation, listing and status changes."""
from typing import Optional

import structlog
from django.db import transaction

from clinic.models import Appointment, HealthLog, StudentProfile
from clinic.services.audit import log_action

logger = structlog.get_logger(__name__)


class InvalidTransition(ValueError):
    pass


def _student_brief(student: StudentProfile, *, with_phone: bool = False) -> dict:
    data = {
        'name': student.name,
        'registration_number': student.registration_number,
        'hostel': student.hostel,
    }
    if with_phone:
        data['phone_number'] = student.phone_number
    return data


def format_health_log(log: HealthLog, *, with_student: bool = False) -> dict:
    data = {
        'id': log.id,
        'student_id': log.student_id,
        'hostel': log.hostel,
        'feeling': log.feeling,
        'symptoms': list(log.symptoms or []),
        'severity': log.severity,
        'notes': log.notes,
        'created_at': log.created_at.isoformat() if log.created_at else None,
    }
    if with_student:
        data['students'] = _student_brief(log.student)
    return data


def format_appointment(appt: Appointment, *, with_student: bool = False) -> dict:
    data = {
        'id': appt.id,
        'student_id': appt.student_id,
        'hostel': appt.hostel,
        'preferred_date': appt.preferred_date.isoformat() if appt.preferred_date else None,
        'preferred_time': appt.preferred_time,
        'symptoms': list(appt.symptoms or []),
        'severity': appt.severity,
        'notes': appt.notes,
        'status': appt.status,
        'nurse_notes': appt.nurse_notes,
        'created_at': appt.created_at.isoformat() if appt.created_at else None,
        'updated_at': appt.updated_at.isoformat() if appt.updated_at else None,
    }
    if with_student:
        data['students'] = _student_brief(appt.student, with_phone=True)
    return data


def create_health_log(student: StudentProfile, *, feeling: str, symptoms: list[str], severity: str, notes: Optional[str]=None) -> HealthLog:
    log = HealthLog.objects.create(
        student=student,
        hostel=student.hostel,
        feeling=feeling,
        symptoms=symptoms or [],
        severity=severity,
        notes=notes,
    )
    logger.info('health_log_created', log_id=log.id, hostel=log.hostel, symptoms=len(log.symptoms))
    return log


def student_health_logs(student: StudentProfile):
    return HealthLog.objects.filter(student=student).order_by('-created_at', '-id')


def all_health_logs():
    return HealthLog.objects.select_related('student').order_by('-created_at', '-id')


def book_appointment(student: StudentProfile, *, preferred_date, preferred_time: str, symptoms: list[str], severity: str, notes: Optional[str]=None) -> Appointment:
    appt = Appointment.objects.create(
        student=student,
        hostel=student.hostel,
        preferred_date=preferred_date,
        preferred_time=preferred_time,
        symptoms=symptoms or [],
        severity=severity,
        notes=notes,
        status=Appointment.STATUS_PENDING,
    )
    logger.info('appointment_booked', appointment_id=appt.id, hostel=appt.hostel)
    return appt


def student_appointments(student: StudentProfile):
    return Appointment.objects.filter(student=student).order_by('-created_at', '-id')


def all_appointments():
    return Appointment.objects.select_related('student').order_by('-created_at', '-id')


@transaction.atomic
def update_appointment_status(appointment_id: int, *, status: str, notes: Optional[str], by) -> Appointment:
    """Move an appointment along its lifecycle.

    Raises ``Appointment.DoesNotExist`` for unknown ids and
    :class:`InvalidTransition` when the appointment is terminal or the
    target status is not reachable from the current one.
    """
    appt = Appointment.objects.select_for_update().get(id=appointment_id)
    if appt.is_terminal:
        raise InvalidTransition(f'appointment is already {appt.status}')
    if not appt.can_transition_to(status):
        raise InvalidTransition(f'cannot change status from {appt.status} to {status}')
    previous = appt.status
    appt.status = status
    if notes is not None:
        appt.nurse_notes = notes or None
    appt.save(update_fields=['status', 'nurse_notes', 'updated_at'])
    log_action(user=by, action='appointment_status', object_type='appointment', object_id=appt.id,
               detail={'from': previous, 'to': status})
    logger.info('appointment_status_changed', appointment_id=appt.id, previous=previous, status=status)
    return appt
