"""
Integration tests for the campus health API.

These tests exercise role based access control, health log submission,
appointment state transitions, chat, notifications and the admin
surveillance endpoints.  The tests use Django REST Framework's APIClient
within the APITestCase base class.

To run the tests:

```
pytest -q clinic/tests
```
"""
from datetime import timedelta
from unittest import mock

import structlog
from django.db import DatabaseError
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from clinic.models import (
    AdminProfile,
    Appointment,
    AuditEvent,
    ChatMessage,
    DoctorProfile,
    HealthLog,
    StudentProfile,
    User,
)


def make_user(email, role, password='secret123'):
    return User.objects.create_user(username=email, email=email, password=password, role=role)


def make_student(email, hostel, reg=None, name='Student'):
    user = make_user(email, User.ROLE_STUDENT)
    return StudentProfile.objects.create(
        user=user, registration_number=reg or email.split('@')[0], name=name, hostel=hostel,
        phone_number='555-0100',
    )


class CampusAPITestBase(APITestCase):
    def setUp(self) -> None:
        self.student = make_student('alice@campus.edu', 'Hostel A', reg='S001', name='Alice')
        doctor_user = make_user('doc@campus.edu', User.ROLE_DOCTOR)
        self.doctor = DoctorProfile.objects.create(user=doctor_user, name='Dr. Who', qualification='MBBS')
        admin_user = make_user('admin@campus.edu', User.ROLE_ADMIN)
        self.admin = AdminProfile.objects.create(user=admin_user, name='Head Admin')

    def as_user(self, user):
        self.client.force_authenticate(user=user)

    def as_student(self):
        self.as_user(self.student.user)

    def as_doctor(self):
        self.as_user(self.doctor.user)

    def as_admin(self):
        self.as_user(self.admin.user)

    def add_log(self, student, symptoms, days_ago=0):
        log = HealthLog.objects.create(student=student, hostel=student.hostel, feeling='unwell', symptoms=symptoms)
        if days_ago:
            HealthLog.objects.filter(pk=log.pk).update(created_at=timezone.now() - timedelta(days=days_ago))
        return log


class AccessControlTests(CampusAPITestBase):
    def test_unauthenticated_request_is_rejected(self):
        resp = self.client.get('/api/student/profile')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(resp.data['ok'])
        self.assertIn('code', resp.data['error'])

    def test_wrong_role_is_forbidden(self):
        self.as_doctor()
        resp = self.client.post('/api/student/health-log', {'feeling': 'good'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data['error']['code'], 'permission_denied')

        self.as_student()
        for path in ('/api/admin/analytics/hostel', '/api/admin/alerts', '/api/doctor/appointments'):
            self.assertEqual(self.client.get(path).status_code, status.HTTP_403_FORBIDDEN, path)

    def test_student_without_profile_gets_404(self):
        self.as_user(make_user('ghost@campus.edu', User.ROLE_STUDENT))
        resp = self.client.get('/api/student/profile')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_health_endpoint_is_public(self):
        resp = self.client.get('/api/health')
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body['status'], 'OK')
        self.assertTrue(body['db'])
        self.assertIn('timestamp', body)

    def test_request_context_is_cleared_after_response(self):
        self.as_student()
        resp = self.client.get('/api/student/profile', HTTP_X_REQUEST_ID='req-123')
        self.assertEqual(resp['X-Request-ID'], 'req-123')
        self.assertEqual(structlog.contextvars.get_contextvars(), {})


class StudentFlowTests(CampusAPITestBase):
    def test_profile(self):
        self.as_student()
        resp = self.client.get('/api/student/profile')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['registration_number'], 'S001')
        self.assertEqual(resp.data['hostel'], 'Hostel A')

    def test_health_log_copies_hostel_and_dedupes_symptoms(self):
        self.as_student()
        payload = {
            'feeling': 'unwell',
            'symptoms': ['fever', 'cough', 'fever'],
            'severity': 'moderate',
            'notes': '<script>x</script>since yesterday',
            'hostel': 'Hostel Z',
        }
        resp = self.client.post('/api/student/health-log', payload, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['hostel'], 'Hostel A')
        self.assertEqual(resp.data['symptoms'], ['fever', 'cough'])
        self.assertNotIn('<script>', resp.data['notes'])

        resp = self.client.get('/api/student/health-logs')
        self.assertEqual(len(resp.data), 1)

    def test_invalid_feeling_is_rejected(self):
        self.as_student()
        resp = self.client.post('/api/student/health-log', {'feeling': 'ecstatic'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(HealthLog.objects.count(), 0)

    def test_health_logs_newest_first(self):
        older = self.add_log(self.student, ['cough'], days_ago=3)
        newer = self.add_log(self.student, ['fever'])
        self.as_student()
        resp = self.client.get('/api/student/health-logs')
        self.assertEqual([r['id'] for r in resp.data], [newer.id, older.id])

    def test_book_and_list_appointments(self):
        self.as_student()
        resp = self.client.post('/api/student/appointments', {
            'preferred_date': '2024-06-01',
            'preferred_time': '10:30',
            'symptoms': ['headache'],
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['status'], 'pending')
        self.assertEqual(resp.data['hostel'], 'Hostel A')

        resp = self.client.get('/api/student/appointments')
        self.assertEqual(len(resp.data), 1)

    def test_doctors_listing_hides_contact_details(self):
        self.as_student()
        resp = self.client.get('/api/student/doctors')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data[0]['name'], 'Dr. Who')
        self.assertNotIn('phone_number', resp.data[0])

    def test_notifications_only_for_own_hostel(self):
        self.as_admin()
        self.client.post('/api/admin/notifications', {'hostel': 'Hostel A', 'message': 'Boil water'}, format='json')
        self.client.post('/api/admin/notifications', {'hostel': 'Hostel B', 'message': 'Stay in'}, format='json')
        self.as_student()
        resp = self.client.get('/api/student/notifications')
        self.assertEqual([n['message'] for n in resp.data], ['Boil water'])


class AppointmentTransitionTests(CampusAPITestBase):
    def setUp(self) -> None:
        super().setUp()
        self.appt = Appointment.objects.create(
            student=self.student, hostel=self.student.hostel,
            preferred_date=timezone.now().date(), preferred_time='09:00',
        )

    def put_status(self, new_status, **extra):
        return self.client.put(f'/api/doctor/appointments/{self.appt.id}', {'status': new_status, **extra}, format='json')

    def test_pending_to_confirmed_to_completed(self):
        self.as_doctor()
        resp = self.put_status('confirmed', notes='bring id card')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['status'], 'confirmed')
        self.assertEqual(resp.data['nurse_notes'], 'bring id card')
        self.assertEqual(resp.data['students']['phone_number'], '555-0100')

        resp = self.put_status('completed')
        self.assertEqual(resp.status_code, 200)
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.status, 'completed')
        self.assertEqual(self.appt.nurse_notes, 'bring id card')
        self.assertEqual(AuditEvent.objects.filter(action='appointment_status').count(), 2)

    def test_blank_notes_clear_nurse_notes(self):
        Appointment.objects.filter(pk=self.appt.pk).update(nurse_notes='old')
        self.as_doctor()
        resp = self.put_status('confirmed', notes='')
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.data['nurse_notes'])
        self.appt.refresh_from_db()
        self.assertIsNone(self.appt.nurse_notes)

    def test_null_or_missing_notes_keep_nurse_notes(self):
        Appointment.objects.filter(pk=self.appt.pk).update(nurse_notes='old')
        self.as_doctor()
        self.assertEqual(self.put_status('confirmed', notes=None).data['nurse_notes'], 'old')
        self.assertEqual(self.put_status('completed').data['nurse_notes'], 'old')

    def test_terminal_state_rejects_changes(self):
        self.as_doctor()
        self.assertEqual(self.put_status('cancelled').status_code, 200)
        resp = self.put_status('confirmed')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.status, 'cancelled')

    def test_pending_cannot_jump_to_completed(self):
        self.as_doctor()
        self.assertEqual(self.put_status('completed').status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_appointment_is_404(self):
        self.as_doctor()
        resp = self.client.put('/api/doctor/appointments/999999', {'status': 'confirmed'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_doctor_lists_appointments_with_student(self):
        self.as_doctor()
        resp = self.client.get('/api/doctor/appointments')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data[0]['students']['name'], 'Alice')

    def test_doctor_updates_profile(self):
        self.as_doctor()
        resp = self.client.put('/api/doctor/profile', {'available_timings': '10:00-14:00'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['available_timings'], '10:00-14:00')
        self.assertEqual(resp.data['name'], 'Dr. Who')


class ChatTests(CampusAPITestBase):
    def test_student_and_doctor_exchange_messages(self):
        self.as_student()
        resp = self.client.post('/api/chat/messages', {'doctor_id': self.doctor.id, 'message': 'Hello doctor'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['sender_type'], 'student')

        self.as_doctor()
        resp = self.client.post('/api/chat/messages', {'student_id': self.student.id, 'message': 'Hi Alice'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['sender_type'], 'doctor')

        resp = self.client.get(f'/api/chat/messages/{self.doctor.id}', {'studentId': self.student.id})
        self.assertEqual([m['message'] for m in resp.data], ['Hello doctor', 'Hi Alice'])
        self.assertEqual(resp.data[0]['students']['name'], 'Alice')

        resp = self.client.get('/api/chat/conversations')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([c['student_id'] for c in resp.data], [self.student.id])

    def test_student_must_name_a_doctor(self):
        self.as_student()
        resp = self.client.post('/api/chat/messages', {'message': 'anyone?'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ChatMessage.objects.count(), 0)

    def test_conversations_are_doctor_only(self):
        self.as_student()
        self.assertEqual(self.client.get('/api/chat/conversations').status_code, status.HTTP_403_FORBIDDEN)
        self.as_admin()
        resp = self.client.post('/api/chat/messages', {'doctor_id': self.doctor.id, 'message': 'x'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)


class AdminSurveillanceTests(CampusAPITestBase):
    def setUp(self) -> None:
        super().setUp()
        # Hostel A: Alice plus nine more students, ten on the roster
        self.hostel_a = [self.student] + [
            make_student(f'a{i}@campus.edu', 'Hostel A') for i in range(9)
        ]
        self.hostel_b = [make_student(f'b{i}@campus.edu', 'Hostel B') for i in range(5)]

    def test_hostel_analytics_excludes_old_logs(self):
        self.add_log(self.hostel_a[0], ['fever', 'cough'])
        self.add_log(self.hostel_a[1], [])
        self.add_log(self.hostel_b[0], ['fever'])
        self.add_log(self.hostel_b[1], ['fever'], days_ago=31)

        self.as_admin()
        resp = self.client.get('/api/admin/analytics/hostel')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['Hostel A']['total_cases'], 2)
        self.assertEqual(resp.data['Hostel A']['symptom_counts'], {'fever': 1, 'cough': 1})
        self.assertEqual(resp.data['Hostel B']['total_cases'], 1)
        self.assertEqual(sum(h['total_cases'] for h in resp.data.values()), 3)

    def test_disease_analytics(self):
        self.add_log(self.hostel_a[0], ['fever'])
        self.add_log(self.hostel_b[0], ['fever', 'cough'])
        self.as_admin()
        resp = self.client.get('/api/admin/analytics/disease')
        self.assertEqual(resp.data['fever']['count'], 2)
        self.assertEqual(resp.data['fever']['hostel_counts'], {'Hostel A': 1, 'Hostel B': 1})
        self.assertEqual(resp.data['cough']['hostel_counts'], {'Hostel B': 1})

    def test_alert_fires_only_above_threshold(self):
        self.as_admin()
        for s in self.hostel_a[:2]:
            self.add_log(s, ['fever'])
        self.assertEqual(self.client.get('/api/admin/alerts').data, [])

        self.add_log(self.hostel_a[2], ['fever'])
        resp = self.client.get('/api/admin/alerts')
        self.assertEqual(len(resp.data), 1)
        alert = resp.data[0]
        self.assertEqual(alert['hostel'], 'Hostel A')
        self.assertEqual(alert['cases'], 3)
        self.assertEqual(alert['total_students'], 10)
        self.assertEqual(alert['percentage'], 30.0)
        self.assertEqual(alert['severity'], 'high')
        self.assertEqual(
            alert['message'],
            'Outbreak alert: 30.0% of Hostel A students reported health issues in the last 7 days',
        )

    def test_alert_window_is_seven_days(self):
        for s in self.hostel_b[:3]:
            self.add_log(s, ['cough'], days_ago=8)
        self.as_admin()
        self.assertEqual(self.client.get('/api/admin/alerts').data, [])

    def test_dashboard_summary(self):
        self.add_log(self.hostel_a[0], ['fever'])
        self.add_log(self.hostel_a[1], ['fever', 'cough'])
        self.add_log(self.hostel_a[2], ['ache'])
        self.as_admin()
        resp = self.client.get('/api/admin/dashboard')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['window_days'], 30)
        self.assertEqual(resp.data['total_logs'], 3)
        self.assertEqual(resp.data['hostels'], 1)
        self.assertEqual(resp.data['alerts'], 1)
        self.assertEqual(resp.data['top_symptoms'][0], {'symptom': 'fever', 'count': 2})
        self.assertEqual([s['symptom'] for s in resp.data['top_symptoms']], ['fever', 'ache', 'cough'])

    def test_admin_listings_join_student(self):
        self.add_log(self.student, ['fever'])
        Appointment.objects.create(student=self.student, hostel='Hostel A',
                                   preferred_date=timezone.now().date(), preferred_time='11:00')
        self.as_admin()
        logs = self.client.get('/api/admin/health-logs').data
        self.assertEqual(logs[0]['students']['registration_number'], 'S001')
        appts = self.client.get('/api/admin/appointments').data
        self.assertEqual(appts[0]['students']['name'], 'Alice')
        self.assertEqual(self.client.get('/api/admin/profile').data['name'], 'Head Admin')

    def test_send_notification(self):
        self.as_admin()
        resp = self.client.post('/api/admin/notifications',
                                {'hostel': 'Hostel A', 'message': 'Clinic closed Friday', 'severity': 'warning'},
                                format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['severity'], 'warning')
        self.assertEqual(resp.data['sent_by'], self.admin.user_id)

    def test_database_failure_returns_generic_500(self):
        self.as_admin()
        with mock.patch('clinic.views.analytics.hostel_analytics', side_effect=DatabaseError('disk on fire')):
            resp = self.client.get('/api/admin/analytics/hostel')
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.data['error']['code'], 'data_fetch_error')
        self.assertEqual(resp.data['error']['message'], 'Failed to fetch analytics')
        self.assertNotIn('disk on fire', str(resp.data))

    def test_threshold_follows_settings(self):
        self.add_log(self.hostel_a[0], ['fever'])
        self.as_admin()
        with self.settings(OUTBREAK_THRESHOLD=5.0):
            resp = self.client.get('/api/admin/alerts')
        self.assertEqual([a['hostel'] for a in resp.data], ['Hostel A'])

    def log_at(self, student, symptoms, created_at):
        log = HealthLog.objects.create(student=student, hostel=student.hostel, feeling='unwell', symptoms=symptoms)
        HealthLog.objects.filter(pk=log.pk).update(created_at=created_at)
        return log

    def test_analytics_window_includes_exact_cutoff(self):
        now = timezone.now()
        self.log_at(self.hostel_a[0], ['fever'], now - timedelta(days=30))
        self.log_at(self.hostel_a[1], ['cough'], now - timedelta(days=29, hours=23))
        self.log_at(self.hostel_b[0], ['fever'], now - timedelta(days=30, seconds=1))
        self.as_admin()
        with mock.patch('clinic.services.surveillance.timezone.now', return_value=now):
            hostels = self.client.get('/api/admin/analytics/hostel').data
            diseases = self.client.get('/api/admin/analytics/disease').data
        self.assertEqual(hostels['Hostel A']['total_cases'], 2)
        self.assertNotIn('Hostel B', hostels)
        self.assertEqual(diseases['fever']['hostel_counts'], {'Hostel A': 1})

    def test_alert_window_includes_exact_seven_day_cutoff(self):
        now = timezone.now()
        for s in self.hostel_a[:2]:
            self.log_at(s, ['fever'], now - timedelta(days=7))
        self.log_at(self.hostel_a[2], ['fever'], now - timedelta(days=7, seconds=1))
        self.as_admin()
        with mock.patch('clinic.services.surveillance.timezone.now', return_value=now):
            self.assertEqual(self.client.get('/api/admin/alerts').data, [])

        self.log_at(self.hostel_a[3], ['fever'], now - timedelta(days=7))
        with mock.patch('clinic.services.surveillance.timezone.now', return_value=now):
            resp = self.client.get('/api/admin/alerts')
        self.assertEqual([(a['hostel'], a['cases']) for a in resp.data], [('Hostel A', 3)])

    def test_alert_percentage_is_a_two_decimal_float(self):
        hostel_c = [make_student(f'c{i}@campus.edu', 'Hostel C') for i in range(3)]
        self.add_log(hostel_c[0], ['fever'])
        self.as_admin()
        alert = self.client.get('/api/admin/alerts').data[0]
        self.assertEqual(alert['hostel'], 'Hostel C')
        self.assertIsInstance(alert['percentage'], float)
        self.assertEqual(alert['percentage'], 33.33)
        self.assertIn('33.3% of Hostel C students', alert['message'])

    def test_alerts_fail_as_a_whole_when_either_query_fails(self):
        self.add_log(self.hostel_a[0], ['fever'])
        self.as_admin()
        for target in ('roster_counts', 'recent_logs'):
            with mock.patch(f'clinic.services.surveillance.{target}', side_effect=DatabaseError('roster gone')):
                resp = self.client.get('/api/admin/alerts')
            self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR, target)
            self.assertEqual(resp.data['error'], {'code': 'data_fetch_error', 'message': 'Failed to fetch alerts'})
            self.assertNotIn('roster gone', str(resp.data))
