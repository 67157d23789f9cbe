from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.models import AdminProfile, DoctorProfile, StudentProfile

User = get_user_model()


@transaction.atomic
def register_user(*, email: str, password: str, role: str, profile: dict) -> User:
    """Create the user and its role specific profile in one transaction."""
    user = User.objects.create_user(username=email, email=email, password=password, role=role)
    if role == User.ROLE_STUDENT:
        StudentProfile.objects.create(
            user=user,
            registration_number=profile['registrationNumber'],
            name=profile['name'],
            hostel=profile['hostel'],
            phone_number=profile.get('phoneNumber') or '',
        )
    elif role == User.ROLE_DOCTOR:
        DoctorProfile.objects.create(
            user=user,
            name=profile['name'],
            phone_number=profile.get('phoneNumber') or '',
            qualification=profile.get('qualification') or '',
            available_timings=profile.get('availableTimings') or '',
        )
    elif role == User.ROLE_ADMIN:
        AdminProfile.objects.create(user=user, name=profile['name'])
    return user


def issue_tokens(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    return {
        'token': str(refresh.access_token),
        'refresh': str(refresh),
        'user': {'id': user.id, 'email': user.email, 'role': user.role},
    }


def format_student(profile: StudentProfile) -> dict:
    return {
        'id': profile.id,
        'user_id': profile.user_id,
        'registration_number': profile.registration_number,
        'name': profile.name,
        'hostel': profile.hostel,
        'phone_number': profile.phone_number,
        'created_at': profile.created_at.isoformat() if profile.created_at else None,
    }


def format_doctor(profile: DoctorProfile, *, public: bool = False) -> dict:
    data = {
        'id': profile.id,
        'name': profile.name,
        'qualification': profile.qualification,
        'available_timings': profile.available_timings,
    }
    if not public:
        data.update({
            'user_id': profile.user_id,
            'phone_number': profile.phone_number,
            'created_at': profile.created_at.isoformat() if profile.created_at else None,
        })
    return data


def format_admin(profile: AdminProfile) -> dict:
    return {
        'id': profile.id,
        'user_id': profile.user_id,
        'name': profile.name,
        'created_at': profile.created_at.isoformat() if profile.created_at else None,
    }


def update_doctor_profile(profile: DoctorProfile, changes: dict) -> DoctorProfile:
    fields = [f for f in ('name', 'phone_number', 'qualification', 'available_timings') if f in changes]
    for f in fields:
        setattr(profile, f, changes[f])
    if fields:
        profile.save(update_fields=fields)
    return profile


def list_doctors() -> list[dict]:
    return [format_doctor(d, public=True) for d in DoctorProfile.objects.order_by('name', 'id')]


def student_profile_for(user) -> Optional[StudentProfile]:
    return StudentProfile.objects.filter(user=user).first()


def doctor_profile_for(user) -> Optional[DoctorProfile]:
    return DoctorProfile.objects.filter(user=user).first()


def admin_profile_for(user) -> Optional[AdminProfile]:
    return AdminProfile.objects.filter(user=user).first()
