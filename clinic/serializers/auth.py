import bleach
from rest_framework import serializers

from clinic.models import StudentProfile, User


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()

    def validate_email(self, v):
        return v.strip().lower()

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('password must not be empty')
        return v


class StudentProfileDataSerializer(serializers.Serializer):
    registrationNumber = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=255)
    hostel = serializers.CharField(max_length=100)
    phoneNumber = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate_registrationNumber(self, v):
        v = v.strip()
        if StudentProfile.objects.filter(registration_number=v).exists():
            raise serializers.ValidationError('registration number already registered')
        return v

    def validate_name(self, v):
        v = _clean(v)
        if len(v) < 2:
            raise serializers.ValidationError('name must be at least 2 characters')
        return v


class DoctorProfileDataSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phoneNumber = serializers.CharField(max_length=20, required=False, allow_blank=True)
    qualification = serializers.CharField(max_length=255, required=False, allow_blank=True)
    availableTimings = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_name(self, v):
        return _clean(v)


class AdminProfileDataSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)

    def validate_name(self, v):
        return _clean(v)


PROFILE_SERIALIZERS = {
    User.ROLE_STUDENT: StudentProfileDataSerializer,
    User.ROLE_DOCTOR: DoctorProfileDataSerializer,
    User.ROLE_ADMIN: AdminProfileDataSerializer,
}


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES])
    profileData = serializers.DictField()

    def validate_email(self, v):
        v = v.strip().lower()
        if User.objects.filter(email=v).exists():
            raise serializers.ValidationError('User already exists')
        return v

    def validate(self, attrs):
        profile = PROFILE_SERIALIZERS[attrs['role']](data=attrs['profileData'])
        if not profile.is_valid():
            raise serializers.ValidationError({'profileData': profile.errors})
        attrs['profileData'] = profile.validated_data
        return attrs
