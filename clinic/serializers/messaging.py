import bleach
from rest_framework import serializers

from clinic.models import Notification


class ChatSendSerializer(serializers.Serializer):
    doctor_id = serializers.IntegerField(min_value=1, required=False)
    student_id = serializers.IntegerField(min_value=1, required=False)
    message = serializers.CharField(max_length=2000)

    def validate_message(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('message must not be empty')
        return v


class ChatHistoryQuerySerializer(serializers.Serializer):
    studentId = serializers.IntegerField(min_value=1, required=False)


class NotificationCreateSerializer(serializers.Serializer):
    hostel = serializers.CharField(max_length=100)
    message = serializers.CharField(max_length=2000)
    severity = serializers.ChoiceField(choices=[c[0] for c in Notification.SEVERITY_CHOICES], required=False, default='info')

    def validate_message(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('message must not be empty')
        return v


class DoctorProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    qualification = serializers.CharField(max_length=255, required=False, allow_blank=True)
    available_timings = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_name(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('name must not be empty')
        return v
