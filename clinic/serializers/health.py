import bleach
from rest_framework import serializers

from clinic.models import Appointment, HealthLog, SEVERITY_CHOICES


class SymptomListField(serializers.ListField):
    """A list of symptom strings with duplicates dropped, first occurrence kept."""
    child = serializers.CharField(max_length=64)

    def to_internal_value(self, data):
        values = super().to_internal_value(data)
        return list(dict.fromkeys(v for v in values if v))


def _clean_notes(v):
    if v is None:
        return None
    v = bleach.clean(v.strip(), strip=True)
    return v or None


class HealthLogCreateSerializer(serializers.Serializer):
    feeling = serializers.ChoiceField(choices=[c[0] for c in HealthLog.FEELING_CHOICES])
    symptoms = SymptomListField(required=False, default=list, max_length=30)
    severity = serializers.ChoiceField(choices=[c[0] for c in SEVERITY_CHOICES], required=False, default='mild')
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)

    def validate_notes(self, v):
        return _clean_notes(v)


class AppointmentCreateSerializer(serializers.Serializer):
    preferred_date = serializers.DateField()
    preferred_time = serializers.CharField(max_length=20)
    symptoms = SymptomListField(required=False, default=list, max_length=30)
    severity = serializers.ChoiceField(choices=[c[0] for c in SEVERITY_CHOICES], required=False, default='mild')
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)

    def validate_notes(self, v):
        return _clean_notes(v)


class AppointmentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Appointment.STATUS_CHOICES])
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)

    def validate_notes(self, v):
        # null or omitted leaves the notes alone; a blank string clears them
        if v is None:
            return None
        return bleach.clean(v.strip(), strip=True)
