import bleach
from rest_framework import serializers

from clinic.models import Patient

BLOOD_GROUPS = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class PatientSerializer(serializers.Serializer):
    """Create/update payload in wire (camelCase) names."""
    name = serializers.CharField(min_length=2, max_length=255)
    age = serializers.IntegerField(min_value=0, max_value=150)
    gender = serializers.ChoiceField(choices=Patient.GENDER_CHOICES)
    bloodGroup = serializers.ChoiceField(choices=BLOOD_GROUPS)
    phone = serializers.CharField(max_length=32)
    email = serializers.EmailField()
    address = serializers.CharField()
    emergencyContact = serializers.CharField(max_length=255)
    medicalHistory = serializers.ListField(child=serializers.CharField(), required=False)
    status = serializers.ChoiceField(choices=Patient.STATUS_CHOICES, required=False)

    def validate_name(self, v):
        v = _clean(v)
        if len(v) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters')
        return v

    def validate_email(self, v):
        return v.strip().lower()

    def validate_address(self, v):
        return _clean(v)

    def validate_emergencyContact(self, v):
        return _clean(v)

    def validate_medicalHistory(self, v):
        return [_clean(item) for item in v if _clean(item)]


class PatientListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Patient.STATUS_CHOICES, required=False)
    bloodGroup = serializers.ChoiceField(choices=BLOOD_GROUPS, required=False)
    sortBy = serializers.ChoiceField(
        choices=['name', 'age', 'createdAt', 'registrationDate', 'id'], required=False, default='createdAt'
    )
    sortOrder = serializers.ChoiceField(choices=['asc', 'desc', 'ASC', 'DESC'], required=False, default='desc')
