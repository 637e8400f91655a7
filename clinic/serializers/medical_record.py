import bleach
from rest_framework import serializers

PRESCRIPTION_FIELDS = ('medication', 'dosage', 'frequency', 'duration')
LAB_RESULT_FIELDS = ('testName', 'value', 'unit', 'normalRange')


def _complete(entries, required):
    """Drop entries with a missing required field instead of failing the write."""
    kept = []
    for entry in entries or []:
        if isinstance(entry, dict) and all(str(entry.get(k) or '').strip() for k in required):
            kept.append(entry)
    return kept


class MedicalRecordSerializer(serializers.Serializer):
    patientId = serializers.CharField(max_length=20)
    doctorId = serializers.CharField(max_length=32, required=False)
    date = serializers.DateField()
    diagnosis = serializers.CharField()
    symptoms = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    prescriptions = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    labResults = serializers.ListField(child=serializers.DictField(), required=False, default=list)

    def validate_diagnosis(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Diagnosis is required')
        return v

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate_prescriptions(self, v):
        return _complete(v, PRESCRIPTION_FIELDS)

    def validate_labResults(self, v):
        return _complete(v, LAB_RESULT_FIELDS)


class MedicalRecordUpdateSerializer(MedicalRecordSerializer):
    patientId = serializers.CharField(max_length=20, required=False)
    date = serializers.DateField(required=False)
    diagnosis = serializers.CharField(required=False)
    symptoms = serializers.ListField(child=serializers.CharField(), required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    prescriptions = serializers.ListField(child=serializers.DictField(), required=False)
    labResults = serializers.ListField(child=serializers.DictField(), required=False)
    updatedBy = serializers.CharField(max_length=255)


class MedicalRecordListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    patientId = serializers.CharField(required=False)
    doctorId = serializers.CharField(required=False)
