import datetime

import pytest

from clinic.fields import (
    FIELD_NAMES,
    WIRE_NAMES,
    external_name,
    flatten,
    rename_fields_and_timestamps,
    storage_name,
    to_storage_keys,
)


def test_audit_timestamp_is_renamed_and_externalized():
    assert rename_fields_and_timestamps({'created_at': '2024-01-01 00:00:00'}) == {
        'createdAt': '2024-01-01T00:00:00.000Z'
    }


def test_absent_keys_stay_absent():
    out = rename_fields_and_timestamps({'id': 'P001', 'blood_group': 'O+'})
    assert out == {'id': 'P001', 'bloodGroup': 'O+'}
    assert 'createdAt' not in out


def test_null_timestamp_stays_null():
    assert rename_fields_and_timestamps({'paid_at': None}) == {'paidAt': None}


def test_lists_are_renamed_element_wise():
    rows = [{'patient_id': 'P001'}, {'patient_id': 'P002', 'updated_at': '2024-02-02 10:00:00'}]
    assert rename_fields_and_timestamps(rows) == [
        {'patientId': 'P001'},
        {'patientId': 'P002', 'updatedAt': '2024-02-02T10:00:00.000Z'},
    ]


def test_nested_rows():
    out = rename_fields_and_timestamps({'items': [{'invoice_id': 'INV001'}]})
    assert out == {'items': [{'invoiceId': 'INV001'}]}


def test_unknown_keys_get_case_conversion_both_ways():
    assert external_name('night_shift_rate') == 'nightShiftRate'
    assert storage_name('nightShiftRate') == 'night_shift_rate'
    assert storage_name('wardNumber') == 'ward_number'
    assert external_name('ward_number') == 'wardNumber'


def test_to_storage_keys():
    assert to_storage_keys({'bloodGroup': 'A+', 'emergencyContact': 'x', 'name': 'n'}) == {
        'blood_group': 'A+', 'emergency_contact': 'x', 'name': 'n',
    }


@pytest.mark.django_db
def test_flatten_model_row(make_patient):
    row = flatten(make_patient('P007'))
    assert row['id'] == 'P007'
    assert row['registration_date'] == '2024-01-10'
    assert isinstance(row['created_at'], datetime.datetime)
    out = rename_fields_and_timestamps(row)
    assert out['registrationDate'] == '2024-01-10'
    assert out['createdAt'].endswith('Z')


def test_renaming_tables_are_fixed():
    before = (dict(FIELD_NAMES), dict(WIRE_NAMES))
    assert storage_name('Name') == 'name'
    for i in range(50):
        storage_name(f'junkKey{i}')
        external_name(f'junk_key_{i}')
    assert (dict(FIELD_NAMES), dict(WIRE_NAMES)) == before
    assert external_name('name') == 'name'
    with pytest.raises(TypeError):
        FIELD_NAMES['name'] = 'Name'
