"""
Tests for the models
"""
from datetime import datetime

import pytest

from orgscope.models import (
    Member, MemberStatus, ModelValidationError, Organization, ReportsTo, Root, Task,
)
from orgscope.models.versioned_model import get_uuid_hex


def test_member_hierarchy_status():
    assert Member(entity_id='o').hierarchy == Root()
    assert Member(entity_id='e', manager_id='m').hierarchy == ReportsTo('m')
    assert Member(entity_id='o').is_root
    assert not Member(entity_id='e', manager_id='m').is_root


def test_invited_member_has_no_account():
    assert Member(email='new@example.com').is_invited
    assert not Member(user_id='u-1').is_invited


@pytest.mark.parametrize("role,expected", [
    ('owner', True), (' Owner ', True), ('Manager', False), (None, False),
])
def test_has_owner_role(role, expected):
    assert Member(role=role).has_owner_role() is expected


def test_has_custom_owner_role():
    assert Member(role='Founder').has_owner_role('founder')


def test_from_dict_converts_stored_values():
    member = Member.from_dict({
        'entity_id': 'e1',
        'status': 'online',
        'created_at': '2024-01-02T03:04:05+00:00',
        'changed_on': '2024-01-02T03:04:05Z',
        'manager_id': None,
        'legacy_column': 1,
    })
    assert member.status is MemberStatus.ONLINE
    assert member.created_at == datetime.fromisoformat('2024-01-02T03:04:05+00:00')
    assert isinstance(member.changed_on, datetime)
    assert member.manager_id is None


def test_as_dict_exports_plain_values():
    member = Member(entity_id='e1', status=MemberStatus.AWAY)
    data = member.as_dict(convert_datetime_to_iso_string=True)
    assert data['status'] == 'away'
    assert isinstance(data['created_at'], str)
    assert set(Member.fields()) <= set(data)


def test_validate_coerces_status_strings():
    member = Member(status='away')
    member.validate()
    assert member.status is MemberStatus.AWAY


def test_validate_rejects_unknown_status():
    with pytest.raises(ModelValidationError) as exc:
        Member(status='busy').validate()
    assert "Invalid status 'busy'" in str(exc.value)


def test_prepare_for_save_rotates_version():
    member = Member(entity_id='e1')
    first = member.version
    member.prepare_for_save(changed_by_id='u-admin')
    assert member.previous_version == first
    assert member.version != first
    assert member.changed_by_id == 'u-admin'


def test_model_validation_error_accepts_a_string():
    assert ModelValidationError('broken').errors == ['broken']
    with pytest.raises(ValueError):
        ModelValidationError(42)


def test_other_models_load_from_dict():
    organization = Organization.from_dict({'entity_id': 'org-1', 'owner_id': 'u-o', 'name': 'Acme'})
    assert organization.owner_id == 'u-o'
    task = Task.from_dict({'title': 'Ship', 'assignee_id': 'u-e'})
    assert task.assignee_id == 'u-e'


def test_uuid_hex():
    assert get_uuid_hex(0) == '00000000000040008000000000000000'
    assert len(get_uuid_hex()) == 32
