"""
Tests for MemberDirectory
"""
import logging

import pytest

from orgscope.config import OrgScopeConfig
from orgscope.directory import MemberDirectory
from orgscope.models import Member, Profile
from orgscope.repositories import MemberRepository, ProfileRepository


@pytest.fixture
def config(monkeypatch):
    monkeypatch.delenv('ORGSCOPE_PROFILE_FIELDS', raising=False)
    monkeypatch.setenv('ORGSCOPE_MEMBER_FETCH_LIMIT', '250')
    return OrgScopeConfig()


@pytest.fixture
def member_repository(mocker):
    repository = mocker.Mock(spec=MemberRepository)
    repository.find_by_organization.return_value = [
        Member(entity_id='a', user_id='u-a', name='placeholder', email='a@old.example.com'),
        Member(entity_id='b', user_id='u-b', name='Bea'),
        Member(entity_id='a2', user_id='u-a', name='duplicate seat'),
        Member(entity_id='i', user_id=None, name='invited', email='i@example.com'),
    ]
    return repository


@pytest.fixture
def profile_repository(mocker):
    repository = mocker.Mock(spec=ProfileRepository)
    repository.find_by_ids.return_value = [
        Profile(entity_id='u-a', display_name='Ada', email='ada@example.com', phone='+100', telegram=None),
    ]
    return repository


def test_load_members_enriches_and_dedupes(config, member_repository, profile_repository):
    directory = MemberDirectory(member_repository, profile_repository, config)

    members = directory.load_members('org-1')

    member_repository.find_by_organization.assert_called_once_with('org-1', limit=250)
    profile_repository.find_by_ids.assert_called_once_with(['u-a', 'u-b', 'u-a'])
    assert [m.entity_id for m in members] == ['a', 'b', 'i']
    assert members[0].name == 'Ada'
    assert members[0].email == 'ada@example.com'
    assert members[0].phone == '+100'
    assert members[1].name == 'Bea'


def test_load_members_does_not_touch_repository_objects(config, member_repository, profile_repository):
    original = member_repository.find_by_organization.return_value[0]
    MemberDirectory(member_repository, profile_repository, config).load_members('org-1')
    assert original.name == 'placeholder'


def test_profile_failure_returns_unenriched(config, member_repository, profile_repository, caplog):
    profile_repository.find_by_ids.side_effect = RuntimeError('profiles table missing')
    directory = MemberDirectory(member_repository, profile_repository, config)

    with caplog.at_level(logging.ERROR):
        members = directory.load_members('org-1')

    assert members[0].name == 'placeholder'
    assert 'Could not load profiles for organization org-1' in caplog.text


def test_empty_organization(config, member_repository, profile_repository):
    member_repository.find_by_organization.return_value = []
    directory = MemberDirectory(member_repository, profile_repository, config)

    assert directory.snapshot('org-1') == ()
    profile_repository.find_by_ids.assert_not_called()


def test_profile_fields_are_configurable(monkeypatch, member_repository, profile_repository):
    monkeypatch.setenv('ORGSCOPE_PROFILE_FIELDS', 'email')
    directory = MemberDirectory(member_repository, profile_repository, OrgScopeConfig())

    members = directory.load_members('org-1')

    assert members[0].name == 'placeholder'
    assert members[0].email == 'ada@example.com'


def test_warns_when_fetch_limit_is_reached(monkeypatch, member_repository, profile_repository, caplog):
    monkeypatch.setenv('ORGSCOPE_MEMBER_FETCH_LIMIT', '4')
    directory = MemberDirectory(member_repository, profile_repository, OrgScopeConfig())

    with caplog.at_level(logging.WARNING):
        directory.load_members('org-1')

    assert 'Organization org-1 has at least 4 members' in caplog.text


def test_no_warning_below_fetch_limit(config, member_repository, profile_repository, caplog):
    with caplog.at_level(logging.WARNING):
        MemberDirectory(member_repository, profile_repository, config).load_members('org-1')

    assert 'ORGSCOPE_MEMBER_FETCH_LIMIT' not in caplog.text
