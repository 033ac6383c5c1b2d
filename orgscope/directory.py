"""
Member directory: the loaded, profile-enriched member list every hierarchy query runs on.
"""
import logging
from dataclasses import replace
from typing import List, Tuple

from orgscope.config import OrgScopeConfig
from orgscope.hierarchy.engine import dedupe_by_account
from orgscope.models import Member, Profile
from orgscope.repositories import MemberRepository, ProfileRepository

logger = logging.getLogger(__name__)

# profile field -> member field
PROFILE_TO_MEMBER = {
    'display_name': 'name',
    'email': 'email',
    'birthday': 'birthday',
    'phone': 'phone',
    'whatsapp': 'whatsapp',
    'telegram': 'telegram',
}


class MemberDirectory:
    def __init__(self, member_repository: MemberRepository, profile_repository: ProfileRepository,
                 config: OrgScopeConfig = None):
        self.member_repository = member_repository
        self.profile_repository = profile_repository
        self.config = config or OrgScopeConfig()

    def enrich(self, member: Member, profile: Profile) -> Member:
        """Copy of `member` with every non-empty profile field copied over."""
        patch = {}
        for profile_field in self.config.profile_fields:
            member_field = PROFILE_TO_MEMBER.get(profile_field)
            value = getattr(profile, profile_field, None)
            if member_field and value:
                patch[member_field] = value
        return replace(member, **patch) if patch else member

    def load_members(self, organization_id: str) -> List[Member]:
        """
        Members of the organization, oldest first, refreshed from their profiles and
        with at most one seat per account.
        """
        limit = self.config.member_fetch_limit
        members = self.member_repository.find_by_organization(organization_id, limit=limit)
        if not members:
            return []
        if len(members) >= limit:
            logger.warning("Organization %s has at least %d members; members past the first %d are "
                           "left out. Raise ORGSCOPE_MEMBER_FETCH_LIMIT.", organization_id, limit, limit)

        account_ids = [m.user_id for m in members if m.user_id]
        try:
            profiles = {p.entity_id: p for p in self.profile_repository.find_by_ids(account_ids)}
        except Exception as ex:
            logger.error("Could not load profiles for organization %s: %s", organization_id, ex)
            profiles = {}

        enriched = [
            self.enrich(m, profiles[m.user_id]) if m.user_id in profiles else m
            for m in members
        ]
        return dedupe_by_account(enriched)

    def snapshot(self, organization_id: str) -> Tuple[Member, ...]:
        return tuple(self.load_members(organization_id))
