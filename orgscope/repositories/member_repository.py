"""MemberRepository class"""
from typing import List, Optional

from orgscope.models import Member, MemberStatus
from orgscope.repositories.base_repository import BaseRepository

NEWEST_LAST = [('created_at', 'ASC')]


class MemberRepository(BaseRepository):
    """Reads and single-field writes against the `team_members` table."""

    table_name = 'team_members'

    def __init__(self, adapter, message_adapter=None, message_queue_name='member-changes', user_id=None):
        super().__init__(adapter, Member, message_adapter, message_queue_name, user_id=user_id)

    def find_by_organization(self, organization_id: str, limit: int = 1000) -> List[Member]:
        """All members of an organization, oldest first."""
        return self.get_many({"organization_id": organization_id}, sort=NEWEST_LAST, limit=limit)

    def find_by_account(self, organization_id: str, user_id: str) -> List[Member]:
        """Every seat an account holds in an organization, oldest first."""
        conditions = {"organization_id": organization_id, "user_id": user_id}
        return self.get_many(conditions, sort=NEWEST_LAST)

    def find_by_email(self, organization_id: str, email: str) -> Optional[Member]:
        return self.get_one({"organization_id": organization_id, "email": email})

    def get_member(self, member_id: str) -> Optional[Member]:
        return self.get_one({"entity_id": member_id})

    def assign_manager(self, member_id: str, manager_id: Optional[str], only_if_unassigned: bool = False) -> bool:
        """
        Points `member_id` at `manager_id`.

        With `only_if_unassigned` the write only lands while the member's manager is
        still NULL, so it never overrides a pointer someone else set meanwhile.
        """
        conditions = {"entity_id": member_id}
        if only_if_unassigned:
            conditions["manager_id"] = None
        return self.update_fields(conditions, {"manager_id": manager_id}) > 0

    def replace_manager(self, member_id: str, expected_manager_id: Optional[str], manager_id: Optional[str]) -> bool:
        """Points `member_id` at `manager_id` only while it still reports to `expected_manager_id`."""
        conditions = {"entity_id": member_id, "manager_id": expected_manager_id}
        return self.update_fields(conditions, {"manager_id": manager_id}) > 0

    def update_hierarchy(self, member_id: str, **values) -> bool:
        """Writes the manager pointer and/or role of one member in a single update."""
        allowed = {k: v for k, v in values.items() if k in ("manager_id", "role")}
        if not allowed:
            return False
        return self.update_fields({"entity_id": member_id}, allowed) > 0

    def refresh_contact(self, member_id: str, name: str, email: str) -> bool:
        return self.update_fields({"entity_id": member_id}, {"name": name, "email": email}) > 0

    def claim_invite(self, member_id: str, user_id: str, email: str, name: str) -> bool:
        """
        Links an invited seat to an account. Lands only while the seat is still
        unclaimed and addressed to `email`.
        """
        conditions = {"entity_id": member_id, "user_id": None, "email": email}
        values = {"user_id": user_id, "name": name, "status": MemberStatus.ONLINE, "avatar": ""}
        return self.update_fields(conditions, values) > 0

    def deactivate(self, members: List[Member]) -> int:
        """Logically deletes the given members through a versioned, audited save."""
        for member in members:
            self.delete(member)
        return len(members)

    def create_member(self, member: Member) -> Member:
        return self.save(member, send_message=self.message_adapter is not None)
