"""
Member model
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from .versioned_model import VersionedModel, default_datetime

OWNER_ROLE = 'owner'


class MemberStatus(str, Enum):
    ONLINE = 'online'
    OFFLINE = 'offline'
    AWAY = 'away'

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Root:
    """Hierarchy status of a member that reports to nobody."""


@dataclass(frozen=True)
class ReportsTo:
    """Hierarchy status of a member with a manager."""

    manager_id: str


HierarchyStatus = Union[Root, ReportsTo]


@dataclass
class Member(VersionedModel):
    """
    A person's seat in one organization.

    `entity_id` identifies the seat itself. `user_id` links it to an account and is
    None while the seat is an invitation nobody has accepted yet. `manager_id` is
    the entity_id of the member this one reports to.
    """

    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    avatar: Optional[str] = None
    status: MemberStatus = MemberStatus.OFFLINE
    manager_id: Optional[str] = None
    birthday: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    telegram: Optional[str] = None
    created_at: datetime = field(default_factory=default_datetime)

    @property
    def hierarchy(self) -> HierarchyStatus:
        if self.manager_id is None:
            return Root()
        return ReportsTo(self.manager_id)

    @property
    def is_root(self) -> bool:
        return isinstance(self.hierarchy, Root)

    @property
    def is_invited(self) -> bool:
        return self.user_id is None

    def has_owner_role(self, owner_role: str = OWNER_ROLE) -> bool:
        return (self.role or '').strip().lower() == owner_role.lower()

    def validate_status(self):
        if not isinstance(self.status, MemberStatus):
            try:
                self.status = MemberStatus(self.status)
            except ValueError:
                return f"Invalid status '{self.status}': expected one of online, offline, away"
        return None
