"""
Models for orgscope
"""

from .versioned_model import VersionedModel, ModelValidationError
from .member import Member, MemberStatus, HierarchyStatus, Root, ReportsTo, OWNER_ROLE
from .organization import Organization
from .profile import Profile
from .task import Task
