"""
Task model
"""

from dataclasses import dataclass
from typing import Optional

from .versioned_model import VersionedModel


@dataclass
class Task(VersionedModel):
    """A task on the board."""

    organization_id: Optional[str] = None
    title: Optional[str] = None
    status: Optional[str] = None
    deadline: Optional[str] = None
    creator_id: Optional[str] = None
    # account id of the assignee; missing on tasks created before id-based assignment
    assignee_id: Optional[str] = None
    # display name of the assignee
    assignee: Optional[str] = None
