"""
Reporting-line queries over one organization's members.

Every function freezes the members it is given into a tuple and never mutates
them, so callers can share one loaded list between concurrent readers. A member
with no manager is a root; the role label plays no part in that decision.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from orgscope.models import Member

logger = logging.getLogger(__name__)


class ReportIndex:
    """Members of one organization keyed by id and by manager, built once per snapshot."""

    def __init__(self, members: Iterable[Member]):
        self.members: Tuple[Member, ...] = tuple(members)
        self.by_id: Dict[str, Member] = {}
        reports = defaultdict(list)
        for member in self.members:
            self.by_id.setdefault(member.entity_id, member)
            if member.manager_id is not None:
                reports[member.manager_id].append(member)
        self._reports = {manager_id: tuple(subs) for manager_id, subs in reports.items()}

    def direct_reports(self, member_id: str) -> Tuple[Member, ...]:
        return self._reports.get(member_id, ())

    def subtree(self, root_id: str) -> List[Member]:
        """
        Direct reports of `root_id` in list order, then the subtree of each of them
        in the same order. A member is emitted at most once, so a corrupt cyclic
        snapshot still terminates.
        """
        result = []
        seen = {root_id}
        pending = [root_id]
        while pending:
            children = [m for m in self.direct_reports(pending.pop()) if m.entity_id not in seen]
            for child in children:
                seen.add(child.entity_id)
            result.extend(children)
            pending.extend(reversed([c.entity_id for c in children]))
        return result

    def find_by_account(self, account_id: Optional[str]) -> Optional[Member]:
        if account_id is None:
            return None
        return next((m for m in self.members if m.user_id == account_id), None)


def build_report_index(members: Iterable[Member]) -> ReportIndex:
    return members if isinstance(members, ReportIndex) else ReportIndex(members)


def subtree_of(members: Iterable[Member], root_id: str) -> List[Member]:
    """Every member reporting to `root_id`, directly or transitively. Excludes `root_id`."""
    return build_report_index(members).subtree(root_id)


def would_create_cycle(members: Iterable[Member], target_id: str, candidate_manager_id: Optional[str]) -> bool:
    """
    True if making `candidate_manager_id` the manager of `target_id` closes a loop.

    Walks up from the candidate. The walk ends at a root, at a manager id that is
    not in the list, or at a member already walked past.
    """
    if candidate_manager_id is None:
        return False
    if candidate_manager_id == target_id:
        return True

    index = build_report_index(members)
    seen = set()
    current = candidate_manager_id
    while current is not None:
        if current == target_id:
            return True
        member = index.by_id.get(current)
        if member is None:
            break
        if current in seen:
            logger.warning("Reporting line above %s already loops at %s", candidate_manager_id, current)
            break
        seen.add(current)
        current = member.manager_id
    return False


def has_cycle_through(members: Iterable[Member], member_id: str) -> bool:
    """True if following managers up from `member_id` leads back to it."""
    index = build_report_index(members)
    member = index.by_id.get(member_id)
    if member is None:
        return False
    seen = set()
    current = member.manager_id
    while current is not None and current not in seen:
        if current == member_id:
            return True
        manager = index.by_id.get(current)
        if manager is None:
            return False
        seen.add(current)
        current = manager.manager_id
    return False


def find_viewer(members: Iterable[Member], viewer_account_id: Optional[str]) -> Optional[Member]:
    return build_report_index(members).find_by_account(viewer_account_id)


def eligible_assignees(members: Iterable[Member], viewer_account_id: Optional[str]) -> List[Member]:
    """
    Members the viewer may assign tasks to.

    - Unknown viewer: nobody.
    - Root viewer: everybody.
    - Anybody else: themselves and everyone below them, never peers or managers.
    """
    index = build_report_index(members)
    viewer = index.find_by_account(viewer_account_id)
    if viewer is None:
        return []
    if viewer.is_root:
        return list(index.members)
    return [viewer] + index.subtree(viewer.entity_id)


def visible_members(members: Iterable[Member], viewer_account_id: Optional[str]) -> List[Member]:
    """Members whose records the viewer may see. Same rule as `eligible_assignees`."""
    return eligible_assignees(members, viewer_account_id)


def visible_member_names(members: Iterable[Member], viewer_account_id: Optional[str]) -> List[str]:
    return [m.name for m in visible_members(members, viewer_account_id)]


def visible_account_ids(members: Iterable[Member], viewer_account_id: Optional[str]) -> List[str]:
    """Account ids of the visible members. Invited seats have no account and are skipped."""
    return [m.user_id for m in visible_members(members, viewer_account_id) if m.user_id is not None]


def can_manage_tasks(members: Iterable[Member], viewer_account_id: Optional[str], is_owner: bool = False) -> bool:
    """Owners, roots and anyone with at least one report may hand out work."""
    if is_owner:
        return True
    index = build_report_index(members)
    viewer = index.find_by_account(viewer_account_id)
    if viewer is None:
        return False
    return viewer.is_root or bool(index.direct_reports(viewer.entity_id))


def dedupe_by_account(members: Iterable[Member]) -> List[Member]:
    """Keeps the first seat per account. Invited seats are all kept."""
    seen = set()
    unique = []
    for member in members:
        if member.user_id is not None:
            if member.user_id in seen:
                continue
            seen.add(member.user_id)
        unique.append(member)
    return unique


def chart_roots(members: Iterable[Member]) -> List[Member]:
    """Members drawn at the top of the org chart: no manager, or a manager missing from the list."""
    index = build_report_index(members)
    return [m for m in index.members if m.manager_id is None or m.manager_id not in index.by_id]


@dataclass
class OrgNode:
    member: Member
    depth: int = 0
    children: List["OrgNode"] = field(default_factory=list)

    @property
    def direct_reports(self) -> int:
        return len(self.children)


def build_org_tree(members: Iterable[Member]) -> List[OrgNode]:
    """Nested org chart, one node per member reachable from a chart root."""
    index = build_report_index(members)
    placed = set()

    def _walk(member: Member, depth: int) -> OrgNode:
        placed.add(member.entity_id)
        node = OrgNode(member=member, depth=depth)
        for child in index.direct_reports(member.entity_id):
            if child.entity_id not in placed:
                node.children.append(_walk(child, depth + 1))
        return node

    tree = [_walk(root, 0) for root in chart_roots(index)]

    missing = len(index.by_id) - len(placed)
    if missing:
        logger.warning("%d member(s) sit on a reporting loop and are missing from the org chart", missing)
    return tree
