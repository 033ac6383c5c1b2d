"""
Filters tasks, calendar items and similar records down to what a viewer may see.

Records are read duck-typed: either objects with `assignee_id` / `assignee`
attributes or mappings with those keys. `assignee_id` holds an account id,
`assignee` the display name used by records that predate id-based assignment.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, List, Optional

from orgscope.models import Member
from orgscope.hierarchy.engine import build_report_index, visible_account_ids, visible_member_names


def _read(record: Any, name: str):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class VisibilityScope:
    viewer_account_id: Optional[str]
    is_owner: bool
    account_ids: FrozenSet[str]
    names: FrozenSet[str]

    @classmethod
    def for_viewer(cls, members: Iterable[Member], viewer_account_id: Optional[str], is_owner: bool = False) -> "VisibilityScope":
        index = build_report_index(members)
        return cls(
            viewer_account_id=viewer_account_id,
            is_owner=is_owner,
            account_ids=frozenset(visible_account_ids(index, viewer_account_id)),
            names=frozenset(n for n in visible_member_names(index, viewer_account_id) if n),
        )

    def allows(self, record: Any) -> bool:
        if self.is_owner:
            return True
        assignee_id = _read(record, 'assignee_id')
        if assignee_id:
            return assignee_id == self.viewer_account_id or assignee_id in self.account_ids
        # legacy records only carry the assignee's display name
        return _read(record, 'assignee') in self.names


def is_visible(record: Any, members: Iterable[Member], viewer_account_id: Optional[str], is_owner: bool = False) -> bool:
    return VisibilityScope.for_viewer(members, viewer_account_id, is_owner).allows(record)


def filter_visible(records: Iterable[Any], members: Iterable[Member], viewer_account_id: Optional[str],
                   is_owner: bool = False) -> List[Any]:
    """The records the viewer may see, in their original order."""
    scope = VisibilityScope.for_viewer(members, viewer_account_id, is_owner)
    return [record for record in records if scope.allows(record)]
