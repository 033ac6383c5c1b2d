from .engine import (
    ReportIndex,
    OrgNode,
    build_report_index,
    subtree_of,
    would_create_cycle,
    has_cycle_through,
    find_viewer,
    eligible_assignees,
    visible_members,
    visible_member_names,
    visible_account_ids,
    can_manage_tasks,
    dedupe_by_account,
    chart_roots,
    build_org_tree,
)
from .errors import HierarchyError, StructuralConflictError, DuplicateMemberError, InviteUnavailableError
from .visibility import VisibilityScope, is_visible, filter_visible
