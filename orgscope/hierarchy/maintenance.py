"""
Keeps an organization's reporting lines a well-formed forest.

Reconciliation repairs what it can without asking: a missing or duplicated owner
seat, and members left without a manager. Every repair write targets one member
and one field, and orphan repairs only land while the manager is still unset, so
concurrent reconciliations converge instead of fighting. Explicit edits go
through `update_member`, which checks for loops against a fresh read before the
write and again after it.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from orgscope.config import OrgScopeConfig
from orgscope.directory import MemberDirectory
from orgscope.hierarchy.engine import build_report_index, has_cycle_through, would_create_cycle
from orgscope.hierarchy.errors import DuplicateMemberError, InviteUnavailableError, StructuralConflictError
from orgscope.models import Member, MemberStatus
from orgscope.repositories import MemberRepository, OrganizationRepository, ProfileRepository

logger = logging.getLogger(__name__)

UNCHANGED = object()


@dataclass(frozen=True)
class ManagerAssignment:
    member_id: str
    manager_id: str


@dataclass
class ReconciliationReport:
    organization_id: str
    owner: Optional[Member] = None
    created_owner: bool = False
    removed_duplicates: List[str] = field(default_factory=list)
    refreshed_owner: bool = False
    repaired: List[ManagerAssignment] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    members: Tuple[Member, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.created_owner or self.removed_duplicates or self.refreshed_owner or self.repaired)


def _created_key(member: Member):
    return member.created_at.timestamp() if member.created_at else float('inf')


class HierarchyMaintenancePolicy:
    def __init__(
        self,
        member_repository: MemberRepository,
        organization_repository: OrganizationRepository,
        profile_repository: ProfileRepository,
        config: OrgScopeConfig = None,
        directory: MemberDirectory = None
    ):
        self.member_repository = member_repository
        self.organization_repository = organization_repository
        self.profile_repository = profile_repository
        self.config = config or OrgScopeConfig()
        self.directory = directory or MemberDirectory(member_repository, profile_repository, self.config)

    @property
    def owner_role(self) -> str:
        return self.config.owner_role

    def is_owner(self, member: Member, owner_account_id: Optional[str] = None) -> bool:
        """Decided by account when the owner account is known, by role label otherwise."""
        if owner_account_id is not None:
            return member.user_id == owner_account_id
        return member.has_owner_role(self.owner_role)

    def find_owner(self, members, owner_account_id: Optional[str] = None) -> Optional[Member]:
        """The owner's seat: matched by account when known, by role label otherwise."""
        members = tuple(members)
        if owner_account_id is not None:
            seat = next((m for m in members if m.user_id == owner_account_id), None)
            if seat is not None:
                return seat
        return next((m for m in members if m.has_owner_role(self.owner_role)), None)

    def default_manager_id(self, members, owner_account_id: Optional[str] = None) -> Optional[str]:
        """Manager given to new seats: the owner."""
        owner = self.find_owner(members, owner_account_id)
        return owner.entity_id if owner else None

    # --- orphan repair ---

    def plan_orphan_repairs(self, members, owner: Optional[Member]) -> List[ManagerAssignment]:
        if owner is None:
            return []
        return [
            ManagerAssignment(m.entity_id, owner.entity_id)
            for m in members
            if m.entity_id != owner.entity_id
            and m.manager_id is None
            and not m.has_owner_role(self.owner_role)
        ]

    def repair_orphans(self, members, owner: Optional[Member],
                       report: ReconciliationReport = None) -> List[ManagerAssignment]:
        """
        Attaches every orphan to the owner. Returns the assignments that were written.
        """
        applied = []
        for assignment in self.plan_orphan_repairs(members, owner):
            try:
                written = self.member_repository.assign_manager(
                    assignment.member_id, assignment.manager_id, only_if_unassigned=True)
            except Exception as ex:
                message = f"orphan {assignment.member_id}: {ex}"
                logger.error("Could not attach orphan %s to owner %s: %s",
                             assignment.member_id, assignment.manager_id, ex)
                if report is not None:
                    report.failures.append(message)
                continue
            if not written:
                logger.info("Orphan %s already has a manager, left as is", assignment.member_id)
                continue
            logger.info("Attached orphan %s to owner %s", assignment.member_id, assignment.manager_id)
            applied.append(assignment)
        return applied

    # --- owner singleton repair ---

    @staticmethod
    def plan_owner_deduplication(members, owner_account_id: str) -> Tuple[Optional[Member], List[Member]]:
        """The earliest-created seat of the owner account, and every other seat it holds."""
        seats = sorted((m for m in members if m.user_id == owner_account_id), key=_created_key)
        if not seats:
            return None, []
        return seats[0], seats[1:]

    def ensure_owner_member(self, organization_id: str, report: ReconciliationReport = None) -> Optional[Member]:
        """
        Makes sure the owner holds exactly one seat with current profile details.
        Returns that seat, or None when the organization has no known owner.
        """
        report = report or ReconciliationReport(organization_id)
        owner_account_id = self.organization_repository.get_owner_account_id(organization_id)
        if owner_account_id is None:
            logger.warning("Organization %s has no owner on record", organization_id)
            return None

        seats = self.member_repository.find_by_account(organization_id, owner_account_id)
        profile = self.profile_repository.get_profile(owner_account_id)
        expected_name = (profile.display_name if profile else None) or 'Owner'
        expected_email = (profile.email if profile else None) or ''

        if not seats:
            seat = Member(
                user_id=owner_account_id,
                organization_id=organization_id,
                name=expected_name,
                email=expected_email,
                role=self.owner_role,
                status=MemberStatus.ONLINE,
                manager_id=None,
            )
            try:
                seat = self.member_repository.create_member(seat)
            except Exception as ex:
                logger.error("Could not create owner seat for organization %s: %s", organization_id, ex)
                report.failures.append(f"owner seat: {ex}")
                return None
            logger.info("Created owner seat %s for organization %s", seat.entity_id, organization_id)
            report.created_owner = True
            return seat

        owner, duplicates = self.plan_owner_deduplication(seats, owner_account_id)

        if owner.name != expected_name or owner.email != expected_email:
            try:
                self.member_repository.refresh_contact(owner.entity_id, expected_name, expected_email)
                owner = replace(owner, name=expected_name, email=expected_email)
                report.refreshed_owner = True
            except Exception as ex:
                logger.error("Could not refresh owner seat %s: %s", owner.entity_id, ex)
                report.failures.append(f"owner refresh: {ex}")

        if duplicates:
            duplicate_ids = [m.entity_id for m in duplicates]
            try:
                self.member_repository.deactivate(duplicates)
                report.removed_duplicates.extend(duplicate_ids)
                logger.info("Removed duplicate owner seats %s in organization %s", duplicate_ids, organization_id)
            except Exception as ex:
                logger.error("Could not remove duplicate owner seats %s: %s", duplicate_ids, ex)
                report.failures.append(f"owner duplicates: {ex}")

        return owner

    def reconcile(self, organization_id: str) -> ReconciliationReport:
        """
        Best-effort repair run on every team load. Failed writes are logged and listed
        in the report; the returned snapshot reflects the writes that succeeded.
        """
        report = ReconciliationReport(organization_id)
        try:
            owner_seat = self.ensure_owner_member(organization_id, report)
        except Exception as ex:
            logger.error("Owner check failed for organization %s: %s", organization_id, ex)
            report.failures.append(f"owner check: {ex}")
            owner_seat = None

        members = self.directory.load_members(organization_id)
        owner = self.find_owner(members, owner_seat.user_id if owner_seat else None)
        report.owner = owner

        applied = self.repair_orphans(members, owner, report)
        report.repaired.extend(applied)

        repaired = {a.member_id: a.manager_id for a in applied}
        report.members = tuple(
            replace(m, manager_id=repaired[m.entity_id]) if m.entity_id in repaired else m
            for m in members
        )
        return report

    # --- explicit edits ---

    def validate_edit(self, members, member_id: str, manager_id: Optional[str],
                      role: Optional[str] = None, owner_account_id: Optional[str] = None) -> Member:
        """
        Raises StructuralConflictError if pointing `member_id` at `manager_id` would
        break the forest. Returns the member being edited.
        """
        index = build_report_index(members)
        target = index.by_id.get(member_id)
        if target is None:
            raise StructuralConflictError(
                f"Member '{member_id}' is not part of this organization",
                StructuralConflictError.UNKNOWN_MEMBER, member_id, manager_id)

        if role is not None and role != target.role and not self.is_owner(target, owner_account_id):
            if replace(target, role=role).has_owner_role(self.owner_role):
                raise StructuralConflictError(
                    f"The '{self.owner_role}' role belongs to the organization owner",
                    StructuralConflictError.RESERVED_ROLE, member_id, manager_id)

        if manager_id is None:
            # a member still waiting for orphan repair may keep its empty pointer
            if target.manager_id is not None and not self.is_owner(target, owner_account_id):
                raise StructuralConflictError(
                    "Only the owner can be left without a manager",
                    StructuralConflictError.ROOTLESS_MEMBER, member_id, manager_id)
            return target

        if manager_id == member_id:
            raise StructuralConflictError(
                "A member cannot report to themselves",
                StructuralConflictError.SELF_MANAGEMENT, member_id, manager_id)
        if manager_id not in index.by_id:
            raise StructuralConflictError(
                f"Manager '{manager_id}' is not part of this organization",
                StructuralConflictError.UNKNOWN_MANAGER, member_id, manager_id)
        if would_create_cycle(index, member_id, manager_id):
            raise StructuralConflictError(
                "Cannot set reporting line: circular dependency detected",
                StructuralConflictError.CYCLE, member_id, manager_id)
        return target

    def update_member(self, organization_id: str, member_id: str, manager_id=UNCHANGED, role=UNCHANGED) -> Member:
        """
        Changes the manager and/or role of one member in a single write.
        """
        members = self.directory.load_members(organization_id)
        owner_account_id = self.organization_repository.get_owner_account_id(organization_id)
        target = build_report_index(members).by_id.get(member_id)
        if target is None:
            raise StructuralConflictError(
                f"Member '{member_id}' is not part of this organization",
                StructuralConflictError.UNKNOWN_MEMBER, member_id)

        new_manager_id = target.manager_id if manager_id is UNCHANGED else manager_id
        new_role = target.role if role is UNCHANGED else role
        self.validate_edit(members, member_id, new_manager_id, new_role, owner_account_id)

        values = {}
        if new_manager_id != target.manager_id:
            values['manager_id'] = new_manager_id
        if new_role != target.role:
            values['role'] = new_role
        if not values:
            return target

        self.member_repository.update_hierarchy(member_id, **values)

        if 'manager_id' in values:
            committed = self.directory.load_members(organization_id)
            if has_cycle_through(committed, member_id):
                # a concurrent edit slipped in between our read and our write
                if self.member_repository.replace_manager(member_id, new_manager_id, target.manager_id):
                    logger.error("Reverted manager of %s to %s: concurrent edit closed a loop",
                                 member_id, target.manager_id)
                else:
                    logger.warning("Manager of %s changed again before the revert, left as is", member_id)
                raise StructuralConflictError(
                    "Cannot set reporting line: circular dependency detected",
                    StructuralConflictError.COMMIT_CYCLE, member_id, new_manager_id)

        logger.info("Updated member %s: %s", member_id, values)
        return replace(target, **values)

    def invite_member(self, organization_id: str, email: str, role: str = None, name: str = None) -> Member:
        """Creates an invited seat reporting to the owner."""
        email = email.strip()
        members = self.directory.load_members(organization_id)
        if any((m.email or '').lower() == email.lower() for m in members):
            raise DuplicateMemberError(email)

        owner_account_id = self.organization_repository.get_owner_account_id(organization_id)
        member = Member(
            organization_id=organization_id,
            name=name or email.split('@')[0],
            email=email,
            role=(role or '').strip() or self.config.default_role,
            avatar='',
            status=MemberStatus.OFFLINE,
            manager_id=self.default_manager_id(members, owner_account_id),
        )
        return self.member_repository.create_member(member)

    def add_joined_member(self, organization_id: str, account_id: str, role: str = None) -> Member:
        """
        Gives an account whose join request was approved a seat reporting to the owner.
        An account that already holds a seat keeps it.
        """
        members = self.directory.load_members(organization_id)
        seat = next((m for m in members if m.user_id == account_id), None)
        if seat is not None:
            logger.info("Account %s already holds seat %s in organization %s",
                        account_id, seat.entity_id, organization_id)
            return seat

        profile = self.profile_repository.get_profile(account_id)
        owner_account_id = self.organization_repository.get_owner_account_id(organization_id)
        member = Member(
            user_id=account_id,
            organization_id=organization_id,
            name=(profile.display_name if profile else None) or 'New Member',
            email=(profile.email if profile else None) or '',
            role=(role or '').strip() or self.config.default_role,
            status=MemberStatus.OFFLINE,
            manager_id=self.default_manager_id(members, owner_account_id),
        )
        member = self.member_repository.create_member(member)
        logger.info("Added member %s for account %s to organization %s",
                    member.entity_id, account_id, organization_id)
        return member

    def accept_invite(self, organization_id: str, member_id: str, account_id: str) -> Member:
        """
        Links the invited seat `member_id` to `account_id`. The seat keeps its manager
        and role. Raises InviteUnavailableError unless the seat is still unclaimed and
        addressed to the account's e-mail.
        """
        profile = self.profile_repository.get_profile(account_id)
        email = profile.email if profile else None
        if not email:
            raise InviteUnavailableError(member_id)
        name = profile.display_name or email.split('@')[0]

        if not self.member_repository.claim_invite(member_id, account_id, email, name):
            raise InviteUnavailableError(member_id)
        self.profile_repository.set_organization(account_id, organization_id)

        logger.info("Account %s accepted invitation %s", account_id, member_id)
        return self.member_repository.get_member(member_id)

    def remove_member(self, organization_id: str, member_id: str) -> List[str]:
        """
        Removes a seat. Its direct reports move to the owner first.
        Returns the ids of the members that were moved.
        """
        members = self.directory.load_members(organization_id)
        owner_account_id = self.organization_repository.get_owner_account_id(organization_id)
        index = build_report_index(members)
        target = index.by_id.get(member_id)
        if target is None:
            raise StructuralConflictError(
                f"Member '{member_id}' is not part of this organization",
                StructuralConflictError.UNKNOWN_MEMBER, member_id)
        if self.is_owner(target, owner_account_id):
            raise StructuralConflictError(
                "The organization owner cannot be removed",
                StructuralConflictError.OWNER_REMOVAL, member_id)

        owner = self.find_owner(members, owner_account_id)
        moved = []
        for report in index.direct_reports(member_id):
            if owner is None:
                logger.warning("No owner to take over %s from removed member %s", report.entity_id, member_id)
                continue
            self.member_repository.assign_manager(report.entity_id, owner.entity_id)
            moved.append(report.entity_id)

        self.member_repository.deactivate([target])
        logger.info("Removed member %s, moved %s to the owner", member_id, moved)
        return moved
