"""
Errors raised by hierarchy edits.

A viewer without a seat in the organization is not an error: every query
answers it with an empty result.
"""


class HierarchyError(Exception):
    """Base class for rejected hierarchy operations."""

    code = 'HIERARCHY_ERROR'

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self):
        return self.message


class StructuralConflictError(HierarchyError):
    """
    An edit would break the reporting forest. Raised before anything is written,
    except for COMMIT_CYCLE, where the write has already been rolled back.
    """

    CYCLE = 'CYCLE'
    SELF_MANAGEMENT = 'SELF_MANAGEMENT'
    UNKNOWN_MEMBER = 'UNKNOWN_MEMBER'
    UNKNOWN_MANAGER = 'UNKNOWN_MANAGER'
    ROOTLESS_MEMBER = 'ROOTLESS_MEMBER'
    OWNER_REMOVAL = 'OWNER_REMOVAL'
    RESERVED_ROLE = 'RESERVED_ROLE'
    COMMIT_CYCLE = 'COMMIT_CYCLE'

    def __init__(self, message: str, code: str, member_id: str = None, manager_id: str = None):
        super().__init__(message, code)
        self.member_id = member_id
        self.manager_id = manager_id


class DuplicateMemberError(HierarchyError):
    """The organization already has a seat for this e-mail address."""

    code = 'DUPLICATE_MEMBER'

    def __init__(self, email: str):
        super().__init__(f"A member with e-mail '{email}' already exists in this organization")
        self.email = email


class InviteUnavailableError(HierarchyError):
    """The invited seat was already claimed, withdrawn, or addressed to another e-mail."""

    code = 'INVITE_UNAVAILABLE'

    def __init__(self, member_id: str):
        super().__init__(f"Invitation '{member_id}' is not open for this account")
        self.member_id = member_id
