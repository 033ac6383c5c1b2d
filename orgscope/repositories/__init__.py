from .base_repository import BaseRepository
from .member_repository import MemberRepository
from .organization_repository import OrganizationRepository
from .profile_repository import ProfileRepository
