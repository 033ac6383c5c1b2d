from typing import List, Optional

from orgscope.models import Profile
from orgscope.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository):
    table_name = 'profiles'

    def __init__(self, adapter, message_adapter=None, message_queue_name='placeholder'):
        super().__init__(adapter, Profile, message_adapter, message_queue_name)

    def get_profile(self, account_id: str) -> Optional[Profile]:
        return self.get_one({"entity_id": account_id})

    def find_by_ids(self, account_ids: List[str]) -> List[Profile]:
        if not account_ids:
            return []
        return self.get_many({"entity_id": list(account_ids)}, limit=len(account_ids))

    def set_organization(self, account_id: str, organization_id: str) -> bool:
        """Makes `organization_id` the account's current organization."""
        return self.update_fields({"entity_id": account_id}, {"organization_id": organization_id}) > 0
