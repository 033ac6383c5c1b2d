"""OrganizationRepository class"""
from typing import Optional

from orgscope.models import Organization
from orgscope.repositories.base_repository import BaseRepository


class OrganizationRepository(BaseRepository):
    """OrganizationRepository class"""
    table_name = 'organizations'

    def __init__(self, adapter, message_adapter=None, message_queue_name='placeholder'):
        super().__init__(adapter, Organization, message_adapter, message_queue_name)

    def get_owner_account_id(self, organization_id: str) -> Optional[str]:
        """Account id of the organization owner, None if the organization is unknown"""
        instance = self.get_one({"entity_id": organization_id})
        if instance:
            return instance.owner_id
        return None
