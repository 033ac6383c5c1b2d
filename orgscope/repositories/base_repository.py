"""
base repository for orgscope
"""
import json
import re
from typing import Any, Dict, List, Optional, Type, Union
from orgscope.data.base import DbAdapter
from orgscope.messaging.base import MessageAdapter
from orgscope.models.versioned_model import VersionedModel


class BaseRepository:
    """
    BaseRepository class
    """

    # Subclasses may pin the table name; otherwise it is derived from the model name
    table_name: Optional[str] = None

    def __init__(
        self,
        adapter: DbAdapter,
        model: Type[VersionedModel],
        message_adapter: MessageAdapter = None,
        queue_name: str = 'placeholder',
        user_id: str = None
    ):
        self.adapter = adapter
        self.message_adapter = message_adapter
        self.queue_name = queue_name
        self.model = model
        if self.table_name is None:
            self.table_name = re.sub(r'(?<!^)(?=[A-Z])', '_', model.__name__).lower()
        self.user_id = user_id

    def _execute_within_context(
        self,
        func,
        *args,
        **kwargs
    ):
        """Utility method to execute adapter methods within the context manager."""
        with self.adapter:
            return func(*args, **kwargs)

    def _process_data_before_save(
        self,
        instance: VersionedModel
    ) -> Dict[str, Any]:
        """Convert a VersionedModel instance to a data dictionary for the adapter."""
        instance.prepare_for_save(changed_by_id=self.user_id)
        return instance.as_dict(convert_datetime_to_iso_string=True)

    def get_one(
        self,
        conditions: Dict[str, Any],
        sort: List[tuple] = None
    ) -> Union[VersionedModel, None]:
        """
        Fetches a single record from the specified table based on given conditions.

        :param conditions: filter conditions
        :param sort: sort order
        :return: a VersionedModel instance if found, None otherwise
        """
        data = self._execute_within_context(
            self.adapter.get_one,
            self.table_name,
            conditions,
            sort
        )

        if not data:
            return None
        return self.model.from_dict(data)

    def get_many(
        self,
        conditions: Dict[str, Any] = None,
        sort: List[tuple] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[VersionedModel]:
        """
        Fetches multiple records from the specified table based on given conditions.

        :param conditions: filter conditions
        :param sort: sort order
        :param limit: maximum number of records to return
        :param offset: number of records to skip before returning results
        :return: list of VersionedModel instances
        """
        records = self._execute_within_context(
            self.adapter.get_many,
            self.table_name,
            conditions,
            sort,
            limit,
            offset
        )

        if isinstance(records, dict):
            records = [records]

        return [self.model.from_dict(record) for record in records or []]

    def save(
        self,
        instance: VersionedModel,
        send_message: bool = False
    ) -> VersionedModel:
        """
        Saves a VersionedModel instance to the database.

        :param instance: The VersionedModel instance to save.
        :param send_message: Whether to send a message to the message queue after saving. Defaults to False.
        :return: The saved VersionedModel instance.
        """
        data = self._process_data_before_save(instance)
        with self.adapter:
            move_entity_query = self.adapter.get_move_entity_to_audit_table_query(
                self.table_name, instance.entity_id)
            save_entity_query = self.adapter.get_save_query(
                self.table_name, data)
            self.adapter.run_transaction(
                [move_entity_query, save_entity_query])
        if send_message and self.message_adapter is not None:
            message = json.dumps(instance.as_dict(
                convert_datetime_to_iso_string=True))
            self.message_adapter.send_message(self.queue_name, message)

        return instance

    def update_fields(
        self,
        conditions: Dict[str, Any],
        values: Dict[str, Any]
    ) -> int:
        """
        Writes `values` to every active record matching `conditions`.

        :return: the number of records changed
        """
        return self._execute_within_context(
            self.adapter.update_fields,
            self.table_name,
            conditions,
            values
        )

    def delete(
        self,
        instance: VersionedModel
    ) -> VersionedModel:
        """
        Logically deletes a VersionedModel instance from the database by setting its active flag to False.

        :param instance: The VersionedModel instance to delete.
        :return: The deleted VersionedModel instance, which is now in a logically deleted state.
        """
        instance.active = False
        return self.save(instance)
