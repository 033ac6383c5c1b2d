import json
import time
import logging
import psycopg2
from enum import Enum
from typing import Any, Dict, List, Tuple, Union, Optional, Callable

from orgscope.data.base import DbAdapter

logger = logging.getLogger(__name__)


class PostgreSQLAdapter(DbAdapter):
    """PostgreSQL adapter for the member directory tables."""

    def __init__(self, host: str, port: int, user: str, password: str, database: str,
                 connection_resolver: Optional[Callable] = None, connection_closer: Optional[Callable] = None):
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._database = database
        self._connection = None
        self._cursor = None

        if connection_resolver is None:
            self._connection_resolver = psycopg2.connect
        else:
            self._connection_resolver = connection_resolver

        self._connection_closer = connection_closer

    def __enter__(self):
        """Context manager entry point for creating DB connection."""
        self._connection = self.connect
        self._cursor = self._connection.cursor()

        return self

    def __exit__(self, exc_type, exc_value, traceback):
        """Context manager exit point for closing DB connection."""
        self.close_connection()

    def close_connection(self):
        """Closes the connection and cursor."""

        if self._connection_closer:
            self._connection_closer(self)
        else:
            if self._cursor is not None:
                self._cursor.close()
                self._cursor = None

            if self._connection is not None:
                self._connection.close()
                self._connection = None

    @property
    def connect(self):
        return self._connection_resolver(
            host=self._host,
            port=self._port,
            user=self._user,
            password=self._password,
            database=self._database
        )

    def _call_cursor(self, function_name, *args, **kwargs):
        """Calls a function specified by function_name argument in PostgreSQL Cursor passing forward args and kwargs."""
        if not self._cursor:
            raise Exception("No cursor is available.")
        return getattr(self._cursor, function_name)(*args, **kwargs)

    @staticmethod
    def _to_db_value(value):
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            return json.dumps(value)
        return value

    def _build_condition_string(self, table, key, value):
        if '.' not in key:
            key = f"{table}.{key}"

        if value is None:
            return f"{key} IS NULL", []
        elif isinstance(value, (list, tuple)):
            if not value:
                return "FALSE", []
            placeholders = ', '.join(['%s'] * len(value))
            return f"{key} IN ({placeholders})", [self._to_db_value(v) for v in value]
        elif isinstance(value, (str, bool, int, float, Enum)):
            return f"{key} = %s", [self._to_db_value(value)]
        else:
            raise Exception(
                f"Unsupported type {type(value)} for condition key: {key}, value: {value}")

    def _build_where(self, table, conditions, active=True):
        condition_strs_values = []
        if conditions:
            condition_strs_values = [self._build_condition_string(
                table, k, v) for k, v in conditions.items()]
        if active:
            condition_strs_values.append((f"{table}.active = %s", [True]))

        if not condition_strs_values:
            return "", []
        where = f" WHERE {' AND '.join(condition_str for condition_str, _ in condition_strs_values)}"
        values = sum((condition_value for _, condition_value in condition_strs_values), [])
        return where, values

    def get_move_entity_to_audit_table_query(self, table, entity_id):
        """Returns the query to move an entity to audit table."""
        return f"""INSERT INTO {table}_audit (SELECT * FROM {table} WHERE entity_id=%s)""", (entity_id,)

    def execute_query(self, sql, _vars=None):
        """Executes a query against the DB."""
        if _vars is None:
            _vars = {}

        self._call_cursor('execute', sql, _vars)

        if sql.strip().upper().startswith("SELECT"):
            column_names = [desc[0] for desc in self._cursor.description]
            return [dict(zip(column_names, row)) for row in self._call_cursor('fetchall')]
        else:
            self._connection.commit()
            return None

    def run_transaction(self, queries_list):
        """Executes a list of queries in a single transaction against the database."""
        try:
            for query in queries_list:
                if type(query) is tuple:
                    query, values = query
                else:
                    values = ()
                self._cursor.execute(query, [self._to_db_value(value) for value in values])
            self._connection.commit()
        except psycopg2.Error:
            self._connection.rollback()
            raise

    def get_one(
            self,
            table: str,
            conditions: Dict[str, Any],
            sort: List[Tuple[str, str]] = None
    ) -> Optional[Dict[str, Any]]:
        rows = self.get_many(table, conditions, sort, limit=1)
        return rows[0] if rows else None

    def get_many(
            self,
            table: str,
            conditions: Dict[str, Any] = None,
            sort: List[Tuple[str, str]] = None,
            limit: int = None,
            offset: int = None,
            active: bool = True
    ) -> List[Dict[str, Any]]:
        where, values = self._build_where(table, conditions, active=active)
        query = f"SELECT {table}.* FROM {table}{where}"

        if sort:
            sort_strs = [f"{column} {direction}" for column, direction in sort]
            query += f" ORDER BY {', '.join(sort_strs)}"
        if limit is not None:
            query += f" LIMIT {int(limit)}"
        if offset:
            query += f" OFFSET {int(offset)}"

        rows = self.execute_query(query, tuple(values))
        return rows or []

    def get_save_query(self, table_name, data):
        """Returns an upsert query keyed on entity_id."""
        columns = list(data.keys())
        placeholders = ', '.join(['%s'] * len(columns))
        update_columns = ', '.join(
            f"{col} = EXCLUDED.{col}" for col in columns if col != 'entity_id')

        query = (
            f"INSERT INTO {table_name} ({', '.join(columns)}) "
            f"VALUES ({placeholders}) "
            f"ON CONFLICT (entity_id) DO UPDATE SET {update_columns}"
        )
        return query, tuple(data.values())

    def _save_in_database(self, table_name, data, retry_count=0):
        try:
            query, values = self.get_save_query(table_name, data)
            self._cursor.execute(query, [self._to_db_value(value) for value in values])
            self._connection.commit()
            return True
        except psycopg2.errors.DeadlockDetected:
            self._connection.rollback()
            if retry_count < 3:
                logger.warning("Deadlock detected on table %s. Retrying in %d seconds. Attempt %d",
                               table_name, 2**retry_count, retry_count+1)
                time.sleep(2**retry_count)
                return self._save_in_database(table_name, data, retry_count=retry_count+1)
            raise
        except psycopg2.Error as ex:
            self._connection.rollback()
            logger.error("Error in SQL:\n%s", ex)
            raise

    def save(self, table: str, data: Dict[str, Any]) -> Union[Dict[str, Any], None]:
        self._save_in_database(table, data)
        return data

    def update_fields(self, table: str, conditions: Dict[str, Any], values: Dict[str, Any]) -> int:
        if not values:
            return 0
        where, where_values = self._build_where(table, conditions)
        assignments = ', '.join(f"{column} = %s" for column in values)
        query = f"UPDATE {table} SET {assignments}{where}"
        params = [self._to_db_value(v) for v in values.values()] + where_values

        self._call_cursor('execute', query, tuple(params))
        self._connection.commit()
        return self._cursor.rowcount

    def delete(self, table: str, data: Dict[str, Any]) -> bool:
        # Set active = false
        data['active'] = False
        self.save(table, data)
        return True
