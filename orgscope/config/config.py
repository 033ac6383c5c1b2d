"""
Config classes that read settings from the environment, and/or a .env file.
"""
import os
from abc import abstractmethod
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_FIELDS = ['display_name', 'email', 'birthday', 'phone', 'whatsapp', 'telegram']


class BaseConfig():
    """
    Config class that snapshots the environment after loading a .env file.
    """
    def __init__(self):
        load_dotenv()
        self.env_vars = {key: os.getenv(key) for key in os.environ}

    def get_env_vars(self) -> dict:
        """
        Return the dictionary containing all environment variables
        """
        return self.env_vars

    def get_env_var(self, var_name: str, default=None):
        """
        Retrieve the value of the specified environment variable
        Args:
            var_name (str) : Name of the env var to fetch
            default : Value returned when the variable is not set
        """
        if var_name in self.env_vars.keys():
            return self.env_vars[var_name]
        if default is None:
            logger.warning("Variable %s not found.", var_name)
        return default

    def get_var_as_list(self, var_name: str, default: list = None) -> list:
        """
        Returns a comma-delimited var as list
        """
        if var_name in self.env_vars.keys():
            return [env_var.strip() for env_var in self.env_vars[var_name].split(",") if env_var.strip()]
        return default

    @abstractmethod
    def validate_env_vars(self):
        """
        Abstract method for validation of the env vars.
        """


class OrgScopeConfig(BaseConfig):
    """
    Settings for the hierarchy engine, the maintenance policy and the member directory.
    """

    @property
    def owner_role(self) -> str:
        return self.get_env_var('ORGSCOPE_OWNER_ROLE', 'owner')

    @property
    def default_role(self) -> str:
        return self.get_env_var('ORGSCOPE_DEFAULT_ROLE', 'Employee')

    @property
    def member_fetch_limit(self) -> int:
        return int(self.get_env_var('ORGSCOPE_MEMBER_FETCH_LIMIT', '1000'))

    @property
    def profile_fields(self) -> list:
        return self.get_var_as_list('ORGSCOPE_PROFILE_FIELDS', DEFAULT_PROFILE_FIELDS)

    def get_postgres_settings(self) -> dict:
        """
        Connection settings for PostgreSQLAdapter.
        """
        return {
            'host': self.get_env_var('POSTGRES_HOST', 'localhost'),
            'port': int(self.get_env_var('POSTGRES_PORT', '5432')),
            'user': self.get_env_var('POSTGRES_USER'),
            'password': self.get_env_var('POSTGRES_PASSWORD'),
            'database': self.get_env_var('POSTGRES_DB'),
        }

    def get_postgres_adapter(self):
        """
        Build a PostgreSQLAdapter from the environment.
        Requires the `data-postgres` extra.
        """
        from orgscope.data.postgresql import PostgreSQLAdapter
        return PostgreSQLAdapter(**self.get_postgres_settings())

    def validate_env_vars(self):
        try:
            limit = self.member_fetch_limit
        except ValueError as ex:
            raise ValueError(
                f"ORGSCOPE_MEMBER_FETCH_LIMIT must be an integer, got "
                f"{self.get_env_var('ORGSCOPE_MEMBER_FETCH_LIMIT')!r}") from ex
        if limit <= 0:
            raise ValueError("ORGSCOPE_MEMBER_FETCH_LIMIT must be positive")
        if not self.owner_role.strip():
            raise ValueError("ORGSCOPE_OWNER_ROLE must not be empty")
