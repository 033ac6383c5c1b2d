from .config import BaseConfig, OrgScopeConfig
