import logging
from uuid import uuid4, UUID
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from dateutil.parser import isoparse
from typing import Any, Dict, List, Union, get_type_hints, get_origin, get_args
from enum import Enum

logger = logging.getLogger(__name__)

# Constants for VersionedModel field groups
BIG_6_FIELDS = {'entity_id', 'version', 'previous_version',
                'changed_on', 'changed_by_id', 'active'}


def default_datetime():
    """
    Definition for default datetime
    """
    return datetime.now(timezone.utc)


def get_uuid_hex(_int=None):
    """
    Returns UUID in hex format. If _int is passed, it creates UUID with int base.
    """
    return uuid4().hex if _int is None else UUID(int=_int, version=4).hex


class ModelValidationError(Exception):
    """
    Exception raised when one or more validation errors occur in the model.

    Attributes:
        errors (list): A list of error messages returned from validation methods.
    """

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        elif not isinstance(errors, list):
            raise ValueError("Errors should be a string or a list of strings")
        self.errors = errors
        super().__init__(self.format_errors())

    def format_errors(self):
        return "\n".join(self.errors)

    def __str__(self):
        return self.format_errors()


@dataclass(kw_only=True)
class VersionedModel:
    """A base class for versioned models with common (Big 6) attributes."""

    entity_id: str = field(default_factory=get_uuid_hex,
                           metadata={'field_type': 'entity_id'})
    version: str = field(default_factory=lambda: get_uuid_hex(
        0), metadata={'field_type': 'uuid'})
    previous_version: str = field(
        default_factory=lambda: None, metadata={'field_type': 'uuid'})
    active: bool = True
    changed_by_id: str = field(default_factory=lambda: get_uuid_hex(
        0), metadata={'field_type': 'uuid'})
    changed_on: datetime = field(default_factory=default_datetime)

    @classmethod
    def fields(cls) -> List[str]:
        """
        Get a list of field names for this model.

        Returns:
            List[str]: A list of field names.
        """
        return [f.name for f in fields(cls)]

    def as_dict(self, convert_datetime_to_iso_string: bool = False) -> Dict[str, Any]:
        """
        Convert this model to a dictionary.

        Enum members are exported as their values so the result can be handed to
        a DbAdapter or serialized to JSON as is.

        Args:
            convert_datetime_to_iso_string (bool, optional): Whether to convert datetime to ISO strings.

        Returns:
            Dict[str, Any]: A dictionary representation of this model.
        """
        result = {}
        for name in self.fields():
            value = getattr(self, name)
            if isinstance(value, Enum):
                value = value.value
            elif convert_datetime_to_iso_string and isinstance(value, datetime):
                value = value.isoformat()
            result[name] = value
        return result

    @classmethod
    def _convert_value(cls, v, expected_type) -> Any:
        """Convert string values read from storage to enum or datetime types."""
        if not isinstance(v, str):
            return v

        if get_origin(expected_type) is Union:
            for arg in get_args(expected_type):
                if arg is type(None):
                    continue
                converted = cls._convert_value(v, arg)
                if converted is not v:
                    return converted
            return v

        if isinstance(expected_type, type) and issubclass(expected_type, Enum):
            try:
                return expected_type(v)
            except ValueError:
                return v

        if expected_type is datetime:
            try:
                return isoparse(v)
            except (ValueError, TypeError):
                logger.info("'%s' is not a valid ISO datetime.", v)
                return v

        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionedModel":
        """
        Load a model from a dict, ignoring keys the model does not define.
        """
        hints = get_type_hints(cls)
        clean_data = {k: v for k, v in data.items() if k in cls.fields()}

        for k, v in clean_data.items():
            if v is not None and k in hints:
                clean_data[k] = cls._convert_value(v, hints[k])

        return cls(**clean_data)

    def validate(self):
        """
        Validate all fields by calling corresponding `validate_<field_name>` methods if defined.
        Raise `ModelValidationError` if any validations fail.
        """
        errors = []
        for name in self.fields():
            validator = getattr(self, f"validate_{name}", None)
            if callable(validator):
                error = validator()
                if error:
                    errors.append(error)

        if errors:
            raise ModelValidationError(errors)

    def prepare_for_save(self, changed_by_id: str = None):
        """
        Prepare this model for saving to the database.

        Args:
            changed_by_id (str): The ID of the user making the change.
        """
        if not self.entity_id:
            self.entity_id = get_uuid_hex()
        if self.version:
            self.previous_version = self.version
        else:
            self.previous_version = get_uuid_hex(0)
        self.version = get_uuid_hex()
        self.changed_on = datetime.now(timezone.utc)

        if changed_by_id:
            self.changed_by_id = changed_by_id
        self.validate()
