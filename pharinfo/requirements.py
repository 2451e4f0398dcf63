from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class MalformedRequirementError(ValueError):
    """A raw requirement record could not be turned into a Requirement."""


class RequirementType(str, Enum):
    PHP = "php"
    EXTENSION = "extension"
    EXTENSION_CONFLICT = "extension-conflict"


class Requirement(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: RequirementType
    condition: str
    source: Optional[str] = None
    message: str = ""
    help_message: str = Field(default="", alias="helpMessage")

    @classmethod
    def from_record(cls, record: Any) -> "Requirement":
        if not isinstance(record, Mapping):
            raise MalformedRequirementError(f"Requirement record must be a mapping, got {type(record).__name__}.")
        try:
            return cls.model_validate(dict(record))
        except ValidationError as e:
            raise MalformedRequirementError(f"Invalid requirement record {dict(record)!r}: {e}") from e

    @property
    def key(self) -> str:
        return ":".join([self.type.value, self.condition, self.source or ""])

    @property
    def origin(self) -> str:
        return self.source if self.source is not None else "root"


def partition_requirements(records: Sequence[Any]) -> Tuple[List[Requirement], List[Requirement]]:
    """
    Split raw requirement records into (required, conflicting).

    Requirements sharing a key are collapsed: the entry keeps the position of
    the first record with that key and the value of the last one.
    Raises MalformedRequirementError on the first unusable record.
    """
    requirements = [Requirement.from_record(r) for r in records]

    required: Dict[str, Requirement] = {}
    conflicting: Dict[str, Requirement] = {}
    for requirement in requirements:
        if requirement.type is RequirementType.EXTENSION_CONFLICT:
            conflicting[requirement.key] = requirement
        else:
            required[requirement.key] = requirement

    return list(required.values()), list(conflicting.values())


def format_required(requirement: Requirement) -> str:
    if requirement.type is RequirementType.PHP:
        return f"PHP {requirement.condition} ({requirement.origin})"
    if requirement.type is RequirementType.EXTENSION:
        return f"ext-{requirement.condition} ({requirement.origin})"
    raise ValueError(f"Not a required-type requirement: {requirement.type.value}")


def format_conflicting(requirement: Requirement) -> str:
    if requirement.type is RequirementType.EXTENSION_CONFLICT:
        return f"ext-{requirement.condition} ({requirement.origin})"
    raise ValueError(f"Not a conflict-type requirement: {requirement.type.value}")


def decode_descriptor(content: Optional[str]) -> Optional[List[Any]]:
    """
    Decode the embedded requirements descriptor.
    Returns None when the content is not a JSON list.
    """
    if content is None:
        return None
    try:
        data = json.loads(content)
    except ValueError as e:
        logger.warning("Requirements descriptor is not valid JSON: %s", e)
        return None
    if not isinstance(data, list):
        logger.warning("Requirements descriptor is a %s, expected a list.", type(data).__name__)
        return None
    return data
