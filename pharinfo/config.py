from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from pharinfo.reporters.summary import REQUIREMENTS_DESCRIPTOR


class ListMode(str, Enum):
    INDENT = "indent"
    FLAT = "flat"


class AppConfig(BaseModel):
    # Embedded file holding the requirement records (JSON list)
    requirements_path: str = REQUIREMENTS_DESCRIPTOR
    max_descriptor_bytes: int = 1_000_000

    # File listing
    list_files: bool = False
    mode: ListMode = ListMode.INDENT
    max_depth: Optional[int] = Field(default=None, ge=0)

    separator: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_config(path: Optional[str]) -> AppConfig:
    if not path:
        return AppConfig()
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    return AppConfig.model_validate(data or {})


def config_to_snapshot(cfg: AppConfig) -> Dict[str, Any]:
    return cfg.model_dump(mode="json")
