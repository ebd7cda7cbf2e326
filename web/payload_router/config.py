"""
Configuration schema for the sniffer.

Two layers:
- SnifferSettings: everything read from `config.json` once at startup.
- FilterConfig: the immutable subset the per-frame pipeline consults.

Both are frozen; there is no hot reload. Keys in `config.json` are matched
case-insensitively, so `DeviceKeyword`, `deviceKeyword` and `device_keyword`
are equivalent.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, FrozenSet, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

Port = Annotated[int, Field(ge=1, le=65535)]


class FilterConfig(BaseModel):
    """Port allow-set, direction flags and HTTP path substrings."""

    model_config = ConfigDict(frozen=True)

    ports: Optional[FrozenSet[Port]] = Field(
        default=None,
        description="Allowed ports; None or empty disables port filtering.",
    )
    filter_by_source: bool = Field(
        default=True,
        description="A segment passes when its source port is allowed.",
    )
    filter_by_destination: bool = Field(
        default=True,
        description="A segment passes when its destination port is allowed.",
    )
    http_path_filters: Optional[Tuple[str, ...]] = Field(
        default=None,
        description="Case-insensitive substrings; an HTTP request path must contain one.",
    )


class SnifferSettings(BaseModel):
    """
    Settings loaded once from `config.json`.
    Defaults mean: auto-select the device, listen on every port, no path filter.
    """

    model_config = ConfigDict(frozen=True)

    # === Capture ===
    device_keyword: Optional[str] = Field(
        default=None,
        description="Substring matched against device name + description.",
    )
    read_timeout_ms: int = Field(
        default=1000,
        ge=10,
        description="Capture read timeout; also bounds how long stop() may wait.",
    )

    # === Filtering ===
    ports: Optional[List[Port]] = None
    filter_source_port: bool = True
    filter_destination_port: bool = True
    http_path_filters: Optional[List[str]] = None

    # === Sinks ===
    publish_enabled: bool = True
    rabbit_host: str = "localhost"
    rabbit_port: int = Field(default=5672, ge=1, le=65535)
    rabbit_user: str = "guest"
    rabbit_password: str = "guest"
    rabbit_queue: str = "sniffer"
    recent_capacity: int = Field(
        default=500,
        ge=1,
        description="How many accepted records the HTTP API keeps in memory.",
    )

    @model_validator(mode="before")
    @classmethod
    def _case_insensitive_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        by_folded = {name.replace("_", "").lower(): name for name in cls.model_fields}
        out = {}
        for key, value in data.items():
            name = by_folded.get(str(key).replace("_", "").lower())
            if name is not None:
                out[name] = value
        return out

    def filter_config(self) -> FilterConfig:
        return FilterConfig(
            ports=frozenset(self.ports) if self.ports else None,
            filter_by_source=self.filter_source_port,
            filter_by_destination=self.filter_destination_port,
            http_path_filters=tuple(self.http_path_filters) if self.http_path_filters else None,
        )


def load_settings(path: Union[str, Path]) -> SnifferSettings:
    """
    Read settings from a JSON file.

    A missing file yields defaults. A present but invalid file raises
    ConfigError so a typo never silently disables filtering.
    """
    p = Path(path)
    if not p.exists():
        logger.info("Config file %s not found, using defaults", p)
        return SnifferSettings()

    try:
        settings = SnifferSettings.model_validate_json(p.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ConfigError(f"Invalid config file '{p}': {e}") from e

    logger.info("Loaded config file: %s", p)
    return settings
