"""YAML configuration loading for rule locations and the holiday calendar."""

import os
import urllib.parse
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .holidays import HolidayCalendar, US_FEDERAL_2025


class ConfigLoader:
    """Loads local-config.yaml (bundled or caller-supplied)."""

    DEFAULT_DEFINITIONS_FILENAME = "common/validationDefinitions.json"
    DEFAULT_SPECIFICS_DIRECTORY = "specifics"
    DEFAULT_REQUEST_TIMEOUT = 10

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Path to a YAML config file. When omitted the
                local-config.yaml bundled in the field_validation package is used.
        """
        if config_path is None:
            config_file = files("field_validation").joinpath("local-config.yaml")
            self.config_path = str(config_file)
        else:
            self.config_path = str(Path(config_path).resolve())

        self.config = self._load_yaml(self.config_path)

    def _load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file from disk."""
        with open(path) as f:
            return yaml.safe_load(f) or {}

    def get_config(self) -> Dict[str, Any]:
        return self.config

    def get_rules_location(self) -> str:
        """
        Resolve where rule documents live.

        Supports:
        - Relative paths - resolved against the config file's directory
        - file:// - Local filesystem (absolute paths)
        - https:// / http:// - Remote base URI

        Returns:
            Absolute directory path, or an http(s) base URI ending in "/"
        """
        location = self.config.get("rules_directory_location", "rules")
        parsed = urllib.parse.urlparse(location)

        if parsed.scheme in ("http", "https"):
            return location if location.endswith("/") else location + "/"

        if parsed.scheme == "file":
            return str(Path(urllib.parse.unquote(parsed.path)).resolve())

        if not parsed.scheme:
            config_dir = os.path.dirname(os.path.abspath(self.config_path))
            return str(Path(config_dir, location).resolve())

        raise ValueError(f"Unsupported URI scheme: {parsed.scheme} in {location}")

    def is_remote(self) -> bool:
        return self.get_rules_location().startswith(("http://", "https://"))

    def get_definitions_filename(self) -> str:
        return self.config.get("definitions_filename", self.DEFAULT_DEFINITIONS_FILENAME)

    def get_specifics_directory(self) -> str:
        return self.config.get("specifics_directory", self.DEFAULT_SPECIFICS_DIRECTORY)

    def get_record_types(self) -> Optional[List[str]]:
        """Explicit record type list, or None to discover every document."""
        record_types = self.config.get("record_types")
        if record_types is None:
            return None
        return [str(r) for r in record_types]

    def get_validate_rule_documents(self) -> bool:
        return bool(self.config.get("validate_rule_documents", True))

    def get_request_timeout(self) -> float:
        return float(
            self.config.get("request_timeout_seconds", self.DEFAULT_REQUEST_TIMEOUT)
        )

    def get_holiday_calendar(self) -> HolidayCalendar:
        """Configured holiday calendar, falling back to US_FEDERAL_2025."""
        calendar_config = self.config.get("holiday_calendar")
        if not calendar_config:
            return US_FEDERAL_2025
        return HolidayCalendar.from_config(calendar_config)
