"""
Public API for field-validation

This is the "front door" - the main entry point for validating records.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from .config_loader import ConfigLoader
from .errors import ValidationFailed
from .rule_loader import RuleLoader
from .validation_engine import RecordValidator

logger = logging.getLogger(__name__)


class ValidationService:
    """
    Main validation service class.

    Loads rule documents once at construction and validates records against
    them. The loaded rules are read-only, so one instance can be shared
    across threads.

    Example:
        from field_validation import ValidationService, ValidationFailed

        service = ValidationService()
        try:
            service.validate(request_data, "wireTransferRequest")
        except ValidationFailed as e:
            return 400, e.to_list()
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize validation service.

        Args:
            config_path: YAML config file; defaults to the bundled local-config.yaml
            today: Clock for minDate "today" checks (default date.today)

        Raises:
            RuleDocumentError: If a rule document cannot be loaded
        """
        self._config_path = config_path
        self._today = today
        self.config_loader, self.engine = self._build()

    def _build(self):
        """Load config and rules into a fresh engine (used by __init__ and reload_rules)."""
        config_loader = ConfigLoader(self._config_path)
        rule_store = RuleLoader(config_loader).load()
        engine = RecordValidator(
            rule_store,
            holiday_calendar=config_loader.get_holiday_calendar(),
            today=self._today,
        )
        return config_loader, engine

    @property
    def rule_store(self):
        return self.engine.rule_store

    def validate(self, record: Any, record_type: Optional[str] = None) -> None:
        """
        Validate a single record.

        Args:
            record: Dict or object exposing fields by name
            record_type: Rule document key; derived from the record when omitted

        Raises:
            ValidationFailed: If any constraint is violated
            ConfigurationError: If the rule document or a $ref target is missing
        """
        self.engine.validate(record, record_type)

    def check(self, record: Any, record_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Validate a record and return the outcome instead of raising.

        Configuration defects still raise; only violations are folded into
        the result.

        Returns:
            {"valid": bool, "errors": [{"field": str, "message": str}, ...]}

        Example:
            result = service.check({"record_type": "wireTransferRequest", ...})
            if not result["valid"]:
                for error in result["errors"]:
                    print(f"{error['field']}: {error['message']}")
        """
        try:
            self.engine.validate(record, record_type)
        except ValidationFailed as e:
            return {"valid": False, "errors": e.to_list()}
        return {"valid": True, "errors": []}

    def record_types(self) -> List[str]:
        """Record types that have a rule document loaded."""
        return self.rule_store.record_types()

    def reload_rules(self):
        """
        Reload configuration and rule documents from source.

        The new engine replaces the old one in a single assignment, so calls
        already running finish against the rules they started with.

        Raises:
            RuleDocumentError: If a rule document cannot be loaded; the
                previous rules stay in place
        """
        self.config_loader, self.engine = self._build()
        logger.info(
            f"Reloaded rules for {len(self.rule_store)} record type(s)",
            extra={"record_types": self.rule_store.record_types()},
        )
