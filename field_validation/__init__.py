"""
field-validation: JSON rule-document validation for structured records

This library provides:
- Per-record-type rule documents loaded from local or remote JSON
- Shared rule definitions referenced with "$ref" and local overrides
- String, number and date field checks with templated error messages
- Business-day checks against a configurable holiday calendar
- Complete violation reports instead of fail-on-first-error

Example:
    from field_validation import ValidationService, ValidationFailed

    service = ValidationService()
    try:
        service.validate(request_data, "wireTransferRequest")
    except ValidationFailed as e:
        print(e.to_list())
"""

from .api import ValidationService
from .errors import (
    CircularReference,
    ConfigNotFound,
    ConfigurationError,
    DefinitionNotFound,
    RuleDocumentError,
    ValidationFailed,
    Violation,
)
from .holidays import HolidayCalendar, US_FEDERAL_2025
from .ref_resolver import resolve_ref
from .rule_store import RuleStore
from .validation_engine import RecordValidator

__version__ = "0.1.0"
__all__ = [
    "ValidationService",
    "RecordValidator",
    "RuleStore",
    "resolve_ref",
    "HolidayCalendar",
    "US_FEDERAL_2025",
    "Violation",
    "ValidationFailed",
    "ConfigurationError",
    "ConfigNotFound",
    "DefinitionNotFound",
    "CircularReference",
    "RuleDocumentError",
]
