import inspect
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Callable, List, Optional, Tuple

from .errors import ValidationFailed, Violation
from .field_validators import CheckContext, check_field
from .holidays import HolidayCalendar, US_FEDERAL_2025
from .ref_resolver import resolve_ref
from .rule_store import RuleStore

logger = logging.getLogger(__name__)

RECORD_TYPE_FIELD = "record_type"

_MISSING = object()


class FieldAccessError(Exception):
    """Reading a named field off a record failed."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class RecordValidator:
    """Core validation logic, independent of transport and rule loading"""

    def __init__(
        self,
        rule_store: RuleStore,
        holiday_calendar: Optional[HolidayCalendar] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize record validator.

        Args:
            rule_store: Populated, read-only RuleStore
            holiday_calendar: Calendar for noWeekendOrHoliday (default US_FEDERAL_2025)
            today: Clock used by minDate "today" (default date.today)
        """
        self.rule_store = rule_store
        self.context = CheckContext(
            holiday_calendar=holiday_calendar or US_FEDERAL_2025,
            today=today or date.today,
        )

    def validate(self, record: Any, record_type_key: Optional[str] = None) -> None:
        """
        Validate a record against the rule document for its type.

        Args:
            record: Mapping or object exposing fields by name
            record_type_key: Rule document key; derived from the record when omitted

        Raises:
            ValidationFailed: With every violation found, in document field order
            ConfigNotFound: If no rule document exists for the record type
            DefinitionNotFound: If a $ref target is missing
            ValueError: If record is None or its type cannot be determined
        """
        violations = self.collect_violations(record, record_type_key)
        if violations:
            raise ValidationFailed(violations)

    def collect_violations(
        self, record: Any, record_type_key: Optional[str] = None
    ) -> List[Violation]:
        """
        Run the full validation pass and return the violations instead of raising.

        Configuration defects still raise.
        """
        if record is None:
            raise ValueError("Record to validate cannot be None")

        if record_type_key is None:
            record_type_key = record_type_key_for(record)

        document = self.rule_store.get_rule_document(record_type_key)

        # Resolve every field first so a broken $ref fails the call before
        # any field is checked.
        definitions = self.rule_store.definitions
        resolved: List[Tuple[str, Any]] = [
            (field, resolve_ref(node, definitions)) for field, node in document.items()
        ]

        violations: List[Violation] = []
        for field, rules in resolved:
            try:
                value = read_field(record, field)
            except FieldAccessError as e:
                violations.append(Violation(field, e.message))
                continue
            violations.extend(check_field(field, value, rules, self.context))

        logger.debug(
            f"Validated {record_type_key}: {len(violations)} violation(s)",
            extra={"record_type": record_type_key, "violations": len(violations)},
        )
        return violations


def record_type_key_for(record: Any) -> str:
    """
    Derive the rule document key for a record.

    Mappings name their type in a "record_type" entry; any other object
    uses its class name.

    Raises:
        ValueError: If a mapping has no record_type entry
    """
    if isinstance(record, Mapping):
        record_type = record.get(RECORD_TYPE_FIELD)
        if not record_type:
            raise ValueError(
                f"Cannot determine record type - mapping records must have a "
                f"'{RECORD_TYPE_FIELD}' field or an explicit record_type_key"
            )
        return str(record_type)
    return type(record).__name__


def read_field(record: Any, field: str) -> Any:
    """
    Read one named field off a record.

    A mapping without the key is an absent value (None), matching how an
    omitted JSON property arrives. An object without the attribute, or
    whose attribute raises on access, is a field-access defect.

    Raises:
        FieldAccessError: On a missing attribute or a failing accessor
    """
    if isinstance(record, Mapping):
        return record.get(field)

    # Looked up without running properties, so an accessor that raises
    # AttributeError still counts as a failing accessor.
    declared = inspect.getattr_static(record, field, _MISSING) is not _MISSING
    dynamic = hasattr(type(record), "__getattr__")
    if not declared and not dynamic:
        raise _field_mismatch(record, field)

    try:
        return getattr(record, field)
    except AttributeError as e:
        if not declared:
            raise _field_mismatch(record, field) from None
        raise _accessor_failed(record, field, e) from e
    except Exception as e:
        raise _accessor_failed(record, field, e) from e


def _field_mismatch(record: Any, field: str) -> FieldAccessError:
    logger.warning(
        f"Field '{field}' defined in validation config not found on "
        f"{type(record).__name__}",
        extra={"field": field, "record_class": type(record).__name__},
    )
    return FieldAccessError(field, "Field definition mismatch.")


def _accessor_failed(record: Any, field: str, error: Exception) -> FieldAccessError:
    logger.error(
        f"Error accessing field '{field}' on {type(record).__name__}: {error}",
        extra={"field": field, "record_class": type(record).__name__},
    )
    return FieldAccessError(field, "Error accessing field value.")
