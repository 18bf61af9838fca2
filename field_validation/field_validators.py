"""
Field Validator Dispatch

Applies one resolved rule node to one field value and returns the list of
violations found. Checks run in two steps:

1. Presence. None or a whitespace-only string is "empty". A required empty
   field yields exactly one violation; an optional empty field yields none.
   Either way nothing else is checked.
2. Type family. The node's "type" (default "string") selects a TypeValidator
   from TYPE_VALIDATORS. Unknown types are logged and skipped.

String checks are cumulative (every failed constraint is reported). Number
and date checks stop at a type violation, since bounds make no sense against
a value that could not be parsed.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field as dataclass_field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Optional

from .errors import RuleDocumentError, Violation
from .holidays import HolidayCalendar, US_FEDERAL_2025
from .messages import rule_message

logger = logging.getLogger(__name__)

DEFAULT_TYPE = "string"
DATE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_DATE_TODAY = "today"
NO_WEEKEND_OR_HOLIDAY = "noWeekendOrHoliday"
SATURDAY, SUNDAY = 5, 6


@dataclass(frozen=True)
class CheckContext:
    """Evaluation-time inputs that are not part of the rule node."""

    holiday_calendar: HolidayCalendar = US_FEDERAL_2025
    today: Callable[[], date] = dataclass_field(default=date.today)


def is_empty(value: Any) -> bool:
    """True for None and for strings that are blank after trimming."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class TypeValidator(ABC):
    """Checks for one declared "type" family."""

    type_name: str = ""

    @abstractmethod
    def check(
        self,
        field: str,
        value: Any,
        rules: Mapping[str, Any],
        context: CheckContext,
    ) -> List[Violation]:
        """
        Check a present (non-empty) value.

        Returns:
            Violations in check order; empty list when the value passes
        """


class StringValidator(TypeValidator):
    """minLength, maxLength, pattern (full match) and allowedValues."""

    type_name = "string"

    def check(self, field, value, rules, context):
        if not isinstance(value, str):
            return [
                Violation(
                    field,
                    rule_message(rules, field, "errorMessageType", "Must be a string."),
                )
            ]

        violations = []

        if "minLength" in rules:
            min_length = int(rules["minLength"])
            if len(value) < min_length:
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageMinLength",
                            "Min length is {minLength}", minLength=min_length,
                        ),
                    )
                )

        if "maxLength" in rules:
            max_length = int(rules["maxLength"])
            if len(value) > max_length:
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageMaxLength",
                            "Max length is {maxLength}", maxLength=max_length,
                        ),
                    )
                )

        if "pattern" in rules:
            if _compile_pattern(field, rules["pattern"]).fullmatch(value) is None:
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessagePattern", "Invalid format.",
                            pattern=rules["pattern"],
                        ),
                    )
                )

        if "allowedValues" in rules:
            allowed = [str(v) for v in rules["allowedValues"]]
            if value not in allowed:
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageAllowedValues",
                            "Invalid value. Allowed: {allowedValues}",
                            allowedValues=", ".join(allowed),
                        ),
                    )
                )

        return violations


class NumberValidator(TypeValidator):
    """Exact decimal parsing with inclusive minValue / maxValue bounds."""

    type_name = "number"

    def check(self, field, value, rules, context):
        number = parse_decimal(value)
        if number is None:
            return [
                Violation(
                    field,
                    rule_message(
                        rules, field, "errorMessageType", "Must be a valid number.",
                        value=value,
                    ),
                )
            ]

        violations = []

        if "minValue" in rules:
            min_value = _threshold(field, "minValue", rules["minValue"])
            if number < min_value:
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageMinValue",
                            "Min value is {minValue}", minValue=_plain(min_value),
                        ),
                    )
                )

        if "maxValue" in rules:
            max_value = _threshold(field, "maxValue", rules["maxValue"])
            if number > max_value:
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageMaxValue",
                            "Max value is {maxValue}", maxValue=_plain(max_value),
                        ),
                    )
                )

        return violations


class DateValidator(TypeValidator):
    """YYYY-MM-DD dates with the minDate and noWeekendOrHoliday rules."""

    type_name = "date"

    def check(self, field, value, rules, context):
        if isinstance(value, str):
            day = parse_iso_date(value)
            if day is None:
                return [
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageType",
                            "Invalid date format. Expected yyyy-MM-dd.", value=value,
                        ),
                    )
                ]
        elif isinstance(value, datetime):
            day = value.date()
        elif isinstance(value, date):
            day = value
        else:
            return [
                Violation(
                    field,
                    rule_message(rules, field, "errorMessageType", "Invalid date type."),
                )
            ]

        violations = []

        min_date = rules.get("minDate")
        if isinstance(min_date, str) and min_date.lower() == MIN_DATE_TODAY:
            today = context.today()
            if day < today:
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageMinDate",
                            "Date cannot be in the past.", minDate=today.isoformat(),
                        ),
                    )
                )

        if rules.get("customRule") == NO_WEEKEND_OR_HOLIDAY:
            # Weekend wins; holidays are only consulted for weekdays.
            if day.weekday() in (SATURDAY, SUNDAY):
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageCustomRule",
                            "Date cannot be a weekend.", date=day.isoformat(),
                        ),
                    )
                )
            elif context.holiday_calendar.is_holiday(day):
                violations.append(
                    Violation(
                        field,
                        rule_message(
                            rules, field, "errorMessageCustomRule",
                            "Date cannot be a public holiday.", date=day.isoformat(),
                        ),
                    )
                )

        return violations


TYPE_VALIDATORS: Dict[str, TypeValidator] = {
    v.type_name: v for v in (StringValidator(), NumberValidator(), DateValidator())
}


def check_field(
    field: str,
    value: Any,
    rules: Mapping[str, Any],
    context: Optional[CheckContext] = None,
) -> List[Violation]:
    """
    Validate one field value against its resolved rule node.

    Args:
        field: Field name (used in messages)
        value: Runtime value, possibly None
        rules: Resolved rule node (no "$ref")
        context: Holiday calendar and clock; defaults to US_FEDERAL_2025 and date.today

    Returns:
        Violations for this field, in check order
    """
    if context is None:
        context = CheckContext()

    if is_empty(value):
        if rules.get("required", False) is True:
            return [
                Violation(
                    field,
                    rule_message(
                        rules, field, "errorMessageRequired", "{field} is required."
                    ),
                )
            ]
        return []

    type_name = str(rules.get("type", DEFAULT_TYPE)).lower()
    validator = TYPE_VALIDATORS.get(type_name)
    if validator is None:
        logger.warning(
            f"Unsupported validation type: {type_name} for field: {field}",
            extra={"field": field, "type": type_name},
        )
        return []

    return validator.check(field, value, rules, context)


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Interpret value as an exact, finite decimal.

    Accepts Decimal, int, float (via its repr, so 0.1 stays 0.1) and numeric
    strings. Booleans and everything else return None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str) and value.strip():
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return number if number.is_finite() else None


def parse_iso_date(value: str) -> Optional[date]:
    """Parse a trimmed YYYY-MM-DD string, or return None."""
    text = value.strip()
    if not DATE_FORMAT.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def _compile_pattern(field: str, pattern: Any) -> re.Pattern:
    try:
        return re.compile(str(pattern))
    except re.error as e:
        raise RuleDocumentError(f"field '{field}'", f"pattern is not a valid regex: {e}") from e


def _threshold(field: str, name: str, raw: Any) -> Decimal:
    number = parse_decimal(raw)
    if number is None:
        raise RuleDocumentError(f"field '{field}'", f"{name} is not a number: {raw!r}")
    return number


def _plain(number: Decimal) -> str:
    """Render without exponent notation, e.g. Decimal("1E+2") -> "100"."""
    return format(number, "f")
