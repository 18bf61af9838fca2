"""
Tests for per-field checks: presence, string, number and date families.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from field_validation.errors import RuleDocumentError, Violation
from field_validation.field_validators import (
    CheckContext,
    check_field,
    is_empty,
    parse_decimal,
    parse_iso_date,
)
from field_validation.holidays import HolidayCalendar, US_FEDERAL_2025
from field_validation.messages import format_message, rule_message


@pytest.fixture
def context():
    """Check context with a fixed clock (Thursday 2025-05-01)."""
    return CheckContext(holiday_calendar=US_FEDERAL_2025, today=lambda: date(2025, 5, 1))


def messages(violations):
    return [v.message for v in violations]


class TestMessages:
    """Test template substitution."""

    def test_placeholder_substitution(self):
        """Test that {name} tokens are replaced."""
        assert format_message("Min length is {minLength}", minLength=3) == "Min length is 3"

    def test_unknown_placeholder_left_alone(self):
        """Test that tokens without a value survive."""
        assert format_message("Keep {this}", other=1) == "Keep {this}"

    def test_rule_template_preferred_over_default(self):
        """Test that errorMessage* in the rule wins over the default."""
        rules = {"errorMessageMinLength": "{field} needs {minLength}+ chars"}
        message = rule_message(rules, "name", "errorMessageMinLength",
                               "Min length is {minLength}", minLength=4)
        assert message == "name needs 4+ chars"


class TestPresence:
    """Test the required / optional presence step."""

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_empty_values(self, value):
        """Test what counts as empty."""
        assert is_empty(value)

    @pytest.mark.parametrize("value", ["x", 0, Decimal("0"), False])
    def test_non_empty_values(self, value):
        """Test that falsy non-strings are still present."""
        assert not is_empty(value)

    def test_required_empty_reports_once(self, context):
        """Test that a required empty field yields one violation and no type checks."""
        rules = {"required": True, "type": "number", "minValue": 5}

        violations = check_field("amount", "  ", rules, context)

        assert violations == [Violation("amount", "amount is required.")]

    def test_required_uses_template(self, context):
        """Test the errorMessageRequired template."""
        rules = {"required": True, "errorMessageRequired": "Please enter {field}."}
        assert messages(check_field("memo", None, rules, context)) == ["Please enter memo."]

    def test_optional_empty_is_silent(self, context):
        """Test that an optional empty field is never checked further."""
        rules = {"type": "date", "minDate": "today", "minLength": 50}
        assert check_field("date", None, rules, context) == []
        assert check_field("date", " ", rules, context) == []

    def test_unknown_type_is_ignored(self, context):
        """Test that an unrecognised type produces no violation."""
        assert check_field("flag", "yes", {"type": "boolean"}, context) == []

    def test_type_is_case_insensitive(self, context):
        """Test that "Number" selects the number family."""
        violations = check_field("n", "abc", {"type": "Number"}, context)
        assert messages(violations) == ["Must be a valid number."]


class TestStringChecks:
    """Test the string family."""

    def test_all_failed_checks_reported_in_order(self, context):
        """Test that string checks are cumulative and ordered."""
        rules = {
            "minLength": 5,
            "pattern": "^[0-9]+$",
            "allowedValues": ["12345", "67890"],
        }

        violations = check_field("code", "ab", rules, context)

        assert messages(violations) == [
            "Min length is 5",
            "Invalid format.",
            "Invalid value. Allowed: 12345, 67890",
        ]

    def test_max_length(self, context):
        """Test the maxLength bound and its template."""
        rules = {"maxLength": 3, "errorMessageMaxLength": "At most {maxLength}."}
        assert messages(check_field("c", "abcd", rules, context)) == ["At most 3."]
        assert check_field("c", "abc", rules, context) == []

    def test_pattern_requires_full_match(self, context):
        """Test that a substring match is not enough."""
        rules = {"pattern": "[0-9]+"}
        assert messages(check_field("acct", "12ab", rules, context)) == ["Invalid format."]
        assert check_field("acct", "1234", rules, context) == []

    def test_allowed_values_exact_membership(self, context):
        """Test that allowedValues is case-sensitive exact match."""
        rules = {
            "allowedValues": ["USD", "EUR"],
            "errorMessageAllowedValues": "Use one of {allowedValues}",
        }
        assert messages(check_field("currency", "usd", rules, context)) == ["Use one of USD, EUR"]
        assert check_field("currency", "EUR", rules, context) == []

    def test_non_string_value(self, context):
        """Test that a string rule rejects non-string values."""
        assert messages(check_field("name", 42, {}, context)) == ["Must be a string."]

    def test_uncompilable_pattern_is_rule_document_error(self, context):
        """Test that a broken regex is a configuration defect, not a crash."""
        with pytest.raises(RuleDocumentError) as exc_info:
            check_field("code", "ABC", {"pattern": "[A-Z"}, context)

        assert "code" in str(exc_info.value)


class TestNumberChecks:
    """Test the number family."""

    @pytest.mark.parametrize("value, expected", [
        (10, Decimal("10")),
        (1500.75, Decimal("1500.75")),
        (Decimal("0.10"), Decimal("0.10")),
        (" 42.5 ", Decimal("42.5")),
        ("1e3", Decimal("1000")),
    ])
    def test_parse_decimal(self, value, expected):
        """Test accepted numeric shapes."""
        assert parse_decimal(value) == expected

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", True, [], {}])
    def test_parse_decimal_rejects(self, value):
        """Test rejected shapes."""
        assert parse_decimal(value) is None

    def test_type_violation_short_circuits(self, context):
        """Test that a non-number reports only the type error."""
        rules = {"type": "number", "minValue": 0, "errorMessageType": "Not numeric"}
        assert messages(check_field("amount", "12x", rules, context)) == ["Not numeric"]

    def test_below_minimum(self, context):
        """Test that a negative amount fails minValue 0 and names the minimum."""
        violations = check_field("amount", -50.00, {"type": "number", "minValue": 0}, context)
        assert violations == [Violation("amount", "Min value is 0")]

    def test_bounds_are_inclusive(self, context):
        """Test values exactly on either bound."""
        rules = {"type": "number", "minValue": 0.01, "maxValue": "1000000"}
        assert check_field("amount", "0.01", rules, context) == []
        assert check_field("amount", 1000000, rules, context) == []

    def test_exact_decimal_comparison(self, context):
        """Test a case that binary floating point would get wrong."""
        rules = {"type": "number", "maxValue": "0.3"}
        assert check_field("x", Decimal("0.1") + Decimal("0.2"), rules, context) == []
        assert messages(check_field("x", "0.30000000000000001", rules, context)) == [
            "Max value is 0.3"
        ]

    def test_both_bounds_with_templates(self, context):
        """Test threshold substitution in max template."""
        rules = {
            "type": "number",
            "minValue": 1,
            "maxValue": 100,
            "errorMessageMaxValue": "{field} cannot exceed {maxValue}.",
        }
        assert messages(check_field("amount", 101, rules, context)) == [
            "amount cannot exceed 100."
        ]

    def test_threshold_rendered_plain(self, context):
        """Test that thresholds never appear in exponent notation."""
        rules = {"type": "number", "minValue": "1E+2"}
        assert messages(check_field("n", 5, rules, context)) == ["Min value is 100"]


class TestDateChecks:
    """Test the date family."""

    def test_parse_iso_date(self):
        """Test strict YYYY-MM-DD parsing."""
        assert parse_iso_date(" 2025-05-07 ") == date(2025, 5, 7)
        assert parse_iso_date("2025-5-7") is None
        assert parse_iso_date("2025-02-30") is None
        assert parse_iso_date("07/05/2025") is None

    def test_bad_format(self, context):
        """Test that a malformed string reports a type violation only."""
        rules = {"type": "date", "minDate": "today", "customRule": "noWeekendOrHoliday"}
        assert messages(check_field("d", "2025/05/10", rules, context)) == [
            "Invalid date format. Expected yyyy-MM-dd."
        ]

    def test_wrong_value_type(self, context):
        """Test that a non-date, non-string value is a type violation."""
        assert messages(check_field("d", 20250507, {"type": "date"}, context)) == [
            "Invalid date type."
        ]

    def test_date_objects_accepted(self, context):
        """Test native date and datetime values."""
        rules = {"type": "date", "minDate": "today"}
        assert check_field("d", date(2025, 5, 7), rules, context) == []
        assert check_field("d", datetime(2025, 5, 7, 9, 30), rules, context) == []

    def test_min_date_today(self, context):
        """Test that today passes and yesterday fails."""
        rules = {"type": "date", "minDate": "TODAY"}
        assert check_field("d", "2025-05-01", rules, context) == []
        assert messages(check_field("d", "2025-04-30", rules, context)) == [
            "Date cannot be in the past."
        ]

    @pytest.mark.parametrize("value", ["2025-05-10", "2025-05-11"])
    def test_weekend_violates(self, context, value):
        """Test Saturday and Sunday."""
        rules = {"type": "date", "customRule": "noWeekendOrHoliday"}
        assert messages(check_field("d", value, rules, context)) == ["Date cannot be a weekend."]

    def test_weekday_holiday_violates(self, context):
        """Test a declared holiday that falls on a weekday (Wed 2025-01-01)."""
        rules = {"type": "date", "customRule": "noWeekendOrHoliday"}
        assert messages(check_field("d", "2025-01-01", rules, context)) == [
            "Date cannot be a public holiday."
        ]

    def test_weekend_holiday_reports_once(self):
        """Test a holiday on a weekend gives one weekend violation."""
        calendar = HolidayCalendar(["2025-05-10"])
        context = CheckContext(holiday_calendar=calendar, today=lambda: date(2025, 1, 1))
        rules = {"type": "date", "customRule": "noWeekendOrHoliday"}

        assert messages(check_field("d", "2025-05-10", rules, context)) == [
            "Date cannot be a weekend."
        ]

    def test_ordinary_weekday_passes(self, context):
        """Test Wednesday 2025-05-07."""
        rules = {"type": "date", "customRule": "noWeekendOrHoliday"}
        assert check_field("d", "2025-05-07", rules, context) == []

    def test_custom_rule_template_shared(self, context):
        """Test that weekend and holiday share errorMessageCustomRule."""
        rules = {
            "type": "date",
            "customRule": "noWeekendOrHoliday",
            "errorMessageCustomRule": "{date} is not a business day",
        }
        assert messages(check_field("d", "2025-05-10", rules, context)) == [
            "2025-05-10 is not a business day"
        ]
        assert messages(check_field("d", "2025-12-25", rules, context)) == [
            "2025-12-25 is not a business day"
        ]

    def test_past_weekend_reports_both_rules(self, context):
        """Test that minDate and customRule are independent checks."""
        rules = {"type": "date", "minDate": "today", "customRule": "noWeekendOrHoliday"}
        assert messages(check_field("d", "2025-04-26", rules, context)) == [
            "Date cannot be in the past.",
            "Date cannot be a weekend.",
        ]


class TestHolidayCalendar:
    """Test HolidayCalendar."""

    def test_default_calendar(self):
        """Test the built-in 2025 calendar."""
        assert US_FEDERAL_2025.is_holiday(date(2025, 1, 1))
        assert date(2025, 12, 25) in US_FEDERAL_2025
        assert not US_FEDERAL_2025.is_holiday(date(2025, 5, 7))
        assert US_FEDERAL_2025.years() == [2025]

    def test_other_years_have_no_holidays(self):
        """Test that coverage is limited to configured years."""
        assert not US_FEDERAL_2025.is_holiday(date(2026, 1, 1))

    def test_from_config(self):
        """Test building a calendar from config."""
        calendar = HolidayCalendar.from_config({"name": "test", "dates": ["2026-01-01"]})

        assert calendar.name == "test"
        assert calendar.is_holiday(date(2026, 1, 1))
        assert len(calendar) == 1

    def test_invalid_date_rejected(self):
        """Test that malformed config dates fail loudly."""
        with pytest.raises(ValueError):
            HolidayCalendar(["01/01/2026"])
