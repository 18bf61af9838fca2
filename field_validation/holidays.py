"""Holiday calendars used by the noWeekendOrHoliday date rule."""

from datetime import date
from typing import Any, Iterable, List, Mapping, Union


class HolidayCalendar:
    """
    Immutable set of non-business dates.

    Built once at startup and handed to the validator. Dates outside the
    years the calendar was populated for are never holidays.
    """

    def __init__(self, dates: Iterable[Union[date, str]], name: str = "custom"):
        self.name = name
        self._dates = frozenset(_as_date(d) for d in dates)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "HolidayCalendar":
        """
        Build a calendar from a config mapping.

        Args:
            config: {"name": str, "dates": ["2025-01-01", ...]}
        """
        return cls(config.get("dates") or [], name=config.get("name", "custom"))

    def is_holiday(self, day: date) -> bool:
        return day in self._dates

    def years(self) -> List[int]:
        """Years that have at least one holiday configured."""
        return sorted({d.year for d in self._dates})

    def __contains__(self, day: date) -> bool:
        return self.is_holiday(day)

    def __len__(self) -> int:
        return len(self._dates)

    def __repr__(self) -> str:
        return f"HolidayCalendar(name={self.name!r}, dates={len(self._dates)})"


def _as_date(value: Union[date, str]) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"Invalid holiday date (expected YYYY-MM-DD): {value!r}") from None


US_FEDERAL_2025 = HolidayCalendar(
    [
        date(2025, 1, 1),    # New Year's Day
        date(2025, 1, 20),   # Martin Luther King Jr. Day
        date(2025, 2, 17),   # Presidents' Day
        date(2025, 5, 26),   # Memorial Day
        date(2025, 6, 19),   # Juneteenth
        date(2025, 7, 4),    # Independence Day
        date(2025, 9, 1),    # Labor Day
        date(2025, 10, 13),  # Columbus Day
        date(2025, 11, 11),  # Veterans Day
        date(2025, 11, 27),  # Thanksgiving Day
        date(2025, 12, 25),  # Christmas Day
    ],
    name="us-federal-2025",
)
