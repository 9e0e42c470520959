"""Recurrence calculation for task scheduling.

A recurrence rule is turned into one strategy per frequency type; each strategy
answers a single question: given an anchor date (the last completion, or the
start date), when is the task next due? Results are always strictly after the
anchor. Month and year arithmetic clamps to the last valid day of the target
month (Jan 31 + 1 month -> Feb 28/29).
"""

import calendar
import itertools
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Protocol

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict

from taskminder.core.errors import InvalidRecurrenceRuleError


# Sunday-first, matching stored days_of_week indices
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

MAX_DAY_OF_MONTH = 31


class FrequencyType(StrEnum):
    """Recurrence cadence unit."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"  # Interval in days, same as daily


def sunday_weekday(d: date) -> int:
    """Weekday index with Sunday = 0 .. Saturday = 6."""
    return (d.weekday() + 1) % 7


class RecurrenceStrategy(Protocol):
    """Computes the next due date from an anchor date."""

    def compute_next(self, anchor: date) -> date:
        """Return the next due date, strictly after `anchor`."""
        ...


@dataclass(frozen=True)
class DailyRecurrence:
    interval: int

    def compute_next(self, anchor: date) -> date:
        return anchor + timedelta(days=self.interval)


@dataclass(frozen=True)
class WeeklyRecurrence:
    interval: int

    def compute_next(self, anchor: date) -> date:
        return anchor + timedelta(weeks=self.interval)


@dataclass(frozen=True)
class WeekdaySetRecurrence:
    """Earliest listed weekday at least one day after the anchor.

    The interval does not apply here; an anchor that itself falls on a listed
    weekday moves to the next listed day, which may be the same weekday a week later.
    """

    days: frozenset[int]

    def compute_next(self, anchor: date) -> date:
        for offset in range(1, 8):
            candidate = anchor + timedelta(days=offset)
            if sunday_weekday(candidate) in self.days:
                return candidate
        msg = "days_of_week must contain at least one weekday"
        raise InvalidRecurrenceRuleError(msg)


@dataclass(frozen=True)
class MonthlyRecurrence:
    interval: int

    def compute_next(self, anchor: date) -> date:
        return anchor + relativedelta(months=self.interval)


@dataclass(frozen=True)
class MonthlyDayRecurrence:
    """First occurrence of `day` strictly after the anchor.

    Candidate months are the anchor's month, then every `interval` months after it.
    Days past the end of a candidate month clamp to its last day.
    """

    interval: int
    day: int

    def compute_next(self, anchor: date) -> date:
        month_start = anchor.replace(day=1)
        for step in itertools.count():
            target = month_start + relativedelta(months=step * self.interval)
            last_day = calendar.monthrange(target.year, target.month)[1]
            candidate = target.replace(day=min(self.day, last_day))
            if candidate > anchor:
                return candidate
        raise AssertionError("unreachable")  # pragma: no cover


@dataclass(frozen=True)
class YearlyRecurrence:
    interval: int

    def compute_next(self, anchor: date) -> date:
        # relativedelta maps Feb 29 to Feb 28 in non-leap years
        return anchor + relativedelta(years=self.interval)


class RecurrenceRule(BaseModel):
    """Validated recurrence configuration.

    Build instances with `RecurrenceRule.from_fields`, which raises
    InvalidRecurrenceRuleError rather than a pydantic ValidationError.
    """

    model_config = ConfigDict(frozen=True)

    frequency_type: FrequencyType
    frequency_value: int = 1
    day_of_month: int | None = None
    days_of_week: tuple[int, ...] | None = None

    @classmethod
    def from_fields(
        cls,
        *,
        frequency_type: str,
        frequency_value: int,
        day_of_month: int | None = None,
        days_of_week: list[int] | tuple[int, ...] | None = None,
    ) -> "RecurrenceRule":
        """Validate raw task fields and build a rule.

        Raises:
            InvalidRecurrenceRuleError: On an unknown frequency type, an interval below 1,
                a day of month outside 1-31 or a weekday outside 0-6
        """
        try:
            ftype = FrequencyType(frequency_type)
        except ValueError as e:
            raise InvalidRecurrenceRuleError(f"Unknown frequency type: {frequency_type!r}") from e

        if isinstance(frequency_value, bool) or not isinstance(frequency_value, int) or frequency_value < 1:
            raise InvalidRecurrenceRuleError(f"frequency_value must be a positive integer, got {frequency_value!r}")

        if day_of_month is not None and not 1 <= day_of_month <= MAX_DAY_OF_MONTH:
            raise InvalidRecurrenceRuleError(f"day_of_month must be between 1 and 31, got {day_of_month}")

        days: tuple[int, ...] | None = None
        if days_of_week:
            invalid = [d for d in days_of_week if not 0 <= d <= len(WEEKDAY_NAMES) - 1]
            if invalid:
                raise InvalidRecurrenceRuleError(f"days_of_week entries must be between 0 and 6, got {invalid}")
            days = tuple(sorted(set(days_of_week)))

        return cls(
            frequency_type=ftype,
            frequency_value=frequency_value,
            day_of_month=day_of_month,
            days_of_week=days,
        )


def build_strategy(rule: RecurrenceRule) -> RecurrenceStrategy:
    """Select the strategy for a rule.

    day_of_month is only consulted for monthly rules and days_of_week only for weekly ones.
    """
    match rule.frequency_type:
        case FrequencyType.DAILY | FrequencyType.CUSTOM:
            return DailyRecurrence(rule.frequency_value)
        case FrequencyType.WEEKLY if rule.days_of_week:
            return WeekdaySetRecurrence(frozenset(rule.days_of_week))
        case FrequencyType.WEEKLY:
            return WeeklyRecurrence(rule.frequency_value)
        case FrequencyType.MONTHLY if rule.day_of_month is not None:
            return MonthlyDayRecurrence(rule.frequency_value, rule.day_of_month)
        case FrequencyType.MONTHLY:
            return MonthlyRecurrence(rule.frequency_value)
        case FrequencyType.YEARLY:
            return YearlyRecurrence(rule.frequency_value)
    raise InvalidRecurrenceRuleError(f"Unknown frequency type: {rule.frequency_type!r}")


def calculate_next_due_date(
    last_completed: date | datetime,
    frequency_type: str,
    frequency_value: int,
    day_of_month: int | None = None,
    days_of_week: list[int] | tuple[int, ...] | None = None,
) -> date:
    """Compute the next due date after `last_completed`.

    Datetimes are truncated to their calendar date before any arithmetic.

    Examples:
        >>> calculate_next_due_date(date(2024, 1, 31), "monthly", 1)
        datetime.date(2024, 2, 29)
        >>> calculate_next_due_date(date(2024, 3, 6), "weekly", 1, days_of_week=[1, 3, 5])
        datetime.date(2024, 3, 8)
    """
    rule = RecurrenceRule.from_fields(
        frequency_type=frequency_type,
        frequency_value=frequency_value,
        day_of_month=day_of_month,
        days_of_week=days_of_week,
    )
    anchor = last_completed.date() if isinstance(last_completed, datetime) else last_completed
    return build_strategy(rule).compute_next(anchor)


def _ordinal(n: int) -> str:
    suffix = "th"
    if n in (1, 21, 31):
        suffix = "st"
    elif n in (2, 22):
        suffix = "nd"
    elif n in (3, 23):
        suffix = "rd"
    return f"{n}{suffix}"


def _every(n: int, unit: str, single: str) -> str:
    return single if n == 1 else f"every {n} {unit}s"


def describe_rule(rule: RecurrenceRule) -> str:
    """Convert a recurrence rule to human-readable text.

    Returns:
        Description such as "every 2 weeks", "monthly on the 31st" or
        "every Monday, Wednesday, Friday"
    """
    n = rule.frequency_value
    match rule.frequency_type:
        case FrequencyType.DAILY | FrequencyType.CUSTOM:
            return _every(n, "day", "daily")
        case FrequencyType.WEEKLY if rule.days_of_week:
            return f"every {', '.join(WEEKDAY_NAMES[d] for d in rule.days_of_week)}"
        case FrequencyType.WEEKLY:
            return _every(n, "week", "weekly")
        case FrequencyType.MONTHLY if rule.day_of_month is not None:
            return f"{_every(n, 'month', 'monthly')} on the {_ordinal(rule.day_of_month)}"
        case FrequencyType.MONTHLY:
            return _every(n, "month", "monthly")
        case FrequencyType.YEARLY:
            return _every(n, "year", "yearly")
    return f"scheduled ({rule.frequency_type})"
