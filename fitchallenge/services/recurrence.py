"""
Habit Recurrence Service

Decides on which calendar days a habit is due. Everything here is a pure
function of (schedule, date): no database access and no clock reads, so the
same schedule always produces the same dates.

A schedule is one of:
- RecurrenceRule: daily / weekly / interval / monthly
- HabitPattern: several rules OR-ed together
- Habit: a challenge habit (daily / weekly / custom), mapped onto a rule

Exceptions (weekday names) and excluded dates always win over the rule.
Configuration that cannot be evaluated (empty weekly day set, non-positive
interval, unknown type) is never due.
"""

from datetime import date, timedelta
from functools import lru_cache
from typing import Iterable, Iterator, List, Optional, Set, Tuple, Union

from pydantic import BaseModel

from fitchallenge.core.config import settings
from fitchallenge.models.records import Habit
from fitchallenge.models.recurrence import HabitPattern, RecurrenceRule
from fitchallenge.services.logger import logger

Schedule = Union[RecurrenceRule, HabitPattern, Habit]

# Index matches date.weekday(): Monday=0 ... Sunday=6
WEEKDAY_NAMES = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

FALLBACK_ANCHOR_DATE = date(2024, 1, 1)


class DueDay(BaseModel):
    day: date
    weekday: str
    due: bool
    reason: str


def parse_weekday(value: Union[int, str]) -> Optional[int]:
    """
    Convert a weekday name or ISO number to a Python weekday (Monday=0).

    Accepts full names, any unambiguous prefix of at least three letters
    ("mon", "tues", "thur"), and ISO numbers 1-7 where 7 is Sunday.
    Returns None for anything else.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value - 1 if 1 <= value <= 7 else None
    if isinstance(value, str):
        name = value.strip().lower()
        if name.isdigit():
            return parse_weekday(int(name))
        if len(name) < 3:
            return None
        for index, full_name in enumerate(WEEKDAY_NAMES):
            if full_name.startswith(name):
                return index
    return None


def weekday_set(values: Iterable[Union[int, str]]) -> Set[int]:
    weekdays = set()
    for value in values:
        weekday = parse_weekday(value)
        if weekday is not None:
            weekdays.add(weekday)
    return weekdays


@lru_cache(maxsize=16)
def _parse_anchor_date(configured: str) -> date:
    try:
        return date.fromisoformat(configured)
    except ValueError:
        logger.warning(
            "Invalid RECURRENCE_ANCHOR_DATE, using fallback",
            {
                "configured": configured,
                "fallback": FALLBACK_ANCHOR_DATE.isoformat(),
            },
        )
        return FALLBACK_ANCHOR_DATE


def default_anchor_date() -> date:
    """Anchor for interval rules without their own; parsed once per setting value."""
    return _parse_anchor_date(settings.RECURRENCE_ANCHOR_DATE)


def rule_for_habit(
    habit: Habit, anchor_date: Optional[date] = None
) -> Optional[RecurrenceRule]:
    """
    Map a challenge habit onto a recurrence rule.

    Weekly habits use their configured days when present, otherwise the
    weekday of anchor_date (the challenge start). Configured days take
    precedence over the start weekday. Inactive habits, and weekly habits
    with neither, have no rule.
    """
    if not habit.active:
        return None

    if habit.frequency == "daily":
        return RecurrenceRule(id=habit.id, type="daily")

    if habit.frequency == "weekly":
        days = list(habit.custom_days)
        if not days and anchor_date is not None:
            days = [anchor_date.isoweekday()]
        if not days:
            return None
        return RecurrenceRule(id=habit.id, type="weekly", days=days)

    if habit.frequency == "custom":
        return RecurrenceRule(id=habit.id, type="weekly", days=list(habit.custom_days))

    return None


def _evaluate_rule(rule: RecurrenceRule, day: date) -> Tuple[bool, str]:
    if not rule.is_active:
        return False, "Rule inactive"

    if rule.type == "daily":
        return True, "Daily rule"

    if rule.type == "weekly":
        if day.weekday() in weekday_set(rule.days):
            return True, f"Weekly rule: {WEEKDAY_NAMES[day.weekday()]}"
        return False, "Not a scheduled weekday"

    if rule.type == "interval":
        if not rule.interval_days or rule.interval_days <= 0:
            return False, "Invalid interval"
        anchor = rule.anchor_date or default_anchor_date()
        if (day - anchor).days % rule.interval_days == 0:
            return True, f"Interval rule: every {rule.interval_days} days"
        return False, "Between intervals"

    if rule.type == "monthly":
        # Days missing from short months are skipped, not moved to month end
        if day.day in rule.month_days:
            return True, f"Monthly rule: day {day.day}"
        return False, "Not a scheduled day of month"

    return False, f"Unknown rule type '{rule.type}'"


def _check_rule(rule: RecurrenceRule, day: date) -> Tuple[bool, str]:
    if day in rule.excluded_dates:
        return False, f"Excluded date: {day.isoformat()}"
    if day.weekday() in weekday_set(rule.exceptions):
        return False, f"Exception: {WEEKDAY_NAMES[day.weekday()]}"
    return _evaluate_rule(rule, day)


def explain_due(
    schedule: Schedule, day: date, anchor_date: Optional[date] = None
) -> Tuple[bool, str]:
    """Whether the habit is due on `day`, with a short human-readable reason."""
    if isinstance(schedule, HabitPattern):
        if not schedule.is_active:
            return False, "Pattern inactive"
        if day.weekday() in weekday_set(schedule.exceptions):
            return False, f"Exception: {WEEKDAY_NAMES[day.weekday()]}"
        reason = "No rule matched"
        for rule in schedule.rules:
            due, rule_reason = _check_rule(rule, day)
            if due:
                return True, rule_reason
            if rule_reason.startswith(("Exception", "Excluded")):
                reason = rule_reason
        return False, reason

    if isinstance(schedule, Habit):
        rule = rule_for_habit(schedule, anchor_date)
        if rule is None:
            return False, "Habit has no schedule"
        return _check_rule(rule, day)

    return _check_rule(schedule, day)


def is_due(schedule: Schedule, day: date, anchor_date: Optional[date] = None) -> bool:
    """
    Whether the habit is due on `day`.

    anchor_date is only used for weekly Habits without configured days,
    where it stands for the challenge start date.
    """
    due, _ = explain_due(schedule, day, anchor_date)
    return due


def iter_due_dates(
    schedule: Schedule,
    start_date: date,
    end_date: date,
    anchor_date: Optional[date] = None,
) -> Iterator[date]:
    """Lazily yield due dates in [start_date, end_date]; empty if start > end."""
    if isinstance(schedule, Habit) and anchor_date is None:
        anchor_date = start_date

    day = start_date
    while day <= end_date:
        if is_due(schedule, day, anchor_date):
            yield day
        day += timedelta(days=1)


def generate_due_dates(
    schedule: Schedule,
    start_date: date,
    end_date: date,
    anchor_date: Optional[date] = None,
) -> List[date]:
    return list(iter_due_dates(schedule, start_date, end_date, anchor_date))


def preview_schedule(
    schedule: Schedule,
    start_date: date,
    end_date: date,
    anchor_date: Optional[date] = None,
) -> List[DueDay]:
    """Every day in the range with whether it is due and why."""
    if isinstance(schedule, Habit) and anchor_date is None:
        anchor_date = start_date

    days = []
    day = start_date
    while day <= end_date:
        due, reason = explain_due(schedule, day, anchor_date)
        days.append(
            DueDay(
                day=day,
                weekday=WEEKDAY_NAMES[day.weekday()],
                due=due,
                reason=reason,
            )
        )
        day += timedelta(days=1)
    return days


def describe_rule(rule: RecurrenceRule) -> str:
    if rule.type == "daily":
        description = "Every day"
    elif rule.type == "weekly":
        names = [WEEKDAY_NAMES[d].capitalize() for d in sorted(weekday_set(rule.days))]
        description = f"Every {', '.join(names)}" if names else "Never (no days set)"
    elif rule.type == "interval":
        if rule.interval_days and rule.interval_days > 0:
            description = f"Every {rule.interval_days} days"
        else:
            description = "Never (invalid interval)"
    elif rule.type == "monthly":
        if rule.month_days:
            days = ", ".join(str(d) for d in sorted(set(rule.month_days)))
            description = f"Monthly on days: {days}"
        else:
            description = "Never (no days of month set)"
    else:
        description = "Unknown rule type"

    exceptions = [WEEKDAY_NAMES[d].capitalize() for d in sorted(weekday_set(rule.exceptions))]
    if exceptions:
        description += f", except {', '.join(exceptions)}"
    return description
