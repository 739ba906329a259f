"""
Habit schedule rules.

A rule only describes when a habit is due; evaluation lives in
fitchallenge.services.recurrence. Validators here are lenient on purpose:
configuration that cannot be read becomes an empty/absent value, which the
evaluator treats as "never due".
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return []


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


class RecurrenceRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    type: str = Field("daily", description="daily, weekly, interval or monthly")
    days: List[Union[int, str]] = Field(
        default_factory=list,
        description="Weekly days: names ('monday', 'mon') or ISO numbers 1-7",
    )
    interval_days: Optional[int] = Field(
        None, validation_alias=AliasChoices("interval_days", "intervalDays")
    )
    anchor_date: Optional[date] = Field(
        None,
        validation_alias=AliasChoices("anchor_date", "anchorDate", "startDate"),
        description="Reference date for interval rules",
    )
    month_days: List[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("month_days", "monthDays", "dates"),
    )
    exceptions: List[str] = Field(
        default_factory=list, description="Weekday names that are never due"
    )
    excluded_dates: List[date] = Field(
        default_factory=list,
        validation_alias=AliasChoices("excluded_dates", "excludedDates"),
    )
    is_active: bool = Field(
        True, validation_alias=AliasChoices("is_active", "isActive")
    )

    @model_validator(mode="before")
    @classmethod
    def _merge_config(cls, data: Any) -> Any:
        # Pattern documents keep rule settings under a nested "config" key
        if isinstance(data, dict) and isinstance(data.get("config"), dict):
            merged = {k: v for k, v in data.items() if k != "config"}
            for key, value in data["config"].items():
                merged.setdefault(key, value)
            return merged
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, value: Any) -> str:
        return str(value).strip().lower() if value is not None else ""

    @field_validator("days", mode="before")
    @classmethod
    def _days_list(cls, value: Any) -> List[Any]:
        return [d for d in _as_list(value) if isinstance(d, (int, str))]

    @field_validator("interval_days", mode="before")
    @classmethod
    def _interval(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator("month_days", mode="before")
    @classmethod
    def _month_days(cls, value: Any) -> List[int]:
        days = []
        for day in _as_list(value):
            try:
                number = int(day)
            except (TypeError, ValueError):
                continue
            if 1 <= number <= 31:
                days.append(number)
        return days

    @field_validator("exceptions", mode="before")
    @classmethod
    def _exception_names(cls, value: Any) -> List[str]:
        return [str(name) for name in _as_list(value)]

    @field_validator("anchor_date", mode="before")
    @classmethod
    def _anchor(cls, value: Any) -> Any:
        if isinstance(value, (date, str)):
            return _parse_date(value)
        return None

    @field_validator("excluded_dates", mode="before")
    @classmethod
    def _excluded(cls, value: Any) -> List[date]:
        parsed = (_parse_date(item) for item in _as_list(value))
        return [d for d in parsed if d is not None]


class HabitPattern(BaseModel):
    """Several rules OR-ed together, with exceptions that override all of them."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    name: str = ""
    description: str = ""
    rules: List[RecurrenceRule] = Field(default_factory=list)
    exceptions: List[str] = Field(default_factory=list)
    is_active: bool = Field(
        True, validation_alias=AliasChoices("is_active", "isActive")
    )

    @field_validator("exceptions", mode="before")
    @classmethod
    def _exception_names(cls, value: Any) -> List[str]:
        return [str(name) for name in _as_list(value)]
