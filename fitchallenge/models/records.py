"""
Record types read from the document store.

Rows arrive either from Supabase (snake_case columns) or from exported
challenge documents (camelCase keys). Both validate into the same models,
and missing or malformed numeric fields are normalised here so that the
scoring and ranking code never has to guard against them.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from fitchallenge.core.config import settings
from fitchallenge.services.logger import logger


PaymentStatus = Literal["pending", "paid", "refunded"]
HabitFrequency = Literal["daily", "weekly", "custom"]


def normalize_score(value: Any) -> float:
    """Coerce a stored score to a non-negative float; anything unusable is 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(score) or math.isinf(score) or score < 0:
        return 0.0
    return score


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CheckIn(_Record):
    id: Optional[str] = None
    enrollment_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(
            "enrollment_id", "enrolment_id", "enrollmentId", "enrolmentId"
        ),
    )
    challenge_id: str = Field(
        ..., validation_alias=AliasChoices("challenge_id", "challengeId")
    )
    user_id: str = Field(..., validation_alias=AliasChoices("user_id", "userId"))
    check_in_date: date = Field(
        ..., validation_alias=AliasChoices("check_in_date", "date")
    )
    auto_score: float = Field(
        0.0, validation_alias=AliasChoices("auto_score", "autoScore")
    )

    @field_validator("auto_score", mode="before")
    @classmethod
    def _normalize_auto_score(cls, value: Any) -> float:
        return normalize_score(value)


class Enrollment(_Record):
    id: str
    user_id: str = Field(..., validation_alias=AliasChoices("user_id", "userId"))
    challenge_id: str = Field(
        ..., validation_alias=AliasChoices("challenge_id", "challengeId")
    )
    total_score: float = Field(
        0.0, validation_alias=AliasChoices("total_score", "totalScore")
    )
    payment_status: PaymentStatus = Field(
        "pending", validation_alias=AliasChoices("payment_status", "paymentStatus")
    )

    @field_validator("total_score", mode="before")
    @classmethod
    def _normalize_total_score(cls, value: Any) -> float:
        return normalize_score(value)


class Habit(_Record):
    id: str
    challenge_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("challenge_id", "challengeId")
    )
    name: str = ""
    frequency: HabitFrequency = "daily"
    custom_days: List[int] = Field(
        default_factory=list,
        description="ISO weekday numbers, 1=Monday ... 7=Sunday",
    )
    custom_times: List[str] = Field(default_factory=list)
    points: float = 0.0
    active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _flatten_custom_frequency(cls, data: Any) -> Any:
        # Documents nest the schedule as customFrequency: {days, times}
        if isinstance(data, dict) and isinstance(data.get("customFrequency"), dict):
            custom = data["customFrequency"]
            data = {
                **data,
                "custom_days": custom.get("days") or [],
                "custom_times": custom.get("times") or [],
            }
        return data

    @field_validator("custom_days", mode="before")
    @classmethod
    def _keep_valid_days(cls, value: Any) -> List[int]:
        if not isinstance(value, (list, tuple, set)):
            return []
        days = []
        for day in value:
            try:
                number = int(day)
            except (TypeError, ValueError):
                continue
            if 1 <= number <= 7:
                days.append(number)
        return days

    @field_validator("points", mode="before")
    @classmethod
    def _normalize_points(cls, value: Any) -> float:
        return normalize_score(value)


class ScoringRules(_Record):
    """Per-challenge point values as stored on the challenge document."""

    checkin_points: float = Field(
        0, ge=0, validation_alias=AliasChoices("checkin_points", "checkinPoints")
    )
    workout_points: float = Field(
        0, ge=0, validation_alias=AliasChoices("workout_points", "workoutPoints")
    )
    nutrition_points: float = Field(
        0, ge=0, validation_alias=AliasChoices("nutrition_points", "nutritionPoints")
    )
    steps_buckets: List[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("steps_buckets", "stepsBuckets"),
    )
    weight_loss_points: Optional[float] = Field(
        None, validation_alias=AliasChoices("weight_loss_points", "weightLossPoints")
    )
    consistency_bonus: Optional[float] = Field(
        None, validation_alias=AliasChoices("consistency_bonus", "consistencyBonus")
    )
    streak_multiplier: Optional[float] = Field(
        None, validation_alias=AliasChoices("streak_multiplier", "streakMultiplier")
    )


class Challenge(_Record):
    id: str
    name: str = ""
    description: Optional[str] = None
    status: str = "draft"
    challenge_type: str = Field(
        "fitness", validation_alias=AliasChoices("challenge_type", "challengeType")
    )
    start_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("end_date", "endDate")
    )
    duration_days: Optional[int] = Field(
        None, validation_alias=AliasChoices("duration_days", "durationDays")
    )
    timezone: str = Field(default_factory=lambda: settings.DEFAULT_TIMEZONE)
    scoring: Optional[ScoringRules] = None


class UserProfile(_Record):
    id: str
    display_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("display_name", "displayName", "name")
    )
    email: Optional[str] = None
    photo_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("photo_url", "photoURL", "profile_picture_url"),
    )

    @property
    def label(self) -> str:
        return self.display_name or self.email or "Anonymous"


def parse_records(model, rows: Optional[List[Dict[str, Any]]]) -> List[Any]:
    """Validate a list of rows, dropping (and logging) rows that cannot be read."""
    records = []
    for row in rows or []:
        try:
            records.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed {model.__name__} row",
                {
                    "row_id": row.get("id") if isinstance(row, dict) else None,
                    "error": str(e),
                },
            )
    return records
