from __future__ import annotations

import math
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from fitchallenge.models.records import ScoringRules


ChallengeType = Literal["fitness", "weight-loss", "wellness", "strength", "endurance"]
TieMode = Literal["sequential", "competition"]


class ScoringConfig(ScoringRules):
    challenge_type: ChallengeType = Field(
        "fitness", validation_alias=AliasChoices("challenge_type", "challengeType")
    )


class CheckInMetrics(BaseModel):
    """Raw numbers a participant reports for one check-in."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    steps: Optional[int] = Field(None, ge=0, le=100000)
    workouts: Optional[float] = Field(None, ge=0, le=10)
    nutrition_score: Optional[float] = Field(
        None,
        ge=0,
        le=10,
        validation_alias=AliasChoices("nutrition_score", "nutritionScore"),
    )
    weight_kg: Optional[float] = Field(
        None, ge=20, le=300, validation_alias=AliasChoices("weight_kg", "weightKg")
    )
    previous_weight: Optional[float] = Field(
        None,
        ge=20,
        le=300,
        validation_alias=AliasChoices("previous_weight", "previousWeight"),
    )
    sleep_hours: Optional[float] = Field(
        None, ge=0, le=24, validation_alias=AliasChoices("sleep_hours", "sleepHours")
    )
    water_intake: Optional[float] = Field(
        None, ge=0, validation_alias=AliasChoices("water_intake", "waterIntake")
    )
    meditation_minutes: Optional[float] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("meditation_minutes", "meditationMinutes"),
    )
    streak_days: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("streak_days", "streakDays")
    )


class ScoreBreakdown(BaseModel):
    checkin: float = 0
    workouts: float = 0
    nutrition: float = 0
    steps: float = 0
    weight_loss: float = 0
    consistency: float = 0
    streak: float = 0


class ScoreResult(BaseModel):
    total_score: int
    breakdown: ScoreBreakdown
    streak_multiplier: float = 1.0
    challenge_type_multiplier: float = 1.0


class StreakSummary(BaseModel):
    current: int = 0
    longest: int = 0


class RankEntry(BaseModel):
    id: str
    score: float = 0

    @field_validator("score")
    @classmethod
    def _finite_score(cls, value: float) -> float:
        # NaN would break the descending sort
        if not math.isfinite(value):
            return 0.0
        return value


class RankedEntry(RankEntry):
    rank: int
