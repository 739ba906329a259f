"""
Scoring API endpoints

Score previews for coaches building a challenge, and the aggregation and
ranking helpers for callers that already hold the records.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import List
from datetime import date

from fitchallenge.models.records import CheckIn
from fitchallenge.models.scoring import (
    CheckInMetrics,
    RankEntry,
    RankedEntry,
    ScoreResult,
    ScoringConfig,
    StreakSummary,
    TieMode,
)
from fitchallenge.services.ranking import assign_ranks
from fitchallenge.services.scoring import (
    aggregate_score,
    calculate_streak,
    compute_checkin_score,
    compute_weekly_score,
)

router = APIRouter(redirect_slashes=False)


class CheckInScoreRequest(BaseModel):
    config: ScoringConfig
    metrics: CheckInMetrics


class WeeklyScoreRequest(BaseModel):
    config: ScoringConfig
    week: List[CheckInMetrics] = Field(default_factory=list, max_length=7)


class AggregateRequest(BaseModel):
    checkins: List[CheckIn] = Field(default_factory=list)


class AggregateResponse(BaseModel):
    total_score: float
    checkins_count: int


class RankRequest(BaseModel):
    entries: List[RankEntry] = Field(default_factory=list)
    ties: TieMode = "sequential"


class StreakRequest(BaseModel):
    dates: List[date] = Field(default_factory=list)


@router.post("/checkin", response_model=ScoreResult)
async def score_checkin(request: CheckInScoreRequest):
    return compute_checkin_score(request.config, request.metrics)


@router.post("/weekly", response_model=ScoreResult)
async def score_week(request: WeeklyScoreRequest):
    return compute_weekly_score(request.config, request.week)


@router.post("/aggregate", response_model=AggregateResponse)
async def aggregate_checkins(request: AggregateRequest):
    return AggregateResponse(
        total_score=aggregate_score(request.checkins),
        checkins_count=len(request.checkins),
    )


@router.post("/rank", response_model=List[RankedEntry])
async def rank_entries(request: RankRequest):
    return assign_ranks(request.entries, ties=request.ties)


@router.post("/streak", response_model=StreakSummary)
async def streak_from_dates(request: StreakRequest):
    return calculate_streak(request.dates)
