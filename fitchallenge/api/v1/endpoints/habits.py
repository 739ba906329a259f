"""
Habit schedule API endpoints

The caller sends the schedule (a rule, a pattern or a challenge habit) and
gets back the days it is due. Only the challenge schedule reads the store,
to find the challenge window.
"""

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel
from typing import List, Optional
from datetime import date

from fitchallenge.models.records import Habit
from fitchallenge.models.recurrence import HabitPattern, RecurrenceRule
from fitchallenge.services.challenge_repository import (
    ChallengeRepository,
    get_challenge_repository,
)
from fitchallenge.services.cohort_time import challenge_window
from fitchallenge.services.recurrence import (
    DueDay,
    Schedule,
    describe_rule,
    explain_due,
    generate_due_dates,
    preview_schedule,
)

router = APIRouter(redirect_slashes=False)

MAX_SCHEDULE_DAYS = 366 * 2


class ScheduleSource(BaseModel):
    rule: Optional[RecurrenceRule] = None
    pattern: Optional[HabitPattern] = None
    habit: Optional[Habit] = None
    anchor_date: Optional[date] = None  # Challenge start, for weekly habits


class ScheduleRequest(ScheduleSource):
    start_date: date
    end_date: date
    include_reasons: bool = False


class ChallengeHabitScheduleRequest(BaseModel):
    habit: Habit
    include_reasons: bool = False


class ScheduleResponse(BaseModel):
    due_dates: List[date]
    count: int
    days: Optional[List[DueDay]] = None


class IsDueRequest(ScheduleSource):
    date: date


class IsDueResponse(BaseModel):
    date: date
    due: bool
    reason: str


class DescribeResponse(BaseModel):
    description: str


def _check_range(start_date: date, end_date: date) -> None:
    if (end_date - start_date).days >= MAX_SCHEDULE_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Date range cannot exceed {MAX_SCHEDULE_DAYS} days",
        )


def _build_schedule(
    schedule: Schedule,
    start_date: date,
    end_date: date,
    anchor_date: Optional[date],
    include_reasons: bool,
) -> ScheduleResponse:
    due_dates = generate_due_dates(schedule, start_date, end_date, anchor_date)
    days = None
    if include_reasons:
        days = preview_schedule(schedule, start_date, end_date, anchor_date)

    return ScheduleResponse(due_dates=due_dates, count=len(due_dates), days=days)


def _resolve_schedule(source: ScheduleSource) -> Schedule:
    provided = [s for s in (source.rule, source.pattern, source.habit) if s is not None]
    if len(provided) != 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide exactly one of rule, pattern or habit",
        )
    return provided[0]


@router.post("/schedule", response_model=ScheduleResponse)
async def get_habit_schedule(request: ScheduleRequest):
    """Due dates between start_date and end_date (inclusive)"""
    schedule = _resolve_schedule(request)

    _check_range(request.start_date, request.end_date)

    return _build_schedule(
        schedule,
        request.start_date,
        request.end_date,
        request.anchor_date,
        request.include_reasons,
    )


@router.post("/challenges/{challenge_id}/schedule", response_model=ScheduleResponse)
async def get_challenge_habit_schedule(
    challenge_id: str,
    request: ChallengeHabitScheduleRequest,
    repository: ChallengeRepository = Depends(get_challenge_repository),
):
    """Due dates of a habit over the whole challenge, anchored on its start"""
    challenge = repository.get_challenge(challenge_id)
    if challenge is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found"
        )

    start_date, end_date = challenge_window(challenge)
    _check_range(start_date, end_date)

    return _build_schedule(
        request.habit, start_date, end_date, start_date, request.include_reasons
    )


@router.post("/is-due", response_model=IsDueResponse)
async def check_habit_due(request: IsDueRequest):
    schedule = _resolve_schedule(request)
    due, reason = explain_due(schedule, request.date, request.anchor_date)
    return IsDueResponse(date=request.date, due=due, reason=reason)


@router.post("/describe", response_model=DescribeResponse)
async def describe_habit_rule(rule: RecurrenceRule):
    return DescribeResponse(description=describe_rule(rule))
