"""
Scoring Service

Pure scoring helpers shared by the leaderboard service and the API:
- aggregate_score: total of pre-computed check-in scores
- compute_checkin_score: score one check-in from a challenge's scoring rules
- compute_weekly_score: score a week of check-ins, with the weekly bonus
- calculate_streak: current and longest run of consecutive check-in days
"""

import math
from datetime import date
from typing import Iterable, List, Optional

from fitchallenge.models.records import CheckIn
from fitchallenge.models.scoring import (
    CheckInMetrics,
    ScoreBreakdown,
    ScoreResult,
    ScoringConfig,
    StreakSummary,
)

MAX_SCORED_WORKOUTS = 2
POINTS_PER_STEPS_BUCKET = 2
MAX_SCORED_WEIGHT_LOSS_KG = 2
WEEKLY_BONUS_MIN_CHECKINS = 5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aggregate_score(checkins: Iterable[CheckIn]) -> float:
    """
    Sum auto_score over check-ins.

    Uses exactly-rounded summation so the result does not depend on the
    order the check-ins were fetched in. Empty input is 0.
    """
    return math.fsum(checkin.auto_score for checkin in checkins)


def _challenge_type_multiplier(config: ScoringConfig, metrics: CheckInMetrics) -> float:
    if not metrics.workouts:
        return 1.0

    if config.challenge_type == "strength" and metrics.workouts >= 3:
        return 1.2
    if config.challenge_type == "endurance" and (metrics.steps or 0) >= 10000:
        return 1.15
    if config.challenge_type == "wellness" and (metrics.meditation_minutes or 0) >= 10:
        return 1.1
    return 1.0


def compute_checkin_score(config: ScoringConfig, metrics: CheckInMetrics) -> ScoreResult:
    """
    Score a single check-in against the challenge scoring rules.

    Every check-in earns checkin_points. Workouts (capped at two), nutrition
    (0-10 self report scaled to nutrition_points), steps buckets reached,
    weight lost since the previous check-in and the consistency bonus are
    added on top. Streak and challenge-type multipliers apply to the total.
    """
    breakdown = ScoreBreakdown(checkin=config.checkin_points)
    total = config.checkin_points

    if metrics.workouts is not None:
        workouts = min(metrics.workouts, MAX_SCORED_WORKOUTS)
        breakdown.workouts = workouts * config.workout_points
        total += breakdown.workouts

    if metrics.nutrition_score is not None:
        breakdown.nutrition = round_half_up(
            metrics.nutrition_score / 10 * config.nutrition_points
        )
        total += breakdown.nutrition

    if metrics.steps is not None:
        reached = sum(1 for bucket in config.steps_buckets if metrics.steps >= bucket)
        breakdown.steps = reached * POINTS_PER_STEPS_BUCKET
        total += breakdown.steps

    if (
        config.weight_loss_points
        and metrics.weight_kg is not None
        and metrics.previous_weight is not None
    ):
        weight_loss = metrics.previous_weight - metrics.weight_kg
        if weight_loss > 0:
            breakdown.weight_loss = min(
                weight_loss * config.weight_loss_points,
                config.weight_loss_points * MAX_SCORED_WEIGHT_LOSS_KG,
            )
            total += breakdown.weight_loss

    if config.consistency_bonus and metrics.streak_days is not None:
        breakdown.consistency = min(metrics.streak_days * 0.5, config.consistency_bonus)
        total += breakdown.consistency

    streak_multiplier = 1.0
    if config.streak_multiplier and (metrics.streak_days or 0) >= 7:
        # +10% per completed week
        streak_multiplier = 1 + (metrics.streak_days // 7) * 0.1
        breakdown.streak = streak_multiplier

    type_multiplier = _challenge_type_multiplier(config, metrics)

    return ScoreResult(
        total_score=round_half_up(total * streak_multiplier * type_multiplier),
        breakdown=breakdown,
        streak_multiplier=streak_multiplier,
        challenge_type_multiplier=type_multiplier,
    )


def compute_weekly_score(config: ScoringConfig, week: List[CheckInMetrics]) -> ScoreResult:
    """Sum daily scores; five or more check-ins earn twice the check-in points."""
    breakdown = ScoreBreakdown()
    total = 0

    for metrics in week:
        daily = compute_checkin_score(config, metrics)
        total += daily.total_score
        for field in ScoreBreakdown.model_fields:
            day_value = getattr(daily.breakdown, field)
            setattr(breakdown, field, getattr(breakdown, field) + day_value)

    if len(week) >= WEEKLY_BONUS_MIN_CHECKINS:
        total += round_half_up(config.checkin_points * 2)

    return ScoreResult(total_score=total, breakdown=breakdown)


def calculate_streak(
    dates: Iterable[date], today: Optional[date] = None
) -> StreakSummary:
    """
    Current and longest streak of consecutive check-in days.

    Duplicate dates count once. The current streak is the run ending at the
    most recent check-in; when `today` is given, a run that ended before
    yesterday is no longer current.
    """
    unique = sorted(set(dates))
    if not unique:
        return StreakSummary()

    longest = run = 1
    for previous, current in zip(unique, unique[1:]):
        if (current - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)

    current_streak = run
    if today is not None and (today - unique[-1]).days > 1:
        current_streak = 0

    return StreakSummary(current=current_streak, longest=longest)
