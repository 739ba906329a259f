"""Tests for score aggregation, per check-in scoring and streaks."""

import random
from datetime import date, timedelta

import pytest

from fitchallenge.models.records import CheckIn
from fitchallenge.models.scoring import CheckInMetrics, ScoringConfig
from fitchallenge.services.scoring import (
    aggregate_score,
    calculate_streak,
    compute_checkin_score,
    compute_weekly_score,
)


def _checkins(*scores):
    return [
        CheckIn(
            challenge_id="c1",
            user_id="u1",
            check_in_date=date(2024, 1, 1) + timedelta(days=i),
            auto_score=score,
        )
        for i, score in enumerate(scores)
    ]


@pytest.fixture
def config() -> ScoringConfig:
    return ScoringConfig(
        checkinPoints=10,
        workoutPoints=5,
        nutritionPoints=4,
        stepsBuckets=[5000, 10000],
    )


def test_aggregate_score_sums_auto_scores():
    assert aggregate_score(_checkins(10, 15, 5)) == 30


def test_aggregate_score_empty_is_zero():
    assert aggregate_score([]) == 0


def test_aggregate_score_is_order_independent():
    checkins = _checkins(0.1, 0.2, 0.3, 1e16, 1.0, -0.0, 7.25)
    expected = aggregate_score(checkins)
    rng = random.Random(7)
    for _ in range(20):
        shuffled = list(checkins)
        rng.shuffle(shuffled)
        assert aggregate_score(shuffled) == expected


def test_aggregate_score_treats_missing_and_malformed_as_zero():
    rows = [
        {"challengeId": "c1", "userId": "u1", "date": "2024-01-01", "autoScore": 10},
        {"challengeId": "c1", "userId": "u1", "date": "2024-01-02"},
        {"challengeId": "c1", "userId": "u1", "date": "2024-01-03", "autoScore": None},
        {"challengeId": "c1", "userId": "u1", "date": "2024-01-04", "autoScore": "abc"},
        {"challengeId": "c1", "userId": "u1", "date": "2024-01-05", "autoScore": "2.5"},
    ]
    checkins = [CheckIn.model_validate(row) for row in rows]
    assert aggregate_score(checkins) == 12.5


def test_checkin_score_base_points_only(config):
    result = compute_checkin_score(config, CheckInMetrics())
    assert result.total_score == 10
    assert result.breakdown.checkin == 10
    assert result.streak_multiplier == 1.0


def test_checkin_score_caps_workouts_at_two(config):
    result = compute_checkin_score(config, CheckInMetrics(workouts=4))
    assert result.breakdown.workouts == 10
    assert result.total_score == 20


def test_checkin_score_nutrition_and_steps(config):
    result = compute_checkin_score(
        config, CheckInMetrics(nutritionScore=5, steps=12000)
    )
    # 5/10 * 4 = 2 nutrition points, both step buckets reached
    assert result.breakdown.nutrition == 2
    assert result.breakdown.steps == 4
    assert result.total_score == 16


def test_checkin_score_weight_loss_is_capped():
    config = ScoringConfig(checkinPoints=0, weightLossPoints=10)
    result = compute_checkin_score(
        config, CheckInMetrics(weightKg=80, previousWeight=85)
    )
    assert result.breakdown.weight_loss == 20
    assert result.total_score == 20


def test_checkin_score_weight_gain_scores_nothing():
    config = ScoringConfig(checkinPoints=0, weightLossPoints=10)
    result = compute_checkin_score(
        config, CheckInMetrics(weightKg=86, previousWeight=85)
    )
    assert result.breakdown.weight_loss == 0
    assert result.total_score == 0


def test_checkin_score_streak_multiplier_per_completed_week():
    config = ScoringConfig(checkinPoints=10, streakMultiplier=1)
    result = compute_checkin_score(config, CheckInMetrics(streakDays=14))
    assert result.streak_multiplier == pytest.approx(1.2)
    assert result.total_score == 12


def test_checkin_score_strength_multiplier():
    config = ScoringConfig(
        checkinPoints=10, workoutPoints=5, challengeType="strength"
    )
    result = compute_checkin_score(config, CheckInMetrics(workouts=3))
    assert result.challenge_type_multiplier == 1.2
    assert result.total_score == 24


def test_checkin_metrics_reject_out_of_range_values():
    with pytest.raises(ValueError):
        CheckInMetrics(steps=-1)
    with pytest.raises(ValueError):
        CheckInMetrics(nutritionScore=11)


def test_weekly_score_adds_bonus_for_five_checkins(config):
    week = [CheckInMetrics() for _ in range(5)]
    result = compute_weekly_score(config, week)
    assert result.breakdown.checkin == 50
    assert result.total_score == 70


def test_weekly_score_no_bonus_below_five(config):
    week = [CheckInMetrics() for _ in range(4)]
    assert compute_weekly_score(config, week).total_score == 40


def test_streak_counts_consecutive_days():
    dates = [date(2024, 1, d) for d in (1, 2, 3, 5, 6)]
    streak = calculate_streak(dates)
    assert streak.current == 2
    assert streak.longest == 3


def test_streak_ignores_duplicates_and_order():
    dates = [date(2024, 1, 3), date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 2)]
    streak = calculate_streak(dates)
    assert streak.current == 3
    assert streak.longest == 3


def test_streak_is_broken_after_a_missed_day():
    dates = [date(2024, 1, 1), date(2024, 1, 2)]
    assert calculate_streak(dates, today=date(2024, 1, 3)).current == 2
    assert calculate_streak(dates, today=date(2024, 1, 4)).current == 0


def test_streak_empty():
    streak = calculate_streak([])
    assert streak.current == 0
    assert streak.longest == 0
