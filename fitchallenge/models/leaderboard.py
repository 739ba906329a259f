from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from fitchallenge.models.records import Challenge


class LeaderboardEntry(BaseModel):
    """One participant on a challenge leaderboard. Derived on every read."""

    user_id: str
    enrollment_id: str
    challenge_id: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    total_score: float = 0
    checkins_count: int = 0
    last_checkin: Optional[date] = None
    streak: int = 0
    rank: int = 0


class GlobalLeaderboardEntry(BaseModel):
    user_id: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    total_score: float = 0
    challenges_count: int = 0
    total_checkins: int = 0
    average_score: int = 0
    last_activity: Optional[date] = None
    rank: int = 0


class ChallengeLeaderboard(BaseModel):
    challenge: Challenge
    participants: List[LeaderboardEntry] = Field(default_factory=list)
    total_participants: int = 0
    average_score: int = 0
    top_score: float = 0
    # Cohort calendar, only known when the challenge has a start date
    end_date: Optional[date] = None
    days_elapsed: Optional[int] = None
    days_remaining: Optional[int] = None
    is_active: Optional[bool] = None


class LeaderboardStats(BaseModel):
    total_participants: int = 0
    average_score: int = 0
    top_score: float = 0
    score_distribution: Dict[str, int] = Field(default_factory=dict)
    participation_trend: Dict[str, int] = Field(default_factory=dict)


class UserRank(BaseModel):
    user_id: str
    challenge_id: Optional[str] = None
    rank: Optional[int] = None
