"""
Leaderboard Service

Builds challenge and global leaderboards from enrolments and check-ins.
Scores are always re-aggregated from check-ins on read; the cached
Enrollment.total_score is only refreshed by recalculate_enrollment_score.
"""

import math
from collections import defaultdict
from typing import Any, Dict, List, Optional

from fitchallenge.core.config import settings
from fitchallenge.models.leaderboard import (
    ChallengeLeaderboard,
    GlobalLeaderboardEntry,
    LeaderboardEntry,
    LeaderboardStats,
)
from fitchallenge.models.records import Challenge, CheckIn, Enrollment
from fitchallenge.services.challenge_repository import (
    ChallengeRepository,
    get_challenge_repository,
)
from fitchallenge.services.cohort_time import (
    challenge_window,
    days_remaining,
    days_since_start,
    is_challenge_active,
)
from fitchallenge.services.logger import logger
from fitchallenge.services.ranking import (
    participation_trend,
    rank_items,
    score_distribution,
    summarize_scores,
)
from fitchallenge.services.scoring import aggregate_score, calculate_streak


class LeaderboardService:
    """Service for challenge and global leaderboards"""

    def __init__(self, repository: ChallengeRepository):
        self.repository = repository

    def _build_entry(
        self, enrollment: Enrollment, checkins: List[CheckIn]
    ) -> LeaderboardEntry:
        dates = [checkin.check_in_date for checkin in checkins]
        return LeaderboardEntry(
            user_id=enrollment.user_id,
            enrollment_id=enrollment.id,
            challenge_id=enrollment.challenge_id,
            total_score=aggregate_score(checkins),
            checkins_count=len(checkins),
            last_checkin=max(dates, default=None),
            streak=calculate_streak(dates).current,
        )

    def _challenge_timing(self, challenge: Challenge) -> Dict[str, Any]:
        if challenge.start_date is None:
            return {}

        start_date, end_date = challenge_window(challenge)
        return {
            "end_date": end_date,
            "days_elapsed": days_since_start(start_date, challenge.timezone),
            "days_remaining": days_remaining(end_date, challenge.timezone),
            "is_active": is_challenge_active(start_date, end_date, challenge.timezone),
        }

    def _attach_profiles(self, entries) -> None:
        profiles = self.repository.get_user_profiles(e.user_id for e in entries)
        for entry in entries:
            profile = profiles.get(entry.user_id)
            if profile:
                entry.display_name = profile.label
                entry.photo_url = profile.photo_url

    async def get_challenge_leaderboard(
        self, challenge_id: str, limit: Optional[int] = None
    ) -> Optional[ChallengeLeaderboard]:
        """
        Get a challenge leaderboard.

        Only paid enrolments are ranked. Totals (participants, average, top
        score) cover every participant even when `limit` trims the list.

        Returns:
            The leaderboard, or None if the challenge does not exist
        """
        try:
            challenge = self.repository.get_challenge(challenge_id)
            if challenge is None:
                logger.warning(
                    f"Challenge {challenge_id} not found for leaderboard",
                    {"challenge_id": challenge_id},
                )
                return None

            entries = [
                self._build_entry(
                    enrollment, self.repository.list_enrollment_checkins(enrollment.id)
                )
                for enrollment in self.repository.list_paid_enrollments(challenge_id)
            ]

            participants = []
            for rank, entry in rank_items(entries, lambda e: e.total_score):
                entry.rank = rank
                participants.append(entry)

            summary = summarize_scores([p.total_score for p in participants])

            if limit is not None:
                participants = participants[:limit]
            self._attach_profiles(participants)

            return ChallengeLeaderboard(
                challenge=challenge,
                participants=participants,
                total_participants=summary.total_participants,
                average_score=summary.average_score,
                top_score=summary.top_score,
                **self._challenge_timing(challenge),
            )

        except Exception as e:
            logger.error(
                f"Failed to get leaderboard for challenge {challenge_id}",
                {"error": str(e), "challenge_id": challenge_id},
            )
            raise

    async def get_global_leaderboard(
        self, limit: Optional[int] = None
    ) -> List[GlobalLeaderboardEntry]:
        """Sum each user's scores across all published challenges and rank them."""
        limit = limit or settings.LEADERBOARD_DEFAULT_LIMIT

        totals: Dict[str, GlobalLeaderboardEntry] = {}
        scores: Dict[str, List[float]] = defaultdict(list)

        for challenge in self.repository.list_published_challenges():
            leaderboard = await self.get_challenge_leaderboard(challenge.id)
            if leaderboard is None:
                continue

            for participant in leaderboard.participants:
                entry = totals.setdefault(
                    participant.user_id,
                    GlobalLeaderboardEntry(user_id=participant.user_id),
                )
                scores[participant.user_id].append(participant.total_score)
                entry.challenges_count += 1
                entry.total_checkins += participant.checkins_count
                if participant.last_checkin and (
                    entry.last_activity is None
                    or participant.last_checkin > entry.last_activity
                ):
                    entry.last_activity = participant.last_checkin

        for user_id, entry in totals.items():
            summary = summarize_scores(scores[user_id])
            entry.total_score = math.fsum(scores[user_id])
            entry.average_score = summary.average_score

        ranked = []
        for rank, entry in rank_items(list(totals.values()), lambda e: e.total_score):
            if rank > limit:
                break
            entry.rank = rank
            ranked.append(entry)

        self._attach_profiles(ranked)
        return ranked

    async def get_user_challenge_rank(
        self, user_id: str, challenge_id: str
    ) -> Optional[int]:
        leaderboard = await self.get_challenge_leaderboard(challenge_id)
        if leaderboard is None:
            return None

        for participant in leaderboard.participants:
            if participant.user_id == user_id:
                return participant.rank
        return None

    async def get_user_global_rank(self, user_id: str) -> Optional[int]:
        leaderboard = await self.get_global_leaderboard(
            limit=settings.GLOBAL_RANK_SCAN_LIMIT
        )
        for entry in leaderboard:
            if entry.user_id == user_id:
                return entry.rank
        return None

    async def recalculate_enrollment_score(
        self, enrollment_id: str, challenge_id: Optional[str] = None
    ) -> Enrollment:
        """
        Re-aggregate an enrolment's total score from its check-ins.

        Running it again without new check-ins gives the same total and
        writes nothing.

        Raises:
            ValueError: if the enrolment does not exist (in challenge_id, when given)
        """
        enrollment = self.repository.get_enrollment(enrollment_id)
        if enrollment is None or (
            challenge_id is not None and enrollment.challenge_id != challenge_id
        ):
            raise ValueError("Enrollment not found")

        checkins = self.repository.list_enrollment_checkins(enrollment_id)
        total_score = aggregate_score(checkins)

        if total_score != enrollment.total_score:
            self.repository.update_enrollment_score(enrollment_id, total_score)
            logger.info(
                f"Updated total score for enrollment {enrollment_id}",
                {
                    "enrollment_id": enrollment_id,
                    "previous_score": enrollment.total_score,
                    "total_score": total_score,
                    "checkins_count": len(checkins),
                },
            )

        return enrollment.model_copy(update={"total_score": total_score})

    async def get_leaderboard_stats(
        self, challenge_id: str
    ) -> Optional[LeaderboardStats]:
        leaderboard = await self.get_challenge_leaderboard(challenge_id)
        if leaderboard is None:
            return None

        scores = [p.total_score for p in leaderboard.participants]
        checkins = self.repository.list_challenge_checkins(challenge_id)

        return LeaderboardStats(
            total_participants=leaderboard.total_participants,
            average_score=leaderboard.average_score,
            top_score=leaderboard.top_score,
            score_distribution=score_distribution(scores),
            participation_trend=participation_trend(checkins),
        )


def get_leaderboard_service() -> LeaderboardService:
    return LeaderboardService(get_challenge_repository())
