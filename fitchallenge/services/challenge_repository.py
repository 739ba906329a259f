"""
Challenge data access.

The leaderboard service reads challenges, enrolments and check-ins through
ChallengeRepository so it never reaches for a global database handle.
SupabaseChallengeRepository is the production implementation; tests use an
in-memory one.

All rows are validated into record models here, which is where missing or
malformed fields get their defaults.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from fitchallenge.models.records import (
    Challenge,
    CheckIn,
    Enrollment,
    UserProfile,
    parse_records,
)
from fitchallenge.services.logger import logger


class ChallengeRepository(ABC):
    """Read access (plus the cached score write-back) for leaderboard data."""

    @abstractmethod
    def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        pass

    @abstractmethod
    def list_published_challenges(self) -> List[Challenge]:
        pass

    @abstractmethod
    def get_enrollment(self, enrollment_id: str) -> Optional[Enrollment]:
        pass

    @abstractmethod
    def list_paid_enrollments(self, challenge_id: str) -> List[Enrollment]:
        pass

    @abstractmethod
    def list_enrollment_checkins(self, enrollment_id: str) -> List[CheckIn]:
        pass

    @abstractmethod
    def list_challenge_checkins(self, challenge_id: str) -> List[CheckIn]:
        pass

    @abstractmethod
    def get_user_profiles(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        pass

    @abstractmethod
    def update_enrollment_score(self, enrollment_id: str, total_score: float) -> None:
        pass


class SupabaseChallengeRepository(ChallengeRepository):
    CHALLENGES_TABLE = "challenges"
    ENROLMENTS_TABLE = "enrolments"
    CHECKINS_TABLE = "checkins"
    USERS_TABLE = "users"

    def __init__(self, supabase):
        self.supabase = supabase

    def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        result = (
            self.supabase.table(self.CHALLENGES_TABLE)
            .select("*")
            .eq("id", challenge_id)
            .maybe_single()
            .execute()
        )

        if not result or not result.data:
            return None

        challenges = parse_records(Challenge, [result.data])
        return challenges[0] if challenges else None

    def list_published_challenges(self) -> List[Challenge]:
        result = (
            self.supabase.table(self.CHALLENGES_TABLE)
            .select("*")
            .eq("status", "published")
            .execute()
        )
        return parse_records(Challenge, result.data)

    def get_enrollment(self, enrollment_id: str) -> Optional[Enrollment]:
        result = (
            self.supabase.table(self.ENROLMENTS_TABLE)
            .select("*")
            .eq("id", enrollment_id)
            .maybe_single()
            .execute()
        )

        if not result or not result.data:
            return None

        enrollments = parse_records(Enrollment, [result.data])
        return enrollments[0] if enrollments else None

    def list_paid_enrollments(self, challenge_id: str) -> List[Enrollment]:
        result = (
            self.supabase.table(self.ENROLMENTS_TABLE)
            .select("*")
            .eq("challenge_id", challenge_id)
            .eq("payment_status", "paid")
            .execute()
        )
        return parse_records(Enrollment, result.data)

    def list_enrollment_checkins(self, enrollment_id: str) -> List[CheckIn]:
        result = (
            self.supabase.table(self.CHECKINS_TABLE)
            .select("*")
            .eq("enrollment_id", enrollment_id)
            .order("check_in_date", desc=True)
            .execute()
        )
        return parse_records(CheckIn, result.data)

    def list_challenge_checkins(self, challenge_id: str) -> List[CheckIn]:
        result = (
            self.supabase.table(self.CHECKINS_TABLE)
            .select("*")
            .eq("challenge_id", challenge_id)
            .order("check_in_date")
            .execute()
        )
        return parse_records(CheckIn, result.data)

    def get_user_profiles(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        ids = sorted(set(user_ids))
        if not ids:
            return {}

        try:
            result = (
                self.supabase.table(self.USERS_TABLE)
                .select("id, display_name, email, photo_url")
                .in_("id", ids)
                .execute()
            )
        except Exception as e:
            # Leaderboards render without names when the lookup fails
            logger.warning(
                "Failed to fetch user profiles for leaderboard",
                {"error": str(e), "user_count": len(ids)},
            )
            return {}

        return {profile.id: profile for profile in parse_records(UserProfile, result.data)}

    def update_enrollment_score(self, enrollment_id: str, total_score: float) -> None:
        self.supabase.table(self.ENROLMENTS_TABLE).update(
            {"total_score": total_score}
        ).eq("id", enrollment_id).execute()


def get_challenge_repository() -> ChallengeRepository:
    from fitchallenge.core.database import get_supabase_client

    return SupabaseChallengeRepository(get_supabase_client())
