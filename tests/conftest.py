"""
Pytest configuration and fixtures for FitChallenge API tests.

Leaderboard tests run against an in-memory ChallengeRepository; only tests
marked requires_supabase talk to a real database.
"""

import os
from datetime import date
from typing import Dict, Generator, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient

from fitchallenge.models.records import (
    Challenge,
    CheckIn,
    Enrollment,
    UserProfile,
    parse_records,
)
from fitchallenge.services.challenge_repository import (
    ChallengeRepository,
    get_challenge_repository,
)
from fitchallenge.services.leaderboard_service import (
    LeaderboardService,
    get_leaderboard_service,
)
from main import app


def _supabase_configured() -> bool:
    """Check if Supabase is configured for integration tests."""
    return bool(os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_SERVICE_KEY"))


requires_supabase = pytest.mark.skipif(
    not _supabase_configured(),
    reason="SUPABASE_URL and SUPABASE_SERVICE_KEY required for integration tests",
)


class InMemoryChallengeRepository(ChallengeRepository):
    """Rows are plain dicts, validated the same way Supabase rows are."""

    def __init__(
        self,
        challenges: Optional[List[dict]] = None,
        enrollments: Optional[List[dict]] = None,
        checkins: Optional[List[dict]] = None,
        users: Optional[List[dict]] = None,
    ):
        self.challenges = parse_records(Challenge, challenges)
        self.enrollments = parse_records(Enrollment, enrollments)
        self.checkins = parse_records(CheckIn, checkins)
        self.users = parse_records(UserProfile, users)
        self.score_updates: List[tuple] = []

    def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        return next((c for c in self.challenges if c.id == challenge_id), None)

    def list_published_challenges(self) -> List[Challenge]:
        return [c for c in self.challenges if c.status == "published"]

    def get_enrollment(self, enrollment_id: str) -> Optional[Enrollment]:
        return next((e for e in self.enrollments if e.id == enrollment_id), None)

    def list_paid_enrollments(self, challenge_id: str) -> List[Enrollment]:
        return [
            e
            for e in self.enrollments
            if e.challenge_id == challenge_id and e.payment_status == "paid"
        ]

    def list_enrollment_checkins(self, enrollment_id: str) -> List[CheckIn]:
        return [c for c in self.checkins if c.enrollment_id == enrollment_id]

    def list_challenge_checkins(self, challenge_id: str) -> List[CheckIn]:
        return [c for c in self.checkins if c.challenge_id == challenge_id]

    def get_user_profiles(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        wanted = set(user_ids)
        return {u.id: u for u in self.users if u.id in wanted}

    def update_enrollment_score(self, enrollment_id: str, total_score: float) -> None:
        self.score_updates.append((enrollment_id, total_score))
        for index, enrollment in enumerate(self.enrollments):
            if enrollment.id == enrollment_id:
                self.enrollments[index] = enrollment.model_copy(
                    update={"total_score": total_score}
                )


def _checkin(enrollment_id, challenge_id, user_id, day, score):
    return {
        "id": f"{enrollment_id}-{day}",
        "enrolmentId": enrollment_id,
        "challengeId": challenge_id,
        "userId": user_id,
        "date": day,
        "autoScore": score,
    }


@pytest.fixture
def repository() -> InMemoryChallengeRepository:
    """
    Two published challenges.

    c1: alice 30 (10+15+5), bob 20, carol unpaid, dave paid with no check-ins.
    c2: alice 12, bob 40.
    """
    return InMemoryChallengeRepository(
        challenges=[
            {
                "id": "c1",
                "name": "January Shred",
                "status": "published",
                "startDate": "2024-01-01",
                "durationDays": 30,
                "timezone": "Australia/Perth",
            },
            {"id": "c2", "name": "Step Up", "status": "published"},
            {"id": "c3", "name": "Draft", "status": "draft"},
        ],
        enrollments=[
            {"id": "e-alice", "userId": "alice", "challengeId": "c1", "paymentStatus": "paid"},
            {"id": "e-bob", "userId": "bob", "challengeId": "c1", "paymentStatus": "paid"},
            {"id": "e-carol", "userId": "carol", "challengeId": "c1", "paymentStatus": "pending"},
            {"id": "e-dave", "userId": "dave", "challengeId": "c1", "paymentStatus": "paid"},
            {"id": "e2-alice", "userId": "alice", "challengeId": "c2", "paymentStatus": "paid"},
            {"id": "e2-bob", "userId": "bob", "challengeId": "c2", "paymentStatus": "paid"},
        ],
        checkins=[
            _checkin("e-alice", "c1", "alice", "2024-01-01", 10),
            _checkin("e-alice", "c1", "alice", "2024-01-02", 15),
            _checkin("e-alice", "c1", "alice", "2024-01-03", 5),
            _checkin("e-bob", "c1", "bob", "2024-01-01", 20),
            _checkin("e-carol", "c1", "carol", "2024-01-01", 100),
            _checkin("e2-alice", "c2", "alice", "2024-02-01", 12),
            _checkin("e2-bob", "c2", "bob", "2024-02-05", 40),
        ],
        users=[
            {"id": "alice", "displayName": "Alice", "photoURL": "https://img/alice.png"},
            {"id": "bob", "email": "bob@example.com"},
        ],
    )


@pytest.fixture
def leaderboard_service(repository) -> LeaderboardService:
    return LeaderboardService(repository)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Test client for the FastAPI app."""
    with TestClient(app, base_url="http://test", client=("127.0.0.1", 50000)) as c:
        yield c


@pytest.fixture
def leaderboard_client(
    client: TestClient, leaderboard_service: LeaderboardService
) -> Generator[TestClient, None, None]:
    """Test client whose store-backed endpoints read the in-memory repository."""
    app.dependency_overrides[get_leaderboard_service] = lambda: leaderboard_service
    app.dependency_overrides[get_challenge_repository] = lambda: leaderboard_service.repository
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_leaderboard_service, None)
        app.dependency_overrides.pop(get_challenge_repository, None)


@pytest.fixture
def api_base() -> str:
    """Base path for API v1 endpoints."""
    return "/api/v1"


@pytest.fixture
def week_start() -> date:
    """2024-01-01 is a Monday."""
    return date(2024, 1, 1)
