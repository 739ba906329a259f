"""
Leaderboard API endpoints
"""

from fastapi import APIRouter, HTTPException, status, Depends, Query
from typing import List

from fitchallenge.core.config import settings
from fitchallenge.models.leaderboard import (
    ChallengeLeaderboard,
    GlobalLeaderboardEntry,
    LeaderboardStats,
    UserRank,
)
from fitchallenge.models.records import Enrollment
from fitchallenge.services.leaderboard_service import (
    LeaderboardService,
    get_leaderboard_service,
)
from fitchallenge.services.logger import logger

router = APIRouter(redirect_slashes=False)


@router.get("/challenges/{challenge_id}/leaderboard", response_model=ChallengeLeaderboard)
async def get_challenge_leaderboard(
    challenge_id: str,
    limit: int = Query(settings.LEADERBOARD_DEFAULT_LIMIT, ge=1, le=1000),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Get challenge leaderboard"""
    try:
        leaderboard = await service.get_challenge_leaderboard(challenge_id, limit=limit)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve leaderboard",
        )

    if leaderboard is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found"
        )

    return leaderboard


@router.get(
    "/challenges/{challenge_id}/leaderboard/stats", response_model=LeaderboardStats
)
async def get_challenge_leaderboard_stats(
    challenge_id: str,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Score distribution and daily participation for a challenge"""
    try:
        stats = await service.get_leaderboard_stats(challenge_id)
    except Exception as e:
        logger.error(
            f"Failed to get leaderboard stats for challenge {challenge_id}",
            {"error": str(e), "challenge_id": challenge_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve leaderboard stats",
        )

    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found"
        )

    return stats


@router.get(
    "/challenges/{challenge_id}/leaderboard/users/{user_id}", response_model=UserRank
)
async def get_user_challenge_rank(
    challenge_id: str,
    user_id: str,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Get a participant's rank in one challenge (rank is null if not ranked)"""
    try:
        rank = await service.get_user_challenge_rank(user_id, challenge_id)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve rank",
        )

    return UserRank(user_id=user_id, challenge_id=challenge_id, rank=rank)


@router.post(
    "/challenges/{challenge_id}/enrollments/{enrollment_id}/recalculate",
    response_model=Enrollment,
)
async def recalculate_enrollment_score(
    challenge_id: str,
    enrollment_id: str,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Re-aggregate the cached total score of an enrolment from its check-ins"""
    try:
        enrollment = await service.recalculate_enrollment_score(
            enrollment_id, challenge_id=challenge_id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to recalculate score for enrollment {enrollment_id}",
            {"error": str(e), "enrollment_id": enrollment_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to recalculate score",
        )

    return enrollment


@router.get("/leaderboard/global", response_model=List[GlobalLeaderboardEntry])
async def get_global_leaderboard(
    limit: int = Query(settings.LEADERBOARD_DEFAULT_LIMIT, ge=1, le=1000),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Get leaderboard across all published challenges"""
    try:
        return await service.get_global_leaderboard(limit=limit)
    except Exception as e:
        logger.error(
            "Failed to get global leaderboard",
            {"error": str(e), "limit": limit},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve leaderboard",
        )


@router.get("/leaderboard/global/users/{user_id}", response_model=UserRank)
async def get_user_global_rank(
    user_id: str,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    try:
        rank = await service.get_user_global_rank(user_id)
    except Exception as e:
        logger.error(
            f"Failed to get global rank for user {user_id}",
            {"error": str(e), "user_id": user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve rank",
        )

    return UserRank(user_id=user_id, rank=rank)
