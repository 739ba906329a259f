"""
Ranking Service

Orders participants by score and assigns ranks, plus the summary numbers
shown next to a leaderboard.

Ties: by default tied scores receive distinct sequential ranks in the order
the entries were given (1, 2, 3 for three equal scores). Pass
ties="competition" for shared ranks with gaps (1, 1, 3).
"""

import math
from collections import Counter
from typing import Callable, Dict, Iterable, List, Sequence, Tuple, TypeVar

from pydantic import BaseModel

from fitchallenge.models.records import CheckIn
from fitchallenge.models.scoring import RankEntry, RankedEntry, TieMode
from fitchallenge.services.scoring import round_half_up

T = TypeVar("T")

DEFAULT_DISTRIBUTION_BUCKETS = 5


class ScoreSummary(BaseModel):
    total_participants: int = 0
    average_score: int = 0
    top_score: float = 0


def rank_items(
    items: Sequence[T],
    score_of: Callable[[T], float],
    ties: TieMode = "sequential",
) -> List[Tuple[int, T]]:
    """
    Sort items by descending score and pair each with its rank.

    The sort is stable, so equal scores keep their input order.

    Returns:
        List of (rank, item) tuples in ranked order
    """
    ordered = sorted(items, key=score_of, reverse=True)

    ranked = []
    previous_score = None
    current_rank = 0
    for position, item in enumerate(ordered, start=1):
        score = score_of(item)
        if ties == "competition" and position > 1 and score == previous_score:
            rank = current_rank
        else:
            rank = position
        ranked.append((rank, item))
        previous_score = score
        current_rank = rank
    return ranked


def assign_ranks(
    entries: Iterable[RankEntry], ties: TieMode = "sequential"
) -> List[RankedEntry]:
    return [
        RankedEntry(id=entry.id, score=entry.score, rank=rank)
        for rank, entry in rank_items(list(entries), lambda e: e.score, ties)
    ]


def summarize_scores(scores: Sequence[float]) -> ScoreSummary:
    if not scores:
        return ScoreSummary()
    average = math.fsum(scores) / len(scores)
    return ScoreSummary(
        total_participants=len(scores),
        average_score=round_half_up(average),
        top_score=max(scores),
    )


def score_distribution(
    scores: Sequence[float], buckets: int = DEFAULT_DISTRIBUTION_BUCKETS
) -> Dict[str, int]:
    """
    Count scores in equal-width buckets between the lowest and highest score.

    Keys are "low-high" with bounds rounded half up. Each bucket includes
    its lower bound; the last one also includes the top score. When every
    score is the same there is a single bucket.
    """
    if not scores or buckets < 1:
        return {}

    low, high = min(scores), max(scores)
    if high == low:
        return {f"{round_half_up(low)}-{round_half_up(high)}": len(scores)}

    width = (high - low) / buckets
    counts = [0] * buckets
    for score in scores:
        index = min(int((score - low) / width), buckets - 1)
        counts[index] += 1

    distribution = {}
    for index, count in enumerate(counts):
        bucket_start = low + index * width
        bucket_end = low + (index + 1) * width
        key = f"{round_half_up(bucket_start)}-{round_half_up(bucket_end)}"
        distribution[key] = distribution.get(key, 0) + count
    return distribution


def participation_trend(checkins: Iterable[CheckIn]) -> Dict[str, int]:
    """Number of check-ins per day, keyed by ISO date, oldest first."""
    per_day: Counter = Counter(checkin.check_in_date for checkin in checkins)
    return {day.isoformat(): per_day[day] for day in sorted(per_day)}
