"""Trending-event ranking.

The weights are product constants; keep them exact so rankings stay
reproducible across deployments.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

SECONDS_PER_DAY = 86400.0


@dataclass
class EventStats:
    event_id: int
    start_time: datetime
    interested_count: int = 0
    confirmed_count: int = 0
    average_rating: float = 0.0
    rating_count: int = 0
    capacity: int | None = None


@dataclass
class ScoredEvent:
    stats: EventStats
    score: float


def availability_boost(capacity: int | None, confirmed_count: int, interested_count: int) -> float:
    if capacity is None:
        return 10.0
    filled = confirmed_count + interested_count
    remaining_pct = max(0.0, (capacity - filled) / capacity) if capacity > 0 else 0.0
    if remaining_pct == 0:
        return -20.0
    if remaining_pct <= 0.2:
        return 15.0
    if remaining_pct <= 0.5:
        return 20.0
    return 10.0


def trending_score(stats: EventStats, now: datetime) -> float:
    avg = stats.average_rating or 0.0
    days = (stats.start_time - now).total_seconds() / SECONDS_PER_DAY

    if stats.start_time < now:
        days_since = abs(days)
        age_penalty = max(0.0, 100.0 - days_since * 5)
        return age_penalty + avg * stats.rating_count * 3

    days_until = days
    urgency = 50.0 - days_until * 7 if days_until <= 7 else 0.0
    return (
        urgency
        + stats.interested_count * 2
        + stats.confirmed_count * 3
        + avg * stats.rating_count
        + availability_boost(stats.capacity, stats.confirmed_count, stats.interested_count)
        + 50.0
    )


def rank_trending(events: list[EventStats], now: datetime, limit: int = 3) -> list[ScoredEvent]:
    scored = [ScoredEvent(stats=e, score=trending_score(e, now)) for e in events]
    # sorted() is stable, equal scores keep input order
    scored = sorted(scored, key=lambda s: s.score, reverse=True)
    return scored[: max(0, limit)]
