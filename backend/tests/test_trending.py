from datetime import datetime, timedelta, timezone

from clubhub.services.trending import EventStats, availability_boost, rank_trending, trending_score

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _event(event_id: int, **kwargs) -> EventStats:
    kwargs.setdefault("start_time", NOW + timedelta(days=10))
    return EventStats(event_id=event_id, **kwargs)


def test_past_event_with_ratings_outranks_unrated_twin():
    start = NOW - timedelta(days=2)
    unrated = _event(1, start_time=start)
    rated = _event(2, start_time=start, average_rating=5.0, rating_count=10)
    assert trending_score(unrated, NOW) == 90.0
    assert trending_score(rated, NOW) == 240.0
    assert trending_score(unrated, NOW) < trending_score(rated, NOW)


def test_past_event_age_penalty_floors_at_zero():
    old = _event(1, start_time=NOW - timedelta(days=60))
    assert trending_score(old, NOW) == 0.0


def test_urgency_boost_favours_soon_events():
    soon = _event(1, start_time=NOW + timedelta(days=2))
    later = _event(2, start_time=NOW + timedelta(days=20))
    # 36 urgency + 10 availability + 50 base against 0 + 10 + 50
    assert trending_score(soon, NOW) == 96.0
    assert trending_score(later, NOW) == 60.0
    ranked = rank_trending([later, soon], NOW)
    assert [s.stats.event_id for s in ranked] == [1, 2]


def test_future_score_counts_interest_confirmations_and_ratings():
    stats = _event(1, interested_count=3, confirmed_count=2, average_rating=4.0, rating_count=5)
    assert trending_score(stats, NOW) == 6 + 6 + 20 + 10 + 50


def test_availability_buckets():
    assert availability_boost(None, 0, 0) == 10.0
    assert availability_boost(10, 5, 5) == -20.0
    assert availability_boost(10, 12, 0) == -20.0
    assert availability_boost(10, 8, 0) == 15.0
    assert availability_boost(10, 3, 2) == 20.0
    assert availability_boost(10, 4, 0) == 10.0


def test_ties_keep_input_order_and_limit_applies():
    events = [_event(i) for i in range(1, 6)]
    ranked = rank_trending(events, NOW, limit=3)
    assert [s.stats.event_id for s in ranked] == [1, 2, 3]


def test_default_limit_is_three():
    events = [_event(i, interested_count=i) for i in range(1, 8)]
    ranked = rank_trending(events, NOW)
    assert [s.stats.event_id for s in ranked] == [7, 6, 5]


def test_ranking_is_deterministic():
    events = [_event(i, confirmed_count=i % 3, start_time=NOW + timedelta(days=i)) for i in range(1, 10)]
    first = [(s.stats.event_id, s.score) for s in rank_trending(events, NOW, limit=9)]
    second = [(s.stats.event_id, s.score) for s in rank_trending(events, NOW, limit=9)]
    assert first == second
