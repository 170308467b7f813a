"""Dashboard metrics computed from a batch of feedback records."""
from collections import Counter
from datetime import UTC, date, datetime
from typing import Any, Iterable, List, Sequence

from config import config
from schemas import (
    DailyActivity,
    DashboardStats,
    ExportRow,
    Sentiment,
    SentimentDistribution,
    TopicCount,
)

SENTIMENTS = {s.value for s in Sentiment}


def day_bucket(timestamp: datetime) -> date:
    """UTC calendar day of a timestamp; naive timestamps are taken as UTC."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(UTC)
    return timestamp.date()


def aggregate(
    records: Iterable[Any],
    top_topics_limit: int = None,
    recent_days_limit: int = None,
) -> DashboardStats:
    """Compute dashboard stats.

    Args:
        records: Objects exposing sentiment, topic and created_at, in
            storage order (first-seen order breaks topic ties)
        top_topics_limit: Number of topics to keep (default from config)
        recent_days_limit: Number of distinct days to keep (default from config)

    Returns:
        DashboardStats; empty input gives all-zero counts and empty lists
    """
    if top_topics_limit is None:
        top_topics_limit = config.TOP_TOPICS_LIMIT
    if recent_days_limit is None:
        recent_days_limit = config.RECENT_DAYS_LIMIT

    total = 0
    sentiments = Counter({s: 0 for s in SENTIMENTS})
    # Counter preserves insertion order, and sorted() is stable
    topics: Counter = Counter()
    days: Counter = Counter()

    for record in records:
        total += 1
        sentiment = record.sentiment if record.sentiment in SENTIMENTS else Sentiment.NEUTRAL.value
        sentiments[sentiment] += 1
        if record.topic:
            topics[record.topic] += 1
        days[day_bucket(record.created_at)] += 1

    top_topics = sorted(topics.items(), key=lambda item: item[1], reverse=True)
    recent = sorted(days.items(), key=lambda item: item[0], reverse=True)

    return DashboardStats(
        total_feedback=total,
        sentiment_distribution=SentimentDistribution(**sentiments),
        top_topics=[
            TopicCount(topic=topic, count=count)
            for topic, count in top_topics[:top_topics_limit]
        ],
        recent_activity=[
            DailyActivity(date=day, count=count)
            for day, count in recent[:recent_days_limit]
        ],
    )


def build_export_rows(records: Sequence[Any]) -> List[ExportRow]:
    """Shape feedback records into rows for the CSV export."""
    rows = []
    for record in records:
        if record.is_anonymous or not record.student_name:
            student = "Anonymous"
        else:
            student = record.student_name
        rows.append(
            ExportRow(
                date=day_bucket(record.created_at).isoformat(),
                student=student,
                topic=record.topic,
                sentiment=record.sentiment,
                message=record.message,
                suggestions=record.suggestions,
            )
        )
    return rows
