"""Statistics for the admin dashboard.

Pure aggregation helpers over Supabase rows, plus collectors that fetch
the rows they need from SupabaseService.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import structlog

from models.quote import QuoteStatus
from services.quote_calculator import round_half_up
from services.supabase_service import SupabaseService

logger = structlog.get_logger()

DEFAULT_PERIOD_DAYS = 30


def default_period(today: Optional[date] = None) -> Tuple[str, str]:
    """Last 30 days as (start, end) YYYY-MM-DD strings."""
    end = today or datetime.now(timezone.utc).date()
    start = end - timedelta(days=DEFAULT_PERIOD_DAYS)
    return start.isoformat(), end.isoformat()


def _one_decimal(value: float) -> float:
    return round_half_up(value * 10) / 10


def summarize_chats(
    sessions: List[Dict[str, Any]],
    messages: List[Dict[str, Any]]
) -> Dict[str, Any]:
    """Session and message counts for a period."""
    total_sessions = len(sessions)
    active_sessions = sum(1 for session in sessions if session.get("is_active"))
    sentiments = [m["sentiment_score"] for m in messages if m.get("sentiment_score") is not None]

    return {
        "totalSessions": total_sessions,
        "activeSessions": active_sessions,
        "totalMessages": len(messages),
        "avgMessagesPerSession": _one_decimal(len(messages) / total_sessions) if total_sessions else 0,
        "avgSentiment": round(sum(sentiments) / len(sentiments), 2) if sentiments else 0,
    }


def average_response_seconds(response_times_ms: List[Optional[int]]) -> float:
    """Mean response time in seconds to one decimal; 0 when there is no data."""
    times = [t for t in response_times_ms if t is not None]
    if not times:
        return 0
    return _one_decimal(sum(times) / len(times) / 1000)


def satisfaction_rate(sentiment_scores: List[Optional[float]]) -> int:
    """Percentage of scored messages that were not negative."""
    scores = [s for s in sentiment_scores if s is not None]
    if not scores:
        return 0
    return round_half_up(100 * sum(1 for s in scores if s >= 0) / len(scores))


def summarize_quotes(quotes: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Totals per status, value figures and completion rate."""
    by_status = {status.value: 0 for status in QuoteStatus}
    for quote in quotes:
        status = quote.get("status") or QuoteStatus.PENDING.value
        by_status[status] = by_status.get(status, 0) + 1

    values = [q["estimated_value"] for q in quotes if q.get("estimated_value") is not None]
    total_value = sum(values)
    total = len(quotes)

    return {
        "totalQuotes": total,
        "byStatus": by_status,
        "totalEstimatedValue": total_value,
        "averageEstimatedValue": round_half_up(total_value / len(values)) if values else 0,
        "completionRate": _one_decimal(100 * by_status[QuoteStatus.COMPLETED.value] / total) if total else 0,
    }


async def collect_chat_analytics(
    db: SupabaseService,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None
) -> Dict[str, Any]:
    """Chat analytics between two dates (inclusive start, exclusive day after end)."""
    default_start, default_end = default_period()
    start_date = start_date or default_start
    end_date = end_date or default_end
    end_exclusive = (date.fromisoformat(end_date) + timedelta(days=1)).isoformat()

    period = [("created_at", f"gte.{start_date}"), ("created_at", f"lt.{end_exclusive}")]
    sessions = await db.select(db.TABLE_CHAT_SESSIONS, filters=period, columns="session_id,is_active")
    messages = await db.select(
        db.TABLE_CHAT_MESSAGES,
        filters=[("timestamp", f"gte.{start_date}"), ("timestamp", f"lt.{end_exclusive}")],
        columns="id,session_id,sentiment_score"
    )

    analytics = summarize_chats(sessions, messages)
    analytics["startDate"] = start_date
    analytics["endDate"] = end_date
    analytics["allTimeSessions"] = await db.count(db.TABLE_CHAT_SESSIONS)

    logger.info("chat_analytics_collected", start_date=start_date, end_date=end_date)
    return analytics


async def collect_dashboard_stats(db: SupabaseService, today: Optional[date] = None) -> Dict[str, Any]:
    """Today's chat activity and overall session figures."""
    today_iso = (today or datetime.now(timezone.utc).date()).isoformat()
    since_today = [("timestamp", f"gte.{today_iso}")]

    today_chats = await db.count(db.TABLE_CHAT_MESSAGES, since_today)
    total_sessions = await db.count(db.TABLE_CHAT_SESSIONS)
    active_users = await db.count_rows(db.TABLE_CHAT_SESSIONS, {"is_active": "true"})
    todays_messages = await db.select(
        db.TABLE_CHAT_MESSAGES,
        filters=since_today,
        columns="response_time_ms,sentiment_score"
    )

    return {
        "totalChatSessions": total_sessions,
        "avgResponseTime": average_response_seconds([m.get("response_time_ms") for m in todays_messages]),
        "satisfactionRate": satisfaction_rate([m.get("sentiment_score") for m in todays_messages]),
        "totalChatsToday": today_chats,
        "totalActiveUsers": active_users,
    }


async def collect_quote_stats(
    db: SupabaseService,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None
) -> Dict[str, Any]:
    default_start, default_end = default_period()
    start_date = start_date or default_start
    end_date = end_date or default_end

    quotes = await db.list_quotes(
        start_date=start_date,
        end_date=f"{end_date}T23:59:59.999Z",
        limit=None
    )
    stats = summarize_quotes(quotes)
    stats["startDate"] = start_date
    stats["endDate"] = end_date
    return stats
