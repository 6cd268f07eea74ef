"""CSV exports for the admin back-office."""

import csv
import io
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

CHAT_CSV_HEADERS = [
    "id",
    "session_id",
    "message",
    "response",
    "timestamp",
    "response_time_ms",
    "sentiment_score",
    "user_agent",
    "ip_address",
]

QUOTE_CSV_HEADERS = [
    "ID",
    "Klant",
    "Email",
    "Telefoon",
    "Project Type",
    "Status",
    "Geschatte Waarde",
    "Finale Prijs",
    "Datum",
]


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


def format_dutch_date(value: Optional[str]) -> str:
    """ISO timestamp to the Dutch short date, e.g. '2024-03-05T10:00:00Z' -> '5-3-2024'."""
    if not value:
        return ""
    parsed = date.fromisoformat(value[:10])
    return f"{parsed.day}-{parsed.month}-{parsed.year}"


def _write_csv(headers: List[str], rows: Iterable[List[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def chats_to_csv(chats: List[Dict[str, Any]]) -> str:
    """Chat messages (joined with their session) as CSV; empty string for no rows."""
    if not chats:
        return ""

    rows = []
    for chat in chats:
        session = chat.get("chat_sessions") or {}
        rows.append([
            chat.get("id"),
            chat.get("session_id"),
            chat.get("message") or "",
            chat.get("response") or "",
            chat.get("timestamp"),
            _blank_if_none(chat.get("response_time_ms")),
            _blank_if_none(chat.get("sentiment_score")),
            session.get("user_agent") or "",
            session.get("ip_address") or "",
        ])
    return _write_csv(CHAT_CSV_HEADERS, rows)


def quotes_to_csv(quotes: List[Dict[str, Any]]) -> str:
    """Quote rows as CSV with Dutch headers. Always includes the header line."""
    rows = [
        [
            quote.get("quote_id"),
            quote.get("klant_naam"),
            quote.get("email"),
            quote.get("telefoon") or "",
            quote.get("project_type"),
            quote.get("status"),
            quote.get("estimated_value") or 0,
            _blank_if_none(quote.get("final_price")),
            format_dutch_date(quote.get("created_at")),
        ]
        for quote in quotes
    ]
    return _write_csv(QUOTE_CSV_HEADERS, rows)
