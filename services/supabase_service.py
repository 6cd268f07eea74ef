"""Supabase service for the Yannova API.

Talks to the Supabase PostgREST interface ({SUPABASE_URL}/rest/v1) over
httpx. Provides generic table operations plus the chat, quote and form
operations used by the HTTP handlers.
"""

import time
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config.settings import settings
from config.errors import DatabaseError, ErrorCode, NotFoundError

logger = structlog.get_logger()

Filters = Sequence[Tuple[str, str]]

CHAT_HISTORY_COLUMNS = (
    "id,session_id,message,response,timestamp,response_time_ms,sentiment_score,"
    "chat_sessions!inner(user_agent,ip_address)"
)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def day_range(day: str) -> Tuple[str, str]:
    """ISO bounds [start, end) of a YYYY-MM-DD calendar day in UTC."""
    start = datetime.combine(date.fromisoformat(day), datetime.min.time(), tzinfo=timezone.utc)
    end = start + timedelta(days=1)
    return start.isoformat(), end.isoformat()


def day_filters(column: str, day: Optional[str]) -> List[Tuple[str, str]]:
    """Filters restricting a timestamp column to one day; none without a day."""
    if not day:
        return []
    start, end = day_range(day)
    return [(column, f"gte.{start}"), (column, f"lt.{end}")]


def quote_filters(
    status: Optional[str] = None,
    search: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None
) -> List[Tuple[str, str]]:
    """Filters for the quotes table; status 'all' means no status filter."""
    filters: List[Tuple[str, str]] = []
    if status and status != "all":
        filters.append(("status", f"eq.{status}"))
    if search:
        filters.append(("or", f"(klant_naam.ilike.*{search}*,email.ilike.*{search}*)"))
    if start_date:
        filters.append(("created_at", f"gte.{start_date}"))
    if end_date:
        filters.append(("created_at", f"lte.{end_date}"))
    return filters


def parse_content_range(header: Optional[str]) -> int:
    """Total row count from a PostgREST Content-Range header ('0-24/573' or '*/0')."""
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else 0


class SupabaseService:
    """Service for Supabase operations.

    Every call opens a short-lived httpx.AsyncClient; transient transport
    failures are retried, HTTP error responses are not.
    """

    TABLE_QUOTES = "quotes"
    TABLE_QUOTE_HISTORY = "quote_history"
    TABLE_QUOTE_REQUESTS = "quote_requests"
    TABLE_CHAT_SESSIONS = "chat_sessions"
    TABLE_CHAT_MESSAGES = "chat_messages"
    TABLE_CONTACT_SUBMISSIONS = "contact_submissions"

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize SupabaseService.

        Args:
            url: Supabase project URL (default from settings).
            api_key: Service role key (default from settings).
            timeout_seconds: Request timeout (default from settings).
            transport: Optional httpx transport, used by tests.
        """
        self.url = (url or settings.supabase_url or "").rstrip("/")
        self.api_key = api_key or settings.supabase_service_role_key
        self.timeout_seconds = timeout_seconds or settings.supabase_timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key or "",
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    # =========================================================================
    # Transport
    # =========================================================================

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[List[Tuple[str, Any]]] = None,
        json_body: Any = None,
        prefer: Optional[str] = None
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=f"{self.url}/rest/v1",
            timeout=self.timeout_seconds,
            transport=self._transport,
        ) as client:
            return await client.request(
                method,
                path,
                params=params,
                json=json_body,
                headers=self._headers(prefer),
            )

    async def _execute(
        self,
        method: str,
        path: str,
        params: Optional[List[Tuple[str, Any]]] = None,
        json_body: Any = None,
        prefer: Optional[str] = None
    ) -> httpx.Response:
        """Run a request and map failures to DatabaseError."""
        if not self.is_configured:
            raise DatabaseError(
                code=ErrorCode.DATABASE_NOT_CONFIGURED,
                message="Supabase is not configured",
                table=path
            )

        write = method.upper() in ("POST", "PATCH", "DELETE")
        try:
            response = await self._request(method, path, params, json_body, prefer)
        except httpx.HTTPError as e:
            logger.error("supabase_request_failed", method=method, path=path, error=str(e))
            raise DatabaseError(
                code=ErrorCode.DATABASE_WRITE_FAILED if write else ErrorCode.DATABASE_ERROR,
                message=f"Supabase request failed: {str(e)}",
                table=path
            )

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {"message": response.text}
            message = body.get("message") if isinstance(body, dict) else str(body)
            logger.error(
                "supabase_error_response",
                method=method,
                path=path,
                status=response.status_code,
                error=message
            )
            raise DatabaseError(
                code=ErrorCode.DATABASE_WRITE_FAILED if write else ErrorCode.DATABASE_ERROR,
                message=f"Supabase error: {message}",
                table=path,
                details={"status": response.status_code}
            )

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        return response.json()

    # =========================================================================
    # Generic table operations
    # =========================================================================

    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        columns: str = "*",
        order: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Select rows. Filters are PostgREST pairs, e.g. ("status", "eq.pending")."""
        params: List[Tuple[str, Any]] = [("select", columns)]
        params.extend(filters or [])
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", limit))
        if offset:
            params.append(("offset", offset))

        response = await self._execute("GET", f"/{table}", params=params)
        return self._json(response) or []

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it as stored."""
        response = await self._execute(
            "POST", f"/{table}", json_body=row, prefer="return=representation"
        )
        rows = self._json(response) or []
        logger.info("supabase_row_inserted", table=table)
        return rows[0] if rows else {}

    async def upsert(self, table: str, row: Dict[str, Any], on_conflict: str) -> Dict[str, Any]:
        """Insert or merge a row on the given unique column."""
        response = await self._execute(
            "POST",
            f"/{table}",
            params=[("on_conflict", on_conflict)],
            json_body=row,
            prefer="resolution=merge-duplicates,return=representation"
        )
        rows = self._json(response) or []
        return rows[0] if rows else {}

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        filters: Filters
    ) -> List[Dict[str, Any]]:
        """Update matching rows and return them."""
        response = await self._execute(
            "PATCH",
            f"/{table}",
            params=list(filters),
            json_body=values,
            prefer="return=representation"
        )
        logger.info("supabase_rows_updated", table=table, fields=list(values.keys()))
        return self._json(response) or []

    async def delete(self, table: str, filters: Filters) -> None:
        await self._execute("DELETE", f"/{table}", params=list(filters))
        logger.info("supabase_rows_deleted", table=table)

    async def count(self, table: str, filters: Optional[Filters] = None) -> int:
        """Exact row count without fetching rows."""
        params: List[Tuple[str, Any]] = [("select", "*")]
        params.extend(filters or [])
        response = await self._execute("HEAD", f"/{table}", params=params, prefer="count=exact")
        return parse_content_range(response.headers.get("content-range"))

    async def count_rows(self, table: str, equals: Optional[Dict[str, Any]] = None) -> int:
        """Exact row count where each column equals the given value."""
        filters = [(column, f"eq.{value}") for column, value in (equals or {}).items()]
        return await self.count(table, filters)

    async def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Call a Postgres function exposed through PostgREST."""
        response = await self._execute("POST", f"/rpc/{function}", json_body=params or {})
        return self._json(response)

    # =========================================================================
    # Chat
    # =========================================================================

    async def upsert_chat_session(
        self,
        session_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_profile: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self.upsert(
            self.TABLE_CHAT_SESSIONS,
            {
                "session_id": session_id,
                "user_agent": user_agent,
                "ip_address": ip_address,
                "is_active": True,
                "user_profile": user_profile or {},
            },
            on_conflict="session_id"
        )

    async def store_chat_message(
        self,
        session_id: str,
        message: str,
        response: str,
        analysis: Optional[Dict[str, Any]] = None,
        response_time_ms: Optional[int] = None,
        sentiment_score: Optional[float] = None
    ) -> Dict[str, Any]:
        """Store one visitor message together with the bot answer."""
        return await self.insert(
            self.TABLE_CHAT_MESSAGES,
            {
                "session_id": session_id,
                "message": message,
                "response": response,
                "sender": "user",
                "timestamp": _utcnow_iso(),
                "analysis": analysis or {},
                "response_time_ms": response_time_ms,
                "sentiment_score": sentiment_score,
            }
        )

    async def get_session_messages(
        self,
        session_id: str,
        after_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Messages of one session in chronological order."""
        filters = [("session_id", f"eq.{session_id}")]
        if after_id:
            filters.append(("id", f"gt.{after_id}"))
        return await self.select(
            self.TABLE_CHAT_MESSAGES,
            filters=filters,
            order="timestamp.asc"
        )

    async def list_chat_messages(
        self,
        day: Optional[str] = None,
        limit: Optional[int] = 50,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        """Newest-first chat messages joined with their session, optionally for one day."""
        return await self.select(
            self.TABLE_CHAT_MESSAGES,
            filters=day_filters("timestamp", day),
            columns=CHAT_HISTORY_COLUMNS,
            order="timestamp.desc",
            limit=limit,
            offset=offset
        )

    async def count_chat_messages(self, day: Optional[str] = None) -> int:
        return await self.count(self.TABLE_CHAT_MESSAGES, day_filters("timestamp", day))

    async def list_chat_sessions(self) -> List[Dict[str, Any]]:
        return await self.select(self.TABLE_CHAT_SESSIONS)

    # =========================================================================
    # Quotes
    # =========================================================================

    async def generate_quote_id(self) -> str:
        """Human readable quote number from the database, QUO-<epoch ms> if that fails."""
        try:
            quote_id = await self.rpc("generate_quote_id")
            if quote_id:
                return str(quote_id)
        except DatabaseError as e:
            logger.warning("quote_id_rpc_failed", error=e.message)
        return f"QUO-{int(time.time() * 1000)}"

    async def create_quote(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return await self.insert(self.TABLE_QUOTES, row)

    async def list_quotes(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Optional[int] = 50,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        """Quotes newest first, filtered by status, customer search and date range."""
        return await self.select(
            self.TABLE_QUOTES,
            filters=quote_filters(status, search, start_date, end_date),
            order="created_at.desc",
            limit=limit,
            offset=offset
        )

    async def count_quotes(self, status: Optional[str] = None, search: Optional[str] = None) -> int:
        return await self.count(self.TABLE_QUOTES, quote_filters(status, search))

    async def get_quote(self, quote_id: str) -> Dict[str, Any]:
        """Fetch a quote by its human readable id.

        Raises:
            NotFoundError: If no quote has this id.
        """
        rows = await self.select(
            self.TABLE_QUOTES,
            filters=[("quote_id", f"eq.{quote_id}")],
            limit=1
        )
        if not rows:
            raise NotFoundError("Quote", quote_id)
        return rows[0]

    async def update_quote(self, quote_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self.update(
            self.TABLE_QUOTES,
            {**values, "updated_at": _utcnow_iso()},
            filters=[("quote_id", f"eq.{quote_id}")]
        )
        if not rows:
            raise NotFoundError("Quote", quote_id)
        return rows[0]

    async def delete_quote(self, quote_id: str) -> None:
        await self.delete(self.TABLE_QUOTES, filters=[("quote_id", f"eq.{quote_id}")])

    async def log_quote_history(
        self,
        quote_pk: Any,
        action: str,
        new_values: Optional[Dict[str, Any]] = None,
        old_values: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None
    ) -> None:
        """Append an audit entry for a quote; failures are logged, not raised."""
        try:
            await self.insert(
                self.TABLE_QUOTE_HISTORY,
                {
                    "quote_id": quote_pk,
                    "action": action,
                    "old_values": old_values,
                    "new_values": new_values,
                    "notes": notes,
                }
            )
        except DatabaseError as e:
            logger.warning("quote_history_write_failed", quote_pk=quote_pk, action=action, error=e.message)

    # =========================================================================
    # Website forms
    # =========================================================================

    async def create_contact_submission(self, submission: Dict[str, Any]) -> Dict[str, Any]:
        return await self.insert(self.TABLE_CONTACT_SUBMISSIONS, submission)

    async def create_quote_request(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self.insert(self.TABLE_QUOTE_REQUESTS, request)
