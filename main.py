"""HTTP entry points for the Yannova API.

Provides endpoints for:
- Quote calculation and the other AI tools
- The website chatbot and chat polling
- Contact and quote request forms
- Quote management and chat statistics for the admin dashboard
"""

import asyncio
import json
import math
import time
from datetime import date, datetime, time as dt_time, timezone
from typing import Any, Dict, Optional

import structlog
from flask import Blueprint, Flask, current_app, request
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, HTTPException

from config.settings import settings
from config.errors import (
    AuthenticationError,
    DatabaseError,
    ErrorCode,
    NotFoundError,
    ValidationError,
    YannovaError,
)
from models.quote import ProjectType, QuoteRecord, QuoteStatus
from services.ai_tools_service import AIToolsService
from services.auth import require_admin
from services.chatbot_service import generate_reply, generate_session_id
from services.export_service import chats_to_csv, quotes_to_csv
from services.project_planner import create_project_plan
from services.quote_calculator import calculate_quote
from services.stats_service import (
    collect_chat_analytics,
    collect_dashboard_stats,
    collect_quote_stats,
)
from services.supabase_service import SupabaseService

logger = structlog.get_logger()

api = Blueprint("api", __name__)

GENERIC_ERROR_MESSAGE = "Er is een fout opgetreden"

ERROR_STATUS = {
    ValidationError: 400,
    AuthenticationError: 401,
    NotFoundError: 404,
}

HTTP_ERROR_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
}

# ============================================================================
# Helper Functions
# ============================================================================


def success_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """Build success response."""
    return {"success": True, **data}


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build error response."""
    body = {"success": False, "error": message, "code": code}
    if details:
        body["details"] = details
    return body


def _json_default(o: Any):
    """JSON serializer for dates and datetimes in Supabase rows."""
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    return str(o)


def _json_response(data: dict, status: int = 200):
    """Return JSON response."""
    return current_app.response_class(
        json.dumps(data, default=_json_default),
        status=status,
        mimetype="application/json"
    )


def _csv_response(content: str, filename: str):
    return current_app.response_class(
        content,
        status=200,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def get_request_json() -> Dict[str, Any]:
    """Extract the JSON object from the request body.

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    if not request.get_data():
        return {}
    try:
        data = request.get_json(force=True)
    except BadRequest as e:
        raise ValidationError(message=f"Invalid JSON in request body: {e.description}")
    if not isinstance(data, dict):
        raise ValidationError(message="Request body must be a JSON object")
    return data


def require_fields(data: Dict[str, Any], *names: str, message: Optional[str] = None) -> None:
    """Raise a ValidationError naming the first missing field."""
    for name in names:
        if data.get(name) in (None, ""):
            raise ValidationError(
                message=message or f"{name} is required",
                field=name,
                code=ErrorCode.MISSING_FIELD
            )


def parse_size(value: Any) -> float:
    """Project size in m²: a positive number or numeric string."""
    if value is None or value == "":
        raise ValidationError(message="Size is required", field="size", code=ErrorCode.MISSING_FIELD)
    if isinstance(value, bool):
        raise ValidationError(message="Size must be a number", field="size", code=ErrorCode.INVALID_FIELD)
    try:
        size = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(message="Size must be a number", field="size", code=ErrorCode.INVALID_FIELD)
    if not math.isfinite(size) or size <= 0:
        raise ValidationError(message="Size must be greater than 0", field="size", code=ErrorCode.INVALID_FIELD)
    # Keep integers integral so the echoed size matches the input.
    return int(size) if isinstance(value, int) else size


def as_text(value: Any) -> Optional[str]:
    """Text column value for an echoed request field; None stays None."""
    return None if value is None else str(value)


def check_project_type(project_type: str) -> None:
    """Reject unknown categories when strict project types are enabled."""
    if current_app.config.get("STRICT_PROJECT_TYPES") and ProjectType.parse(project_type) is ProjectType.OTHER:
        raise ValidationError(
            message=f"Unknown project type: {project_type}",
            field="projectType",
            code=ErrorCode.UNKNOWN_PROJECT_TYPE,
            details={"allowed": [t.value for t in ProjectType.known()]}
        )


def query_int(name: str, default: int) -> int:
    """Non-negative integer query parameter."""
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(message=f"{name} must be an integer", field=name, code=ErrorCode.INVALID_FIELD)
    if value < 0:
        raise ValidationError(message=f"{name} must not be negative", field=name, code=ErrorCode.INVALID_FIELD)
    return value


def query_date(name: str) -> Optional[str]:
    """Optional YYYY-MM-DD query parameter."""
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(message=f"{name} must be a YYYY-MM-DD date", field=name, code=ErrorCode.INVALID_FIELD)
    return raw


def _db() -> SupabaseService:
    return current_app.extensions["supabase"]


def _ai_tools() -> AIToolsService:
    return current_app.extensions["ai_tools"]


# ============================================================================
# Health & AI tools
# ============================================================================


@api.route("/health", methods=["GET"])
def health():
    return _json_response({"status": "ok", "service": "yannova-api"})


@api.route("/api/ai-tools/status", methods=["GET"])
def ai_tools_status():
    return _json_response(success_response(_ai_tools().tool_status()))


@api.route("/api/ai-tools/generate-quote", methods=["POST"])
def generate_quote():
    """Calculate a price estimate.

    Request body:
    {
        "projectType": "isolatiewerken",
        "size": 100,
        "complexity": "simple",   // Optional
        "location": "Antwerpen",  // Optional
        "urgency": "normal"       // Optional
    }

    Response:
    {
        "success": true,
        "quote": {...},
        "generatedAt": "2024-01-01T12:00:00+00:00"
    }
    """
    data = get_request_json()
    require_fields(data, "projectType", message="Project type is required")
    project_type = data["projectType"]
    check_project_type(project_type)
    size = parse_size(data.get("size"))

    quote = calculate_quote(
        project_type=project_type,
        size=size,
        complexity=data.get("complexity"),
        location=data.get("location"),
        urgency=data.get("urgency"),
    )

    logger.info(
        "quote_generated",
        project_type=project_type,
        size=size,
        total_cost=quote.total_cost
    )

    return _json_response(success_response({
        "quote": quote.to_response_dict(),
        "generatedAt": datetime.now(timezone.utc).isoformat(),
    }))


@api.route("/api/ai-tools/generate-project-plan", methods=["POST"])
def generate_project_plan():
    data = get_request_json()
    require_fields(data, "projectName", "projectType", message="Project name and type are required")

    plan = create_project_plan(
        project_name=data["projectName"],
        project_type=data["projectType"],
        start_date=data.get("startDate"),
        duration=data.get("duration"),
        team_size=data.get("teamSize"),
    )

    return _json_response(success_response({
        "plan": plan.to_dict(),
        "generatedAt": datetime.now(timezone.utc).isoformat(),
    }))


@api.route("/api/ai-tools/generate-content", methods=["POST"])
def generate_content():
    data = get_request_json()
    require_fields(data, "contentType", "topic", message="Content type and topic are required")

    result = asyncio.run(_ai_tools().generate_content(
        content_type=data["contentType"],
        topic=data["topic"],
        length=data.get("length"),
        tone=data.get("tone"),
        keywords=data.get("keywords") or [],
    ))
    result["generatedAt"] = datetime.now(timezone.utc).isoformat()
    return _json_response(success_response(result))


@api.route("/api/ai-tools/generate-customer-response", methods=["POST"])
def generate_customer_response():
    data = get_request_json()
    require_fields(
        data, "queryType", "customerQuery",
        message="Query type and customer query are required"
    )

    result = asyncio.run(_ai_tools().generate_customer_response(
        query_type=data["queryType"],
        customer_query=data["customerQuery"],
        response_tone=data.get("responseTone"),
    ))
    return _json_response(success_response(result))


@api.route("/api/ai-tools/generate-analytics", methods=["POST"])
def generate_analytics():
    data = get_request_json()
    require_fields(data, "dataType", message="Data type is required")

    result = asyncio.run(_ai_tools().generate_analytics(
        data_type=data["dataType"],
        period=data.get("period"),
        metrics=data.get("metrics"),
    ))
    return _json_response(success_response(result))


@api.route("/api/ai-tools/generate-report", methods=["POST"])
def generate_report():
    data = get_request_json()
    require_fields(data, "reportType", message="Report type is required")

    result = asyncio.run(_ai_tools().generate_report(
        report_type=data["reportType"],
        period=data.get("period"),
        report_format=data.get("format"),
    ))
    return _json_response(success_response(result))


# ============================================================================
# Chatbot
# ============================================================================


async def _store_chat(
    db: SupabaseService,
    session_id: str,
    message: str,
    reply_data: Dict[str, Any],
    response_time_ms: int,
    user_agent: Optional[str],
    ip_address: Optional[str]
) -> Dict[str, Any]:
    await db.upsert_chat_session(session_id, user_agent=user_agent, ip_address=ip_address)
    return await db.store_chat_message(
        session_id=session_id,
        message=message,
        response=reply_data["response"],
        analysis=reply_data["analysis"],
        response_time_ms=response_time_ms,
        sentiment_score=reply_data["sentiment_score"],
    )


@api.route("/api/chatbot", methods=["POST"])
def chatbot():
    """Answer a website chat message and store it.

    Storage failures are logged; the visitor still gets the answer.
    """
    data = get_request_json()
    require_fields(data, "message", message="Message is required")
    message = str(data["message"])
    session_id = data.get("sessionId") or generate_session_id()

    started = time.perf_counter()
    reply = generate_reply(message)
    response_time_ms = int((time.perf_counter() - started) * 1000)
    reply_data = reply.model_dump()

    chat_id = None
    try:
        stored = asyncio.run(_store_chat(
            _db(),
            session_id,
            message,
            reply_data,
            response_time_ms,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        ))
        chat_id = stored.get("id")
    except DatabaseError as e:
        logger.warning("chat_storage_failed", session_id=session_id, error=e.message)

    return _json_response(success_response({
        "response": reply.response,
        "sessionId": session_id,
        "chatId": chat_id,
        "suggestions": reply.suggestions,
        "analysis": reply_data["analysis"],
        "sentimentScore": reply.sentiment_score,
    }))


@api.route("/api/chatbot/history/<session_id>", methods=["GET"])
@require_admin
def chatbot_history(session_id: str):
    messages = asyncio.run(_db().get_session_messages(session_id))
    return _json_response(success_response({"sessionId": session_id, "messages": messages}))


@api.route("/api/chat/updates/<session_id>", methods=["GET"])
def chat_updates(session_id: str):
    """Polling endpoint: messages of a session after lastMessageId."""
    messages = asyncio.run(
        _db().get_session_messages(session_id, after_id=request.args.get("lastMessageId"))
    )
    return _json_response(success_response({
        "messages": messages,
        "hasNewMessages": len(messages) > 0,
    }))


# ============================================================================
# Website forms
# ============================================================================


@api.route("/api/contact", methods=["POST"])
def contact():
    data = get_request_json()
    require_fields(data, "name", "email", "message")

    row = asyncio.run(_db().create_contact_submission({
        "name": data["name"],
        "email": data["email"],
        "phone": data.get("phone"),
        "subject": data.get("subject"),
        "message": data["message"],
        "service_type": data.get("serviceType"),
    }))

    logger.info("contact_submission_stored", submission_id=row.get("id"))
    return _json_response(success_response({
        "message": "Uw bericht is succesvol verzonden!",
        "submissionId": row.get("id"),
    }))


@api.route("/api/quote-request", methods=["POST"])
def quote_request():
    data = get_request_json()
    require_fields(data, "projectType", message="Project type is required")

    row = asyncio.run(_db().create_quote_request({
        "contact_id": data.get("contactId"),
        "project_type": data["projectType"],
        "measurements": data.get("measurements"),
        "materials": data.get("materials"),
        "budget_range": data.get("budgetRange"),
        "timeline": data.get("timeline"),
        "special_requirements": data.get("specialRequirements"),
    }))

    logger.info("quote_request_stored", quote_request_id=row.get("id"))
    return _json_response(success_response({
        "message": "Uw offerte aanvraag is succesvol verzonden!",
        "quoteId": row.get("id"),
    }))


# ============================================================================
# Quotes
# ============================================================================


async def _create_quote(db: SupabaseService, row: Dict[str, Any]) -> Dict[str, Any]:
    row["quote_id"] = await db.generate_quote_id()
    stored = await db.create_quote(row)
    await db.log_quote_history(
        stored.get("id"),
        "created",
        new_values=stored,
        notes="Quote created via website form"
    )
    return stored


@api.route("/api/quotes", methods=["POST"])
def create_quote():
    """Calculate and store a quote for a customer.

    Request body:
    {
        "klantNaam": "Jan Peeters",
        "email": "jan@example.be",
        "telefoon": "+32 477 00 00 00",  // Optional
        "projectType": "platedakken",
        "size": 80,
        "complexity": "medium",           // Optional
        "urgency": "normal",              // Optional
        "location": "Mechelen",           // Optional
        "opmerkingen": "..."              // Optional
    }
    """
    data = get_request_json()
    require_fields(data, "klantNaam", "email", "projectType")
    check_project_type(data["projectType"])
    size = parse_size(data.get("size"))

    quote = calculate_quote(
        project_type=data["projectType"],
        size=size,
        complexity=data.get("complexity"),
        location=data.get("location"),
        urgency=data.get("urgency"),
    )

    row = {
        "klant_naam": data["klantNaam"],
        "email": data["email"],
        "telefoon": data.get("telefoon"),
        "project_type": as_text(data["projectType"]),
        "size": size,
        "complexity": as_text(data.get("complexity")),
        "urgency": as_text(data.get("urgency")),
        "location": as_text(data.get("location")),
        "opmerkingen": data.get("opmerkingen"),
        "status": QuoteStatus.PENDING.value,
        "estimated_value": quote.total_cost,
        "quote_details": quote.to_response_dict(),
        "valid_until": datetime.combine(quote.valid_until, dt_time.min, tzinfo=timezone.utc).isoformat(),
        "ip_address": request.remote_addr,
        "user_agent": request.headers.get("User-Agent"),
    }

    stored = asyncio.run(_create_quote(_db(), row))

    logger.info(
        "quote_created",
        quote_id=stored.get("quote_id"),
        project_type=data["projectType"],
        estimated_value=quote.total_cost
    )

    return _json_response(
        success_response({"quote": QuoteRecord.from_row(stored).to_response_dict()}),
        status=201
    )


@api.route("/api/quotes", methods=["GET"])
@require_admin
def list_quotes():
    status = request.args.get("status")
    search = request.args.get("search")
    limit = query_int("limit", 50)
    offset = query_int("offset", 0)

    db = _db()

    async def _fetch():
        rows = await db.list_quotes(status=status, search=search, limit=limit, offset=offset)
        total = await db.count_quotes(status=status, search=search)
        return rows, total

    rows, total = asyncio.run(_fetch())

    return _json_response(success_response({
        "quotes": [QuoteRecord.from_row(row).to_response_dict() for row in rows],
        "total": total,
        "limit": limit,
        "offset": offset,
        "hasMore": offset + len(rows) < total,
    }))


@api.route("/api/quotes/stats", methods=["GET"])
@require_admin
def quote_stats():
    stats = asyncio.run(collect_quote_stats(
        _db(),
        start_date=query_date("start_date"),
        end_date=query_date("end_date"),
    ))
    return _json_response(success_response({"stats": stats}))


@api.route("/api/quotes/export/csv", methods=["GET"])
@require_admin
def export_quotes_csv():
    start_date = query_date("start_date")
    end_date = query_date("end_date")
    rows = asyncio.run(_db().list_quotes(
        status=request.args.get("status"),
        start_date=start_date,
        end_date=f"{end_date}T23:59:59.999Z" if end_date else None,
        limit=None,
    ))

    logger.info("quotes_exported", count=len(rows))
    return _csv_response(quotes_to_csv(rows), f"yannova-quotes-{_today()}.csv")


@api.route("/api/quotes/<quote_id>", methods=["GET"])
@require_admin
def get_quote(quote_id: str):
    row = asyncio.run(_db().get_quote(quote_id))
    return _json_response(success_response({"quote": QuoteRecord.from_row(row).to_response_dict()}))


def _quote_updates(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map the admin update payload onto quote columns."""
    values: Dict[str, Any] = {}

    status = data.get("status")
    if status is not None:
        allowed = [s.value for s in QuoteStatus]
        if status not in allowed:
            raise ValidationError(
                message=f"Invalid status: {status}",
                field="status",
                code=ErrorCode.INVALID_FIELD,
                details={"allowed": allowed}
            )
        values["status"] = status

    final_price = data.get("finalPrice")
    if final_price is not None:
        if isinstance(final_price, bool) or not isinstance(final_price, (int, float)) or final_price < 0:
            raise ValidationError(
                message="finalPrice must be a non-negative number",
                field="finalPrice",
                code=ErrorCode.INVALID_FIELD
            )
        values["final_price"] = final_price

    if data.get("adminNotes") is not None:
        values["admin_notes"] = data["adminNotes"]
    if data.get("assignedTo") is not None:
        values["assigned_to"] = data["assignedTo"]

    if not values:
        raise ValidationError(message="No updatable fields in request")
    return values


@api.route("/api/quotes/<quote_id>", methods=["PUT"])
@require_admin
def update_quote(quote_id: str):
    data = get_request_json()
    values = _quote_updates(data)

    db = _db()

    async def _update():
        current = await db.get_quote(quote_id)
        updated = await db.update_quote(quote_id, values)
        await db.log_quote_history(
            updated.get("id"),
            "updated",
            new_values=updated,
            old_values=current,
            notes=data.get("notes") or "Quote updated via admin dashboard"
        )
        return updated

    updated = asyncio.run(_update())

    logger.info("quote_updated", quote_id=quote_id, fields=sorted(values.keys()))
    return _json_response(success_response({"quote": QuoteRecord.from_row(updated).to_response_dict()}))


@api.route("/api/quotes/<quote_id>", methods=["DELETE"])
@require_admin
def delete_quote(quote_id: str):
    db = _db()

    async def _delete():
        await db.get_quote(quote_id)
        await db.delete_quote(quote_id)

    asyncio.run(_delete())

    logger.info("quote_deleted", quote_id=quote_id)
    return _json_response(success_response({"message": "Quote deleted successfully"}))


# ============================================================================
# Admin dashboard
# ============================================================================


@api.route("/api/admin/chat-history", methods=["GET"])
@require_admin
def admin_chat_history():
    day = query_date("date")
    limit = query_int("limit", 50)
    offset = query_int("offset", 0)

    db = _db()

    async def _fetch():
        chats = await db.list_chat_messages(day=day, limit=limit, offset=offset)
        total = await db.count_chat_messages(day=day)
        return chats, total

    chats, total = asyncio.run(_fetch())

    return _json_response(success_response({
        "chats": chats,
        "total": total,
        "hasMore": offset + len(chats) < total,
    }))


@api.route("/api/admin/analytics", methods=["GET"])
@require_admin
def admin_analytics():
    analytics = asyncio.run(collect_chat_analytics(
        _db(),
        start_date=query_date("start_date"),
        end_date=query_date("end_date"),
    ))
    return _json_response(success_response({"analytics": analytics}))


@api.route("/api/admin/dashboard-stats", methods=["GET"])
@require_admin
def admin_dashboard_stats():
    stats = asyncio.run(collect_dashboard_stats(_db()))
    return _json_response(success_response({"stats": stats}))


@api.route("/api/admin/export-chats", methods=["GET"])
@require_admin
def admin_export_chats():
    export_format = request.args.get("format", "csv")
    if export_format not in ("csv", "json"):
        raise ValidationError(message="format must be csv or json", field="format", code=ErrorCode.INVALID_FIELD)
    day = query_date("date")

    chats = asyncio.run(_db().list_chat_messages(day=day, limit=None))

    logger.info("chats_exported", count=len(chats), format=export_format)
    if export_format == "csv":
        return _csv_response(chats_to_csv(chats), f"chat-history-{day or _today()}.csv")
    return _json_response(success_response({"data": chats}))


# ============================================================================
# Error handlers
# ============================================================================


def handle_yannova_error(e: YannovaError):
    status = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(e, error_type)),
        500
    )
    if status >= 500:
        logger.error("request_failed", path=request.path, code=e.code, error=e.message)
    return _json_response(error_response(e.code, e.message, e.details), status=status)


def handle_http_error(e: HTTPException):
    status = e.code or 500
    code = HTTP_ERROR_CODES.get(status, ErrorCode.INTERNAL_ERROR if status >= 500 else ErrorCode.VALIDATION_ERROR)
    return _json_response(error_response(code, e.description or e.name), status=status)


def handle_unexpected_error(e: Exception):
    logger.exception("unhandled_error", path=request.path, error=str(e))
    return _json_response(error_response(ErrorCode.INTERNAL_ERROR, GENERIC_ERROR_MESSAGE), status=500)


# ============================================================================
# App factory
# ============================================================================


def create_app(
    supabase_service: Optional[SupabaseService] = None,
    ai_tools_service: Optional[AIToolsService] = None,
    config: Optional[Dict[str, Any]] = None
) -> Flask:
    """Create the Flask application.

    Args:
        supabase_service: Persistence service (default: configured from settings).
        ai_tools_service: AI tools service (default: Gemini from settings).
        config: Extra Flask config values, e.g. ADMIN_API_TOKEN for tests.

    Returns:
        Configured Flask app.
    """
    app = Flask(__name__)
    app.config.update(
        ADMIN_API_TOKEN=settings.admin_api_token,
        STRICT_PROJECT_TYPES=settings.strict_project_types,
    )
    if config:
        app.config.update(config)

    CORS(app, origins=settings.allowed_origins)

    app.extensions["supabase"] = supabase_service or SupabaseService()
    app.extensions["ai_tools"] = ai_tools_service or AIToolsService()

    app.register_blueprint(api)
    app.register_error_handler(YannovaError, handle_yannova_error)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected_error)

    return app
