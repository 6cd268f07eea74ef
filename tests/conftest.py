"""Pytest configuration and shared fixtures for Yannova API tests."""

import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch


# ============================================================================
# Ensure local imports work (config/, models/, services/, main.py)
# ============================================================================
#
# The codebase uses absolute imports like `from models...` / `from services...`,
# so the repository root must be importable as the top-level module root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


ADMIN_TOKEN = "test-admin-token"
FROZEN_NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


# ============================================================================
# Environment Setup
# ============================================================================

@pytest.fixture(autouse=True)
def mock_settings():
    """Pin settings for all tests.

    Every module holds a reference to the same `settings` singleton, so the
    attributes are patched in place.
    """
    from config.settings import settings

    with patch.multiple(
        settings,
        environment="test",
        gemini_api_key="test-api-key",
        llm_model="gemini-1.5-flash",
        llm_temperature=0.1,
        llm_max_output_tokens=1024,
        supabase_url=None,
        supabase_service_role_key=None,
        supabase_timeout_seconds=5.0,
        admin_api_token=ADMIN_TOKEN,
        strict_project_types=False,
        allowed_origins=["http://localhost:3000"],
        log_level="INFO",
    ):
        yield settings


@pytest.fixture
def frozen_now():
    """Fixed issuance time for quote calculations."""
    return FROZEN_NOW


# ============================================================================
# LLM Mocks
# ============================================================================

@pytest.fixture
def mock_llm_response():
    """Standard mock LLM response."""
    return {
        "content": "Mock LLM response",
        "tokens_used": 100
    }


@pytest.fixture
def mock_llm_json_response():
    """Mock LLM JSON response."""
    return {
        "content": {
            "insights": ["Meer aanvragen voor platedakken"],
            "recommendations": ["Meer projectfoto's tonen"],
            "metrics": {"Quotes Generated": "12"}
        },
        "tokens_used": 150
    }


@pytest.fixture
def mock_chat_model():
    """Mock ChatGoogleGenerativeAI client."""
    mock = AsyncMock()
    mock.ainvoke.return_value = MagicMock(
        content="Mock response content",
        usage_metadata={"input_tokens": 60, "output_tokens": 40, "total_tokens": 100}
    )
    return mock


@pytest.fixture
def mock_llm_service(mock_chat_model):
    """LLMService wired to the mocked chat model."""
    from services.llm_service import LLMService

    with patch('services.llm_service.ChatGoogleGenerativeAI', return_value=mock_chat_model):
        service = LLMService(api_key="test-api-key")
        service._client = mock_chat_model
        return service


@pytest.fixture
def fake_llm(mock_llm_response, mock_llm_json_response):
    """LLMService stand-in with canned async answers."""
    from services.llm_service import LLMService

    llm = MagicMock(spec=LLMService)
    llm.generate_text = AsyncMock(return_value=mock_llm_response)
    llm.generate_with_system_prompt = AsyncMock(return_value=mock_llm_response)
    llm.generate_json = AsyncMock(return_value=mock_llm_json_response)
    return llm


# ============================================================================
# Supabase Mocks
# ============================================================================

class SupabaseStub:
    """Records PostgREST requests and answers with queued responses.

    Without a queued response every request gets `200 []`.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: List[Any] = []

    def respond(
        self,
        status: int = 200,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> "SupabaseStub":
        self._responses.append(httpx.Response(status, json=json, headers=headers))
        return self

    def fail(self, error: Exception) -> "SupabaseStub":
        self._responses.append(error)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(200, json=[])
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def supabase_stub():
    return SupabaseStub()


@pytest.fixture
def supabase_service(supabase_stub):
    """SupabaseService talking to the stub through httpx.MockTransport."""
    from services.supabase_service import SupabaseService

    return SupabaseService(
        url="https://yannova-test.supabase.co",
        api_key="service-role-key",
        transport=httpx.MockTransport(supabase_stub.handler),
    )


@pytest.fixture
def fake_supabase():
    """SupabaseService stand-in; async methods are AsyncMocks."""
    from services.supabase_service import SupabaseService

    db = MagicMock(spec=SupabaseService)
    db.TABLE_QUOTES = SupabaseService.TABLE_QUOTES
    db.TABLE_QUOTE_HISTORY = SupabaseService.TABLE_QUOTE_HISTORY
    db.TABLE_CHAT_SESSIONS = SupabaseService.TABLE_CHAT_SESSIONS
    db.TABLE_CHAT_MESSAGES = SupabaseService.TABLE_CHAT_MESSAGES
    return db


@pytest.fixture
def fake_ai_tools():
    """AIToolsService stand-in."""
    from services.ai_tools_service import AIToolsService

    return MagicMock(spec=AIToolsService)


# ============================================================================
# Flask App
# ============================================================================

@pytest.fixture
def app(fake_supabase, fake_ai_tools):
    from main import create_app

    return create_app(
        supabase_service=fake_supabase,
        ai_tools_service=fake_ai_tools,
        config={"TESTING": True, "ADMIN_API_TOKEN": ADMIN_TOKEN},
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_quote_row():
    """Quote row as stored in the Supabase `quotes` table."""
    return {
        "id": "5b1c0d2e-0000-4000-8000-000000000001",
        "quote_id": "QUO-2024-0001",
        "klant_naam": "Jan Peeters",
        "email": "jan.peeters@example.be",
        "telefoon": "+32 477 12 34 56",
        "project_type": "platedakken",
        "size": 80,
        "complexity": "medium",
        "urgency": "normal",
        "location": "Mechelen",
        "opmerkingen": "Plat dak boven de garage",
        "status": "pending",
        "estimated_value": 5720,
        "final_price": None,
        "quote_details": {"totalCost": 5720},
        "created_at": "2024-03-05T10:00:00+00:00",
        "valid_until": "2024-04-04T00:00:00+00:00",
        "admin_notes": None,
        "assigned_to": None,
        "contact_attempts": 0,
        "last_contact_attempt": None,
        "ip_address": "203.0.113.7",
        "user_agent": "Mozilla/5.0",
    }


@pytest.fixture
def sample_chat_rows():
    """Chat messages joined with their session, as returned for the admin history."""
    return [
        {
            "id": 12,
            "session_id": "yannova_1709632800000_abc123def",
            "message": "Wat kost een plat dak, ongeveer?",
            "response": "Ik begrijp dat u een offerte wilt aanvragen.",
            "timestamp": "2024-03-05T10:00:00+00:00",
            "response_time_ms": 3,
            "sentiment_score": 0.0,
            "chat_sessions": {"user_agent": "Mozilla/5.0", "ip_address": "203.0.113.7"},
        },
        {
            "id": 11,
            "session_id": "yannova_1709632800000_abc123def",
            "message": 'Zeg "hallo"',
            "response": "Ik help u graag verder!",
            "timestamp": "2024-03-05T09:59:00+00:00",
            "response_time_ms": None,
            "sentiment_score": None,
            "chat_sessions": None,
        },
    ]
