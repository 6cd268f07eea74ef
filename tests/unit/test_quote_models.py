"""Unit tests for quote and chat models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from models.chat import ChatAnalysis, ChatReply
from models.quote import ProjectRequest, QuoteRecord, QuoteStatus


class TestProjectRequest:
    """Tests for ProjectRequest."""

    def test_accepts_camel_case(self):
        request = ProjectRequest(projectType="platedakken", size=80, urgency="urgent")

        assert request.project_type == "platedakken"
        assert request.size == 80.0
        assert request.complexity is None

    def test_accepts_field_names(self):
        request = ProjectRequest(project_type="tuinaanleg", size=25.5)
        assert request.project_type == "tuinaanleg"

    def test_is_immutable(self):
        request = ProjectRequest(projectType="platedakken", size=80)

        with pytest.raises(PydanticValidationError):
            request.size = 90

    def test_size_is_required(self):
        with pytest.raises(PydanticValidationError):
            ProjectRequest(projectType="platedakken")


class TestQuoteRecord:
    """Tests for QuoteRecord."""

    def test_from_row_drops_internal_columns(self, sample_quote_row):
        record = QuoteRecord.from_row(sample_quote_row)

        assert record.quote_id == "QUO-2024-0001"
        assert record.klant_naam == "Jan Peeters"
        assert not hasattr(record, "ip_address")

    def test_response_uses_dashboard_names(self, sample_quote_row):
        body = QuoteRecord.from_row(sample_quote_row).to_response_dict()

        assert body["id"] == "QUO-2024-0001"
        assert body["klantNaam"] == "Jan Peeters"
        assert body["projectType"] == "platedakken"
        assert body["estimatedValue"] == 5720
        assert body["timestamp"].startswith("2024-03-05T10:00:00")
        assert body["quoteDetails"] == {"totalCost": 5720}
        assert "ip_address" not in body
        assert "user_agent" not in body

    def test_defaults_to_pending(self):
        record = QuoteRecord.from_row({"quote_id": "QUO-1"})
        assert record.status == QuoteStatus.PENDING.value

    def test_status_values(self):
        assert [s.value for s in QuoteStatus] == ["pending", "in-progress", "completed", "cancelled"]


class TestChatModels:
    """Tests for chat models."""

    def test_analysis_defaults(self):
        analysis = ChatAnalysis(intent="contact")

        assert analysis.confidence == 0.85
        assert analysis.entities == {}

    def test_sentiment_range_is_enforced(self):
        with pytest.raises(PydanticValidationError):
            ChatReply(response="Hallo", analysis=ChatAnalysis(intent="algemeen"), sentiment_score=1.5)
