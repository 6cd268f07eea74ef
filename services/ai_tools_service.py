"""Gemini-backed AI tools for the admin back-office.

Content writing, customer service replies, analytics insights and reports.
Quote generation and project planning are deterministic and live in
services.quote_calculator and services.project_planner.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from config.errors import LLMError
from services.llm_service import LLMService

logger = structlog.get_logger()


AVAILABLE_TOOLS = [
    "content-writer",
    "quote-generator",
    "project-planner",
    "customer-service",
    "analytics",
    "report-generator",
]

COMPANY_CONTEXT = (
    "The company specializes in insulation, renovation, flat roofs, "
    "windows/doors, and landscaping."
)

LENGTH_WORDS = {
    "short": "200-300 words",
    "medium": "500-700 words",
    "long": "1000+ words",
}

TONE_INSTRUCTIONS = {
    "professional": "professional and authoritative tone",
    "friendly": "friendly and approachable tone",
    "technical": "technical and detailed tone",
}

CONTENT_TYPE_INSTRUCTIONS = {
    "project-description": "detailed project description for a construction company website",
    "seo-content": "SEO-optimized content for search engines",
    "blog-post": "engaging blog post for construction industry",
    "service-page": "comprehensive service page content",
    "about-page": "compelling about page content",
}

FALLBACK_INSIGHTS = [
    "Website verkeer is met 15% gestegen deze maand",
    "Quote conversie is verbeterd naar 12%",
    "Meeste projecten zijn isolatiewerken (40%)",
    "Klanttevredenheid is 4.8/5 sterren",
]

FALLBACK_RECOMMENDATIONS = [
    "Focus meer op SEO voor platedakken content",
    "Verbeter mobile website performance",
    "Implementeer chat functionaliteit",
    "Voeg meer project foto's toe",
]

FALLBACK_METRICS = {
    "website": {
        "Page Views": "12,450",
        "Unique Visitors": "3,210",
        "Bounce Rate": "35%",
        "Conversion Rate": "2.8%",
    },
    "projects": {
        "Active Projects": "8",
        "Completed This Month": "12",
        "Average Duration": "3.2 weeks",
        "Success Rate": "96%",
    },
    "quotes": {
        "Quotes Generated": "45",
        "Conversion Rate": "12%",
        "Average Value": "€8,500",
        "Response Time": "2.3 hours",
    },
    "customers": {
        "New Customers": "23",
        "Returning Customers": "67%",
        "Customer Satisfaction": "4.8/5",
        "Referral Rate": "34%",
    },
}


# =============================================================================
# Prompt builders
# =============================================================================


def build_content_prompt(
    content_type: str,
    topic: str,
    length: Optional[str] = None,
    tone: Optional[str] = None,
    keywords: Optional[List[str]] = None,
) -> str:
    length_text = LENGTH_WORDS.get(length or "medium", LENGTH_WORDS["medium"])
    tone_text = TONE_INSTRUCTIONS.get(tone or "professional", TONE_INSTRUCTIONS["professional"])
    type_text = CONTENT_TYPE_INSTRUCTIONS.get(content_type, content_type)
    keyword_text = ", ".join(keywords or [])

    return (
        f'Write {length_text} of {type_text} about "{topic}" using a {tone_text}. '
        f"Include these keywords naturally: {keyword_text}. "
        "Focus on construction, renovation, and building services."
    )


def build_customer_response_prompt(query_type: str, customer_query: str, response_tone: Optional[str]) -> str:
    return (
        "Generate a professional customer service response for a construction company. "
        f'Query type: {query_type}. Customer query: "{customer_query}". '
        f"Response tone: {response_tone or 'professional'}. {COMPANY_CONTEXT}"
    )


def build_analytics_prompt(data_type: str, period: Optional[str], metrics: Any) -> str:
    return (
        f"Generate analytics insights for a construction company. Data type: {data_type}. "
        f"Period: {period}. Focus on: {metrics}. "
        "Return as JSON with insights, recommendations, and key metrics."
    )


def build_report_prompt(report_type: str, period: Optional[str], report_format: Optional[str]) -> str:
    return (
        f"Generate a {report_type} report for a construction company. Period: {period}. "
        f"Format: {report_format}. Include executive summary, project details, "
        "financial data, and recommendations."
    )


def calculate_seo_score(keywords: Optional[List[str]]) -> int:
    """Rough SEO score from the number of target keywords, 60..100."""
    return min(100, max(60, 70 + len(keywords or []) * 5))


def count_words(text: str) -> int:
    return len(text.split())


def fallback_analytics(data_type: str, period: Optional[str]) -> Dict[str, Any]:
    """Static analytics used when the model does not return JSON."""
    return {
        "dataType": data_type,
        "period": period,
        "insights": list(FALLBACK_INSIGHTS),
        "recommendations": list(FALLBACK_RECOMMENDATIONS),
        "metrics": dict(FALLBACK_METRICS.get(data_type, FALLBACK_METRICS["website"])),
    }


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Service
# =============================================================================


class AIToolsService:
    """Generative tools backed by Gemini."""

    def __init__(self, llm_service: Optional[LLMService] = None):
        self._llm_service = llm_service

    @property
    def llm(self) -> LLMService:
        """Get LLMService (lazy initialization)."""
        if self._llm_service is None:
            self._llm_service = LLMService()
        return self._llm_service

    def tool_status(self) -> Dict[str, Any]:
        return {
            "status": "online",
            "tools": list(AVAILABLE_TOOLS),
            "timestamp": _now_iso(),
        }

    async def generate_content(
        self,
        content_type: str,
        topic: str,
        length: Optional[str] = None,
        tone: Optional[str] = None,
        keywords: Optional[List[str]] = None,
        prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Write website content with Gemini."""
        prompt = prompt or build_content_prompt(content_type, topic, length, tone, keywords)
        result = await self.llm.generate_text(prompt)
        content = result["content"]

        logger.info("content_generated", content_type=content_type, words=count_words(content))

        return {
            "contentType": content_type,
            "topic": topic,
            "content": content,
            "seoScore": calculate_seo_score(keywords),
            "wordCount": count_words(content),
            "prompt": prompt,
        }

    async def generate_customer_response(
        self,
        query_type: str,
        customer_query: str,
        response_tone: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Draft a reply to a customer question."""
        prompt = build_customer_response_prompt(query_type, customer_query, response_tone)
        result = await self.llm.generate_text(prompt)

        return {
            "queryType": query_type,
            "response": result["content"],
            "tone": response_tone,
            "generatedAt": _now_iso(),
        }

    async def generate_analytics(
        self,
        data_type: str,
        period: Optional[str] = None,
        metrics: Any = None,
    ) -> Dict[str, Any]:
        """Analytics insights as JSON, static insights when the model output is not JSON."""
        prompt = build_analytics_prompt(data_type, period, metrics)
        try:
            result = await self.llm.generate_json(
                system_prompt="You are an analytics assistant for a construction company.",
                user_message=prompt,
            )
            analytics = result["content"]
        except LLMError as e:
            if "parse_error" not in e.details:
                raise
            logger.warning("analytics_fallback_used", data_type=data_type, error=e.message)
            analytics = fallback_analytics(data_type, period)

        return {
            "dataType": data_type,
            "period": period,
            "analytics": analytics,
            "generatedAt": _now_iso(),
        }

    async def generate_report(
        self,
        report_type: str,
        period: Optional[str] = None,
        report_format: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Write a management report."""
        prompt = build_report_prompt(report_type, period, report_format)
        result = await self.llm.generate_text(prompt)

        return {
            "reportType": report_type,
            "period": period,
            "format": report_format,
            "report": result["content"],
            "generatedAt": _now_iso(),
        }
