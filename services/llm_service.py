"""LLM service for the Yannova API.

Provides LangChain / Google Gemini integration for the AI tools.
"""

import json
from typing import Dict, Any, Optional, List
import structlog
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from config.settings import settings
from config.errors import LLMError, ErrorCode

logger = structlog.get_logger()


class LLMService:
    """Service for LLM operations using LangChain.

    Provides a wrapper around ChatGoogleGenerativeAI with token tracking
    and error handling.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
        max_output_tokens: Optional[int] = None
    ):
        """Initialize LLMService.

        Args:
            model: Gemini model name (default from settings).
            temperature: Temperature (default from settings).
            api_key: Gemini API key (default from settings).
            max_output_tokens: Response token cap (default from settings).
        """
        self.model = model or settings.llm_model
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self.api_key = api_key or settings.gemini_api_key
        self.max_output_tokens = max_output_tokens or settings.llm_max_output_tokens

        self._client: Optional[ChatGoogleGenerativeAI] = None
        self._total_tokens_used = 0

    @property
    def client(self) -> ChatGoogleGenerativeAI:
        """Get LangChain Gemini client (lazy initialization)."""
        if self._client is None:
            self._client = self.create_chat_model()
        return self._client

    @property
    def total_tokens_used(self) -> int:
        """Get total tokens used across all calls."""
        return self._total_tokens_used

    async def generate(
        self,
        messages: List[BaseMessage],
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Generate a response from the LLM.

        Args:
            messages: List of LangChain messages.
            max_tokens: Optional max tokens for response.

        Returns:
            Dict with content and token usage.

        Raises:
            LLMError: If LLM call fails.
        """
        try:
            kwargs = {}
            if max_tokens:
                kwargs["max_output_tokens"] = max_tokens

            response = await self.client.ainvoke(messages, **kwargs)

            tokens_used = 0
            usage = getattr(response, "usage_metadata", None)
            if isinstance(usage, dict):
                tokens_used = usage.get("total_tokens", 0) or 0
                self._total_tokens_used += tokens_used

            content = response.content if isinstance(response.content, str) else str(response.content)

            logger.info(
                "llm_generated",
                model=self.model,
                tokens_used=tokens_used,
                content_length=len(content)
            )

            return {
                "content": content,
                "tokens_used": tokens_used
            }

        except Exception as e:
            error_msg = str(e)
            lowered = error_msg.lower()
            logger.error("llm_generation_failed", model=self.model, error=error_msg)

            if "resource_exhausted" in lowered or "rate limit" in lowered or "quota" in lowered:
                raise LLMError(
                    code=ErrorCode.LLM_RATE_LIMIT,
                    message="Gemini rate limit exceeded",
                    details={"original_error": error_msg}
                )
            elif "token count" in lowered or ("context" in lowered and "too long" in lowered):
                raise LLMError(
                    code=ErrorCode.LLM_CONTEXT_TOO_LONG,
                    message="Input too long for model context",
                    details={"original_error": error_msg}
                )
            else:
                raise LLMError(
                    message=f"LLM generation failed: {error_msg}",
                    details={"original_error": error_msg}
                )

    async def generate_text(
        self,
        prompt: str,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Generate a response for a single user prompt."""
        return await self.generate([HumanMessage(content=prompt)], max_tokens)

    async def generate_with_system_prompt(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Generate a response with system prompt.

        Args:
            system_prompt: System prompt for context.
            user_message: User message/query.
            max_tokens: Optional max tokens for response.

        Returns:
            Dict with content and token usage.
        """
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_message)
        ]
        return await self.generate(messages, max_tokens)

    async def generate_json(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Generate a JSON response.

        Adds JSON formatting instructions to the system prompt.

        Returns:
            Dict with parsed JSON content and token usage.

        Raises:
            LLMError: If response is not valid JSON.
        """
        json_prompt = f"""{system_prompt}

IMPORTANT: You MUST respond with valid JSON only. No markdown, no explanation, just JSON."""

        result = await self.generate_with_system_prompt(
            json_prompt,
            user_message,
            max_tokens
        )

        try:
            content = strip_code_fences(result["content"])
            parsed = json.loads(content)

            return {
                "content": parsed,
                "tokens_used": result["tokens_used"]
            }

        except json.JSONDecodeError as e:
            raise LLMError(
                message="LLM did not return valid JSON",
                details={
                    "parse_error": str(e),
                    "raw_content": result["content"][:500]
                }
            )

    def create_chat_model(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None
    ) -> ChatGoogleGenerativeAI:
        """Create a new ChatGoogleGenerativeAI instance.

        Args:
            model: Model name (default from this service).
            temperature: Temperature (default from this service).

        Returns:
            Configured ChatGoogleGenerativeAI instance.
        """
        return ChatGoogleGenerativeAI(
            model=model or self.model,
            temperature=temperature if temperature is not None else self.temperature,
            google_api_key=self.api_key,
            max_output_tokens=self.max_output_tokens
        )


def strip_code_fences(content: str) -> str:
    """Remove a surrounding ```json ... ``` markdown block."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()
