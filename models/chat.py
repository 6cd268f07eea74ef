"""Chatbot models for the Yannova API."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ChatAnalysis(BaseModel):
    """Result of keyword intent detection on a visitor message."""

    intent: str = Field(description="Detected intent key, 'algemeen' when nothing matched")
    confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    entities: Dict[str, Any] = Field(default_factory=dict)


class ChatReply(BaseModel):
    """Chatbot answer for a single visitor message."""

    response: str
    analysis: ChatAnalysis
    suggestions: List[str] = Field(default_factory=list)
    sentiment_score: float = Field(default=0.0, ge=-1.0, le=1.0)
