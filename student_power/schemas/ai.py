"""AI assistant schemas for API request/response models."""

import enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from student_power.schemas.common import camel_alias


class ChatAction(str, enum.Enum):
    """Operations the assistant can run over PDF text."""

    SUMMARIZE = "summarize"
    GENERATE_QUESTIONS = "generate_questions"
    ANSWER = "answer"
    CHAT = "chat"


class ChatMessage(BaseModel):
    """One prior turn of a chat conversation."""

    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)


class ChatRequest(BaseModel):
    """Request for the AI assistant.

    Either ``pdf_text`` (already extracted by the client) or ``pdf_id`` (a
    stored PDF to extract server-side) must be provided. ``action`` is kept
    as a plain string so an unknown action is reported like any other
    invalid input.
    """

    action: str
    pdf_text: Optional[str] = camel_alias("pdf_text", "pdfText", None)
    pdf_id: Optional[int] = camel_alias("pdf_id", "pdfId", None)
    question: Optional[str] = None
    message: Optional[str] = None
    conversation_history: list[ChatMessage] = camel_alias(
        "conversation_history", "conversationHistory", []
    )

    model_config = {"populate_by_name": True}


class ChatResponse(BaseModel):
    """Response from the AI assistant."""

    success: bool = True
    response: str
    usage: Optional[dict[str, Any]] = None
    action: ChatAction
