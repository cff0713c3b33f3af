"""AI study assistant endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from student_power.config import get_settings
from student_power.exceptions import AIConfigurationError
from student_power.schemas.ai import ChatAction, ChatRequest, ChatResponse
from student_power.services.ai_service import (
    MAX_PDF_TEXT_CHARS,
    AIService,
    parse_action,
)
from student_power.services.pdf_service import PdfService
from student_power.utils.dependencies import (
    dependencies,
    get_ai_service,
    get_optional_storage,
)
from student_power.utils.rate_limit import RateLimit
from student_power.utils.s3 import S3Storage, get_s3_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI"])


@router.post("/chat", dependencies=[Depends(RateLimit("ai"))])
async def chat(
    data: ChatRequest,
    ai_service: AIService = Depends(get_ai_service),
    pdf_service: PdfService = Depends(dependencies.pdf),
    storage: Optional[S3Storage] = Depends(get_optional_storage),
) -> ChatResponse:
    """Summarize, generate questions, answer or chat about a PDF.

    PDF text comes from the request, or is extracted from the stored file
    when ``pdf_id`` is given instead.

    Raises:
        ValidationFailedError: If the action is unknown or lacks input.
        AIConfigurationError: If no API key is configured.
        AIServiceError: If the upstream API fails.
    """
    if not ai_service.configured:
        raise AIConfigurationError("API configuration error. AI API key is missing.")
    action = parse_action(data.action)
    pdf_text = data.pdf_text or ""
    if not pdf_text.strip() and data.pdf_id is not None:
        s3 = storage if storage is not None else get_s3_storage()
        # One extra character so truncation still appends the ellipsis
        pdf_text = await pdf_service.extract_pdf_text(
            s3, data.pdf_id, max_chars=MAX_PDF_TEXT_CHARS + 1
        )

    result = await ai_service.run(
        action,
        pdf_text,
        question=data.question,
        message=data.message,
        history=data.conversation_history,
    )
    return ChatResponse(
        response=result["response"], usage=result["usage"], action=action
    )


@router.get("/chat")
async def chat_status() -> dict:
    """Report whether the AI assistant is configured."""
    settings = get_settings()
    configured = bool(settings.PERPLEXITY_API_KEY)
    return {
        "status": "ok" if configured else "error",
        "message": "AI chat API is running and configured"
        if configured
        else "API key is not configured",
        "model": settings.PERPLEXITY_MODEL,
        "api_key_configured": configured,
        "actions": [action.value for action in ChatAction],
    }
