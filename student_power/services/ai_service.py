"""AI study assistant backed by the Perplexity chat-completions API.

The service turns PDF text plus a requested action into a chat-completion
request and returns the model's reply. PDF text is capped before sending
so requests stay within the model's context budget.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from student_power.config import Settings
from student_power.exceptions import (
    AIConfigurationError,
    AIServiceError,
    ValidationFailedError,
)
from student_power.schemas.ai import ChatAction, ChatMessage

logger = logging.getLogger(__name__)

MAX_PDF_TEXT_CHARS = 10000
TOPIC_SCAN_CHARS = 500
TOP_P = 0.9

_TOPIC_PATTERN = re.compile(
    r"(?:Chapter|Unit|Section|Topic|Subject)?\s*:?\s*([A-Z][^\n]{10,100})"
)


@dataclass(frozen=True)
class GenerationParams:
    """Sampling settings for one action."""

    max_tokens: int
    temperature: float


ACTION_PARAMS: dict[ChatAction, GenerationParams] = {
    ChatAction.SUMMARIZE: GenerationParams(max_tokens=800, temperature=0.3),
    ChatAction.GENERATE_QUESTIONS: GenerationParams(max_tokens=1000, temperature=0.4),
    ChatAction.ANSWER: GenerationParams(max_tokens=600, temperature=0.2),
    ChatAction.CHAT: GenerationParams(max_tokens=600, temperature=0.5),
}

# Upstream status -> (error, message shown to the user)
UPSTREAM_ERRORS: dict[int, tuple[str, str]] = {
    400: ("Bad request", "Invalid request format."),
    401: (
        "Authentication failed. Invalid API key.",
        "The AI API key is invalid or expired. Please verify your API key.",
    ),
    403: (
        "Access forbidden",
        "API access denied. Check your subscription and permissions.",
    ),
    429: (
        "Rate limit exceeded",
        "Too many requests. Please wait a moment and try again.",
    ),
}

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert academic assistant specialized in creating "
    "well-structured, hierarchical summaries of educational documents. Your "
    "summaries must be clear, academically precise, and easy to understand. "
    "Use markdown formatting with proper heading levels (# for main title, "
    "## for major sections, ### for subsections). Focus on extracting key "
    "concepts, definitions, explanations, and relationships between ideas."
)

QUESTIONS_SYSTEM_PROMPT = (
    "You are an expert academic assistant specialized in generating important "
    "conceptual and applied questions from educational documents. Your "
    "questions should test understanding, application, and critical thinking. "
    "Generate questions that cover the main concepts, theories, definitions, "
    "applications, and relationships presented in the document."
)

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that answers questions based on the "
    "provided document content. Provide accurate, detailed answers based "
    "primarily on the information in the document. Use clear academic "
    "language and structure your answers well. If the answer requires "
    "information beyond the document, clearly indicate this."
)


def parse_action(raw: str) -> ChatAction:
    """Map a requested action name onto ChatAction.

    Raises:
        ValidationFailedError: If the action is unknown.
    """
    try:
        return ChatAction(raw)
    except ValueError as e:
        allowed = ", ".join(f'"{action.value}"' for action in ChatAction)
        message = f"Invalid action. Must be one of {allowed}"
        raise ValidationFailedError([message]) from e


def check_inputs(
    action: ChatAction,
    pdf_text: str,
    question: Optional[str],
    message: Optional[str],
) -> None:
    """Reject requests missing what the action needs.

    Raises:
        ValidationFailedError: Listing every missing input.
    """
    errors = []
    if not pdf_text.strip():
        errors.append("No PDF content provided")
    if action is ChatAction.ANSWER and not (question or "").strip():
        errors.append("No question provided")
    if action is ChatAction.CHAT and not (message or "").strip():
        errors.append("No message provided")
    if errors:
        raise ValidationFailedError(errors)


def truncate_text(text: str, limit: int = MAX_PDF_TEXT_CHARS) -> str:
    """Cap text at limit characters, marking the cut with an ellipsis."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def extract_topic(text: str, default: str) -> str:
    """Guess the document topic from a heading-like line near the start."""
    match = _TOPIC_PATTERN.search(text[:TOPIC_SCAN_CHARS])
    return match.group(1).strip() if match else default


def build_messages(
    action: ChatAction,
    text: str,
    question: Optional[str] = None,
    message: Optional[str] = None,
    history: Optional[list[ChatMessage]] = None,
) -> list[dict[str, str]]:
    """Build the chat-completion message list for an action.

    Args:
        action: Requested assistant action.
        text: PDF text, already truncated.
        question: Question for the answer action.
        message: Latest user message for the chat action.
        history: Prior chat turns, oldest first.

    Returns:
        Messages in chat-completion format.
    """
    if action is ChatAction.SUMMARIZE:
        topic = extract_topic(text, "Document Content")
        return [
            {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    "Please create a comprehensive academic summary of the "
                    "following document content. Format your response as "
                    f"follows:\n\n# Summary of {topic}\n\nThen organize the "
                    "content into 2-3 major sections using ## headings, with "
                    "subsections using ### headings where appropriate. Each "
                    "section should:\n"
                    "- Provide clear, academically precise explanations\n"
                    "- Include key concepts and definitions\n"
                    "- Explain relationships between ideas\n"
                    "- Use bullet points for clarity where helpful\n"
                    "- Maintain an easy-to-read but academic tone\n\n"
                    f"Document Content:\n{text}"
                ),
            },
        ]

    if action is ChatAction.GENERATE_QUESTIONS:
        topic = extract_topic(text, "this topic")
        return [
            {"role": "system", "content": QUESTIONS_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    "Based on the provided document content, generate 10-12 "
                    f'important questions related to "{topic}".\n\n'
                    "Format your response EXACTLY as follows:\n\n"
                    "Based on the provided document content, important "
                    f"questions (imp questions) related to '{topic}' could "
                    "include:\n\n"
                    "1. [First question - conceptual or definition-based]\n"
                    "2. [Second question - application-based]\n"
                    "3. [Third question - analytical]\n"
                    "... continue through 10-12 questions\n\n"
                    "Make questions diverse: include conceptual questions, "
                    "application questions, comparison questions, and "
                    "analytical questions. Ensure all questions are directly "
                    "relevant to the document content.\n\n"
                    f"Document Content:\n{text}"
                ),
            },
        ]

    if action is ChatAction.ANSWER:
        return [
            {"role": "system", "content": ANSWER_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    f"Document content:\n{text}\n\nQuestion: {question}\n\n"
                    "Please provide a comprehensive answer based on the "
                    "document content above. Structure your answer clearly "
                    "and use academic language."
                ),
            },
        ]

    return [
        {
            "role": "system",
            "content": (
                "You are a helpful AI assistant discussing the content of a "
                f"document. Here is the document content:\n\n{text}\n\n"
                "Answer questions and discuss topics based on this document."
            ),
        },
        *({"role": turn.role, "content": turn.content} for turn in history or []),
        {"role": "user", "content": message or ""},
    ]


class PerplexityClient:
    """Minimal async client for an OpenAI-style chat-completions endpoint.

    Attributes:
        api_url: Full chat-completions URL.
        model: Model name sent with every request.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        model: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize PerplexityClient.

        Args:
            api_key: Bearer token for the API.
            api_url: Chat-completions endpoint.
            model: Model name.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self._api_key = api_key
        self.api_url = api_url
        self.model = model
        self._timeout = timeout
        self._transport = transport

    async def complete(
        self, messages: list[dict[str, str]], params: GenerationParams
    ) -> dict[str, Any]:
        """Send a chat-completion request and return the decoded body.

        Raises:
            AIServiceError: On upstream error status, network failure or
                an undecodable body.
        """
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
            "top_p": TOP_P,
            "stream": False,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.api_url, json=payload, headers=headers
                )
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            body = e.response.text
            logger.error(
                "AI API returned an error",
                extra={"status_code": status_code, "body": body[:500]},
            )
            error, user_message = UPSTREAM_ERRORS.get(
                status_code,
                ("Failed to process request", f"API error: {e.response.reason_phrase}"),
            )
            if status_code == 400:
                user_message = f"{user_message} {body}".strip()
            raise AIServiceError(
                error, status_code=status_code, user_message=user_message, details=body
            ) from e
        except httpx.RequestError as e:
            logger.error("AI API unreachable", extra={"error": str(e)})
            raise AIServiceError(
                "AI service unreachable",
                status_code=502,
                user_message="Could not reach the AI service. Please try again.",
                details=str(e),
            ) from e
        except ValueError as e:
            logger.error("AI API returned invalid JSON", extra={"error": str(e)})
            raise AIServiceError(
                "Invalid response from AI service", status_code=502, details=str(e)
            ) from e


class AIService:
    """Runs assistant actions over PDF text.

    Usage:
        service = AIService.from_settings(get_settings())
        result = await service.run(ChatAction.SUMMARIZE, pdf_text)
    """

    def __init__(self, client: Optional[PerplexityClient]) -> None:
        self.client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AIService":
        """Build the service; without an API key the client is left unset."""
        if not settings.PERPLEXITY_API_KEY:
            return cls(client=None)
        return cls(
            PerplexityClient(
                api_key=settings.PERPLEXITY_API_KEY,
                api_url=settings.PERPLEXITY_API_URL,
                model=settings.PERPLEXITY_MODEL,
                timeout=settings.AI_TIMEOUT,
                transport=transport,
            )
        )

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def run(
        self,
        action: ChatAction,
        pdf_text: str,
        question: Optional[str] = None,
        message: Optional[str] = None,
        history: Optional[list[ChatMessage]] = None,
    ) -> dict[str, Any]:
        """Run an action and return ``{response, usage}``.

        Raises:
            ValidationFailedError: If the action lacks required input.
            AIConfigurationError: If no API key is configured.
            AIServiceError: If the upstream call fails or returns no choices.
        """
        if self.client is None:
            logger.error("AI API key is not configured")
            raise AIConfigurationError(
                "API configuration error. AI API key is missing."
            )
        check_inputs(action, pdf_text, question, message)

        text = truncate_text(pdf_text)
        messages = build_messages(action, text, question, message, history)
        params = ACTION_PARAMS[action]

        logger.info(
            "Sending AI request",
            extra={
                "action": action.value,
                "text_length": len(text),
                "messages": len(messages),
            },
        )
        data = await self.client.complete(messages, params)

        choices = data.get("choices") or []
        if not choices:
            logger.error("AI API returned no choices")
            raise AIServiceError(
                "No response received from AI",
                status_code=502,
                details="API returned empty choices",
            )
        content = choices[0].get("message", {}).get("content", "")

        logger.info(
            "AI request completed",
            extra={"action": action.value, "response_length": len(content)},
        )
        return {"response": content, "usage": data.get("usage")}
