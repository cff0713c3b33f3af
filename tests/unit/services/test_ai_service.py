"""Unit tests for the AI study assistant service."""

import json

import httpx
import pytest

from student_power.config import Settings
from student_power.exceptions import (
    AIConfigurationError,
    AIServiceError,
    ValidationFailedError,
)
from student_power.schemas.ai import ChatAction, ChatMessage
from student_power.services.ai_service import (
    ACTION_PARAMS,
    MAX_PDF_TEXT_CHARS,
    AIService,
    PerplexityClient,
    build_messages,
    extract_topic,
    parse_action,
    truncate_text,
)

API_URL = "https://ai.test/chat/completions"


def completion(content: str = "A summary", usage: dict | None = None) -> dict:
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": usage or {"prompt_tokens": 10, "completion_tokens": 5},
    }


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, status_code: int = 200, body=None) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if isinstance(body, (dict, list)):
                return httpx.Response(status_code, json=body)
            return httpx.Response(status_code, text=body or "")

        super().__init__(handler)

    @property
    def payload(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_service(transport: httpx.MockTransport) -> AIService:
    client = PerplexityClient(
        api_key="pplx-test", api_url=API_URL, model="sonar", transport=transport
    )
    return AIService(client)


class TestHelpers:
    """Tests for prompt building helpers."""

    def test_parse_action_accepts_known_actions(self):
        assert parse_action("generate_questions") is ChatAction.GENERATE_QUESTIONS

    def test_parse_action_rejects_unknown(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            parse_action("translate")

        assert "Invalid action" in exc_info.value.errors[0]

    def test_truncate_text_appends_ellipsis(self):
        text = "x" * (MAX_PDF_TEXT_CHARS + 50)

        truncated = truncate_text(text)

        assert len(truncated) == MAX_PDF_TEXT_CHARS + 3
        assert truncated.endswith("...")

    def test_truncate_text_keeps_short_text(self):
        assert truncate_text("short") == "short"

    def test_extract_topic_from_heading(self):
        text = "Chapter: Introduction to Operating Systems\nProcesses and threads"

        assert extract_topic(text, "default") == "Introduction to Operating Systems"

    def test_extract_topic_default(self):
        assert extract_topic("lowercase only text", "this topic") == "this topic"

    def test_chat_messages_include_history_in_order(self):
        history = [
            ChatMessage(role="user", content="What is a process?"),
            ChatMessage(role="assistant", content="A running program."),
        ]

        messages = build_messages(
            ChatAction.CHAT, "doc text", message="And a thread?", history=history
        )

        assert [m["role"] for m in messages] == [
            "system",
            "user",
            "assistant",
            "user",
        ]
        assert "doc text" in messages[0]["content"]
        assert messages[-1]["content"] == "And a thread?"

    def test_answer_messages_include_question(self):
        messages = build_messages(ChatAction.ANSWER, "doc", question="Why?")

        assert "Question: Why?" in messages[1]["content"]


class TestAIService:
    """Tests for AIService.run()."""

    @pytest.mark.asyncio
    async def test_missing_api_key_raises_configuration_error(self):
        service = AIService.from_settings(Settings())

        assert service.configured is False
        with pytest.raises(AIConfigurationError):
            await service.run(ChatAction.SUMMARIZE, "some text")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", list(ChatAction))
    async def test_action_parameters_sent(self, action):
        transport = RecordingTransport(body=completion())
        service = make_service(transport)

        await service.run(action, "Document text", question="Q?", message="Hi")

        payload = transport.payload
        params = ACTION_PARAMS[action]
        assert payload["model"] == "sonar"
        assert payload["max_tokens"] == params.max_tokens
        assert payload["temperature"] == params.temperature
        assert payload["top_p"] == 0.9
        assert payload["stream"] is False
        assert transport.requests[-1].headers["Authorization"] == "Bearer pplx-test"

    def test_action_parameter_table(self):
        assert ACTION_PARAMS[ChatAction.SUMMARIZE].max_tokens == 800
        assert ACTION_PARAMS[ChatAction.GENERATE_QUESTIONS].max_tokens == 1000
        assert ACTION_PARAMS[ChatAction.ANSWER].temperature == 0.2
        assert ACTION_PARAMS[ChatAction.CHAT].temperature == 0.5

    @pytest.mark.asyncio
    async def test_returns_response_and_usage(self):
        usage = {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7}
        service = make_service(RecordingTransport(body=completion("Answer", usage)))

        result = await service.run(ChatAction.ANSWER, "text", question="Why?")

        assert result == {"response": "Answer", "usage": usage}

    @pytest.mark.asyncio
    async def test_long_text_truncated_before_sending(self):
        transport = RecordingTransport(body=completion())
        service = make_service(transport)
        text = "a" * (MAX_PDF_TEXT_CHARS * 2)

        await service.run(ChatAction.SUMMARIZE, text)

        user_content = transport.payload["messages"][1]["content"]
        assert ("a" * MAX_PDF_TEXT_CHARS + "...") in user_content
        assert ("a" * (MAX_PDF_TEXT_CHARS + 1)) not in user_content

    @pytest.mark.asyncio
    async def test_missing_inputs_collected(self):
        transport = RecordingTransport(body=completion())
        service = make_service(transport)

        with pytest.raises(ValidationFailedError) as exc_info:
            await service.run(ChatAction.ANSWER, "   ", question="")

        assert exc_info.value.errors == [
            "No PDF content provided",
            "No question provided",
        ]
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_chat_requires_message(self):
        service = make_service(RecordingTransport(body=completion()))

        with pytest.raises(ValidationFailedError):
            await service.run(ChatAction.CHAT, "text", message=None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403, 429])
    async def test_upstream_error_keeps_status(self, status_code):
        service = make_service(RecordingTransport(status_code, body="denied"))

        with pytest.raises(AIServiceError) as exc_info:
            await service.run(ChatAction.SUMMARIZE, "text")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.details == "denied"

    @pytest.mark.asyncio
    async def test_bad_request_includes_upstream_body(self):
        service = make_service(RecordingTransport(400, body="model not found"))

        with pytest.raises(AIServiceError) as exc_info:
            await service.run(ChatAction.SUMMARIZE, "text")

        assert exc_info.value.user_message == "Invalid request format. model not found"

    @pytest.mark.asyncio
    async def test_empty_choices_is_bad_gateway(self):
        service = make_service(RecordingTransport(body={"choices": [], "usage": {}}))

        with pytest.raises(AIServiceError) as exc_info:
            await service.run(ChatAction.SUMMARIZE, "text")

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_invalid_json_is_bad_gateway(self):
        service = make_service(RecordingTransport(body="<html>oops</html>"))

        with pytest.raises(AIServiceError) as exc_info:
            await service.run(ChatAction.SUMMARIZE, "text")

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_network_failure_is_bad_gateway(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(httpx.MockTransport(handler))

        with pytest.raises(AIServiceError) as exc_info:
            await service.run(ChatAction.SUMMARIZE, "text")

        assert exc_info.value.status_code == 502
