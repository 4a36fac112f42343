"""测试 Completion 网关。"""

import asyncio

import pytest

from support_core.agents.completion_gateway import (
    EMPTY_RESPONSE_FALLBACK,
    CompletionGateway,
    classify_error,
    error_message,
)
from support_core.config.settings import Settings
from support_core.domain.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    ServiceUnavailableError,
)
from support_core.domain.models import (
    ChatChoice,
    ChatMessage,
    ChatResult,
    CompletionFailure,
    CompletionSuccess,
    ErrorKind,
)
from support_core.providers.groq_client import GroqClient


class FakeProvider:
    """模拟的 Provider。"""
    name = "fake"

    def __init__(self, content="这是测试回复", error=None, choices=True):
        self.requests = []
        self._content = content
        self._error = error
        self._choices = choices

    async def chat(self, req):
        self.requests.append(req)
        if self._error is not None:
            raise self._error
        choices = []
        if self._choices:
            choices = [ChatChoice(index=0, message=ChatMessage(role="assistant", content=self._content))]
        return ChatResult(provider="fake", model=req.model, choices=choices, usage=None, raw={})


MESSAGES = [ChatMessage(role="system", content="SYS"), ChatMessage(role="user", content="hi")]


def test_complete_success_passes_generation_parameters():
    provider = FakeProvider(content="That sounds tough, tell me more.")
    gateway = CompletionGateway(provider)
    result = asyncio.run(gateway.complete(MESSAGES))
    assert result == CompletionSuccess(content="That sounds tough, tell me more.")
    req = provider.requests[0]
    assert req.messages == MESSAGES
    assert req.temperature == 0.7
    assert req.max_tokens == 1000
    assert req.top_p == 1.0
    assert req.stream is False


@pytest.mark.parametrize("content, choices", [("", True), ("   ", True), ("ignored", False)])
def test_complete_empty_content_uses_fallback(content, choices):
    gateway = CompletionGateway(FakeProvider(content=content, choices=choices))
    result = asyncio.run(gateway.complete(MESSAGES))
    assert result == CompletionSuccess(content=EMPTY_RESPONSE_FALLBACK)


@pytest.mark.parametrize(
    "error, kind",
    [
        (RateLimitError(code="RATE_LIMIT", message="x", http_status=429), ErrorKind.RATE_LIMITED),
        (AuthenticationError(code="UNAUTHORIZED", message="x", http_status=401), ErrorKind.UNAUTHORIZED),
        (ServiceUnavailableError(code="SERVICE_UNAVAILABLE", message="x", http_status=500), ErrorKind.SERVICE_UNAVAILABLE),
        (ApiError(code="API_ERROR", message="x", http_status=400), ErrorKind.UNKNOWN),
        (NetworkError(code="NETWORK_ERROR", message="x"), ErrorKind.UNKNOWN),
        (RuntimeError("boom"), ErrorKind.UNKNOWN),
    ],
)
def test_complete_failures_are_classified(error, kind):
    provider = FakeProvider(error=error)
    gateway = CompletionGateway(provider)
    result = asyncio.run(gateway.complete(MESSAGES))
    assert isinstance(result, CompletionFailure)
    assert result.kind is kind
    # 不做自动重试
    assert len(provider.requests) == 1


def test_classify_error_direct():
    assert classify_error(RateLimitError(code="R", message="")) is ErrorKind.RATE_LIMITED
    assert classify_error(ValueError()) is ErrorKind.UNKNOWN


def test_error_messages_are_distinct():
    texts = {error_message(kind) for kind in ErrorKind}
    assert len(texts) == len(ErrorKind)
    assert "try again in a moment" in error_message(ErrorKind.RATE_LIMITED)
    assert "authentication" in error_message(ErrorKind.UNAUTHORIZED)
    assert "temporarily unavailable" in error_message(ErrorKind.SERVICE_UNAVAILABLE)
    for kind in ErrorKind:
        assert error_message(kind).startswith("I apologize, but I'm having trouble responding right now. ")


def test_from_settings_missing_key_is_disabled():
    gateway = CompletionGateway.from_settings(Settings(groq_api_key=""))
    assert gateway.ready is False
    assert "GROQ_API_KEY" in gateway.configuration_error
    with pytest.raises(ConfigurationError):
        asyncio.run(gateway.complete(MESSAGES))


def test_from_settings_short_key_is_disabled():
    gateway = CompletionGateway.from_settings(Settings(groq_api_key="short"))
    assert gateway.ready is False
    assert "invalid" in gateway.configuration_error


def test_from_settings_with_key_is_ready():
    gateway = CompletionGateway.from_settings(Settings(groq_api_key="gsk_a_valid_looking_key"))
    assert gateway.ready is True
    assert gateway.configuration_error is None
    assert isinstance(gateway._provider_client, GroqClient)


def test_from_settings_unknown_model_is_disabled():
    gateway = CompletionGateway.from_settings(
        Settings(groq_api_key="gsk_a_valid_looking_key", default_model="typo")
    )
    assert gateway.ready is False
    assert "DEFAULT_MODEL" in gateway.configuration_error
    with pytest.raises(ConfigurationError):
        asyncio.run(gateway.complete(MESSAGES))


def test_from_settings_unknown_provider_is_disabled():
    gateway = CompletionGateway.from_settings(
        Settings(groq_api_key="gsk_a_valid_looking_key", default_provider="nope")
    )
    assert gateway.ready is False
    assert "DEFAULT_PROVIDER" in gateway.configuration_error


def test_direct_gateway_with_unknown_model_is_not_ready():
    provider = FakeProvider()
    gateway = CompletionGateway(provider, model="not-a-model")
    assert gateway.ready is False
    assert "not-a-model" in gateway.configuration_error
    assert provider.requests == []
