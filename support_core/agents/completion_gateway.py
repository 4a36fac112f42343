"""Completion 网关。

包装一次远程调用，把 Provider 的成功响应和各类 BusinessError
统一归一化为 CompletionResult：

- 成功：取第一个候选的内容；内容为空时返回兜底道歉文案，不视为失败。
- 失败：按异常类型映射为 ErrorKind，不做自动重试。

网关在启动时根据配置构建一次，凭证缺失或无效时处于永久禁用状态
（ready 为 False），由上层在提交前检查。
"""

import logging
from typing import Dict, Optional, Sequence

from support_core.config.settings import Settings, settings
from support_core.domain.exceptions import (
    AuthenticationError,
    BusinessError,
    ConfigurationError,
    RateLimitError,
    ServiceUnavailableError,
)
from support_core.domain.models import (
    ChatMessage,
    ChatRequest,
    CompletionFailure,
    CompletionResult,
    CompletionSuccess,
    ErrorKind,
)
from support_core.infrastructure.logging.logger import logger
from support_core.providers import create_provider
from support_core.providers.base import ProviderClient
from support_core.providers.registry import get_model_config, get_provider_config


EMPTY_RESPONSE_FALLBACK = (
    "I apologize, but I didn't receive a proper response. Could you please try again?"
)

ERROR_PREFIX = "I apologize, but I'm having trouble responding right now. "

ERROR_GUIDANCE: Dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMITED: "The service is currently busy. Please try again in a moment.",
    ErrorKind.UNAUTHORIZED: "There's an authentication issue. Please refresh the page and try again.",
    ErrorKind.SERVICE_UNAVAILABLE: "The AI service is temporarily unavailable. Please try again later.",
    ErrorKind.UNKNOWN: "Please try again or refresh the page if the problem persists.",
}


def classify_error(error: Exception) -> ErrorKind:
    """把 Provider 抛出的异常映射为 ErrorKind。"""

    if isinstance(error, RateLimitError):
        return ErrorKind.RATE_LIMITED
    if isinstance(error, AuthenticationError):
        return ErrorKind.UNAUTHORIZED
    if isinstance(error, ServiceUnavailableError):
        return ErrorKind.SERVICE_UNAVAILABLE
    return ErrorKind.UNKNOWN


def error_message(kind: ErrorKind) -> str:
    """生成追加到会话中的助手解释消息。"""

    return ERROR_PREFIX + ERROR_GUIDANCE[kind]


def _model_problem(provider: str, model: str) -> Optional[str]:
    """Provider 或逻辑模型名无法在 registry 中解析时返回配置错误描述。"""

    try:
        get_provider_config(provider)
    except KeyError:
        return f"Unknown AI provider {provider!r}. Please check DEFAULT_PROVIDER."
    try:
        get_model_config(provider, model)
    except KeyError:
        return f"Unknown AI model {model!r} for provider {provider!r}. Please check DEFAULT_MODEL."
    return None


class CompletionGateway:
    def __init__(
        self,
        provider_client: Optional[ProviderClient],
        provider: str = "groq",
        model: str = "support-chat",
        configuration_error: Optional[str] = None,
    ):
        self._provider_client = provider_client
        self._provider = provider
        self._model = model
        self._configuration_error = configuration_error
        if provider_client is None and configuration_error is None:
            self._configuration_error = "AI service is not configured."
        if self._configuration_error is None:
            self._configuration_error = _model_problem(provider, model)

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None) -> "CompletionGateway":
        """根据配置构建网关；凭证、Provider 或模型名有问题时返回禁用的网关而不是抛异常。"""

        cfg = cfg or settings
        provider_client = None
        problem = cfg.credential_problem() or _model_problem(cfg.default_provider, cfg.default_model)
        if problem is None:
            try:
                provider_client = create_provider(cfg.default_provider, cfg)
            except KeyError:
                problem = f"Unknown AI provider {cfg.default_provider!r}. Please check DEFAULT_PROVIDER."
        if problem:
            logger.warning(
                "Completion gateway disabled",
                extra={"extra": {"provider": cfg.default_provider, "reason": problem}},
            )
            return cls(None, provider=cfg.default_provider, model=cfg.default_model, configuration_error=problem)
        return cls(provider_client, provider=cfg.default_provider, model=cfg.default_model)

    @property
    def ready(self) -> bool:
        return self._provider_client is not None and self._configuration_error is None

    @property
    def configuration_error(self) -> Optional[str]:
        return self._configuration_error

    async def complete(self, messages: Sequence[ChatMessage]) -> CompletionResult:
        """调用远程服务并返回归一化结果。

        Raises:
            ConfigurationError: 网关未就绪时调用（调用方应先检查 ready）
        """
        if not self.ready:
            raise ConfigurationError(code="GATEWAY_NOT_READY", message=self._configuration_error or "")

        try:
            model_cfg = get_model_config(self._provider, self._model)
            req = ChatRequest(
                provider=self._provider,
                model=self._model,
                messages=list(messages),
                temperature=model_cfg.default_temperature,
                top_p=model_cfg.top_p,
                max_tokens=model_cfg.max_tokens,
                stream=False,
            )
            self._log(logging.INFO, "Calling provider", message_count=len(req.messages))
            result = await self._provider_client.chat(req)
        except BusinessError as e:
            kind = classify_error(e)
            self._log(
                logging.WARNING,
                "Provider call failed",
                error_kind=kind.value,
                code=e.code,
                http_status=e.http_status,
            )
            return CompletionFailure(kind=kind, detail=e.code)
        except Exception as e:
            # 未分类异常同样只影响本次请求
            logger.exception("Unexpected provider failure", extra={"extra": {"provider": self._provider}})
            return CompletionFailure(kind=ErrorKind.UNKNOWN, detail=type(e).__name__)

        if result.usage:
            self._log(logging.INFO, "Token usage", total_tokens=result.usage.total_tokens)
        content = ""
        if result.choices:
            content = result.choices[0].message.content or ""
        if not content.strip():
            self._log(logging.WARNING, "Provider returned empty content")
            return CompletionSuccess(content=EMPTY_RESPONSE_FALLBACK)
        return CompletionSuccess(content=content)

    def _log(self, level: int, message: str, **fields) -> None:
        payload = {"provider": self._provider, "model": self._model}
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
