"""Groq Provider 适配器。

接口与 OpenAI 兼容，使用 chat/completions 端点：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>

本模块负责：

1. 接收统一的 ChatRequest，转换为 Groq 的 HTTP 请求体。
2. 调用 HTTP 接口，并把状态码映射为对应的 BusinessError：
   429 -> RateLimitError，401 -> AuthenticationError，
   5xx -> ServiceUnavailableError，其他 >= 400 -> ApiError，
   连接/超时 -> NetworkError。
3. 将响应 JSON 解析为统一的 ChatResult。

不做自动重试，失败一次就交给上层。
"""

from typing import Any, Dict

import httpx

from support_core.domain.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    ServiceUnavailableError,
)
from support_core.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult, ChatUsage
from support_core.providers.registry import GROQ_CONFIG, ModelConfig


class GroqClient:
    """Groq 提供方客户端实现。"""

    name = "groq"

    def __init__(self, settings):
        # Settings 里包含 base_url、api_key、超时等配置
        self._settings = settings

    async def chat(self, req: ChatRequest) -> ChatResult:
        """执行一次非流式对话调用。"""

        api_key = getattr(self._settings, "groq_api_key", None)
        if not api_key:
            raise ConfigurationError(code="MISSING_API_KEY", message="GROQ_API_KEY not set")
        model_cfg = GROQ_CONFIG.models[req.model]
        payload = self._build_payload(req, model_cfg)
        base = getattr(self._settings, "groq_base_url", None) or GROQ_CONFIG.base_url
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.post(
                    f"{base}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self.name)
        self._raise_for_status(resp)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(
                code="INVALID_RESPONSE",
                message=f"Groq returned non-JSON body: {e}",
                http_status=resp.status_code,
                provider=self.name,
            )
        return self._parse_response(data, req)

    def _raise_for_status(self, resp) -> None:
        status = resp.status_code
        if status == 429:
            raise RateLimitError(code="RATE_LIMIT", message="Groq rate limit", http_status=status, provider=self.name)
        if status == 401:
            raise AuthenticationError(
                code="UNAUTHORIZED", message="Groq rejected credentials", http_status=status, provider=self.name
            )
        if status >= 500:
            raise ServiceUnavailableError(
                code="SERVICE_UNAVAILABLE", message=resp.text, http_status=status, provider=self.name
            )
        if status >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=status, provider=self.name)

    def _build_payload(self, req: ChatRequest, model_cfg: ModelConfig) -> dict:
        """将 ChatRequest 转成 Groq 所需的请求 JSON。"""

        return {
            "model": model_cfg.provider_model,
            "messages": [self._message_to_payload(m) for m in req.messages],
            "temperature": req.temperature if req.temperature is not None else model_cfg.default_temperature,
            "max_tokens": req.max_tokens or model_cfg.max_tokens,
            "top_p": req.top_p,
            "stream": False,
        }

    def _parse_response(self, data: dict, req: ChatRequest) -> ChatResult:
        """将 Groq 的原始响应 JSON 解析为统一的 ChatResult。

        choices 缺失或 message.content 为空时照常返回，
        由网关决定如何兜底。
        """

        choices: list[ChatChoice] = []
        for i, ch in enumerate(data.get("choices") or []):
            msg = ch.get("message") or {}
            cm = ChatMessage(role=msg.get("role") or "assistant", content=msg.get("content") or "")
            choices.append(ChatChoice(index=ch.get("index", i), message=cm, finish_reason=ch.get("finish_reason")))
        usage_raw = data.get("usage") or {}
        usage = None
        if usage_raw:
            usage = ChatUsage(
                prompt_tokens=usage_raw.get("prompt_tokens", 0),
                completion_tokens=usage_raw.get("completion_tokens", 0),
                total_tokens=usage_raw.get("total_tokens", 0),
            )
        return ChatResult(provider=self.name, model=req.model, choices=choices, usage=usage, raw=data)

    @staticmethod
    def _message_to_payload(message: ChatMessage) -> Dict[str, Any]:
        return {"role": message.role, "content": message.content}
