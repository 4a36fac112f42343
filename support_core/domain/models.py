"""统一的对话与结果数据模型。

本模块定义了会话引擎与 Provider 之间共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant），创建后不可变。
- ChatRequest: 发给底层 LLM Provider 的完整请求。
- ChatResult: 从 Provider 解析后的统一响应结果。
- CompletionResult: 网关对一次调用的归一化结果（成功内容或分类错误）。

Provider 适配器（如 GroqClient）只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, List, Union


# LLM 消息角色类型（与 OpenAI / Groq 等厂商的 role 字段对应）
Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。

    会话中的消息顺序即对话语义，因此消息本身冻结，只能追加不能修改。
    """

    role: Role
    content: str


@dataclass
class ChatRequest:
    """一次完整的聊天请求。

    网关将上下文窗口裁剪后生成 ChatRequest，再交给具体 ProviderClient。
    Provider 适配层负责把本结构转换成各家 API 的 JSON 请求体。
    """

    provider: str  # 逻辑 Provider 名，如 "groq"
    model: str  # 逻辑模型名，如 "support-chat"（再由 registry 映射为真实模型名）
    messages: List[ChatMessage]
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: Optional[int] = None
    stream: bool = False


@dataclass
class ChatUsage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatChoice:
    """单个候选回答（目前只用 index=0 的一条）。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次对话调用的最终结果。

    - provider: 逻辑 Provider 名（如 "groq"）。
    - model: 逻辑模型名（如 "support-chat"）。
    - choices: 候选回答，可能为空。
    - usage: 可选的 token 使用统计。
    - raw: 原始响应 JSON，用于调试。
    """

    provider: str
    model: str
    choices: List[ChatChoice]
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None


class ErrorKind(str, Enum):
    """远程调用失败的分类。"""

    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CompletionSuccess:
    content: str


@dataclass(frozen=True)
class CompletionFailure:
    kind: ErrorKind
    detail: str = ""


CompletionResult = Union[CompletionSuccess, CompletionFailure]
