"""会话状态与纯函数状态机。

SessionState 是不可变快照，所有状态迁移都通过 reduce(state, event) 完成，
SupportSession 只负责调度事件和等待网关结果。

generation 在每次 reset 时递增，发出请求时记下当时的 generation；
结果返回时若 generation 已变化，说明会话已被重置，该结果直接丢弃。
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

from .models import ChatMessage, CompletionFailure, CompletionResult


# 任一网关失败后在界面横幅展示的文字
TRANSIENT_ERROR_TEXT = "Failed to get AI response. Please try again."


class RequestState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


@dataclass(frozen=True)
class SessionState:
    history: Tuple[ChatMessage, ...]
    request_state: RequestState = RequestState.IDLE
    last_error: Optional[str] = None
    generation: int = 0

    @property
    def is_pending(self) -> bool:
        return self.request_state is RequestState.PENDING


@dataclass(frozen=True)
class UtteranceSubmitted:
    content: str


@dataclass(frozen=True)
class ReferralIssued:
    content: str


@dataclass(frozen=True)
class CompletionResolved:
    generation: int
    result: CompletionResult
    content: str


@dataclass(frozen=True)
class SessionReset:
    disclaimer: str


SessionEvent = Union[UtteranceSubmitted, ReferralIssued, CompletionResolved, SessionReset]


def initial_state(disclaimer: str, generation: int = 0) -> SessionState:
    """创建只包含免责声明的新会话。"""
    return SessionState(
        history=(ChatMessage(role="assistant", content=disclaimer),),
        generation=generation,
    )


def reduce(state: SessionState, event: SessionEvent) -> SessionState:
    """状态迁移表。

    - UtteranceSubmitted: 仅在 IDLE 时生效，追加 user 消息并进入 PENDING，清除横幅错误。
    - ReferralIssued: 仅在 PENDING 时生效，追加固定转介消息并回到 IDLE。
    - CompletionResolved: 仅在 PENDING 且 generation 一致时生效，
      追加 assistant 消息并回到 IDLE；失败时设置横幅错误。
    - SessionReset: 任意状态下生效，重置历史并递增 generation。

    不满足前置条件的事件原样返回 state（no-op）。
    """
    if isinstance(event, SessionReset):
        return initial_state(event.disclaimer, generation=state.generation + 1)

    if isinstance(event, UtteranceSubmitted):
        if state.is_pending:
            return state
        return replace(
            state,
            history=state.history + (ChatMessage(role="user", content=event.content),),
            request_state=RequestState.PENDING,
            last_error=None,
        )

    if isinstance(event, ReferralIssued):
        if not state.is_pending:
            return state
        return replace(
            state,
            history=state.history + (ChatMessage(role="assistant", content=event.content),),
            request_state=RequestState.IDLE,
        )

    if isinstance(event, CompletionResolved):
        if not state.is_pending or event.generation != state.generation:
            return state
        last_error = None
        if isinstance(event.result, CompletionFailure):
            last_error = TRANSIENT_ERROR_TEXT
        return replace(
            state,
            history=state.history + (ChatMessage(role="assistant", content=event.content),),
            request_state=RequestState.IDLE,
            last_error=last_error,
        )

    raise TypeError(f"Unknown session event: {event!r}")
