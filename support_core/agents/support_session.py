"""支持对话会话引擎。

SupportSession 串联安全过滤、上下文窗口、Completion 网关与状态机：

1. submit 时追加用户消息并进入 PENDING（同一时刻最多一个请求）。
2. 命中危机词则直接追加固定转介消息，不调用远程服务。
3. 否则构建上下文并等待网关结果，无论成败都追加一条助手消息。
4. reset 随时可用；重置前发出的请求结果到达后会被丢弃。

所有网关失败都在这里终结，不会向调用方抛出。
取消或网关自身异常会先结束 PENDING 再继续传播。
"""

import logging
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from support_core.agents.completion_gateway import CompletionGateway, error_message
from support_core.agents.context_window import DEFAULT_MAX_CONTEXT_MESSAGES, build_context
from support_core.domain.exceptions import ValidationError
from support_core.domain.models import ChatMessage, CompletionFailure, ErrorKind
from support_core.domain.session import (
    CompletionResolved,
    ReferralIssued,
    SessionEvent,
    SessionReset,
    SessionState,
    UtteranceSubmitted,
    initial_state,
    reduce,
)
from support_core.infrastructure.logging.logger import logger
from support_core.prompts import load_prompt, load_system_prompt
from support_core.safety.crisis_filter import CrisisVerdict, classify, matched_phrases


class SupportSession:
    def __init__(
        self,
        gateway: CompletionGateway,
        max_context_messages: int = DEFAULT_MAX_CONTEXT_MESSAGES,
        locale: str = "en",
        system_prompt: Optional[str] = None,
        disclaimer: Optional[str] = None,
        referral: Optional[str] = None,
    ):
        """初始化会话。

        Args:
            gateway: Completion 网关（可能处于禁用状态）
            max_context_messages: 每次请求携带的最近历史条数
            locale: 提示词语言目录
            system_prompt / disclaimer / referral: 覆盖默认文案（主要用于测试）

        Raises:
            ValidationError: max_context_messages 小于 1
        """
        if max_context_messages < 1:
            raise ValidationError(
                code="INVALID_CONTEXT_WINDOW",
                message=f"max_context_messages must be >= 1, got {max_context_messages}",
            )
        self._gateway = gateway
        self._max_context_messages = max_context_messages
        self._system_prompt = system_prompt or load_system_prompt(locale)
        self._disclaimer = disclaimer or load_prompt("disclaimer", locale)
        self._referral = referral or load_prompt("crisis_referral", locale)
        self._session_id = f"s-{uuid4().hex}"
        self._state = initial_state(self._disclaimer)
        if not gateway.ready:
            self._log(logging.WARNING, "Session started without a ready gateway")

    # ---- 只读视图 ----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def history(self) -> Tuple[ChatMessage, ...]:
        return self._state.history

    @property
    def is_pending(self) -> bool:
        return self._state.is_pending

    @property
    def last_error(self) -> Optional[str]:
        return self._state.last_error

    @property
    def configuration_error(self) -> Optional[str]:
        return self._gateway.configuration_error

    @property
    def can_submit(self) -> bool:
        return self._gateway.ready and not self.is_pending

    def snapshot(self) -> Dict[str, Any]:
        """导出给展示层的快照。"""
        return {
            "messages": [{"role": m.role, "content": m.content} for m in self.history],
            "is_pending": self.is_pending,
            "last_error": self.last_error,
            "configuration_error": self.configuration_error,
            "can_submit": self.can_submit,
        }

    # ---- 操作 ----

    async def submit(self, utterance: str) -> bool:
        """提交一条用户输入。

        空白输入、已有请求在途或网关未就绪时为 no-op。

        Returns:
            是否接受了这次提交
        """
        text = (utterance or "").strip()
        if not text or not self.can_submit:
            return False

        self._dispatch(UtteranceSubmitted(content=text))
        generation = self._state.generation

        if classify(text) is CrisisVerdict.CRISIS:
            # 只记录命中的短语，不记录用户原文
            self._log(logging.WARNING, "Crisis referral issued", matched=matched_phrases(text))
            self._dispatch(ReferralIssued(content=self._referral))
            return True

        try:
            context = build_context(self._state.history, self._system_prompt, self._max_context_messages)
            result = await self._gateway.complete(context)
        except BaseException as e:
            # 取消或意外中断同样结束 PENDING，然后继续向上传播
            if generation == self._state.generation and self.is_pending:
                self._log(logging.WARNING, "Completion interrupted", error=type(e).__name__)
                failure = CompletionFailure(kind=ErrorKind.UNKNOWN, detail=type(e).__name__)
                self._dispatch(
                    CompletionResolved(
                        generation=generation,
                        result=failure,
                        content=error_message(ErrorKind.UNKNOWN),
                    )
                )
            raise

        if generation != self._state.generation:
            self._log(logging.INFO, "Discarded stale completion", generation=generation)
            return True
        if isinstance(result, CompletionFailure):
            content = error_message(result.kind)
        else:
            content = result.content
        self._dispatch(CompletionResolved(generation=generation, result=result, content=content))
        return True

    def reset(self) -> None:
        """清空会话并重新放入免责声明。"""
        self._dispatch(SessionReset(disclaimer=self._disclaimer))
        self._log(logging.INFO, "Session reset", generation=self._state.generation)

    async def handle_key_press(self, key: str, text: str, shift: bool = False) -> bool:
        """输入框按键处理：回车（不含 Shift）等同于提交 text，其余按键忽略。"""
        if key != "Enter" or shift:
            return False
        return await self.submit(text)

    def _dispatch(self, event: SessionEvent) -> None:
        self._state = reduce(self._state, event)

    def _log(self, level: int, message: str, **fields: Any) -> None:
        payload: Dict[str, Any] = {"session_id": self._session_id}
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
