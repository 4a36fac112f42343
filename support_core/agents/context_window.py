"""上下文窗口构建。

system prompt 永远位于首位，之后是最近 max_messages 条历史消息（保持原顺序）。
截断只丢弃较早的对话轮次，安全边界提示词不会被裁掉。
"""

from typing import List, Sequence

from support_core.domain.models import ChatMessage


DEFAULT_MAX_CONTEXT_MESSAGES = 10


def build_context(
    history: Sequence[ChatMessage],
    system_prompt: str,
    max_messages: int = DEFAULT_MAX_CONTEXT_MESSAGES,
) -> List[ChatMessage]:
    """根据会话历史生成发往 Provider 的消息列表，不修改 history。

    Args:
        history: 会话历史（按插入顺序）
        system_prompt: 安全边界系统提示词
        max_messages: 保留的最近历史条数（不含 system prompt），小于 1 时按 1 处理

    Returns:
        [system, *history[-max_messages:]]
    """
    window = list(history)[-max(1, max_messages):]
    return [ChatMessage(role="system", content=system_prompt), *window]
