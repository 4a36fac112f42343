"""Support Core 顶层包。

该包提供情绪支持聊天客户端的会话引擎，
包括配置加载、领域模型、危机词过滤、上下文窗口、
Provider 适配与 Completion 网关等能力。
"""

from support_core.agents.support_session import SupportSession
from support_core.api.service import configure, get_default_session

__all__ = ["SupportSession", "configure", "get_default_session"]
