"""对外 API 服务模块。

提供简化的函数接口供展示层调用。

网关与会话是进程级单例：首次使用时根据配置构建一次，此后只读，
只有显式调用 configure() 才会替换。展示层应通过 is_ready()
判断是否允许输入，通过 get_session_snapshot() 渲染界面。
"""

from typing import Any, Dict, Optional

from support_core.agents.completion_gateway import CompletionGateway
from support_core.agents.support_session import SupportSession
from support_core.config.settings import Settings, settings
from support_core.infrastructure.logging.logger import logger


_gateway: Optional[CompletionGateway] = None
_session: Optional[SupportSession] = None


def configure(cfg: Optional[Settings] = None) -> SupportSession:
    """（重新）构建网关与会话。

    凭证缺失时不会抛异常：网关处于禁用状态，
    会话的 configuration_error 给出提示。
    """
    global _gateway, _session
    cfg = cfg or settings
    _gateway = CompletionGateway.from_settings(cfg)
    _session = SupportSession(
        gateway=_gateway,
        max_context_messages=cfg.max_context_messages,
        locale=cfg.prompt_locale,
    )
    logger.info(
        "Support session configured",
        extra={"extra": {"provider": cfg.default_provider, "ready": _gateway.ready}},
    )
    return _session


def get_default_session() -> SupportSession:
    """获取默认会话实例（单例）。"""
    if _session is None:
        return configure()
    return _session


def is_ready() -> bool:
    return _gateway is not None and _gateway.ready


async def submit_message(user_input: str) -> Dict[str, Any]:
    """提交一条用户输入并返回最新快照。

    Returns:
        包含 accepted 标记与会话快照的字典
    """
    session = get_default_session()
    accepted = await session.submit(user_input)
    return {"accepted": accepted, **session.snapshot()}


async def handle_key_press(key: str, text: str, shift: bool = False) -> Dict[str, Any]:
    session = get_default_session()
    accepted = await session.handle_key_press(key, text, shift=shift)
    return {"accepted": accepted, **session.snapshot()}


def reset_conversation() -> Dict[str, Any]:
    """清空当前会话。"""
    session = get_default_session()
    session.reset()
    return session.snapshot()


def get_session_snapshot() -> Dict[str, Any]:
    return get_default_session().snapshot()
