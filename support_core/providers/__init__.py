"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供各厂商的具体实现 (groq_client)。
"""

from typing import Optional

from support_core.config.settings import settings
from support_core.providers.base import ProviderClient
from support_core.providers.groq_client import GroqClient


def create_provider(name: Optional[str] = None, cfg=None) -> ProviderClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider。"""

    cfg = cfg or settings
    provider_name = (name or getattr(cfg, "default_provider", "groq")).lower()
    if provider_name == "groq":
        return GroqClient(cfg)
    raise KeyError(f"Unknown provider: {provider_name!r}")

