"""Provider 与模型配置。

本模块将“逻辑模型名”与“具体厂商模型名”解耦：

- 逻辑名（logical_name）：在代码里使用的统一名称，例如 "support-chat"。
- provider_model：厂商实际提供的模型 ID，例如 "llama-3.1-8b-instant"。

生成参数（温度、输出上限、top_p）也集中在这里，网关只引用逻辑名。"""

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass(frozen=True)
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str
    max_tokens: int
    default_temperature: float
    top_p: float = 1.0


@dataclass(frozen=True)
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    models: Dict[str, ModelConfig]


# Groq 配置（OpenAI 兼容的 chat/completions 接口）
GROQ_CONFIG = ProviderConfig(
    name="groq",
    base_url="https://api.groq.com/openai/v1",
    models={
        "support-chat": ModelConfig(
            logical_name="support-chat",
            provider_model="llama-3.1-8b-instant",
            max_tokens=1000,
            default_temperature=0.7,
            top_p=1.0,
        )
    },
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "groq": GROQ_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")


def get_model_config(provider: str, model: str) -> ModelConfig:
    cfg = get_provider_config(provider)
    try:
        return cfg.models[model]
    except KeyError:
        raise KeyError(f"Unknown model {model!r} for provider {cfg.name!r}") from None
