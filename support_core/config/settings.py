"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# 凭证长度低于该值时视为无效配置
MIN_API_KEY_LENGTH = 10


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("SUPPORT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
        Path(__file__).resolve().parents[1] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- Provider 相关配置 ----
    default_provider: str = Field(
        default="groq",
        description="默认使用的 Provider 名称",
    )
    default_model: str = Field(
        default="support-chat",
        description="逻辑模型名，由 registry 映射为具体厂商模型",
    )

    # Groq
    groq_api_key: Optional[str] = Field(default=None, description="Groq API 密钥")
    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="Groq API 基础URL",
    )
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 会话相关配置 ----
    max_context_messages: int = Field(
        default=10,
        ge=1,
        le=100,
        description="每次请求携带的最近历史消息数（不含 system prompt）",
    )
    prompt_locale: str = Field(default="en", description="提示词语言目录")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("groq_api_key")
    @classmethod
    def normalize_api_key(cls, v: Optional[str]) -> Optional[str]:
        # 空白值等同于未配置；长度校验交给 credential_problem，避免启动时崩溃
        if v is None:
            return None
        v = v.strip()
        return v or None

    def credential_problem(self) -> Optional[str]:
        """返回凭证配置问题的用户可读描述，配置正常时返回 None。"""
        if not self.groq_api_key:
            return "API key not configured. Please add GROQ_API_KEY to your environment variables."
        if len(self.groq_api_key) < MIN_API_KEY_LENGTH:
            return "API key seems invalid. Please check GROQ_API_KEY in your environment variables."
        return None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
