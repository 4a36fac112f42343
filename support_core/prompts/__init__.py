"""提示词与固定文案加载工具。

按语言(locale) 从 prompts/<locale> 目录读取 markdown 文本：

- support_system: 发给模型的安全边界 system prompt。
- disclaimer: 会话开始/重置时的助手免责声明。
- crisis_referral: 命中危机词时直接回复的转介消息。
"""

from functools import lru_cache
from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


@lru_cache(maxsize=None)
def load_prompt(name: str, locale: str = "en") -> str:
    """加载指定名称的文本，去掉首尾空白。"""

    fname = PROMPTS_DIR / locale / f"{name}.md"
    return fname.read_text(encoding="utf-8").strip()


def load_system_prompt(locale: str = "en") -> str:
    return load_prompt("support_system", locale)
