"""危机词检测。

对单条用户输入做大小写无关的子串匹配，命中任一短语即判定为 CRISIS。
匹配不要求词边界，例如 "hopelessly" 也会命中 "hopeless"：
宁可多触发转介消息，也不漏掉真正的求助信号。

这是一个可审计的安全底线，而不是分类模型；
结果只依赖当前这句话，与会话历史无关。
"""

from enum import Enum
from typing import List, Tuple


class CrisisVerdict(str, Enum):
    NORMAL = "normal"
    CRISIS = "crisis"


# 自杀意念、自伤与绝望相关的短语，均为小写
CRISIS_PHRASES: Tuple[str, ...] = (
    "suicide",
    "kill myself",
    "end my life",
    "want to die",
    "hurt myself",
    "self-harm",
    "cutting",
    "overdose",
    "can't go on",
    "worthless",
    "hopeless",
    "no point",
    "better off dead",
    "end it all",
)


def matched_phrases(utterance: str) -> List[str]:
    """返回命中的短语列表（按词表顺序），用于审计日志。"""
    text = (utterance or "").lower()
    return [phrase for phrase in CRISIS_PHRASES if phrase in text]


def classify(utterance: str) -> CrisisVerdict:
    text = (utterance or "").lower()
    if any(phrase in text for phrase in CRISIS_PHRASES):
        return CrisisVerdict.CRISIS
    return CrisisVerdict.NORMAL
