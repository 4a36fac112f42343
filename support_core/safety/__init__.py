"""安全过滤层：基于固定词表的危机检测。"""

from support_core.safety.crisis_filter import CRISIS_PHRASES, CrisisVerdict, classify, matched_phrases

__all__ = ["CRISIS_PHRASES", "CrisisVerdict", "classify", "matched_phrases"]
