"""领域层模型与状态机。

包含：
- models: 统一的 ChatMessage / ChatRequest / ChatResult / CompletionResult 模型。
- session: 会话状态 SessionState 与纯函数 reduce。
- exceptions: 业务异常类型定义。
"""
