"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError。
Provider 只负责抛出，CompletionGateway 负责把它们转换为 CompletionFailure，
SupportSession 是最终处理者，异常不会越过会话边界。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "RATE_LIMIT"）。
        message: 用户可读错误信息。
        http_status: 远端返回的 HTTP 状态码，默认 400。
        extra: 其他补充字段（例如 provider 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(BusinessError):
    """第三方 API 返回其他非 2xx 错误时抛出。"""


class RateLimitError(BusinessError):
    """Provider 限流或配额耗尽（HTTP 429）。"""


class AuthenticationError(BusinessError):
    """Provider 拒绝凭证（HTTP 401）。"""


class ServiceUnavailableError(ApiError):
    """Provider 内部错误（HTTP 5xx）。"""


class ValidationError(BusinessError):
    """参数校验失败。"""


class ConfigurationError(BusinessError):
    """凭证缺失或无效；对网关是致命的，对进程不是。"""
