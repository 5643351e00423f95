"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
调用方可以统一捕获并按 code 区分处理。

构造期错误（历史格式、配置项、API 类型、空模型列表）同步抛出；
流式任务内部的网络/API 错误只在 worker 内部使用，不会直接抛给调用方。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "UNKNOWN_OPTION"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 key、index 等）。
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
    """Provider 返回非 2xx 状态码时抛出。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""


class MalformedHistoryError(ValidationError):
    """消息历史中 system 消息不在首位，或出现多条 system 消息。"""

    def __init__(self, message: str, **extra):
        super().__init__(code="MALFORMED_HISTORY", message=message, **extra)


class NoDefinitionsError(ValidationError):
    """客户端没有任何模型定义时发起请求。"""

    def __init__(self, message: str = "no model definitions added to client", **extra):
        super().__init__(code="NO_DEFINITIONS", message=message, **extra)


class UnsupportedAPITypeError(ValidationError):
    """无法识别的 APIType，无法解析端点或构造配置。"""

    def __init__(self, api_type, **extra):
        super().__init__(
            code="UNSUPPORTED_API_TYPE",
            message=f"Unsupported API type: {api_type!r}",
            api_type=api_type,
            **extra,
        )


class UnknownOptionError(ValidationError):
    """配置项名称不在该 Provider 支持的集合中。"""

    def __init__(self, key: str, provider: str, **extra):
        super().__init__(
            code="UNKNOWN_OPTION",
            message=f"Unknown option {key!r} for provider {provider}",
            key=key,
            provider=provider,
            **extra,
        )


class RequiredFieldNilError(ValidationError):
    """必填字段（模型名、Anthropic max_tokens）被设置为 None。"""

    def __init__(self, key: str, **extra):
        super().__init__(
            code="REQUIRED_FIELD_NIL",
            message=f"Option {key!r} is required and may not be None",
            key=key,
            **extra,
        )


class InvalidOptionValueError(ValidationError):
    """配置项的值类型错误或超出允许范围。"""

    def __init__(self, key: str, message: str, **extra):
        super().__init__(code="INVALID_OPTION_VALUE", message=message, key=key, **extra)


class InvalidEndpointError(ValidationError):
    """api_endpoint 无法解析为 http(s) URL。"""

    def __init__(self, endpoint: str, reason: str, **extra):
        super().__init__(
            code="INVALID_ENDPOINT",
            message=f"Invalid API endpoint {endpoint!r}: {reason}",
            endpoint=endpoint,
            **extra,
        )
