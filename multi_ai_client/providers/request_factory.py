"""把 ModelDefinition + Chat 转换成可以直接发送的 HTTP 请求。

- URL: api_endpoint 优先，否则使用该 APIType 的默认端点；无法解析的 URL 在构造时即报错。
- 认证: Anthropic 使用 x-api-key + anthropic-version，其余使用 Bearer Token；
  未配置密钥时不发送认证头。
"""

from dataclasses import dataclass, field
from typing import Dict

import httpx

from multi_ai_client.domain.chat import Chat
from multi_ai_client.domain.exceptions import InvalidEndpointError
from multi_ai_client.domain.models import APIType
from multi_ai_client.providers.definition import ModelDefinition
from multi_ai_client.providers.registry import ANTHROPIC_VERSION, get_provider_config


@dataclass(frozen=True)
class PreparedRequest:
    """已经完成序列化的请求，交给传输层直接发送。"""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def resolve_endpoint(definition: ModelDefinition) -> str:
    api = definition.api_settings
    # 指定了 endpoint 时同样要求 api_type 已登记
    provider_cfg = get_provider_config(api.api_type)
    endpoint = api.api_endpoint or provider_cfg.default_endpoint
    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as e:
        raise InvalidEndpointError(endpoint, str(e)) from None
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidEndpointError(endpoint, "expected an absolute http(s) URL")
    return endpoint


def build_headers(definition: ModelDefinition) -> Dict[str, str]:
    api = definition.api_settings
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if api.api_type == APIType.ANTHROPIC:
        headers["anthropic-version"] = ANTHROPIC_VERSION
    if api.api_key:
        if api.api_type == APIType.ANTHROPIC:
            headers["x-api-key"] = api.api_key
        else:
            headers["Authorization"] = f"Bearer {api.api_key}"
    return headers


def build_request(definition: ModelDefinition, chat: Chat) -> PreparedRequest:
    """构造 POST 请求。

    Raises:
        UnsupportedAPITypeError: APIType 不受支持。
        InvalidEndpointError: 端点不是合法的 http(s) URL。
    """

    url = resolve_endpoint(definition)
    return PreparedRequest(
        method="POST",
        url=url,
        headers=build_headers(definition),
        body=definition.model_settings.make_body(chat),
    )
