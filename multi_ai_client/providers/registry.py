"""Provider 配置。

本模块把 APIType 映射到该后端的固定信息：

- default_endpoint: 未指定 api_endpoint 时使用的完整 URL。
- settings_cls: 对应的 ModelSettings 实现。

APIType 是封闭集合，新增后端需要同时在这里登记。
"""

from dataclasses import dataclass
from typing import Mapping, Type

from multi_ai_client.domain.exceptions import UnsupportedAPITypeError
from multi_ai_client.domain.models import APIType
from multi_ai_client.providers.anthropic_settings import AnthropicModelSettings
from multi_ai_client.providers.base import BaseModelSettings
from multi_ai_client.providers.mistral_settings import MistralModelSettings
from multi_ai_client.providers.openai_settings import OpenAIModelSettings

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class ProviderConfig:
    """某个后端的整体配置。"""

    api_type: APIType
    default_endpoint: str
    settings_cls: Type[BaseModelSettings]


OPENAI_CONFIG = ProviderConfig(
    api_type=APIType.OPENAI,
    default_endpoint="https://api.openai.com/v1/chat/completions",
    settings_cls=OpenAIModelSettings,
)

MISTRAL_CONFIG = ProviderConfig(
    api_type=APIType.MISTRAL,
    default_endpoint="https://api.mistral.ai/v1/chat/completions",
    settings_cls=MistralModelSettings,
)

ANTHROPIC_CONFIG = ProviderConfig(
    api_type=APIType.ANTHROPIC,
    default_endpoint="https://api.anthropic.com/v1/messages",
    settings_cls=AnthropicModelSettings,
)


PROVIDER_REGISTRY: Mapping[APIType, ProviderConfig] = {
    APIType.OPENAI: OPENAI_CONFIG,
    APIType.MISTRAL: MISTRAL_CONFIG,
    APIType.ANTHROPIC: ANTHROPIC_CONFIG,
}


def get_provider_config(api_type: APIType) -> ProviderConfig:
    """根据 APIType 获取 ProviderConfig，未登记的类型抛出 UnsupportedAPITypeError。"""

    try:
        return PROVIDER_REGISTRY[api_type]
    except (KeyError, TypeError):
        raise UnsupportedAPITypeError(api_type) from None


def new_model_settings(api_type: APIType, model_name: str) -> BaseModelSettings:
    """为指定后端创建只设置了模型名的 ModelSettings。"""

    return get_provider_config(api_type).settings_cls(model_name)
