"""Provider 请求构造层。

该包下的模块负责：
- 声明各后端支持的配置项 (options)。
- 定义 ModelSettings 抽象 (base) 与三个具体实现。
- 维护 APIType 与默认端点的映射 (registry)。
- 把模型定义和对话转换为 HTTP 请求 (request_factory)。
"""

from multi_ai_client.providers.anthropic_settings import AnthropicModelSettings
from multi_ai_client.providers.base import BaseModelSettings
from multi_ai_client.providers.definition import ModelDefinition
from multi_ai_client.providers.mistral_settings import MistralModelSettings
from multi_ai_client.providers.openai_settings import OpenAIModelSettings
from multi_ai_client.providers.registry import new_model_settings
from multi_ai_client.providers.request_factory import PreparedRequest, build_request

__all__ = [
    "AnthropicModelSettings",
    "BaseModelSettings",
    "MistralModelSettings",
    "ModelDefinition",
    "OpenAIModelSettings",
    "PreparedRequest",
    "build_request",
    "new_model_settings",
]
