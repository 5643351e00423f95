"""模型定义：名称 + 连接配置 + 请求体配置。"""

from dataclasses import dataclass

from multi_ai_client.domain.models import APISettings, APIType
from multi_ai_client.providers.base import BaseModelSettings
from multi_ai_client.providers.registry import new_model_settings


@dataclass
class ModelDefinition:
    """一次并行请求中的一个目标模型。

    - name: 便于展示的名称，如 "Claude"。
    - api_settings: 密钥、端点与后端类型。
    - model_settings: 与 api_settings.api_type 对应的请求体配置。
    """

    name: str
    api_settings: APISettings
    model_settings: BaseModelSettings

    @classmethod
    def create(cls, name: str, api_type: APIType, api_key: str, model_name: str) -> "ModelDefinition":
        """使用默认端点创建模型定义，请求体配置中只设置模型名。"""

        return cls(
            name=name,
            api_settings=APISettings(api_key=api_key, api_endpoint="", api_type=api_type),
            model_settings=new_model_settings(api_type, model_name),
        )
