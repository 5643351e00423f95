"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置。

核心分发逻辑不读取任何密钥：每个 ModelDefinition 自带 APISettings。
这里的 *_api_key 仅供示例脚本等外层使用。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("MULTI_AI_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- 网络与并发 ----
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒），同时作为流式读取的单次等待上限")
    max_concurrent_streams: int = Field(default=8, ge=1, le=64, description="同时进行的流式请求数上限")
    feed_buffer_size: int = Field(default=64, ge=1, description="增量输出队列容量，消费者过慢时生产者会阻塞")
    report_stream_errors: bool = Field(
        default=False,
        description="流失败时是否额外输出一个带 error 标记的 DeltaChunk",
    )

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否截断日志内容")

    # ---- 示例脚本使用的密钥 ----
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API 密钥")
    mistral_api_key: Optional[str] = Field(default=None, description="Mistral API 密钥")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API 密钥")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
