"""Configuration loader with YAML parsing, env-var interpolation, and Pydantic validation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from riyl_chat.core.types import AIBackend
from riyl_chat.storage.codec import DEFAULT_STORAGE_KEY


class AIConfig(BaseModel):
    backend: AIBackend = AIBackend.OPENAI
    model: str = "gpt-3.5-turbo"
    system_prompt: str = "You are a helpful chatbot."
    recommendation_count: int = Field(default=9, ge=1)
    max_tokens: int = 1024
    temperature: float = 0.7


class OpenAIConfig(BaseModel):
    api_key: str
    base_url: Optional[str] = None
    max_retries: int = 0
    timeout: int = 120


class AnthropicConfig(BaseModel):
    api_key: str
    base_url: Optional[str] = None
    max_retries: int = 0
    timeout: int = 120


class GatewayConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    base_url: str = "http://127.0.0.1:8000"
    timeout: Optional[float] = 60.0


class StorageConfig(BaseModel):
    path: str = "./data/conversations.json"
    key: str = DEFAULT_STORAGE_KEY


class AppConfig(BaseModel):
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    data_dir: str = "./data"
    ai: AIConfig = Field(default_factory=AIConfig)
    openai: Optional[OpenAIConfig] = None
    anthropic: Optional[AnthropicConfig] = None
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


def _interpolate_env_vars(text: str, extra: dict[str, str] | None = None) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        if extra and var_name in extra:
            return extra[var_name]
        value = os.environ.get(var_name)
        if value is None:
            return match.group(0)
        return value

    return _ENV_VAR_PATTERN.sub(_replace, text)


def load_config(config_path: str | Path = "config.yaml", env_path: str | Path = ".env") -> AppConfig:
    """Load and validate configuration from YAML file with env-var interpolation."""
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    raw_text = config_file.read_text(encoding="utf-8")

    # First pass: extract data_dir for self-referencing
    raw_data = yaml.safe_load(raw_text) or {}
    data_dir = str(raw_data.get("data_dir", "./data"))
    data_dir = _interpolate_env_vars(data_dir)

    # Second pass: interpolate all env vars
    interpolated = _interpolate_env_vars(raw_text, extra={"data_dir": data_dir})
    data = yaml.safe_load(interpolated) or {}

    return AppConfig(**data)
