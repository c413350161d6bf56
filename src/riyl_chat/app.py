"""Application wiring: builds stores, gateway clients and AI backends from config."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI

from riyl_chat.ai.client import AIClient, AnthropicClient, OpenAIClient
from riyl_chat.config import AppConfig
from riyl_chat.core.session import ChatSessionManager
from riyl_chat.core.types import AIBackend
from riyl_chat.gateway.client import HttpCompletionGateway
from riyl_chat.gateway.server import create_app
from riyl_chat.log import get_logger
from riyl_chat.storage.store import FileKeyValueStore
from riyl_chat.ui.terminal import TerminalChat

logger = get_logger(__name__)


class RiylChatApp:
    """Terminal chat client: persisted session manager over the HTTP gateway."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.store = FileKeyValueStore(Path(config.storage.path))
        self.gateway = HttpCompletionGateway(
            base_url=config.gateway.base_url,
            timeout=config.gateway.timeout,
        )
        self.session_manager = ChatSessionManager(
            self.store,
            self.gateway,
            storage_key=config.storage.key,
        )

    async def run(self) -> None:
        logger.info(
            "chat_started",
            gateway=self.config.gateway.base_url,
            store=str(self.store.path),
        )
        try:
            await TerminalChat(self.session_manager).run()
        finally:
            await self.gateway.aclose()
            logger.info("chat_stopped")


def create_ai_client(config: AppConfig) -> AIClient:
    """Create an AI client based on the configured backend."""
    match config.ai.backend:
        case AIBackend.OPENAI:
            if not config.openai:
                raise ValueError("AI backend 'openai' selected but no 'openai' section in config")
            return OpenAIClient(config.openai)
        case AIBackend.ANTHROPIC:
            if not config.anthropic:
                raise ValueError(
                    "AI backend 'anthropic' selected but no 'anthropic' section in config"
                )
            return AnthropicClient(config.anthropic)
        case _:
            raise ValueError(f"Unknown AI backend: {config.ai.backend}")


def create_gateway_app(config: AppConfig) -> FastAPI:
    app = create_app(create_ai_client(config), config.ai)
    logger.info("gateway_created", backend=config.ai.backend, model=config.ai.model)
    return app
