"""Shared types and enumerations."""

from __future__ import annotations

from enum import StrEnum


class Sender(StrEnum):
    USER = "user"
    BOT = "bot"


class AIBackend(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
