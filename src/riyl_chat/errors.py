"""Exception hierarchy shared by the gateway client and service."""

from __future__ import annotations

from typing import Optional


class RiylChatError(Exception):
    """Base class for riyl-chat errors."""


class GatewayError(RiylChatError):
    """The completion gateway failed to produce a reply."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class QuotaExceededError(GatewayError):
    """The upstream model rejected the request for rate or quota exhaustion."""
