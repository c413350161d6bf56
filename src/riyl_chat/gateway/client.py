"""Completion gateway interface consumed by the session manager."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from riyl_chat.errors import GatewayError, QuotaExceededError
from riyl_chat.log import get_logger

logger = get_logger(__name__)

CHAT_PATH = "/api/chat"


class CompletionGateway(ABC):
    """Turns a prompt into model-generated text."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the reply text for *prompt*.

        Raises QuotaExceededError when the upstream quota is exhausted and
        GatewayError for any other failure.
        """
        ...


class HttpCompletionGateway(CompletionGateway):
    """Talks to the gateway service's ``POST /api/chat`` endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def complete(self, prompt: str) -> str:
        logger.debug("gateway_request", prompt_length=len(prompt))
        try:
            response = await self._client.post(CHAT_PATH, json={"prompt": prompt})
        except httpx.HTTPError as e:
            logger.error("gateway_transport_error", error=str(e))
            raise GatewayError(f"Gateway request failed: {e}") from e

        if response.status_code == 429:
            raise QuotaExceededError(_detail(response), status_code=429)
        if not response.is_success:
            raise GatewayError(_detail(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError("Gateway returned a non-JSON body", response.status_code) from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text:
            raise GatewayError("Gateway returned no content", response.status_code)

        logger.debug("gateway_response", status=response.status_code, length=len(text))
        return text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _detail(response: httpx.Response) -> str:
    """Best-effort error text from a failed gateway response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict) and isinstance(data.get("response"), str):
        return data["response"]
    return f"HTTP {response.status_code}"
