"""Completion gateway service: ``POST /api/chat`` over an AI backend."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from riyl_chat.ai.client import AIClient, is_quota_error
from riyl_chat.ai.prompts import build_riyl_prompt
from riyl_chat.config import AIConfig
from riyl_chat.gateway.client import CHAT_PATH
from riyl_chat.log import get_logger

logger = get_logger(__name__)

NO_PROMPT_MESSAGE = "No prompt provided"
METHOD_NOT_ALLOWED_MESSAGE = "Method Not Allowed"
QUOTA_MESSAGE = (
    "You have exceeded your API usage quota. Please check your plan or try again later."
)
INTERNAL_ERROR_MESSAGE = "Internal server error"


class ChatRequest(BaseModel):
    # Any truthy JSON value counts as a prompt
    prompt: Any = None


class ChatResponse(BaseModel):
    response: str


class HealthResponse(BaseModel):
    status: str


def _reply(status_code: int, text: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"response": text})


def create_app(ai_client: AIClient, ai_config: AIConfig) -> FastAPI:
    """Build the gateway app around an AI backend."""
    app = FastAPI(title="riyl-chat gateway")

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Unparseable or non-object bodies carry no prompt
        logger.info("chat_body_rejected", path=request.url.path, errors=len(exc.errors()))
        return _reply(400, NO_PROMPT_MESSAGE)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post(CHAT_PATH, response_model=ChatResponse)
    async def chat(request: Optional[ChatRequest] = None):
        if request is None or not request.prompt:
            return _reply(400, NO_PROMPT_MESSAGE)

        prompt = build_riyl_prompt(str(request.prompt), ai_config.recommendation_count)
        try:
            result = await ai_client.complete(
                system=ai_config.system_prompt,
                prompt=prompt,
                model=ai_config.model,
                max_tokens=ai_config.max_tokens,
                temperature=ai_config.temperature,
            )
        except Exception as exc:
            if is_quota_error(exc):
                logger.warning("upstream_quota_exceeded", model=ai_config.model)
                return _reply(429, QUOTA_MESSAGE)
            logger.exception("upstream_error", model=ai_config.model, error=str(exc))
            return _reply(500, INTERNAL_ERROR_MESSAGE)

        if not result.text:
            logger.error("upstream_empty_reply", model=ai_config.model)
            return _reply(500, INTERNAL_ERROR_MESSAGE)

        logger.info(
            "chat_completed",
            model=ai_config.model,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
        )
        return ChatResponse(response=result.text)

    @app.api_route(CHAT_PATH, methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
    async def chat_wrong_method() -> JSONResponse:
        return _reply(405, METHOD_NOT_ALLOWED_MESSAGE)

    return app
