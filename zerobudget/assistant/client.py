# assistant/client.py
"""Narrow request/response contract with the hosted reasoning backend."""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Protocol

import anthropic

logger = logging.getLogger(__name__)

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
ASSISTANT_MODEL = os.getenv("ASSISTANT_MODEL", "claude-sonnet-4-5")
ASSISTANT_MAX_TOKENS = int(os.getenv("ASSISTANT_MAX_TOKENS", "2048"))
# Longer than a plain request: one chat turn may take several tool rounds
ASSISTANT_TIMEOUT = float(os.getenv("ASSISTANT_TIMEOUT", "60"))


@dataclass
class ModelResponse:
    """One reasoning step: why the model stopped and its content blocks.

    Blocks are plain dicts in the Messages API shape, e.g.
    ``{"type": "text", "text": ...}`` or
    ``{"type": "tool_use", "id": ..., "name": ..., "input": {...}}``.
    """
    stop_reason: str
    content: List[dict] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(b.get("text", "") for b in self.content if b.get("type") == "text")

    @property
    def tool_calls(self) -> List[dict]:
        return [b for b in self.content if b.get("type") == "tool_use"]


class ReasoningClient(Protocol):
    def create(self, system: str, messages: List[dict], tools: List[dict]) -> ModelResponse:
        ...


class AnthropicReasoningClient:
    """ReasoningClient backed by the Anthropic Messages API.

    Failures are not retried; they surface to the caller as
    ``anthropic.APIError``.
    """

    def __init__(
        self,
        api_key: str,
        model: str = ASSISTANT_MODEL,
        max_tokens: int = ASSISTANT_MAX_TOKENS,
        timeout: float = ASSISTANT_TIMEOUT,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def create(self, system: str, messages: List[dict], tools: List[dict]) -> ModelResponse:
        logger.debug(f"Calling {self.model} with {len(messages)} messages")
        response = self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            tools=tools,
            messages=messages,
        )
        return ModelResponse(
            stop_reason=response.stop_reason,
            content=[block.model_dump(exclude_none=True) for block in response.content],
        )
