# assistant/loop.py
"""Bounded tool-calling loop for one chat turn.

    AWAITING_MODEL_RESPONSE -> (TOOL_USE -> EXECUTING_TOOLS -> AWAITING_MODEL_RESPONSE)* -> DONE

Tool calls from one response run sequentially and in order, since a later
call may depend on an earlier one (create a category, then allocate to it).
A failing call is rolled back and reported to the model as an ``is_error``
tool result; calls already applied stay committed and the loop carries on.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError as InputValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import BudgetError
from .client import ModelResponse, ReasoningClient
from .context import load_snapshot, render_system_prompt
from .tools import TOOLS, Tool, ToolContext, tool_definitions

logger = logging.getLogger(__name__)

MAX_ITERATIONS = int(os.getenv("ASSISTANT_MAX_ITERATIONS", "6"))

# Action descriptions start with one of these; the client refetches the matching views
REFRESH_PREFIXES = {
    "budget": (
        "Assigned", "Reset", "Created category", "Updated category", "Deleted category",
        "Recorded transaction", "Updated transaction", "Deleted transaction",
        # Starting balances feed ready_to_assign
        "Created account", "Updated account",
    ),
    "transactions": (
        "Recorded transaction", "Updated transaction", "Deleted transaction",
        "Deleted category", "Updated account",
    ),
    "accounts": (
        "Created account", "Updated account",
        "Recorded transaction", "Updated transaction", "Deleted transaction",
    ),
}


class LoopState(str, Enum):
    AWAITING_MODEL_RESPONSE = "awaiting_model_response"
    TOOL_USE = "tool_use"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"


def needs_refresh(actions: List[str], view: str) -> bool:
    prefixes = REFRESH_PREFIXES[view]
    return any(action.startswith(prefixes) for action in actions)


@dataclass
class ChatResult:
    content: str
    actions_taken: List[str] = field(default_factory=list)
    iterations: int = 0
    truncated: bool = False

    @property
    def refresh_budget(self) -> bool:
        return needs_refresh(self.actions_taken, "budget")

    @property
    def refresh_transactions(self) -> bool:
        return needs_refresh(self.actions_taken, "transactions")

    @property
    def refresh_accounts(self) -> bool:
        return needs_refresh(self.actions_taken, "accounts")


def _error_message(exc: Exception) -> str:
    if isinstance(exc, BudgetError):
        return exc.message
    if isinstance(exc, InputValidationError):
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        return f"Invalid input {location}: {first['msg']}" if location else f"Invalid input: {first['msg']}"
    return str(exc)


class AssistantLoop:
    """Runs one conversation turn against a ReasoningClient."""

    def __init__(
        self,
        db: Session,
        client: ReasoningClient,
        year: int,
        month: int,
        max_iterations: int = MAX_ITERATIONS,
        tools: Optional[Dict[str, Tool]] = None,
    ):
        self.db = db
        self.client = client
        self.context = ToolContext(db=db, year=year, month=month)
        self.max_iterations = max_iterations
        self.tools = TOOLS if tools is None else tools
        self.state = LoopState.AWAITING_MODEL_RESPONSE
        self.actions: List[str] = []

    def execute_tool(self, call: dict) -> dict:
        """Run one tool_use block and return its tool_result block."""
        name = call.get("name")
        result = {"type": "tool_result", "tool_use_id": call.get("id")}
        try:
            tool = self.tools.get(name)
            if tool is None:
                raise BudgetError(f"Unknown tool: {name}")
            outcome = tool.run(self.context, call.get("input"))
        except (BudgetError, InputValidationError, SQLAlchemyError) as exc:
            self.db.rollback()
            logger.warning(f"Tool {name} failed: {exc}")
            return self._error_result(result, exc)
        except Exception as exc:
            self.db.rollback()
            logger.warning(f"Tool {name} raised {type(exc).__name__}", exc_info=True)
            return self._error_result(result, exc)

        logger.info(f"Tool {name} succeeded: {outcome.actions}")
        self.actions.extend(outcome.actions)
        result["content"] = json.dumps(jsonable_encoder(outcome.data))
        return result

    @staticmethod
    def _error_result(result: dict, exc: Exception) -> dict:
        result["content"] = json.dumps({"error": _error_message(exc)})
        result["is_error"] = True
        return result

    def run(self, messages: List[dict], today: Optional[date] = None) -> ChatResult:
        snapshot = load_snapshot(self.db, self.context.year, self.context.month)
        system = render_system_prompt(snapshot, today or date.today())
        definitions = tool_definitions(self.tools)
        conversation = [dict(m) for m in messages]

        iterations = 0
        texts: List[str] = []
        final_text: Optional[str] = None
        response: Optional[ModelResponse] = None

        self.state = LoopState.AWAITING_MODEL_RESPONSE
        while self.state is not LoopState.DONE:
            if self.state is LoopState.AWAITING_MODEL_RESPONSE:
                if iterations >= self.max_iterations:
                    logger.warning(f"Assistant stopped after {iterations} round-trips")
                    break
                iterations += 1
                response = self.client.create(system, conversation, definitions)
                if response.text:
                    texts.append(response.text)
                if response.stop_reason == "tool_use" and response.tool_calls:
                    self.state = LoopState.TOOL_USE
                else:
                    # end_turn, max_tokens or anything unexpected: keep what we have
                    final_text = response.text
                    self.state = LoopState.DONE

            elif self.state is LoopState.TOOL_USE:
                conversation.append({"role": "assistant", "content": response.content})
                self.state = LoopState.EXECUTING_TOOLS

            elif self.state is LoopState.EXECUTING_TOOLS:
                results = [self.execute_tool(call) for call in response.tool_calls]
                conversation.append({"role": "user", "content": results})
                self.state = LoopState.AWAITING_MODEL_RESPONSE

        truncated = self.state is not LoopState.DONE
        self.state = LoopState.DONE
        if final_text is None:
            final_text = self._truncated_text(texts, iterations)

        return ChatResult(
            content=final_text,
            actions_taken=list(self.actions),
            iterations=iterations,
            truncated=truncated,
        )

    def _truncated_text(self, texts: List[str], iterations: int) -> str:
        parts = list(texts)
        if not parts:
            parts.append(f"I stopped after {iterations} steps before finishing.")
        if self.actions:
            parts.append("Done so far: " + "; ".join(self.actions) + ".")
        return "\n\n".join(parts)
