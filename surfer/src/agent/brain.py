"""
Decision client.

Keeps the conversation with the decision service and turns each reply into one
Action. A failed or unparseable reply ends the current task; nothing is retried.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import openai

from surfer.src.utils.config import LLMConfig
from surfer.src.utils.logging import get_logger, log_event

from .conversation import ConversationStore
from .errors import ActionParseError, DecisionError
from .models import Action, ChatMessage, PageState
from .parsing import parse_action

LOGGER = get_logger("brain")

SYSTEM_PROMPT = """You are a browser automation agent. You control a real Chrome browser by issuing ONE step at a time as JSON.

Available actions:
- {"action":"Navigate","url":"https://..."}
- {"action":"WaitFor","selector":"[data-eid=\\"[e0]\\"]","timeout_ms":5000}
- {"action":"TypeInto","selector":"[data-eid=\\"[e0]\\"]","text":"search query"}
- {"action":"Click","selector":"[data-eid=\\"[e0]\\"]"}
- {"action":"PressKey","key":"Enter"}
- {"action":"Extract","selector":"body","label":"main_content"}
- {"action":"Screenshot"}
- {"action":"NewTab"}
- {"action":"Done","summary":"Completed: found the answer is 42"}

Rules:
1. Return ONLY a single JSON object per response. No markdown, no explanation.
2. Target elements by the [eN] ids from the DOM snapshot, with the selector format [data-eid="[eN]"].
3. After Navigate you will be shown the new page DOM. Decide your next step from what you see.
4. Fill inputs with TypeInto, then submit with PressKey "Enter" or Click the submit button.
5. When the user's task is accomplished, reply with Done and a summary of what was achieved.
6. If a step fails, try an alternative approach. If still stuck after 3 attempts, use Done to explain.
7. Keep steps minimal. Do not over-navigate."""


class Brain:
    """Conversation owner and decision service client."""

    def __init__(
        self,
        store: ConversationStore,
        config: Optional[LLMConfig] = None,
        client: Any = None,
    ) -> None:
        self.store = store
        self.config = config or LLMConfig()
        if client is None:
            try:
                client = openai.AsyncOpenAI(
                    api_key=self.config.api_key,
                    base_url=self.config.base_url,
                    timeout=self.config.request_timeout,
                )
            except openai.OpenAIError as exc:
                raise DecisionError("OPENAI_API_KEY not set in environment") from exc
        self.client = client

    def start_task(self, command: str) -> None:
        """Append the task to the running history; earlier tasks stay as context."""
        self.store.append(
            ChatMessage(
                role="user",
                content=f"Task: {command}\n\nThe browser is on the current page. What is your next step?",
            )
        )

    def observe(self, page_state: PageState) -> None:
        self.store.append(ChatMessage(role="user", content=page_state.to_observation()))

    def context_messages(self) -> List[Dict[str, str]]:
        messages = self.store.messages
        window = self.config.context_window
        if window > 0 and len(messages) > window + 1:
            messages = [messages[0]] + messages[-window:]
        return [{"role": m.role, "content": m.content} for m in messages]

    async def decide(self) -> Action:
        """Ask for the next step. Raises DecisionError on any failure."""
        if len(self.store) > self.config.history_warning_threshold:
            log_event(
                LOGGER,
                "history_long",
                messages=len(self.store),
                threshold=self.config.history_warning_threshold,
                level=logging.WARNING,
            )

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=self.context_messages(),
                temperature=self.config.temperature,
            )
        except openai.APIStatusError as exc:
            detail = _service_error_message(exc)
            log_event(LOGGER, "api_error", status=exc.status_code, error=detail, level=logging.ERROR)
            raise DecisionError(f"OpenAI API error ({exc.status_code}): {detail}") from exc
        except openai.OpenAIError as exc:
            log_event(LOGGER, "api_error", error=str(exc), level=logging.ERROR)
            raise DecisionError(f"OpenAI request failed: {exc}") from exc

        content = _first_message_content(response)
        if content is None:
            raise DecisionError(f"No content in LLM response: {response}")

        log_event(LOGGER, "llm_reply", content=content)
        # Recorded before parsing so failed replies stay in the history too.
        self.store.append(ChatMessage(role="assistant", content=content))

        try:
            action = parse_action(content)
        except ActionParseError as exc:
            log_event(LOGGER, "parse_error", error=str(exc), raw=exc.raw[:500], level=logging.ERROR)
            raise
        return action


def _first_message_content(response: Any) -> Optional[str]:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str):
        return None
    return content


def _service_error_message(exc: openai.APIStatusError) -> str:
    body = exc.body
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if body.get("message"):
            return str(body["message"])
    return exc.message or "Unknown API error"
