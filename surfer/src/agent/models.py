"""
Agent data model

The decision service answers each round with exactly one Action. Actions are a
closed union tagged by the ``action`` field, e.g.

    {"action": "Click", "selector": "[data-eid=\\"[e3]\\"]"}

and are immutable once parsed.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def is_terminal(self) -> bool:
        return False

    def describe(self) -> str:
        return self.action  # type: ignore[attr-defined]


class Navigate(_Action):
    action: Literal["Navigate"] = "Navigate"
    url: str

    def describe(self) -> str:
        return f"Navigate to {self.url}"


class WaitFor(_Action):
    action: Literal["WaitFor"] = "WaitFor"
    selector: str
    timeout_ms: int = Field(..., ge=0)

    def describe(self) -> str:
        return f"Wait up to {self.timeout_ms} ms for {self.selector}"


class TypeInto(_Action):
    action: Literal["TypeInto"] = "TypeInto"
    selector: str
    text: str

    def describe(self) -> str:
        return f'Type "{self.text}" into {self.selector}'


class Click(_Action):
    action: Literal["Click"] = "Click"
    selector: str

    def describe(self) -> str:
        return f"Click {self.selector}"


class PressKey(_Action):
    action: Literal["PressKey"] = "PressKey"
    key: str

    def describe(self) -> str:
        return f"Press {self.key}"


class Extract(_Action):
    action: Literal["Extract"] = "Extract"
    selector: str
    label: str

    def describe(self) -> str:
        return f"Extract {self.selector} as '{self.label}'"


class Screenshot(_Action):
    action: Literal["Screenshot"] = "Screenshot"

    def describe(self) -> str:
        return "Take a screenshot"


class NewTab(_Action):
    action: Literal["NewTab"] = "NewTab"

    def describe(self) -> str:
        return "Open a new tab"


class Done(_Action):
    action: Literal["Done"] = "Done"
    summary: str

    @property
    def is_terminal(self) -> bool:
        return True

    def describe(self) -> str:
        return f"Done: {self.summary}"


Action = Annotated[
    Union[Navigate, WaitFor, TypeInto, Click, PressKey, Extract, Screenshot, NewTab, Done],
    Field(discriminator="action"),
]

ACTION_TAGS = (
    "Navigate",
    "WaitFor",
    "TypeInto",
    "Click",
    "PressKey",
    "Extract",
    "Screenshot",
    "NewTab",
    "Done",
)


class Extraction(BaseModel):
    label: str
    content: str


class PageState(BaseModel):
    """What the agent observes after executing an action."""

    url: str = "unknown"
    title: str = "untitled"
    dom_snapshot: str = ""
    extracted: List[Extraction] = Field(default_factory=list)
    error: Optional[str] = None

    def to_observation(self) -> str:
        text = f"Page URL: {self.url}\nTitle: {self.title}\n\nDOM:\n{self.dom_snapshot}"
        if self.error:
            text += f"\n\nERROR from last step: {self.error}"
        for item in self.extracted:
            text += f"\n\nExtracted [{item.label}]: {item.content}"
        return text


class ChatMessage(BaseModel):
    """A turn in the conversation sent to the decision service."""

    role: Literal["system", "user", "assistant"]
    content: str
