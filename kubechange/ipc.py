"""Messages exchanged between the user interface and the agent."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Input:
    """User input sent from the interface to the agent."""

    text: str
    cluster_name: str = ""


class OutputType(str, Enum):
    """Kind of message the agent sends back to the interface."""

    TEXT = "text"
    THINK = "think"
    TOOL_START = "tool_call_start"
    TOOL_RESULT = "tool_result"
    DONE = "done"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


@dataclass
class Output:
    """A message from the agent; which fields are set depends on ``type``."""

    type: OutputType
    content: str = ""
    tool_name: str = ""
    tool_args: str = ""
    tool_result: str = ""
    tool_success: bool = False
    cluster_name: str = ""
    message_type: str = ""
    session_id: str = ""
    state: str = ""
    plan: Any = None
    diff: Any = None
    clarify_question: Any = None
    requires_confirm: bool = False