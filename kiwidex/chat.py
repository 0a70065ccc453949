from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

Sender = Literal["player", "animal"]

MAX_MESSAGES = 10
CONTEXT_MESSAGES = 6


@dataclass(frozen=True, slots=True)
class ChatMessage:
    sender: Sender
    text: str
    ts: datetime


@dataclass(slots=True)
class ChatLog:
    """Bounded conversation history with one animal."""

    animal_id: str
    messages: list[ChatMessage] = field(default_factory=list)

    def add(self, sender: Sender, text: str) -> None:
        self.messages.append(ChatMessage(sender=sender, text=text, ts=datetime.now(tz=UTC)))
        if len(self.messages) > MAX_MESSAGES:
            del self.messages[:-MAX_MESSAGES]

    def last_animal_message(self) -> str | None:
        return next((m.text for m in reversed(self.messages) if m.sender == "animal"), None)

    def clear(self) -> None:
        self.messages.clear()

    def render(self, *, animal_name: str) -> str:
        if not self.messages:
            return "This is your first conversation."
        lines = []
        for m in self.messages[-CONTEXT_MESSAGES:]:
            who = "Player" if m.sender == "player" else animal_name
            lines.append(f"{who}: {m.text}")
        return "\n".join(lines)
