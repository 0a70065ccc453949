from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from kiwidex.core.context import RenderedContext


@dataclass(frozen=True, slots=True)
class AgentReply:
    kind: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class JsonSchema:
    """JSON Schema for OpenAI-style structured outputs."""

    name: str
    schema: dict[str, Any]
    strict: bool = True

    def response_format(self) -> dict[str, Any]:
        return {
            "type": "json_schema",
            "json_schema": {"name": self.name, "schema": self.schema, "strict": self.strict},
        }


class Agent(Protocol):
    name: str

    async def generate(self, *, prompt: str, ctx: RenderedContext) -> AgentReply:  # pragma: no cover
        ...


async def ask_agent(*, agent: Agent, prompt: str, ctx: RenderedContext, schema: JsonSchema | None = None) -> AgentReply:
    """Call an agent, passing the schema only to agents that accept one."""

    if schema is not None:
        try:
            return await agent.generate(prompt=prompt, ctx=ctx, structured_output=schema)  # type: ignore[call-arg]
        except TypeError:
            pass
    return await agent.generate(prompt=prompt, ctx=ctx)


class ContentUnavailable(RuntimeError):
    """The remote model produced nothing usable."""
