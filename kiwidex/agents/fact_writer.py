from __future__ import annotations

import json

from kiwidex.agents.base import Agent, ContentUnavailable, JsonSchema, ask_agent
from kiwidex.api.models import Difficulty, FactItem, FactKind
from kiwidex.core.context import RenderedContext
from kiwidex.prompts import render_prompt

MIN_FACTS = 3
MAX_FACTS = 4


class FactWriteError(ContentUnavailable):
    pass


def parse_fact_items(text: str, *, difficulty: Difficulty) -> list[FactItem]:
    """Parse strict JSON output for educational items.

    Expected: {"items": [{"topic": "...", "content": "...", "kind": "fact"}, ...]}
    A bare list of items is accepted too. Unknown kinds become "fact"; extra
    items beyond the maximum are dropped.
    """

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FactWriteError(f"Invalid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        raise FactWriteError("Expected a list of items")

    items: list[FactItem] = []
    for raw in data:
        if not isinstance(raw, dict):
            continue
        topic = raw.get("topic")
        content = raw.get("content")
        if not isinstance(topic, str) or not topic.strip():
            continue
        if not isinstance(content, str) or not content.strip():
            continue
        try:
            kind = FactKind(str(raw.get("kind", "fact")).strip().lower())
        except ValueError:
            kind = FactKind.fact
        items.append(FactItem(topic=topic.strip(), content=content.strip(), difficulty=difficulty, kind=kind))

    if len(items) < MIN_FACTS:
        raise FactWriteError(f"Expected at least {MIN_FACTS} usable items, got {len(items)}")
    return items[:MAX_FACTS]


_FACTS_SCHEMA = JsonSchema(
    name="educational_items",
    schema={
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "items": {
                "type": "array",
                "minItems": MIN_FACTS,
                "maxItems": MAX_FACTS,
                "items": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "topic": {"type": "string"},
                        "content": {"type": "string"},
                        "kind": {"type": "string", "enum": [k.value for k in FactKind]},
                    },
                    "required": ["topic", "content", "kind"],
                },
            }
        },
        "required": ["items"],
    },
    strict=True,
)


async def write_facts_with_agent(
    *,
    agent: Agent,
    ctx: RenderedContext,
    name: str,
    difficulty: Difficulty,
    max_attempts: int = 2,
) -> list[FactItem]:
    prompt = render_prompt("facts.txt", name=name, difficulty=difficulty.value, min_items=MIN_FACTS, max_items=MAX_FACTS)

    last_err: Exception | None = None
    for _ in range(max_attempts):
        reply = await ask_agent(agent=agent, prompt=prompt, ctx=ctx, schema=_FACTS_SCHEMA)
        try:
            return parse_fact_items(reply.content, difficulty=difficulty)
        except FactWriteError as e:
            last_err = e

    raise FactWriteError(f"Failed to write valid facts after {max_attempts} attempts: {last_err}")
