from __future__ import annotations

import json

from kiwidex.agents.base import Agent, ContentUnavailable, JsonSchema, ask_agent
from kiwidex.core.context import RenderedContext
from kiwidex.prompts import render_prompt

MAX_REPLY_CHARS = 1200


class ChatReplyError(ContentUnavailable):
    pass


CHAT_RESPONSE_SCHEMA = JsonSchema(
    name="animal_reply",
    schema={
        "type": "object",
        "properties": {
            "response": {
                "type": "string",
                "description": "The animal's reply, in the first person.",
                "minLength": 1,
                "maxLength": MAX_REPLY_CHARS,
            }
        },
        "required": ["response"],
        "additionalProperties": False,
    },
    strict=True,
)


def extract_reply(text: str) -> str:
    """Prefer the structured `response` field; fall back to the raw text."""

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        resp = parsed.get("response")
        if isinstance(resp, str) and resp.strip():
            return resp.strip()[:MAX_REPLY_CHARS]

    reply = text.strip()
    if not reply:
        raise ChatReplyError("Empty reply")
    return reply[:MAX_REPLY_CHARS]


async def reply_as_animal_with_agent(
    *,
    agent: Agent,
    ctx: RenderedContext,
    name: str,
    question: str,
    history: str,
    max_words: int = 100,
) -> str:
    prompt = render_prompt("chat.txt", name=name, question=question, history=history, max_words=max_words)
    reply = await ask_agent(agent=agent, prompt=prompt, ctx=ctx, schema=CHAT_RESPONSE_SCHEMA)
    return extract_reply(reply.content)
