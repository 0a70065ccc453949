from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from autogen import ConversableAgent

from kiwidex.agents.autogen_config import llm_config_from_env
from kiwidex.agents.base import AgentReply, JsonSchema
from kiwidex.core.context import RenderedContext


def _last_text(messages: list[Any]) -> str:
    for msg in reversed(messages):
        content = msg.get("content") if isinstance(msg, dict) else None
        if isinstance(content, str) and content.strip():
            return content.strip()
    return ""


@dataclass(slots=True)
class Ag2GuideAgent:
    """Wildlife guide backed by one AG2 `ConversableAgent` turn per request.

    Model settings come from OPENAI_MODEL / OPENAI_API_KEY / OPENAI_BASE_URL
    (see autogen_config). The blocking AG2 run happens on a worker thread so
    request handlers stay responsive.
    """

    name: str
    model: str

    def _run_once(self, prompt: str, system_prompt: str, response_format: dict[str, Any] | None) -> str:
        guide = ConversableAgent(
            name=self.name,
            system_message=system_prompt,
            llm_config=llm_config_from_env(default_model=self.model),
            human_input_mode="NEVER",
        )

        # Extra kwargs go straight through to the OpenAI client.
        kwargs: dict[str, Any] = {} if response_format is None else {"response_format": response_format}
        run = guide.run(message=prompt, max_turns=1, **kwargs)
        run.process()

        text = _last_text(list(run.messages))
        if not text and isinstance(run.summary, str):
            text = run.summary.strip()
        return text

    async def generate(
        self,
        *,
        prompt: str,
        ctx: RenderedContext,
        structured_output: JsonSchema | None = None,
    ) -> AgentReply:
        response_format = structured_output.response_format() if structured_output is not None else None
        text = await asyncio.to_thread(self._run_once, prompt, ctx.system_prompt, response_format)
        return AgentReply(
            kind="text",
            content=text,
            metadata={"model": self.model, "structured": structured_output is not None},
        )
