from __future__ import annotations

import os
from typing import cast

from kiwidex.agents.ag2_backend import Ag2GuideAgent
from kiwidex.agents.base import Agent


def llm_configured() -> bool:
    return bool(os.environ.get("OPENAI_API_KEY") or os.environ.get("OPENAI_BASE_URL"))


def create_default_agent(*, name: str = "wildlife_guide") -> Agent | None:
    """Create the default LLM-backed agent, or None when no model is configured.

    Currently uses AG2/autogen and reads model configuration from env. Without an
    agent the content advisor serves its local fallback content.
    """

    if not llm_configured():
        return None
    model = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    return cast(Agent, Ag2GuideAgent(name=name, model=model))
