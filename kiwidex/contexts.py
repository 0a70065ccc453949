from __future__ import annotations

from kiwidex.core.context import GuideContext
from kiwidex.prompts import load_prompt


def make_base_guide_context(*, system_prefix: str = "") -> GuideContext:
    """Construct the shared guide context from prompts/base_guide.txt.

    Extra system-level instructions can be prepended via system_prefix.
    """

    base_rules = load_prompt("base_guide.txt")
    parts: list[str] = []
    if system_prefix.strip():
        parts.append(system_prefix.strip())
    parts.append(base_rules.strip())

    return GuideContext(system_prompt="\n\n".join(parts).strip())
