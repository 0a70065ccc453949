from __future__ import annotations

import pytest

from kiwidex.api.models import Difficulty
from kiwidex.contexts import make_base_guide_context
from kiwidex.core.context import AnimalContext, GuideContext, compose_context
from kiwidex.prompts import PromptLoadError, load_prompt, render_prompt
from kiwidex.session_state import SessionState


def _kiwi_context() -> AnimalContext:
    state = SessionState()
    state.capture("kiwi")
    kiwi = state.get_animal("kiwi")
    assert kiwi is not None
    return AnimalContext.from_record(kiwi)


def test_compose_context_includes_layers() -> None:
    rendered = compose_context(base=GuideContext(system_prompt="BASE"), animal=_kiwi_context(), difficulty=Difficulty.advanced)
    text = rendered.system_prompt

    assert text.startswith("BASE")
    assert "ANIMAL CONTEXT" in text
    assert "Kiwi (Apteryx)" in text
    assert "Insects, Worms, Berries" in text
    assert "conservation status: Endangered" in text
    assert "player intimacy: 1/10" in text
    assert "AUDIENCE LEVEL: advanced" in text


def test_compose_context_without_difficulty() -> None:
    rendered = compose_context(base=GuideContext(system_prompt="BASE"), animal=_kiwi_context())
    assert "AUDIENCE LEVEL" not in rendered.system_prompt
    assert rendered.as_messages() == [{"role": "system", "content": rendered.system_prompt}]


def test_base_guide_context_loads_the_shipped_prompt() -> None:
    ctx = make_base_guide_context(system_prefix="PREFIX")
    assert ctx.system_prompt.startswith("PREFIX")
    assert "New Zealand" in ctx.system_prompt


def test_render_prompt_fills_placeholders() -> None:
    text = render_prompt("quiz.txt", name="Kakapo", difficulty="beginner", min_questions=2, max_questions=3)
    assert "Kakapo" in text
    assert '{"questions"' in text
    assert "{name}" not in text


def test_load_prompt_reports_missing_files() -> None:
    assert load_prompt("chat.txt").endswith("\n")
    with pytest.raises(PromptLoadError):
        load_prompt("does_not_exist.txt")
