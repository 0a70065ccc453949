from __future__ import annotations

from pathlib import Path


class PromptLoadError(RuntimeError):
    pass


def prompts_dir() -> Path:
    # kiwidex/prompts.py -> kiwidex/prompt_templates/
    return Path(__file__).resolve().parent / "prompt_templates"


def load_prompt(name: str) -> str:
    """Load a prompt text file shipped with the package.

    Example:
        load_prompt("base_guide.txt")
    """

    path = prompts_dir() / name
    try:
        return path.read_text(encoding="utf-8").strip() + "\n"
    except FileNotFoundError as e:
        raise PromptLoadError(f"Prompt not found: {path}") from e


def render_prompt(name: str, /, **fields: object) -> str:
    """Load a template and fill its `{placeholders}`."""

    return load_prompt(name).format(**fields)
