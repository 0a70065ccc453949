from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    This makes OPENAI_BASE_URL / OPENAI_MODEL available to tests without needing
    to manually export them in your shell.

    In CI, we *don't* auto-load `.env` by default, so tests that would reach a
    live model stay on the local fallback path unless explicitly opted-in.
    """

    # Opt-in locally with: KIWIDEX_LOAD_DOTENV_FOR_TESTS=1
    if os.environ.get("CI") and os.environ.get("KIWIDEX_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """TestClient over a fresh session registry with remote content switched off."""

    from kiwidex.api.deps import get_agent
    from kiwidex.main import app
    from kiwidex.runtime import SessionRegistry

    app.state.registry = SessionRegistry()
    app.dependency_overrides[get_agent] = lambda: None
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
