from __future__ import annotations

from uuid import UUID

from fastapi import Depends, HTTPException, Request, status

from kiwidex.agents.base import Agent
from kiwidex.agents.factory import create_default_agent
from kiwidex.runtime import PlaySession, SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_agent() -> Agent | None:
    return create_default_agent()


def get_play_session(session_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> PlaySession:
    try:
        return registry.require(session_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
