from __future__ import annotations

import os
import random
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from kiwidex.agents.base import Agent
from kiwidex.chat import ChatLog
from kiwidex.content_advisor import ContentAdvisor
from kiwidex.eco_game import EcoGame
from kiwidex.mode_controller import ModeController
from kiwidex.session_state import SessionState


def rng_from_env() -> random.Random:
    """Seeded RNG when KIWIDEX_SEED is set (reproducible encounters), else system entropy."""

    seed = os.environ.get("KIWIDEX_SEED")
    if seed is None or not seed.strip():
        return random.Random()
    return random.Random(int(seed))


@dataclass(slots=True)
class PlaySession:
    """One player's collaborators, built once and passed around explicitly."""

    session_id: UUID
    state: SessionState
    controller: ModeController
    advisor: ContentAdvisor
    eco_game: EcoGame | None = None
    chats: dict[str, ChatLog] = field(default_factory=dict)
    rng: random.Random = field(default_factory=random.Random)

    def chat_log(self, animal_id: str) -> ChatLog:
        log = self.chats.get(animal_id)
        if log is None:
            log = self.chats[animal_id] = ChatLog(animal_id=animal_id)
        return log

    def rebuild_controller(self) -> None:
        """Start a fresh controller after the state was replaced by a load.

        The session keeps its encounter RNG, so a seeded session stays seeded.
        """

        self.controller = ModeController(session=self.state, rng=self.rng)
        self.eco_game = None


def new_play_session(*, agent: Agent | None, rng: random.Random | None = None) -> PlaySession:
    state = SessionState()
    rng = rng or rng_from_env()
    return PlaySession(
        session_id=uuid4(),
        state=state,
        controller=ModeController(session=state, rng=rng),
        advisor=ContentAdvisor(agent=agent),
        rng=rng,
    )


class SessionRegistry:
    """In-process table of live play sessions. Nothing here outlives the process."""

    def __init__(self) -> None:
        self._sessions: dict[UUID, PlaySession] = {}

    def add(self, session: PlaySession) -> PlaySession:
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: UUID) -> PlaySession | None:
        return self._sessions.get(session_id)

    def require(self, session_id: UUID) -> PlaySession:
        session = self.get(session_id)
        if session is None:
            raise ValueError("Session not found")
        return session

    def remove(self, session_id: UUID) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
