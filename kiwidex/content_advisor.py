from __future__ import annotations

import logging
import zlib

from kiwidex.agents.base import Agent
from kiwidex.agents.chat_responder import reply_as_animal_with_agent
from kiwidex.agents.fact_writer import write_facts_with_agent
from kiwidex.agents.quiz_writer import write_quiz_with_agent
from kiwidex.api.models import AnimalRecord, ConservationTier, Difficulty, FactItem, FactKind, QuizQuestion, Region
from kiwidex.catalog import FOODS
from kiwidex.chat import ChatLog
from kiwidex.contexts import make_base_guide_context
from kiwidex.core.context import AnimalContext, GuideContext, RenderedContext, compose_context

logger = logging.getLogger(__name__)


def difficulty_for_level(level: int) -> Difficulty:
    if level <= 2:
        return Difficulty.beginner
    if level <= 5:
        return Difficulty.intermediate
    return Difficulty.advanced


def resolve_difficulty(value: Difficulty | int | str) -> Difficulty:
    if isinstance(value, Difficulty):
        return value
    if isinstance(value, int):
        return difficulty_for_level(value)
    return Difficulty(value)


def _diet_text(animal: AnimalRecord) -> str:
    return ", ".join(animal.diet_tags) if animal.diet_tags else "a varied diet"


# --- deterministic fallback content ---


def fallback_facts(animal: AnimalRecord, difficulty: Difficulty) -> list[FactItem]:
    name = animal.display_name
    items = [
        FactItem(
            topic="Basic Information",
            content=f"{name} is a native animal of New Zealand, living in {animal.habitat.lower()} habitats. "
            f"It mainly feeds on {_diet_text(animal)}.",
            difficulty=difficulty,
            kind=FactKind.fact,
        ),
        FactItem(
            topic="Conservation Status",
            content=f"{name} currently has a conservation status of {animal.conservation_tier.label}. "
            "Protecting its habitat helps these precious animals survive.",
            difficulty=difficulty,
            kind=FactKind.conservation,
        ),
        FactItem(
            topic="Interesting Facts",
            content=f"{animal.description} This makes {name} an important part of New Zealand's unique ecosystem.".strip(),
            difficulty=difficulty,
            kind=FactKind.fact,
        ),
    ]
    if difficulty != Difficulty.beginner:
        items.append(
            FactItem(
                topic="Food Web",
                content=f"{name} depends on {_diet_text(animal)} found in its {animal.habitat.lower()} home. "
                "When that habitat is damaged, its food disappears too.",
                difficulty=difficulty,
                kind=FactKind.story,
            )
        )
    return items


_HABITAT_DISTRACTORS = ("City", "Desert", "Arctic", "Volcano")
_STATUS_DISTRACTORS = ("Least Concern", "Extinct", "Not Evaluated", "Data Deficient")


def fallback_quiz(animal: AnimalRecord, difficulty: Difficulty) -> list[QuizQuestion]:
    name = animal.display_name
    status = animal.conservation_tier.label

    habitat_wrong = [d for d in _HABITAT_DISTRACTORS if d.lower() != animal.habitat.lower()][:3]
    status_wrong = [d for d in _STATUS_DISTRACTORS if d != status][:3]

    questions = [
        QuizQuestion(
            question=f"Where does {name} mainly live?",
            options=[animal.habitat, *habitat_wrong],
            correct_index=0,
            explanation=f"{name}'s main habitat is {animal.habitat.lower()}.",
        ),
        QuizQuestion(
            question=f"What is {name}'s conservation status?",
            options=[status_wrong[0], status, status_wrong[1], status_wrong[2]],
            correct_index=1,
            explanation=f"{name} is currently listed as {status}.",
        ),
    ]

    diet_wrong = [f.name for f in FOODS if f.name not in animal.diet_tags][:3]
    if difficulty != Difficulty.beginner and animal.diet_tags and len(diet_wrong) == 3:
        questions.append(
            QuizQuestion(
                question=f"Which of these foods does {name} eat?",
                options=[diet_wrong[0], diet_wrong[1], animal.diet_tags[0], diet_wrong[2]],
                correct_index=2,
                explanation=f"{name} mainly feeds on {_diet_text(animal)}.",
            )
        )
    return questions


def fallback_answer(animal: AnimalRecord, question: str) -> str:
    name = animal.display_name
    responses = [
        f"Hello! I'm {name}, nice to meet you! I live in {animal.habitat.lower()} habitats.",
        f"As a {animal.species}, my favourite food is {animal.diet_tags[0] if animal.diet_tags else 'all sorts of things'}!",
        f"Did you know? My conservation status is {animal.conservation_tier.label}, so we need everyone's help.",
        f"{animal.description} That's what makes me special!".strip(),
        f"I love chatting with you! Keep feeding me and playing with me to learn more about {name}.",
    ]

    q = question.casefold()
    if any(w in q for w in ("hello", "hi ", "hey")) or q.strip() in {"hi", "hey"}:
        return responses[0]
    if any(w in q for w in ("eat", "food", "hungry")):
        return responses[1]
    if any(w in q for w in ("protect", "conservation", "endangered", "environment")):
        return responses[2]
    return responses[zlib.crc32(q.encode("utf-8")) % len(responses)]


def recommend(captured: list[AnimalRecord], *, total_animals: int) -> list[str]:
    """Up to three next-step tips derived from the player's collection."""

    tips: list[str] = []
    if not captured:
        tips.append("Start exploring the North or South Island to discover your first animal!")
    elif len(captured) < total_animals:
        tips.append("Keep exploring, there are more amazing animals waiting to be discovered!")

    shy = [a for a in captured if a.intimacy < 3]
    if shy:
        tips.append(f"Spend more time with {shy[0].display_name} to raise your intimacy and unlock more content!")

    threatened = [a for a in captured if a.conservation_tier >= ConservationTier.ENDANGERED]
    if threatened:
        tips.append(f"Learn about {threatened[0].display_name}'s conservation status and how to help protect it!")

    north = sum(1 for a in captured if a.found_in(Region.north))
    south = sum(1 for a in captured if a.found_in(Region.south))
    if north > south:
        tips.append("Try exploring the South Island to discover different species!")
    elif south > north:
        tips.append("The North Island still has animals waiting for you!")

    return tips[:3]


class ContentAdvisor:
    """Educational content for one animal at a time.

    Every call first asks the remote agent; any failure (no agent configured,
    transport error, malformed output) is logged and replaced by fallback
    content built only from the animal's own fields. Both paths return the
    same shapes, so callers never branch on where content came from.

    The advisor never touches session state.
    """

    def __init__(self, *, agent: Agent | None, base: GuideContext | None = None) -> None:
        self._agent = agent
        self._base = base

    @property
    def remote_enabled(self) -> bool:
        return self._agent is not None

    def _context(self, animal: AnimalRecord, difficulty: Difficulty | None = None) -> RenderedContext:
        if self._base is None:
            self._base = make_base_guide_context()
        return compose_context(base=self._base, animal=AnimalContext.from_record(animal), difficulty=difficulty)

    async def get_facts(self, animal: AnimalRecord, player_level: int = 1) -> list[FactItem]:
        difficulty = difficulty_for_level(player_level)
        if self._agent is not None:
            try:
                return await write_facts_with_agent(
                    agent=self._agent,
                    ctx=self._context(animal, difficulty),
                    name=animal.display_name,
                    difficulty=difficulty,
                )
            except Exception as e:
                logger.warning("facts for %s unavailable, using fallback: %s", animal.id, e)
        return fallback_facts(animal, difficulty)

    async def get_quiz(self, animal: AnimalRecord, difficulty: Difficulty | int = Difficulty.beginner) -> list[QuizQuestion]:
        bucket = resolve_difficulty(difficulty)
        if self._agent is not None:
            try:
                return await write_quiz_with_agent(
                    agent=self._agent,
                    ctx=self._context(animal, bucket),
                    name=animal.display_name,
                    difficulty=bucket,
                )
            except Exception as e:
                logger.warning("quiz for %s unavailable, using fallback: %s", animal.id, e)
        return fallback_quiz(animal, bucket)

    async def chat(self, animal: AnimalRecord, question: str, history: ChatLog | None = None) -> str:
        answer: str | None = None
        if self._agent is not None:
            try:
                answer = await reply_as_animal_with_agent(
                    agent=self._agent,
                    ctx=self._context(animal),
                    name=animal.display_name,
                    question=question,
                    history=history.render(animal_name=animal.display_name) if history else "",
                )
            except Exception as e:
                logger.warning("chat reply for %s unavailable, using fallback: %s", animal.id, e)

        if answer is None:
            answer = fallback_answer(animal, question)

        if history is not None:
            history.add("player", question)
            history.add("animal", answer)
        return answer

    def recommend(self, captured: list[AnimalRecord], *, total_animals: int) -> list[str]:
        return recommend(captured, total_animals=total_animals)
