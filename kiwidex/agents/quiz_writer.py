from __future__ import annotations

import json

from pydantic import ValidationError

from kiwidex.agents.base import Agent, ContentUnavailable, JsonSchema, ask_agent
from kiwidex.api.models import Difficulty, QuizQuestion
from kiwidex.core.context import RenderedContext
from kiwidex.prompts import render_prompt

MIN_QUESTIONS = 2
MAX_QUESTIONS = 3


class QuizWriteError(ContentUnavailable):
    pass


def parse_quiz_questions(text: str) -> list[QuizQuestion]:
    """Parse strict JSON quiz output.

    Expected: {"questions": [{"question", "options", "correct_index", "explanation"}]}
    We also accept a bare list and the `correctAnswer` key some models prefer.
    Questions that don't have exactly 4 options or a valid index are skipped.
    """

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise QuizWriteError(f"Invalid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise QuizWriteError("Expected a list of questions")

    questions: list[QuizQuestion] = []
    for raw in data:
        if not isinstance(raw, dict):
            continue
        if "correct_index" not in raw and "correctAnswer" in raw:
            raw = {**raw, "correct_index": raw["correctAnswer"]}
        try:
            q = QuizQuestion.model_validate(raw)
        except ValidationError:
            continue
        if q.question.strip():
            questions.append(q)

    if len(questions) < MIN_QUESTIONS:
        raise QuizWriteError(f"Expected at least {MIN_QUESTIONS} valid questions, got {len(questions)}")
    return questions[:MAX_QUESTIONS]


_QUIZ_SCHEMA = JsonSchema(
    name="quiz",
    schema={
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "questions": {
                "type": "array",
                "minItems": MIN_QUESTIONS,
                "maxItems": MAX_QUESTIONS,
                "items": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "question": {"type": "string"},
                        "options": {"type": "array", "items": {"type": "string"}, "minItems": 4, "maxItems": 4},
                        "correct_index": {"type": "integer", "minimum": 0, "maximum": 3},
                        "explanation": {"type": "string"},
                    },
                    "required": ["question", "options", "correct_index", "explanation"],
                },
            }
        },
        "required": ["questions"],
    },
    strict=True,
)


async def write_quiz_with_agent(
    *,
    agent: Agent,
    ctx: RenderedContext,
    name: str,
    difficulty: Difficulty,
    max_attempts: int = 2,
) -> list[QuizQuestion]:
    prompt = render_prompt(
        "quiz.txt", name=name, difficulty=difficulty.value, min_questions=MIN_QUESTIONS, max_questions=MAX_QUESTIONS
    )

    last_err: Exception | None = None
    for _ in range(max_attempts):
        reply = await ask_agent(agent=agent, prompt=prompt, ctx=ctx, schema=_QUIZ_SCHEMA)
        try:
            return parse_quiz_questions(reply.content)
        except QuizWriteError as e:
            last_err = e

    raise QuizWriteError(f"Failed to write a valid quiz after {max_attempts} attempts: {last_err}")
