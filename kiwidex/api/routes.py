from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from kiwidex.agents.base import Agent
from kiwidex.api.deps import get_agent, get_play_session, get_registry
from kiwidex.api.models import (
    AnimalRecord,
    BoolResponse,
    ChatRequest,
    ChatResponse,
    EcoGameView,
    FactsResponse,
    FeedRequest,
    FeedResponse,
    FoodItem,
    GameMode,
    LoadRequest,
    ModeRequest,
    QuizResponse,
    Region,
    RegionRequest,
    SaveResponse,
    SessionView,
    TransitionResponse,
)
from kiwidex.catalog import food_for
from kiwidex.collection import SortMode, browse
from kiwidex.content_advisor import resolve_difficulty
from kiwidex.eco_game import EcoAction, EcoGame
from kiwidex.feeding import FeedingTier, available_foods, feed_with_rules
from kiwidex.mode_controller import TransitionOutcome
from kiwidex.runtime import PlaySession, SessionRegistry, new_play_session
from kiwidex.session_codec import DecodeError, load_into, serialize

logger = logging.getLogger(__name__)

router = APIRouter()


def _view(ps: PlaySession) -> SessionView:
    return SessionView(
        session_id=ps.session_id,
        mode=ps.state.get_mode(),
        epoch=ps.controller.epoch,
        progress=ps.state.snapshot(),
        animals=ps.state.list_all(),
        encounter_animal_id=ps.controller.encounter_animal_id,
        minigame_animal_id=ps.controller.minigame_animal_id,
    )


def _transition_response(ps: PlaySession, outcome: TransitionOutcome) -> TransitionResponse:
    return TransitionResponse(
        accepted=outcome.accepted,
        mode=outcome.mode,
        reason=outcome.reason.value if outcome.reason else None,
        animal_id=outcome.animal_id,
        epoch=ps.controller.epoch,
    )


def _eco_view(game: EcoGame, message: str = "") -> EcoGameView:
    return EcoGameView(
        animal_id=game.animal_id,
        birds=game.birds,
        environment=game.environment,
        trees=game.trees,
        kakapo_safe=game.kakapo_safe,
        won=game.won,
        message=message,
    )


def _require_animal(ps: PlaySession, animal_id: str) -> AnimalRecord:
    animal = ps.state.get_animal(animal_id)
    if animal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Animal not found")
    return animal


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/session", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    registry: SessionRegistry = Depends(get_registry),
    agent: Agent | None = Depends(get_agent),
) -> SessionView:
    ps = registry.add(new_play_session(agent=agent))
    logger.info("created session %s (remote content: %s)", ps.session_id, ps.advisor.remote_enabled)
    return _view(ps)


@router.get("/session/{session_id}", response_model=SessionView)
async def get_session_route(ps: PlaySession = Depends(get_play_session)) -> SessionView:
    return _view(ps)


@router.delete("/session/{session_id}", response_model=BoolResponse)
async def delete_session_route(ps: PlaySession = Depends(get_play_session), registry: SessionRegistry = Depends(get_registry)) -> BoolResponse:
    return BoolResponse(ok=registry.remove(ps.session_id))


@router.get("/session/{session_id}/animals", response_model=list[AnimalRecord])
async def list_animals_route(region: Region | None = None, ps: PlaySession = Depends(get_play_session)) -> list[AnimalRecord]:
    if region is None:
        return ps.state.list_all()
    return ps.state.list_by_region(region)


@router.get("/session/{session_id}/collection", response_model=list[AnimalRecord])
async def collection_route(
    sort: SortMode = SortMode.name,
    region: Region | None = None,
    ps: PlaySession = Depends(get_play_session),
) -> list[AnimalRecord]:
    return browse(ps.state.list_captured(), sort=sort, region=region)


@router.post("/session/{session_id}/region", response_model=SessionView)
async def set_region_route(payload: RegionRequest, ps: PlaySession = Depends(get_play_session)) -> SessionView:
    try:
        ps.state.set_region(payload.region)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return _view(ps)


@router.post("/session/{session_id}/capture/{animal_id}", response_model=BoolResponse)
async def capture_route(animal_id: str, ps: PlaySession = Depends(get_play_session)) -> BoolResponse:
    return BoolResponse(ok=ps.state.capture(animal_id))


@router.get("/session/{session_id}/foods/{animal_id}", response_model=list[FoodItem])
async def foods_route(animal_id: str, ps: PlaySession = Depends(get_play_session)) -> list[FoodItem]:
    return available_foods(_require_animal(ps, animal_id))


@router.post("/session/{session_id}/feed", response_model=FeedResponse)
async def feed_route(payload: FeedRequest, ps: PlaySession = Depends(get_play_session)) -> FeedResponse:
    food = food_for(payload.food_id)
    if food is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Unknown food: {payload.food_id}")

    animal = ps.state.get_animal(payload.animal_id)
    if animal is None:
        return FeedResponse(accepted=False, tier=FeedingTier.rejected.value, intimacy_delta=0, message="Unknown animal", intimacy=0)

    outcome = feed_with_rules(session=ps.state, animal=animal, animal_id=animal.id, food=food)
    after = ps.state.get_animal(animal.id)
    return FeedResponse(
        accepted=outcome.accepted,
        tier=outcome.tier.value,
        intimacy_delta=outcome.intimacy_delta,
        message=outcome.message,
        intimacy=after.intimacy if after else 0,
    )


@router.post("/session/{session_id}/mode", response_model=TransitionResponse)
async def mode_route(payload: ModeRequest, ps: PlaySession = Depends(get_play_session)) -> TransitionResponse:
    outcome = ps.controller.request(payload.mode, animal_id=payload.animal_id)
    if outcome.accepted:
        if outcome.mode == GameMode.minigame and outcome.animal_id:
            ps.eco_game = EcoGame(animal_id=outcome.animal_id)
        else:
            ps.eco_game = None
    return _transition_response(ps, outcome)


@router.post("/session/{session_id}/minigame/{action}", response_model=EcoGameView)
async def minigame_action_route(action: EcoAction, ps: PlaySession = Depends(get_play_session)) -> EcoGameView:
    game = ps.eco_game
    if game is None or ps.controller.mode != GameMode.minigame:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="No mini-game in progress")

    result = game.apply(action)
    view = _eco_view(game, result.message)
    if game.won and game.settle(ps.state):
        ps.controller.finish_minigame()
        ps.eco_game = None
        view.message = "Perfect ecosystem achieved!"
    return view


@router.get("/session/{session_id}/save", response_model=SaveResponse)
async def save_route(ps: PlaySession = Depends(get_play_session)) -> SaveResponse:
    return SaveResponse(blob=serialize(ps.state))


@router.post("/session/{session_id}/load", response_model=SessionView)
async def load_route(payload: LoadRequest, ps: PlaySession = Depends(get_play_session)) -> SessionView:
    try:
        load_into(ps.state, payload.blob)
    except DecodeError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    ps.rebuild_controller()
    return _view(ps)


@router.get("/session/{session_id}/animals/{animal_id}/facts", response_model=FactsResponse)
async def facts_route(animal_id: str, level: int = 1, ps: PlaySession = Depends(get_play_session)) -> FactsResponse:
    animal = _require_animal(ps, animal_id)
    epoch = ps.controller.epoch
    items = await ps.advisor.get_facts(animal, level)
    return FactsResponse(epoch=epoch, items=items)


@router.get("/session/{session_id}/animals/{animal_id}/quiz", response_model=QuizResponse)
async def quiz_route(animal_id: str, difficulty: str = "beginner", ps: PlaySession = Depends(get_play_session)) -> QuizResponse:
    animal = _require_animal(ps, animal_id)
    try:
        bucket = resolve_difficulty(int(difficulty) if difficulty.isdigit() else difficulty)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Unknown difficulty: {difficulty}") from e

    epoch = ps.controller.epoch
    questions = await ps.advisor.get_quiz(animal, bucket)
    return QuizResponse(epoch=epoch, questions=questions)


@router.post("/session/{session_id}/animals/{animal_id}/chat", response_model=ChatResponse)
async def chat_route(animal_id: str, payload: ChatRequest, ps: PlaySession = Depends(get_play_session)) -> ChatResponse:
    animal = _require_animal(ps, animal_id)
    epoch = ps.controller.epoch
    answer = await ps.advisor.chat(animal, payload.question, ps.chat_log(animal_id))
    return ChatResponse(epoch=epoch, answer=answer)


@router.get("/session/{session_id}/recommendations", response_model=list[str])
async def recommendations_route(ps: PlaySession = Depends(get_play_session)) -> list[str]:
    return ps.advisor.recommend(ps.state.list_captured(), total_animals=ps.state.snapshot().total_animals)
