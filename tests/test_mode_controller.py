from __future__ import annotations

import random

import pytest
from statemachine.exceptions import TransitionNotAllowed

from kiwidex.api.models import GameMode, Region
from kiwidex.fsm import ModeFSM
from kiwidex.mode_controller import ModeController, pick_encounter_animal
from kiwidex.session_state import SessionState
from kiwidex.transition_processing.guards import DenialReason


def _controller(state: SessionState | None = None, seed: int = 7) -> tuple[SessionState, ModeController]:
    state = state or SessionState()
    return state, ModeController(session=state, rng=random.Random(seed))


def test_fsm_scaffolding_has_expected_initial_state() -> None:
    fsm = ModeFSM()
    assert fsm.mode == GameMode.map

    fsm.send("open_collection")
    assert fsm.mode == GameMode.collection

    with pytest.raises(TransitionNotAllowed):
        fsm.send("enter_encounter")


def test_fsm_can_start_from_a_saved_mode() -> None:
    assert ModeFSM(GameMode.collection).mode == GameMode.collection


def test_encounter_needs_a_region() -> None:
    state, ctl = _controller()

    outcome = ctl.enter_encounter()
    assert outcome.accepted is False
    assert outcome.reason == DenialReason.no_region_selected
    assert outcome.mode == GameMode.map
    assert ctl.mode == GameMode.map
    assert state.get_mode() == GameMode.map
    assert ctl.epoch == 0


def test_encounter_picks_an_animal_from_the_region_and_writes_the_mode() -> None:
    state, ctl = _controller()
    state.set_region(Region.north)

    outcome = ctl.enter_encounter()
    assert outcome.accepted is True
    assert outcome.mode == GameMode.encounter
    assert outcome.animal_id in {"kiwi", "tuatara"}
    assert ctl.encounter_animal_id == outcome.animal_id
    assert state.get_mode() == GameMode.encounter
    assert ctl.epoch == 1

    back = ctl.exit_encounter()
    assert back.accepted is True
    assert state.get_mode() == GameMode.map
    assert ctl.encounter_animal_id is None
    assert ctl.epoch == 2


def test_encounter_prefers_uncaptured_animals() -> None:
    state, ctl = _controller()
    state.set_region(Region.north)
    state.capture("kiwi")

    for _ in range(20):
        outcome = ctl.enter_encounter()
        assert outcome.animal_id == "tuatara"
        ctl.exit_encounter()


def test_encounter_falls_back_to_any_animal_once_all_are_captured() -> None:
    state, ctl = _controller()
    state.set_region(Region.north)
    state.capture("kiwi")
    state.capture("tuatara")

    seen = set()
    for _ in range(30):
        seen.add(ctl.enter_encounter().animal_id)
        ctl.exit_encounter()
    assert seen == {"kiwi", "tuatara"}


def test_pick_encounter_animal_with_no_candidates() -> None:
    assert pick_encounter_animal(candidates=[], rng=random.Random(1)) is None


def test_minigame_needs_a_captured_animal() -> None:
    state, ctl = _controller()
    assert ctl.open_collection().accepted is True

    denied = ctl.start_minigame("kakapo")
    assert denied.accepted is False
    assert denied.reason == DenialReason.animal_not_captured
    assert ctl.mode == GameMode.collection

    unknown = ctl.start_minigame("moa")
    assert unknown.reason == DenialReason.animal_not_captured

    state.capture("kakapo")
    started = ctl.start_minigame("kakapo")
    assert started.accepted is True
    assert started.animal_id == "kakapo"
    assert ctl.minigame_animal_id == "kakapo"
    assert state.get_mode() == GameMode.minigame

    done = ctl.finish_minigame()
    assert done.accepted is True
    assert done.mode == GameMode.collection
    assert ctl.minigame_animal_id is None


def test_edges_outside_the_graph_are_illegal() -> None:
    state, ctl = _controller()
    state.capture("kiwi")

    outcome = ctl.start_minigame("kiwi")
    assert outcome.accepted is False
    assert outcome.reason == DenialReason.illegal_transition
    assert ctl.mode == GameMode.map

    assert ctl.request(GameMode.map).reason == DenialReason.illegal_transition
    assert ctl.epoch == 0


def test_controller_resumes_collection_but_not_animal_modes() -> None:
    state = SessionState()
    state.set_mode(GameMode.collection)
    _, ctl = _controller(state)
    assert ctl.mode == GameMode.collection

    state.set_mode(GameMode.minigame)
    _, ctl = _controller(state)
    assert ctl.mode == GameMode.map
    assert state.get_mode() == GameMode.map


def test_epoch_marks_stale_requests() -> None:
    _, ctl = _controller()
    seen = ctl.epoch
    assert ctl.is_current(seen)

    ctl.open_collection()
    assert not ctl.is_current(seen)
    assert ctl.is_current(ctl.epoch)
