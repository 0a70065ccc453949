from __future__ import annotations

from statemachine import State, StateMachine

from kiwidex.api.models import GameMode


class ModeFSM(StateMachine):
    """Which interactive surface is active.

    - map <-> encounter
    - map <-> collection
    - collection <-> minigame

    The FSM only knows the edges; preconditions (region picked, animal captured)
    are checked by the guard pipeline before an event is sent.
    """

    map = State(GameMode.map.value, value=GameMode.map.value, initial=True)
    encounter = State(GameMode.encounter.value, value=GameMode.encounter.value)
    collection = State(GameMode.collection.value, value=GameMode.collection.value)
    minigame = State(GameMode.minigame.value, value=GameMode.minigame.value)

    enter_encounter = map.to(encounter)
    exit_encounter = encounter.to(map)
    open_collection = map.to(collection)
    close_collection = collection.to(map)
    start_minigame = collection.to(minigame)
    finish_minigame = minigame.to(collection)

    def __init__(self, start: GameMode = GameMode.map):
        super().__init__(start_value=start.value)

    @property
    def mode(self) -> GameMode:
        return GameMode(str(self.current_state.value))


# (source, target) -> event name on ModeFSM.
EDGES: dict[tuple[GameMode, GameMode], str] = {
    (GameMode.map, GameMode.encounter): "enter_encounter",
    (GameMode.encounter, GameMode.map): "exit_encounter",
    (GameMode.map, GameMode.collection): "open_collection",
    (GameMode.collection, GameMode.map): "close_collection",
    (GameMode.collection, GameMode.minigame): "start_minigame",
    (GameMode.minigame, GameMode.collection): "finish_minigame",
}
