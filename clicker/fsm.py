from __future__ import annotations

from statemachine import State, StateMachine

from clicker.api.models import MonsterPhase, MonsterState


class MonsterFSM(StateMachine):
    """FSM wrapper around MonsterState.

    - alive -> defeated when hit points drop to zero
    - defeated -> alive when the next monster respawns
    The loop never terminates; the engine applies the arithmetic, the FSM only
    guards transitions.
    """

    alive = State(MonsterPhase.alive.value, value=MonsterPhase.alive.value, initial=True)
    defeated = State(MonsterPhase.defeated.value, value=MonsterPhase.defeated.value)

    defeat = alive.to(defeated)
    respawn = defeated.to(alive)

    def __init__(self, monster: MonsterState):
        self.monster = monster
        super().__init__(start_value=monster.phase.value)

    @property
    def accepts_clicks(self) -> bool:
        return self.current_state == self.alive

    def sync_phase_to_model(self) -> None:
        self.monster.phase = MonsterPhase(str(self.current_state.value))
