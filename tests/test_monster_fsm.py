from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from clicker.api.models import MonsterPhase, MonsterState
from clicker.fsm import MonsterFSM


def test_fsm_starts_from_model_phase() -> None:
    alive = MonsterFSM(MonsterState(level=1, max_hp=60, current_hp=60))
    assert alive.accepts_clicks

    defeated = MonsterFSM(MonsterState(level=1, max_hp=60, current_hp=0, phase=MonsterPhase.defeated))
    assert not defeated.accepts_clicks
    assert defeated.current_state == defeated.defeated


def test_defeat_then_respawn_syncs_model() -> None:
    monster = MonsterState(level=3, max_hp=80, current_hp=0)
    fsm = MonsterFSM(monster)

    fsm.defeat()
    fsm.sync_phase_to_model()
    assert monster.phase == MonsterPhase.defeated

    fsm.respawn()
    fsm.sync_phase_to_model()
    assert monster.phase == MonsterPhase.alive


def test_cannot_defeat_twice() -> None:
    monster = MonsterState(level=1, max_hp=60, current_hp=0, phase=MonsterPhase.defeated)
    fsm = MonsterFSM(monster)

    with pytest.raises(TransitionNotAllowed):
        fsm.defeat()


def test_cannot_respawn_a_live_monster() -> None:
    fsm = MonsterFSM(MonsterState(level=1, max_hp=60, current_hp=60))

    with pytest.raises(TransitionNotAllowed):
        fsm.respawn()
