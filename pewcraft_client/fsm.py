from __future__ import annotations

from statemachine import State, StateMachine

from pewcraft_client.core.states import Phase


class WorkflowPhases(StateMachine):
    """Legal phase graph of the session-setup workflow.

    The transition function computes the next state; this machine only guards the
    phase changes it produces:
    - create_or_join -> select_map -> create_character -> wait_for_game -> play_game
    - create_or_join can skip to create_character (join) or wait_for_game (rejoin)
    - any live phase can fail; a failure resumes the phase that issued the call
    - every phase can exit; exit is final.

    Each `to_<phase>` event names its target, so the driver sends `to_{new.phase}`.
    """

    create_or_join = State(Phase.create_or_join.value, value=Phase.create_or_join.value, initial=True)
    select_map = State(Phase.select_map.value, value=Phase.select_map.value)
    create_character = State(Phase.create_character.value, value=Phase.create_character.value)
    wait_for_game = State(Phase.wait_for_game.value, value=Phase.wait_for_game.value)
    play_game = State(Phase.play_game.value, value=Phase.play_game.value)
    failed = State(Phase.failed.value, value=Phase.failed.value)
    exited = State(Phase.exit.value, value=Phase.exit.value, final=True)

    to_create_or_join = failed.to(create_or_join)
    to_select_map = create_or_join.to(select_map) | failed.to(select_map)
    to_create_character = (
        create_or_join.to(create_character) | select_map.to(create_character) | failed.to(create_character)
    )
    to_wait_for_game = create_or_join.to(wait_for_game) | create_character.to(wait_for_game) | failed.to(wait_for_game)
    to_play_game = wait_for_game.to(play_game) | failed.to(play_game)
    to_failed = (
        create_or_join.to(failed)
        | select_map.to(failed)
        | create_character.to(failed)
        | wait_for_game.to(failed)
        | play_game.to(failed)
    )
    to_exit = (
        create_or_join.to(exited)
        | select_map.to(exited)
        | create_character.to(exited)
        | wait_for_game.to(exited)
        | play_game.to(exited)
        | failed.to(exited)
    )

    def __init__(self, phase: Phase = Phase.create_or_join):
        super().__init__(start_value=phase.value)

    @property
    def phase(self) -> Phase:
        return Phase(str(self.current_state.value))

    def advance(self, phase: Phase) -> None:
        """Move to `phase`; raises `TransitionNotAllowed` if the graph forbids it."""

        if phase == self.phase:
            return
        self.send(f"to_{phase.value}")
