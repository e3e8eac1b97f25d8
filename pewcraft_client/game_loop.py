from __future__ import annotations

import logging
from typing import Protocol

from pewcraft_client.core.events import Event, ExpectedEvent
from pewcraft_client.core.machine import expected_event, next_state
from pewcraft_client.core.states import ExitState, GlobalState, session_label
from pewcraft_client.fsm import WorkflowPhases

logger = logging.getLogger(__name__)


class EventSource(Protocol):
    def next_event(self, expected: ExpectedEvent, *, copy_payload: str | None = None) -> Event:  # pragma: no cover
        ...


class Presenter(Protocol):
    def render(self, state: GlobalState) -> None:  # pragma: no cover
        ...


class Workflow:
    """Owns the single live workflow state.

    Every step consumes the current state and replaces it with the result of the
    transition function; phase changes are checked against `WorkflowPhases`.
    """

    def __init__(self, state: GlobalState) -> None:
        self._state = state
        self._phases = WorkflowPhases(state.phase)

    @property
    def state(self) -> GlobalState:
        return self._state

    @property
    def finished(self) -> bool:
        return isinstance(self._state, ExitState)

    def expected_event(self) -> ExpectedEvent:
        return expected_event(self._state)

    def step(self, event: Event) -> GlobalState:
        previous = self._state
        new = next_state(previous, event)
        if new.phase != previous.phase:
            self._phases.advance(new.phase)
            logger.info("Workflow %s -> %s on %s", previous.phase, new.phase, event.kind)
        self._state = new
        return new


def run_session(workflow: Workflow, source: EventSource, presenter: Presenter) -> int:
    """Render, wait for one event, transition; stop as soon as Exit is reached.

    Returns the number of events processed.
    """

    processed = 0
    while not workflow.finished:
        presenter.render(workflow.state)
        event = source.next_event(workflow.expected_event(), copy_payload=session_label(workflow.state))
        workflow.step(event)
        processed += 1
    logger.info("Session finished after %d events", processed)
    return processed
