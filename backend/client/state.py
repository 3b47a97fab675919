"""
Flow state for the location client.

FlowState is immutable; the functions below return a new state and never
touch the old one. StateStore holds the current state and tells
subscribers (renderers) whenever it changes.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger('state')


class Phase(str, Enum):
    IDLE = 'idle'
    STARTING = 'starting'
    REQUESTING_PERMISSION = 'requesting_permission'
    LOCATION_ACQUIRED = 'location_acquired'
    RESOLVING_STATE = 'resolving_state'
    SENDING = 'sending'
    DONE = 'done'
    FAILED = 'failed'
    ERROR = 'error'


STATUS_TEXT = {
    Phase.IDLE: 'Idle',
    Phase.STARTING: 'Starting…',
    Phase.REQUESTING_PERMISSION: 'Requesting permission…',
    Phase.LOCATION_ACQUIRED: 'Location acquired',
    Phase.RESOLVING_STATE: 'Resolving state…',
    Phase.SENDING: 'Sending to server…',
    Phase.DONE: 'Done - state found',
    Phase.FAILED: 'Failed to send',
    Phase.ERROR: 'Error',
}


@dataclass(frozen=True)
class FlowState:
    phase: Phase = Phase.IDLE
    status: str = STATUS_TEXT[Phase.IDLE]
    log: Tuple[str, ...] = ()


def set_phase(state: FlowState, phase: Phase, status: Optional[str] = None) -> FlowState:
    return replace(state, phase=phase, status=status if status is not None else STATUS_TEXT[phase])


def format_log_line(parts, now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now()
    return f"[{now.strftime('%H:%M:%S')}] " + ' '.join(str(p) for p in parts)


def append_log(state: FlowState, *parts, now: Optional[datetime.datetime] = None) -> FlowState:
    return replace(state, log=state.log + (format_log_line(parts, now),))


def fail(state: FlowState, message: str, now: Optional[datetime.datetime] = None) -> FlowState:
    """Status 'Error' plus a ✖ log line."""
    return append_log(set_phase(state, Phase.ERROR), '✖', message, now=now)


Listener = Callable[[FlowState, FlowState], None]


class StateStore:
    def __init__(self, initial: Optional[FlowState] = None):
        self._state = initial or FlowState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> FlowState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener(old, new); returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply(self, transition, *args, **kwargs) -> FlowState:
        old = self._state
        self._state = transition(old, *args, **kwargs)
        for listener in list(self._listeners):
            # listener errors are logged, never raised into the flow
            try:
                listener(old, self._state)
            except Exception:
                logger.exception("State listener failed")
        return self._state
