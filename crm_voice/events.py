"""
Event types for the voice session.

The session publishes typed events to host listeners (UI widgets, console
frontends, tests) whenever something the user can see changes.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any
import time


class EventType(Enum):
    """All events a VoiceSession publishes."""

    STATE_CHANGED = auto()          # data: SessionState (new state)
    INTERIM_TRANSCRIPT = auto()     # data: str, not committed to history
    TRANSCRIPT = auto()             # data: str, final text entering the pipeline
    RESPONSE = auto()               # data: VoiceResponse
    ERROR = auto()                  # data: VoiceError
    OPEN_CHANGED = auto()           # data: bool (session panel open/closed)


class SessionState(Enum):
    """State machine for one voice session."""

    IDLE = auto()           # Nothing in flight
    LISTENING = auto()      # Recognizer running, collecting speech
    PROCESSING = auto()     # Parsing + dispatching a final transcript
    RESPONDING = auto()     # Response ready / being spoken
    ERROR = auto()          # Recognizer failed; waits for start() or cancel()


@dataclass
class SessionEvent:
    """A typed event published by the session."""

    type: EventType
    data: Any = None
    timestamp: float = field(default_factory=time.monotonic)

    def __repr__(self):
        data_repr = repr(self.data)
        if len(data_repr) > 80:
            data_repr = data_repr[:77] + "..."
        return f"SessionEvent({self.type.name}, data={data_repr})"
