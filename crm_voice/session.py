"""
Voice session state machine.

Sequences one command turn at a time:

    IDLE -> LISTENING -> PROCESSING -> RESPONDING -> IDLE
                 |
                 +-> ERROR            (recognizer failure)

cancel() returns any state to IDLE. Typed commands (execute_command) join
the cycle at the final-transcript point. Everything runs on one asyncio
event loop; speech adapters call the session's callbacks on that loop.
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from crm_voice.backend import CrmBackend
from crm_voice.config import Config, VoiceSettings
from crm_voice.context import Entity, SessionContext
from crm_voice.dispatcher import dispatch
from crm_voice.events import EventType, SessionEvent, SessionState
from crm_voice.handlers import ExecutionContext
from crm_voice.intents import QuickAction, VoiceResponse
from crm_voice.logger import get_logger
from crm_voice.parser import get_suggestions, parse_intent
from crm_voice.speech import (
    SpeechRecognizer,
    SpeechSynthesizer,
    VoiceError,
    map_adapter_error,
)


@dataclass
class HistoryEntry:
    """One completed turn."""

    transcript: str
    response: VoiceResponse
    timestamp: float = field(default_factory=time.time)


def clarification(transcript: str) -> VoiceResponse:
    """Response for a transcript below the confidence threshold."""
    return VoiceResponse.question(
        f"I'm not sure I understood. Did you say \"{transcript}\"?",
        actions=[
            QuickAction("Try Again", "retry"),
            QuickAction("Search Instead", f"search:{transcript}"),
        ],
    )


class VoiceSession:
    """One user's voice command session.

    Args:
        recognizer: Speech-to-text adapter. None means voice input is not
                    supported; typed commands still work.
        synthesizer: Text-to-speech adapter (optional).
        execution: Host capabilities for handlers. Its ``voice_context`` is
                   bound to this session's context.
        settings: Voice settings (default: from config ``voice.*``).
        context: Session context (default: from config ``context.*``).
        config: Loaded Config; defaults are used when omitted.
    """

    def __init__(self,
                 recognizer: Optional[SpeechRecognizer] = None,
                 synthesizer: Optional[SpeechSynthesizer] = None,
                 execution: Optional[ExecutionContext] = None,
                 settings: Optional[VoiceSettings] = None,
                 context: Optional[SessionContext] = None,
                 config: Optional[Config] = None):
        self.config = config or Config()
        self.logger = get_logger(__name__, self.config)

        self.recognizer = recognizer
        self.synthesizer = synthesizer
        self.settings = settings or VoiceSettings.from_config(self.config)
        self.context = context or SessionContext.from_config(self.config)

        self.execution = execution or ExecutionContext()
        self.execution.voice_context = self.context
        if self.execution.backend is None:
            self.execution.backend = CrmBackend.from_config(self.config)

        self.restart_delay = float(self.config.get("session.restart_delay_seconds", 0.1))
        self.history: deque[HistoryEntry] = deque(
            maxlen=int(self.config.get("session.max_history", 50))
        )

        self.state = SessionState.IDLE
        self.is_open = False
        self.transcript = ""
        self.interim_transcript = ""
        self.response: Optional[VoiceResponse] = None
        self.error: Optional[VoiceError] = None
        self.last_confidence: Optional[float] = None   # engine-reported, not used for gating

        self._turn = 0                  # bumped on every new turn and on cancel
        self._restart_handle: Optional[asyncio.TimerHandle] = None
        self._restart_after_turn = False
        self._turn_task: Optional[asyncio.Task] = None
        self._listeners: list[Callable[[SessionEvent], None]] = []

        if recognizer is not None:
            recognizer.language = self.settings.language
            recognizer.on_start = self._on_start
            recognizer.on_result = self._on_result
            recognizer.on_error = self._on_error
            recognizer.on_end = self._on_end

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_supported(self) -> bool:
        return self.recognizer is not None

    @property
    def is_listening(self) -> bool:
        return self.state is SessionState.LISTENING

    @property
    def is_processing(self) -> bool:
        return self.state is SessionState.PROCESSING

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, callback: Callable[[SessionEvent], None]) -> Callable[[], None]:
        """Subscribe to session events. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return remove

    def _emit(self, event_type: EventType, data=None):
        event = SessionEvent(event_type, data)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self.logger.error(f"Session listener failed on {event!r}: {e}")

    def _set_state(self, state: SessionState):
        if state is self.state:
            return
        self.logger.debug(f"State: {self.state.name} -> {state.name}")
        self.state = state
        self._emit(EventType.STATE_CHANGED, state)

    # ------------------------------------------------------------------
    # Listening control
    # ------------------------------------------------------------------

    def start(self):
        """Begin listening. Ignored while a turn is being heard or processed."""
        if self.state in (SessionState.LISTENING, SessionState.PROCESSING):
            self.logger.debug(f"start() ignored while {self.state.name}")
            return
        self._listen(reset=True)

    def _listen(self, reset: bool):
        self._cancel_restart()
        if reset:
            self.transcript = ""
            self.response = None
        self.interim_transcript = ""
        self.error = None

        if self.recognizer is None:
            self._fail(VoiceError.NOT_SUPPORTED)
            return

        self.recognizer.language = self.settings.language
        self._set_state(SessionState.LISTENING)
        try:
            self.recognizer.start()
        except Exception as e:
            self.logger.error(f"Speech recognizer failed to start: {e}")
            self._fail(VoiceError.AUDIO_CAPTURE)

    def stop(self):
        """Stop listening without discarding what has already been heard."""
        self._cancel_restart()
        self._restart_after_turn = False
        if self.state is not SessionState.LISTENING:
            return
        if self.recognizer is not None:
            self.recognizer.stop()
        self.interim_transcript = ""
        self._set_state(SessionState.IDLE)

    def toggle_listening(self):
        if self.is_listening:
            self.stop()
        else:
            self.start()

    def cancel(self):
        """Abandon whatever is in flight and return to IDLE. Safe to repeat.

        The running turn task is cancelled at its pending await, so handler
        side effects after that point (navigation, remembered entities,
        backend writes) never happen.
        """
        self._turn += 1
        self._cancel_restart()
        self._restart_after_turn = False

        task = self._turn_task
        self._turn_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

        if self.recognizer is not None and self.state is not SessionState.IDLE:
            self.recognizer.abort()
        if self.synthesizer is not None:
            self.synthesizer.cancel()

        self.transcript = ""
        self.interim_transcript = ""
        self.response = None
        self.error = None
        self._set_state(SessionState.IDLE)

    def cancel_command(self):
        """Keyboard/UI cancel: same as cancel()."""
        self.cancel()

    # ------------------------------------------------------------------
    # Panel open/close and keyboard bindings
    # ------------------------------------------------------------------

    def set_open(self, is_open: bool):
        if is_open == self.is_open:
            return
        self.is_open = is_open
        self._emit(EventType.OPEN_CHANGED, is_open)
        if not is_open:
            # Closing the panel resets the turn and silences output
            self.cancel()

    def toggle_open(self):
        self.set_open(not self.is_open)

    def handle_key(self, key: str, ctrl: bool = False, meta: bool = False) -> bool:
        """Apply the session's key bindings. Returns True if the key was used.

        Ctrl/Cmd+Space opens the panel, or toggles listening once open.
        Escape closes an open panel.
        """
        name = key.lower()
        if (ctrl or meta) and name in ("space", " "):
            if self.is_open:
                self.toggle_listening()
            else:
                self.set_open(True)
            return True
        if name in ("escape", "esc") and self.is_open:
            self.set_open(False)
            return True
        return False

    # ------------------------------------------------------------------
    # Recognizer callbacks
    # ------------------------------------------------------------------

    def _on_start(self):
        self.logger.debug("Speech recognizer started")

    def _on_result(self, interim: str, final: str, confidence: float = 1.0):
        """Interim text only updates the display; final text starts a turn.

        Returns the asyncio.Task processing the turn for a final result,
        otherwise None.
        """
        if self.state is not SessionState.LISTENING:
            self.logger.debug(f"Ignoring recognizer result while {self.state.name}")
            return None

        if interim:
            self.interim_transcript = interim
            self._emit(EventType.INTERIM_TRANSCRIPT, interim)

        if not final or not final.strip():
            return None

        self.last_confidence = confidence
        turn = self._begin_turn(final)
        self._turn_task = asyncio.get_running_loop().create_task(self._run_turn(final, turn))
        return self._turn_task

    def _on_error(self, code: str):
        error = map_adapter_error(code)
        if self.state is not SessionState.LISTENING:
            # Includes the "aborted" that follows our own cancel()
            self.logger.debug(f"Ignoring recognizer error '{code}' while {self.state.name}")
            return
        self.logger.warning(f"Speech recognizer error: {code} -> {error.value}")
        self._fail(error)

    def _on_end(self):
        if self.state is SessionState.LISTENING:
            self.interim_transcript = ""
            self._set_state(SessionState.IDLE)
            if self._should_restart():
                self._schedule_restart()
        elif self.state is SessionState.PROCESSING:
            # Recognizer ended after delivering the final transcript
            self._restart_after_turn = self._should_restart()
        elif self.state is SessionState.RESPONDING:
            # Turn finished before the recognizer reported its end
            self.interim_transcript = ""
            if self._should_restart():
                self._schedule_restart()
        # IDLE here follows stop()/cancel()/close, which must not resume listening

    def _fail(self, error: VoiceError):
        self._cancel_restart()
        self._restart_after_turn = False
        self.error = error
        self.interim_transcript = ""
        self._set_state(SessionState.ERROR)
        self._emit(EventType.ERROR, error)

    # ------------------------------------------------------------------
    # Continuous listening
    # ------------------------------------------------------------------

    def _should_restart(self) -> bool:
        return (self.settings.continuous_listening
                and self.is_open
                and self.error is None
                and self.recognizer is not None)

    def _schedule_restart(self):
        if self._restart_handle is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.logger.debug("No running event loop, restarting listening now")
            self._restart()
            return
        self._restart_handle = loop.call_later(self.restart_delay, self._restart)

    def _cancel_restart(self):
        if self._restart_handle is not None:
            self._restart_handle.cancel()
            self._restart_handle = None

    def _restart(self):
        self._restart_handle = None
        if not self._should_restart():
            return
        if self.state in (SessionState.IDLE, SessionState.RESPONDING):
            self.logger.debug("Continuous listening: restarting recognizer")
            self._listen(reset=False)

    # ------------------------------------------------------------------
    # Command turns
    # ------------------------------------------------------------------

    async def execute_command(self, text: str) -> Optional[VoiceResponse]:
        """Run a typed command through the same pipeline as speech.

        Returns the response, or None if the command was empty, another turn
        was already processing, or the turn was cancelled.
        """
        if not text or not text.strip():
            return None
        if self.state is SessionState.PROCESSING:
            self.logger.warning(f"Command '{text}' ignored: another command is processing")
            return None

        if self.state is SessionState.LISTENING and self.recognizer is not None:
            self._cancel_restart()
            self.recognizer.stop()

        turn = self._begin_turn(text)
        self._turn_task = asyncio.ensure_future(self._run_turn(text, turn))
        try:
            return await self._turn_task
        except asyncio.CancelledError:
            # cancel() landed before the turn got to run
            if turn == self._turn:
                raise
            return None

    def _begin_turn(self, transcript: str) -> int:
        self._turn += 1
        self.transcript = transcript
        self.interim_transcript = ""
        self.error = None
        self._set_state(SessionState.PROCESSING)
        self._emit(EventType.TRANSCRIPT, transcript)
        self.logger.info(f"Heard: '{transcript}'")
        return self._turn

    async def _run_turn(self, transcript: str, turn: int) -> Optional[VoiceResponse]:
        try:
            intent = parse_intent(transcript, self.context)
            if intent.confidence < self.settings.confidence_threshold:
                self.logger.info(
                    f"Low confidence {intent.confidence:.2f} for '{transcript}', asking to confirm"
                )
                response = clarification(transcript)
            else:
                response = await dispatch(intent, self.execution)
        except asyncio.CancelledError:
            # Handlers stop at their pending await, so nothing after it lands
            self.logger.debug(f"Command '{transcript}' cancelled mid-flight")
            return None
        except Exception as e:
            self.logger.error(f"Command processing failed for '{transcript}': {e}", exc_info=True)
            response = VoiceResponse.error(
                "Something went wrong processing your command.",
                data={"error": VoiceError.RUNTIME_FAILURE.value},
            )

        if turn != self._turn:
            self.logger.debug(f"Discarding response to cancelled command '{transcript}'")
            return None

        self._finish_turn(transcript, response)
        return response

    def _finish_turn(self, transcript: str, response: VoiceResponse):
        self.response = response
        self.history.appendleft(HistoryEntry(transcript, response))
        self._set_state(SessionState.RESPONDING)
        self._emit(EventType.RESPONSE, response)

        if self.settings.speak_responses and response.speak:
            self._speak(response.message)

        if self._restart_after_turn:
            self._restart_after_turn = False
            if self._should_restart():
                self._schedule_restart()

    def _speak(self, text: str):
        if self.synthesizer is None:
            return
        try:
            self.synthesizer.cancel()
            self.synthesizer.speak(text, self.settings.language)
        except Exception as e:
            self.logger.error(f"Speech synthesis failed: {e}")

    # ------------------------------------------------------------------
    # Settings, context, history
    # ------------------------------------------------------------------

    def update_settings(self, **changes):
        """Apply partial settings changes (validated like VoiceSettings)."""
        self.settings = replace(self.settings, **changes)
        if self.recognizer is not None:
            self.recognizer.language = self.settings.language
        if not self.settings.continuous_listening:
            self._cancel_restart()
            self._restart_after_turn = False

    def update_context(self, **changes):
        self.context.update(**changes)

    def add_recent_entity(self, entity: Entity):
        self.context.add_recent_entity(entity)

    def clear_history(self):
        self.history.clear()

    def suggestions(self) -> list[str]:
        return get_suggestions(self.context)
