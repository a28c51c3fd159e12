"""
Speech adapter contracts.

The session never talks to a speech SDK directly. Hosts wrap whatever engine
they have (browser bridge, faster-whisper loop, cloud STT) in an object that
satisfies SpeechRecognizer / SpeechSynthesizer, and the session wires its own
callbacks onto the recognizer.

Recognizer lifecycle, as seen by the session:
    start() -> on_start() -> on_result(...)* -> on_end()
    start() -> on_start() -> on_error(code) -> on_end()
"""

from enum import Enum
from typing import Callable, Optional, Protocol


class VoiceError(str, Enum):
    """Closed error taxonomy surfaced to the user."""

    NOT_SUPPORTED = "not-supported"
    PERMISSION_DENIED = "permission-denied"
    NO_SPEECH = "no-speech"
    NETWORK_ERROR = "network-error"
    ABORTED = "aborted"
    AUDIO_CAPTURE = "audio-capture"
    SERVICE_NOT_ALLOWED = "service-not-allowed"
    RUNTIME_FAILURE = "runtime-failure"


ERROR_MESSAGES = {
    VoiceError.NOT_SUPPORTED: "Voice commands are not supported here. Try typing your command instead.",
    VoiceError.PERMISSION_DENIED: "Microphone access was denied. Please enable it in your settings.",
    VoiceError.NO_SPEECH: "No speech detected. Please try again.",
    VoiceError.NETWORK_ERROR: "Network error. Please check your connection.",
    VoiceError.ABORTED: "Voice input was cancelled.",
    VoiceError.AUDIO_CAPTURE: "Could not capture audio. Check your microphone.",
    VoiceError.SERVICE_NOT_ALLOWED: "Speech service not allowed. Please try again.",
    VoiceError.RUNTIME_FAILURE: "Something went wrong. Please try again.",
}

# Engine-specific codes (Web Speech API naming) onto the taxonomy
_ADAPTER_CODES = {
    "not-allowed": VoiceError.PERMISSION_DENIED,
    "no-speech": VoiceError.NO_SPEECH,
    "network": VoiceError.NETWORK_ERROR,
    "aborted": VoiceError.ABORTED,
    "audio-capture": VoiceError.AUDIO_CAPTURE,
    "service-not-allowed": VoiceError.SERVICE_NOT_ALLOWED,
}


def map_adapter_error(code: str) -> VoiceError:
    """Translate an adapter error code. Unknown codes count as network errors."""
    if code in _ADAPTER_CODES:
        return _ADAPTER_CODES[code]
    try:
        return VoiceError(code)
    except ValueError:
        return VoiceError.NETWORK_ERROR


def error_message(error: VoiceError) -> str:
    return ERROR_MESSAGES.get(error, "An error occurred")


class SpeechRecognizer(Protocol):
    """Speech-to-text engine wrapper.

    The session assigns the four ``on_*`` callbacks; the adapter invokes them
    on the session's event loop thread.
    """

    language: str
    on_start: Optional[Callable[[], None]]
    on_result: Optional[Callable[[str, str, float], object]]
    on_error: Optional[Callable[[str], None]]
    on_end: Optional[Callable[[], None]]

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def abort(self) -> None: ...


class SpeechSynthesizer(Protocol):
    """Text-to-speech engine wrapper."""

    def speak(self, text: str, language: str) -> None: ...

    def cancel(self) -> None: ...
