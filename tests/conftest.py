"""Shared test fixtures — fake speech engines and a recording host."""

from datetime import datetime

import pytest
from dateutil import tz

from crm_voice.config import Config
from crm_voice.context import SessionContext
from crm_voice.handlers import ExecutionContext
from crm_voice.session import VoiceSession

# Wednesday
FIXED_NOW = datetime(2026, 10, 14, 9, 30, tzinfo=tz.UTC)


class FakeRecognizer:
    """Speech recognizer stub driven by the test."""

    def __init__(self):
        self.language = None
        self.on_start = None
        self.on_result = None
        self.on_error = None
        self.on_end = None
        self.starts = 0
        self.stops = 0
        self.aborts = 0

    def start(self):
        self.starts += 1
        if self.on_start:
            self.on_start()

    def stop(self):
        self.stops += 1

    def abort(self):
        self.aborts += 1

    # Engine-side events
    def hear(self, interim="", final="", confidence=0.95):
        return self.on_result(interim, final, confidence)

    def fail(self, code):
        self.on_error(code)

    def end(self):
        self.on_end()


class FakeSynthesizer:
    """Records what would have been spoken."""

    def __init__(self):
        self.spoken = []
        self.cancels = 0

    def speak(self, text, language):
        self.spoken.append((text, language))

    def cancel(self):
        self.cancels += 1


class Recorder:
    """Callable that remembers its first argument on every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args[0] if args else None)


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def host() -> ExecutionContext:
    return ExecutionContext(
        navigate=Recorder(),
        open_terminal=Recorder(),
        set_theme=Recorder(),
        voice_context=SessionContext(),
    )


@pytest.fixture
def config() -> Config:
    return Config({"session": {"restart_delay_seconds": 0}})


@pytest.fixture
def session(recognizer, synthesizer, host, config) -> VoiceSession:
    return VoiceSession(
        recognizer=recognizer,
        synthesizer=synthesizer,
        execution=host,
        config=config,
    )
