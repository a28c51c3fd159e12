"""
Intent and response types for the voice command pipeline.

An Intent is the parser's verdict on one utterance; a VoiceResponse is what
the dispatcher hands back to the session for display and speech.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class IntentCategory(str, Enum):
    """Dispatch key for an intent."""

    NAVIGATION = "navigation"
    QUERY = "query"
    CREATE = "create"
    UPDATE = "update"
    COMMUNICATE = "communicate"
    SCHEDULE = "schedule"
    SEARCH = "search"
    CONTROL = "control"
    REPORT = "report"


class ResponseType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    QUESTION = "question"
    RESULT = "result"


# Confidence assigned to any structural pattern match, and to the
# search fallback when nothing matched.
PATTERN_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.5


@dataclass(frozen=True)
class Intent:
    """Structured result of parsing one utterance."""

    category: IntentCategory
    action: str
    entities: Mapping[str, Any] = field(default_factory=dict)
    confidence: float = PATTERN_CONFIDENCE
    raw: str = ""

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")
        # Read-only view so handlers can't mutate what the parser produced
        object.__setattr__(self, "entities", MappingProxyType(dict(self.entities)))

    @property
    def tag(self) -> str:
        return f"{self.category.value}.{self.action}"


@dataclass(frozen=True)
class QuickAction:
    """Follow-up button offered alongside a response.

    ``action`` is an opaque command string, e.g. "retry",
    "search:<text>" or "navigate:/crm/pipeline".
    """

    label: str
    action: str


@dataclass
class VoiceResponse:
    """Uniform result of handling an intent."""

    type: ResponseType
    message: str
    data: Optional[Any] = None
    actions: list[QuickAction] = field(default_factory=list)
    speak: bool = True

    @classmethod
    def success(cls, message: str, **kwargs) -> "VoiceResponse":
        return cls(ResponseType.SUCCESS, message, **kwargs)

    @classmethod
    def error(cls, message: str, **kwargs) -> "VoiceResponse":
        return cls(ResponseType.ERROR, message, **kwargs)

    @classmethod
    def info(cls, message: str, **kwargs) -> "VoiceResponse":
        return cls(ResponseType.INFO, message, **kwargs)

    @classmethod
    def question(cls, message: str, **kwargs) -> "VoiceResponse":
        return cls(ResponseType.QUESTION, message, **kwargs)

    @classmethod
    def result(cls, message: str, **kwargs) -> "VoiceResponse":
        return cls(ResponseType.RESULT, message, **kwargs)
