"""Voice and typed command pipeline for the CRM."""

__version__ = "0.1.0"

from crm_voice.config import Config, VoiceSettings, load_config
from crm_voice.context import CrmModule, Entity, SessionContext
from crm_voice.dispatcher import dispatch
from crm_voice.errors import BackendError, ConfigError, CrmVoiceError
from crm_voice.events import EventType, SessionEvent, SessionState
from crm_voice.handlers import ExecutionContext
from crm_voice.intents import (
    Intent,
    IntentCategory,
    QuickAction,
    ResponseType,
    VoiceResponse,
)
from crm_voice.parser import get_suggestions, parse_intent
from crm_voice.session import HistoryEntry, VoiceSession
from crm_voice.speech import VoiceError
