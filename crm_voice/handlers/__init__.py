"""Intent handlers, one module per intent category.

Each non-underscore .py file in this package is discovered by
crm_voice.dispatcher and must define:
    ACTIONS: ActionTable   -- action name -> handler, tagged with its category

Handlers take (action, entities, ctx) and return a VoiceResponse, either
directly or as a coroutine. All side effects go through ``ctx``.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from crm_voice.backend import OFFLINE_BACKEND
from crm_voice.context import CrmModule, Entity, SessionContext
from crm_voice.intents import IntentCategory


def _noop(*args, **kwargs):
    return None


class ActionTable(dict):
    """action name -> handler for one intent category."""

    def __init__(self, category: IntentCategory, unrecognized: str):
        super().__init__()
        self.category = IntentCategory(category)
        self.unrecognized = unrecognized     # info message for unknown actions

    def register(self, action: str):
        """Decorator to register a handler for ``action``."""
        def decorator(fn):
            self[action] = fn
            return fn
        return decorator


_MODULE_PATH = re.compile(r"^/crm/modules/([a-z]+)")


@dataclass
class ExecutionContext:
    """Host capabilities handed to every handler.

    Args:
        navigate: Route the host UI to a path.
        open_terminal: Open the command terminal panel.
        set_theme: Switch the UI theme ("light" | "dark").
        backend: CRM backend client (None = offline sample figures).
        profile: Current user, e.g. {"id": ..., "organization_id": ...}.
        voice_context: The session's context; handlers read it and record
                       navigation / surfaced records through this object.
    """

    navigate: Callable[[str], Any] = _noop
    open_terminal: Callable[[], Any] = _noop
    set_theme: Callable[[str], Any] = _noop
    backend: Optional[Any] = None
    profile: Optional[dict] = None
    voice_context: Optional[SessionContext] = None

    @property
    def selected_record(self) -> Optional[Entity]:
        return self.voice_context.selected_record if self.voice_context else None

    def go(self, path: str) -> None:
        """Navigate and keep the session's idea of the current page in sync."""
        self.navigate(path)
        if self.voice_context is None:
            return
        changes = {"current_page": path}
        m = _MODULE_PATH.match(path)
        if m and m.group(1) in {module.value for module in CrmModule}:
            changes["current_module"] = m.group(1)
        elif path == "/crm":
            changes["current_module"] = CrmModule.CRM
        self.voice_context.update(**changes)

    def remember(self, entity: Entity) -> None:
        """Push a record the user just heard about onto the recency list."""
        if self.voice_context is not None:
            self.voice_context.add_recent_entity(entity)

    async def call_backend(self, method: str, *args, **kwargs):
        """Run a (blocking) backend call off the event loop."""
        backend = self.backend or OFFLINE_BACKEND
        return await asyncio.to_thread(getattr(backend, method), *args, **kwargs)
