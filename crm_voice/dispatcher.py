"""Action Dispatcher — routes intents to category handlers.

Each handler module in crm_voice/handlers/ exposes an ``ACTIONS`` table
(an ActionTable tagged with its IntentCategory). This module scans that
package at import time and assembles:
    - HANDLERS: IntentCategory -> ActionTable (action name -> handler)
    - dispatch(): awaits the matching handler and shapes failures into
      VoiceResponses, so nothing a handler raises reaches the session.
"""

import importlib
import inspect
from pathlib import Path
from typing import Optional

from crm_voice.handlers import ActionTable, ExecutionContext
from crm_voice.intents import Intent, IntentCategory, VoiceResponse
from crm_voice.logger import get_logger
from crm_voice.speech import VoiceError, error_message

logger = get_logger("crm_voice.dispatcher")

UNKNOWN_CATEGORY_MESSAGE = "I'm not sure how to help with that. Try saying 'help' for suggestions."


# ---------------------------------------------------------------------------
# Auto-discovery
# ---------------------------------------------------------------------------

def discover_handlers(package: str = "crm_voice.handlers",
                      directory: Optional[Path] = None) -> dict:
    """Import every public module in ``package`` and collect its ACTIONS.

    Modules without a valid ACTIONS table are logged and skipped. A second
    module claiming an already registered category is rejected.
    """
    directory = directory or Path(__file__).parent / "handlers"
    tables = {}

    for path in sorted(directory.glob("*.py")):
        if path.name.startswith("_"):
            continue
        mod_name = f"{package}.{path.stem}"
        try:
            mod = importlib.import_module(mod_name)
        except Exception as e:
            logger.error(f"Failed to load handler module {mod_name}: {e}")
            continue

        table = getattr(mod, "ACTIONS", None)
        if not isinstance(table, ActionTable):
            logger.error(f"Handler module {mod_name} missing required attribute: ACTIONS")
            continue
        if table.category in tables:
            logger.error(f"Handler module {mod_name} duplicates category {table.category.value}")
            continue

        tables[table.category] = table

    missing = [c.value for c in IntentCategory if c not in tables]
    if missing:
        logger.warning(f"No handlers registered for: {', '.join(missing)}")

    logger.debug(
        f"Dispatcher: {len(tables)} categories, "
        f"{sum(len(t) for t in tables.values())} actions"
    )
    return tables


HANDLERS = discover_handlers()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

async def dispatch(intent: Intent, ctx: ExecutionContext,
                   handlers: Optional[dict] = None) -> VoiceResponse:
    """Execute an intent and return the response to present.

    Args:
        intent: Parsed intent.
        ctx: Host capabilities and session context for side effects.
        handlers: Dispatch table override (defaults to HANDLERS).

    Returns:
        The handler's VoiceResponse, an info response for an unknown action,
        or an error response for an unknown category or a handler failure.
        Never raises.
    """
    table = (HANDLERS if handlers is None else handlers).get(intent.category)
    if table is None:
        logger.warning(f"No handler for category: {intent.category}")
        return VoiceResponse.error(UNKNOWN_CATEGORY_MESSAGE)

    handler = table.get(intent.action)
    if handler is None:
        logger.warning(f"Unknown action: {intent.tag}")
        return VoiceResponse.info(table.unrecognized, speak=False)

    try:
        response = handler(intent.action, intent.entities, ctx)
        if inspect.isawaitable(response):
            response = await response
    except Exception as e:
        logger.error(f"Handler error ({intent.tag}): {e}", exc_info=True)
        return VoiceResponse.error(
            error_message(VoiceError.RUNTIME_FAILURE),
            data={"error": VoiceError.RUNTIME_FAILURE.value},
        )

    logger.info(f"Executed {intent.tag}: {response.type.value}")
    return response
