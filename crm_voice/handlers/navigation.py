"""Navigation handlers — route the host UI to CRM pages."""

import re
from typing import Optional

from crm_voice.handlers import ActionTable
from crm_voice.handlers._format import capitalize
from crm_voice.intents import IntentCategory, VoiceResponse

ACTIONS = ActionTable(IntentCategory.NAVIGATION, "Navigation command not recognized.")


# Spoken destination -> route. Order matters for the containment pass.
DESTINATIONS = {
    "dashboard": "/crm",
    "home": "/crm",
    "leads": "/crm/modules/leads",
    "lead": "/crm/modules/leads",
    "contacts": "/crm/modules/contacts",
    "contact": "/crm/modules/contacts",
    "deals": "/crm/modules/deals",
    "deal": "/crm/modules/deals",
    "pipeline": "/crm/pipeline",
    "calendar": "/crm/calendar",
    "tasks": "/crm/tasks",
    "task": "/crm/tasks",
    "inbox": "/crm/inbox",
    "reports": "/crm/reports",
    "report": "/crm/reports",
    "analytics": "/crm/analytics",
    "settings": "/crm/settings",
    "members": "/crm/modules/members",
    "member": "/crm/modules/members",
    "advisors": "/crm/modules/advisors",
    "advisor": "/crm/modules/advisors",
    "enrollments": "/crm/modules/enrollments",
    "enrollment": "/crm/modules/enrollments",
    "commissions": "/crm/commissions",
    "commission": "/crm/commissions",
    "communications": "/crm/communications",
    "communication": "/crm/communications",
    "campaigns": "/crm/campaigns",
    "campaign": "/crm/campaigns",
    "tickets": "/crm/tickets",
    "ticket": "/crm/tickets",
    "approvals": "/crm/approval",
    "approval": "/crm/approval",
    "priorities": "/crm/tasks",
    "today": "/crm",
    "templates": "/crm/reports/templates",
    "saved reports": "/crm/reports/saved",
}

PRIORITIES_PATH = "/crm/tasks?filter=priority"

_POSSESSIVE = re.compile(r"'s\s*")


def resolve_destination(text: str) -> Optional[str]:
    """Resolve a spoken destination to a route.

    Tries, in order: exact lookup, containment in either direction against
    the destination table, then the possessive-stripped phrase
    ("today's" -> "today").
    """
    normalized = text.strip().lower()
    if not normalized:
        return None

    if normalized in DESTINATIONS:
        return DESTINATIONS[normalized]

    for key, path in DESTINATIONS.items():
        if key in normalized or normalized in key:
            return path

    without_possessive = _POSSESSIVE.sub(" ", normalized).strip()
    return DESTINATIONS.get(without_possessive)


@ACTIONS.register("navigate")
def navigate(action, entities, ctx):
    destination = entities.get("destination") or ""
    path = resolve_destination(destination)

    if path:
        ctx.go(path)
        return VoiceResponse.success(f"Opening {capitalize(destination)}")

    return VoiceResponse.error(
        f"I couldn't find \"{destination}\". "
        "Try saying \"show me leads\" or \"go to pipeline\"."
    )


@ACTIONS.register("priorities")
def priorities(action, entities, ctx):
    ctx.go(PRIORITIES_PATH)
    return VoiceResponse.success("Showing today's priority tasks")
