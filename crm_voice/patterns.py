"""
Pattern Library

Ordered catalog of (regex, intent tag, entity extractor) rules used by the
intent parser. Every regex is anchored and case-insensitive. The catalog is
tried top to bottom and the first match wins, so ORDER IS SIGNIFICANT:

    control       — closed phrases ("dark mode", "open terminal")
    query         — questions, including "show my X count" / "show summary"
    report        — "<verb> the <name> report"
    navigation    — "show me / open / go to <anything>"  (generic)
    create        — tasks, notes, meetings
    communicate   — call / email / text
    update        — deal status, value, stage, close date
    search        — find / search / look up

Groups that contain "show" / "open" phrasings sit above navigation because
the navigation verb pattern would otherwise swallow them.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

from crm_voice.intents import IntentCategory


Extractor = Callable[[re.Match, datetime], dict[str, Any]]


@dataclass(frozen=True)
class VoicePattern:
    """One recognizable phrasing."""

    regex: re.Pattern
    category: IntentCategory
    action: str
    extract: Extractor
    examples: tuple[str, ...] = field(default=())

    def match(self, text: str) -> Optional[re.Match]:
        return self.regex.match(text)


def _pattern(regex: str, category: IntentCategory, action: str,
             extract: Extractor, examples=()) -> VoicePattern:
    return VoicePattern(
        regex=re.compile(regex, re.IGNORECASE),
        category=category,
        action=action,
        extract=extract,
        examples=tuple(examples),
    )


# ---------------------------------------------------------------------------
# Normalizers
# ---------------------------------------------------------------------------

_ENTITY_TYPES = {
    "lead": "leads",
    "leads": "leads",
    "deal": "deals",
    "deals": "deals",
    "contact": "contacts",
    "contacts": "contacts",
    "task": "tasks",
    "tasks": "tasks",
    "member": "members",
    "members": "members",
    "advisor": "advisors",
    "advisors": "advisors",
    "enrollment": "enrollments",
    "enrollments": "enrollments",
    "ticket": "tickets",
    "tickets": "tickets",
}

_PERIODS = {
    "today": "today",
    "yesterday": "yesterday",
    "week": "this_week",
    "this week": "this_week",
    "last week": "last_week",
    "month": "this_month",
    "this month": "this_month",
    "last month": "last_month",
    "quarter": "this_quarter",
    "this quarter": "this_quarter",
    "last quarter": "last_quarter",
    "year": "this_year",
    "this year": "this_year",
    "last year": "last_year",
}


def normalize_entity_type(text: str) -> str:
    """Map singular/plural record names onto their plural form."""
    normalized = text.strip().lower()
    return _ENTITY_TYPES.get(normalized, normalized)


def normalize_period(text: Optional[str]) -> str:
    """Map spoken periods ("this week", "month") onto period keys."""
    if not text:
        return "today"
    normalized = text.strip().lower()
    return _PERIODS.get(normalized, normalized)


def parse_amount(digits: str, k_suffix: Optional[str] = None) -> Union[int, float]:
    """Parse "100,000" / "50" + "k" into a number. The k suffix means x1000."""
    value = float(digits.replace(",", ""))
    if k_suffix:
        value *= 1000
    return int(value) if value.is_integer() else value


_WEEKDAYS = {
    "monday": MO, "tuesday": TU, "wednesday": WE, "thursday": TH,
    "friday": FR, "saturday": SA, "sunday": SU,
}

_NEXT_WEEKDAY = re.compile(
    r"next\s+(monday|tuesday|wednesday|thursday|friday|saturday|sunday)", re.I
)
_IN_N_UNITS = re.compile(r"in\s+(\d+)\s+(day|week|month)s?", re.I)


def parse_relative_date(text: str, now: datetime) -> Union[date, str]:
    """Resolve a relative date phrase against ``now``.

    Understands today / tomorrow / yesterday, "next <weekday>" (always a
    date strictly after today) and "in N days|weeks|months". Anything else
    comes back unchanged as a string.
    """
    normalized = text.strip().lower()
    today = now.date()

    if normalized == "today":
        return today
    if normalized == "tomorrow":
        return today + relativedelta(days=1)
    if normalized == "yesterday":
        return today - relativedelta(days=1)

    m = _NEXT_WEEKDAY.search(normalized)
    if m:
        weekday = _WEEKDAYS[m.group(1).lower()]
        return today + relativedelta(days=1, weekday=weekday(+1))

    m = _IN_N_UNITS.search(normalized)
    if m:
        amount = int(m.group(1))
        unit = m.group(2).lower()
        if unit == "day":
            return today + relativedelta(days=amount)
        if unit == "week":
            return today + relativedelta(weeks=amount)
        return today + relativedelta(months=amount)

    return text


def _optional_date(text: Optional[str], now: datetime):
    return parse_relative_date(text, now) if text else None


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------

def _extract_count(m, now):
    return {
        "type": normalize_entity_type(m.group(1)),
        "period": normalize_period(m.group(2)),
    }


def _extract_task(m, now):
    description = m.group(1).strip()
    due = _optional_date(m.group(2), now)
    if due is None:
        # "create a task for tomorrow": the whole remainder is the due date
        as_date = parse_relative_date(description, now)
        if not isinstance(as_date, str):
            return {"description": None, "due": as_date}
    return {"description": description, "due": due}


def _extract_reminder(m, now):
    when = m.group(2) or m.group(3)
    return {
        "description": m.group(1).strip(),
        "due": _optional_date(when, now),
    }


def _extract_move_lead(m, now):
    return {"lead": _clean(m.group(1)), "stage": m.group(2).strip()}


def _extract_deal_value(m, now):
    return {"value": parse_amount(m.group(1), m.group(2))}


def _extract_search(m, now):
    comparison = None
    value = None
    if m.group(3):
        value = parse_amount(m.group(3), m.group(4))
        word = m.group(2).lower()
        if any(w in word for w in ("over", "above", "more")):
            comparison = "gt"
        elif any(w in word for w in ("under", "below", "less")):
            comparison = "lt"
    return {
        "query": m.group(1).strip(),
        "value_filter": value,
        "value_comparison": comparison,
    }


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

C = IntentCategory

CONTROL_PATTERNS = (
    _pattern(
        r"^(?:switch\s+to\s+|enable\s+|turn\s+on\s+)?dark\s+mode$",
        C.CONTROL, "dark_mode",
        lambda m, now: {"enabled": True},
        ["Switch to dark mode", "Enable dark mode"],
    ),
    _pattern(
        r"^(?:switch\s+to\s+|enable\s+|turn\s+on\s+)?light\s+mode$",
        C.CONTROL, "light_mode",
        lambda m, now: {"enabled": True},
        ["Switch to light mode", "Enable light mode"],
    ),
    _pattern(
        r"^(?:mute|silence|disable)\s+(?:all\s+|the\s+)?notifications?$",
        C.CONTROL, "mute_notifications",
        lambda m, now: {"muted": True},
        ["Mute notifications", "Silence notifications"],
    ),
    _pattern(
        r"^(?:log\s*out|sign\s*out)$",
        C.CONTROL, "logout",
        lambda m, now: {},
        ["Log out", "Sign out"],
    ),
    _pattern(
        r"^(?:open\s+)?(?:the\s+)?terminal$",
        C.CONTROL, "open_terminal",
        lambda m, now: {},
        ["Open terminal", "Terminal"],
    ),
    _pattern(
        r"^(?:help|what\s+can\s+(?:you|i)\s+(?:do|say))$",
        C.CONTROL, "help",
        lambda m, now: {},
        ["Help", "What can I say?"],
    ),
)

QUERY_PATTERNS = (
    _pattern(
        r"^how\s+many\s+(.+?)(?:\s+came\s+in)?"
        r"(?:\s+((?:this|last)\s+\w+|today|yesterday))?$",
        C.QUERY, "count",
        _extract_count,
        ["How many leads came in this week", "How many deals this month",
         "How many leads today?"],
    ),
    _pattern(
        r"^show\s+(?:me\s+)?my\s+(.+?)\s+count$",
        C.QUERY, "count",
        lambda m, now: {"type": normalize_entity_type(m.group(1)), "period": "open"},
        ["Show my task count"],
    ),
    _pattern(
        r"^what(?:'s|s|\s+is)\s+(?:my\s+)?(?:the\s+)?(?:total\s+)?pipeline"
        r"(?:\s+(?:value|worth))?$",
        C.QUERY, "pipeline_value",
        lambda m, now: {},
        ["What's my pipeline worth?", "What's the pipeline value"],
    ),
    _pattern(
        r"^what(?:'s|s|\s+is)\s+closing\s+(?:this\s+)?(.+)$",
        C.QUERY, "closing",
        lambda m, now: {"period": normalize_period(m.group(1))},
        ["What's closing this week?", "What's closing this month?"],
    ),
    _pattern(
        r"^who(?:'s|s|\s+is)\s+(?:my\s+)?(?:the\s+)?(?:hottest|top|best)\s+(.+)$",
        C.QUERY, "top",
        lambda m, now: {"type": normalize_entity_type(m.group(1)), "sort": "score"},
        ["Who's my hottest lead?", "Who's the top advisor?"],
    ),
    _pattern(
        r"^what(?:'s|s|\s+is)\s+(?:my\s+)?(?:the\s+)?(?:biggest|largest)\s+(.+)$",
        C.QUERY, "top",
        lambda m, now: {"type": normalize_entity_type(m.group(1)), "sort": "value"},
        ["What's my biggest deal?"],
    ),
    _pattern(
        r"^(?:give\s+me\s+|show\s+(?:me\s+)?)?(?:a\s+)?(?:today'?s\s+)?summary"
        r"(?:\s+(?:of\s+)?today(?:'s)?)?(?:\s+activit(?:y|ies))?$",
        C.QUERY, "summary",
        lambda m, now: {"period": "today"},
        ["Give me a summary of today", "Today's summary", "Show today's summary"],
    ),
    _pattern(
        r"^how\s+(?:am\s+i|are\s+we)\s+(?:doing|tracking|performing)"
        r"(?:\s+(?:this\s+)?(.+))?$",
        C.QUERY, "performance",
        lambda m, now: {"period": normalize_period(m.group(1) or "this month")},
        ["How am I tracking this quarter?", "How are we doing this month?"],
    ),
    _pattern(
        r"^how(?:'s|s|\s+is)\s+my\s+performance(?:\s+(?:this\s+)?(.+))?$",
        C.QUERY, "performance",
        lambda m, now: {"period": normalize_period(m.group(1) or "this month")},
        ["How's my performance this month?"],
    ),
)

REPORT_PATTERNS = (
    _pattern(
        r"^export\s+(?:the\s+|my\s+)?(.+?)\s+report"
        r"(?:\s+(?:to|as)\s+(csv|pdf|excel|xlsx))?$",
        C.REPORT, "export",
        lambda m, now: {
            "name": m.group(1).strip().lower(),
            "format": (m.group(2) or "csv").lower().replace("excel", "xlsx"),
        },
        ["Export the pipeline report", "Export the commissions report to PDF"],
    ),
    _pattern(
        r"^(?:run|generate|open|show(?:\s+me)?|pull\s+up)\s+(?:the\s+|a\s+|my\s+)?"
        r"(.+?)\s+report$",
        C.REPORT, "run",
        lambda m, now: {"name": m.group(1).strip().lower()},
        ["Run the pipeline report", "Show me the enrollments report"],
    ),
)

NAVIGATION_PATTERNS = (
    _pattern(
        r"^(?:show\s+(?:me\s+)?)?(?:today'?s?\s+)?priorities?$",
        C.NAVIGATION, "priorities",
        lambda m, now: {"date": "today"},
        ["Today's priorities", "Priorities", "Show me today's priorities"],
    ),
    _pattern(
        r"^(?:show\s+(?:me\s+)?|open\s+(?:the\s+)?|go\s+to\s+(?:the\s+)?|"
        r"take\s+me\s+to\s+(?:the\s+)?|navigate\s+to\s+(?:the\s+)?)(.+)$",
        C.NAVIGATION, "navigate",
        lambda m, now: {"destination": m.group(1).strip().lower()},
        ["Show me leads", "Open the pipeline", "Go to dashboard", "Take me to contacts"],
    ),
)

CREATE_PATTERNS = (
    _pattern(
        r"^(?:create|add|make|new)\s+(?:a\s+)?task\s*:?\s+(?:to\s+)?(?:for\s+)?(.+?)"
        r"(?:\s+(?:for|on|by)\s+(.+))?$",
        C.CREATE, "task",
        _extract_task,
        ["Create a task to follow up with Acme Corp", "Create a task for tomorrow",
         "Add a task: Call John"],
    ),
    _pattern(
        r"^remind\s+me\s+to\s+(.+?)(?:\s+(?:on|by|for)\s+(.+)|\s+(today|tomorrow))?$",
        C.CREATE, "task",
        _extract_reminder,
        ["Remind me to follow up tomorrow", "Remind me to send the quote by next Friday"],
    ),
    _pattern(
        r"^(?:(?:create|add|make|new)\s+(?:a\s+)?note\s+(?:that\s+)?|note\s*:\s*)(.+)$",
        C.CREATE, "note",
        lambda m, now: {"content": m.group(1).strip()},
        ["Add a note that they are interested in premium",
         "Note: Customer interested in upgrade"],
    ),
    _pattern(
        r"^(?:schedule|book|set\s+up)\s+(?:a\s+)?(?:demo|meeting|call)\s+(?:for\s+|with\s+)?(.+?)"
        r"(?:\s+(?:at|on|for)\s+(.+))?$",
        C.SCHEDULE, "meeting",
        lambda m, now: {
            "with": m.group(1).strip(),
            "when": _optional_date(m.group(2), now),
        },
        ["Schedule a demo for Acme next Tuesday", "Book a call with John"],
    ),
)

COMMUNICATION_PATTERNS = (
    _pattern(
        r"^(?:call|phone|ring|dial)\s+(.+)$",
        C.COMMUNICATE, "call",
        lambda m, now: {"contact": m.group(1).strip()},
        ["Call John Smith", "Phone Sarah"],
    ),
    _pattern(
        r"^(?:(?:send|write|compose)\s+(?:an?\s+)?email|email)\s+(?:to\s+)?(.+?)"
        r"(?:\s+about\s+(.+))?$",
        C.COMMUNICATE, "email",
        lambda m, now: {
            "recipient": m.group(1).strip(),
            "subject": _clean(m.group(2)),
        },
        ["Send email to Sarah about the proposal", "Write an email to John",
         "Email Sarah about the proposal"],
    ),
    _pattern(
        r"^(?:text|sms|message|send\s+(?:an?\s+)?(?:text|sms|message)\s+to)\s+(.+?)"
        r"(?:\s+(?:that|saying)\s+(.+))?$",
        C.COMMUNICATE, "sms",
        lambda m, now: {
            "recipient": m.group(1).strip(),
            "message": _clean(m.group(2)),
        },
        ["Text the client saying I am running late", "Message John", "Send text to Mike"],
    ),
)

UPDATE_PATTERNS = (
    _pattern(
        r"^(?:mark|set)\s+(?:the\s+)?(.+?)\s+(?:deal\s+)?(?:as\s+)?(?:won|closed[\s-]?won)$",
        C.UPDATE, "close_deal_won",
        lambda m, now: {"deal": m.group(1).strip()},
        ["Mark the Acme deal as won", "Set the Globex deal as closed won"],
    ),
    _pattern(
        r"^(?:mark|set)\s+(?:the\s+)?(.+?)\s+(?:deal\s+)?(?:as\s+)?(?:lost|closed[\s-]?lost)$",
        C.UPDATE, "close_deal_lost",
        lambda m, now: {"deal": m.group(1).strip()},
        ["Mark the Initech deal as lost"],
    ),
    _pattern(
        r"^(?:move|change)\s+(?:(?:that|the|this)\s+|(.+?)\s+)?lead\s+to\s+(.+)$",
        C.UPDATE, "move_lead",
        _extract_move_lead,
        ["Move that lead to qualified", "Change the lead to contacted",
         "Move lead to qualified"],
    ),
    _pattern(
        r"^(?:add|set|update|change)\s+(?:the\s+)?(?:deal\s+)?(?:value\s+)?(?:to\s+)?"
        r"\$?(\d[\d,]*(?:\.\d+)?)\s*(k)?"
        r"(?:\s+(?:to\s+)?(?:the\s+)?(?:deal(?:\s+value|\s+amount)?|value|amount))?$",
        C.UPDATE, "update_deal_value",
        _extract_deal_value,
        ["Add $50k to the deal value", "Set $100,000 to the deal",
         "Update deal value to 50k"],
    ),
    _pattern(
        r"^(?:set|change)\s+(?:the\s+)?close\s+date\s+to\s+(.+)$",
        C.UPDATE, "set_close_date",
        lambda m, now: {"date": parse_relative_date(m.group(1), now)},
        ["Set the close date to next Friday", "Change close date to March 15"],
    ),
)

SEARCH_PATTERNS = (
    _pattern(
        r"^(?:find|search(?:\s+for)?|look\s+(?:up|for))\s+(.+?)"
        r"(?:\s+(over|under|above|below|worth\s+(?:more|less)\s+than)\s+\$?(\d[\d,]*)\s*(k)?)?$",
        C.SEARCH, "search",
        _extract_search,
        ["Find deals over 50k", "Search for Acme", "Look up John Smith"],
    ),
)

# Order matters: first match wins. The navigation catch-all
# ("show/open/go to <anything>") must stay below control, query and report,
# or it takes "Open terminal", "Show my task count" and
# "Show me the enrollments report" as page names.
ALL_PATTERNS: tuple[VoicePattern, ...] = (
    *CONTROL_PATTERNS,
    *QUERY_PATTERNS,
    *REPORT_PATTERNS,
    *NAVIGATION_PATTERNS,
    *CREATE_PATTERNS,
    *COMMUNICATION_PATTERNS,
    *UPDATE_PATTERNS,
    *SEARCH_PATTERNS,
)
