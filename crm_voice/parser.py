"""
Intent Parser

Converts a spoken or typed command into a structured Intent.

Pipeline for one utterance:
    1. normalize  — trim, collapse whitespace, drop trailing . ! ?
    2. pronouns   — one pass: it/this/that -> selected record,
                    them/they -> most recent person entity
    3. match      — first pattern in ALL_PATTERNS wins (confidence 0.9)
    4. fallback   — generic search intent (confidence 0.5)

parse_intent() never raises and never mutates the context. Given the same
transcript, context and ``now`` it returns an equal Intent.
"""

import re
from datetime import datetime
from typing import Optional, Sequence

from dateutil import tz

from crm_voice.context import SessionContext
from crm_voice.intents import (
    FALLBACK_CONFIDENCE,
    PATTERN_CONFIDENCE,
    Intent,
    IntentCategory,
)
from crm_voice.logger import get_logger
from crm_voice.patterns import ALL_PATTERNS, VoicePattern

logger = get_logger("crm_voice.parser")


_WHITESPACE = re.compile(r"\s+")
_TRAILING_PUNCT = re.compile(r"[.!?]+$")
_PRONOUNS = re.compile(r"\b(it|this|that|them|they)\b", re.IGNORECASE)

_SINGULAR = frozenset({"it", "this", "that"})


def normalize_transcript(transcript: str) -> str:
    """Trim, collapse internal whitespace and strip trailing punctuation."""
    text = _WHITESPACE.sub(" ", transcript.strip())
    return _TRAILING_PUNCT.sub("", text).rstrip()


def resolve_pronouns(text: str, context: Optional[SessionContext]) -> str:
    """Substitute pronouns with names from the session context.

    Substitution happens in a single regex pass, so a name that itself
    contains a pronoun is never rewritten again.
    """
    if context is None:
        return text

    selected = context.selected_record.name if context.selected_record else None
    person = context.recent_person()
    recent = person.name if person else None

    if not selected and not recent:
        return text

    def _swap(m: re.Match) -> str:
        word = m.group(1).lower()
        if word in _SINGULAR:
            return selected or m.group(0)
        return recent or m.group(0)

    return _PRONOUNS.sub(_swap, text)


def context_now(context: Optional[SessionContext]) -> datetime:
    """Current wall-clock time in the session's timezone."""
    zone = tz.gettz(context.timezone) if context else None
    return datetime.now(zone or tz.UTC)


def match_pattern(text: str,
                  patterns: Sequence[VoicePattern] = ALL_PATTERNS):
    """Return (pattern, match) for the first pattern that matches, else None."""
    for pattern in patterns:
        m = pattern.match(text)
        if m:
            return pattern, m
    return None


def parse_intent(transcript: str,
                 context: Optional[SessionContext] = None,
                 now: Optional[datetime] = None,
                 patterns: Sequence[VoicePattern] = ALL_PATTERNS) -> Intent:
    """Parse one utterance into an Intent.

    Args:
        transcript: Raw text from the speech engine or keyboard.
        context: Session context for pronoun resolution and timezone.
        now: Reference time for relative dates (defaults to the current
             time in the context's timezone).
        patterns: Pattern catalog, in priority order.

    Returns:
        Intent with confidence 0.9 on a pattern match, or a search intent
        with confidence 0.5 when nothing matched.
    """
    text = resolve_pronouns(normalize_transcript(transcript), context)
    reference = now or context_now(context)

    found = match_pattern(text, patterns)
    if found:
        pattern, m = found
        intent = Intent(
            category=pattern.category,
            action=pattern.action,
            entities=pattern.extract(m, reference),
            confidence=PATTERN_CONFIDENCE,
            raw=transcript,
        )
        logger.debug(f"Matched {intent.tag} for '{text}'")
        return intent

    logger.debug(f"No pattern matched '{text}', falling back to search")
    return Intent(
        category=IntentCategory.SEARCH,
        action="search",
        entities={"query": text},
        confidence=FALLBACK_CONFIDENCE,
        raw=transcript,
    )


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

MAX_SUGGESTIONS = 5

_ALWAYS = (
    "Show me today's priorities",
    "What's closing this week?",
    "How am I tracking this month?",
)

_DEAL_PAGES = (
    "What's my pipeline worth?",
    "Find deals over $50k",
    "Who's my hottest lead?",
)

_TASK_PAGES = (
    "Create a task for tomorrow",
    "Show me overdue tasks",
    "Mark this task as complete",
)


def get_suggestions(context: Optional[SessionContext] = None) -> list[str]:
    """Example commands relevant to where the user currently is."""
    suggestions = list(_ALWAYS)

    page = context.current_page if context else ""
    if "deals" in page or "pipeline" in page:
        suggestions.extend(_DEAL_PAGES)
    if "tasks" in page:
        suggestions.extend(_TASK_PAGES)

    if context and context.selected_record:
        name = context.selected_record.name
        suggestions.extend([
            f"Call {name}",
            f"Send email to {name}",
            f"Create a task for {name}",
        ])

    return suggestions[:MAX_SUGGESTIONS]
