"""Tests for crm_voice.parser — normalization, pronouns, fallback, suggestions."""

import pytest

from crm_voice.context import Entity, SessionContext
from crm_voice.intents import FALLBACK_CONFIDENCE, PATTERN_CONFIDENCE, IntentCategory
from crm_voice.parser import (
    get_suggestions,
    normalize_transcript,
    parse_intent,
    resolve_pronouns,
)

from conftest import FIXED_NOW


@pytest.fixture
def context() -> SessionContext:
    ctx = SessionContext(selected_record=Entity("deal", "d1", "Globex Expansion"))
    ctx.add_recent_entity(Entity("deal", "d2", "Initech Renewal"))
    ctx.add_recent_entity(Entity("lead", "l1", "Sarah Connor"))
    return ctx


class TestNormalize:
    def test_trims_and_collapses_whitespace(self):
        assert normalize_transcript("  show   me \t leads ") == "show me leads"

    def test_strips_trailing_punctuation(self):
        assert normalize_transcript("What's my pipeline worth?") == "What's my pipeline worth"
        assert normalize_transcript("Call John!!") == "Call John"


class TestParseIntent:
    def test_match_has_pattern_confidence(self):
        intent = parse_intent("Show me leads", now=FIXED_NOW)
        assert intent.category is IntentCategory.NAVIGATION
        assert intent.action == "navigate"
        assert intent.entities["destination"] == "leads"
        assert intent.confidence == PATTERN_CONFIDENCE
        assert intent.raw == "Show me leads"

    def test_no_match_falls_back_to_search(self):
        intent = parse_intent("purple elephant migration", now=FIXED_NOW)
        assert intent.category is IntentCategory.SEARCH
        assert intent.action == "search"
        assert intent.confidence == FALLBACK_CONFIDENCE
        assert dict(intent.entities) == {"query": "purple elephant migration"}

    def test_fallback_query_is_normalized(self):
        intent = parse_intent("  purple   elephant? ", now=FIXED_NOW)
        assert intent.entities["query"] == "purple elephant"

    def test_is_pure(self, context):
        before = (context.selected_record, list(context.recent_entities))
        first = parse_intent("Call them", context, now=FIXED_NOW)
        second = parse_intent("Call them", context, now=FIXED_NOW)

        assert (first.tag, dict(first.entities), first.confidence) == \
               (second.tag, dict(second.entities), second.confidence)
        assert (context.selected_record, context.recent_entities) == before

    def test_entities_are_read_only(self):
        intent = parse_intent("Call John Smith", now=FIXED_NOW)
        with pytest.raises(TypeError):
            intent.entities["contact"] = "someone else"

    @pytest.mark.parametrize("text", ["", "   ", "?!", "$$$ 123k"])
    def test_never_raises(self, text):
        assert parse_intent(text, now=FIXED_NOW).category is IntentCategory.SEARCH


class TestPronouns:
    def test_singular_pronoun_is_selected_record(self, context):
        intent = parse_intent("Mark it as won", context, now=FIXED_NOW)
        assert intent.tag == "update.close_deal_won"
        assert intent.entities["deal"] == "Globex Expansion"

    def test_plural_pronoun_is_most_recent_person(self, context):
        intent = parse_intent("Call them", context, now=FIXED_NOW)
        assert intent.entities["contact"] == "Sarah Connor"

    def test_deals_are_not_people(self):
        ctx = SessionContext()
        ctx.add_recent_entity(Entity("deal", "d2", "Initech Renewal"))
        assert resolve_pronouns("Call them", ctx) == "Call them"

    def test_pronoun_only_as_whole_word(self, context):
        assert resolve_pronouns("Show me theme settings", context) == "Show me theme settings"

    def test_single_pass(self):
        ctx = SessionContext(selected_record=Entity("contact", "c1", "Tell them"))
        ctx.add_recent_entity(Entity("contact", "c2", "Bob"))
        assert resolve_pronouns("email it", ctx) == "email Tell them"

    def test_unresolvable_pronoun_is_kept(self):
        assert resolve_pronouns("Call them", SessionContext()) == "Call them"

    def test_idempotent_across_calls(self, context):
        once = resolve_pronouns("move that lead to qualified", context)
        assert resolve_pronouns("move that lead to qualified", context) == once


class TestSuggestions:
    def test_defaults(self):
        assert get_suggestions(SessionContext()) == [
            "Show me today's priorities",
            "What's closing this week?",
            "How am I tracking this month?",
        ]

    def test_pipeline_page(self):
        suggestions = get_suggestions(SessionContext(current_page="/crm/pipeline"))
        assert len(suggestions) == 5
        assert "What's my pipeline worth?" in suggestions

    def test_selected_record_capped(self):
        ctx = SessionContext(current_page="/crm/tasks",
                             selected_record=Entity("contact", "c1", "John"))
        suggestions = get_suggestions(ctx)
        assert len(suggestions) == 5
        assert "Call John" not in suggestions

    def test_selected_record_on_plain_page(self):
        ctx = SessionContext(selected_record=Entity("contact", "c1", "John"))
        assert get_suggestions(ctx)[3:] == ["Call John", "Send email to John"]
