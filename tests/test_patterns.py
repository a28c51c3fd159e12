"""Tests for crm_voice.patterns — catalog order, extractors, normalizers."""

from datetime import date

import pytest

from crm_voice.intents import IntentCategory
from crm_voice.parser import match_pattern, normalize_transcript, parse_intent
from crm_voice.patterns import (
    ALL_PATTERNS,
    normalize_entity_type,
    normalize_period,
    parse_amount,
    parse_relative_date,
)

from conftest import FIXED_NOW


class TestCatalog:
    def test_every_example_is_won_by_its_own_pattern(self):
        for pattern in ALL_PATTERNS:
            for example in pattern.examples:
                found = match_pattern(normalize_transcript(example))
                assert found is not None, example
                assert found[0] is pattern, f"{example!r} matched {found[0].action}"

    def test_patterns_are_anchored_and_case_insensitive(self):
        assert match_pattern("SHOW ME LEADS")[0].action == "navigate"
        assert match_pattern("please show me leads") is None

    def test_control_precedes_navigation(self):
        intent = parse_intent("Open terminal", now=FIXED_NOW)
        assert intent.tag == "control.open_terminal"

    def test_query_precedes_navigation(self):
        intent = parse_intent("Show today's summary", now=FIXED_NOW)
        assert intent.tag == "query.summary"

    def test_report_precedes_navigation(self):
        intent = parse_intent("Show me the enrollments report", now=FIXED_NOW)
        assert intent.tag == "report.run"
        assert intent.entities["name"] == "enrollments"

    def test_task_count_is_a_query_not_a_page(self):
        intent = parse_intent("Show my task count", now=FIXED_NOW)
        assert intent.tag == "query.count"

    def test_navigation_follows_control_query_and_report(self):
        order = [p.category for p in ALL_PATTERNS]
        first_nav = order.index(IntentCategory.NAVIGATION)
        for category in (IntentCategory.CONTROL, IntentCategory.QUERY, IntentCategory.REPORT):
            last = len(order) - 1 - order[::-1].index(category)
            assert last < first_nav, category

    def test_every_category_has_patterns(self):
        assert {p.category for p in ALL_PATTERNS} == set(IntentCategory)


class TestAmounts:
    def test_k_suffix_multiplies(self):
        assert parse_intent("Add $50k to the deal value", now=FIXED_NOW).entities["value"] == 50000

    def test_thousands_separator(self):
        intent = parse_intent("Set $100,000 to the deal", now=FIXED_NOW)
        assert intent.tag == "update.update_deal_value"
        assert intent.entities["value"] == 100000

    def test_k_only_counts_when_attached_to_the_number(self):
        intent = parse_intent("Look up John Smith", now=FIXED_NOW)
        assert intent.entities == {
            "query": "John Smith", "value_filter": None, "value_comparison": None,
        }

    @pytest.mark.parametrize("digits,k,expected", [
        ("100,000", None, 100000),
        ("50", "k", 50000),
        ("2.5", "k", 2500),
        ("1.5", None, 1.5),
    ])
    def test_parse_amount(self, digits, k, expected):
        assert parse_amount(digits, k) == expected

    def test_search_value_filters(self):
        over = parse_intent("Find deals over 50k", now=FIXED_NOW).entities
        assert (over["query"], over["value_filter"], over["value_comparison"]) == ("deals", 50000, "gt")

        under = parse_intent("Find deals worth less than $20,000", now=FIXED_NOW).entities
        assert (under["value_filter"], under["value_comparison"]) == (20000, "lt")


class TestRelativeDates:
    @pytest.mark.parametrize("phrase,expected", [
        ("today", date(2026, 10, 14)),
        ("tomorrow", date(2026, 10, 15)),
        ("yesterday", date(2026, 10, 13)),
        ("next friday", date(2026, 10, 16)),
        ("next Wednesday", date(2026, 10, 21)),
        ("in 3 days", date(2026, 10, 17)),
        ("in 2 weeks", date(2026, 10, 28)),
        ("in 1 month", date(2026, 11, 14)),
    ])
    def test_resolves(self, phrase, expected):
        assert parse_relative_date(phrase, FIXED_NOW) == expected

    def test_unknown_phrase_passes_through(self):
        assert parse_relative_date("March 15", FIXED_NOW) == "March 15"

    def test_task_for_tomorrow_has_due_date_only(self):
        intent = parse_intent("Create a task for tomorrow", now=FIXED_NOW)
        assert intent.tag == "create.task"
        assert intent.entities["description"] is None
        assert intent.entities["due"] == date(2026, 10, 15)

    def test_reminder_with_due_phrase(self):
        intent = parse_intent("Remind me to send the quote by next Friday", now=FIXED_NOW)
        assert intent.entities["description"] == "send the quote"
        assert intent.entities["due"] == date(2026, 10, 16)

    def test_close_date(self):
        intent = parse_intent("Set the close date to next Friday", now=FIXED_NOW)
        assert intent.entities["date"] == date(2026, 10, 16)


class TestNormalizers:
    def test_entity_types(self):
        assert normalize_entity_type("Lead") == "leads"
        assert normalize_entity_type("deals") == "deals"
        assert normalize_entity_type("widgets") == "widgets"

    def test_periods(self):
        assert normalize_period(None) == "today"
        assert normalize_period("week") == "this_week"
        assert normalize_period("This Week") == "this_week"
        assert normalize_period("last month") == "last_month"

    def test_count_extracts_type_and_period(self):
        intent = parse_intent("How many leads came in this week", now=FIXED_NOW)
        assert dict(intent.entities) == {"type": "leads", "period": "this_week"}

    def test_count_defaults_to_today(self):
        intent = parse_intent("How many deals", now=FIXED_NOW)
        assert intent.entities["period"] == "today"

    def test_email_recipient_and_subject(self):
        intent = parse_intent("Send email to Sarah about the proposal", now=FIXED_NOW)
        assert intent.entities["recipient"] == "Sarah"
        assert intent.entities["subject"] == "the proposal"
