"""Tests for crm_voice.context."""

import pytest

from crm_voice.config import Config
from crm_voice.context import MAX_RECENT_ENTITIES, CrmModule, Entity, SessionContext


def lead(n):
    return Entity("lead", f"l{n}", f"Lead {n}")


class TestRecentEntities:
    def test_newest_first(self):
        ctx = SessionContext()
        ctx.add_recent_entity(lead(1))
        ctx.add_recent_entity(lead(2))
        assert [e.id for e in ctx.recent_entities] == ["l2", "l1"]

    def test_readding_moves_to_front_without_growth(self):
        ctx = SessionContext()
        for n in range(3):
            ctx.add_recent_entity(lead(n))
        ctx.add_recent_entity(Entity("lead", "l0", "Lead zero renamed"))

        assert len(ctx.recent_entities) == 3
        assert ctx.recent_entities[0].name == "Lead zero renamed"
        assert [e.id for e in ctx.recent_entities] == ["l0", "l2", "l1"]

    def test_capped(self):
        ctx = SessionContext()
        for n in range(MAX_RECENT_ENTITIES + 5):
            ctx.add_recent_entity(lead(n))
        assert len(ctx.recent_entities) == MAX_RECENT_ENTITIES
        assert ctx.recent_entities[0].id == f"l{MAX_RECENT_ENTITIES + 4}"

    def test_recent_person_skips_deals(self):
        ctx = SessionContext()
        ctx.add_recent_entity(Entity("member", "m1", "Pat"))
        ctx.add_recent_entity(Entity("deal", "d1", "Big Deal"))
        assert ctx.recent_person().name == "Pat"

    def test_recent_person_none(self):
        assert SessionContext().recent_person() is None


class TestUpdate:
    def test_partial_update(self):
        ctx = SessionContext()
        ctx.update(current_page="/crm/modules/deals", current_module="deals")
        assert ctx.current_page == "/crm/modules/deals"
        assert ctx.current_module is CrmModule.DEALS

    def test_unknown_module_rejected(self):
        with pytest.raises(ValueError):
            SessionContext().update(current_module="spaceships")

    def test_unknown_field_rejected(self):
        with pytest.raises(AttributeError):
            SessionContext().update(favourite_colour="blue")

    def test_recent_entities_replacement_is_deduped_and_capped(self):
        ctx = SessionContext()
        ctx.update(recent_entities=[lead(1), lead(1), *[lead(n) for n in range(2, 15)]])
        ids = [e.id for e in ctx.recent_entities]
        assert len(ids) == MAX_RECENT_ENTITIES
        assert len(set(ids)) == len(ids)
        assert ids[0] == "l1"


def test_from_config():
    ctx = SessionContext.from_config(Config({"context": {
        "current_page": "/crm/pipeline", "current_module": "deals", "timezone": "Europe/Paris",
    }}))
    assert ctx.current_page == "/crm/pipeline"
    assert ctx.current_module is CrmModule.DEALS
    assert ctx.timezone == "Europe/Paris"
