"""Update handlers — deal status, value, stage and close date."""

from crm_voice.handlers import ActionTable
from crm_voice.handlers._format import format_currency, format_when
from crm_voice.intents import IntentCategory, VoiceResponse

ACTIONS = ActionTable(IntentCategory.UPDATE, "Update action not recognized.")


def _deal_name(entities, ctx) -> str:
    """Named deal, else the selected record, else a generic phrase."""
    if entities.get("deal"):
        return entities["deal"]
    if ctx.selected_record:
        return ctx.selected_record.name
    return "the deal"


@ACTIONS.register("close_deal_won")
async def close_deal_won(action, entities, ctx):
    name = _deal_name(entities, ctx)
    await ctx.call_backend("update_deal", name, status="won")
    return VoiceResponse.success(f"Marked {name} as Won! Congratulations!")


@ACTIONS.register("close_deal_lost")
async def close_deal_lost(action, entities, ctx):
    name = _deal_name(entities, ctx)
    await ctx.call_backend("update_deal", name, status="lost")
    return VoiceResponse.success(f"Marked {name} as Lost.")


@ACTIONS.register("move_lead")
async def move_lead(action, entities, ctx):
    stage = entities.get("stage")
    lead = entities.get("lead")
    if not lead and ctx.selected_record:
        lead = ctx.selected_record.name

    await ctx.call_backend("move_lead", lead, stage)
    return VoiceResponse.success(f"Moved lead to {stage}")


@ACTIONS.register("update_deal_value")
async def update_deal_value(action, entities, ctx):
    value = entities["value"]
    await ctx.call_backend("update_deal", _deal_name(entities, ctx), value=value)
    return VoiceResponse.success(f"Updated deal value to {format_currency(value)}")


@ACTIONS.register("set_close_date")
async def set_close_date(action, entities, ctx):
    when = entities.get("date")
    await ctx.call_backend("update_deal", _deal_name(entities, ctx), close_date=when)
    return VoiceResponse.success(f"Set close date to {format_when(when)}")
