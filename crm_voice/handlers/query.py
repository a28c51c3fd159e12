"""Query handlers. Figures come from the CRM backend (or offline samples)."""

from crm_voice.context import Entity
from crm_voice.handlers import ActionTable
from crm_voice.handlers._format import (
    capitalize,
    format_currency,
    format_period,
    singular,
)
from crm_voice.intents import IntentCategory, QuickAction, VoiceResponse

ACTIONS = ActionTable(IntentCategory.QUERY, "Query not recognized.")


@ACTIONS.register("count")
async def count(action, entities, ctx):
    entity_type = entities.get("type", "records")
    period = entities.get("period") or "today"

    total = await ctx.call_backend("count", entity_type, period)

    if period == "open":
        message = f"You have {total} open {entity_type}"
    else:
        message = f"You have {total} {entity_type} {format_period(period)}"
    return VoiceResponse.result(
        message,
        data={"count": total, "type": entity_type, "period": period},
    )


@ACTIONS.register("pipeline_value")
async def pipeline_value(action, entities, ctx):
    value = await ctx.call_backend("pipeline_value")
    return VoiceResponse.result(
        f"Your pipeline is worth {format_currency(value)}",
        data={"value": value},
    )


@ACTIONS.register("closing")
async def closing(action, entities, ctx):
    period = entities.get("period") or "this_week"
    stats = await ctx.call_backend("closing", period)
    n, value = stats["count"], stats["value"]

    return VoiceResponse.result(
        f"You have {n} deals closing {format_period(period)} worth {format_currency(value)}",
        data={"count": n, "value": value, "period": period},
        actions=[QuickAction("View Deals", "navigate:/crm/pipeline?filter=closing")],
    )


@ACTIONS.register("top")
async def top(action, entities, ctx):
    entity_type = entities.get("type", "leads")
    sort = entities.get("sort", "score")
    record = await ctx.call_backend("top", entity_type, sort)

    name = record["name"]
    kind = singular(entity_type)
    if sort == "value":
        message = f"Your biggest {kind} is {name} at {format_currency(record['value'])}"
    else:
        message = f"Your hottest {kind} is {name} with a score of {record['score']}"

    # Surfaced records become pronoun targets ("call them")
    ctx.remember(Entity(type=kind, id=str(record["id"]), name=name))

    return VoiceResponse.result(
        message,
        data=dict(record),
        actions=[
            QuickAction("View Details", f"navigate:/crm/modules/{entity_type}/{record['id']}"),
        ],
    )


@ACTIONS.register("summary")
async def summary(action, entities, ctx):
    period = entities.get("period") or "today"
    stats = await ctx.call_backend("summary", period)

    return VoiceResponse.result(
        f"{capitalize(format_period(period))} you have {stats['tasks']} tasks completed, "
        f"{stats['calls']} calls made, and {stats['deals']} deals moved forward.",
        data=dict(stats),
    )


@ACTIONS.register("performance")
async def performance(action, entities, ctx):
    period = entities.get("period") or "this_month"
    stats = await ctx.call_backend("performance", period)

    return VoiceResponse.result(
        f"You're tracking at {stats['percentage']}% of your {format_period(period)} goal "
        f"with {format_currency(stats['closed_value'])} in closed deals.",
        data=dict(stats),
    )
