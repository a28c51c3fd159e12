"""Search handler — also the fallback target for unmatched utterances."""

from urllib.parse import quote

from crm_voice.handlers import ActionTable
from crm_voice.handlers._format import format_currency
from crm_voice.intents import IntentCategory, VoiceResponse

ACTIONS = ActionTable(IntentCategory.SEARCH, "Search action not recognized.")

SEARCH_PATH = "/crm/search"


@ACTIONS.register("search")
def search(action, entities, ctx):
    query = entities.get("query", "")
    value = entities.get("value_filter")
    comparison = entities.get("value_comparison")

    path = f"{SEARCH_PATH}?q={quote(query, safe='')}"
    if value and comparison:
        path += f"&value={comparison}:{value}"
    ctx.go(path)

    message = f'Searching for "{query}"'
    if value:
        direction = "over" if comparison == "gt" else "under"
        message += f" {direction} {format_currency(value)}"
    return VoiceResponse.success(message + "...")
