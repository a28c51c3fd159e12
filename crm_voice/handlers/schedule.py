"""Schedule handlers."""

from crm_voice.handlers import ActionTable
from crm_voice.handlers._format import format_when
from crm_voice.intents import IntentCategory, QuickAction, VoiceResponse

ACTIONS = ActionTable(IntentCategory.SCHEDULE, "Schedule action not recognized.")

NEW_EVENT_PATH = "/crm/calendar/new"


@ACTIONS.register("meeting")
def meeting(action, entities, ctx):
    who = entities.get("with")
    when = format_when(entities.get("when"))

    ctx.go(NEW_EVENT_PATH)

    message = f"Scheduling meeting with {who}"
    if when:
        message += f" for {when}"
    return VoiceResponse.success(
        message,
        actions=[QuickAction("Add Details", "edit_meeting")],
    )
