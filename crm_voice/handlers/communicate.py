"""Communication handlers."""

from urllib.parse import quote

from crm_voice.handlers import ActionTable
from crm_voice.intents import IntentCategory, QuickAction, VoiceResponse

ACTIONS = ActionTable(IntentCategory.COMMUNICATE, "Communication action not recognized.")

COMPOSE_PATH = "/crm/inbox/compose"


def _recipient(entities):
    return entities.get("recipient") or entities.get("contact")


@ACTIONS.register("call")
def call(action, entities, ctx):
    return VoiceResponse.success(
        f"Calling {_recipient(entities)}...",
        actions=[
            QuickAction("End Call", "end_call"),
            QuickAction("Log Call", "log_call"),
        ],
    )


@ACTIONS.register("email")
def email(action, entities, ctx):
    recipient = _recipient(entities)
    subject = entities.get("subject")

    path = f"{COMPOSE_PATH}?to={quote(recipient, safe='')}"
    if subject:
        path += f"&subject={quote(subject, safe='')}"
    ctx.go(path)

    message = f"Opening email composer for {recipient}"
    if subject:
        message += f" about {subject}"
    return VoiceResponse.success(message)


@ACTIONS.register("sms")
def sms(action, entities, ctx):
    return VoiceResponse.success(
        f"Sending text to {_recipient(entities)}...",
        data={"message": entities.get("message")},
    )
