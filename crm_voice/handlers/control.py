"""Control handlers — theme, notifications, session, help."""

from crm_voice.handlers import ActionTable
from crm_voice.intents import IntentCategory, QuickAction, VoiceResponse

ACTIONS = ActionTable(IntentCategory.CONTROL, "Control action not recognized.")


HELP_TEXT = """You can say things like:
• "Show me leads" - Navigate to any page
• "How many deals this week?" - Get quick stats
• "Create a task for tomorrow" - Create records
• "Call John Smith" - Start communication
• "What's my pipeline worth?" - Get reports"""


@ACTIONS.register("dark_mode")
def dark_mode(action, entities, ctx):
    ctx.set_theme("dark")
    return VoiceResponse.success("Switched to dark mode")


@ACTIONS.register("light_mode")
def light_mode(action, entities, ctx):
    ctx.set_theme("light")
    return VoiceResponse.success("Switched to light mode")


@ACTIONS.register("mute_notifications")
def mute_notifications(action, entities, ctx):
    return VoiceResponse.success("Notifications muted", data={"muted": True})


@ACTIONS.register("logout")
def logout(action, entities, ctx):
    return VoiceResponse.question(
        "Are you sure you want to log out?",
        actions=[
            QuickAction("Yes, Log Out", "confirm_logout"),
            QuickAction("Cancel", "cancel"),
        ],
    )


@ACTIONS.register("open_terminal")
def open_terminal(action, entities, ctx):
    ctx.open_terminal()
    return VoiceResponse.success("Opening terminal", speak=False)


@ACTIONS.register("help")
def help_(action, entities, ctx):
    return VoiceResponse.info(HELP_TEXT, speak=False)
