"""Create handlers: tasks and notes."""

from crm_voice.handlers import ActionTable
from crm_voice.handlers._format import format_when
from crm_voice.intents import IntentCategory, QuickAction, VoiceResponse

ACTIONS = ActionTable(IntentCategory.CREATE, "Create action not recognized.")


@ACTIONS.register("task")
async def task(action, entities, ctx):
    description = entities.get("description")
    due = entities.get("due")

    await ctx.call_backend("create_task", description, due=due)

    message = f'Created task: "{description}"' if description else "Created task"
    if due:
        message += f" due {format_when(due)}"

    return VoiceResponse.success(
        message,
        data={"description": description, "due": due},
        actions=[
            QuickAction("View Task", "navigate:/crm/tasks"),
            QuickAction("Edit Task", "edit_task"),
        ],
    )


@ACTIONS.register("note")
async def note(action, entities, ctx):
    content = entities.get("content", "")
    record = ctx.selected_record

    await ctx.call_backend("create_note", content, record_id=record.id if record else None)

    return VoiceResponse.success(f'Added note: "{content}"')
