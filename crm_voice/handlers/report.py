"""Report handlers — open or export named reports."""

from urllib.parse import quote

from crm_voice.handlers import ActionTable
from crm_voice.handlers._format import capitalize
from crm_voice.intents import IntentCategory, QuickAction, VoiceResponse

ACTIONS = ActionTable(IntentCategory.REPORT, "Report action not recognized.")

REPORTS_PATH = "/crm/reports"


def _report_path(name) -> str:
    if not name:
        return REPORTS_PATH
    return f"{REPORTS_PATH}?report={quote(name, safe='')}"


@ACTIONS.register("run")
def run(action, entities, ctx):
    name = entities.get("name")
    ctx.go(_report_path(name))
    if not name:
        return VoiceResponse.success("Opening reports")
    return VoiceResponse.success(f"Opening the {name} report", data={"report": name})


@ACTIONS.register("export")
def export(action, entities, ctx):
    name = entities.get("name")
    fmt = entities.get("format", "csv")
    path = _report_path(name)
    ctx.go(f"{path}{'&' if '?' in path else '?'}export={fmt}")

    return VoiceResponse.success(
        f"Exporting the {name} report as {fmt.upper()}",
        data={"report": name, "format": fmt},
        actions=[QuickAction(f"Open {capitalize(name or 'reports')}", f"navigate:{path}")],
    )
