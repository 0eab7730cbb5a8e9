"""
src/app.py

Gradio demo playing the part of the app's screens: Daily Clarity, Decisions and
Priorities. Each panel sends one message through the run orchestrator and
renders the parsed tool result.
"""


import logging
from typing import Any, Dict, Optional

import gradio as gr

from config import Settings, ToolName, configure_logging
from orchestrator.errors import AssistantError
from orchestrator.normalize import display_label, format_insights
from orchestrator.router import RunOrchestrator


logger = logging.getLogger(__name__)

APP_TITLE = "Clarity Assistant (Local Demo)"
APP_DESC = (
    "Plan the day, think through a decision, or review this month's progress. "
    "Every request runs through the assistant and one of its three tools."
)
DEFAULT_CALLER = "demo"

PROGRESS_REQUEST = (
    "Use tool assess_progress_and_suggest with the calendarEvents, decisions, and priorities "
    "stored in my system. I want this month's performance review. Only use the tools defined. "
    "You must respond via tool_calls. Do not return plain text. Return in JSON format."
)


# --- Messages ------------------------------------------------------------------
def build_daily_message(main_task: str, blocker: str, bold_move: str) -> str:

    return f"Main Task: {main_task.strip()}\nBlocker: {blocker.strip()}\nBold Move: {bold_move.strip()}"

def build_decision_message(dilemma: str, context: str = "") -> str:

    lines = ["I need help making a decision:", f"Decision: {dilemma.strip()}"]

    if context and context.strip():
        lines.append(f"Additional Context: {context.strip()}")
    lines.append(
        "Please analyze this decision and provide a structured response using the "
        "analyze_decision function. Output in JSON format."
    )

    return "\n".join(lines)


# --- Rendering -----------------------------------------------------------------
def format_daily(result: Dict[str, Any]) -> str:

    items = format_insights(result.get("insights") or [])

    if not items:
        return "_No insights returned._"

    return "\n".join(f"- {i}" for i in items)

def format_decision(result: Dict[str, Any]) -> str:

    reasoning = result.get("reasoning") or []
    lines = [
        f"**Recommendation:** {display_label(str(result.get('recommendation', '')))}",
        f"**Confidence:** {str(result.get('confidence', '')).upper()}",
        "",
        "**Rationale:**",
    ]
    lines.extend(f"- {r}" for r in reasoning)

    return "\n".join(lines)

def format_assessment(result: Dict[str, Any]) -> str:

    lines = [result.get("assessment") or "_No assessment returned._"]

    for title, key in (("Achievements", "achievements"), ("Improvements", "improvements"), ("Recommendations", "recommendations")):
        items = result.get(key) or []
        if items:
            lines.append(f"\n**{title}**")
            lines.extend(f"- {i}" for i in items)

    return "\n".join(lines)


# --- Session -------------------------------------------------------------------
class Session:
    """Settings -> gateway -> orchestrator, plus the assistant id to run against."""

    def __init__(self, orchestrator: RunOrchestrator, assistant_id: Optional[str] = None, profile_name: str = "Demo User"):

        self.orchestrator = orchestrator
        self._assistant_id = assistant_id
        self.profile_name = profile_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "Session":

        return cls(RunOrchestrator.from_settings(settings), settings.assistant_id)

    @property
    def assistant_id(self) -> str:
        """Configured assistant, or one created on first use."""

        if not self._assistant_id:
            self._assistant_id = self.orchestrator.gateway.create_assistant(
                self.profile_name,
                tools=self.orchestrator.registry.tool_specs(),
            )

        return self._assistant_id

    def ask(self, caller_id: str, content: str, forced_tool: Optional[str] = None) -> Dict[str, Any]:

        return self.orchestrator.ask(self.assistant_id, caller_id or DEFAULT_CALLER, content, forced_tool)

    # Screen handlers return text; assistant errors become the panel message
    def daily(self, caller_id: str, main_task: str, blocker: str, bold_move: str) -> str:

        if not (main_task.strip() and blocker.strip() and bold_move.strip()):
            return "Please fill in all fields to get clarity."
        try:
            result = self.ask(caller_id, build_daily_message(main_task, blocker, bold_move))
        except AssistantError as e:
            logger.error("Daily insights failed: %s", e)
            return f"Error: {e}"

        return format_daily(result)

    def decision(self, caller_id: str, dilemma: str, context: str) -> str:

        if not dilemma.strip():
            return "Please enter a decision to analyze."
        try:
            result = self.ask(caller_id, build_decision_message(dilemma, context))
        except AssistantError as e:
            logger.error("Decision analysis failed: %s", e)
            return f"Error: {e}"

        return format_decision(result)

    def progress(self, caller_id: str) -> str:

        try:
            result = self.ask(caller_id, PROGRESS_REQUEST, ToolName.ASSESS_PROGRESS.value)
        except AssistantError as e:
            logger.error("Progress assessment failed: %s", e)
            return f"Error: {e}"

        return format_assessment(result)


def app(session: Session):
    with gr.Blocks(title=APP_TITLE) as demo:
        gr.Markdown(f"# {APP_TITLE}")
        gr.Markdown(APP_DESC)

        caller = gr.Textbox(label="Profile id", value=DEFAULT_CALLER, info="Selects data/<id>.json for progress reviews.")

        with gr.Tab("Daily Clarity"):
            main_task = gr.Textbox(label="Main task", lines=1)
            blocker = gr.Textbox(label="Blocker", lines=1)
            bold_move = gr.Textbox(label="Bold move", lines=1)
            daily_out = gr.Markdown()
            daily_btn = gr.Button("Get clarity", variant="primary")

        with gr.Tab("Decisions"):
            dilemma = gr.Textbox(label="Decision", lines=2)
            context = gr.Textbox(label="Additional context", lines=2)
            decision_out = gr.Markdown()
            decision_btn = gr.Button("Analyze", variant="primary")

        with gr.Tab("Priorities"):
            progress_out = gr.Markdown()
            progress_btn = gr.Button("Assess this month", variant="primary")

        daily_btn.click(fn=session.daily, inputs=[caller, main_task, blocker, bold_move], outputs=[daily_out])
        decision_btn.click(fn=session.decision, inputs=[caller, dilemma, context], outputs=[decision_out])
        progress_btn.click(fn=session.progress, inputs=[caller], outputs=[progress_out])

    return demo


if __name__ == "__main__":

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app(Session.from_settings(settings)).launch()

# EOF
