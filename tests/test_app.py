from functools import partial
from pathlib import Path

from app import (
    PROGRESS_REQUEST,
    Session,
    build_daily_message,
    build_decision_message,
    format_assessment,
    format_decision,
)
from context.loader import LocalStore, load_store
from orchestrator.errors import NoToolOutput
from orchestrator.models import ToolCall
from orchestrator.registry import default_registry
from orchestrator.router import RunOrchestrator

from conftest import FakeGateway, make_run


class AssistantGatewayStub(FakeGateway):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.assistants = []

    def create_assistant(self, name, *, tools):
        self.assistants.append((name, tools))
        return "asst_created"


def _session(gateway, assistant_id=None):
    orchestrator = RunOrchestrator(
        gateway,
        default_registry(),
        store_loader=lambda _caller: LocalStore(),
        sleep=lambda _s: None,
    )
    return Session(orchestrator, assistant_id)


def test_build_messages():
    assert build_daily_message(" ship ", "tests", "cut") == "Main Task: ship\nBlocker: tests\nBold Move: cut"
    msg = build_decision_message("Move to Lisbon?", "remote job")
    assert "Decision: Move to Lisbon?" in msg
    assert "Additional Context: remote job" in msg
    assert "Additional Context" not in build_decision_message("Move?")


def test_format_decision_uses_display_labels():
    text = format_decision({"recommendation": "take_the_offer", "reasoning": ["Pay"], "confidence": "high"})
    assert "Take The Offer" in text
    assert "HIGH" in text
    assert "- Pay" in text


def test_format_assessment_skips_empty_sections():
    text = format_assessment({"assessment": "Good", "achievements": ["Shipped"], "improvements": []})
    assert "Good" in text
    assert "**Achievements**" in text
    assert "Improvements" not in text


def test_session_creates_assistant_once_and_runs_daily():
    call = ToolCall(id="call_1", name="generate_daily_insights", arguments={"focus": "a", "blocker": "b", "bold_move": "c"})
    gateway = AssistantGatewayStub(
        runs=[make_run("requires_action", [call]), make_run("completed")],
        completions=['1. "Start with the scariest task",\n'],
    )
    session = _session(gateway)

    text = session.daily("user_1", "a", "b", "c")

    assert text == "- Start with the scariest task"
    assert session.assistant_id == "asst_created"
    assert len(gateway.assistants) == 1
    assert {t["function"]["name"] for t in gateway.assistants[0][1]} == set(default_registry().names())


def test_session_progress_forces_tool():
    call = ToolCall(id="call_1", name="assess_progress_and_suggest")
    gateway = AssistantGatewayStub(
        runs=[make_run("queued"), make_run("requires_action", [call]), make_run("completed")],
        completions=['{"assessment": "Steady", "recommendations": ["Rest"]}'],
    )
    text = _session(gateway, "asst_1").progress("user_1")

    assert gateway.created_runs[0]["forced_tool"] == "assess_progress_and_suggest"
    assert gateway.messages[0][1] == PROGRESS_REQUEST
    assert "Steady" in text
    assert "- Rest" in text


def test_session_reports_assistant_errors():
    gateway = AssistantGatewayStub(runs=[make_run("queued"), make_run("completed")])
    text = _session(gateway, "asst_1").decision("user_1", "Move?", "")
    assert text.startswith("Error:")
    assert str(NoToolOutput("run_1", "completed")) in text


def test_session_validates_inputs_without_calling_gateway():
    gateway = AssistantGatewayStub()
    session = _session(gateway, "asst_1")
    assert "fill in all fields" in session.daily("user_1", "a", "", "c")
    assert "enter a decision" in session.decision("user_1", "  ", "")
    assert gateway.created_runs == []


def _progress_session(gateway, data_dir):
    orchestrator = RunOrchestrator(
        gateway,
        default_registry(),
        store_loader=partial(load_store, data_dir=data_dir),
        sleep=lambda _s: None,
    )
    return Session(orchestrator, "asst_1")


def _progress_runs():
    call = ToolCall(id="call_1", name="assess_progress_and_suggest")
    return [make_run("queued"), make_run("requires_action", [call]), make_run("completed")]


def test_session_reports_corrupt_store_as_panel_text(tmp_path: Path):
    (tmp_path / "user_1.json").write_text("{not json", encoding="utf-8")
    gateway = AssistantGatewayStub(runs=_progress_runs())

    text = _progress_session(gateway, tmp_path).progress("user_1")

    assert text.startswith("Error:")
    assert "user_1.json" in text
    assert gateway.prompts == []
    assert gateway.cancelled == [("thread_1", "run_1")]


def test_session_rejects_path_like_profile_ids(tmp_path: Path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (tmp_path / "secret.json").write_text('{"priorities": [{"title": "outside data dir"}]}', encoding="utf-8")
    gateway = AssistantGatewayStub(runs=_progress_runs())

    text = _progress_session(gateway, data_dir).progress("../secret")

    assert text.startswith("Error:")
    assert "Invalid caller id" in text
    assert gateway.prompts == []
