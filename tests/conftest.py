import threading
from datetime import date
from typing import Callable, Iterable, List, Optional

import pytest

from config import RunStatus
from context.loader import LocalStore
from orchestrator.models import AssistantRun, ToolCall, ToolContext


def make_run(status: str, calls: Iterable[ToolCall] = (), run_id: str = "run_1", thread_id: str = "thread_1") -> AssistantRun:
    return AssistantRun(
        id=run_id,
        thread_id=thread_id,
        assistant_id="asst_1",
        status=RunStatus(status),
        required_tool_calls=list(calls),
    )


class FakeGateway:
    """
    Scripted gateway. `runs[0]` is returned by create_run, the rest by
    successive retrieve_run calls (the last one repeats).
    """

    def __init__(self, runs: Optional[List[AssistantRun]] = None, completions: Optional[List[str]] = None, responder: Optional[Callable[[str, str], str]] = None, cancel_error: Optional[Exception] = None):
        self.runs = list(runs or [])
        self.completions = list(completions or [])
        self.responder = responder
        self.created_runs = []
        self.retrieve_count = 0
        self.submitted = []
        self.prompts = []
        self.messages = []
        self.thread_count = 0
        self.cancelled = []
        self.cancel_error = cancel_error
        self._lock = threading.Lock()

    def create_thread(self) -> str:
        self.thread_count += 1
        return f"thread_{self.thread_count}"

    def add_message(self, thread_id: str, content: str) -> None:
        self.messages.append((thread_id, content))

    def create_run(self, thread_id, assistant_id, forced_tool=None):
        self.created_runs.append({"thread_id": thread_id, "assistant_id": assistant_id, "forced_tool": forced_tool})
        return self.runs.pop(0)

    def retrieve_run(self, thread_id, run_id):
        self.retrieve_count += 1
        if len(self.runs) > 1:
            return self.runs.pop(0)
        return self.runs[0]

    def submit_tool_outputs(self, thread_id, run_id, outputs):
        self.submitted.append(list(outputs))
        return make_run("in_progress", run_id=run_id, thread_id=thread_id)

    def cancel_run(self, thread_id, run_id):
        self.cancelled.append((thread_id, run_id))
        if self.cancel_error is not None:
            raise self.cancel_error
        return make_run("cancelling", run_id=run_id, thread_id=thread_id)

    def complete(self, system: str, user: str) -> str:
        with self._lock:
            self.prompts.append((system, user))
            if self.responder is not None:
                return self.responder(system, user)
            return self.completions.pop(0)


@pytest.fixture()
def make_ctx():
    def _make(gateway, store: Optional[LocalStore] = None, today: date = date(2024, 2, 10), caller_id: str = "user_1") -> ToolContext:
        snapshot = store or LocalStore()
        return ToolContext(
            caller_id=caller_id,
            gateway=gateway,
            store_loader=lambda _caller: snapshot,
            today=lambda: today,
        )

    return _make
