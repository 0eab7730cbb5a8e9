"""
src/orchestrator/router.py

Run orchestrator: starts an assistant run, polls it, executes requested tools,
submits their outputs and returns the parsed tool result.
"""


import json
import logging
import time
from datetime import date
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Set

from config import RunStatus, Settings
from context.loader import LocalStore, load_store
from orchestrator.errors import GatewayRequestError, MalformedToolOutput, NoToolOutput, RunTimeout
from orchestrator.llm_openai import AssistantGateway
from orchestrator.models import AuditEntry, OrchestratorResult, ToolContext, ToolOutput
from orchestrator.registry import ToolRegistry, default_registry


logger = logging.getLogger(__name__)


class RunOrchestrator:

    def __init__(
            self,
            gateway: AssistantGateway,
            registry: ToolRegistry,
            *,
            store_loader: Callable[[str], LocalStore] = load_store,
            poll_interval: float = 2.0,
            max_poll_attempts: int = 150,
            run_timeout: Optional[float] = 300.0,
            sleep: Callable[[float], None] = time.sleep,
            clock: Callable[[], float] = time.monotonic,
            today: Callable[[], date] = date.today,
    ):

        self.gateway = gateway
        self.registry = registry
        self.store_loader = store_loader
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.run_timeout = run_timeout
        self.sleep = sleep
        self.clock = clock
        self.today = today

    @classmethod
    def from_settings(
            cls,
            settings: Settings,
            gateway: Optional[AssistantGateway] = None,
            registry: Optional[ToolRegistry] = None,
    ) -> "RunOrchestrator":

        return cls(
            gateway or AssistantGateway.from_settings(settings),
            registry or default_registry(),
            store_loader=partial(load_store, data_dir=settings.data_dir),
            poll_interval=settings.poll_interval,
            max_poll_attempts=settings.max_poll_attempts,
            run_timeout=settings.run_timeout,
        )

    # --- Caller-facing thread helpers ------------------------------------------
    def create_thread(self) -> str:

        return self.gateway.create_thread()

    def add_message(self, thread_id: str, content: str) -> None:

        self.gateway.add_message(thread_id, content)

    # --- Orchestrate -----------------------------------------------------------
    def run(
            self,
            assistant_id: str,
            thread_id: str,
            caller_id: str,
            forced_tool: Optional[str] = None,
    ) -> OrchestratorResult:
        """
        Drive one run to a terminal status.

        When one requires_action event carries several tool calls, all are
        executed and submitted, but only the first call's output becomes the
        run result. Every output is kept on OrchestratorResult.outputs.

        If dispatch fails (unknown tool or handler error) the remote run is
        cancelled before the error propagates, so it is not left waiting in
        requires_action.

        Raises:
            RunTimeout: poll budget or wall-clock deadline exhausted.
            UnknownTool: the run asked for a tool we do not have.
            NoToolOutput: the run ended without ever requesting a tool.
            MalformedToolOutput: the recorded output is not valid JSON.
            GatewayRequestError: any gateway call failed.
        """

        ctx = ToolContext(
            caller_id=caller_id,
            gateway=self.gateway,
            store_loader=self.store_loader,
            today=self.today,
        )
        audit: List[AuditEntry] = []
        outputs: List[ToolOutput] = []
        answered: Set[str] = set()
        latest_output: Optional[str] = None

        run = self.gateway.create_run(thread_id, assistant_id, forced_tool)
        logger.info("Started run %s on thread %s (tool_choice=%s)", run.id, thread_id, forced_tool or "auto")
        audit.append(AuditEntry(step="run_create", ok=True, detail=f"status={run.status.value}"))

        started = self.clock()
        attempts = 0

        while run.is_active:
            # Calls already answered are skipped, so a stale requires_action read is just another poll
            pending = [tc for tc in run.required_tool_calls if tc.id not in answered]

            if run.needs_tool_outputs and pending:
                for tc in pending:
                    audit.append(AuditEntry(step="tool_call", ok=True, detail=f"Calling {tc.name}", tool_call=tc))

                try:
                    batch = self.registry.dispatch(pending, ctx)
                except Exception:
                    audit.append(AuditEntry(step="tool_dispatch", ok=False, detail="dispatch failed, cancelling run"))
                    self._cancel(thread_id, run.id)
                    raise

                self.gateway.submit_tool_outputs(thread_id, run.id, batch)
                logger.info("Submitted %d tool output(s) for run %s", len(batch), run.id)

                answered.update(tc.id for tc in pending)
                outputs.extend(batch)
                latest_output = batch[0].output
                audit.append(AuditEntry(step="tool_outputs_submitted", ok=True, detail=f"{len(batch)} output(s)"))
            elif attempts:
                self.sleep(self.poll_interval)

            elapsed = self.clock() - started
            if attempts >= self.max_poll_attempts or (self.run_timeout is not None and elapsed >= self.run_timeout):
                logger.error("Run %s timed out after %d polls (%.1fs)", run.id, attempts, elapsed)
                audit.append(AuditEntry(step="timeout", ok=False, detail=f"{attempts} polls"))
                raise RunTimeout(run.id, attempts, elapsed)

            attempts += 1
            previous = run.status
            run = self.gateway.retrieve_run(thread_id, run.id)
            if run.status != previous:
                logger.info("Run %s: %s -> %s", run.id, previous.value, run.status.value)

        audit.append(AuditEntry(step="run_end", ok=latest_output is not None, detail=f"status={run.status.value}"))

        if latest_output is None:
            logger.error("Run %s ended with status %s and no tool output", run.id, run.status.value)
            raise NoToolOutput(run.id, run.status.value)

        if run.status != RunStatus.COMPLETED:
            logger.warning("Run %s ended with status %s after a tool output; using that output", run.id, run.status.value)

        result = _parse_output(latest_output)

        return OrchestratorResult(result=result, run=run, outputs=outputs, audit=audit)

    def run_assistant(
            self,
            assistant_id: str,
            thread_id: str,
            caller_id: str,
            forced_tool: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Run and return only the parsed tool result."""

        return self.run(assistant_id, thread_id, caller_id, forced_tool).result

    def _cancel(self, thread_id: str, run_id: str) -> None:

        try:
            self.gateway.cancel_run(thread_id, run_id)
        except GatewayRequestError as e:
            # The dispatch error is the one the caller needs to see
            logger.warning("Could not cancel run %s: %s", run_id, e)
        else:
            logger.info("Cancelled run %s after a dispatch failure", run_id)

    def ask(
            self,
            assistant_id: str,
            caller_id: str,
            content: str,
            forced_tool: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fresh thread, one user message, one run. How every screen drives the assistant."""

        thread_id = self.create_thread()
        self.add_message(thread_id, content)

        return self.run_assistant(assistant_id, thread_id, caller_id, forced_tool)


def _parse_output(raw: str) -> Dict[str, Any]:
    """The recorded tool output must decode to a JSON object."""

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Tool output was not valid JSON: %s", e)
        raise MalformedToolOutput("Tool output is not valid JSON.", raw=raw) from e

    if not isinstance(parsed, dict):
        raise MalformedToolOutput("Tool output is not a JSON object.", raw=raw)

    return parsed
