"""
src/orchestrator/llm_openai.py

OpenAI client wrapper for the assistant gateway.
- AssistantGateway: threads, messages, runs, tool-output submission, cancellation, direct completions
- extract_tool_calls(): normalise pending tool calls from a run object

The gateway is constructed explicitly and handed to the orchestrator and the
tool handlers, so tests can pass a fake in its place.
"""


import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import openai
from openai import OpenAI

from config import RunStatus, Settings
from orchestrator.errors import GatewayRequestError
from orchestrator.models import AssistantRun, ToolCall, ToolOutput
from orchestrator import prompts


logger = logging.getLogger(__name__)


def extract_tool_calls(run_obj) -> List[ToolCall]:
    """
    Normalise tool calls from run.required_action.submit_tool_outputs.
    Arguments that are not a JSON object become {}.
    """

    out = []
    action = getattr(run_obj, "required_action", None)
    submit = getattr(action, "submit_tool_outputs", None)
    tcs = getattr(submit, "tool_calls", None)

    if not tcs:
        return out

    for tc in tcs:
        fn = getattr(tc, "function", None)
        if fn is None:
            continue
        try:
            args = json.loads(fn.arguments or "{}")
        except json.JSONDecodeError:
            logger.warning("Tool call %s (%s) has non-JSON arguments; using {}", tc.id, fn.name)
            args = {}
        if not isinstance(args, dict):
            args = {}
        out.append(ToolCall(id=tc.id, name=fn.name, arguments=args))

    return out

def to_assistant_run(run_obj, thread_id: Optional[str] = None) -> AssistantRun:
    """Map an SDK run object onto our AssistantRun model."""

    return AssistantRun(
        id=run_obj.id,
        thread_id=getattr(run_obj, "thread_id", None) or thread_id or "",
        assistant_id=getattr(run_obj, "assistant_id", None) or "",
        status=RunStatus(run_obj.status),
        required_tool_calls=extract_tool_calls(run_obj),
    )


class AssistantGateway:

    def __init__(self, client: Any, model: str):

        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "AssistantGateway":

        client = OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
        )

        return cls(client, settings.model)

    def _call(self, operation: str, fn, *args, **kwargs):
        """Run one SDK call; any OpenAI error becomes GatewayRequestError."""

        try:
            return fn(*args, **kwargs)
        except openai.OpenAIError as e:
            logger.error("Gateway %s failed: %s", operation, e)
            raise GatewayRequestError(operation, str(e)) from e

    # --- Assistants / threads --------------------------------------------------
    def create_assistant(
            self,
            name: str,
            *,
            tools: Sequence[Dict[str, Any]],
            instructions: str = prompts.ASSISTANT_INSTRUCTIONS,
    ) -> str:
        """Create an assistant bound to our tool specs; returns its id."""

        assistant = self._call(
            "assistant-create",
            self.client.beta.assistants.create,
            name=prompts.ASSISTANT_NAME_TEMPLATE.format(name=name),
            model=self.model,
            instructions=instructions,
            tools=list(tools),
        )
        logger.info("Created assistant %s for %s", assistant.id, name)

        return assistant.id

    def create_thread(self) -> str:

        thread = self._call("thread-create", self.client.beta.threads.create)

        return thread.id

    def add_message(self, thread_id: str, content: str) -> None:

        self._call(
            "message-append",
            self.client.beta.threads.messages.create,
            thread_id,
            role="user",
            content=f"{prompts.MESSAGE_PREFIX}{content}",
        )

    # --- Runs ------------------------------------------------------------------
    def create_run(self, thread_id: str, assistant_id: str, forced_tool: Optional[str] = None) -> AssistantRun:
        """Start a run; a forced tool pins tool_choice to that function."""

        tool_choice: Any = "auto"

        if forced_tool:
            tool_choice = {"type": "function", "function": {"name": forced_tool}}

        run = self._call(
            "run-create",
            self.client.beta.threads.runs.create,
            thread_id=thread_id,
            assistant_id=assistant_id,
            tool_choice=tool_choice,
        )

        return to_assistant_run(run, thread_id)

    def retrieve_run(self, thread_id: str, run_id: str) -> AssistantRun:

        run = self._call(
            "run-retrieve",
            self.client.beta.threads.runs.retrieve,
            run_id,
            thread_id=thread_id,
        )

        return to_assistant_run(run, thread_id)

    def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: Sequence[ToolOutput]) -> AssistantRun:

        run = self._call(
            "run-submit-tool-outputs",
            self.client.beta.threads.runs.submit_tool_outputs,
            run_id,
            thread_id=thread_id,
            tool_outputs=[o.to_payload() for o in outputs],
        )

        return to_assistant_run(run, thread_id)

    def cancel_run(self, thread_id: str, run_id: str) -> AssistantRun:
        """Ask the service to stop a run we cannot answer."""

        run = self._call(
            "run-cancel",
            self.client.beta.threads.runs.cancel,
            run_id,
            thread_id=thread_id,
        )

        return to_assistant_run(run, thread_id)

    # --- Direct completions ----------------------------------------------------
    def complete(self, system: str, user: str) -> str:
        """One chat completion; returns the first choice's text ('' if empty)."""

        resp = self._call(
            "chat-completion",
            self.client.chat.completions.create,
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )

        return resp.choices[0].message.content or ""
