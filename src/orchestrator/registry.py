"""
src/orchestrator/registry.py

Tool registry: name -> (schema, handler), and concurrent dispatch of the tool
calls a run is waiting on.
"""


import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Sequence

from pydantic import BaseModel

from config import ToolName
from orchestrator.errors import UnknownTool
from orchestrator.models import ToolCall, ToolContext, ToolOutput
from tools import decisions, insights, progress


logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any], ToolContext], BaseModel]


def _tool_spec(name: str, description: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
    """Build an OpenAI function spec."""

    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": parameters.get("properties", {}),
                "required": parameters.get("required", []),
                "additionalProperties": False,
            },
        },
    }


class ToolSpec:

    def __init__(self, name: str, description: str, parameters: Dict[str, Any], handler: Handler):

        self.name = name
        self.description = description
        self.parameters = parameters
        self.handler = handler

    def openai_spec(self) -> Dict[str, Any]:

        return _tool_spec(self.name, self.description, self.parameters)


class ToolRegistry:

    def __init__(self, specs: Iterable[ToolSpec]):

        self._specs: Dict[str, ToolSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Tool registered twice: {spec.name}")
            self._specs[spec.name] = spec

    def names(self) -> List[str]:

        return list(self._specs)

    def get(self, name: str) -> ToolSpec:

        try:
            return self._specs[name]
        except KeyError:
            raise UnknownTool(name) from None

    def tool_specs(self) -> List[Dict[str, Any]]:
        """JSON schemas handed to the assistant at creation time."""

        return [spec.openai_spec() for spec in self._specs.values()]

    def _execute(self, call: ToolCall, ctx: ToolContext) -> ToolOutput:
        """Run one handler and serialise its result as the tool output string."""

        spec = self._specs[call.name]
        logger.info("Running tool %s (call %s) for %s", call.name, call.id, ctx.caller_id)
        result = spec.handler(call.arguments, ctx)

        return ToolOutput(
            tool_call_id=call.id,
            output=json.dumps(result.model_dump(mode="json"), ensure_ascii=False),
        )

    def dispatch(self, calls: Sequence[ToolCall], ctx: ToolContext) -> List[ToolOutput]:
        """
        Execute every call concurrently; one output per call, in input order.

        Every name is checked before anything runs, so an unknown tool fails
        the batch up front. A handler error propagates to the caller.
        """

        for call in calls:
            if call.name not in self._specs:
                logger.error("Run asked for unknown tool %s (call %s)", call.name, call.id)
                raise UnknownTool(call.name, call.id)

        if not calls:
            return []

        with ThreadPoolExecutor(max_workers=len(calls), thread_name_prefix="tool") as pool:
            futures = [pool.submit(self._execute, call, ctx) for call in calls]
            outputs = [f.result() for f in futures]

        return outputs


def default_registry() -> ToolRegistry:
    """The three tools the assistant is allowed to call."""

    return ToolRegistry([
        ToolSpec(
            ToolName.DAILY_INSIGHTS.value,
            "Generate concise and actionable daily insights from the user's focus, blocker and bold move.",
            {
                "properties": {
                    "focus": {"type": "string"},
                    "blocker": {"type": "string"},
                    "bold_move": {"type": "string"}
                },
                "required": ["focus", "blocker", "bold_move"]
            },
            insights.generate_daily_insights,
        ),
        ToolSpec(
            ToolName.ANALYZE_DECISION.value,
            "Break down a decision and give strategic clarity.",
            {
                "properties": {
                    "dilemma": {"type": "string"}
                },
                "required": ["dilemma"]
            },
            decisions.analyze_decision,
        ),
        ToolSpec(
            ToolName.ASSESS_PROGRESS.value,
            "Assess this month's progress from the user's calendar events, decisions and priorities.",
            {
                "properties": {},
                "required": []
            },
            progress.assess_progress_and_suggest,
        ),
    ])
