"""
src/tools/decisions.py - analyze_decision

Asks the model to weigh a dilemma and parses its answer strictly as JSON.

Defaults when the model leaves something out:
- recommendation: "No clear recommendation."
- reasoning: ["No reasoning provided."] (never an empty list)
- confidence: "medium" (also for values outside high/medium/low)
"""


from typing import Any, Dict

from config import Confidence, ToolName
from orchestrator import prompts
from orchestrator.models import DecisionResult, ToolContext
from orchestrator.normalize import as_string_list, parse_json_object


NO_RECOMMENDATION = "No clear recommendation."
NO_REASONING = "No reasoning provided."


def _coerce_confidence(value: Any) -> Confidence:

    if isinstance(value, str):
        key = value.strip().lower()
        try:
            return Confidence(key)
        except ValueError:
            pass

    return Confidence.MEDIUM

def decision_from_payload(parsed: Dict[str, Any]) -> DecisionResult:
    """Apply the field defaults to an already-parsed model reply."""

    recommendation = parsed.get("recommendation")
    recommendation = str(recommendation).strip() if recommendation else ""

    return DecisionResult(
        recommendation=recommendation or NO_RECOMMENDATION,
        reasoning=as_string_list(parsed.get("reasoning")) or [NO_REASONING],
        confidence=_coerce_confidence(parsed.get("confidence")),
    )

def analyze_decision(args: Dict[str, Any], ctx: ToolContext) -> DecisionResult:
    """
    Args (from the tool call):
        dilemma: The decision the user is facing, in their words.

    Raises:
        MalformedToolOutput: the completion is not a JSON object once fences
            are stripped. No partial result is built.
    """

    dilemma = str(args.get("dilemma") or "").strip()

    raw = ctx.gateway.complete(
        prompts.SYSTEM_PROMPTS[ToolName.ANALYZE_DECISION.value],
        prompts.decision_prompt(dilemma),
    )

    return decision_from_payload(parse_json_object(raw))
