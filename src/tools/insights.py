"""
src/tools/insights.py - generate_daily_insights

Turns the day's focus, blocker and bold move into a short list of actionable
insights. The model is asked for JSON but its answer is read line by line, so a
reply that slips into plain lines still yields usable insights.
"""


import logging
from typing import Any, Dict

from config import ToolName
from orchestrator import prompts
from orchestrator.models import DailyInsightsResult, ToolContext
from orchestrator.normalize import split_lines


logger = logging.getLogger(__name__)


def _text_arg(args: Dict[str, Any], key: str) -> str:

    value = args.get(key)

    return "" if value is None else str(value).strip()

def generate_daily_insights(args: Dict[str, Any], ctx: ToolContext) -> DailyInsightsResult:
    """
    Args (from the tool call):
        focus: What the user wants to get done today.
        blocker: What is in the way.
        bold_move: The one courageous action they are considering.

    Returns:
        DailyInsightsResult with one insight per non-blank line of the
        completion, plus the three inputs echoed back.
    """

    focus = _text_arg(args, "focus")
    blocker = _text_arg(args, "blocker")
    bold_move = _text_arg(args, "bold_move")

    raw = ctx.gateway.complete(
        prompts.SYSTEM_PROMPTS[ToolName.DAILY_INSIGHTS.value],
        prompts.daily_insights_prompt(focus, blocker, bold_move),
    )
    insights = split_lines(raw)
    logger.debug("Daily insights for %s: %d lines", ctx.caller_id, len(insights))

    return DailyInsightsResult(insights=insights, focus=focus, blocker=blocker, bold_move=bold_move)
