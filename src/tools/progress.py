"""
src/tools/progress.py - assess_progress_and_suggest

Reviews the current month from the caller's local store and asks the model for
an assessment.

Design notes:
* Events (by `date`) and decisions (by `timestamp`) are limited to the current
  month; active priorities are sent whole, whatever their age.
* The store is re-read on every call, so the prompt reflects a snapshot taken
  at call time.
* All four requested fields (assessment, achievements, improvements,
  recommendations) are returned, which is what the priorities screen renders.
"""


import logging
from typing import Any, Dict, List

from config import CALENDAR_EVENTS_KEY, DECISION_HISTORY_KEY, PRIORITIES_KEY, ToolName
from context.selectors import month_start, since
from orchestrator import prompts
from orchestrator.models import ProgressAssessmentResult, ToolContext
from orchestrator.normalize import as_string_list, parse_json_object


logger = logging.getLogger(__name__)


def collect_month(ctx: ToolContext) -> Dict[str, List[Dict[str, Any]]]:
    """Snapshot the store and keep this month's events/decisions plus all priorities."""

    store = ctx.load_store()
    boundary = month_start(ctx.today())

    events = since(store.read_collection(CALENDAR_EVENTS_KEY), "date", boundary)
    decisions = since(store.read_collection(DECISION_HISTORY_KEY), "timestamp", boundary)
    priorities = store.read_collection(PRIORITIES_KEY)

    logger.debug(
        "Progress window from %s for %s: %d events, %d decisions, %d priorities",
        boundary, ctx.caller_id, len(events), len(decisions), len(priorities),
    )

    return {"events": events, "decisions": decisions, "priorities": priorities}

def assess_progress_and_suggest(args: Dict[str, Any], ctx: ToolContext) -> ProgressAssessmentResult:
    """
    Tool-call arguments are ignored; the data comes from the caller's store.

    Raises:
        MalformedToolOutput: the completion is not a JSON object.
    """

    month = collect_month(ctx)

    raw = ctx.gateway.complete(
        prompts.SYSTEM_PROMPTS[ToolName.ASSESS_PROGRESS.value],
        prompts.progress_prompt(month["events"], month["decisions"], month["priorities"]),
    )
    parsed = parse_json_object(raw)
    assessment = parsed.get("assessment")

    return ProgressAssessmentResult(
        assessment=str(assessment).strip() if assessment else "",
        achievements=as_string_list(parsed.get("achievements")),
        improvements=as_string_list(parsed.get("improvements")),
        recommendations=as_string_list(parsed.get("recommendations")),
    )
