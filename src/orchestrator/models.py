"""
src/orchestrator/models.py

Pydantic models for assistant runs, tool-calling I/O, handler results and audit entries.
"""


from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from config import ACTIVE_STATUSES, Confidence, RunStatus


class ToolCall(BaseModel):

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolOutput(BaseModel):

    tool_call_id: str
    output: str

    def to_payload(self) -> Dict[str, str]:
        """Wire shape expected by submit_tool_outputs."""

        return {"tool_call_id": self.tool_call_id, "output": self.output}


class AssistantRun(BaseModel):

    id: str
    thread_id: str
    assistant_id: str = ""
    status: RunStatus
    required_tool_calls: List[ToolCall] = Field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not self.is_active

    @property
    def needs_tool_outputs(self) -> bool:
        return self.status == RunStatus.REQUIRES_ACTION and bool(self.required_tool_calls)


class ToolContext(BaseModel):
    """
    What a tool handler may touch: the caller id, the gateway for completions,
    a loader returning a fresh local-store snapshot for a caller, and today's date.
    Shared read-only across concurrent handler calls.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    caller_id: str
    gateway: Any
    store_loader: Callable[[str], Any]
    today: Callable[[], date] = date.today

    def load_store(self):
        return self.store_loader(self.caller_id)


# --- Handler results -----------------------------------------------------------
class DailyInsightsResult(BaseModel):

    insights: List[str] = Field(default_factory=list)
    focus: str = ""
    blocker: str = ""
    bold_move: str = ""


class DecisionResult(BaseModel):

    recommendation: str
    reasoning: List[str]
    confidence: Confidence = Confidence.MEDIUM


class ProgressAssessmentResult(BaseModel):

    assessment: str = ""
    achievements: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


# --- Audit ---------------------------------------------------------------------
class AuditEntry(BaseModel):

    step: str
    ok: bool
    detail: str
    tool_call: Optional[ToolCall] = None
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class OrchestratorResult(BaseModel):

    result: Dict[str, Any]
    run: AssistantRun
    outputs: List[ToolOutput] = Field(default_factory=list)
    audit: List[AuditEntry] = Field(default_factory=list)
