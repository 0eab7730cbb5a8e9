"""
src/config.py

Settings, enums and logging setup shared by the orchestrator, tools and app.
"""


import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from orchestrator.errors import ConfigurationError


class ToolName(str, Enum):

    DAILY_INSIGHTS = "generate_daily_insights"
    ANALYZE_DECISION = "analyze_decision"
    ASSESS_PROGRESS = "assess_progress_and_suggest"

class Confidence(str, Enum):

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class RunStatus(str, Enum):

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EXPIRED = "expired"


ACTIVE_STATUSES = {RunStatus.QUEUED, RunStatus.IN_PROGRESS, RunStatus.REQUIRES_ACTION}

# Local store keys
CALENDAR_EVENTS_KEY = "calendarEvents"
DECISION_HISTORY_KEY = "decisionHistory"
PRIORITIES_KEY = "priorities"

# Defaults
DEFAULT_MODEL = "gpt-4o"
DEFAULT_POLL_INTERVAL: float = 2.0          # seconds between run polls
DEFAULT_MAX_POLL_ATTEMPTS: int = 150
DEFAULT_RUN_TIMEOUT: float = 300.0          # wall clock, seconds
DEFAULT_REQUEST_TIMEOUT: float = 30.0
DEFAULT_MAX_RETRIES: int = 3                # SDK transport retries
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "data"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):

    openai_api_key: str
    model: str = DEFAULT_MODEL
    assistant_id: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    run_timeout: float = DEFAULT_RUN_TIMEOUT
    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        """
        Build settings from the environment (and a local .env file, if any).

        Raises:
            ConfigurationError: OPENAI_API_KEY is missing, or a numeric
                variable does not parse or is out of range.
        """

        if dotenv:
            load_dotenv()

        api_key = (os.getenv("OPENAI_API_KEY") or "").strip()

        if not api_key:
            raise ConfigurationError("OpenAI API key not configured. Set OPENAI_API_KEY.")

        return cls(
            openai_api_key=api_key,
            model=os.getenv("OPENAI_MODEL") or DEFAULT_MODEL,
            assistant_id=os.getenv("OPENAI_ASSISTANT_ID") or None,
            request_timeout=_env_number("OPENAI_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float, positive=True),
            max_retries=_env_number("OPENAI_MAX_RETRIES", DEFAULT_MAX_RETRIES, int),
            poll_interval=_env_number("RUN_POLL_INTERVAL", DEFAULT_POLL_INTERVAL, float, positive=True),
            max_poll_attempts=_env_number("RUN_MAX_POLLS", DEFAULT_MAX_POLL_ATTEMPTS, int, positive=True),
            run_timeout=_env_number("RUN_TIMEOUT", DEFAULT_RUN_TIMEOUT, float, positive=True),
            data_dir=Path(os.getenv("CLARITY_DATA_DIR") or DEFAULT_DATA_DIR),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


def _env_number(name: str, default, cast, positive: bool = False):
    """Read a numeric env var; blank means default. Budgets and intervals pass positive=True."""

    raw = os.getenv(name)

    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.") from e

    if positive and value <= 0:
        raise ConfigurationError(f"{name} must be greater than zero, got {raw!r}.")
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}.")

    return value

def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger. App entry points only."""

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
# EOF
