"""
src/orchestrator/normalize.py

Turns free-text model output into structured data.

Two parsing strategies live here on purpose:
- strict JSON (parse_json / parse_json_object) for tools whose prompt asks for an object;
- line-oriented (split_lines) for daily insights, which tolerates formatting slippage.

The display helpers at the bottom are presentational only. Callers store the raw
machine values and apply these when rendering.
"""


import json
import re
from typing import Any, Dict, Iterable, List

from orchestrator.errors import MalformedToolOutput


_OPEN_FENCE = re.compile(r"^```[ \t]*(?:json)?[ \t]*\n?", re.IGNORECASE)
_CLOSE_FENCE = re.compile(r"\n?[ \t]*```$")


# --- Parsing -------------------------------------------------------------------
def strip_fences(text: str) -> str:
    """
    Remove surrounding whitespace and one pair of ``` / ```json fences.

    Clean input comes back unchanged, so stripping twice equals stripping once.
    """

    cleaned = (text or "").strip()
    cleaned = _OPEN_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSE_FENCE.sub("", cleaned, count=1)

    return cleaned.strip()

def parse_json(text: str) -> Any:
    """Strict parse after fence stripping. No partial recovery."""

    cleaned = strip_fences(text)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedToolOutput(f"Model output is not valid JSON: {e.msg}", raw=text) from e

def parse_json_object(text: str) -> Dict[str, Any]:
    """Like parse_json, but the payload must be a JSON object."""

    parsed = parse_json(text)

    if not isinstance(parsed, dict):
        raise MalformedToolOutput(
            f"Expected a JSON object, got {type(parsed).__name__}.", raw=text
        )

    return parsed

def split_lines(text: str) -> List[str]:
    """Line-oriented strategy: one item per non-blank line, trimmed."""

    return [line.strip() for line in (text or "").splitlines() if line.strip()]

def as_string_list(value: Any) -> List[str]:
    """
    Coerce a model-provided value into a list of non-empty strings.

    A bare string becomes a one-item list; anything else that is not a list
    becomes an empty list.
    """

    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []

    out = []
    for item in value:
        if item is None:
            continue
        s = str(item).strip()
        if s:
            out.append(s)

    return out


# --- Display -------------------------------------------------------------------
_BULLET_PREFIX = re.compile(r"^[-•*\d.)\s]*")
_PUNCT_ONLY = re.compile(r"""^[\[\]{}\\"',]*$""")


def display_label(text: str) -> str:
    """'very_high' -> 'Very High'. Underscores to spaces, each word capitalised."""

    spaced = (text or "").replace("_", " ")

    return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced)

def clean_insight(text: str) -> str:
    """Strip bullets/numbering, surrounding quotes, trailing comma and extra spacing."""

    s = _BULLET_PREFIX.sub("", text or "")
    s = s.strip().strip('"')
    s = re.sub(r",$", "", s)
    s = s.strip().strip('"')
    s = re.sub(r"[\r\n]+", " ", s)
    s = re.sub(r"\s{2,}", " ", s)

    return s.strip()

def format_insights(items: Iterable[Any]) -> List[str]:
    """
    Prepare insight lines for display.

    Drops non-strings, lines that mention the word 'insights' (JSON keys or
    headings the model echoed) and lines made only of brackets/quotes.
    """

    out = []
    for item in items:
        if not isinstance(item, str):
            continue
        if "insights" in item.lower() or _PUNCT_ONLY.match(item.strip()):
            continue
        cleaned = clean_insight(item)
        if cleaned:
            out.append(cleaned)

    return out
