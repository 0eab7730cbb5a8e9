"""
src/context/selectors.py
"""


from typing import Any, Dict, List, Optional
from datetime import date, datetime, tzinfo


def month_start(today: Optional[date] = None) -> date:
    """First day of the month containing `today`."""

    today = today or date.today()

    return today.replace(day=1)

def parse_record_date(value: Any, tz: Optional[tzinfo] = None) -> Optional[date]:
    """
    Best-effort calendar date for a stored record.

    Accepts ISO strings ('2024-02-03', '2024-02-03T09:00:00.000Z') and epoch
    milliseconds (how the app stamps decisions). Returns None otherwise.

    Instants (epoch values and offset-aware timestamps) land on the calendar
    day they fall on in `tz`, the local zone when None, so they compare
    against a month boundary taken from the local date.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=tz).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, datetime):
        return _calendar_day(value, tz)
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return _calendar_day(datetime.fromisoformat(s), tz)
        except ValueError:
            pass
        try:
            return date.fromisoformat(s[:10])
        except ValueError:
            return None

    return None

def _calendar_day(moment: datetime, tz: Optional[tzinfo]) -> date:
    # Naive timestamps are already wall-clock time
    if moment.tzinfo is None:
        return moment.date()

    return moment.astimezone(tz).date()

def since(records: List[Dict[str, Any]], field: str, boundary: date, tz: Optional[tzinfo] = None) -> List[Dict[str, Any]]:
    """Records whose `field` falls on or after `boundary`. Undated records are dropped."""

    out = []

    for rec in records:
        if not isinstance(rec, dict):
            continue
        d = parse_record_date(rec.get(field), tz)
        if d is not None and d >= boundary:
            out.append(rec)

    return out
