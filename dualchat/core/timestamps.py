"""ISO-8601 timestamp helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional

STEP = timedelta(milliseconds=1)
LATEST = datetime.max.replace(tzinfo=timezone.utc) - STEP


def now_iso() -> str:
    """returns current UTC time as ISO-8601 with millisecond precision and Z suffix."""
    return to_iso(datetime.now(timezone.utc))


def to_iso(moment: datetime) -> str:
    """formats an aware datetime as UTC ISO-8601 with Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: object) -> Optional[datetime]:
    """
    parses an ISO-8601 string into an aware UTC datetime.

    Args:
        value: candidate timestamp (any type)

    Returns:
        UTC datetime (naive input assumed UTC), or None if unparseable or
        outside the representable UTC range
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def epoch(value: object) -> Optional[float]:
    """returns POSIX seconds for an ISO-8601 string, or None if unparseable."""
    parsed = parse_iso(value)
    return parsed.timestamp() if parsed is not None else None


def _whole_millis(moment: datetime) -> datetime:
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def bump(previous: Optional[str]) -> str:
    """
    returns a timestamp strictly later than previous.

    uses the current time, truncated to milliseconds, unless that is not
    past previous, in which case previous + 1ms is returned. a previous
    value at the end of the representable range yields the current time.
    """
    current = _whole_millis(datetime.now(timezone.utc))
    last = parse_iso(previous)
    if last is not None and current <= last <= LATEST:
        current = last + STEP
    return to_iso(current)


def display(value: str) -> str:
    """formats a timestamp for human-readable output, raw value if unparseable."""
    parsed = parse_iso(value)
    if parsed is None:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M:%S UTC")
