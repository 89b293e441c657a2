"""
Conversions between the calendar types of the standard library and the timestamps used by the engine.
Every timestamp handled by the engine is an aware `datetime` in the configured timezone.
"""
from datetime import date, datetime, timedelta
from typing import Final

from rt_temporal_commons.Runtime import CurrentSettings
from rt_temporal_commons.Shared.Errors import DomainError, ParseError

RESOLUTION: Final = timedelta(microseconds=1)
"""The smallest representable difference between two timestamps."""
ZERO: Final = timedelta(0)


def toTimestamp(value: datetime | date | str) -> datetime:
	"""
	Convert `value` to an aware timestamp in the configured timezone.
	Naive datetimes are considered to be expressed in the configured timezone.
	A `date` is taken at midnight.
	"""
	zone = CurrentSettings().zone
	if isinstance(value, str): return parseTimestamp(value)
	if isinstance(value, datetime):
		if value.tzinfo is None: return value.replace(tzinfo=zone)
		return value.astimezone(zone)
	if isinstance(value, date): return datetime(value.year, value.month, value.day, tzinfo=zone)
	raise DomainError(f"Not a timestamp: {repr(value)}")

def parseTimestamp(text: str) -> datetime:
	cleaned = text.strip()
	if cleaned.startswith("\"") and cleaned.endswith("\""): cleaned = cleaned[1:-1]
	try:
		parsed = datetime.fromisoformat(cleaned)
	except ValueError as e:
		raise ParseError(text, "invalid timestamp") from e
	return toTimestamp(parsed)

def formatTimestamp(ts: datetime) -> str:
	return ts.isoformat(sep=" ")

def parseDate(text: str) -> date:
	cleaned = text.strip()
	try:
		return date.fromisoformat(cleaned)
	except ValueError as e:
		raise ParseError(text, "invalid date") from e

def toTimeDelta(value: timedelta | int | float) -> timedelta:
	"""Numbers are interpreted as seconds."""
	if isinstance(value, timedelta): return value
	if isinstance(value, bool): raise DomainError(f"Not a duration: {repr(value)}")
	if isinstance(value, (int, float)): return timedelta(seconds=value)
	raise DomainError(f"Not a duration: {repr(value)}")

def ratio(ts: datetime, start: datetime, end: datetime) -> float:
	"""
	Given a time, returns it as a fraction of the interval between `start` and `end`.

	Returns
	-------
	float
		A number in the range `[0, 1]` for a time inside the interval, or `0.0` if both ends of the interval are the same.
	"""
	total = end - start
	if total == ZERO: return 0.0
	return (ts - start) / total

def atRatio(start: datetime, end: datetime, fraction: float) -> datetime:
	"""The timestamp at `fraction` of the interval `[start, end]`, rounded to the resolution of `datetime`."""
	return start + (end - start) * fraction

def bucketStart(ts: datetime, duration: timedelta, origin: datetime) -> datetime:
	"""The start of the bucket of width `duration`, aligned on `origin`, which contains `ts`."""
	if duration <= ZERO: raise DomainError(f"The bucket duration must be positive: {duration}")
	return origin + ((ts - origin) // duration) * duration
