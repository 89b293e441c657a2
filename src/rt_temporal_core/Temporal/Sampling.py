"""
Temporal grids: sampling, precision reduction, splitting and stop detection.
Grids are aligned on an origin, which defaults to Monday 2000-01-03 at midnight in the configured timezone.
"""
from datetime import datetime, timedelta
from typing import Any

from rt_temporal_commons.Runtime import CurrentSettings
from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Logging, Time
from rt_temporal_core.Collections.Span import TsTzSpan
from rt_temporal_core.Collections.SpanSet import TsTzSpanSet
from rt_temporal_core.Temporal import Factory
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant


def defaultOrigin() -> datetime:
	return datetime(2000, 1, 3, tzinfo=CurrentSettings().zone)

def __origin(start: datetime | str | None) -> datetime:
	if start is None: return defaultOrigin()
	return Time.toTimestamp(start)

def __checkDuration(duration: timedelta) -> timedelta:
	duration = Time.toTimeDelta(duration)
	if duration <= Time.ZERO: raise DomainError(f"The duration must be positive: {duration}")
	return duration

def grid(temporal: Temporal, duration: timedelta, start: datetime | str | None = None) -> list[datetime]:
	"""The timestamps of the grid of step `duration` aligned on `start` within the time span of `temporal`."""
	duration = __checkDuration(duration)
	first = Time.bucketStart(temporal.startTimestamp(), duration, __origin(start))
	if first < temporal.startTimestamp(): first += duration
	end = temporal.endTimestamp()
	result: list[datetime] = []
	t = first
	while t <= end:
		result.append(t)
		t += duration
	return result

def temporalSample(temporal: Temporal, duration: timedelta, start: datetime | str | None = None, interpolation: TInterpolation = TInterpolation.DISCRETE) -> Temporal | None:
	"""
	The values of `temporal` at the timestamps of a regular grid.

	Parameters
	----------
	interpolation : TInterpolation, optional
		The interpolation of the result, by default `DISCRETE`.
		With a continuous interpolation, consecutive samples taken from one piece of the input form one sequence.

	Returns
	-------
	Temporal | None
		`None` when no grid timestamp falls where the value is defined.
	"""
	domain = temporal.domain
	if interpolation is TInterpolation.NONE: raise DomainError("Samples are a discrete or a continuous value.")
	if not domain.supports(interpolation): raise DomainError(f"{domain.NAME} does not support {interpolation.value} interpolation.")
	timestamps = grid(temporal, duration, start)
	result: list[Piece] = []
	for piece in temporal.pieces():
		span = piece.span()
		samples = [TInstant(temporal.valueAtTimestamp(t), t, domain) for t in timestamps if span.contains(t)]
		if len(samples) == 0: continue
		if interpolation.isContinuous: result.append(Piece(tuple(samples), True, True))
		else: result.extend(Piece((s,), True, True) for s in samples)
	return Factory.build(domain, interpolation, result)

def __representative(restricted: Temporal) -> Any:
	"""The time-weighted average of a continuous number or point value, the first value otherwise."""
	domain = restricted.domain
	if not domain.CONTINUOUS: return restricted.startValue()
	values: list[Any] = []
	weights: list[float] = []
	for piece in restricted.pieces():
		instants = piece.instants
		for k in range(len(instants) - 1):
			seconds = (instants[k + 1].timestamp - instants[k].timestamp).total_seconds()
			if restricted.interpolation is TInterpolation.LINEAR:
				values.extend([instants[k].value, instants[k + 1].value])
				weights.extend([seconds / 2, seconds / 2])
			else:
				values.append(instants[k].value)
				weights.append(seconds)
	if sum(weights) == 0: return domain.average(restricted.values(), [1.0] * restricted.numInstants())
	return domain.average(values, weights)

def temporalPrecision(temporal: Temporal, duration: timedelta, start: datetime | str | None = None) -> Temporal:
	"""
	Reduce the temporal precision to `duration`.
	Every bucket of the grid is replaced by one instant at its start, holding the representative value of the bucket.
	"""
	duration = __checkDuration(duration)
	first = Time.bucketStart(temporal.startTimestamp(), duration, __origin(start))
	pieces: list[Piece] = []
	current: list[TInstant] = []
	bucket = first
	while bucket <= temporal.endTimestamp():
		restricted = temporal.atTsTzSpan(TsTzSpan(bucket, bucket + duration, True, False))
		if restricted is None:
			if len(current) > 0: pieces.append(Piece(tuple(current), True, True))
			current = []
		else:
			current.append(TInstant(__representative(restricted), bucket, temporal.domain))
		bucket += duration
	if len(current) > 0: pieces.append(Piece(tuple(current), True, True))
	if temporal.interpolation.isContinuous: interpolation = temporal.interpolation
	else:
		interpolation = TInterpolation.DISCRETE
		pieces = [Piece((i,), True, True) for p in pieces for i in p.instants]
	result = Factory.buildDefined(temporal.domain, interpolation, pieces)
	return result

def timeSplit(temporal: Temporal, duration: timedelta, start: datetime | str | None = None) -> list[Temporal]:
	"""The parts of `temporal` in the consecutive buckets of width `duration` aligned on `start`."""
	duration = __checkDuration(duration)
	bucket = Time.bucketStart(temporal.startTimestamp(), duration, __origin(start))
	result: list[Temporal] = []
	while bucket <= temporal.endTimestamp():
		part = temporal.atTsTzSpan(TsTzSpan(bucket, bucket + duration, True, False))
		if part is not None: result.append(part)
		bucket += duration
	return result

def timeSplitN(temporal: Temporal, n: int) -> list[Temporal]:
	"""The parts of `temporal` in `n` buckets of equal width starting at its start."""
	if n < 1: raise DomainError(f"Cannot split into {n} parts.")
	(begin, end) = (temporal.startTimestamp(), temporal.endTimestamp())
	if begin == end: return [temporal]
	width = (end - begin) / n
	result: list[Temporal] = []
	for k in range(n):
		lower = begin + width * k
		if k == n - 1: span = TsTzSpan(lower, end, True, True)
		else: span = TsTzSpan(lower, begin + width * (k + 1), True, False)
		part = temporal.atTsTzSpan(span)
		if part is not None: result.append(part)
	return result

def stops(temporal: Temporal, maxDistance: float, minDuration: timedelta) -> Temporal | None:
	"""
	The parts of `temporal` where its values stay within `maxDistance` of each other for at least `minDuration`.

	Returns
	-------
	Temporal | None
		A `TSequenceSet`, or `None` when the value never stops.
	"""
	domain = temporal.domain
	if not domain.METRIC or not temporal.interpolation.isContinuous: raise DomainError("Stops are only defined for continuous values with a distance.")
	minDuration = Time.toTimeDelta(minDuration)
	spans: list[TsTzSpan] = []
	for piece in temporal.pieces():
		instants = piece.instants
		i = 0
		while i < len(instants) - 1:
			j = i
			while j + 1 < len(instants) and all(domain.distance(instants[k].value, instants[j + 1].value) <= maxDistance for k in range(i, j + 1)):
				j += 1
			if j > i and instants[j].timestamp - instants[i].timestamp >= minDuration:
				spans.append(TsTzSpan(instants[i].timestamp, instants[j].timestamp, True, True))
				i = j + 1
			else:
				i += 1
	Logging.Log(f"Found {len(spans)} stops.")
	if len(spans) == 0: return None
	result = temporal.atTsTzSpanSet(TsTzSpanSet(spans))
	if result is None: return None
	return result.toSequenceSet()
