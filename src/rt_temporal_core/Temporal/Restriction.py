"""
Restriction of temporal values to times and to values.

`at*` keeps the part of a value matching the argument and `minus*` keeps the rest.
Both return `None` when nothing is left.
"""
from datetime import datetime
from typing import Any, Callable, Iterable, Sequence

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Time
from rt_temporal_core.Collections.Span import FloatSpan, IntSpan, Span, TsTzSpan
from rt_temporal_core.Collections.SpanSet import FloatSpanSet, IntSpanSet, SpanSet, TsTzSpanSet
from rt_temporal_core.Temporal import Factory
from rt_temporal_core.Temporal.Domains import FloatDomain, IntDomain, ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import pieceLimit, pieceValueAt, pieceValueInside


def at(temporal: Temporal, x: Any) -> Temporal | None:
	"""Restrict to a timestamp, a set of timestamps, a time span (set), a value span (set), a list of values or a value."""
	if isinstance(x, datetime): return atTimestamp(temporal, x)
	if isinstance(x, TsTzSpan): return atTsTzSpanSet(temporal, x.toSpanSet())
	if isinstance(x, TsTzSpanSet): return atTsTzSpanSet(temporal, x)
	if isinstance(x, (Span, SpanSet)): return atValueSpans(temporal, x, keep=True)
	if isinstance(x, (list, tuple, set, frozenset)):
		if len(x) > 0 and all(isinstance(t, datetime) for t in x): return atTimestamps(temporal, list(x))
		return atValues(temporal, list(x))
	return atValues(temporal, [x])

def minus(temporal: Temporal, x: Any) -> Temporal | None:
	if isinstance(x, datetime): return minusTimestamps(temporal, [x])
	if isinstance(x, TsTzSpan): return minusTsTzSpanSet(temporal, x.toSpanSet())
	if isinstance(x, TsTzSpanSet): return minusTsTzSpanSet(temporal, x)
	if isinstance(x, (Span, SpanSet)): return atValueSpans(temporal, x, keep=False)
	if isinstance(x, (list, tuple, set, frozenset)):
		if len(x) > 0 and all(isinstance(t, datetime) for t in x): return minusTimestamps(temporal, list(x))
		return minusValues(temporal, list(x))
	return minusValues(temporal, [x])

def atTimestamp(temporal: Temporal, timestamp: datetime | str) -> TInstant | None:
	t = Time.toTimestamp(timestamp)
	value = temporal.valueAtTimestamp(t)
	if value is None: return None
	return TInstant(value, t, temporal.domain)

def atTimestamps(temporal: Temporal, timestamps: Iterable[datetime | str]) -> Temporal | None:
	"""The values at the given timestamps, as a discrete value."""
	pieces: list[Piece] = []
	for timestamp in timestamps:
		instant = atTimestamp(temporal, timestamp)
		if instant is not None: pieces.append(Piece((instant,), True, True))
	return Factory.build(temporal.domain, TInterpolation.DISCRETE, pieces)

def minusTimestamps(temporal: Temporal, timestamps: Sequence[datetime | str]) -> Temporal | None:
	if len(timestamps) == 0: return temporal
	return minusTsTzSpanSet(temporal, TsTzSpanSet([TsTzSpan.singleton(t) for t in timestamps]))

def atTsTzSpanSet(temporal: Temporal, spanSet: TsTzSpanSet) -> Temporal | None:
	pieces = restrictPieces(temporal.pieces(), spanSet, temporal.interpolation, temporal.domain)
	return Factory.buildLike(temporal, pieces)

def minusTsTzSpanSet(temporal: Temporal, spanSet: TsTzSpanSet) -> Temporal | None:
	rest = spanSet.complementWithin(temporal.timespan())
	if rest is None: return None
	return atTsTzSpanSet(temporal, rest)

def restrictPieces(pieces: Iterable[Piece], spanSet: TsTzSpanSet, interpolation: TInterpolation, domain: ValueDomain) -> list[Piece]:
	result: list[Piece] = []
	for piece in pieces:
		pieceSpan = piece.span()
		for span in spanSet.spans:
			common = pieceSpan.intersection(span)
			if common is None: continue
			result.append(restrictPiece(piece, common, interpolation, domain))
	return result

def restrictPiece(piece: Piece, span: TsTzSpan, interpolation: TInterpolation, domain: ValueDomain) -> Piece:
	"""
	The part of `piece` over `span`, a span inside the time of the piece.
	A step piece cut before an instant keeps the value it had just before that instant.
	"""
	(lower, lowerInc, upper, upperInc) = span.bounds
	if lower == upper:
		value = pieceValueAt(piece, lower, interpolation, domain)
		return Piece((TInstant(value, lower, domain),), True, True)
	inner = [i for i in piece.instants if lower < i.timestamp < upper]
	first = TInstant(pieceLimit(piece, lower, False, interpolation, domain), lower, domain)
	if upperInc: lastValue = pieceValueAt(piece, upper, interpolation, domain)
	else: lastValue = pieceLimit(piece, upper, True, interpolation, domain)
	last = TInstant(lastValue, upper, domain)
	return Piece(tuple([first] + inner + [last]), lowerInc, upperInc)

def atValues(temporal: Temporal, values: Sequence[Any]) -> Temporal | None:
	domain = temporal.domain
	targets = [domain.validate(v) for v in values]
	if len(targets) == 0: return None
	matches = lambda v: any(domain.eq(v, target) for target in targets)
	return __restrictByValue(temporal, targets, matches, True)

def minusValues(temporal: Temporal, values: Sequence[Any]) -> Temporal | None:
	domain = temporal.domain
	targets = [domain.validate(v) for v in values]
	if len(targets) == 0: return temporal
	matches = lambda v: any(domain.eq(v, target) for target in targets)
	return __restrictByValue(temporal, targets, matches, False)

def atValueSpans(temporal: Temporal, spans: Span | SpanSet, keep: bool) -> Temporal | None:
	"""Restrict a number valued value to the values inside (`keep`) or outside of a span or a span set."""
	spanSet = __valueSpanSet(temporal.domain, spans)
	targets: list[Any] = []
	for s in spanSet.spans: targets.extend([float(s.lower), float(s.upper)])
	return __restrictByValue(temporal, targets, lambda v: spanSet.contains(v), keep)

def __valueSpanSet(domain: ValueDomain, spans: Span | SpanSet) -> SpanSet:
	spanSet = spans if isinstance(spans, SpanSet) else spans.toSpanSet()
	if isinstance(domain, IntDomain):
		if not isinstance(spanSet, IntSpanSet): raise DomainError(f"{domain.NAME} values are restricted by integer spans.")
		return spanSet
	if isinstance(domain, FloatDomain):
		if isinstance(spanSet, IntSpanSet): return FloatSpanSet([s.toFloatSpan() for s in spanSet.spans]) # pyright: ignore[reportAttributeAccessIssue]
		if not isinstance(spanSet, FloatSpanSet): raise DomainError(f"{domain.NAME} values are restricted by number spans.")
		return spanSet
	raise DomainError(f"{domain.NAME} values cannot be restricted by spans.")

def __restrictByValue(temporal: Temporal, targets: list[Any], matches: Callable[[Any], bool], keep: bool) -> Temporal | None:
	"""
	Split the linear segments where they reach one of the `targets`,
	then keep the instants and the segments whose values match (`keep`) or do not match.
	"""
	interpolation = temporal.interpolation
	domain = temporal.domain
	pieces = [refinePiece(p, targets, interpolation, domain) for p in temporal.pieces()]
	spans: list[TsTzSpan] = []
	for piece in pieces:
		instants = piece.instants
		last = len(instants) - 1
		for k, instant in enumerate(instants):
			if k == 0 and not piece.lowerInc: continue
			if k == last and not piece.upperInc: continue
			if matches(instant.value) == keep: spans.append(TsTzSpan.singleton(instant.timestamp))
		for k in range(last):
			(t1, t2) = (instants[k].timestamp, instants[k + 1].timestamp)
			inside = pieceValueInside(piece, t1, t2, 0.5, interpolation, domain)
			if matches(inside) == keep: spans.append(TsTzSpan(t1, t2, False, False))
	if len(spans) == 0: return None
	restricted = restrictPieces(pieces, TsTzSpanSet(spans), interpolation, domain)
	return Factory.build(domain, interpolation, restricted)

def refinePiece(piece: Piece, targets: Sequence[Any], interpolation: TInterpolation, domain: ValueDomain) -> Piece:
	"""Add an instant wherever a linear segment of the piece takes one of the `targets`, with the exact target value."""
	if interpolation is not TInterpolation.LINEAR or len(targets) == 0: return piece
	instants: list[TInstant] = [piece.instants[0]]
	for nxt in piece.instants[1:]:
		prev = instants[-1]
		crossings: list[tuple[datetime, Any]] = []
		for target in targets:
			ratio = domain.crossing(prev.value, nxt.value, target)
			if ratio is None: continue
			t = Time.atRatio(prev.timestamp, nxt.timestamp, ratio)
			if prev.timestamp < t < nxt.timestamp: crossings.append((t, target))
		crossings.sort(key=lambda c: c[0])
		for (t, target) in crossings:
			if t > instants[-1].timestamp: instants.append(TInstant(target, t, domain))
		instants.append(nxt)
	return Piece(tuple(instants), piece.lowerInc, piece.upperInc)
