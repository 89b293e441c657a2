"""
Modification of temporal values: appending, merging, inserting, updating and deleting.
Temporal values are immutable, every function returns a new value resolved by the factory.
"""
from datetime import timedelta

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Logging
from rt_temporal_core.Collections.SpanSet import TsTzSpanSet
from rt_temporal_core.Temporal import Factory
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import TSequence


def combinedInterpolation(a: Temporal, b: Temporal) -> TInterpolation:
	"""The interpolation of a value made of the pieces of both `a` and `b`."""
	if a.domain != b.domain: raise DomainError(f"Cannot combine {a.domain} with {b.domain}.")
	(ia, ib) = (a.interpolation, b.interpolation)
	if not ia.isContinuous and not ib.isContinuous: return TInterpolation.DISCRETE
	if not ia.isContinuous: return ib
	if not ib.isContinuous or ia is ib: return ia
	raise DomainError(f"Cannot combine {ia.value} and {ib.value} interpolations.")

def appendInstant(temporal: Temporal, instant: TInstant, maxDist: float | None = None, maxTime: timedelta | None = None) -> Temporal:
	"""
	Extend `temporal` with an instant after its end.

	Parameters
	----------
	maxDist : float | None, optional
		When the value jumps further than this from the last value, the instant starts a new sequence.
	maxTime : timedelta | None, optional
		When the instant comes later than this after the end, it starts a new sequence.
	"""
	domain = temporal.domain
	if instant.domain != domain: raise DomainError(f"Cannot append a {instant.domain} instant to a {domain} value.")
	end = temporal.endInstant()
	if instant.timestamp < end.timestamp: raise DomainError(f"Cannot append an instant at {instant.timestamp} before the end {end.timestamp}.")
	if instant.timestamp == end.timestamp:
		if domain.eq(instant.value, end.value) and temporal.pieces()[-1].upperInc: return temporal
		raise DomainError(f"Conflicting values at {instant.timestamp}.")
	if isinstance(temporal, TInstant): return TSequence([temporal, instant], True, True, domain.defaultInterpolation)
	interpolation = temporal.interpolation
	pieces = temporal.pieces()
	if not interpolation.isContinuous:
		pieces.append(Piece((instant,), True, True))
		result = Factory.buildDefined(domain, interpolation, pieces)
		return result
	last = pieces[-1]
	split = maxTime is not None and instant.timestamp - end.timestamp > maxTime
	if maxDist is not None and domain.distance(end.value, instant.value) > maxDist: split = True
	if split:
		pieces.append(Piece((instant,), True, True))
	else:
		pieces[-1] = Piece(last.instants + (instant,), last.lowerInc, True)
	result = Factory.buildDefined(domain, interpolation, pieces)
	return result

def appendSequence(temporal: Temporal, sequence: TSequence) -> Temporal:
	"""Extend `temporal` with a sequence starting at or after its end."""
	interpolation = combinedInterpolation(temporal, sequence)
	if sequence.startTimestamp() < temporal.endTimestamp():
		raise DomainError(f"Cannot append a sequence starting at {sequence.startTimestamp()} before the end {temporal.endTimestamp()}.")
	result = Factory.buildDefined(temporal.domain, interpolation, temporal.pieces() + sequence.pieces())
	return result

def merge(a: Temporal, b: Temporal | None) -> Temporal:
	"""
	The union of two values defined over disjoint times.
	Both values may share timestamps where they agree.

	Raises
	------
	DomainError
		When both values overlap in time or disagree at a shared timestamp.
	"""
	if b is None: return a
	interpolation = combinedInterpolation(a, b)
	result = Factory.buildDefined(a.domain, interpolation, a.pieces() + b.pieces())
	return result

def insert(a: Temporal, b: Temporal, connect: bool = True) -> Temporal:
	"""
	Insert `b` where `a` is not defined.
	With `connect` the inserted pieces are joined to the pieces of `a` before and after them,
	otherwise the gaps around them are kept.
	"""
	interpolation = combinedInterpolation(a, b)
	if not connect or not interpolation.isContinuous: return merge(a, b)
	tagged = sorted([(p, 0) for p in a.pieces()] + [(p, 1) for p in b.pieces()], key=lambda item: (item[0].start, not item[0].lowerInc))
	pieces: list[Piece] = []
	origins: list[int] = []
	for (piece, origin) in tagged:
		if len(pieces) > 0 and origins[-1] != origin and pieces[-1].end < piece.start:
			cur = pieces[-1]
			pieces[-1] = Piece(cur.instants + piece.instants, cur.lowerInc, piece.upperInc)
			origins[-1] = origin
			Logging.Log(f"Connected the gap between {cur.end} and {piece.start}.")
			continue
		pieces.append(piece)
		origins.append(origin)
	result = Factory.buildDefined(a.domain, interpolation, pieces)
	return result

def update(a: Temporal, b: Temporal, connect: bool = True) -> Temporal:
	"""Replace the values of `a` by the ones of `b` wherever `b` is defined, and insert `b` elsewhere."""
	combinedInterpolation(a, b)
	rest = a.minusTsTzSpanSet(b.time())
	if rest is None: return b
	return insert(rest, b, connect)

def delete(temporal: Temporal, spanSet: TsTzSpanSet, connect: bool = True) -> Temporal | None:
	"""
	Remove the values at the times of `spanSet`.
	With `connect` a continuous value keeps one piece where the deletion happened inside a piece,
	joining the instants around the deleted times.
	"""
	if not connect or not temporal.interpolation.isContinuous: return temporal.minusTsTzSpanSet(spanSet)
	interpolation = temporal.interpolation
	pieces: list[Piece] = []
	for piece in temporal.pieces():
		kept = [i for i in piece.instants if not spanSet.contains(i.timestamp)]
		if len(kept) == 0: continue
		lowerInc = piece.lowerInc if kept[0] is piece.instants[0] else True
		upperInc = piece.upperInc if kept[-1] is piece.instants[-1] else True
		if len(kept) == 1: (lowerInc, upperInc) = (True, True)
		if interpolation is TInterpolation.STEP and not upperInc and not temporal.domain.eq(kept[-1].value, kept[-2].value):
			kept[-1] = kept[-1].withValue(kept[-2].value)
		pieces.append(Piece(tuple(kept), lowerInc, upperInc))
	return Factory.build(temporal.domain, interpolation, pieces)
