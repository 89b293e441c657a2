"""
Evaluation of a function of the values of one or more temporal values, through time.

The operands are synchronised on their common time. Every span of the common time is a `Window`, cut into
`Segment`s with no instant of any operand strictly inside. Over a segment every operand is either constant
or linear, so a function of the values is evaluated at the instants and inside the segments only.
"""
from bisect import bisect_right
from datetime import datetime
from typing import Any, Callable, NamedTuple, Sequence

from rt_temporal_commons.Utils import Time
from rt_temporal_core.Temporal import Factory
from rt_temporal_core.Temporal.Domains import ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import pieceLimit


class Segment(NamedTuple):
	start: datetime
	end: datetime
	limits: tuple[tuple[Any, Any], ...]
	"""For every operand, its value at `start` approached from the right and at `end` approached from the left."""


class Window(NamedTuple):
	"""A span of time over which every operand is defined."""
	lower: datetime
	lowerInc: bool
	upper: datetime
	upperInc: bool
	segments: list[Segment]


def pieceAround(temporal: Temporal, t: datetime) -> Piece:
	"""The last piece starting at or before `t`."""
	pieces = temporal.pieces()
	i = bisect_right(pieces, t, key=lambda p: p.start) - 1
	return pieces[max(i, 0)]

def valuesAt(operands: Sequence[Temporal], t: datetime) -> tuple:
	"""The values of the operands at `t`, a timestamp where all of them are defined."""
	values = []
	for o in operands:
		values.append(pieceLimit(pieceAround(o, t), t, False, o.interpolation, o.domain))
	return tuple(values)

def valuesInside(operands: Sequence[Temporal], segment: Segment, ratio: float) -> tuple:
	"""The values of the operands at `ratio` of the way through `segment`."""
	values = []
	for (o, (lo, hi)) in zip(operands, segment.limits):
		if ratio <= 0 or o.domain.eq(lo, hi): values.append(lo)
		elif ratio >= 1: values.append(hi)
		else: values.append(o.domain.interpolate(lo, hi, ratio))
	return tuple(values)

def synchronize(operands: Sequence[Temporal]) -> list[Window]:
	common = operands[0].time()
	for o in operands[1:]:
		common = common.intersection(o.time())
		if common is None: return []
	windows: list[Window] = []
	for span in common.spans:
		(lower, lowerInc, upper, upperInc) = span.bounds
		segments: list[Segment] = []
		if lower < upper:
			inside = {t for o in operands for t in o.timestamps() if lower < t < upper}
			times = [lower] + sorted(inside) + [upper]
			for (t1, t2) in zip(times, times[1:]):
				limits = []
				for o in operands:
					piece = pieceAround(o, t1)
					limits.append((pieceLimit(piece, t1, False, o.interpolation, o.domain), pieceLimit(piece, t2, True, o.interpolation, o.domain)))
				segments.append(Segment(t1, t2, tuple(limits)))
		windows.append(Window(lower, lowerInc, upper, upperInc, segments))
	return windows

def resultInterpolation(operands: Sequence[Temporal], linear: bool) -> TInterpolation:
	"""
	Discrete when an operand is instantaneous or discrete.
	Otherwise linear when the result may change continuously and an operand is linear, step in every other case.
	"""
	if any(not o.interpolation.isContinuous for o in operands): return TInterpolation.DISCRETE
	if linear and any(o.interpolation is TInterpolation.LINEAR for o in operands): return TInterpolation.LINEAR
	return TInterpolation.STEP

def lift(
	operands: Sequence[Temporal],
	domain: ValueDomain,
	interpolation: TInterpolation,
	fn: Callable[..., Any],
	cuts: Callable[[Segment], list[float]] | None = None,
) -> Temporal | None:
	"""
	The value of `fn(*values)` over the common time of the operands.

	Parameters
	----------
	interpolation : TInterpolation
		The interpolation of the result, see `resultInterpolation()`.
		A step result is constant between the cuts of a segment and a linear one is linear between them.
	cuts : Callable[[Segment], list[float]] | None
		The sorted ratios in `(0, 1)` of a segment where the result changes its behaviour,
		for instance where a boolean result flips or a distance stops decreasing.

	Returns
	-------
	Temporal | None
		`None` when the operands are never defined at the same time.
	"""
	pieces: list[Piece] = []
	instantAt = lambda t, value: Piece((TInstant(value, t, domain),), True, True)
	for window in synchronize(operands):
		if window.lowerInc: pieces.append(instantAt(window.lower, fn(*valuesAt(operands, window.lower))))
		for segment in window.segments:
			(t1, t2) = (segment.start, segment.end)
			if t1 != window.lower: pieces.append(instantAt(t1, fn(*valuesAt(operands, t1))))
			ratios = [0.0]
			bounds = [t1]
			for r in ([] if cuts is None else cuts(segment)):
				t = Time.atRatio(t1, t2, r)
				if bounds[-1] < t < t2:
					ratios.append(r)
					bounds.append(t)
			ratios.append(1.0)
			bounds.append(t2)
			if interpolation is TInterpolation.LINEAR:
				instants = tuple(TInstant(fn(*valuesInside(operands, segment, r)), t, domain) for (r, t) in zip(ratios, bounds))
				pieces.append(Piece(instants, False, False))
				continue
			for j in range(len(ratios) - 1):
				if j > 0: pieces.append(instantAt(bounds[j], fn(*valuesInside(operands, segment, ratios[j]))))
				value = fn(*valuesInside(operands, segment, (ratios[j] + ratios[j + 1]) / 2))
				pieces.append(Piece((TInstant(value, bounds[j], domain), TInstant(value, bounds[j + 1], domain)), False, False))
		if window.upperInc and window.upper != window.lower: pieces.append(instantAt(window.upper, fn(*valuesAt(operands, window.upper))))
	return Factory.build(domain, interpolation, pieces)
