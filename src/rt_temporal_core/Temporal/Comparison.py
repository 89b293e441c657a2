"""
Comparison of temporal values, with each other or with a constant value.

Both operands are synchronised on their common time. Where two linear segments meet strictly inside
an interval, the meeting timestamp is added so that the outcome of a comparison is constant
between two consecutive timestamps. The outcome is a `TBool`, or a tri-state `bool | None` for
the always/ever quantifiers: `None` means the comparison is undefined for the operands.
"""
from typing import Any, Callable, NamedTuple

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Logging, Time
from rt_temporal_core.Temporal import Factory
from rt_temporal_core.Temporal.Domains import BoolDomain, ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Lifting import pieceAround
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import pieceValueInside


class Operator(NamedTuple):
	symbol: str
	ordered: bool
	"""Whether the operator needs an order on the values."""
	holds: Callable[[int], bool]
	"""Whether the operator holds given the sign of the comparison of both values."""


EQ = Operator("=", False, lambda c: c == 0)
NE = Operator("<>", False, lambda c: c != 0)
LT = Operator("<", True, lambda c: c < 0)
LE = Operator("<=", True, lambda c: c <= 0)
GT = Operator(">", True, lambda c: c > 0)
GE = Operator(">=", True, lambda c: c >= 0)


def always(temporal: Temporal, other: Any, op: Operator) -> bool | None:
	"""Whether `op` holds at every timestamp shared by both operands."""
	result = temporalCompare(temporal, other, op)
	if result is None: return None
	return all(result.values())

def ever(temporal: Temporal, other: Any, op: Operator) -> bool | None:
	"""Whether `op` holds at some timestamp shared by both operands."""
	result = temporalCompare(temporal, other, op)
	if result is None: return None
	return any(result.values())

def temporalCompare(temporal: Temporal, other: Any, op: Operator) -> Temporal | None:
	"""
	The outcome of `temporal op other` through time, as a temporal boolean.

	Returns
	-------
	Temporal | None
		`None` when the operands do not share a domain, when the operator needs an order the domain lacks,
		or when the operands are never defined at the same time.
	"""
	domain = temporal.domain
	if op.ordered and not domain.ORDERED: return None
	if not isinstance(other, Temporal):
		try:
			other = constantLike(temporal, other)
		except DomainError as e:
			Logging.Log(f"Comparison of {domain.NAME} with {repr(other)} is undefined: {e}")
			return None
	if other.domain != domain: return None
	common = temporal.time().intersection(other.time())
	if common is None: return None
	continuous = temporal.interpolation.isContinuous and other.interpolation.isContinuous
	interpolation = TInterpolation.STEP if continuous else TInterpolation.DISCRETE
	pieces: list[Piece] = []
	for span in common.spans:
		pieces.extend(__compareOver(temporal, other, span, op))
	return Factory.build(BoolDomain(), interpolation, pieces)

def constantLike(temporal: Temporal, value: Any) -> Temporal:
	"""A value constantly equal to `value`, defined exactly when `temporal` is."""
	domain = temporal.domain
	value = domain.validate(value)
	pieces: list[Piece] = []
	for piece in temporal.pieces():
		instants = [TInstant(value, piece.start, domain)]
		if piece.end != piece.start: instants.append(TInstant(value, piece.end, domain))
		pieces.append(Piece(tuple(instants), piece.lowerInc, piece.upperInc))
	interpolation = temporal.interpolation if temporal.interpolation.isContinuous else TInterpolation.DISCRETE
	result = Factory.buildDefined(domain, interpolation, pieces)
	return result

def __sign(domain: ValueDomain, a: Any, b: Any) -> int:
	if domain.ORDERED: return domain.cmp(a, b)
	return 0 if domain.eq(a, b) else 1

def __compareOver(a: Temporal, b: Temporal, span, op: Operator) -> list[Piece]:
	"""The pieces of the outcome over `span`, a span of time where both operands are defined."""
	domain = a.domain
	boolDomain = BoolDomain()
	(lower, lowerInc, upper, upperInc) = span.bounds
	if lower == upper:
		result = op.holds(__sign(domain, a.valueAtTimestamp(lower), b.valueAtTimestamp(lower)))
		return [Piece((TInstant(result, lower, boolDomain),), True, True)]
	inside = {t for t in a.timestamps() + b.timestamps() if lower < t < upper}
	times = [lower] + sorted(inside) + [upper]
	pieces: list[Piece] = []
	instantAt = lambda t, result: Piece((TInstant(result, t, boolDomain),), True, True)
	openBetween = lambda t1, t2, result: Piece((TInstant(result, t1, boolDomain), TInstant(result, t2, boolDomain)), False, False)
	for k in range(len(times) - 1):
		(t1, t2) = (times[k], times[k + 1])
		if k > 0 or lowerInc:
			pieces.append(instantAt(t1, op.holds(__sign(domain, a.valueAtTimestamp(t1), b.valueAtTimestamp(t1)))))
		pa = pieceAround(a, t1)
		pb = pieceAround(b, t1)
		valueA = lambda r: pieceValueInside(pa, t1, t2, r, a.interpolation, domain)
		valueB = lambda r: pieceValueInside(pb, t1, t2, r, b.interpolation, domain)
		ratios = [0.0, 1.0]
		crossing = domain.crossingPair(valueA(0.0), valueA(1.0), valueB(0.0), valueB(1.0))
		if crossing is not None:
			tc = Time.atRatio(t1, t2, crossing)
			if t1 < tc < t2:
				ratios = [0.0, crossing, 1.0]
				pieces.append(instantAt(tc, op.holds(0)))
		bounds = [Time.atRatio(t1, t2, r) for r in ratios]
		bounds[0] = t1
		bounds[-1] = t2
		for j in range(len(ratios) - 1):
			middle = (ratios[j] + ratios[j + 1]) / 2
			result = op.holds(__sign(domain, valueA(middle), valueB(middle)))
			pieces.append(openBetween(bounds[j], bounds[j + 1], result))
	if upperInc:
		pieces.append(instantAt(upper, op.holds(__sign(domain, a.valueAtTimestamp(upper), b.valueAtTimestamp(upper)))))
	return pieces
