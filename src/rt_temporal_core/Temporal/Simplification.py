"""
Simplification of temporal values.
Every algorithm works piece by piece, always keeps the first and the last instant of a piece
and returns a value of the same shape as its input.
"""
from datetime import timedelta

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Logging, Time
from rt_temporal_commons.Utils.Geometry import GeometryLib
from rt_temporal_core.Temporal import Factory
from rt_temporal_core.Temporal.Domains import PointDomain, ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant


def minDistance(temporal: Temporal, distance: float) -> Temporal:
	"""Drop the instants closer than `distance` to the last kept value."""
	domain = temporal.domain
	if not domain.METRIC: raise DomainError(f"There is no distance between values of {domain.NAME}.")
	def keep(instants: tuple[TInstant, ...]) -> list[int]:
		kept = [0]
		for k in range(1, len(instants) - 1):
			if domain.distance(instants[kept[-1]].value, instants[k].value) >= distance: kept.append(k)
		return kept
	return __simplify(temporal, keep, "minimum distance")

def minTDelta(temporal: Temporal, delta: timedelta) -> Temporal:
	"""Drop the instants coming sooner than `delta` after the last kept instant."""
	def keep(instants: tuple[TInstant, ...]) -> list[int]:
		kept = [0]
		for k in range(1, len(instants) - 1):
			if instants[k].timestamp - instants[kept[-1]].timestamp >= delta: kept.append(k)
		return kept
	return __simplify(temporal, keep, "minimum time delta")

def douglasPeucker(temporal: Temporal, distance: float, synchronized: bool = False) -> Temporal:
	"""
	Douglas-Peucker simplification of a linear value.

	Parameters
	----------
	distance : float
		The largest deviation from the simplified value an instant may have and still be dropped.
	synchronized : bool, optional
		For points, measure the deviation from the position on the chord at the time of the instant
		instead of the distance to the chord, by default False.
		Numbers are always measured against the chord at the time of the instant.

	Raises
	------
	DomainError
		When the values have no distance or are interpolated stepwise.
	"""
	domain = __checkLinear(temporal)
	if domain is None: return temporal
	def keep(instants: tuple[TInstant, ...]) -> list[int]:
		kept = {0, len(instants) - 1}
		stack = [(0, len(instants) - 1)]
		while len(stack) > 0:
			(first, last) = stack.pop()
			if last - first < 2: continue
			(worst, deviation) = __farthest(domain, instants, first, last, synchronized)
			if deviation <= distance: continue
			kept.add(worst)
			stack.append((first, worst))
			stack.append((worst, last))
		return sorted(kept)[:-1]
	return __simplify(temporal, keep, "Douglas-Peucker")

def maxDistance(temporal: Temporal, distance: float, synchronized: bool = False) -> Temporal:
	"""
	Single pass variant of `douglasPeucker()`.
	A window grows from the last kept instant for as long as every instant inside it deviates at most
	`distance` from the chord of the window.
	"""
	domain = __checkLinear(temporal)
	if domain is None: return temporal
	def keep(instants: tuple[TInstant, ...]) -> list[int]:
		kept = [0]
		end = 2
		while end < len(instants):
			(_, deviation) = __farthest(domain, instants, kept[-1], end, synchronized)
			if deviation > distance: kept.append(end - 1)
			end += 1
		return kept
	return __simplify(temporal, keep, "maximum distance")

def __checkLinear(temporal: Temporal) -> ValueDomain | None:
	domain = temporal.domain
	if not domain.METRIC: raise DomainError(f"There is no distance between values of {domain.NAME}.")
	if not temporal.interpolation.isContinuous: return None
	if temporal.interpolation is not TInterpolation.LINEAR: raise DomainError("Only linear values are simplified with a deviation threshold.")
	return domain

def deviation(domain: ValueDomain, start: TInstant, end: TInstant, instant: TInstant, synchronized: bool) -> float:
	"""How far `instant` lies from the chord joining `start` and `end`."""
	if isinstance(domain, PointDomain) and not synchronized:
		return GeometryLib.segmentDistance(instant.value, start.value, end.value)
	ratio = Time.ratio(instant.timestamp, start.timestamp, end.timestamp)
	return domain.distance(instant.value, domain.interpolate(start.value, end.value, ratio))

def __farthest(domain: ValueDomain, instants: tuple[TInstant, ...], first: int, last: int, synchronized: bool) -> tuple[int, float]:
	worst = first
	largest = -1.0
	for k in range(first + 1, last):
		d = deviation(domain, instants[first], instants[last], instants[k], synchronized)
		if d > largest: (worst, largest) = (k, d)
	return (worst, largest)

def __simplify(temporal: Temporal, keep, name: str) -> Temporal:
	"""
	Apply `keep`, which selects the indices of the instants to keep in a piece, except the last one,
	to every piece of a continuous value or to all the instants of a discrete one.
	"""
	if isinstance(temporal, TInstant): return temporal
	interpolation = temporal.interpolation
	if interpolation.isContinuous: pieces = temporal.pieces()
	else: pieces = [Piece(tuple(temporal.instants()), True, True)]
	simplified: list[Piece] = []
	dropped = 0
	for piece in pieces:
		instants = piece.instants
		if len(instants) <= 2:
			simplified.append(piece)
			continue
		kept = [instants[k] for k in keep(instants)] + [instants[-1]]
		if interpolation is TInterpolation.STEP and not piece.upperInc: kept[-1] = kept[-1].withValue(kept[-2].value)
		dropped += len(instants) - len(kept)
		simplified.append(Piece(tuple(kept), piece.lowerInc, piece.upperInc))
	Logging.Log(f"The {name} simplification dropped {dropped} instants.")
	if not interpolation.isContinuous: simplified = [Piece((i,), True, True) for p in simplified for i in p.instants]
	result = Factory.buildDefined(temporal.domain, temporal.interpolation, simplified)
	return result
