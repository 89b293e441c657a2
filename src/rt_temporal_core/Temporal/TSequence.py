from bisect import bisect_left, bisect_right
from datetime import datetime
from typing import Any, Iterable

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Time
from rt_temporal_core.Temporal.Domains import ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant


def normalizeInstants(instants: list[TInstant], interpolation: TInterpolation, domain: ValueDomain) -> list[TInstant]:
	"""
	Remove the instants that do not change the value.
	With step interpolation an instant repeating the value of its predecessor is redundant.
	With linear interpolation an instant lying on the segment joining its neighbours is redundant.
	The first and the last instants are always kept.
	"""
	if len(instants) <= 2 or not interpolation.isContinuous: return list(instants)
	kept: list[TInstant] = [instants[0]]
	for i in range(1, len(instants) - 1):
		(prev, cur, nxt) = (kept[-1], instants[i], instants[i + 1])
		if interpolation is TInterpolation.STEP:
			if domain.eq(prev.value, cur.value): continue
		else:
			duration = (nxt.timestamp - prev.timestamp).total_seconds()
			ratio = Time.ratio(cur.timestamp, prev.timestamp, nxt.timestamp)
			if domain.collinear(prev.value, cur.value, nxt.value, ratio, duration): continue
		kept.append(cur)
	kept.append(instants[-1])
	return kept

def pieceValueAt(piece: Piece, t: datetime, interpolation: TInterpolation, domain: ValueDomain) -> Any:
	instants = piece.instants
	if t < piece.start or t > piece.end: return None
	if t == piece.start and not piece.lowerInc: return None
	if t == piece.end and not piece.upperInc: return None
	i = bisect_right(instants, t, key=lambda inst: inst.timestamp) - 1
	if instants[i].timestamp == t: return instants[i].value
	if interpolation is TInterpolation.LINEAR:
		(a, b) = (instants[i], instants[i + 1])
		return domain.interpolate(a.value, b.value, Time.ratio(t, a.timestamp, b.timestamp))
	return instants[i].value

def pieceLimit(piece: Piece, t: datetime, fromLeft: bool, interpolation: TInterpolation, domain: ValueDomain) -> Any:
	"""
	The limit of the value of a piece when approaching `t` from one side.
	With step interpolation the value jumps at an instant, so both limits differ there.
	"""
	instants = piece.instants
	if fromLeft: i = bisect_left(instants, t, key=lambda inst: inst.timestamp) - 1
	else: i = bisect_right(instants, t, key=lambda inst: inst.timestamp) - 1
	i = min(max(i, 0), len(instants) - 1)
	a = instants[i]
	if a.timestamp == t or interpolation is not TInterpolation.LINEAR or i == len(instants) - 1: return a.value
	b = instants[i + 1]
	return domain.interpolate(a.value, b.value, Time.ratio(t, a.timestamp, b.timestamp))

def pieceValueInside(piece: Piece, t1: datetime, t2: datetime, ratio: float, interpolation: TInterpolation, domain: ValueDomain) -> Any:
	"""
	The value at `ratio` of the way through `(t1, t2)`, an interval of the piece with no instant strictly inside.
	With `ratio` equal to `0` or `1` this is the limit of the value at either end of the interval.
	"""
	instants = piece.instants
	i = bisect_right(instants, t1, key=lambda inst: inst.timestamp) - 1
	i = min(max(i, 0), len(instants) - 2)
	(a, b) = (instants[i], instants[i + 1])
	if interpolation is not TInterpolation.LINEAR: return a.value
	elapsed = (t1 - a.timestamp).total_seconds() + ratio * (t2 - t1).total_seconds()
	return domain.interpolate(a.value, b.value, elapsed / (b.timestamp - a.timestamp).total_seconds())

def joinPieces(pieces: Iterable[Piece], interpolation: TInterpolation, domain: ValueDomain) -> list[Piece]:
	"""
	Sort the pieces of a continuous value in time and join the ones that touch when the value allows it.

	Raises
	------
	DomainError
		When two pieces overlap in time, or both define a different value at the timestamp where they touch.
	"""
	ordered = sorted(pieces, key=lambda p: (p.start, not p.lowerInc, p.end, p.upperInc))
	result: list[Piece] = []
	for piece in ordered:
		if len(result) == 0:
			result.append(piece)
			continue
		cur = result[-1]
		if len(piece.instants) == 1:
			existing = pieceValueAt(cur, piece.start, interpolation, domain)
			if existing is not None:
				if not domain.eq(existing, piece.instants[0].value): raise DomainError(f"Conflicting values at {piece.start}.")
				continue
		if piece.start < cur.end: raise DomainError(f"Pieces overlap in time at {piece.start}.")
		if piece.start > cur.end or (not cur.upperInc and not piece.lowerInc):
			result.append(piece)
			continue
		joined = _joinTouching(cur, piece, interpolation, domain)
		if joined is None: result.append(piece)
		else: result[-1] = joined
	return result

def _joinTouching(cur: Piece, nxt: Piece, interpolation: TInterpolation, domain: ValueDomain) -> Piece | None:
	v1 = cur.instants[-1].value
	v2 = nxt.instants[0].value
	same = domain.eq(v1, v2)
	if cur.upperInc and nxt.lowerInc:
		if not same: raise DomainError(f"Conflicting values at {nxt.start}: {v1} and {v2}.")
		instants = list(cur.instants) + list(nxt.instants[1:])
	elif interpolation is TInterpolation.STEP and not cur.upperInc:
		instants = list(cur.instants[:-1]) + list(nxt.instants)
	elif same:
		instants = list(cur.instants) + list(nxt.instants[1:])
	else:
		return None
	return Piece(tuple(normalizeInstants(instants, interpolation, domain)), cur.lowerInc, nxt.upperInc)


class TSequence(Temporal):
	"""
	A value defined over one interval of time, or at a finite set of timestamps for discrete interpolation.
	Linear interpolation is only available for the domains that support it.
	"""
	def __init__(self, instants: Iterable[TInstant], lowerInc: bool = True, upperInc: bool = True, interpolation: TInterpolation | None = None, normalize: bool = True) -> None:
		instantList = list(instants)
		if len(instantList) == 0: raise DomainError("A sequence has at least one instant.")
		domain = instantList[0].domain
		super().__init__(domain)
		if any(i.domain != domain for i in instantList): raise DomainError("All the instants of a sequence share one domain.")
		interpolation = domain.defaultInterpolation if interpolation is None else interpolation
		if interpolation is TInterpolation.NONE: raise DomainError("A sequence cannot have the interpolation of an instant.")
		if not domain.supports(interpolation): raise DomainError(f"{domain.NAME} does not support {interpolation.value} interpolation.")
		for i in range(1, len(instantList)):
			if instantList[i].timestamp <= instantList[i - 1].timestamp:
				raise DomainError(f"Timestamps must increase strictly: {instantList[i - 1].timestamp} then {instantList[i].timestamp}")
		if interpolation is TInterpolation.DISCRETE and not (lowerInc and upperInc):
			raise DomainError("Discrete sequences include all their instants.")
		if len(instantList) == 1 and not (lowerInc and upperInc):
			raise DomainError("A sequence of one instant must include it.")
		if interpolation is TInterpolation.STEP and not upperInc and len(instantList) > 1:
			if not domain.eq(instantList[-1].value, instantList[-2].value):
				raise DomainError("A step sequence which excludes its end must keep its last value until the end.")
		if normalize: instantList = normalizeInstants(instantList, interpolation, domain)
		self.__instants: tuple[TInstant, ...] = tuple(instantList)
		self.__lowerInc: bool = bool(lowerInc)
		self.__upperInc: bool = bool(upperInc)
		self.__interpolation: TInterpolation = interpolation
		return

	@classmethod
	def fromPiece(cls, piece: Piece, interpolation: TInterpolation) -> "TSequence":
		return cls(piece.instants, piece.lowerInc, piece.upperInc, interpolation)

	@property
	def interpolation(self) -> TInterpolation:
		return self.__interpolation

	@property
	def lowerInc(self) -> bool:
		return self.__lowerInc

	@property
	def upperInc(self) -> bool:
		return self.__upperInc

	def pieces(self) -> list[Piece]:
		if self.__interpolation is TInterpolation.DISCRETE: return [Piece((i,), True, True) for i in self.__instants]
		return [Piece(self.__instants, self.__lowerInc, self.__upperInc)]

	def instants(self) -> list[TInstant]:
		return list(self.__instants)

	def valueAtTimestamp(self, timestamp: datetime | str) -> Any:
		t = Time.toTimestamp(timestamp)
		piece = Piece(self.__instants, self.__lowerInc, self.__upperInc)
		value = pieceValueAt(piece, t, self.__interpolation, self.domain)
		if self.__interpolation is TInterpolation.DISCRETE:
			i = bisect_right(self.__instants, t, key=lambda inst: inst.timestamp) - 1
			if i < 0 or self.__instants[i].timestamp != t: return None
		return value

	def sequences(self) -> list["TSequence"]:
		return [self]

	def numSequences(self) -> int:
		return 1

	def sequenceN(self, n: int) -> "TSequence | None":
		return self if n == 0 else None

	def startSequence(self) -> "TSequence":
		return self

	def endSequence(self) -> "TSequence":
		return self

	def _mapTimestamps(self, fn) -> "TSequence":
		instants = [i.withTimestamp(fn(i.timestamp)) for i in self.__instants]
		return TSequence(instants, self.__lowerInc, self.__upperInc, self.__interpolation)
