from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, NamedTuple, Sequence

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_core.Collections.Span import TsTzSpan
from rt_temporal_core.Collections.SpanSet import TsTzSpanSet
from rt_temporal_core.Temporal.Domains import ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation

if TYPE_CHECKING:
	from rt_temporal_core.Temporal.TInstant import TInstant
	from rt_temporal_core.Temporal.TSequence import TSequence


class Piece(NamedTuple):
	"""
	A maximal run of instants over which a temporal value is defined without interruption.
	A discrete value is made of single-instant pieces.
	"""
	instants: tuple["TInstant", ...]
	lowerInc: bool
	upperInc: bool

	@property
	def start(self) -> datetime:
		return self.instants[0].timestamp

	@property
	def end(self) -> datetime:
		return self.instants[-1].timestamp

	def span(self) -> TsTzSpan:
		return TsTzSpan.fromCanonical(self.start, self.end, self.lowerInc, self.upperInc)


class Temporal:
	"""
	The base class of `TInstant`, `TSequence` and `TSequenceSet`.

	The shape-independent part of the interface lives here and is written against `pieces()`.
	Operations that can return any of the three shapes are computed by the engine modules
	of this package and resolved into the right shape by `Factory.build()`.
	"""
	def __init__(self, domain: ValueDomain) -> None:
		self.__domain: ValueDomain = domain
		self.__box: Any = None
		return

	@property
	def domain(self) -> ValueDomain:
		return self.__domain

	@property
	def interpolation(self) -> TInterpolation:
		raise NotImplementedError()

	def pieces(self) -> list[Piece]:
		raise NotImplementedError()

	def valueAtTimestamp(self, timestamp: datetime | str) -> Any:
		"""The value at `timestamp`, or `None` where the value is not defined."""
		raise NotImplementedError()

	def _key(self) -> tuple:
		key = [(self.interpolation,)]
		for piece in self.pieces():
			key.append((piece.lowerInc, piece.upperInc, tuple((self.domain.key(i.value), i.timestamp) for i in piece.instants)))
		return tuple(key)

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, Temporal) or type(other) is not type(self): return False
		if other.domain != self.domain: return False
		return self._key() == other._key()

	def __hash__(self) -> int:
		return hash((type(self).__name__, self.domain, self._key()))

	def __repr__(self) -> str:
		return f"{type(self).__name__}[{self.domain.NAME}]({str(self)})"

	def __str__(self) -> str:
		from rt_temporal_core.Temporal import Parser
		return Parser.formatTemporal(self)

	def asText(self) -> str:
		return str(self)

	def instants(self) -> list["TInstant"]:
		result: list["TInstant"] = []
		for piece in self.pieces(): result.extend(piece.instants)
		return result

	def numInstants(self) -> int:
		return len(self.instants())

	def startInstant(self) -> "TInstant":
		return self.pieces()[0].instants[0]

	def endInstant(self) -> "TInstant":
		return self.pieces()[-1].instants[-1]

	def instantN(self, n: int) -> "TInstant | None":
		"""The `n`-th instant, counting from zero, or `None` if there are not that many instants."""
		instants = self.instants()
		if n < 0 or n >= len(instants): return None
		return instants[n]

	def minInstant(self) -> "TInstant":
		instants = self.instants()
		best = instants[0]
		for i in instants[1:]:
			if self.domain.cmp(i.value, best.value) < 0: best = i
		return best

	def maxInstant(self) -> "TInstant":
		instants = self.instants()
		best = instants[0]
		for i in instants[1:]:
			if self.domain.cmp(i.value, best.value) > 0: best = i
		return best

	def values(self) -> list[Any]:
		return [i.value for i in self.instants()]

	def valueSet(self) -> list[Any]:
		"""The distinct values, sorted when the domain is ordered."""
		distinct: dict[Any, Any] = {}
		for v in self.values(): distinct.setdefault(self.domain.key(v), v)
		result = list(distinct.values())
		if self.domain.ORDERED: result.sort()
		return result

	def startValue(self) -> Any:
		return self.startInstant().value

	def endValue(self) -> Any:
		return self.endInstant().value

	def minValue(self) -> Any:
		return self.minInstant().value

	def maxValue(self) -> Any:
		return self.maxInstant().value

	def time(self) -> TsTzSpanSet:
		"""The time over which the value is defined."""
		return TsTzSpanSet([p.span() for p in self.pieces()])

	def timespan(self) -> TsTzSpan:
		pieces = self.pieces()
		first = pieces[0]
		last = pieces[-1]
		return TsTzSpan.fromCanonical(first.start, last.end, first.lowerInc, last.upperInc)

	def duration(self, ignoreGaps: bool = False) -> timedelta:
		if ignoreGaps: return self.timespan().duration()
		return sum(((p.end - p.start) for p in self.pieces()), timedelta(0))

	def timestamps(self) -> list[datetime]:
		return [i.timestamp for i in self.instants()]

	def numTimestamps(self) -> int:
		return len(self.timestamps())

	def startTimestamp(self) -> datetime:
		return self.startInstant().timestamp

	def endTimestamp(self) -> datetime:
		return self.endInstant().timestamp

	def timestampN(self, n: int) -> datetime | None:
		instant = self.instantN(n)
		if instant is None: return None
		return instant.timestamp

	def segments(self) -> list["TSequence"]:
		"""
		The value split into segments of two consecutive instants.
		A segment ends exclusively, except the last one of every piece, which keeps the bound of its piece.
		"""
		from rt_temporal_core.Temporal.TSequence import TSequence
		interp = self.interpolation
		if not interp.isContinuous: interp = TInterpolation.STEP
		result: list[TSequence] = []
		for piece in self.pieces():
			if len(piece.instants) == 1:
				result.append(TSequence(piece.instants, True, True, interp))
				continue
			for i in range(len(piece.instants) - 1):
				(start, end) = (piece.instants[i], piece.instants[i + 1])
				isLast = i == len(piece.instants) - 2
				lowerInc = piece.lowerInc if i == 0 else True
				upperInc = piece.upperInc if isLast else False
				if interp is TInterpolation.STEP and not upperInc: end = end.withValue(start.value)
				result.append(TSequence([start, end], lowerInc, upperInc, interp, normalize=False))
		return result

	def boundingBox(self) -> Any:
		"""`TsTzSpan` for booleans and texts, `TBox` for numbers and `STBox` for points. Computed once."""
		if self.__box is None:
			from rt_temporal_core.Boxes import boxOf
			self.__box = boxOf(self)
		return self.__box

	def setInterpolation(self, interpolation: TInterpolation) -> "Temporal":
		from rt_temporal_core.Temporal import Factory
		return Factory.setInterpolation(self, interpolation)

	def shiftTime(self, delta: timedelta) -> "Temporal":
		return self.shiftScaleTime(delta, None)

	def scaleTime(self, duration: timedelta) -> "Temporal":
		return self.shiftScaleTime(None, duration)

	def shiftScaleTime(self, delta: timedelta | None = None, duration: timedelta | None = None) -> "Temporal":
		"""Shift the value in time and stretch it so that its time span lasts `duration`."""
		original = self.timespan()
		target = original.shiftScale(delta, duration)
		return self._mapTimestamps(lambda t: original.mapProportionally(t, target))

	def _mapTimestamps(self, fn) -> "Temporal":
		raise NotImplementedError()

	def toInstant(self) -> "TInstant":
		instants = self.instants()
		if len(instants) != 1: raise DomainError(f"Cannot convert a value of {len(instants)} instants to an instant.")
		return instants[0]

	def toSequence(self, interpolation: TInterpolation | None = None) -> "TSequence":
		from rt_temporal_core.Temporal import Factory
		return Factory.toSequence(self, interpolation)

	def toSequenceSet(self, interpolation: TInterpolation | None = None) -> "Temporal":
		from rt_temporal_core.Temporal import Factory
		return Factory.toSequenceSet(self, interpolation)

	def round(self, maxDecimals: int | None = None) -> "Temporal":
		"""Round the values of a float or point value to `maxDecimals`, which defaults to the configured one."""
		from rt_temporal_commons.Runtime import CurrentSettings
		from rt_temporal_core.Temporal import Factory
		decimals = CurrentSettings().maxDecimals if maxDecimals is None else maxDecimals
		return Factory.mapValues(self, lambda v: self.domain.round(v, decimals))

	def at(self, x: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.at(self, x)

	def minus(self, x: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.minus(self, x)

	def atTimestamp(self, timestamp: datetime | str) -> "TInstant | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atTimestamp(self, timestamp)

	def atTimestamps(self, timestamps: Sequence[datetime | str]) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atTimestamps(self, timestamps)

	def atTsTzSpan(self, span: TsTzSpan) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atTsTzSpanSet(self, span.toSpanSet())

	def atTsTzSpanSet(self, spanSet: TsTzSpanSet) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atTsTzSpanSet(self, spanSet)

	def atValue(self, value: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atValues(self, [value])

	def atValues(self, values: Sequence[Any]) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atValues(self, values)

	def atSpan(self, span: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atValueSpans(self, span, keep=True)

	def atSpanSet(self, spanSet: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atValueSpans(self, spanSet, keep=True)

	def atMin(self) -> "Temporal | None":
		return self.atValue(self.minValue())

	def atMax(self) -> "Temporal | None":
		return self.atValue(self.maxValue())

	def minusTimestamp(self, timestamp: datetime | str) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.minusTimestamps(self, [timestamp])

	def minusTimestamps(self, timestamps: Sequence[datetime | str]) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.minusTimestamps(self, timestamps)

	def minusTsTzSpan(self, span: TsTzSpan) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.minusTsTzSpanSet(self, span.toSpanSet())

	def minusTsTzSpanSet(self, spanSet: TsTzSpanSet) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.minusTsTzSpanSet(self, spanSet)

	def minusValue(self, value: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.minusValues(self, [value])

	def minusValues(self, values: Sequence[Any]) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.minusValues(self, values)

	def minusSpan(self, span: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atValueSpans(self, span, keep=False)

	def minusSpanSet(self, spanSet: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Restriction
		return Restriction.atValueSpans(self, spanSet, keep=False)

	def minusMin(self) -> "Temporal | None":
		return self.minusValue(self.minValue())

	def minusMax(self) -> "Temporal | None":
		return self.minusValue(self.maxValue())

	def appendInstant(self, instant: "TInstant", maxDist: float | None = None, maxTime: timedelta | None = None) -> "Temporal":
		from rt_temporal_core.Temporal import Modification
		return Modification.appendInstant(self, instant, maxDist, maxTime)

	def appendSequence(self, sequence: "TSequence") -> "Temporal":
		from rt_temporal_core.Temporal import Modification
		return Modification.appendSequence(self, sequence)

	def merge(self, other: "Temporal | None") -> "Temporal":
		from rt_temporal_core.Temporal import Modification
		return Modification.merge(self, other)

	def insert(self, other: "Temporal", connect: bool = True) -> "Temporal":
		from rt_temporal_core.Temporal import Modification
		return Modification.insert(self, other, connect)

	def update(self, other: "Temporal", connect: bool = True) -> "Temporal":
		from rt_temporal_core.Temporal import Modification
		return Modification.update(self, other, connect)

	def deleteAtTimestamp(self, timestamp: datetime | str, connect: bool = True) -> "Temporal | None":
		from rt_temporal_core.Temporal import Modification
		return Modification.delete(self, TsTzSpan.singleton(timestamp).toSpanSet(), connect)

	def deleteAtTsTzSpan(self, span: TsTzSpan, connect: bool = True) -> "Temporal | None":
		from rt_temporal_core.Temporal import Modification
		return Modification.delete(self, span.toSpanSet(), connect)

	def deleteAtTsTzSpanSet(self, spanSet: TsTzSpanSet, connect: bool = True) -> "Temporal | None":
		from rt_temporal_core.Temporal import Modification
		return Modification.delete(self, spanSet, connect)

	def __otherBox(self, other: Any) -> Any:
		if isinstance(other, Temporal): return other.boundingBox()
		return other

	def __spatialPredicate(self, name: str, other: Any) -> bool:
		predicate = getattr(self.boundingBox(), name, None)
		if predicate is None: raise DomainError(f"Values of {self.domain.NAME} have no vertical axis.")
		return predicate(self.__otherBox(other))

	def isAdjacent(self, other: Any) -> bool:
		return self.boundingBox().isAdjacent(self.__otherBox(other))

	def isContainedIn(self, other: Any) -> bool:
		return self.boundingBox().isContainedIn(self.__otherBox(other))

	def contains(self, other: Any) -> bool:
		return self.boundingBox().contains(self.__otherBox(other))

	def overlaps(self, other: Any) -> bool:
		return self.boundingBox().overlaps(self.__otherBox(other))

	def isSame(self, other: Any) -> bool:
		from rt_temporal_core.Boxes import isSame
		return isSame(self.boundingBox(), self.__otherBox(other))

	def isTemporallyAdjacent(self, other: "Temporal") -> bool:
		return self.timespan().isAdjacent(other.timespan())

	def isTemporallyContainedIn(self, other: "Temporal") -> bool:
		return self.timespan().isContainedIn(other.timespan())

	def temporallyContains(self, other: "Temporal") -> bool:
		return self.timespan().contains(other.timespan())

	def temporallyOverlaps(self, other: "Temporal") -> bool:
		return self.timespan().overlaps(other.timespan())

	def isBefore(self, other: Any) -> bool:
		from rt_temporal_core.Boxes import timeOf
		return self.timespan().isLeft(timeOf(other))

	def isOverOrBefore(self, other: Any) -> bool:
		from rt_temporal_core.Boxes import timeOf
		return self.timespan().isOverOrLeft(timeOf(other))

	def isAfter(self, other: Any) -> bool:
		from rt_temporal_core.Boxes import timeOf
		return self.timespan().isRight(timeOf(other))

	def isOverOrAfter(self, other: Any) -> bool:
		from rt_temporal_core.Boxes import timeOf
		return self.timespan().isOverOrRight(timeOf(other))

	def isLeft(self, other: Any) -> bool:
		return self.boundingBox().isLeft(self.__otherBox(other))

	def isOverOrLeft(self, other: Any) -> bool:
		return self.boundingBox().isOverOrLeft(self.__otherBox(other))

	def isRight(self, other: Any) -> bool:
		return self.boundingBox().isRight(self.__otherBox(other))

	def isOverOrRight(self, other: Any) -> bool:
		return self.boundingBox().isOverOrRight(self.__otherBox(other))

	def isBelow(self, other: Any) -> bool:
		return self.__spatialPredicate("isBelow", other)

	def isOverOrBelow(self, other: Any) -> bool:
		return self.__spatialPredicate("isOverOrBelow", other)

	def isAbove(self, other: Any) -> bool:
		return self.__spatialPredicate("isAbove", other)

	def isOverOrAbove(self, other: Any) -> bool:
		return self.__spatialPredicate("isOverOrAbove", other)

	def alwaysEqual(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.always(self, other, Comparison.EQ)

	def alwaysNotEqual(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.always(self, other, Comparison.NE)

	def everEqual(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.ever(self, other, Comparison.EQ)

	def everNotEqual(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.ever(self, other, Comparison.NE)

	def alwaysLess(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.always(self, other, Comparison.LT)

	def alwaysLessOrEqual(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.always(self, other, Comparison.LE)

	def alwaysGreater(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.always(self, other, Comparison.GT)

	def alwaysGreaterOrEqual(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.always(self, other, Comparison.GE)

	def everLess(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.ever(self, other, Comparison.LT)

	def everLessOrEqual(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.ever(self, other, Comparison.LE)

	def everGreater(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.ever(self, other, Comparison.GT)

	def everGreaterOrEqual(self, other: Any) -> bool | None:
		from rt_temporal_core.Temporal import Comparison
		return Comparison.ever(self, other, Comparison.GE)

	def temporalEqual(self, other: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Comparison
		return Comparison.temporalCompare(self, other, Comparison.EQ)

	def temporalNotEqual(self, other: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Comparison
		return Comparison.temporalCompare(self, other, Comparison.NE)

	def temporalLess(self, other: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Comparison
		return Comparison.temporalCompare(self, other, Comparison.LT)

	def temporalLessOrEqual(self, other: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Comparison
		return Comparison.temporalCompare(self, other, Comparison.LE)

	def temporalGreater(self, other: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Comparison
		return Comparison.temporalCompare(self, other, Comparison.GT)

	def temporalGreaterOrEqual(self, other: Any) -> "Temporal | None":
		from rt_temporal_core.Temporal import Comparison
		return Comparison.temporalCompare(self, other, Comparison.GE)

	def simplifyMinDistance(self, distance: float) -> "Temporal":
		from rt_temporal_core.Temporal import Simplification
		return Simplification.minDistance(self, distance)

	def simplifyMinTDelta(self, delta: timedelta) -> "Temporal":
		from rt_temporal_core.Temporal import Simplification
		return Simplification.minTDelta(self, delta)

	def simplifyDouglasPeucker(self, distance: float, synchronized: bool = False) -> "Temporal":
		from rt_temporal_core.Temporal import Simplification
		return Simplification.douglasPeucker(self, distance, synchronized)

	def simplifyMaxDistance(self, distance: float, synchronized: bool = False) -> "Temporal":
		from rt_temporal_core.Temporal import Simplification
		return Simplification.maxDistance(self, distance, synchronized)

	def frechetDistance(self, other: "Temporal") -> float:
		from rt_temporal_core.Temporal import Similarity
		return Similarity.frechetDistance(self, other)

	def dynTimeWarpDistance(self, other: "Temporal") -> float:
		from rt_temporal_core.Temporal import Similarity
		return Similarity.dynTimeWarpDistance(self, other)

	def hausdorffDistance(self, other: "Temporal") -> float:
		from rt_temporal_core.Temporal import Similarity
		return Similarity.hausdorffDistance(self, other)

	def temporalSample(self, duration: timedelta, start: datetime | str | None = None, interpolation: TInterpolation = TInterpolation.DISCRETE) -> "Temporal | None":
		from rt_temporal_core.Temporal import Sampling
		return Sampling.temporalSample(self, duration, start, interpolation)

	def temporalPrecision(self, duration: timedelta, start: datetime | str | None = None) -> "Temporal":
		from rt_temporal_core.Temporal import Sampling
		return Sampling.temporalPrecision(self, duration, start)

	def timeSplit(self, duration: timedelta, start: datetime | str | None = None) -> list["Temporal"]:
		from rt_temporal_core.Temporal import Sampling
		return Sampling.timeSplit(self, duration, start)

	def timeSplitN(self, n: int) -> list["Temporal"]:
		from rt_temporal_core.Temporal import Sampling
		return Sampling.timeSplitN(self, n)

	def stops(self, maxDistance: float, minDuration: timedelta) -> "Temporal | None":
		from rt_temporal_core.Temporal import Sampling
		return Sampling.stops(self, maxDistance, minDuration)
