"""
Constructors of the temporal types, one namespace per base type.

	>>> TFloat.sequence([(1.0, "2020-01-01 00:00"), (3.0, "2020-01-01 00:10")])
	>>> TGeomPoint.fromText("SRID=4326;[POINT(0 0)@2020-01-01, POINT(1 1)@2020-01-02]")
"""
from datetime import datetime
from typing import Any, Iterable

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_core.Temporal import Parser, TPoint
from rt_temporal_core.Temporal.Domains import BoolDomain, FloatDomain, IntDomain, PointDomain, TextDomain, ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import TSequence
from rt_temporal_core.Temporal.TSequenceSet import TSequenceSet

InstantLike = TInstant | tuple[Any, datetime | str]


class TemporalType:
	"""The constructors shared by every temporal type."""
	@classmethod
	def domain(cls) -> ValueDomain:
		raise NotImplementedError()

	@classmethod
	def _value(cls, value: Any, domain: ValueDomain) -> Any:
		return value

	@classmethod
	def _instant(cls, item: InstantLike, domain: ValueDomain) -> TInstant:
		if isinstance(item, TInstant):
			if item.domain != domain: raise DomainError(f"Expected a {domain} instant: {repr(item)}")
			return item
		(value, timestamp) = item
		return TInstant(cls._value(value, domain), timestamp, domain)

	@classmethod
	def instant(cls, value: Any, timestamp: datetime | str) -> TInstant:
		return cls._instant((value, timestamp), cls.domain())

	@classmethod
	def sequence(cls, instants: Iterable[InstantLike], lowerInc: bool = True, upperInc: bool = True, interpolation: TInterpolation | None = None) -> TSequence:
		"""
		:param instants: Instants, or pairs of a value and a timestamp.
		:param interpolation: By default linear for numbers and points, step otherwise.
		"""
		domain = cls.domain()
		return TSequence([cls._instant(i, domain) for i in instants], lowerInc, upperInc, interpolation)

	@classmethod
	def discrete(cls, instants: Iterable[InstantLike]) -> TSequence:
		return cls.sequence(instants, True, True, TInterpolation.DISCRETE)

	@classmethod
	def sequenceSet(cls, sequences: Iterable[TSequence]) -> TSequenceSet:
		sequenceList = list(sequences)
		domain = cls.domain()
		if any(s.domain != domain for s in sequenceList): raise DomainError(f"Expected {domain} sequences.")
		return TSequenceSet(sequenceList)

	@classmethod
	def fromText(cls, text: str) -> Temporal:
		return Parser.parseTemporal(text, cls.domain())

	@classmethod
	def isInstance(cls, temporal: Any) -> bool:
		return isinstance(temporal, Temporal) and type(temporal.domain) is type(cls.domain())


class TBool(TemporalType):
	@classmethod
	def domain(cls) -> ValueDomain:
		return BoolDomain()


class TInt(TemporalType):
	@classmethod
	def domain(cls) -> ValueDomain:
		return IntDomain()


class TFloat(TemporalType):
	@classmethod
	def domain(cls) -> ValueDomain:
		return FloatDomain()


class TText(TemporalType):
	@classmethod
	def domain(cls) -> ValueDomain:
		return TextDomain()


class TGeomPoint(TemporalType):
	"""
	Temporal planar points.
	Values are shapely points, pairs of coordinates or (E)WKT texts.
	The constructors take the SRID of the value, `0` when unknown.
	"""
	@classmethod
	def domain(cls, srid: int = 0) -> ValueDomain:
		return PointDomain(srid)

	@classmethod
	def _value(cls, value: Any, domain: ValueDomain) -> Any:
		if isinstance(value, str): return domain.parse(value)
		return value

	@classmethod
	def instant(cls, value: Any, timestamp: datetime | str, srid: int = 0) -> TInstant:
		return cls._instant((value, timestamp), cls.domain(srid))

	@classmethod
	def sequence(cls, instants: Iterable[InstantLike], lowerInc: bool = True, upperInc: bool = True, interpolation: TInterpolation | None = None, srid: int = 0) -> TSequence:
		domain = cls.domain(srid)
		return TSequence([cls._instant(i, domain) for i in instants], lowerInc, upperInc, interpolation)

	@classmethod
	def discrete(cls, instants: Iterable[InstantLike], srid: int = 0) -> TSequence:
		return cls.sequence(instants, True, True, TInterpolation.DISCRETE, srid)

	@classmethod
	def sequenceSet(cls, sequences: Iterable[TSequence]) -> TSequenceSet:
		sequenceList = list(sequences)
		if any(not isinstance(s.domain, PointDomain) for s in sequenceList): raise DomainError("Expected temporal point sequences.")
		return TSequenceSet(sequenceList)

	srid = staticmethod(TPoint.srid)
	setSrid = staticmethod(TPoint.setSrid)
	x = staticmethod(TPoint.x)
	y = staticmethod(TPoint.y)
	length = staticmethod(TPoint.length)
	cumulativeLength = staticmethod(TPoint.cumulativeLength)
	speed = staticmethod(TPoint.speed)
	trajectory = staticmethod(TPoint.trajectory)
	values = staticmethod(TPoint.values)
	asWkt = staticmethod(TPoint.asWkt)
	asEwkt = staticmethod(TPoint.asEwkt)
	asGeoJson = staticmethod(TPoint.asGeoJson)
	asWkb = staticmethod(TPoint.asWkb)
	isSimple = staticmethod(TPoint.isSimple)
	makeSimple = staticmethod(TPoint.makeSimple)
	distance = staticmethod(TPoint.distance)
	nearestApproachDistance = staticmethod(TPoint.nearestApproachDistance)
	nearestApproachInstant = staticmethod(TPoint.nearestApproachInstant)
	shortestLine = staticmethod(TPoint.shortestLine)
	bearing = staticmethod(TPoint.bearing)
	direction = staticmethod(TPoint.direction)
	azimuth = staticmethod(TPoint.azimuth)
	angularDifference = staticmethod(TPoint.angularDifference)
	expand = staticmethod(TPoint.expand)
	timeWeightedCentroid = staticmethod(TPoint.timeWeightedCentroid)
	intersects = staticmethod(TPoint.intersects)
	disjoint = staticmethod(TPoint.disjoint)
	touches = staticmethod(TPoint.touches)
	withinDistance = staticmethod(TPoint.withinDistance)
	isSpatiallyContainedIn = staticmethod(TPoint.isSpatiallyContainedIn)
