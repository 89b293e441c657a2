"""Operations specific to temporal points."""
import json
from datetime import datetime
from typing import Any, Callable

import shapely

from rt_temporal_commons.Runtime import CurrentSettings
from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils import Time
from rt_temporal_commons.Utils.Geometry import Encoding, GeometryLib, Shapely, WKBVariant
from rt_temporal_core.Boxes.STBox import STBox
from rt_temporal_core.Collections.Span import TsTzSpan
from rt_temporal_core.Temporal import Comparison, Factory, Lifting, Parser
from rt_temporal_core.Temporal.Domains import BoolDomain, FloatDomain, PointDomain, ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequenceSet import TSequenceSet


def __checkPoint(temporal: Temporal) -> PointDomain:
	if not isinstance(temporal.domain, PointDomain): raise DomainError(f"Not a temporal point: {temporal.domain}")
	return temporal.domain

def __precision(precision: int | None) -> int:
	return CurrentSettings().maxDecimals if precision is None else precision

def mapInstants(temporal: Temporal, domain: ValueDomain, fn: Callable[[TInstant], Any], interpolation: TInterpolation | None = None) -> Temporal:
	"""A value of `domain` with the instants of `temporal`, each holding `fn(instant)`."""
	if interpolation is None: interpolation = temporal.interpolation
	pieces = [Piece(tuple(TInstant(fn(i), i.timestamp, domain) for i in p.instants), p.lowerInc, p.upperInc) for p in temporal.pieces()]
	result = Factory.buildDefined(domain, interpolation, pieces)
	return result

def srid(temporal: Temporal) -> int:
	return __checkPoint(temporal).srid

def setSrid(temporal: Temporal, value: int) -> Temporal:
	"""The same positions in another spatial reference system. Coordinates are not transformed."""
	__checkPoint(temporal)
	return mapInstants(temporal, PointDomain(value), lambda i: i.value)

def x(temporal: Temporal) -> Temporal:
	__checkPoint(temporal)
	return mapInstants(temporal, FloatDomain(), lambda i: i.value.x)

def y(temporal: Temporal) -> Temporal:
	__checkPoint(temporal)
	return mapInstants(temporal, FloatDomain(), lambda i: i.value.y)

def length(temporal: Temporal) -> float:
	"""The length of the path travelled. Only linear points travel, others jump."""
	__checkPoint(temporal)
	if temporal.interpolation is not TInterpolation.LINEAR: return 0.0
	return sum(GeometryLib.pathLength([i.value for i in p.instants]) for p in temporal.pieces())

def cumulativeLength(temporal: Temporal) -> Temporal:
	"""The length travelled since the start, as a temporal float."""
	__checkPoint(temporal)
	domain = FloatDomain()
	if temporal.interpolation is not TInterpolation.LINEAR: return mapInstants(temporal, domain, lambda i: 0.0)
	pieces: list[Piece] = []
	total = 0.0
	for piece in temporal.pieces():
		instants = [TInstant(total, piece.instants[0].timestamp, domain)]
		for k in range(1, len(piece.instants)):
			(prev, cur) = (piece.instants[k - 1], piece.instants[k])
			total += GeometryLib.distance(prev.value.x, prev.value.y, cur.value.x, cur.value.y)
			instants.append(TInstant(total, cur.timestamp, domain))
		pieces.append(Piece(tuple(instants), piece.lowerInc, piece.upperInc))
	result = Factory.buildDefined(domain, TInterpolation.LINEAR, pieces)
	return result

def speed(temporal: Temporal) -> Temporal | None:
	"""
	The speed in units per second, as a step temporal float holding the speed of every segment.

	Returns
	-------
	Temporal | None
		`None` when the point is never moving over an interval, for instance a single instant.

	Raises
	------
	DomainError
		When the point is not linear.
	"""
	__checkPoint(temporal)
	if not temporal.interpolation.isContinuous: return None
	if temporal.interpolation is not TInterpolation.LINEAR: raise DomainError("The speed is defined for linear points.")
	domain = FloatDomain()
	pieces: list[Piece] = []
	for piece in temporal.pieces():
		if len(piece.instants) < 2: continue
		speeds: list[float] = []
		for k in range(1, len(piece.instants)):
			(prev, cur) = (piece.instants[k - 1], piece.instants[k])
			seconds = (cur.timestamp - prev.timestamp).total_seconds()
			speeds.append(GeometryLib.distance(prev.value.x, prev.value.y, cur.value.x, cur.value.y) / seconds)
		speeds.append(speeds[-1])
		instants = tuple(TInstant(s, i.timestamp, domain) for (s, i) in zip(speeds, piece.instants))
		pieces.append(Piece(instants, piece.lowerInc, piece.upperInc))
	return Factory.build(domain, TInterpolation.STEP, pieces)

def trajectory(temporal: Temporal) -> shapely.Geometry:
	"""The geometry traversed by the point: a point, a multi point for jumps, a line string for linear movement."""
	__checkPoint(temporal)
	if temporal.interpolation is not TInterpolation.LINEAR: return GeometryLib.trajectory(temporal.values(), False)
	parts = [GeometryLib.trajectory([i.value for i in p.instants], True) for p in temporal.pieces()]
	if len(parts) == 1: return parts[0]
	return shapely.union_all(parts)

def asWkt(temporal: Temporal, precision: int | None = None) -> str:
	"""The text of the value with its points in WKT, rounded to `precision` decimals."""
	__checkPoint(temporal)
	decimals = __precision(precision)
	return Parser.formatTemporal(temporal, lambda p: Encoding.asWkt(p, decimals), withSrid=False)

def asEwkt(temporal: Temporal, precision: int | None = None) -> str:
	__checkPoint(temporal)
	decimals = __precision(precision)
	return Parser.formatTemporal(temporal, lambda p: Encoding.asWkt(p, decimals), withSrid=True)

def asGeoJson(temporal: Temporal, precision: int | None = None) -> str:
	"""A moving point document in the manner of OGC Moving Features JSON."""
	domain = __checkPoint(temporal)
	decimals = __precision(precision)
	def members(pieceList: list[Piece]) -> dict[str, Any]:
		instants = [i for p in pieceList for i in p.instants]
		return {
			"coordinates": [[round(i.value.x, decimals), round(i.value.y, decimals)] for i in instants],
			"datetimes": [Time.formatTimestamp(i.timestamp) for i in instants],
		}
	pieces = temporal.pieces()
	document: dict[str, Any] = {"type": "MovingPoint"}
	if domain.srid != 0: document["crs"] = {"type": "name", "properties": {"name": f"EPSG:{domain.srid}"}}
	if isinstance(temporal, TSequenceSet):
		document["sequences"] = [dict(members([p]), lower_inc=p.lowerInc, upper_inc=p.upperInc) for p in pieces]
	else:
		document.update(members(pieces))
		if temporal.interpolation.isContinuous: document.update(lower_inc=pieces[0].lowerInc, upper_inc=pieces[0].upperInc)
	document["interpolation"] = temporal.interpolation.value
	return json.dumps(document)

def asWkb(temporal: Temporal, variant: WKBVariant = WKBVariant.NDR) -> bytes:
	"""The well-known-binary of the trajectory, which is the point itself for an instant."""
	domain = __checkPoint(temporal)
	return Encoding.asWkb(trajectory(temporal), domain.srid, variant)

def values(temporal: Temporal, precision: int | None = None) -> list[Shapely.Point]:
	"""The points of the instants, rounded to `precision` decimals when given."""
	__checkPoint(temporal)
	if precision is None: return temporal.values()
	return [GeometryLib.roundPoint(v, precision) for v in temporal.values()]

def isSimple(temporal: Temporal) -> bool:
	"""
	Whether the point never comes back to a place it has left.
	A linear point is simple when its trajectory does not cross itself, every other point when it never jumps
	back to one of its positions. The sequences of a sequence set are simple separately.
	"""
	__checkPoint(temporal)
	return all(__runIsSimple([i.value for i in run], temporal.interpolation) for run in __runs(temporal))

def makeSimple(temporal: Temporal) -> list[Temporal]:
	"""
	Split the value into simple fragments, in time order.
	A fragment ends where the next instant would make it cross itself. Linear fragments share their end position.
	"""
	__checkPoint(temporal)
	interpolation = temporal.interpolation
	fragments: list[Temporal] = []
	for run in __runs(temporal):
		(lower, lowerInc, upper, upperInc) = __runBounds(temporal, run)
		cuts: list[datetime] = []
		start = 0
		for k in range(1, len(run)):
			if __runIsSimple([i.value for i in run[start:k + 1]], interpolation): continue
			start = k - 1 if interpolation is TInterpolation.LINEAR else k
			cuts.append(run[start].timestamp)
		bounds = [lower] + cuts + [upper]
		for j in range(len(bounds) - 1):
			span = TsTzSpan(bounds[j], bounds[j + 1], lowerInc if j == 0 else True, upperInc if j == len(bounds) - 2 else False)
			fragment = temporal.atTsTzSpan(span)
			if fragment is not None: fragments.append(fragment)
	return fragments

def __runs(temporal: Temporal) -> list[list[TInstant]]:
	if not temporal.interpolation.isContinuous: return [temporal.instants()]
	return [list(p.instants) for p in temporal.pieces()]

def __runBounds(temporal: Temporal, run: list[TInstant]) -> tuple[datetime, bool, datetime, bool]:
	if not temporal.interpolation.isContinuous: return (run[0].timestamp, True, run[-1].timestamp, True)
	piece = next(p for p in temporal.pieces() if p.start == run[0].timestamp)
	return (piece.start, piece.lowerInc, piece.end, piece.upperInc)

def __runIsSimple(points: list[Shapely.Point], interpolation: TInterpolation) -> bool:
	if interpolation is TInterpolation.LINEAR: return GeometryLib.trajectory(points, True).is_simple
	visited: set[tuple[float, float]] = set()
	for k in range(len(points)):
		if interpolation is TInterpolation.STEP and k > 0 and GeometryLib.pointsAreEqual(points[k - 1], points[k]): continue
		coords = GeometryLib.toCoords(points[k])
		if coords in visited: return False
		visited.add(coords)
	return True

def __asTemporalPoint(temporal: Temporal, other: Any) -> Temporal:
	"""`other`, a point or a temporal point, as a temporal point comparable with `temporal`."""
	domain = __checkPoint(temporal)
	if isinstance(other, Temporal):
		if other.domain != domain: raise DomainError(f"Temporal points of different kinds or SRIDs: {domain} and {other.domain}")
		return other
	if not isinstance(other, Shapely.Point): raise DomainError(f"Not a point: {repr(other)}")
	return Comparison.constantLike(temporal, other)

def __checkGeometry(geom: Any) -> shapely.Geometry:
	if not isinstance(geom, shapely.Geometry) or geom.is_empty: raise DomainError(f"Not a non-empty geometry: {repr(geom)}")
	return geom

def __pointDistance(a: Shapely.Point, b: Shapely.Point) -> float:
	return GeometryLib.distance(a.x, a.y, b.x, b.y)

def __closestRatios(segment: Lifting.Segment) -> list[float]:
	((a1, a2), (b1, b2)) = segment.limits
	ratio = GeometryLib.nearestRatio(*GeometryLib.relativeMotion(a1, a2, b1, b2))
	return [] if ratio is None else [ratio]

def distance(temporal: Temporal, other: Any) -> Temporal | None:
	"""
	The distance to a point or to another temporal point, through time.

	A linear result is exact at the instants of both operands and at the times where they are the closest,
	and linear in between.

	Returns
	-------
	Temporal | None
		`None` when both temporal points are never defined at the same time.
	"""
	operands = [temporal, __asTemporalPoint(temporal, other)]
	interpolation = Lifting.resultInterpolation(operands, True)
	return Lifting.lift(operands, FloatDomain(), interpolation, __pointDistance, __closestRatios)

def nearestApproachDistance(temporal: Temporal, other: Any) -> float | None:
	"""The smallest distance ever between the point and a geometry, a box or another temporal point."""
	__checkPoint(temporal)
	if isinstance(other, Temporal):
		distances = distance(temporal, other)
		if distances is None: return None
		return distances.minValue()
	if isinstance(other, STBox): other = other.toGeometry()
	geom = __checkGeometry(other)
	return float(shapely.distance(trajectory(temporal), geom))

def nearestApproachInstant(temporal: Temporal, other: Any) -> TInstant | None:
	"""
	The first instant at which the point is the closest to a geometry or to another temporal point.
	It may fall between two instants of the point.
	"""
	__checkPoint(temporal)
	if isinstance(other, Temporal):
		distances = distance(temporal, other)
		if distances is None: return None
		t = distances.minInstant().timestamp
		return TInstant(Lifting.valuesAt([temporal], t)[0], t, temporal.domain)
	geom = __checkGeometry(other)
	best: tuple[float, datetime, Shapely.Point] | None = None
	for (t, p) in __candidatesNear(temporal, geom):
		d = float(shapely.distance(p, geom))
		if best is None or d < best[0]: best = (d, t, p)
	if best is None: return None
	return TInstant(best[2], best[1], temporal.domain)

def __candidatesNear(temporal: Temporal, geom: shapely.Geometry) -> list[tuple[datetime, Shapely.Point]]:
	"""The instants of the point, and the closest position of every linear segment, in time order."""
	candidates: list[tuple[datetime, Shapely.Point]] = []
	linear = temporal.interpolation is TInterpolation.LINEAR
	for piece in temporal.pieces():
		for k in range(len(piece.instants)):
			cur = piece.instants[k]
			candidates.append((cur.timestamp, cur.value))
			if not linear or k == len(piece.instants) - 1: continue
			nxt = piece.instants[k + 1]
			if GeometryLib.pointsAreEqual(cur.value, nxt.value): continue
			segment = Shapely.LineString([GeometryLib.toCoords(cur.value), GeometryLib.toCoords(nxt.value)])
			(x, y) = shapely.shortest_line(segment, geom).coords[0]
			ratio = GeometryLib.projectionRatio(Shapely.Point(x, y), cur.value, nxt.value)
			if 0 < ratio < 1:
				t = Time.atRatio(cur.timestamp, nxt.timestamp, ratio)
				candidates.append((t, GeometryLib.interpolate(cur.value, nxt.value, ratio)))
	return candidates

def shortestLine(temporal: Temporal, other: Any) -> Shapely.LineString | None:
	"""The line joining the point, at its nearest approach, to a geometry or to another temporal point."""
	__checkPoint(temporal)
	if isinstance(other, Temporal):
		nearest = nearestApproachInstant(temporal, other)
		if nearest is None: return None
		position = Lifting.valuesAt([other], nearest.timestamp)[0]
		return Shapely.LineString([GeometryLib.toCoords(nearest.value), GeometryLib.toCoords(position)])
	geom = __checkGeometry(other)
	return shapely.shortest_line(trajectory(temporal), geom)

def bearing(temporal: Temporal, other: Any) -> Temporal | None:
	"""
	The bearing from the point to a point or to another temporal point, in radians clockwise from the north.
	`0` while both positions coincide. A linear result is exact at the instants of both operands
	and at the times where they are the closest, and linear in between.
	"""
	operands = [temporal, __asTemporalPoint(temporal, other)]
	interpolation = Lifting.resultInterpolation(operands, True)
	angle = lambda a, b: GeometryLib.azimuth(a, b) or 0.0
	return Lifting.lift(operands, FloatDomain(), interpolation, angle, __closestRatios)

def direction(temporal: Temporal) -> float | None:
	"""The azimuth from the start position to the end position, `None` when they coincide."""
	__checkPoint(temporal)
	return GeometryLib.azimuth(temporal.startValue(), temporal.endValue())

def azimuth(temporal: Temporal) -> TSequenceSet | None:
	"""
	The azimuth of the movement in radians, as a step sequence set.
	The periods where the point does not move are gaps of the result.

	Returns
	-------
	TSequenceSet | None
		`None` when the point is not linear or never moves.
	"""
	__checkPoint(temporal)
	if temporal.interpolation is not TInterpolation.LINEAR: return None
	domain = FloatDomain()
	pieces: list[Piece] = []
	for piece in temporal.pieces():
		instants = piece.instants
		angles = [GeometryLib.azimuth(instants[k].value, instants[k + 1].value) for k in range(len(instants) - 1)]
		for (k, angle) in enumerate(angles):
			if angle is None: continue
			lowerInc = piece.lowerInc or k > 0
			if k == len(angles) - 1: upperInc = piece.upperInc
			else: upperInc = angles[k + 1] is None
			pieces.append(Piece((TInstant(angle, instants[k].timestamp, domain), TInstant(angle, instants[k + 1].timestamp, domain)), lowerInc, upperInc))
	result = Factory.build(domain, TInterpolation.STEP, pieces)
	if result is None: return None
	return Factory.toSequenceSet(result)

def angularDifference(temporal: Temporal) -> Temporal | None:
	"""
	The change of azimuth in degrees, in `[0, 180]`, at every instant of `azimuth()`.
	The first instant of every moving period has no change.
	"""
	angles = azimuth(temporal)
	if angles is None: return None
	domain = FloatDomain()
	instants: list[TInstant] = []
	for sequence in angles.sequences():
		previous: TInstant | None = None
		for instant in sequence.instants():
			change = 0.0 if previous is None else GeometryLib.angularDifference(previous.value, instant.value)
			instants.append(TInstant(change, instant.timestamp, domain))
			previous = instant
	return Factory.build(domain, TInterpolation.DISCRETE, [Piece((i,), True, True) for i in instants])

def expand(temporal: Temporal, distance: float) -> STBox:
	"""The bounding box grown by `distance` on both spatial axes. A negative distance shrinks it."""
	__checkPoint(temporal)
	box = STBox.of(temporal)
	(x, y) = (box.x, box.y)
	if x is None or y is None: raise DomainError(f"{box} has no spatial extent.")
	if x.lower - distance > x.upper + distance or y.lower - distance > y.upper + distance:
		raise DomainError(f"{box} vanishes when shrunk by {-distance}.")
	return STBox.fromBounds(x.lower - distance, y.lower - distance, x.upper + distance, y.upper + distance, box.time, box.srid)

def timeWeightedCentroid(temporal: Temporal, precision: int | None = None) -> Shapely.Point:
	"""
	The centroid of the positions weighted by the time spent at them.
	A linear segment weighs at its middle, a step segment at its start.
	Values that never last, such as discrete ones, give the plain average of their positions.
	"""
	domain = __checkPoint(temporal)
	points: list[Shapely.Point] = []
	weights: list[float] = []
	for piece in temporal.pieces():
		for (a, b) in zip(piece.instants, piece.instants[1:]):
			if temporal.interpolation is TInterpolation.LINEAR: points.append(GeometryLib.interpolate(a.value, b.value, 0.5))
			else: points.append(a.value)
			weights.append((b.timestamp - a.timestamp).total_seconds())
	if sum(weights) == 0:
		points = temporal.values()
		weights = [1.0] * len(points)
	centroid = domain.average(points, weights)
	if precision is None: return centroid
	return GeometryLib.roundPoint(centroid, precision)

def __relation(temporal: Temporal, holds: Callable[[Shapely.Point], bool], events: Callable[[Shapely.Point, Shapely.Point], list[float]]) -> Temporal:
	"""The temporal boolean of `holds(position)`, which may only change at the `events` of a segment."""
	operands = [temporal]
	interpolation = Lifting.resultInterpolation(operands, False)
	cuts = lambda segment: events(*segment.limits[0])
	result = Lifting.lift(operands, BoolDomain(), interpolation, holds, cuts)
	if result is None: raise DomainError("A temporal point is defined at some time.")
	return result

def intersects(temporal: Temporal, geom: Any) -> Temporal:
	"""Whether the point is on the geometry, through time."""
	__checkPoint(temporal)
	region = __checkGeometry(geom)
	return __relation(temporal, lambda p: bool(shapely.intersects(p, region)), lambda a, b: GeometryLib.segmentRatios(a, b, region))

def disjoint(temporal: Temporal, geom: Any) -> Temporal:
	__checkPoint(temporal)
	region = __checkGeometry(geom)
	return __relation(temporal, lambda p: not shapely.intersects(p, region), lambda a, b: GeometryLib.segmentRatios(a, b, region))

def touches(temporal: Temporal, geom: Any) -> Temporal:
	"""Whether the point is on the boundary of the geometry, through time. A point geometry has no boundary."""
	__checkPoint(temporal)
	region = __checkGeometry(geom)
	return __relation(temporal, lambda p: bool(shapely.touches(p, region)), lambda a, b: GeometryLib.segmentRatios(a, b, region))

def isSpatiallyContainedIn(temporal: Temporal, container: Any) -> Temporal:
	"""Whether the point is inside the geometry and not on its boundary, through time."""
	__checkPoint(temporal)
	region = __checkGeometry(container)
	return __relation(temporal, lambda p: bool(shapely.contains(region, p)), lambda a, b: GeometryLib.segmentRatios(a, b, region))

def withinDistance(temporal: Temporal, other: Any, distance: float) -> Temporal | None:
	"""
	Whether the point is at most `distance` away from a geometry or from another temporal point, through time.

	Returns
	-------
	Temporal | None
		`None` when both temporal points are never defined at the same time.

	Raises
	------
	DomainError
		When the distance is negative.
	"""
	__checkPoint(temporal)
	if distance < 0: raise DomainError(f"A distance is not negative: {distance}")
	if isinstance(other, Temporal) or isinstance(other, Shapely.Point):
		operands = [temporal, __asTemporalPoint(temporal, other)]
		def crossings(segment: Lifting.Segment) -> list[float]:
			((a1, a2), (b1, b2)) = segment.limits
			return GeometryLib.distanceCrossings(*GeometryLib.relativeMotion(a1, a2, b1, b2), distance)
		near = lambda a, b: __pointDistance(a, b) <= distance + GeometryLib.EPSILON
		return Lifting.lift(operands, BoolDomain(), Lifting.resultInterpolation(operands, False), near, crossings)
	geom = __checkGeometry(other)
	zone = shapely.buffer(geom, distance)
	return __relation(temporal, lambda p: bool(shapely.dwithin(p, geom, distance)), lambda a, b: GeometryLib.segmentRatios(a, b, zone))
