import json
import traceback
from enum import IntFlag
from math import atan2, degrees, pi, sqrt
from typing import Final, Sequence, TypeAlias

import numpy as np
import shapely

from rt_temporal_commons.Shared.Errors import DomainError, ParseError
from rt_temporal_commons.Utils.Logging import Logger

Coords: TypeAlias = tuple[float, float]


class WKBVariant(IntFlag):
	"""Flags of the well-known-binary encoder. `NDR` and `XDR` select the byte order and `EXTENDED` embeds the SRID."""
	EXTENDED = 0x04
	NDR = 0x08
	XDR = 0x10


class Shapely:
	"""This class sets up a group of functions and type aliases that help use shapely objects easier."""
	from shapely.geometry import LineString, MultiPoint, Point
	from shapely.geometry import mapping as mapping

	Trajectory: TypeAlias = Point | LineString | MultiPoint

	def __pointAdd(self: Point, other: Point) -> Point:
		""" `Point + Point` """
		return Shapely.Point(self.x + other.x, self.y + other.y)

	def __pointSub(self: Point, other: Point) -> Point:
		""" `Point - Point` """
		return Shapely.Point(self.x - other.x, self.y - other.y)

	def __pointMulScalar(self: Point, num: float) -> Point:
		""" `Point * num` """
		return Shapely.Point(self.x * num, self.y * num)

	Point.__add__ = __pointAdd
	Point.__sub__ = __pointSub
	Point.__mul__ = __pointMulScalar
	del __pointAdd, __pointSub, __pointMulScalar


class GeometryLib:
	"""
	The small amount of planar geometry needed by the temporal point type.
	Points are 2-D shapely points, everything else is plain coordinates.
	"""
	EPSILON: Final = 1e-9

	@staticmethod
	def reportShapelyException(functionName: str, exc: Exception, objs: Sequence[object]) -> None:
		Logger().error("1. Shapely exception.. in %s(): %s" % (functionName, repr(exc)))
		Logger().error("2. Shapely exception.. args: %s" % (", ".join([repr(o) for o in objs])))
		Logger().info("3. Shapely exception.. Stack trace:\n%s" % traceback.format_exc())
		return

	@staticmethod
	def toCoords(pt: Shapely.Point) -> Coords:
		return (pt.x, pt.y)

	@staticmethod
	def toPoint(coords: Coords | Sequence[float]) -> Shapely.Point:
		if len(coords) != 2: raise DomainError(f"Only 2-D points are supported: {repr(coords)}")
		return Shapely.Point(float(coords[0]), float(coords[1]))

	@staticmethod
	def distance(x1: float, y1: float, x2: float, y2: float) -> float:
		dx = x2 - x1
		dy = y2 - y1
		return sqrt(dx * dx + dy * dy)

	@staticmethod
	def pointsAreEqual(p1: Shapely.Point, p2: Shapely.Point) -> bool:
		return p1.x == p2.x and p1.y == p2.y

	@staticmethod
	def interpolate(p1: Shapely.Point, p2: Shapely.Point, ratio: float) -> Shapely.Point:
		"""The point at `ratio` of the way from `p1` to `p2`."""
		if ratio <= 0: return p1
		if ratio >= 1: return p2
		return p1 + (p2 - p1) * ratio

	@staticmethod
	def projectionRatio(p: Shapely.Point, a: Shapely.Point, b: Shapely.Point) -> float:
		"""
		Project `p` on the line segment `ab`.

		Returns
		-------
		float
			The parameter of the closest point of the segment to `p`, clamped to `[0, 1]`.
		"""
		ab = np.array([b.x - a.x, b.y - a.y])
		denom = float(ab.dot(ab))
		if denom == 0: return 0.0
		ap = np.array([p.x - a.x, p.y - a.y])
		return float(min(1.0, max(0.0, ap.dot(ab) / denom)))

	@staticmethod
	def segmentDistance(p: Shapely.Point, a: Shapely.Point, b: Shapely.Point) -> float:
		"""Distance of `p` to the line segment `ab`."""
		closest = GeometryLib.interpolate(a, b, GeometryLib.projectionRatio(p, a, b))
		return GeometryLib.distance(p.x, p.y, closest.x, closest.y)

	@staticmethod
	def segmentCrossing(a: Shapely.Point, b: Shapely.Point, target: Shapely.Point) -> float | None:
		"""
		Find where the segment `ab` passes through `target`.

		Returns
		-------
		float | None
			The parameter in `(0, 1)` at which the segment meets the point, or `None` if it never does.
		"""
		if GeometryLib.pointsAreEqual(a, b): return None
		if GeometryLib.segmentDistance(target, a, b) > GeometryLib.EPSILON: return None
		ratio = GeometryLib.projectionRatio(target, a, b)
		if ratio <= 0 or ratio >= 1: return None
		return ratio

	@staticmethod
	def closestApproach(a1: Shapely.Point, a2: Shapely.Point, b1: Shapely.Point, b2: Shapely.Point) -> float | None:
		"""
		Two points move linearly and simultaneously, the first from `a1` to `a2` and the second from `b1` to `b2`.

		Returns
		-------
		float | None
			The parameter in `(0, 1)` at which both points coincide, or `None` if they never meet strictly inside the interval.
		"""
		(start, velocity) = GeometryLib.relativeMotion(a1, a2, b1, b2)
		ratio = GeometryLib.nearestRatio(start, velocity)
		if ratio is None: return None
		gap = start + velocity * ratio
		if float(np.hypot(gap[0], gap[1])) > GeometryLib.EPSILON: return None
		return ratio

	@staticmethod
	def relativeMotion(a1: Shapely.Point, a2: Shapely.Point, b1: Shapely.Point, b2: Shapely.Point) -> tuple[np.ndarray, np.ndarray]:
		"""The position of the first moving point seen from the second one, at the start and per unit of the interval."""
		start = np.array([a1.x - b1.x, a1.y - b1.y])
		velocity = np.array([(a2.x - a1.x) - (b2.x - b1.x), (a2.y - a1.y) - (b2.y - b1.y)])
		return (start, velocity)

	@staticmethod
	def nearestRatio(start: np.ndarray, velocity: np.ndarray) -> float | None:
		"""The parameter in `(0, 1)` at which `start + velocity * r` is the closest to the origin, if it is not at either end."""
		denom = float(velocity.dot(velocity))
		if denom == 0: return None
		ratio = float(-start.dot(velocity) / denom)
		if ratio <= 0 or ratio >= 1: return None
		return ratio

	@staticmethod
	def distanceCrossings(start: np.ndarray, velocity: np.ndarray, distance: float) -> list[float]:
		"""The parameters in `(0, 1)` at which `start + velocity * r` is exactly `distance` away from the origin."""
		a = float(velocity.dot(velocity))
		if a == 0: return []
		b = 2 * float(start.dot(velocity))
		c = float(start.dot(start)) - distance * distance
		discriminant = b * b - 4 * a * c
		if discriminant < 0: return []
		root = sqrt(discriminant)
		ratios = {(-b - root) / (2 * a), (-b + root) / (2 * a)}
		return sorted(r for r in ratios if 0 < r < 1)

	@staticmethod
	def segmentRatios(a: Shapely.Point, b: Shapely.Point, geom: shapely.Geometry) -> list[float]:
		"""
		The parameters in `(0, 1)` of the segment `ab` where it enters, leaves or touches `geom` or its boundary.
		Between two consecutive parameters a point moving along the segment keeps its relation to `geom`.
		"""
		if GeometryLib.pointsAreEqual(a, b): return []
		segment = Shapely.LineString([GeometryLib.toCoords(a), GeometryLib.toCoords(b)])
		boundary = shapely.boundary(geom)
		try:
			meeting = [shapely.intersection(segment, geom)]
			if boundary is not None: meeting.append(shapely.intersection(segment, boundary))
		except shapely.errors.GEOSException as e:
			GeometryLib.reportShapelyException("segmentRatios", e, [segment, geom])
			raise
		ratios: set[float] = set()
		for part in meeting:
			for (x, y) in shapely.get_coordinates(part):
				r = GeometryLib.projectionRatio(Shapely.Point(x, y), a, b)
				if 0 < r < 1: ratios.add(r)
		return sorted(ratios)

	@staticmethod
	def azimuth(a: Shapely.Point, b: Shapely.Point) -> float | None:
		"""The angle in radians of the direction from `a` to `b`, clockwise from the north, in `[0, 2π)`. `None` when they coincide."""
		if GeometryLib.pointsAreEqual(a, b): return None
		angle = atan2(b.x - a.x, b.y - a.y)
		if angle < 0: angle += 2 * pi
		return angle

	@staticmethod
	def angularDifference(a: float, b: float) -> float:
		"""The smallest angle in degrees between two azimuths given in radians, in `[0, 180]`."""
		difference = abs(degrees(a - b)) % 360
		return 360 - difference if difference > 180 else difference

	@staticmethod
	def pathLength(points: Sequence[Shapely.Point]) -> float:
		if len(points) < 2: return 0.0
		coords = np.array([GeometryLib.toCoords(p) for p in points])
		deltas = np.diff(coords, axis=0)
		return float(np.hypot(deltas[:, 0], deltas[:, 1]).sum())

	@staticmethod
	def roundPoint(p: Shapely.Point, decimals: int) -> Shapely.Point:
		return Shapely.Point(round(p.x, decimals), round(p.y, decimals))

	@staticmethod
	def trajectory(points: Sequence[Shapely.Point], continuous: bool) -> Shapely.Trajectory:
		"""
		The geometry traversed by a sequence of points.
		A discrete trajectory is a multi point, a continuous one a line string.
		Either collapses to a single point when all the points coincide.
		"""
		distinct: list[Shapely.Point] = []
		for p in points:
			if len(distinct) > 0 and GeometryLib.pointsAreEqual(distinct[-1], p): continue
			if not continuous and any(GeometryLib.pointsAreEqual(d, p) for d in distinct): continue
			distinct.append(p)
		if len(distinct) == 1: return distinct[0]
		if continuous: return Shapely.LineString([GeometryLib.toCoords(p) for p in distinct])
		return Shapely.MultiPoint([GeometryLib.toCoords(p) for p in distinct])


class Encoding:
	"""The geometry encoding service: WKT, EWKT, GeoJSON and WKB, all backed by shapely."""
	@staticmethod
	def parsePoint(text: str) -> tuple[Shapely.Point, int]:
		"""
		Parse a (E)WKT point.

		Returns
		-------
		tuple[Shapely.Point, int]
			The point and the SRID carried by the text, `0` if there was none.
		"""
		srid = 0
		body = text.strip()
		if body.upper().startswith("SRID="):
			(prefix, _, body) = body.partition(";")
			try:
				srid = int(prefix[5:])
			except ValueError as e:
				raise ParseError(text, "invalid SRID") from e
		try:
			geom = shapely.from_wkt(body)
		except shapely.errors.GEOSException as e:
			raise ParseError(text, "invalid point") from e
		if not isinstance(geom, Shapely.Point) or geom.is_empty: raise ParseError(text, "not a point")
		if geom.has_z: raise ParseError(text, "only 2-D points are supported")
		return (geom, srid)

	@staticmethod
	def asWkt(geom: shapely.Geometry, precision: int = 15) -> str:
		return shapely.to_wkt(geom, rounding_precision=precision, trim=True)

	@staticmethod
	def asEwkt(geom: shapely.Geometry, srid: int, precision: int = 15) -> str:
		wkt = Encoding.asWkt(geom, precision)
		if srid == 0: return wkt
		return f"SRID={srid};{wkt}"

	@staticmethod
	def asGeoJson(geom: shapely.Geometry, srid: int = 0, precision: int = 15) -> str:
		document = dict(Shapely.mapping(geom))
		document["coordinates"] = Encoding.__roundNested(document["coordinates"], precision)
		if srid != 0: document["crs"] = {"type": "name", "properties": {"name": f"EPSG:{srid}"}}
		return json.dumps(document)

	@staticmethod
	def __roundNested(coords, precision: int):
		if isinstance(coords, (int, float)): return round(float(coords), precision)
		return [Encoding.__roundNested(c, precision) for c in coords]

	@staticmethod
	def asWkb(geom: shapely.Geometry, srid: int = 0, variant: WKBVariant = WKBVariant.NDR) -> bytes:
		if WKBVariant.NDR in variant and WKBVariant.XDR in variant: raise DomainError("A WKB variant is either NDR or XDR.")
		byteOrder = 0 if WKBVariant.XDR in variant else 1
		includeSrid = WKBVariant.EXTENDED in variant and srid != 0
		try:
			if includeSrid: geom = shapely.set_srid(geom, srid)
			return shapely.to_wkb(geom, hex=False, output_dimension=2, byte_order=byteOrder, include_srid=includeSrid)
		except shapely.errors.GEOSException as e:
			GeometryLib.reportShapelyException("asWkb", e, [geom])
			raise

	@staticmethod
	def fromWkb(data: bytes) -> tuple[shapely.Geometry, int]:
		try:
			geom = shapely.from_wkb(data)
		except shapely.errors.GEOSException as e:
			raise ParseError(data.hex(), "invalid WKB") from e
		return (geom, int(shapely.get_srid(geom)))
