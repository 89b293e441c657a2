import json
from math import isnan
from numbers import Integral, Real
from typing import Any, Sequence

import numpy as np

from rt_temporal_commons.Runtime import CurrentSettings
from rt_temporal_commons.Shared.Errors import DomainError, ParseError
from rt_temporal_commons.Utils.Geometry import Encoding, GeometryLib, Shapely
from rt_temporal_core.Temporal.Interpolation import TInterpolation

ROUNDING_SLACK = 1e-6
"""Timestamps have a resolution of a microsecond. This is that resolution in seconds."""


class ValueDomain:
	"""
	The capabilities of the base type of a temporal value.
	All the algorithms of the package are written once against this interface.
	"""
	NAME: str = ""
	ORDERED: bool = False
	CONTINUOUS: bool = False
	"""Whether values can be linearly interpolated."""
	METRIC: bool = False
	"""Whether there is a distance between two values."""

	def __repr__(self) -> str:
		return self.NAME

	def __eq__(self, other: object) -> bool:
		return type(other) is type(self)

	def __hash__(self) -> int:
		return hash(self.NAME)

	@property
	def defaultInterpolation(self) -> TInterpolation:
		return TInterpolation.LINEAR if self.CONTINUOUS else TInterpolation.STEP

	def supports(self, interpolation: TInterpolation) -> bool:
		if interpolation is TInterpolation.LINEAR: return self.CONTINUOUS
		return True

	def validate(self, value: Any) -> Any:
		raise NotImplementedError()

	def eq(self, a: Any, b: Any) -> bool:
		return a == b

	def cmp(self, a: Any, b: Any) -> int:
		if not self.ORDERED: raise DomainError(f"Values of {self.NAME} are not ordered.")
		if a < b: return -1
		if a > b: return 1
		return 0

	def key(self, value: Any) -> Any:
		"""A hashable representation of a value."""
		return value

	def interpolate(self, a: Any, b: Any, ratio: float) -> Any:
		raise DomainError(f"Values of {self.NAME} cannot be interpolated.")

	def crossing(self, a: Any, b: Any, target: Any) -> float | None:
		"""The parameter in `(0, 1)` at which the linear segment from `a` to `b` takes the value `target`."""
		return None

	def crossingPair(self, a1: Any, a2: Any, b1: Any, b2: Any) -> float | None:
		"""The parameter in `(0, 1)` at which two simultaneous linear segments take the same value."""
		return None

	def distance(self, a: Any, b: Any) -> float:
		raise DomainError(f"There is no distance between values of {self.NAME}.")

	def collinear(self, v1: Any, v2: Any, v3: Any, ratio: float, duration: float) -> bool:
		"""
		Whether `v2`, observed at `ratio` of the way between `v1` and `v3`, lies on the segment joining them.

		Parameters
		----------
		duration : float
			The number of seconds between the observations of `v1` and `v3`.
			Values observed at rounded timestamps are accepted within the error caused by the rounding.
		"""
		if not self.CONTINUOUS: return False
		expected = self.interpolate(v1, v3, ratio)
		tolerance = CurrentSettings().epsilon
		if duration > 0: tolerance += self.distance(v1, v3) * ROUNDING_SLACK / duration
		return self.distance(v2, expected) <= tolerance

	def parse(self, text: str) -> Any:
		raise NotImplementedError()

	def format(self, value: Any) -> str:
		return str(value)

	def average(self, values: Sequence[Any], weights: Sequence[float]) -> Any:
		raise DomainError(f"Values of {self.NAME} cannot be averaged.")

	def round(self, value: Any, decimals: int) -> Any:
		raise DomainError(f"Values of {self.NAME} cannot be rounded.")

	def toArray(self, values: Sequence[Any]) -> np.ndarray:
		"""The values as rows of a matrix, to feed the numerical kernels."""
		if not self.METRIC: raise DomainError(f"There is no distance between values of {self.NAME}.")
		return np.array([[float(v)] for v in values], dtype=float)


class BoolDomain(ValueDomain):
	NAME = "tbool"

	def validate(self, value: Any) -> bool:
		if isinstance(value, (bool, np.bool_)): return bool(value)
		raise DomainError(f"Not a boolean: {repr(value)}")

	def parse(self, text: str) -> bool:
		cleaned = text.strip().lower()
		if cleaned in ("t", "true"): return True
		if cleaned in ("f", "false"): return False
		raise ParseError(text, "invalid boolean")

	def format(self, value: bool) -> str:
		return "t" if value else "f"


class IntDomain(ValueDomain):
	NAME = "tint"
	ORDERED = True
	METRIC = True

	def validate(self, value: Any) -> int:
		if isinstance(value, bool) or not isinstance(value, Integral): raise DomainError(f"Not an integer: {repr(value)}")
		return int(value)

	def distance(self, a: int, b: int) -> float:
		return float(abs(a - b))

	def parse(self, text: str) -> int:
		try:
			return int(text.strip())
		except ValueError as e:
			raise ParseError(text, "invalid integer") from e

	def average(self, values: Sequence[int], weights: Sequence[float]) -> float:
		return float(np.average(np.array(values, dtype=float), weights=np.array(weights, dtype=float)))


class FloatDomain(ValueDomain):
	NAME = "tfloat"
	ORDERED = True
	CONTINUOUS = True
	METRIC = True

	def validate(self, value: Any) -> float:
		if isinstance(value, bool) or not isinstance(value, Real): raise DomainError(f"Not a number: {repr(value)}")
		value = float(value)
		if isnan(value): raise DomainError("NaN is not a valid temporal value.")
		return value

	def interpolate(self, a: float, b: float, ratio: float) -> float:
		if ratio <= 0: return a
		if ratio >= 1: return b
		return a + (b - a) * ratio

	def crossing(self, a: float, b: float, target: float) -> float | None:
		if a == b: return None
		ratio = (target - a) / (b - a)
		if ratio <= 0 or ratio >= 1: return None
		return ratio

	def crossingPair(self, a1: float, a2: float, b1: float, b2: float) -> float | None:
		denom = (a2 - a1) - (b2 - b1)
		if denom == 0: return None
		ratio = (b1 - a1) / denom
		if ratio <= 0 or ratio >= 1: return None
		return ratio

	def distance(self, a: float, b: float) -> float:
		return abs(a - b)

	def parse(self, text: str) -> float:
		try:
			return self.validate(float(text.strip()))
		except ValueError as e:
			raise ParseError(text, "invalid number") from e

	def format(self, value: float) -> str:
		return repr(value)

	def average(self, values: Sequence[float], weights: Sequence[float]) -> float:
		return float(np.average(np.array(values, dtype=float), weights=np.array(weights, dtype=float)))

	def round(self, value: float, decimals: int) -> float:
		return round(value, decimals)


class TextDomain(ValueDomain):
	NAME = "ttext"
	ORDERED = True

	def validate(self, value: Any) -> str:
		if isinstance(value, str): return value
		raise DomainError(f"Not a text: {repr(value)}")

	def parse(self, text: str) -> str:
		cleaned = text.strip()
		if not cleaned.startswith("\""): return cleaned
		try:
			return json.loads(cleaned)
		except json.JSONDecodeError as e:
			raise ParseError(text, "invalid quoted text") from e

	def format(self, value: str) -> str:
		return json.dumps(value)


class PointDomain(ValueDomain):
	"""Planar points, as shapely points, in the spatial reference system `srid`."""
	NAME = "tgeompoint"
	CONTINUOUS = True
	METRIC = True

	def __init__(self, srid: int = 0) -> None:
		self.srid: int = srid
		return

	def __repr__(self) -> str:
		return f"{self.NAME}[{self.srid}]"

	def __eq__(self, other: object) -> bool:
		return isinstance(other, PointDomain) and other.srid == self.srid

	def __hash__(self) -> int:
		return hash((self.NAME, self.srid))

	def validate(self, value: Any) -> Shapely.Point:
		if isinstance(value, Shapely.Point):
			if value.is_empty or value.has_z: raise DomainError(f"Only non-empty 2-D points are supported: {value.wkt}")
			return value
		if isinstance(value, (tuple, list)): return GeometryLib.toPoint(value)
		raise DomainError(f"Not a point: {repr(value)}")

	def eq(self, a: Shapely.Point, b: Shapely.Point) -> bool:
		return GeometryLib.pointsAreEqual(a, b)

	def key(self, value: Shapely.Point) -> Any:
		return GeometryLib.toCoords(value)

	def interpolate(self, a: Shapely.Point, b: Shapely.Point, ratio: float) -> Shapely.Point:
		return GeometryLib.interpolate(a, b, ratio)

	def crossing(self, a: Shapely.Point, b: Shapely.Point, target: Shapely.Point) -> float | None:
		return GeometryLib.segmentCrossing(a, b, target)

	def crossingPair(self, a1: Shapely.Point, a2: Shapely.Point, b1: Shapely.Point, b2: Shapely.Point) -> float | None:
		return GeometryLib.closestApproach(a1, a2, b1, b2)

	def distance(self, a: Shapely.Point, b: Shapely.Point) -> float:
		return GeometryLib.distance(a.x, a.y, b.x, b.y)

	def parse(self, text: str) -> Shapely.Point:
		(point, srid) = Encoding.parsePoint(text)
		if srid != 0 and srid != self.srid: raise ParseError(text, f"the SRID does not match {self.srid}")
		return point

	def format(self, value: Shapely.Point) -> str:
		return f"POINT({repr(value.x)} {repr(value.y)})"

	def average(self, values: Sequence[Shapely.Point], weights: Sequence[float]) -> Shapely.Point:
		coords = np.average(self.toArray(values), axis=0, weights=np.array(weights, dtype=float))
		return Shapely.Point(float(coords[0]), float(coords[1]))

	def round(self, value: Shapely.Point, decimals: int) -> Shapely.Point:
		return GeometryLib.roundPoint(value, decimals)

	def toArray(self, values: Sequence[Shapely.Point]) -> np.ndarray:
		return np.array([GeometryLib.toCoords(v) for v in values], dtype=float)


def inferDomain(value: Any) -> ValueDomain:
	"""The domain of a plain Python value."""
	if isinstance(value, (bool, np.bool_)): return BoolDomain()
	if isinstance(value, Integral): return IntDomain()
	if isinstance(value, Real): return FloatDomain()
	if isinstance(value, str): return TextDomain()
	if isinstance(value, Shapely.Point): return PointDomain()
	raise DomainError(f"There is no temporal type for {type(value).__name__} values.")
