from datetime import datetime
from typing import Any

import shapely

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils.Geometry import Shapely
from rt_temporal_core.Boxes.TBox import touches
from rt_temporal_core.Collections.Span import FloatSpan, Span, TsTzSpan
from rt_temporal_core.Collections.SpanSet import TsTzSpanSet


class STBox:
	"""
	The bounding box of a temporal point: an extent in the plane and a time span.
	Either the space or the time may be missing, but not both.
	"""
	def __init__(self, x: FloatSpan | None = None, y: FloatSpan | None = None, time: TsTzSpan | None = None, srid: int = 0) -> None:
		if (x is None) != (y is None): raise DomainError("A box has both spatial axes or none.")
		if x is None and time is None: raise DomainError("A box has at least one dimension.")
		self.__x: FloatSpan | None = x
		self.__y: FloatSpan | None = y
		self.__time: TsTzSpan | None = time
		self.__srid: int = srid
		return

	@classmethod
	def fromBounds(cls, xmin: float, ymin: float, xmax: float, ymax: float, time: TsTzSpan | None = None, srid: int = 0) -> "STBox":
		return cls(FloatSpan(xmin, xmax, True, True), FloatSpan(ymin, ymax, True, True), time, srid)

	@classmethod
	def fromGeometry(cls, geom: shapely.Geometry, time: TsTzSpan | None = None, srid: int = 0) -> "STBox":
		(xmin, ymin, xmax, ymax) = geom.bounds
		return cls.fromBounds(xmin, ymin, xmax, ymax, time, srid)

	@classmethod
	def of(cls, other: Any) -> "STBox":
		"""The box of a box, a geometry, a time, or a temporal point."""
		from rt_temporal_core.Temporal.Temporal import Temporal
		if isinstance(other, STBox): return other
		if isinstance(other, Temporal):
			box = other.boundingBox()
			if not isinstance(box, STBox): raise DomainError(f"Values of {other.domain.NAME} have no spatial extent.")
			return box
		if isinstance(other, TsTzSpanSet): other = other.span()
		if isinstance(other, TsTzSpan): return cls(None, None, other)
		if isinstance(other, datetime): return cls(None, None, TsTzSpan.singleton(other))
		if isinstance(other, shapely.Geometry) and not other.is_empty: return cls.fromGeometry(other)
		raise DomainError(f"Not comparable with a spatio-temporal box: {repr(other)}")

	def __repr__(self) -> str:
		return f"STBox({str(self)})"

	def __str__(self) -> str:
		prefix = f"SRID={self.__srid};" if self.__srid != 0 else ""
		if self.__x is None or self.__y is None: return f"{prefix}STBOX T({self.__time})"
		corners = f"(({self.__x.lower} {self.__y.lower}),({self.__x.upper} {self.__y.upper}))"
		if self.__time is None: return f"{prefix}STBOX X({corners})"
		return f"{prefix}STBOX XT({corners},{self.__time})"

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, STBox): return NotImplemented
		return (self.__x, self.__y, self.__time, self.__srid) == (other.__x, other.__y, other.__time, other.__srid)

	def __hash__(self) -> int:
		return hash((self.__x, self.__y, self.__time, self.__srid))

	@property
	def x(self) -> FloatSpan | None:
		return self.__x

	@property
	def y(self) -> FloatSpan | None:
		return self.__y

	@property
	def time(self) -> TsTzSpan | None:
		return self.__time

	@property
	def srid(self) -> int:
		return self.__srid

	@property
	def hasXY(self) -> bool:
		return self.__x is not None

	@property
	def hasT(self) -> bool:
		return self.__time is not None

	def toGeometry(self) -> shapely.Geometry:
		"""The spatial extent as a polygon, or as a line or a point when it is flat."""
		if self.__x is None or self.__y is None: raise DomainError(f"{self} has no spatial extent.")
		(xmin, xmax, ymin, ymax) = (self.__x.lower, self.__x.upper, self.__y.lower, self.__y.upper)
		if xmin == xmax and ymin == ymax: return Shapely.Point(xmin, ymin)
		if xmin == xmax or ymin == ymax: return Shapely.LineString([(xmin, ymin), (xmax, ymax)])
		return shapely.box(xmin, ymin, xmax, ymax)

	def __pairs(self, other: "STBox") -> list[tuple[Span, Span]]:
		if self.__srid != other.__srid and 0 not in (self.__srid, other.__srid): raise DomainError(f"{self} and {other} are in different spatial reference systems.")
		pairs: list[tuple[Span, Span]] = []
		if self.__x is not None and self.__y is not None and other.__x is not None and other.__y is not None:
			pairs.extend([(self.__x, other.__x), (self.__y, other.__y)])
		if self.__time is not None and other.__time is not None: pairs.append((self.__time, other.__time))
		if len(pairs) == 0: raise DomainError(f"{self} and {other} share no dimension.")
		return pairs

	def __axis(self, other: Any, name: str) -> tuple[Span, Span]:
		box = STBox.of(other)
		if self.__srid != box.__srid and 0 not in (self.__srid, box.__srid): raise DomainError(f"{self} and {box} are in different spatial reference systems.")
		mine = {"x": self.__x, "y": self.__y, "t": self.__time}[name]
		theirs = {"x": box.__x, "y": box.__y, "t": box.__time}[name]
		if mine is None or theirs is None: raise DomainError(f"{self} and {box} do not both have a {name} axis.")
		return (mine, theirs)

	def overlaps(self, other: Any) -> bool:
		return all(a.overlaps(b) for (a, b) in self.__pairs(STBox.of(other)))

	def contains(self, other: Any) -> bool:
		return all(a.contains(b) for (a, b) in self.__pairs(STBox.of(other)))

	def isContainedIn(self, other: Any) -> bool:
		return STBox.of(other).contains(self)

	def isSame(self, other: Any) -> bool:
		return all(a == b for (a, b) in self.__pairs(STBox.of(other)))

	def isAdjacent(self, other: Any) -> bool:
		pairs = self.__pairs(STBox.of(other))
		if not all(a.overlaps(b) or touches(a, b) for (a, b) in pairs): return False
		return any(touches(a, b) for (a, b) in pairs)

	def isLeft(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "x")
		return a.isLeft(b)

	def isOverOrLeft(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "x")
		return a.isOverOrLeft(b)

	def isRight(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "x")
		return a.isRight(b)

	def isOverOrRight(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "x")
		return a.isOverOrRight(b)

	def isBelow(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "y")
		return a.isLeft(b)

	def isOverOrBelow(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "y")
		return a.isOverOrLeft(b)

	def isAbove(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "y")
		return a.isRight(b)

	def isOverOrAbove(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "y")
		return a.isOverOrRight(b)

	def isBefore(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "t")
		return a.isLeft(b)

	def isOverOrBefore(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "t")
		return a.isOverOrLeft(b)

	def isAfter(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "t")
		return a.isRight(b)

	def isOverOrAfter(self, other: Any) -> bool:
		(a, b) = self.__axis(other, "t")
		return a.isOverOrRight(b)
