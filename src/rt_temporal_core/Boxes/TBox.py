from datetime import datetime
from numbers import Real
from typing import Any

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_core.Collections.Span import FloatSpan, IntSpan, Span, TsTzSpan
from rt_temporal_core.Collections.SpanSet import SpanSet


class TBox:
	"""
	The bounding box of a temporal number: a value span along the X axis and a time span along the T axis.
	Either dimension may be missing, but not both.
	Predicates consider the dimensions both boxes have and fail when they share none.
	"""
	def __init__(self, value: FloatSpan | IntSpan | None = None, time: TsTzSpan | None = None) -> None:
		if value is None and time is None: raise DomainError("A box has at least one dimension.")
		if isinstance(value, IntSpan): value = value.toFloatSpan()
		self.__value: FloatSpan | None = value
		self.__time: TsTzSpan | None = time
		return

	@classmethod
	def of(cls, other: Any) -> "TBox":
		"""The box of a box, a number, a span of numbers, a time, or a temporal number."""
		from rt_temporal_core.Temporal.Temporal import Temporal
		if isinstance(other, TBox): return other
		if isinstance(other, Temporal):
			box = other.boundingBox()
			if not isinstance(box, TBox): raise DomainError(f"Values of {other.domain.NAME} have no value axis.")
			return box
		if isinstance(other, SpanSet): other = other.span()
		if isinstance(other, TsTzSpan): return cls(None, other)
		if isinstance(other, (FloatSpan, IntSpan)): return cls(other, None)
		if isinstance(other, datetime): return cls(None, TsTzSpan.singleton(other))
		if isinstance(other, Real) and not isinstance(other, bool): return cls(FloatSpan.singleton(float(other)), None)
		raise DomainError(f"Not comparable with a temporal number box: {repr(other)}")

	def __repr__(self) -> str:
		return f"TBox({str(self)})"

	def __str__(self) -> str:
		if self.__value is None: return f"TBOX T({self.__time})"
		if self.__time is None: return f"TBOX X({self.__value})"
		return f"TBOX XT({self.__value},{self.__time})"

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, TBox): return NotImplemented
		return self.__value == other.__value and self.__time == other.__time

	def __hash__(self) -> int:
		return hash((self.__value, self.__time))

	@property
	def value(self) -> FloatSpan | None:
		return self.__value

	@property
	def time(self) -> TsTzSpan | None:
		return self.__time

	@property
	def hasX(self) -> bool:
		return self.__value is not None

	@property
	def hasT(self) -> bool:
		return self.__time is not None

	def __pairs(self, other: "TBox") -> list[tuple[Span, Span]]:
		pairs: list[tuple[Span, Span]] = []
		if self.__value is not None and other.__value is not None: pairs.append((self.__value, other.__value))
		if self.__time is not None and other.__time is not None: pairs.append((self.__time, other.__time))
		if len(pairs) == 0: raise DomainError(f"{self} and {other} share no dimension.")
		return pairs

	def __values(self, other: Any) -> tuple[FloatSpan, FloatSpan]:
		box = TBox.of(other)
		if self.__value is None or box.__value is None: raise DomainError(f"{self} and {box} do not both have a value axis.")
		return (self.__value, box.__value)

	def __times(self, other: Any) -> tuple[TsTzSpan, TsTzSpan]:
		box = TBox.of(other)
		if self.__time is None or box.__time is None: raise DomainError(f"{self} and {box} do not both have a time axis.")
		return (self.__time, box.__time)

	def overlaps(self, other: Any) -> bool:
		return all(a.overlaps(b) for (a, b) in self.__pairs(TBox.of(other)))

	def contains(self, other: Any) -> bool:
		return all(a.contains(b) for (a, b) in self.__pairs(TBox.of(other)))

	def isContainedIn(self, other: Any) -> bool:
		return TBox.of(other).contains(self)

	def isSame(self, other: Any) -> bool:
		return all(a == b for (a, b) in self.__pairs(TBox.of(other)))

	def isAdjacent(self, other: Any) -> bool:
		"""Whether both boxes touch along at least one dimension and do not lie apart along any other."""
		pairs = self.__pairs(TBox.of(other))
		if not all(a.overlaps(b) or touches(a, b) for (a, b) in pairs): return False
		return any(touches(a, b) for (a, b) in pairs)

	def isLeft(self, other: Any) -> bool:
		(a, b) = self.__values(other)
		return a.isLeft(b)

	def isOverOrLeft(self, other: Any) -> bool:
		(a, b) = self.__values(other)
		return a.isOverOrLeft(b)

	def isRight(self, other: Any) -> bool:
		(a, b) = self.__values(other)
		return a.isRight(b)

	def isOverOrRight(self, other: Any) -> bool:
		(a, b) = self.__values(other)
		return a.isOverOrRight(b)

	def isBefore(self, other: Any) -> bool:
		(a, b) = self.__times(other)
		return a.isLeft(b)

	def isOverOrBefore(self, other: Any) -> bool:
		(a, b) = self.__times(other)
		return a.isOverOrLeft(b)

	def isAfter(self, other: Any) -> bool:
		(a, b) = self.__times(other)
		return a.isRight(b)

	def isOverOrAfter(self, other: Any) -> bool:
		(a, b) = self.__times(other)
		return a.isOverOrRight(b)


def touches(a: Span, b: Span) -> bool:
	"""Whether one span ends where the other starts, whatever the inclusiveness of those bounds."""
	return a.bounds[2] == b.bounds[0] or b.bounds[2] == a.bounds[0]
