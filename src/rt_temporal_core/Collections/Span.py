import re
from datetime import date, datetime, timedelta
from math import ceil, floor, isnan
from numbers import Integral, Real
from typing import Any, Final, Generic, TypeVar

from typing_extensions import Self

from rt_temporal_commons.Shared.Errors import DomainError, ParseError
from rt_temporal_commons.Utils import Time

_T = TypeVar("_T")
"""The bound type."""
_D = TypeVar("_D")
"""The type of a difference between two bounds."""

SPAN_PATTERN: Final = re.compile(r"^\s*([\[\(])\s*(.+?)\s*,\s*(.+?)\s*([\]\)])\s*$")


def cmpLower(v1: Any, inc1: bool, v2: Any, inc2: bool) -> int:
	"""Order two lower bounds. At equal values an inclusive bound comes first."""
	if v1 < v2: return -1
	if v1 > v2: return 1
	if inc1 == inc2: return 0
	return -1 if inc1 else 1

def cmpUpper(v1: Any, inc1: bool, v2: Any, inc2: bool) -> int:
	"""Order two upper bounds. At equal values an exclusive bound comes first."""
	if v1 < v2: return -1
	if v1 > v2: return 1
	if inc1 == inc2: return 0
	return 1 if inc1 else -1

def lowerBeforeUpper(lower: Any, lowerInc: bool, upper: Any, upperInc: bool) -> bool:
	"""Whether a lower bound and an upper bound enclose at least one value."""
	if lower < upper: return True
	return lower == upper and lowerInc and upperInc


class Span(Generic[_T, _D]):
	"""
	An immutable, non-empty interval over an ordered domain.

	Discrete domains are kept in the canonical form `[lower, upper)`.
	An exclusive lower bound is moved one unit forward and becomes inclusive.
	An inclusive upper bound is moved one unit forward and becomes exclusive,
	but the span remembers it was given inclusive, so `upper`, `upperInc` and `str()` show it the way it was given.
	Equality, ordering and hashing only look at the canonical form.
	"""
	DISCRETE: bool = False
	UNIT: Any = None
	ZERO: Any = None

	def __init__(self, lower: _T, upper: _T, lowerInc: bool = True, upperInc: bool = False) -> None:
		lower = self._bound(lower)
		upper = self._bound(upper)
		if lower > upper: raise DomainError(f"The lower bound must not be greater than the upper bound: {lower} > {upper}")
		upperShownInc = False
		if self.DISCRETE:
			if not lowerInc: lower = self._add(lower, self.UNIT)
			if upperInc:
				upper = self._add(upper, self.UNIT)
				upperShownInc = True
			lowerInc = True
			upperInc = False
			if lower >= upper: raise DomainError(f"The bounds do not enclose any value: {lower}, {upper}")
		elif lower == upper and not (lowerInc and upperInc):
			raise DomainError(f"A span with equal bounds must include both of them: {lower}")
		self.__lower: _T = lower
		self.__upper: _T = upper
		self.__lowerInc: bool = bool(lowerInc)
		self.__upperInc: bool = bool(upperInc)
		self.__upperShownInc: bool = upperShownInc
		return

	@classmethod
	def fromCanonical(cls, lower: _T, upper: _T, lowerInc: bool, upperInc: bool, upperShownInc: bool = False) -> Self:
		"""Build a span from bounds which are already in canonical form."""
		span = cls.__new__(cls)
		span.__lower = lower
		span.__upper = upper
		span.__lowerInc = lowerInc
		span.__upperInc = upperInc
		span.__upperShownInc = upperShownInc and cls.DISCRETE
		return span

	@classmethod
	def tryCanonical(cls, lower: _T, upper: _T, lowerInc: bool, upperInc: bool, upperShownInc: bool = False) -> Self | None:
		"""Same as `fromCanonical()` but returns `None` when the bounds do not enclose any value."""
		if not lowerBeforeUpper(lower, lowerInc, upper, upperInc): return None
		return cls.fromCanonical(lower, upper, lowerInc, upperInc, upperShownInc)

	@classmethod
	def fromText(cls, text: str) -> Self:
		match = SPAN_PATTERN.match(text)
		if match is None: raise ParseError(text, "expected '[' or '(' lower ',' upper ']' or ')'")
		(openBracket, lowerStr, upperStr, closeBracket) = match.groups()
		lower = cls._parseBound(lowerStr)
		upper = cls._parseBound(upperStr)
		return cls(lower, upper, openBracket == "[", closeBracket == "]")

	@classmethod
	def singleton(cls, value: _T) -> Self:
		return cls(value, value, True, True)

	@classmethod
	def _parseBound(cls, text: str) -> _T:
		raise NotImplementedError()

	@classmethod
	def _formatBound(cls, value: _T) -> str:
		return str(value)

	@classmethod
	def _bound(cls, value: Any) -> _T:
		raise NotImplementedError()

	@classmethod
	def _delta(cls, value: Any) -> _D:
		raise NotImplementedError()

	@classmethod
	def _add(cls, value: _T, delta: _D) -> _T:
		return value + delta # pyright: ignore[reportOperatorIssue]

	@classmethod
	def _diff(cls, a: _T, b: _T) -> _D:
		return a - b # pyright: ignore[reportOperatorIssue]

	@classmethod
	def _scaleDelta(cls, delta: _D, ratio: float) -> _D:
		return delta * ratio # pyright: ignore[reportOperatorIssue]

	@classmethod
	def _ratio(cls, a: _D, b: _D) -> float:
		return a / b # pyright: ignore[reportOperatorIssue]

	@classmethod
	def spanSetType(cls) -> type:
		raise NotImplementedError()

	def __repr__(self) -> str:
		return f"{type(self).__name__}{str(self)}"

	def __str__(self) -> str:
		openBracket = "[" if self.lowerInc else "("
		closeBracket = "]" if self.upperInc else ")"
		return f"{openBracket}{self._formatBound(self.lower)}, {self._formatBound(self.upper)}{closeBracket}"

	def __key(self) -> tuple:
		return (self.__lower, not self.__lowerInc, self.__upper, self.__upperInc)

	def __eq__(self, other: object) -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.bounds == other.bounds # pyright: ignore[reportAttributeAccessIssue]

	def __hash__(self) -> int:
		return hash((type(self).__name__, self.bounds))

	def __lt__(self, other: "Span") -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__key() < other.__key()

	def __le__(self, other: "Span") -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__key() <= other.__key()

	def __gt__(self, other: "Span") -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__key() > other.__key()

	def __ge__(self, other: "Span") -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__key() >= other.__key()

	def __contains__(self, value: Any) -> bool:
		return self.contains(value)

	def __and__(self, other: "Span"):
		return self.intersection(other)

	def __add__(self, other):
		return self.toSpanSet().union(other)

	def __sub__(self, other):
		return self.minus(other)

	@property
	def bounds(self) -> tuple[_T, bool, _T, bool]:
		"""The canonical `(lower, lowerInc, upper, upperInc)`."""
		return (self.__lower, self.__lowerInc, self.__upper, self.__upperInc)

	@property
	def lower(self) -> _T:
		return self.__lower

	@property
	def lowerInc(self) -> bool:
		return self.__lowerInc

	@property
	def upper(self) -> _T:
		if self.__upperShownInc: return self._add(self.__upper, -self.UNIT)
		return self.__upper

	@property
	def upperInc(self) -> bool:
		return self.__upperInc or self.__upperShownInc

	@property
	def upperShownInc(self) -> bool:
		return self.__upperShownInc

	@property
	def lastValue(self) -> _T:
		"""The greatest value the span reaches. For a discrete domain that is the last included value."""
		if self.DISCRETE: return self._add(self.__upper, -self.UNIT)
		return self.__upper

	def width(self) -> _D:
		"""The distance between the lower bound and the greatest value the span reaches."""
		return self._diff(self.lastValue, self.__lower)

	def _asSpan(self, other: Any) -> "Span":
		if isinstance(other, Span):
			if type(other) is not type(self): raise DomainError(f"Cannot combine {type(self).__name__} with {type(other).__name__}")
			return other
		return type(self).singleton(other)

	def contains(self, other: Any) -> bool:
		from rt_temporal_core.Collections.SpanSet import SpanSet
		if isinstance(other, SpanSet): return all(self.contains(s) for s in other.spans)
		if isinstance(other, Span):
			other = self._asSpan(other)
			if cmpLower(self.__lower, self.__lowerInc, other.__lower, other.__lowerInc) > 0: return False
			return cmpUpper(other.__upper, other.__upperInc, self.__upper, self.__upperInc) <= 0
		value = self._bound(other)
		if not lowerBeforeUpper(self.__lower, self.__lowerInc, value, True): return False
		return lowerBeforeUpper(value, True, self.__upper, self.__upperInc)

	def isContainedIn(self, other: Any) -> bool:
		return other.contains(self)

	def overlaps(self, other: Any) -> bool:
		from rt_temporal_core.Collections.SpanSet import SpanSet
		if isinstance(other, SpanSet): return other.overlaps(self)
		other = self._asSpan(other)
		if not lowerBeforeUpper(self.__lower, self.__lowerInc, other.__upper, other.__upperInc): return False
		return lowerBeforeUpper(other.__lower, other.__lowerInc, self.__upper, self.__upperInc)

	def isAdjacent(self, other: Any) -> bool:
		from rt_temporal_core.Collections.SpanSet import SpanSet
		if isinstance(other, SpanSet): return other.isAdjacent(self)
		other = self._asSpan(other)
		if self.__upper == other.__lower and self.__upperInc != other.__lowerInc: return True
		return other.__upper == self.__lower and other.__upperInc != self.__lowerInc

	def isLeft(self, other: Any) -> bool:
		"""Whether the span ends before `other` starts, without sharing any value."""
		other = self._boundingOf(other)
		return not lowerBeforeUpper(other.__lower, other.__lowerInc, self.__upper, self.__upperInc)

	def isOverOrLeft(self, other: Any) -> bool:
		"""Whether the span does not extend to the right of `other`."""
		other = self._boundingOf(other)
		return cmpUpper(self.__upper, self.__upperInc, other.__upper, other.__upperInc) <= 0

	def isRight(self, other: Any) -> bool:
		other = self._boundingOf(other)
		return not lowerBeforeUpper(self.__lower, self.__lowerInc, other.__upper, other.__upperInc)

	def isOverOrRight(self, other: Any) -> bool:
		other = self._boundingOf(other)
		return cmpLower(self.__lower, self.__lowerInc, other.__lower, other.__lowerInc) >= 0

	def _boundingOf(self, other: Any) -> "Span":
		from rt_temporal_core.Collections.SpanSet import SpanSet
		if isinstance(other, SpanSet): return self._asSpan(other.span())
		return self._asSpan(other)

	def intersection(self, other: "Span") -> Self | None:
		"""The common part of both spans, or `None` if they do not overlap."""
		other = self._asSpan(other)
		if not self.overlaps(other): return None
		if cmpLower(self.__lower, self.__lowerInc, other.__lower, other.__lowerInc) >= 0: (lower, lowerInc) = (self.__lower, self.__lowerInc)
		else: (lower, lowerInc) = (other.__lower, other.__lowerInc)
		if cmpUpper(self.__upper, self.__upperInc, other.__upper, other.__upperInc) <= 0: upperSide = self
		else: upperSide = other
		return type(self).fromCanonical(lower, upperSide.__upper, lowerInc, upperSide.__upperInc, upperSide.__upperShownInc)

	def union(self, other: "Span") -> Self:
		"""
		The smallest span covering both spans.

		Raises
		------
		DomainError
			When the spans neither overlap nor touch, in which case the union is a span set.
		"""
		other = self._asSpan(other)
		if not self.overlaps(other) and not self.isAdjacent(other): raise DomainError(f"The union of {self} and {other} is not a span.")
		if cmpLower(self.__lower, self.__lowerInc, other.__lower, other.__lowerInc) <= 0: (lower, lowerInc) = (self.__lower, self.__lowerInc)
		else: (lower, lowerInc) = (other.__lower, other.__lowerInc)
		if cmpUpper(self.__upper, self.__upperInc, other.__upper, other.__upperInc) >= 0: upperSide = self
		else: upperSide = other
		return type(self).fromCanonical(lower, upperSide.__upper, lowerInc, upperSide.__upperInc, upperSide.__upperShownInc)

	def minus(self, other: Any):
		"""The values of this span which are not in `other`, as a span set, or `None` if nothing is left."""
		return self.toSpanSet().minus(other)

	def toSpanSet(self):
		return self.spanSetType()([self])

	def distance(self, other: Any) -> _D:
		"""`ZERO` when the spans share a value, otherwise the gap between their closest values."""
		from rt_temporal_core.Collections.SpanSet import SpanSet
		if isinstance(other, SpanSet): return other.distance(self)
		other = self._asSpan(other)
		if self.overlaps(other): return self.ZERO
		if self.isLeft(other): return self._diff(other.__lower, self.lastValue)
		return self._diff(self.__lower, other.lastValue)

	def shift(self, delta: Any) -> Self:
		return self.shiftScale(delta, None)

	def scale(self, width: Any) -> Self:
		return self.shiftScale(None, width)

	def shiftScale(self, delta: Any = None, width: Any = None) -> Self:
		"""
		Shift the span by `delta` then stretch it so that `upper - lower == width`, keeping the lower bound in place.
		For a discrete domain the result is `[lower, lower + width]`.

		Raises
		------
		DomainError
			When both arguments are missing or `width` is not positive.
		"""
		if delta is None and width is None: raise DomainError("At least one of delta and width must be given.")
		(lower, lowerInc, upper, upperInc) = self.bounds
		upperShownInc = self.__upperShownInc
		if delta is not None:
			d = self._delta(delta)
			lower = self._add(lower, d)
			upper = self._add(upper, d)
		if width is not None:
			w = self._delta(width)
			if not w > self.ZERO: raise DomainError(f"The width must be positive: {width}")
			if self.DISCRETE:
				upper = self._add(self._add(lower, w), self.UNIT)
				upperShownInc = True
			else:
				upper = self._add(lower, w)
		return type(self).fromCanonical(lower, upper, lowerInc, upperInc, upperShownInc)

	def mapProportionally(self, value: _T, target: "Span") -> _T:
		"""Map a value of this span onto `target`, preserving its relative position between the bounds."""
		total = self._diff(self.__upper, self.__lower)
		if total == self.ZERO: return self._add(target.__lower, self._diff(value, self.__lower))
		ratio = self._ratio(self._diff(value, self.__lower), total)
		return self._add(target.__lower, self._scaleDelta(self._diff(target.__upper, target.__lower), ratio))


class IntSpan(Span[int, int]):
	DISCRETE = True
	UNIT = 1
	ZERO = 0

	@classmethod
	def _parseBound(cls, text: str) -> int:
		try:
			return int(text)
		except ValueError as e:
			raise ParseError(text, "invalid integer") from e

	@classmethod
	def _bound(cls, value: Any) -> int:
		if isinstance(value, bool) or not isinstance(value, Integral): raise DomainError(f"Not an integer: {repr(value)}")
		return int(value)

	@classmethod
	def _delta(cls, value: Any) -> int:
		return cls._bound(value)

	@classmethod
	def _scaleDelta(cls, delta: int, ratio: float) -> int:
		return round(delta * ratio)

	@classmethod
	def spanSetType(cls) -> type:
		from rt_temporal_core.Collections.SpanSet import IntSpanSet
		return IntSpanSet

	def toFloatSpan(self) -> "FloatSpan":
		return FloatSpan(float(self.lower), float(self.upper), self.lowerInc, self.upperInc)


class FloatSpan(Span[float, float]):
	ZERO = 0.0

	@classmethod
	def _parseBound(cls, text: str) -> float:
		try:
			return float(text)
		except ValueError as e:
			raise ParseError(text, "invalid number") from e

	@classmethod
	def _formatBound(cls, value: float) -> str:
		return repr(value)

	@classmethod
	def _bound(cls, value: Any) -> float:
		if isinstance(value, bool) or not isinstance(value, Real): raise DomainError(f"Not a number: {repr(value)}")
		value = float(value)
		if isnan(value): raise DomainError("NaN is not an orderable value.")
		return value

	@classmethod
	def _delta(cls, value: Any) -> float:
		return cls._bound(value)

	@classmethod
	def spanSetType(cls) -> type:
		from rt_temporal_core.Collections.SpanSet import FloatSpanSet
		return FloatSpanSet

	def toIntSpan(self) -> IntSpan:
		"""The smallest integer span covering this span."""
		return IntSpan(floor(self.lower), ceil(self.upper), True, True)


ONE_DAY: Final = timedelta(days=1)


class DateSpan(Span[date, timedelta]):
	DISCRETE = True
	UNIT = ONE_DAY
	ZERO = timedelta(0)

	@classmethod
	def _parseBound(cls, text: str) -> date:
		return Time.parseDate(text)

	@classmethod
	def _formatBound(cls, value: date) -> str:
		return value.isoformat()

	@classmethod
	def _bound(cls, value: Any) -> date:
		if isinstance(value, str): return Time.parseDate(value)
		if isinstance(value, datetime): raise DomainError(f"A date span takes dates, not timestamps: {repr(value)}")
		if not isinstance(value, date): raise DomainError(f"Not a date: {repr(value)}")
		return value

	@classmethod
	def _delta(cls, value: Any) -> timedelta:
		"""Durations are truncated to whole days. Numbers are days."""
		if isinstance(value, bool): raise DomainError(f"Not a duration: {repr(value)}")
		if isinstance(value, Integral): return timedelta(days=int(value))
		if not isinstance(value, timedelta): raise DomainError(f"Not a duration: {repr(value)}")
		days = abs(value) // ONE_DAY
		return timedelta(days=days if value >= timedelta(0) else -days)

	@classmethod
	def _add(cls, value: date, delta: timedelta) -> date:
		try:
			return value + delta
		except OverflowError as e:
			raise DomainError(f"{value} + {delta} is not a representable date.") from e

	@classmethod
	def _scaleDelta(cls, delta: timedelta, ratio: float) -> timedelta:
		return timedelta(days=round(delta.days * ratio))

	@classmethod
	def spanSetType(cls) -> type:
		from rt_temporal_core.Collections.SpanSet import DateSpanSet
		return DateSpanSet

	def duration(self) -> timedelta:
		"""The number of days covered by the span."""
		return self._diff(self.bounds[2], self.lower)

	def toTsTzSpan(self) -> "TsTzSpan":
		return TsTzSpan(Time.toTimestamp(self.lower), Time.toTimestamp(self.bounds[2]), True, False)


class TsTzSpan(Span[datetime, timedelta]):
	ZERO = timedelta(0)

	@classmethod
	def _parseBound(cls, text: str) -> datetime:
		return Time.parseTimestamp(text)

	@classmethod
	def _formatBound(cls, value: datetime) -> str:
		return Time.formatTimestamp(value)

	@classmethod
	def _bound(cls, value: Any) -> datetime:
		return Time.toTimestamp(value)

	@classmethod
	def _delta(cls, value: Any) -> timedelta:
		return Time.toTimeDelta(value)

	@classmethod
	def _add(cls, value: datetime, delta: timedelta) -> datetime:
		try:
			return value + delta
		except OverflowError as e:
			raise DomainError(f"{value} + {delta} is not a representable timestamp.") from e

	@classmethod
	def spanSetType(cls) -> type:
		from rt_temporal_core.Collections.SpanSet import TsTzSpanSet
		return TsTzSpanSet

	def duration(self) -> timedelta:
		return self.width()

	def toDateSpan(self) -> DateSpan:
		"""The dates touched by the span."""
		return DateSpan(self.lower.date(), self.upper.date(), True, True)
