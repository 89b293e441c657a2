import re
from bisect import bisect_right
from datetime import timedelta
from heapq import merge
from typing import Any, Final, Generic, Iterable, Iterator, TypeVar

from typing_extensions import Self

from rt_temporal_commons.Shared.Errors import DomainError, ParseError
from rt_temporal_core.Collections.Span import DateSpan, FloatSpan, IntSpan, Span, TsTzSpan, cmpUpper, lowerBeforeUpper

_S = TypeVar("_S", bound=Span)

SPAN_SET_PATTERN: Final = re.compile(r"^\s*\{(.*)\}\s*$")
SPAN_ITEM_PATTERN: Final = re.compile(r"[\[\(][^\[\(\]\)]*[\]\)]")


def normalizeSpans(spans: Iterable[Span]) -> list[Span]:
	"""
	Merge overlapping and adjacent spans of a sorted sequence.
	The result is the unique minimal decomposition of the union of the input.
	"""
	merged: list[Span] = []
	for span in spans:
		if len(merged) > 0 and (merged[-1].overlaps(span) or merged[-1].isAdjacent(span)):
			merged[-1] = merged[-1].union(span)
		else:
			merged.append(span)
	return merged


class SpanSet(Generic[_S]):
	"""
	An ordered set of spans of one domain.
	No two spans of the set overlap or touch, they are merged on construction and after every operation.
	A span set is never empty: set operations with an empty outcome return `None`.
	"""
	SPAN_TYPE: type[Span] = Span

	def __init__(self, spans: Iterable[_S]) -> None:
		checked: list[_S] = []
		for span in spans:
			if type(span) is not self.SPAN_TYPE: raise DomainError(f"{type(self).__name__} only holds {self.SPAN_TYPE.__name__}: {repr(span)}")
			checked.append(span)
		if len(checked) == 0: raise DomainError(f"{type(self).__name__} may not be empty.")
		self.__spans: tuple[_S, ...] = tuple(normalizeSpans(sorted(checked))) # pyright: ignore[reportAttributeAccessIssue]
		return

	@classmethod
	def fromNormalized(cls, spans: Iterable[_S]) -> Self:
		"""Build a set from spans that are already sorted, disjoint and non-adjacent."""
		spanSet = cls.__new__(cls)
		spanSet.__spans = tuple(spans)
		return spanSet

	@classmethod
	def fromText(cls, text: str) -> Self:
		match = SPAN_SET_PATTERN.match(text)
		if match is None: raise ParseError(text, "expected '{' spans '}'")
		body = match.group(1)
		items = SPAN_ITEM_PATTERN.findall(body)
		leftover = SPAN_ITEM_PATTERN.sub("", body).replace(",", "").strip()
		if len(items) == 0 or len(leftover) > 0: raise ParseError(text, "expected a comma separated list of spans")
		return cls([cls.SPAN_TYPE.fromText(item) for item in items])

	@classmethod
	def _optional(cls, spans: list[_S]) -> Self | None:
		if len(spans) == 0: return None
		return cls.fromNormalized(normalizeSpans(spans))

	def __repr__(self) -> str:
		return f"{type(self).__name__}{str(self)}"

	def __str__(self) -> str:
		return "{%s}" % ", ".join([str(s) for s in self.__spans])

	def __eq__(self, other: object) -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__spans == other.__spans # pyright: ignore[reportAttributeAccessIssue]

	def __hash__(self) -> int:
		return hash((type(self).__name__, self.__spans))

	def __lt__(self, other: "SpanSet") -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__spans < other.__spans

	def __le__(self, other: "SpanSet") -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__spans <= other.__spans

	def __gt__(self, other: "SpanSet") -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__spans > other.__spans

	def __ge__(self, other: "SpanSet") -> bool:
		if type(other) is not type(self): return NotImplemented
		return self.__spans >= other.__spans

	def __iter__(self) -> Iterator[_S]:
		return iter(self.__spans)

	def __len__(self) -> int:
		return len(self.__spans)

	def __contains__(self, value: Any) -> bool:
		return self.contains(value)

	def __and__(self, other: Any):
		return self.intersection(other)

	def __add__(self, other: Any):
		return self.union(other)

	def __or__(self, other: Any):
		return self.union(other)

	def __sub__(self, other: Any):
		return self.minus(other)

	@property
	def spans(self) -> tuple[_S, ...]:
		return self.__spans

	@property
	def numSpans(self) -> int:
		return len(self.__spans)

	def spanN(self, n: int) -> _S:
		"""The `n`-th span, counting from zero."""
		return self.__spans[n]

	@property
	def startSpan(self) -> _S:
		return self.__spans[0]

	@property
	def endSpan(self) -> _S:
		return self.__spans[-1]

	def span(self) -> _S:
		"""The bounding span."""
		first = self.__spans[0]
		last = self.__spans[-1]
		(lower, lowerInc, _, _) = first.bounds
		(_, _, upper, upperInc) = last.bounds
		return self.SPAN_TYPE.fromCanonical(lower, upper, lowerInc, upperInc, last.upperShownInc) # pyright: ignore[reportReturnType]

	@property
	def lower(self) -> Any:
		return self.__spans[0].lower

	@property
	def upper(self) -> Any:
		return self.__spans[-1].upper

	def width(self, ignoreGaps: bool = False) -> Any:
		if ignoreGaps: return self.span().width()
		total = self.SPAN_TYPE.ZERO
		for s in self.__spans: total = total + s.width()
		return total

	def _asSpanSet(self, other: Any) -> "SpanSet":
		if isinstance(other, SpanSet):
			if type(other) is not type(self): raise DomainError(f"Cannot combine {type(self).__name__} with {type(other).__name__}")
			return other
		if isinstance(other, Span): return type(self)([other])
		return type(self)([self.SPAN_TYPE.singleton(other)])

	def __candidate(self, lower: Any, lowerInc: bool) -> _S | None:
		"""The only span of the set which may contain a span starting at the given bound."""
		i = bisect_right(self.__spans, (lower, not lowerInc), key=lambda s: (s.bounds[0], not s.bounds[1]))
		if i == 0: return None
		return self.__spans[i - 1]

	def contains(self, other: Any) -> bool:
		if isinstance(other, SpanSet):
			other = self._asSpanSet(other)
			return all(self.contains(s) for s in other.spans)
		if isinstance(other, Span):
			if type(other) is not self.SPAN_TYPE: raise DomainError(f"Cannot combine {type(self).__name__} with {type(other).__name__}")
			candidate = self.__candidate(other.bounds[0], other.bounds[1])
		else:
			value = self.SPAN_TYPE._bound(other)
			candidate = self.__candidate(value, True)
		if candidate is None: return False
		return candidate.contains(other)

	def isContainedIn(self, other: Any) -> bool:
		return other.contains(self)

	def overlaps(self, other: Any) -> bool:
		return self.intersection(other) is not None

	def isAdjacent(self, other: Any) -> bool:
		"""Whether both sets touch without sharing any value."""
		other = self._asSpanSet(other)
		if self.overlaps(other): return False
		return any(a.isAdjacent(b) for a in self.__spans for b in other.spans)

	def isLeft(self, other: Any) -> bool:
		return self.span().isLeft(other)

	def isOverOrLeft(self, other: Any) -> bool:
		return self.span().isOverOrLeft(other)

	def isRight(self, other: Any) -> bool:
		return self.span().isRight(other)

	def isOverOrRight(self, other: Any) -> bool:
		return self.span().isOverOrRight(other)

	def union(self, other: Any) -> Self:
		other = self._asSpanSet(other)
		return self.fromNormalized(normalizeSpans(merge(self.__spans, other.spans)))

	def intersection(self, other: Any) -> Self | None:
		"""The common part of both sets, `None` if they do not overlap."""
		other = self._asSpanSet(other)
		result: list[_S] = []
		(i, j) = (0, 0)
		mine = self.__spans
		theirs = other.spans
		while i < len(mine) and j < len(theirs):
			common = mine[i].intersection(theirs[j])
			if common is not None: result.append(common)
			(_, _, upperA, incA) = mine[i].bounds
			(_, _, upperB, incB) = theirs[j].bounds
			if cmpUpper(upperA, incA, upperB, incB) <= 0: i += 1
			else: j += 1
		return self._optional(result)

	def minus(self, other: Any) -> Self | None:
		"""The part of this set not covered by `other`, `None` if nothing is left."""
		other = self._asSpanSet(other)
		result: list[_S] = []
		theirs = other.spans
		j = 0
		for span in self.__spans:
			(lower, lowerInc, upper, upperInc) = span.bounds
			upperShownInc = span.upperShownInc
			while j < len(theirs) and not lowerBeforeUpper(lower, lowerInc, theirs[j].bounds[2], theirs[j].bounds[3]):
				j += 1
			k = j
			remaining = True
			while k < len(theirs) and remaining:
				(oLower, oLowerInc, oUpper, oUpperInc) = theirs[k].bounds
				if not lowerBeforeUpper(oLower, oLowerInc, upper, upperInc): break
				piece = self.SPAN_TYPE.tryCanonical(lower, oLower, lowerInc, not oLowerInc)
				if piece is not None: result.append(piece) # pyright: ignore[reportArgumentType]
				if cmpUpper(oUpper, oUpperInc, upper, upperInc) >= 0: remaining = False
				else: (lower, lowerInc) = (oUpper, not oUpperInc)
				k += 1
			if remaining:
				piece = self.SPAN_TYPE.tryCanonical(lower, upper, lowerInc, upperInc, upperShownInc)
				if piece is not None: result.append(piece) # pyright: ignore[reportArgumentType]
		return self._optional(result)

	def complementWithin(self, within: Span) -> Self | None:
		"""The parts of `within` not covered by this set, `None` if it is fully covered."""
		return type(self)([within]).minus(self)

	def distance(self, other: Any) -> Any:
		other = self._asSpanSet(other)
		if self.overlaps(other): return self.SPAN_TYPE.ZERO
		return min(a.distance(b) for a in self.__spans for b in other.spans)

	def shift(self, delta: Any) -> Self:
		return self.shiftScale(delta, None)

	def scale(self, width: Any) -> Self:
		return self.shiftScale(None, width)

	def shiftScale(self, delta: Any = None, width: Any = None) -> Self:
		"""Shift and scale the bounding span, moving every bound proportionally with it."""
		original = self.span()
		target = original.shiftScale(delta, width)
		if len(self.__spans) == 1: return type(self).fromNormalized([target])
		spans: list[Span] = []
		for s in self.__spans:
			(lower, lowerInc, upper, upperInc) = s.bounds
			newLower = original.mapProportionally(lower, target)
			newUpper = original.mapProportionally(upper, target)
			piece = self.SPAN_TYPE.tryCanonical(newLower, newUpper, lowerInc, upperInc, s.upperShownInc)
			if piece is not None: spans.append(piece)
		return type(self)(spans)


class IntSpanSet(SpanSet[IntSpan]):
	SPAN_TYPE = IntSpan


class FloatSpanSet(SpanSet[FloatSpan]):
	SPAN_TYPE = FloatSpan


class DateSpanSet(SpanSet[DateSpan]):
	SPAN_TYPE = DateSpan

	def duration(self, ignoreGaps: bool = False) -> timedelta:
		if ignoreGaps: return self.span().duration()
		return sum((s.duration() for s in self.spans), timedelta(0))


class TsTzSpanSet(SpanSet[TsTzSpan]):
	SPAN_TYPE = TsTzSpan

	def duration(self, ignoreGaps: bool = False) -> timedelta:
		return self.width(ignoreGaps)
