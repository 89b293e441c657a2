"""Bounding boxes of temporal values, the summaries behind the topological and position predicates."""
from datetime import datetime
from typing import Any

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_core.Boxes.STBox import STBox
from rt_temporal_core.Boxes.TBox import TBox
from rt_temporal_core.Collections.Span import FloatSpan, TsTzSpan
from rt_temporal_core.Collections.SpanSet import TsTzSpanSet


def boxOf(temporal: Any) -> TsTzSpan | TBox | STBox:
	"""`TsTzSpan` for booleans and texts, `TBox` for numbers and `STBox` for points."""
	from rt_temporal_core.Temporal.Domains import FloatDomain, IntDomain, PointDomain
	domain = temporal.domain
	time = temporal.timespan()
	if isinstance(domain, (IntDomain, FloatDomain)):
		values = temporal.values()
		return TBox(FloatSpan(float(min(values)), float(max(values)), True, True), time)
	if isinstance(domain, PointDomain):
		xs = [p.x for p in temporal.values()]
		ys = [p.y for p in temporal.values()]
		return STBox.fromBounds(min(xs), min(ys), max(xs), max(ys), time, domain.srid)
	return time

def timeOf(other: Any) -> TsTzSpan:
	"""The time span of a temporal value, a box, a time span (set) or a timestamp."""
	from rt_temporal_core.Temporal.Temporal import Temporal
	if isinstance(other, Temporal): return other.timespan()
	if isinstance(other, TsTzSpan): return other
	if isinstance(other, TsTzSpanSet): return other.span()
	if isinstance(other, datetime): return TsTzSpan.singleton(other)
	if isinstance(other, (TBox, STBox)):
		if other.time is None: raise DomainError(f"{other} has no time axis.")
		return other.time
	raise DomainError(f"Not a time: {repr(other)}")

def isSame(a: Any, b: Any) -> bool:
	"""Whether both boxes are equal along the dimensions they share."""
	if isinstance(a, TsTzSpan): return a == timeOf(b)
	return a.isSame(b)
