"""
Property tests of the span algebra over integers, floats, dates and timestamps.
"""
from datetime import date, datetime, timedelta

import pytest
from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from rt_temporal_commons.Shared.Errors import DomainError, ParseError
from rt_temporal_commons.Utils import Time
from rt_temporal_core.Collections.Span import DateSpan, FloatSpan, IntSpan, TsTzSpan
from rt_temporal_core.Collections.SpanSet import IntSpanSet

# =============================================================================
# STRATEGIES
# =============================================================================

@composite
def intSpans(draw):
	lower = draw(st.integers(min_value=-1000, max_value=1000))
	width = draw(st.integers(min_value=2, max_value=200))
	return IntSpan(lower, lower + width, draw(st.booleans()), draw(st.booleans()))

@composite
def floatSpans(draw):
	lower = draw(st.floats(min_value=-1e6, max_value=1e6))
	upper = lower + draw(st.floats(min_value=0, max_value=1e3))
	if upper == lower: return FloatSpan.singleton(lower)
	return FloatSpan(lower, upper, draw(st.booleans()), draw(st.booleans()))

@composite
def dateSpans(draw):
	lower = draw(st.dates(min_value=date(1900, 1, 1), max_value=date(2100, 1, 1)))
	days = draw(st.integers(min_value=2, max_value=400))
	return DateSpan(lower, lower + timedelta(days=days), draw(st.booleans()), draw(st.booleans()))

@composite
def tsTzSpans(draw):
	lower = draw(st.datetimes(min_value=datetime(2000, 1, 1), max_value=datetime(2030, 1, 1)))
	duration = draw(st.timedeltas(min_value=timedelta(0), max_value=timedelta(days=30)))
	if duration == timedelta(0): return TsTzSpan.singleton(lower)
	return TsTzSpan(lower, lower + duration, draw(st.booleans()), draw(st.booleans()))

def meet(a, b):
	if a is None or b is None: return None
	return a & b

# =============================================================================
# SCENARIOS
# =============================================================================

def test_date_span_parses_with_the_bounds_it_was_given():
	span = DateSpan.fromText("[2019-09-08, 2019-09-10]")
	assert span.lower == date(2019, 9, 8)
	assert span.upper == date(2019, 9, 10)
	assert span.upperInc
	assert str(span) == "[2019-09-08, 2019-09-10]"

def test_distance_between_date_spans():
	a = DateSpan(date(2019, 9, 8), date(2019, 9, 10), True, True)
	b = DateSpan(date(2019, 9, 12), date(2019, 9, 14), True, True)
	assert a.distance(b) == timedelta(days=2)
	assert b.distance(a) == timedelta(days=2)

def test_shift_of_a_date_span():
	span = DateSpan(date(2023, 1, 1), date(2023, 1, 15))
	assert span.shift(timedelta(days=5)) == DateSpan(date(2023, 1, 6), date(2023, 1, 20))

def test_intersection_of_int_spans():
	assert IntSpan(1, 11) & IntSpan(9, 111) == IntSpan(9, 11)
	assert (IntSpan(1, 11) & IntSpan(20, 30)) is None

# =============================================================================
# CANONICAL FORM
# =============================================================================

def test_discrete_spans_are_half_open():
	assert IntSpan(1, 5, True, True) == IntSpan(1, 6)
	assert IntSpan(0, 5, False, False) == IntSpan(1, 5)
	assert IntSpan(1, 5, True, True).bounds == (1, True, 6, False)
	assert DateSpan("2019-09-08", "2019-09-10", False, False) == DateSpan.singleton(date(2019, 9, 9))

def test_discrete_span_keeps_its_presentation():
	span = IntSpan(1, 5, True, True)
	assert str(span) == "[1, 5]"
	assert span.upper == 5
	assert str(IntSpan(1, 6)) == "[1, 6)"

def test_continuous_spans_keep_their_bounds():
	span = FloatSpan(1.0, 2.0, False, True)
	assert span.bounds == (1.0, False, 2.0, True)
	assert str(span) == "(1.0, 2.0]"

@pytest.mark.parametrize("build", [
	lambda: IntSpan(5, 1),
	lambda: IntSpan(1, 2, False, False),
	lambda: FloatSpan(1.0, 1.0, True, False),
	lambda: FloatSpan(float("nan"), 1.0),
	lambda: IntSpan(1.5, 3),
	lambda: DateSpan(datetime(2020, 1, 1), date(2020, 1, 3)),
])
def test_invalid_bounds_are_rejected(build):
	with pytest.raises(DomainError):
		build()

@pytest.mark.parametrize("text", ["[1, x]", "1, 2", "[1.5, 2]", "[1 2]"])
def test_malformed_int_spans_do_not_parse(text):
	with pytest.raises(ParseError):
		IntSpan.fromText(text)

# =============================================================================
# OPERATIONS
# =============================================================================

def test_containment_respects_inclusiveness():
	span = FloatSpan(1.0, 2.0)
	assert span.contains(1.0)
	assert 1.5 in span
	assert not span.contains(2.0)
	assert span.contains(FloatSpan(1.0, 1.5))
	assert not span.contains(FloatSpan(1.5, 2.0, True, True))

def test_adjacency_and_position():
	(a, b) = (IntSpan(1, 5), IntSpan(5, 9))
	assert a.isAdjacent(b)
	assert a.isLeft(b)
	assert b.isRight(a)
	assert not a.overlaps(b)
	assert not IntSpan(1, 5, True, True).isAdjacent(b)
	assert FloatSpan(1.0, 2.0).isAdjacent(FloatSpan(2.0, 3.0))
	assert not FloatSpan(1.0, 2.0).isAdjacent(FloatSpan(2.0, 3.0, False, False))

def test_union_and_minus():
	assert IntSpan(1, 5).union(IntSpan(5, 9)) == IntSpan(1, 9)
	with pytest.raises(DomainError):
		IntSpan(1, 5).union(IntSpan(7, 9))
	assert IntSpan(1, 10) - IntSpan(3, 5) == IntSpanSet([IntSpan(1, 3), IntSpan(5, 10)])
	assert IntSpan(3, 5).minus(IntSpan(1, 10)) is None

def test_widths():
	span = DateSpan(date(2019, 9, 8), date(2019, 9, 10), True, True)
	assert span.width() == timedelta(days=2)
	assert span.duration() == timedelta(days=3)
	assert IntSpan(1, 5, True, True).width() == 4
	assert FloatSpan(1.0, 3.5).width() == 2.5

def test_time_span_distance():
	t0 = Time.toTimestamp("2020-01-01 00:00")
	a = TsTzSpan(t0, t0 + timedelta(hours=1), True, True)
	b = TsTzSpan(t0 + timedelta(hours=3), t0 + timedelta(hours=4))
	assert a.distance(b) == timedelta(hours=2)
	assert a.distance(TsTzSpan(t0, t0 + timedelta(hours=2))) == timedelta(0)

def test_scale_of_a_discrete_span():
	assert IntSpan(1, 5).scale(10) == IntSpan(1, 11, True, True)
	assert str(DateSpan(date(2020, 1, 1), date(2020, 1, 5)).scale(timedelta(days=3))) == "[2020-01-01, 2020-01-04]"
	with pytest.raises(DomainError):
		IntSpan(1, 5).scale(0)
	with pytest.raises(DomainError):
		IntSpan(1, 5).shiftScale()

def test_shift_moves_a_date_span_out_of_range():
	with pytest.raises(DomainError):
		DateSpan(date(9999, 12, 1), date(9999, 12, 20)).shift(timedelta(days=60))

def test_conversions_between_domains():
	assert IntSpan(1, 5).toFloatSpan() == FloatSpan(1.0, 5.0)
	assert IntSpan(1, 5, True, True).toFloatSpan() == FloatSpan(1.0, 5.0, True, True)
	assert FloatSpan(1.2, 3.4).toIntSpan() == IntSpan(1, 4, True, True)
	day = DateSpan.singleton(date(2020, 1, 1)).toTsTzSpan()
	assert day.duration() == timedelta(days=1)
	t0 = Time.toTimestamp("2020-01-01 00:00")
	assert TsTzSpan(t0, t0 + timedelta(hours=36)).toDateSpan() == DateSpan(date(2020, 1, 1), date(2020, 1, 2), True, True)

# =============================================================================
# PROPERTIES
# =============================================================================

@given(st.one_of(intSpans(), floatSpans(), dateSpans(), tsTzSpans()))
def test_text_round_trip(span):
	assert type(span).fromText(str(span)) == span

@given(intSpans(), st.integers(min_value=-10_000, max_value=10_000))
def test_int_shift_is_reversible(span, delta):
	assert span.shift(delta).shift(-delta) == span

@given(dateSpans(), st.integers(min_value=-3000, max_value=3000))
def test_date_shift_is_reversible(span, days):
	delta = timedelta(days=days)
	assert span.shift(delta).shift(-delta) == span

@given(tsTzSpans(), st.timedeltas(min_value=timedelta(days=-3000), max_value=timedelta(days=3000)))
def test_time_shift_is_reversible(span, delta):
	assert span.shift(delta).shift(-delta) == span

@given(intSpans(), st.integers(min_value=1, max_value=10_000))
def test_int_scale_sets_the_width(span, width):
	assert span.scale(width).width() == width

@given(tsTzSpans().filter(lambda s: s.lower != s.upper), st.timedeltas(min_value=timedelta(microseconds=1), max_value=timedelta(days=300)))
def test_time_scale_sets_the_width(span, width):
	scaled = span.scale(width)
	assert scaled.width() == width
	assert scaled.lower == span.lower

@given(intSpans(), intSpans())
def test_intersection_is_commutative(a, b):
	assert (a & b) == (b & a)

@given(intSpans(), intSpans(), intSpans())
def test_intersection_is_associative(a, b, c):
	assert meet(meet(a, b), c) == meet(a, meet(b, c))

@given(floatSpans(), floatSpans())
def test_intersection_lies_in_both(a, b):
	common = a & b
	if common is None:
		assert not a.overlaps(b)
		return
	assert a.contains(common)
	assert b.contains(common)
