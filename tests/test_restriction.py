"""
Tests of the restriction of temporal values to times and to values.
What `at` keeps and what `minus` keeps partition the original value.
"""
from datetime import datetime, timedelta, timezone

from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from rt_temporal_core.Collections.Span import FloatSpan, IntSpan, TsTzSpan
from rt_temporal_core.Collections.SpanSet import TsTzSpanSet
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import TSequence
from rt_temporal_core.Temporal.TSequenceSet import TSequenceSet
from rt_temporal_core.Temporal.Types import TFloat, TGeomPoint, TInt

T0 = datetime(2020, 1, 1, tzinfo=timezone.utc)

# =============================================================================
# STRATEGIES
# =============================================================================

# Whole and half values, reached at instants as well as inside segments
HALF_STEPS = st.integers(min_value=-7, max_value=7).map(lambda n: n / 2)

def drawInstants(draw, values) -> list:
	"""A few values of `values`, one to thirty minutes apart."""
	count = draw(st.integers(min_value=2, max_value=6))
	drawn = draw(st.lists(values, min_size=count, max_size=count))
	timestamps = [T0]
	for gap in draw(st.lists(st.integers(min_value=1, max_value=30), min_size=count - 1, max_size=count - 1)):
		timestamps.append(timestamps[-1] + timedelta(minutes=gap))
	return list(zip(drawn, timestamps))

@composite
def stepSequences(draw):
	"""Step integer sequences of a few instants, one to thirty minutes apart."""
	return TInt.sequence(drawInstants(draw, st.integers(min_value=-3, max_value=3)))

@composite
def linearSequences(draw):
	return TFloat.sequence(drawInstants(draw, st.integers(min_value=-3, max_value=3)))

@composite
def linearTracks(draw):
	coordinate = st.integers(min_value=-3, max_value=3)
	return TGeomPoint.sequence(drawInstants(draw, st.tuples(coordinate, coordinate)))

@composite
def valueSpans(draw):
	lower = draw(HALF_STEPS)
	width = draw(st.integers(min_value=0, max_value=8)) / 2
	if width == 0: return FloatSpan(lower, lower, True, True)
	return FloatSpan(lower, lower + width, draw(st.booleans()), draw(st.booleans()))

@composite
def timeSpans(draw):
	lower = T0 + timedelta(minutes=draw(st.integers(min_value=-10, max_value=160)))
	width = draw(st.integers(min_value=0, max_value=90))
	if width == 0: return TsTzSpan.singleton(lower)
	return TsTzSpan(lower, lower + timedelta(minutes=width), draw(st.booleans()), draw(st.booleans()))

def sampleTimes(temporal) -> list[datetime]:
	"""The timestamps of the instants of a value and the middles between them."""
	timestamps = temporal.timestamps()
	middles = [a + (b - a) / 2 for (a, b) in zip(timestamps, timestamps[1:])]
	return timestamps + middles

def assertPartition(original, kept, rest):
	"""`kept` and `rest` never overlap in time, cover the original and agree with it everywhere."""
	parts = [p for p in (kept, rest) if p is not None]
	assert len(parts) > 0
	if len(parts) == 2: assert kept.time().intersection(rest.time()) is None
	covered = parts[0].time()
	for p in parts[1:]: covered = covered.union(p.time())
	assert covered == original.time()
	for t in sampleTimes(original):
		defined = [v for v in (p.valueAtTimestamp(t) for p in parts) if v is not None]
		assert defined == [original.valueAtTimestamp(t)]

# =============================================================================
# TIME RESTRICTION
# =============================================================================

def test_restriction_to_a_timestamp(at):
	sequence = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	assert sequence.atTimestamp(at(5)) == TInstant(5.0, at(5))
	assert sequence.atTimestamp(at(11)) is None
	assert sequence.at(at(5)) == TInstant(5.0, at(5))

def test_restriction_to_a_time_span(at):
	sequence = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	part = sequence.atTsTzSpan(TsTzSpan(at(2), at(4)))
	assert isinstance(part, TSequence)
	assert (part.startValue(), part.endValue()) == (2.0, 4.0)
	assert part.lowerInc and not part.upperInc
	assert sequence.atTsTzSpan(TsTzSpan(at(20), at(30))) is None

def test_minus_a_time_span_leaves_a_gap(at):
	sequence = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	rest = sequence.minusTsTzSpan(TsTzSpan(at(2), at(4)))
	assert isinstance(rest, TSequenceSet)
	assert rest.numSequences() == 2
	assert rest.valueAtTimestamp(at(3)) is None
	assert rest.valueAtTimestamp(at(4)) == 4.0
	assert sequence.minusTsTzSpan(TsTzSpan(at(-5), at(15))) is None

def test_parts_merge_back_into_the_original(at):
	sequence = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	span = TsTzSpan(at(2), at(4))
	assert sequence.atTsTzSpan(span).merge(sequence.minusTsTzSpan(span)) == sequence

def test_restriction_to_timestamps(at):
	sequence = TInt.sequence([(1, at(0)), (2, at(10))])
	sampled = sequence.atTimestamps([at(0), at(5), at(10), at(20)])
	assert isinstance(sampled, TSequence)
	assert sampled.values() == [1, 1, 2]
	rest = sequence.minusTimestamps([at(5)])
	assert rest.numSequences() == 2
	assert rest.valueAtTimestamp(at(5)) is None

def test_restriction_to_a_time_span_set(at):
	sequence = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	spanSet = TsTzSpanSet([TsTzSpan(at(1), at(2), True, True), TsTzSpan(at(8), at(9), True, True)])
	part = sequence.atTsTzSpanSet(spanSet)
	assert part.time() == spanSet
	assert part.at(spanSet) == part

# =============================================================================
# VALUE RESTRICTION
# =============================================================================

def test_restriction_to_a_value_of_a_linear_sequence(at):
	sequence = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	assert sequence.atValue(5.0) == TInstant(5.0, at(5))
	rest = sequence.minusValue(5.0)
	assert rest.numSequences() == 2
	assert rest.duration() == timedelta(minutes=10)
	assert sequence.atValue(20.0) is None

def test_restriction_to_a_value_of_a_step_sequence(at):
	sequence = TInt.sequence([(1, at(0)), (3, at(10)), (1, at(20))])
	ones = sequence.atValue(1)
	assert isinstance(ones, TSequenceSet)
	assert ones.numSequences() == 2
	assert ones.duration() == timedelta(minutes=10)
	assert ones.valueAtTimestamp(at(15)) is None
	assert sequence.minusValues([1, 3]) is None
	assert sequence.at([1, 3]) == sequence

def test_restriction_to_a_value_span(at):
	sequence = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	part = sequence.atSpan(FloatSpan(2.0, 4.0, True, True))
	assert part.timespan() == TsTzSpan(at(2), at(4), True, True)
	assert (part.startValue(), part.endValue()) == (2.0, 4.0)
	outside = sequence.minusSpan(FloatSpan(2.0, 4.0, True, True))
	assert outside.numSequences() == 2
	assert sequence.atSpan(IntSpan(2, 4, True, True)) == part

def test_restriction_to_extreme_values(at):
	sequence = TInt.sequence([(1, at(0)), (3, at(10)), (2, at(20))], upperInc=True)
	assert sequence.atMax().timespan() == TsTzSpan(at(10), at(20))
	assert sequence.atMin().startTimestamp() == at(0)
	assert sequence.minusMin().startValue() == 3

# =============================================================================
# PROPERTIES
# =============================================================================

@given(stepSequences(), timeSpans())
def test_time_restriction_partitions_the_value(sequence, span):
	assertPartition(sequence, sequence.atTsTzSpan(span), sequence.minusTsTzSpan(span))

@given(stepSequences(), st.integers(min_value=-3, max_value=3))
def test_value_restriction_partitions_the_value(sequence, value):
	kept = sequence.atValue(value)
	rest = sequence.minusValue(value)
	assertPartition(sequence, kept, rest)
	if kept is not None: assert set(kept.values()) == {value}
	if rest is not None: assert value not in rest.values()

def assertMergesBack(original, kept, rest):
	"""Merging what `at` keeps with what `minus` keeps gives back exactly the original value."""
	assert kept is not None or rest is not None
	if kept is None: assert rest == original
	elif rest is None: assert kept == original
	else: assert kept.merge(rest) == original

@given(linearSequences(), HALF_STEPS)
def test_value_restriction_of_a_linear_value_merges_back(sequence, value):
	assertMergesBack(sequence, sequence.atValue(value), sequence.minusValue(value))

@given(linearSequences(), valueSpans())
def test_value_span_restriction_merges_back(sequence, span):
	assertMergesBack(sequence, sequence.atSpan(span), sequence.minusSpan(span))

@given(linearSequences(), timeSpans())
def test_time_restriction_of_a_linear_value_merges_back(sequence, span):
	assertMergesBack(sequence, sequence.atTsTzSpan(span), sequence.minusTsTzSpan(span))

@given(linearTracks(), timeSpans())
def test_time_restriction_of_a_track_merges_back(track, span):
	assertMergesBack(track, track.atTsTzSpan(span), track.minusTsTzSpan(span))
