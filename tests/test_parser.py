from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from rt_temporal_commons.Shared.Errors import DomainError, ParseError
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Parser import splitTopLevel
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequenceSet import TSequenceSet
from rt_temporal_core.Temporal.Types import TBool, TFloat, TGeomPoint, TInt, TText

T0 = datetime(2020, 1, 1, tzinfo=timezone.utc)
TS0 = "2020-01-01 00:00:00+00:00"
TS10 = "2020-01-01 00:10:00+00:00"
TS20 = "2020-01-01 00:20:00+00:00"
TS30 = "2020-01-01 00:30:00+00:00"


@composite
def stepSequences(draw):
	count = draw(st.integers(min_value=1, max_value=6))
	values = draw(st.lists(st.integers(min_value=-100, max_value=100), min_size=count, max_size=count))
	minutes = sorted(draw(st.sets(st.integers(min_value=0, max_value=10000), min_size=count, max_size=count)))
	lowerInc = True if count == 1 else draw(st.booleans())
	return TInt.sequence([(v, T0 + timedelta(minutes=m)) for (v, m) in zip(values, minutes)], lowerInc, True)


@pytest.mark.parametrize("parse, text", [
	(TFloat.fromText, f"[1.5@{TS0}, 2.5@{TS10})"),
	(TFloat.fromText, f"Interp=Step;[1.5@{TS0}, 2.5@{TS10}]"),
	(TFloat.fromText, f"{{[1.0@{TS0}, 2.0@{TS10}], (3.0@{TS20}, 4.0@{TS30}]}}"),
	(TBool.fromText, f"{{t@{TS0}, f@{TS10}}}"),
	(TInt.fromText, f"7@{TS0}"),
	(TText.fromText, f"[\"a, b\"@{TS0}, \"c\"@{TS10}]"),
	(TGeomPoint.fromText, f"SRID=4326;[POINT(0.0 0.0)@{TS0}, POINT(1.0 1.0)@{TS10}]"),
])
def test_text_round_trip(parse, text):
	assert str(parse(text)) == text

def test_parsed_shapes(at):
	assert isinstance(TInt.fromText(f"7@{TS0}"), TInstant)
	assert isinstance(TFloat.fromText(f"{{[1.0@{TS0}, 2.0@{TS10}]}}"), TSequenceSet)
	discrete = TBool.fromText(f"{{t@{TS0}, f@{TS10}}}")
	assert discrete.interpolation is TInterpolation.DISCRETE
	assert discrete.values() == [True, False]
	step = TFloat.fromText(f"Interp=Step;[1.5@{TS0}, 2.5@{TS10}]")
	assert step.interpolation is TInterpolation.STEP
	assert step.valueAtTimestamp(at(5)) == 1.5

def test_quoted_texts_keep_their_commas():
	text = TText.fromText(f"[\"a, b\"@{TS0}, \"c\"@{TS10}]")
	assert text.values() == ["a, b", "c"]

def test_points_carry_their_srid():
	track = TGeomPoint.fromText(f"SRID=4326;[POINT(0 0)@{TS0}, POINT(1 1)@{TS10}]")
	assert track.domain.srid == 4326
	assert TGeomPoint.fromText(f"[POINT(0 0)@{TS0}, POINT(1 1)@{TS10}]").domain.srid == 0

def test_date_only_timestamps_are_midnight(at):
	assert TInt.fromText("5@2020-01-01") == TInt.instant(5, at(0))

@pytest.mark.parametrize("text", [
	f"[1.0@{TS0}, 2.0@{TS10}",
	f"abc@{TS0}",
	f"[1.0@{TS0}, , 2.0@{TS10}]",
	"1.0",
	"1.0@not a time",
	f"{{[1.0@{TS0}, 2.0@{TS10}]",
	f"Interp=Sideways;[1.0@{TS0}, 2.0@{TS10}]",
	"",
])
def test_malformed_texts(text):
	with pytest.raises(ParseError):
		TFloat.fromText(text)

def test_well_formed_but_invalid_texts():
	with pytest.raises(DomainError):
		TFloat.fromText(f"[1.0@{TS10}, 2.0@{TS0}]")
	with pytest.raises(DomainError):
		TInt.fromText(f"Interp=Linear;[1@{TS0}, 2@{TS10}]")
	with pytest.raises(DomainError):
		TFloat.fromText(f"{{[1.0@{TS0}, 2.0@{TS20}], [3.0@{TS10}, 4.0@{TS30}]}}")

def test_split_top_level():
	assert splitTopLevel("1@a, [2, 3], \"x,y\"") == ["1@a", "[2, 3]", "\"x,y\""]
	with pytest.raises(ParseError):
		splitTopLevel("[1, 2")
	with pytest.raises(ParseError):
		splitTopLevel("1, 2]")

@given(stepSequences())
def test_step_sequences_survive_their_text(sequence):
	assert TInt.fromText(str(sequence)) == sequence
