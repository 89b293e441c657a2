"""Spans and span sets over integers, floats, dates and timestamps."""
from rt_temporal_core.Collections.Span import DateSpan, FloatSpan, IntSpan, Span, TsTzSpan
from rt_temporal_core.Collections.SpanSet import DateSpanSet, FloatSpanSet, IntSpanSet, SpanSet, TsTzSpanSet
