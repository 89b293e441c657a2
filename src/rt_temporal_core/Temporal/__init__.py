"""
Temporal values: `TInstant`, `TSequence` and `TSequenceSet` over booleans, integers, floats, texts and planar points.
The typed constructors live in `Types`, the algorithms in the engine modules next to it.
"""
from rt_temporal_core.Temporal.Domains import BoolDomain, FloatDomain, IntDomain, PointDomain, TextDomain, ValueDomain
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Temporal import Piece, Temporal
from rt_temporal_core.Temporal.TInstant import TInstant
from rt_temporal_core.Temporal.TSequence import TSequence
from rt_temporal_core.Temporal.TSequenceSet import TSequenceSet
from rt_temporal_core.Temporal.Types import TBool, TemporalType, TFloat, TGeomPoint, TInt, TText
