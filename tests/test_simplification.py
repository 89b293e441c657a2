from datetime import timedelta

import pytest

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils.Geometry import Shapely
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.TSequence import TSequence
from rt_temporal_core.Temporal.Types import TBool, TFloat, TGeomPoint


@pytest.fixture
def noisyLine(at) -> TSequence:
	"""Five instants lying almost on a straight line."""
	return TFloat.sequence([(0.0, at(0)), (1.01, at(1)), (1.99, at(2)), (3.02, at(3)), (4.0, at(4))])

@pytest.fixture
def noisyTrack(at) -> TSequence:
	return TGeomPoint.sequence([((0, 0), at(0)), ((1, 0.01), at(1)), ((2, -0.01), at(2)), ((3, 0.02), at(3)), ((4, 0), at(4))])


def test_douglas_peucker_keeps_the_endpoints_of_a_straight_line(noisyLine):
	assert noisyLine.numInstants() == 5
	simplified = noisyLine.simplifyDouglasPeucker(1.0)
	assert isinstance(simplified, TSequence)
	assert simplified.numInstants() == 2
	assert simplified.values() == [0.0, 4.0]

def test_douglas_peucker_of_a_trajectory(noisyTrack):
	simplified = noisyTrack.simplifyDouglasPeucker(1.0)
	assert simplified.numInstants() == 2
	assert simplified.values() == [Shapely.Point(0, 0), Shapely.Point(4, 0)]
	assert noisyTrack.simplifyDouglasPeucker(1.0, synchronized=True).numInstants() == 2

def test_douglas_peucker_keeps_the_instants_beyond_the_threshold(at):
	peak = TFloat.sequence([(0.0, at(0)), (2.6, at(1)), (5.0, at(2)), (2.4, at(3)), (0.0, at(4))])
	simplified = peak.simplifyDouglasPeucker(1.0)
	assert simplified.values() == [0.0, 5.0, 0.0]

def test_max_distance(noisyLine, at):
	assert noisyLine.simplifyMaxDistance(1.0).numInstants() == 2
	peak = TFloat.sequence([(0.0, at(0)), (2.6, at(1)), (5.0, at(2)), (2.4, at(3)), (0.0, at(4))])
	assert 5.0 in peak.simplifyMaxDistance(1.0).values()

def test_min_distance(at):
	sequence = TFloat.sequence([(0.0, at(0)), (0.3, at(1)), (0.1, at(2)), (5.0, at(3)), (5.2, at(4))])
	assert sequence.simplifyMinDistance(1.0).values() == [0.0, 5.0, 5.2]

def test_min_time_delta(at):
	sequence = TFloat.sequence([(0.0, at(0)), (0.3, at(1)), (0.1, at(2)), (5.0, at(3)), (5.2, at(4))])
	simplified = sequence.simplifyMinTDelta(timedelta(minutes=2))
	assert simplified.timestamps() == [at(0), at(2), at(4)]

def test_discrete_values_are_simplified_as_a_whole(at):
	discrete = TFloat.discrete([(0.0, at(0)), (0.5, at(1)), (3.0, at(2)), (3.1, at(3))])
	simplified = discrete.simplifyMinDistance(1.0)
	assert simplified.interpolation is TInterpolation.DISCRETE
	assert simplified.values() == [0.0, 3.0, 3.1]
	assert discrete.simplifyDouglasPeucker(1.0) is discrete

def test_values_without_a_deviation_are_rejected(at):
	with pytest.raises(DomainError):
		TBool.sequence([(True, at(0)), (False, at(1))]).simplifyDouglasPeucker(1.0)
	step = TFloat.sequence([(0.0, at(0)), (1.0, at(1)), (0.0, at(2))], interpolation=TInterpolation.STEP)
	with pytest.raises(DomainError):
		step.simplifyMaxDistance(1.0)

def test_douglas_peucker_of_a_straight_trajectory(at):
	straight = TSequence([TGeomPoint.instant((x, 0), at(x)) for x in range(5)], normalize=False)
	assert straight.numInstants() == 5
	simplified = straight.simplifyDouglasPeucker(0.5)
	assert simplified.values() == [Shapely.Point(0, 0), Shapely.Point(4, 0)]
	assert simplified.valueAtTimestamp(at(2)) == Shapely.Point(2, 0)
