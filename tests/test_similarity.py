import pytest

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_core.Temporal.Types import TBool, TFloat, TGeomPoint, TInt


def test_distances_between_numbers(at):
	a = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	b = TFloat.sequence([(1.0, at(0)), (11.0, at(10))])
	assert a.frechetDistance(b) == pytest.approx(1.0)
	assert a.dynTimeWarpDistance(b) == pytest.approx(2.0)
	assert a.hausdorffDistance(b) == pytest.approx(1.0)

def test_a_value_is_at_no_distance_from_itself(at):
	track = TGeomPoint.sequence([((0, 0), at(0)), ((3, 4), at(10)), ((6, 0), at(20))])
	assert track.frechetDistance(track) == 0.0
	assert track.dynTimeWarpDistance(track) == 0.0
	assert track.hausdorffDistance(track) == 0.0

def test_distances_between_points(at):
	a = TGeomPoint.discrete([((0, 0), at(0)), ((1, 0), at(10))])
	b = TGeomPoint.discrete([((0, 1), at(0)), ((1, 1), at(10)), ((2, 1), at(20))])
	assert a.hausdorffDistance(b) == pytest.approx(2 ** 0.5)
	assert a.frechetDistance(b) == pytest.approx(2 ** 0.5)
	assert a.dynTimeWarpDistance(b) == pytest.approx(2 + 2 ** 0.5)

def test_distances_need_comparable_values(at):
	numbers = TFloat.sequence([(0.0, at(0)), (10.0, at(10))])
	with pytest.raises(DomainError):
		numbers.frechetDistance(TInt.sequence([(0, at(0)), (10, at(10))]))
	flags = TBool.sequence([(True, at(0)), (False, at(10))])
	with pytest.raises(DomainError):
		flags.hausdorffDistance(flags)
