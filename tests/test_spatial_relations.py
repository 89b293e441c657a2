"""
Tests of the temporal spatial relationships of temporal points with geometries and with each other.
"""
import pytest
import shapely

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils.Geometry import Shapely
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.Types import TGeomPoint


@pytest.fixture
def eastward(at):
	"""One unit to the east every minute, from the origin."""
	return TGeomPoint.sequence([((0, 0), at(0)), ((10, 0), at(10))])

@pytest.fixture
def square():
	return shapely.box(2, -1, 4, 1)


def holdsAt(result, at, minutes: list[float]) -> list[bool]:
	return [result.valueAtTimestamp(at(m)) for m in minutes]

def test_intersects_while_crossing_the_region(eastward, square, at):
	result = TGeomPoint.intersects(eastward, square)
	assert result.interpolation is TInterpolation.STEP
	assert holdsAt(result, at, [0, 1, 2, 3, 4, 5, 10]) == [False, False, True, True, True, False, False]
	assert holdsAt(TGeomPoint.disjoint(eastward, square), at, [1, 3, 5]) == [True, False, True]

def test_touches_the_boundary_only(eastward, square, at):
	result = TGeomPoint.touches(eastward, square)
	assert holdsAt(result, at, [1, 2, 3, 4, 5]) == [False, True, False, True, False]
	assert not any(TGeomPoint.touches(eastward, Shapely.Point(5, 0)).values())

def test_contained_in_the_interior_only(eastward, square, at):
	result = TGeomPoint.isSpatiallyContainedIn(eastward, square)
	assert holdsAt(result, at, [1, 2, 3, 4, 5]) == [False, False, True, False, False]

def test_relations_of_jumping_points(square, at):
	stepped = TGeomPoint.sequence([((0, 0), at(0)), ((3, 0), at(10))], interpolation=TInterpolation.STEP)
	result = TGeomPoint.intersects(stepped, square)
	assert result.interpolation is TInterpolation.STEP
	assert holdsAt(result, at, [5, 10]) == [False, True]
	discrete = TGeomPoint.discrete([((0, 0), at(0)), ((3, 0), at(10))])
	result = TGeomPoint.isSpatiallyContainedIn(discrete, square)
	assert result.interpolation is TInterpolation.DISCRETE
	assert result.values() == [False, True]

def test_relations_need_a_geometry(eastward):
	with pytest.raises(DomainError):
		TGeomPoint.intersects(eastward, shapely.Polygon())
	with pytest.raises(DomainError):
		TGeomPoint.touches(eastward, "POLYGON((0 0, 1 0, 1 1, 0 0))")

def test_within_distance_of_a_moving_point(eastward, at):
	oncoming = TGeomPoint.sequence([((10, 0), at(0)), ((0, 0), at(10))])
	result = TGeomPoint.withinDistance(eastward, oncoming, 2.0)
	assert holdsAt(result, at, [0, 3, 4, 5, 6, 7, 10]) == [False, False, True, True, True, False, False]
	later = TGeomPoint.sequence([((0, 0), at(20)), ((1, 1), at(30))])
	assert TGeomPoint.withinDistance(eastward, later, 2.0) is None

def test_within_distance_of_a_point(eastward, at):
	result = TGeomPoint.withinDistance(eastward, Shapely.Point(5, 3), 5.0)
	assert holdsAt(result, at, [0, 0.5, 1, 5, 9, 9.5, 10]) == [False, False, True, True, True, False, False]

def test_within_distance_of_a_geometry(eastward, at):
	wall = Shapely.LineString([(5, 3), (5, 10)])
	result = TGeomPoint.withinDistance(eastward, wall, 5.0)
	assert holdsAt(result, at, [0, 2, 5, 8, 10]) == [False, True, True, True, False]
	with pytest.raises(DomainError):
		TGeomPoint.withinDistance(eastward, wall, -1.0)
