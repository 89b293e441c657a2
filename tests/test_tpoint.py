import json
from math import pi

import pytest
import shapely

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_commons.Utils.Geometry import Encoding, Shapely, WKBVariant
from rt_temporal_core.Temporal.Interpolation import TInterpolation
from rt_temporal_core.Temporal.TSequenceSet import TSequenceSet
from rt_temporal_core.Temporal.Types import TFloat, TGeomPoint

TS0 = "2020-01-01 00:00:00+00:00"
TS10 = "2020-01-01 00:10:00+00:00"


@pytest.fixture
def track(at):
	return TGeomPoint.sequence([((0, 0), at(0)), ((3, 4), at(10))])


def test_length_and_speed(track, at):
	assert TGeomPoint.length(track) == pytest.approx(5.0)
	travelled = TGeomPoint.cumulativeLength(track)
	assert travelled.startValue() == 0.0
	assert travelled.endValue() == pytest.approx(5.0)
	assert travelled.valueAtTimestamp(at(5)) == pytest.approx(2.5)
	speed = TGeomPoint.speed(track)
	assert speed.interpolation is TInterpolation.STEP
	assert speed.valueAtTimestamp(at(5)) == pytest.approx(5.0 / 600.0)

def test_jumping_points_do_not_travel(at):
	positions = [((0, 0), at(0)), ((3, 4), at(10))]
	stepped = TGeomPoint.sequence(positions, interpolation=TInterpolation.STEP)
	assert TGeomPoint.length(stepped) == 0.0
	with pytest.raises(DomainError):
		TGeomPoint.speed(stepped)
	discrete = TGeomPoint.discrete(positions)
	assert TGeomPoint.speed(discrete) is None
	assert TGeomPoint.cumulativeLength(discrete).values() == [0.0, 0.0]

def test_coordinates(track):
	assert TGeomPoint.x(track).values() == [0.0, 3.0]
	assert TGeomPoint.y(track).values() == [0.0, 4.0]
	assert TGeomPoint.x(track).interpolation is TInterpolation.LINEAR

def test_trajectory(track, at):
	assert TGeomPoint.trajectory(track).equals(Shapely.LineString([(0, 0), (3, 4)]))
	discrete = TGeomPoint.discrete([((0, 0), at(0)), ((1, 1), at(5)), ((0, 0), at(10))])
	assert isinstance(TGeomPoint.trajectory(discrete), Shapely.MultiPoint)
	assert TGeomPoint.trajectory(TGeomPoint.instant((2, 2), at(0))).equals(Shapely.Point(2, 2))

def test_well_known_text(track):
	assert TGeomPoint.asWkt(track) == f"[POINT (0 0)@{TS0}, POINT (3 4)@{TS10}]"
	placed = TGeomPoint.setSrid(track, 4326)
	assert TGeomPoint.asEwkt(placed) == f"SRID=4326;[POINT (0 0)@{TS0}, POINT (3 4)@{TS10}]"
	assert TGeomPoint.asWkt(placed) == TGeomPoint.asWkt(track)

def test_rounded_well_known_text(at):
	track = TGeomPoint.sequence([((0.123456, 1.0), at(0)), ((2.0, 3.987654), at(10))])
	assert TGeomPoint.asWkt(track, 2) == f"[POINT (0.12 1)@{TS0}, POINT (2 3.99)@{TS10}]"
	assert TGeomPoint.values(track, 1) == [Shapely.Point(0.1, 1.0), Shapely.Point(2.0, 4.0)]

def test_geojson(track):
	document = json.loads(TGeomPoint.asGeoJson(track))
	assert document["type"] == "MovingPoint"
	assert document["coordinates"] == [[0.0, 0.0], [3.0, 4.0]]
	assert document["datetimes"] == [TS0, TS10]
	assert document["interpolation"] == "Linear"
	assert document["lower_inc"] is True
	assert "crs" not in document
	placed = json.loads(TGeomPoint.asGeoJson(TGeomPoint.setSrid(track, 4326)))
	assert placed["crs"]["properties"]["name"] == "EPSG:4326"

def test_geojson_of_a_sequence_set(track, at):
	later = TGeomPoint.sequence([((5, 5), at(20)), ((6, 6), at(30))])
	document = json.loads(TGeomPoint.asGeoJson(track.merge(later)))
	assert len(document["sequences"]) == 2
	assert document["sequences"][1]["coordinates"] == [[5.0, 5.0], [6.0, 6.0]]

def test_well_known_binary(track):
	assert shapely.from_wkb(TGeomPoint.asWkb(track)).equals(Shapely.LineString([(0, 0), (3, 4)]))
	placed = TGeomPoint.setSrid(track, 4326)
	(geom, srid) = Encoding.fromWkb(TGeomPoint.asWkb(placed, WKBVariant.NDR | WKBVariant.EXTENDED))
	assert srid == 4326
	assert geom.equals(Shapely.LineString([(0, 0), (3, 4)]))
	with pytest.raises(DomainError):
		TGeomPoint.asWkb(track, WKBVariant.NDR | WKBVariant.XDR)

def test_spatial_reference_system(track):
	assert TGeomPoint.srid(track) == 0
	placed = TGeomPoint.setSrid(track, 4326)
	assert TGeomPoint.srid(placed) == 4326
	assert placed.values() == track.values()
	assert placed != track

def test_text_with_srid_and_dates():
	track = TGeomPoint.fromText("SRID=4326;[POINT(0 0)@2020-01-01, POINT(3 4)@2020-01-02]")
	assert TGeomPoint.srid(track) == 4326
	assert TGeomPoint.length(track) == pytest.approx(5.0)
	assert TGeomPoint.fromText("[POINT(0 0)@2020-01-01, POINT(3 4)@2020-01-02]") != track

def test_only_points_have_point_operations(at):
	numbers = TFloat.sequence([(0.0, at(0)), (1.0, at(10))])
	with pytest.raises(DomainError):
		TGeomPoint.length(numbers)
	with pytest.raises(DomainError):
		TGeomPoint.asWkt(numbers)

@pytest.fixture
def crossing(at):
	"""Moves against `track`-like east-bound movement and meets it at the fifth minute."""
	return TGeomPoint.sequence([((10, 0), at(0)), ((0, 0), at(10))])

@pytest.fixture
def eastward(at):
	return TGeomPoint.sequence([((0, 0), at(0)), ((10, 0), at(10))])

def test_distance_between_moving_points(eastward, crossing, at):
	distances = TGeomPoint.distance(eastward, crossing)
	assert distances.interpolation is TInterpolation.LINEAR
	assert distances.values() == [10.0, 0.0, 10.0]
	assert distances.valueAtTimestamp(at(5)) == 0.0
	assert distances.valueAtTimestamp(at(2.5)) == pytest.approx(5.0)

def test_distance_to_a_point(eastward, at):
	distances = TGeomPoint.distance(eastward, Shapely.Point(5, 5))
	assert distances.startValue() == pytest.approx(50 ** 0.5)
	assert distances.minValue() == pytest.approx(5.0)
	assert distances.minInstant().timestamp == at(5)
	stepped = TGeomPoint.sequence([((0, 0), at(0)), ((3, 4), at(10))], interpolation=TInterpolation.STEP)
	held = TGeomPoint.distance(stepped, Shapely.Point(0, 0))
	assert held.interpolation is TInterpolation.STEP
	assert held.valueAtTimestamp(at(5)) == 0.0
	assert held.values() == [0.0, 5.0]
	discrete = TGeomPoint.discrete([((0, 0), at(0)), ((3, 4), at(10))])
	assert TGeomPoint.distance(discrete, Shapely.Point(0, 0)).values() == [0.0, 5.0]

def test_distance_needs_comparable_points(eastward, crossing, at):
	with pytest.raises(DomainError):
		TGeomPoint.distance(eastward, TGeomPoint.setSrid(crossing, 4326))
	with pytest.raises(DomainError):
		TGeomPoint.distance(eastward, Shapely.LineString([(0, 0), (1, 1)]))
	later = TGeomPoint.sequence([((0, 0), at(20)), ((1, 1), at(30))])
	assert TGeomPoint.distance(eastward, later) is None
	assert TGeomPoint.nearestApproachDistance(eastward, later) is None
	assert TGeomPoint.nearestApproachInstant(eastward, later) is None

def test_nearest_approach_to_a_geometry(eastward, at):
	target = Shapely.Point(5, 5)
	assert TGeomPoint.nearestApproachDistance(eastward, target) == pytest.approx(5.0)
	nearest = TGeomPoint.nearestApproachInstant(eastward, target)
	assert nearest.timestamp == at(5)
	assert nearest.value == Shapely.Point(5, 0)
	assert TGeomPoint.shortestLine(eastward, target).equals(Shapely.LineString([(5, 0), (5, 5)]))
	assert TGeomPoint.nearestApproachDistance(eastward, shapely.box(12, -1, 13, 1)) == pytest.approx(2.0)
	assert TGeomPoint.nearestApproachInstant(eastward, shapely.box(12, -1, 13, 1)).timestamp == at(10)

def test_nearest_approach_to_a_moving_point(eastward, crossing, at):
	assert TGeomPoint.nearestApproachDistance(eastward, crossing) == 0.0
	nearest = TGeomPoint.nearestApproachInstant(eastward, crossing)
	assert nearest.timestamp == at(5)
	assert nearest.value == Shapely.Point(5, 0)
	assert TGeomPoint.shortestLine(eastward, crossing).length == 0.0

def test_simple_trajectories(eastward, at):
	assert TGeomPoint.isSimple(eastward)
	looping = TGeomPoint.sequence([((0, 0), at(0)), ((2, 0), at(1)), ((1, 1), at(2)), ((1, -1), at(3))])
	assert not TGeomPoint.isSimple(looping)
	fragments = TGeomPoint.makeSimple(looping)
	assert len(fragments) == 2
	assert all(TGeomPoint.isSimple(f) for f in fragments)
	assert fragments[0].endTimestamp() == at(2)
	assert fragments[1].startTimestamp() == at(2)
	assert TGeomPoint.makeSimple(eastward) == [eastward]

def test_simple_jumping_points(at):
	revisiting = TGeomPoint.discrete([((0, 0), at(0)), ((1, 1), at(1)), ((0, 0), at(2))])
	assert not TGeomPoint.isSimple(revisiting)
	fragments = TGeomPoint.makeSimple(revisiting)
	assert [f.numInstants() for f in fragments] == [2, 1]
	stepped = TGeomPoint.sequence([((0, 0), at(0)), ((1, 1), at(1)), ((2, 2), at(2))], interpolation=TInterpolation.STEP)
	assert TGeomPoint.isSimple(stepped)

def test_direction_and_bearing(eastward, at):
	assert TGeomPoint.direction(eastward) == pytest.approx(pi / 2)
	back = TGeomPoint.sequence([((0, 0), at(0)), ((1, 0), at(1)), ((0, 0), at(2))])
	assert TGeomPoint.direction(back) is None
	bearings = TGeomPoint.bearing(eastward, Shapely.Point(10, 10))
	assert bearings.interpolation is TInterpolation.LINEAR
	assert bearings.startValue() == pytest.approx(pi / 4)
	assert bearings.endValue() == pytest.approx(0.0)

def test_azimuth_and_angular_difference(at):
	path = TGeomPoint.sequence([((0, 0), at(0)), ((0, 1), at(1)), ((1, 1), at(2))])
	azimuths = TGeomPoint.azimuth(path)
	assert isinstance(azimuths, TSequenceSet)
	assert azimuths.interpolation is TInterpolation.STEP
	assert azimuths.valueAtTimestamp(at(0.5)) == 0.0
	assert azimuths.valueAtTimestamp(at(1.5)) == pytest.approx(pi / 2)
	turns = TGeomPoint.angularDifference(path)
	assert turns.interpolation is TInterpolation.DISCRETE
	assert turns.values() == pytest.approx([0.0, 90.0, 0.0])
	pausing = TGeomPoint.sequence([((0, 0), at(0)), ((0, 1), at(1)), ((0, 1), at(2)), ((1, 1), at(3))])
	assert TGeomPoint.azimuth(pausing).numSequences() == 2
	stepped = TGeomPoint.sequence([((0, 0), at(0)), ((0, 1), at(1))], interpolation=TInterpolation.STEP)
	assert TGeomPoint.azimuth(stepped) is None
	assert TGeomPoint.angularDifference(stepped) is None

def test_expand(eastward):
	box = TGeomPoint.expand(eastward, 1.0)
	assert (box.x.lower, box.x.upper) == (-1.0, 11.0)
	assert (box.y.lower, box.y.upper) == (-1.0, 1.0)
	assert box.time == eastward.timespan()
	with pytest.raises(DomainError):
		TGeomPoint.expand(eastward, -1.0)

def test_time_weighted_centroid(at):
	corner = TGeomPoint.sequence([((0, 0), at(0)), ((10, 0), at(10)), ((10, 10), at(20))])
	centroid = TGeomPoint.timeWeightedCentroid(corner)
	assert (centroid.x, centroid.y) == (pytest.approx(7.5), pytest.approx(2.5))
	lingering = TGeomPoint.sequence([((0, 0), at(0)), ((0, 0), at(30)), ((10, 0), at(40))])
	assert TGeomPoint.timeWeightedCentroid(lingering).x == pytest.approx(1.25)
	discrete = TGeomPoint.discrete([((0, 0), at(0)), ((2, 2), at(10))])
	assert TGeomPoint.timeWeightedCentroid(discrete) == Shapely.Point(1, 1)
	assert TGeomPoint.timeWeightedCentroid(corner, 0) == Shapely.Point(8, 2)
