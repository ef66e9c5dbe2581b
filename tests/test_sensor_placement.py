"""Tests for sensor placement planners and coordinate helpers."""

import math

import numpy as np
import pytest
from dataclasses import replace

from models.dispersion import calculate_dispersion
from models.numeric import is_valid_coordinate
from models.parameters import Location, sanitize_parameters
from optimization.geo import destination_point, downwind_bearing, to_local_meters, centroid
from optimization.sensor_placement import (
    generate_sensor_recommendations,
    place_detection_sensors,
    tier_sizes,
)


class TestGeo:
    def test_downwind_bearing(self):
        """Wind FROM the west blows toward the east."""
        assert downwind_bearing(270.0) == pytest.approx(math.pi / 2)
        assert downwind_bearing(0.0) == pytest.approx(math.pi)

    def test_destination_north(self):
        """111.32 km north is one degree of latitude."""
        p = destination_point(Location(10.0, 20.0), 111.32, 0.0)
        assert p.lat == pytest.approx(11.0)
        assert p.lng == pytest.approx(20.0)

    def test_destination_east_scaled_by_latitude(self):
        """Longitude steps widen with latitude."""
        equator = destination_point(Location(0.0, 0.0), 10.0, math.pi / 2, decimals=None)
        north = destination_point(Location(60.0, 0.0), 10.0, math.pi / 2, decimals=None)
        assert north.lng == pytest.approx(2.0 * equator.lng, rel=1e-9)

    def test_local_projection_roundtrip(self):
        """A destination point projects back to its distance and bearing."""
        origin = Location(45.0, 7.0)
        p = destination_point(origin, 3.0, math.radians(30.0), decimals=None)
        x, y = to_local_meters(origin, p.lat, p.lng)
        assert np.hypot(x, y) == pytest.approx(3000.0)
        assert math.degrees(math.atan2(x, y)) == pytest.approx(30.0)

    def test_longitude_wraps_at_antimeridian(self):
        """Crossing 180 degrees east continues from -180."""
        p = destination_point(Location(-17.8, 179.999), 2.0, math.pi / 2)
        assert -180.0 <= p.lng < -179.9
        assert p.lat == pytest.approx(-17.8)

    def test_sensors_near_antimeridian_are_valid(self, ammonia_release):
        """Every recommended sensor has a valid coordinate."""
        params = replace(ammonia_release, source_location=Location(-17.8, 179.999))
        zones = calculate_dispersion(params)
        for sensor in generate_sensor_recommendations(params, zones, 12):
            assert is_valid_coordinate(sensor.location.lat, sensor.location.lng)

    def test_centroid(self):
        c = centroid([Location(0.0, 0.0), Location(2.0, 4.0)])
        assert (c.lat, c.lng) == (1.0, 2.0)


class TestPlaceDetectionSensors:
    def test_first_sensor_at_source(self, ammonia_release):
        """The network starts with a fixed sensor on the source."""
        params = sanitize_parameters(ammonia_release)
        sensors = place_detection_sensors(params, calculate_dispersion(params))
        assert sensors[0].location == Location(40.0, -75.0)
        assert sensors[0].sensor_type == "fixed"
        assert sensors[0].priority == 1

    def test_sensors_step_downwind(self, ammonia_release):
        """West wind: sensors move east in steps of a quarter of the yellow radius."""
        params = sanitize_parameters(ammonia_release)
        zones = calculate_dispersion(params)
        sensors = place_detection_sensors(params, zones)
        lngs = [s.location.lng for s in sensors]
        assert lngs == sorted(lngs)
        assert lngs[1] > lngs[0]
        # alternating +/-0.3 rad offsets put sensors on both sides of the axis
        lats = [s.location.lat for s in sensors[1:]]
        assert min(lats) < 40.0 < max(lats)

    def test_types_and_limit(self, ammonia_release):
        """At most five sensors; the last two are mobile."""
        params = sanitize_parameters(replace(ammonia_release, sensor_count=20))
        sensors = place_detection_sensors(params, calculate_dispersion(params))
        assert len(sensors) == 5
        assert [s.sensor_type for s in sensors] == ["fixed", "fixed", "fixed", "mobile", "mobile"]

    def test_small_networks(self, ammonia_release):
        """One or two sensors are honoured."""
        for count in (1, 2):
            params = sanitize_parameters(replace(ammonia_release, sensor_count=count))
            assert len(place_detection_sensors(params, calculate_dispersion(params))) == count


class TestGenerateSensorRecommendations:
    def test_tier_sizes(self):
        """Eight sensors split 3 downwind, 2 crosswind, 2 perimeter plus the source."""
        assert tier_sizes(8) == (3, 2, 2)
        assert tier_sizes(20) == (3, 3, 13)
        assert tier_sizes(2) == (1, 1, 1)

    def test_default_plan(self, ammonia_release):
        """Eight sensors ordered by priority with the right types."""
        zones = calculate_dispersion(ammonia_release)
        recs = generate_sensor_recommendations(ammonia_release, zones)
        assert len(recs) == 8
        assert [r.priority for r in recs] == [1, 2, 2, 2, 3, 3, 4, 4]
        for r in recs:
            assert r.sensor_type == ("fixed" if r.priority <= 2 else "mobile")

    def test_never_exceeds_budget(self, ammonia_release):
        """The plan is truncated to the sensor budget."""
        zones = calculate_dispersion(ammonia_release)
        for budget in range(1, 25):
            assert len(generate_sensor_recommendations(ammonia_release, zones, budget)) <= budget

    def test_last_downwind_sensor_at_orange_boundary(self, ammonia_release):
        """The outermost downwind sensor sits on the orange boundary, due downwind."""
        zones = calculate_dispersion(ammonia_release)
        recs = generate_sensor_recommendations(ammonia_release, zones)
        downwind = [r for r in recs if r.priority == 2]
        expected = destination_point(
            Location(40.0, -75.0), zones.orange.distance / 1000.0, math.pi / 2
        )
        assert downwind[-1].location.lng == pytest.approx(expected.lng, abs=1e-4)
        assert downwind[-1].location.lat == pytest.approx(40.0, abs=1e-4)

    def test_crosswind_sensors_on_both_flanks(self, ammonia_release):
        """Crosswind sensors alternate north and south of an east-bound plume."""
        zones = calculate_dispersion(ammonia_release)
        recs = generate_sensor_recommendations(ammonia_release, zones)
        crosswind = [r for r in recs if r.priority == 3]
        lats = sorted(r.location.lat for r in crosswind)
        assert lats[0] < 40.0 < lats[-1]

    def test_perimeter_near_yellow(self, ammonia_release):
        """Perimeter sensors sit at 90 % of the yellow distance."""
        zones = calculate_dispersion(ammonia_release)
        recs = generate_sensor_recommendations(ammonia_release, zones)
        origin = Location(40.0, -75.0)
        for r in (r for r in recs if r.priority == 4):
            x, y = to_local_meters(origin, r.location.lat, r.location.lng)
            assert np.hypot(x, y) == pytest.approx(0.9 * zones.yellow.distance, rel=0.02)
