"""Tests for multi-source aggregation, sensor planning and superposition."""

import numpy as np
import pytest
from dataclasses import replace

from models.dispersion import calculate_detailed_dispersion
from models.parameters import Location, MultipleSourceParameters, Source
from optimization.multi_source import (
    calculate_multiple_source_dispersion,
    combined_concentration,
    optimize_sensor_placement_multiple_sources,
)


class TestCalculateMultipleSourceDispersion:
    def test_two_identical_sources(self, two_ammonia_sources):
        """Combined red distance is the maximum; released mass is the sum."""
        result = calculate_multiple_source_dispersion(two_ammonia_sources)
        individual = [s.results for s in result.individual_sources]
        assert len(individual) == 2
        assert result.combined_zones.red.distance == max(r.red_zone.distance for r in individual)
        assert result.total_mass_released == sum(r.mass_released for r in individual)
        assert result.total_mass_released == 1200

    def test_areas_and_population_sum(self, two_ammonia_sources):
        """Combined areas and affected population add up over sources."""
        result = calculate_multiple_source_dispersion(two_ammonia_sources)
        individual = [s.results for s in result.individual_sources]
        assert result.combined_zones.yellow.area == pytest.approx(
            sum(r.yellow_zone.area for r in individual)
        )
        assert result.affected_population == sum(r.total_population_at_risk for r in individual)

    def test_mixed_chemicals_take_maxima(self, two_ammonia_sources):
        """A more hazardous second source drives the combined extents."""
        params = replace(two_ammonia_sources, sources=(
            two_ammonia_sources.sources[0],
            Source(id="C1", location=Location(40.01, -75.0), chemical="chlorine", release_rate=40.0),
        ))
        result = calculate_multiple_source_dispersion(params)
        by_id = {s.source_id: s.results for s in result.individual_sources}
        assert result.combined_zones.yellow.distance == max(
            by_id["T1"].yellow_zone.distance, by_id["C1"].yellow_zone.distance
        )
        assert result.max_concentration == pytest.approx(
            max(r.maximum_concentration for r in by_id.values())
        )

    def test_source_overrides(self, two_ammonia_sources):
        """Per-source temperature and height replace the shared values."""
        source = Source(id="HOT", location=Location(40.0, -75.0), chemical="ammonia",
                        release_rate=10.0, temperature=35.0, source_height=20.0)
        params = replace(two_ammonia_sources, sources=(source,))
        result = calculate_multiple_source_dispersion(params)
        expected = calculate_detailed_dispersion(
            replace(two_ammonia_sources.base, temperature=35.0, source_height=20.0)
        )
        assert result.individual_sources[0].results == expected

    def test_default_source_height(self, two_ammonia_sources):
        """Sources without a height are released 2 m above ground."""
        result = calculate_multiple_source_dispersion(two_ammonia_sources)
        expected = calculate_detailed_dispersion(replace(
            two_ammonia_sources.base, source_height=2.0, source_location=Location(40.0, -75.0)
        ))
        assert result.individual_sources[0].results == expected

    def test_evacuation_zones(self, two_ammonia_sources):
        """Each source contributes a high, medium and low priority circle."""
        result = calculate_multiple_source_dispersion(two_ammonia_sources)
        zones = result.priority_evacuation_zones
        assert [z.priority for z in zones] == ["high", "medium", "low"] * 2
        assert [z.source_id for z in zones] == ["T1"] * 3 + ["T2"] * 3
        first = result.individual_sources[0].results
        assert zones[0].radius == first.red_zone.distance
        assert zones[2].radius == first.yellow_zone.distance
        assert zones[3].center == Location(40.0, -74.988)

    def test_no_sources(self, ammonia_release):
        """An empty scenario yields zero totals."""
        result = calculate_multiple_source_dispersion(MultipleSourceParameters(base=ammonia_release))
        assert result.total_mass_released == 0
        assert result.affected_population == 0
        assert result.combined_zones.red.distance == 0
        assert result.priority_evacuation_zones == ()


class TestOptimizeSensorPlacement:
    def test_default_budget(self, two_ammonia_sources):
        """Two fixed source sensors, one midpoint sensor and ten perimeter sensors."""
        sensors = optimize_sensor_placement_multiple_sources(two_ammonia_sources)
        assert len(sensors) == 13
        assert [s.priority for s in sensors[:3]] == [1, 1, 2]
        assert sensors[0].coverage == ("T1",)
        assert sensors[2].coverage == ("T1", "T2")
        assert sensors[2].location == Location(40.0, -74.994)
        assert all(s.priority == 3 and s.sensor_type == "mobile" for s in sensors[3:])

    def test_budget_respected(self, two_ammonia_sources):
        """The plan never exceeds the sensor budget."""
        for budget in (0, 1, 2, 3, 5, 8, 15, 30):
            sensors = optimize_sensor_placement_multiple_sources(two_ammonia_sources, budget)
            assert len(sensors) <= budget
        assert len(optimize_sensor_placement_multiple_sources(two_ammonia_sources, 2)) == 2

    def test_perimeter_coverage(self, two_ammonia_sources):
        """Perimeter sensors cover at least one known source."""
        sensors = optimize_sensor_placement_multiple_sources(two_ammonia_sources)
        for s in sensors[3:]:
            assert len(s.coverage) >= 1
            assert set(s.coverage) <= {"T1", "T2"}

    def test_perimeter_mostly_downwind(self, two_ammonia_sources):
        """With a west wind the perimeter fans out to the east of the sources."""
        sensors = optimize_sensor_placement_multiple_sources(two_ammonia_sources)
        east = [s for s in sensors[3:] if s.location.lng > -74.994]
        assert len(east) > len(sensors[3:]) / 2

    def test_large_budget_fans_both_flanks(self, two_ammonia_sources):
        """A budget beyond the perimeter cap still spreads sensors evenly about the plume axis."""
        sensors = optimize_sensor_placement_multiple_sources(two_ammonia_sources, 30)
        perimeter = [s for s in sensors if s.priority == 3]
        assert len(perimeter) == 10
        north = [s for s in perimeter if s.location.lat > 40.0]
        south = [s for s in perimeter if s.location.lat < 40.0]
        assert len(north) == len(south) == 5
        assert all(s.location.lng > -74.994 for s in perimeter)


class TestCombinedConcentration:
    def test_superposition(self, two_ammonia_sources):
        """The combined field is the sum of the single-source fields."""
        lats = np.array([40.0, 40.001, 39.999])
        lngs = np.array([-74.95, -74.96, -74.95])
        both = combined_concentration(two_ammonia_sources, lats, lngs)
        singles = [
            combined_concentration(replace(two_ammonia_sources, sources=(s,)), lats, lngs)
            for s in two_ammonia_sources.sources
        ]
        np.testing.assert_allclose(both, singles[0] + singles[1], rtol=1e-7)
        assert np.all(both > 0)

    def test_upwind_receptor_is_clean(self, two_ammonia_sources):
        """Receptors west of both sources see nothing in a west wind."""
        conc = combined_concentration(two_ammonia_sources, 40.0, -75.05)
        assert float(conc) == 0.0

    def test_scalar_and_grid_shapes(self, two_ammonia_sources):
        """Output shape follows the receptor input."""
        assert np.ndim(combined_concentration(two_ammonia_sources, 40.0, -74.9)) == 0
        lat_grid, lng_grid = np.meshgrid(np.linspace(39.99, 40.01, 4), np.linspace(-74.99, -74.9, 5))
        assert combined_concentration(two_ammonia_sources, lat_grid, lng_grid).shape == (5, 4)

    def test_no_sources(self, ammonia_release):
        """Without sources the field is zero."""
        conc = combined_concentration(MultipleSourceParameters(base=ammonia_release), [40.0], [-74.9])
        np.testing.assert_array_equal(conc, [0.0])
