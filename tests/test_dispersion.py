"""Tests for the dispersion entry points."""

import math

import numpy as np
import pytest
from dataclasses import replace

import models.dispersion as dispersion
from models.dispersion import (
    calculate_base_distance,
    calculate_dispersion,
    calculate_detailed_dispersion,
    default_zone_data,
    maximum_concentration,
)
from models.hazard_zones import ellipse_area


def _assert_ordered(zones):
    assert zones.red.distance < zones.orange.distance < zones.yellow.distance
    assert zones.red.concentration >= zones.orange.concentration >= zones.yellow.concentration


class TestCalculateDispersion:
    def test_ammonia_scenario(self, ammonia_release):
        """Ammonia at 10 kg/min, 5 m/s, class D, 60 % RH."""
        zones = calculate_dispersion(ammonia_release)
        # base = 1.0 * 0.8 * 1.0 * 5^-0.8 * 0.92 * 1.0 * 5 km
        base_m = 0.8 * 5 ** -0.8 * 0.92 * 5 * 1000.0
        assert zones.yellow.distance == pytest.approx(base_m, abs=1.0)
        assert zones.orange.distance == pytest.approx(0.6 * base_m, abs=1.0)
        assert zones.red.distance == pytest.approx(0.3 * base_m, abs=1.0)
        assert zones.orange.concentration == pytest.approx(160 * 17.03 / 24.45, abs=0.01)
        _assert_ordered(zones)

    def test_distances_are_whole_meters(self, chlorine_release):
        """Zone distances are reported in whole meters."""
        for _, zone in calculate_dispersion(chlorine_release).items():
            assert zone.distance == float(int(zone.distance))

    @pytest.mark.parametrize("chemical", [
        "chlorine", "ammonia", "hydrogen sulfide", "sulfur dioxide", "methane",
        "carbon monoxide", "benzene", "ethylene oxide", "hydrogen cyanide", "phosgene",
        "unobtainium",
    ])
    def test_ordering_for_every_chemical(self, ammonia_release, chemical):
        """Zones are strictly ordered for table and unknown chemicals."""
        _assert_ordered(calculate_dispersion(replace(ammonia_release, chemical=chemical)))

    def test_ordering_under_adversarial_inputs(self, ammonia_release):
        """Extreme inputs still produce ordered, finite zones."""
        cases = [
            dict(release_rate=1e-9, wind_speed=100.0, stability_class="A"),
            dict(release_rate=1e6, wind_speed=0.0, stability_class="F"),
            dict(release_rate=-5.0, humidity=500.0, temperature=-400.0),
            dict(source_height=5000.0, release_temperature=1000.0),
            dict(is_indoor=True, terrain="forest"),
        ]
        for overrides in cases:
            zones = calculate_dispersion(replace(ammonia_release, **overrides))
            _assert_ordered(zones)
            for _, zone in zones.items():
                assert math.isfinite(zone.distance) and math.isfinite(zone.concentration)

    def test_wind_monotonicity(self, ammonia_release):
        """Stronger wind never lengthens the yellow zone."""
        yellows = [
            calculate_dispersion(replace(ammonia_release, wind_speed=u)).yellow.distance
            for u in (0.5, 1.0, 2.0, 5.0, 10.0, 20.0)
        ]
        assert all(a >= b for a, b in zip(yellows, yellows[1:]))

    def test_release_rate_sqrt2_scaling(self, ammonia_release):
        """Doubling the release rate scales the base distance by sqrt(2)."""
        d1 = calculate_base_distance(replace(ammonia_release, release_rate=20.0))
        d2 = calculate_base_distance(replace(ammonia_release, release_rate=40.0))
        assert d2 / d1 == pytest.approx(math.sqrt(2.0))

        y1 = calculate_dispersion(replace(ammonia_release, release_rate=20.0)).yellow.distance
        y2 = calculate_dispersion(replace(ammonia_release, release_rate=40.0)).yellow.distance
        assert y2 / y1 == pytest.approx(math.sqrt(2.0), rel=2e-3)

    def test_stable_air_reaches_further(self, ammonia_release):
        """Class F yellow distance exceeds class A."""
        f = calculate_dispersion(replace(ammonia_release, stability_class="F"))
        a = calculate_dispersion(replace(ammonia_release, stability_class="A"))
        assert f.yellow.distance > a.yellow.distance

    def test_deterministic(self, chlorine_release):
        """Identical inputs give identical outputs."""
        assert calculate_dispersion(chlorine_release) == calculate_dispersion(chlorine_release)

    def test_nan_wind_uses_default(self, ammonia_release):
        """NaN wind speed resolves to the 5 m/s default."""
        nan_wind = calculate_dispersion(replace(ammonia_release, wind_speed=float("nan")))
        assert nan_wind == calculate_dispersion(ammonia_release)

    def test_zero_wind_is_finite(self, ammonia_release):
        """Calm conditions give finite, ordered zones."""
        zones = calculate_dispersion(replace(ammonia_release, wind_speed=0.0))
        _assert_ordered(zones)
        assert zones.yellow.distance > calculate_dispersion(ammonia_release).yellow.distance

    def test_case_insensitive_chemical(self, ammonia_release):
        """Chemical names match regardless of case and padding."""
        shouted = calculate_dispersion(replace(ammonia_release, chemical="  AMMONIA "))
        assert shouted == calculate_dispersion(ammonia_release)

    def test_internal_failure_returns_default(self, ammonia_release, monkeypatch):
        """An unexpected exception maps to the conservative default zones."""
        def boom(*args, **kwargs):
            raise RuntimeError("library failure")

        monkeypatch.setattr(dispersion, "compute_base_distance", boom)
        assert calculate_dispersion(ammonia_release) == default_zone_data()

    def test_default_zones(self):
        """Default zones are 500 / 1000 / 1500 m."""
        zones = default_zone_data()
        assert (zones.red.distance, zones.orange.distance, zones.yellow.distance) == (500, 1000, 1500)
        _assert_ordered(zones)


class TestCalculateDetailedDispersion:
    def test_zones_match_basic_calculation(self, ammonia_release):
        """Detailed zones carry the same distances and concentrations."""
        zones = calculate_dispersion(ammonia_release)
        detailed = calculate_detailed_dispersion(ammonia_release)
        for (_, basic), (_, full) in zip(zones.items(), detailed.zones()):
            assert full.distance == basic.distance
            assert full.concentration == basic.concentration

    def test_mass_balance(self, ammonia_release):
        """Mass defaults to 60 minutes of release; evaporation is per second."""
        detailed = calculate_detailed_dispersion(ammonia_release)
        assert detailed.mass_released == 600
        assert detailed.evaporation_rate == pytest.approx(0.17)

        longer = calculate_detailed_dispersion(replace(ammonia_release, leak_duration=15.0))
        assert longer.mass_released == 150

    def test_areas_partition_yellow_ellipse(self, ammonia_release):
        """Zone areas are positive and sum to the yellow ellipse."""
        detailed = calculate_detailed_dispersion(ammonia_release)
        areas = [zone.area for _, zone in detailed.zones()]
        assert all(a > 0 for a in areas)
        assert sum(areas) == pytest.approx(
            ellipse_area(detailed.yellow_zone.distance / 1000.0, 5.0), abs=0.02
        )

    def test_population_follows_terrain(self, ammonia_release):
        """Urban terrain has more people at risk per km^2 than rural."""
        urban = calculate_detailed_dispersion(replace(ammonia_release, terrain="urban"))
        for _, zone in urban.zones():
            assert zone.population_at_risk == round(zone.area * 3000)
        rural = calculate_detailed_dispersion(replace(ammonia_release, terrain="rural"))
        assert urban.total_population_at_risk > rural.total_population_at_risk

    def test_dispersion_coefficients_at_yellow(self, ammonia_release):
        """Sigmas are evaluated at the yellow distance."""
        from models.plume_geometry import compute_sigma
        detailed = calculate_detailed_dispersion(ammonia_release)
        sy, sz = compute_sigma(detailed.yellow_zone.distance, "D")
        assert detailed.dispersion_coefficients.sigma_y == pytest.approx(float(sy), abs=0.01)
        assert detailed.dispersion_coefficients.sigma_z == pytest.approx(float(sz), abs=0.01)

    def test_maximum_concentration(self, ammonia_release):
        """Q / (pi u sigma_y sigma_z) with Q in mg/s."""
        detailed = calculate_detailed_dispersion(ammonia_release)
        c = detailed.dispersion_coefficients
        expected = 10.0 * 1e6 / 60.0 / (math.pi * 5.0 * c.sigma_y * c.sigma_z)
        assert detailed.maximum_concentration == pytest.approx(expected, abs=0.5)
        assert maximum_concentration(10.0, 0.0, 1.0, 1.0) == pytest.approx(
            10.0 * 1e6 / 60.0 / (math.pi * 0.5)
        )

    def test_lethal_distance(self, ammonia_release):
        """Lethal distance is 70 % of the red radius."""
        detailed = calculate_detailed_dispersion(ammonia_release)
        assert detailed.lethal_distance == pytest.approx(0.7 * detailed.red_zone.distance, abs=0.01)

    def test_profile_spans_past_yellow(self, ammonia_release):
        """Profile starts at the red concentration and runs to 1.2 x yellow."""
        detailed = calculate_detailed_dispersion(ammonia_release)
        profile = detailed.concentration_profile
        assert len(profile) == 21
        assert profile[0].concentration == pytest.approx(detailed.red_zone.concentration)
        assert profile[-1].distance == pytest.approx(1.2 * detailed.yellow_zone.distance, abs=0.01)

    def test_detection_metrics_present(self, ammonia_release):
        """Detection fields are filled with default sensor settings."""
        detailed = calculate_detailed_dispersion(ammonia_release)
        assert 0.0 <= detailed.detection_probability <= 1.0
        assert detailed.time_to_detection >= 1
        assert detailed.detection_threshold == pytest.approx(0.5)
        assert detailed.false_alarm_rate == pytest.approx(1.0)
        assert len(detailed.recommended_sensor_locations) == 5

    def test_failure_path_uses_defaults(self, ammonia_release, monkeypatch):
        """calculate_detailed_dispersion never raises past its boundary."""
        monkeypatch.setattr(
            dispersion, "calculate_leak_detection",
            _fail_once(dispersion.calculate_leak_detection),
        )
        detailed = calculate_detailed_dispersion(ammonia_release)
        assert detailed.red_zone.distance == 500
        assert np.isfinite(detailed.maximum_concentration)


def _fail_once(func):
    """Wrap *func* so that its first call raises."""
    state = {"failed": False}

    def wrapper(*args, **kwargs):
        if not state["failed"]:
            state["failed"] = True
            raise RuntimeError("transient failure")
        return func(*args, **kwargs)

    return wrapper
