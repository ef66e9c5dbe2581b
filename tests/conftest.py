"""Shared fixtures for the chemical release hazard engine test suite."""

import sys
import os
import pytest

# Ensure project root is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models.parameters import Location, ModelParameters, MultipleSourceParameters, Source


@pytest.fixture
def ammonia_release():
    """Ground-level ammonia release: 10 kg/min, 5 m/s west wind, neutral air, 60 % RH."""
    return ModelParameters(
        chemical="ammonia",
        release_rate=10.0,
        wind_speed=5.0,
        wind_direction=270.0,
        stability_class="D",
        temperature=20.0,
        humidity=60.0,
        source_height=0.0,
        source_location=Location(40.0, -75.0),
    )


@pytest.fixture
def chlorine_release():
    """Chlorine tank release in a suburban area."""
    return ModelParameters(
        chemical="chlorine",
        release_rate=25.0,
        wind_speed=3.0,
        wind_direction=180.0,
        stability_class="E",
        temperature=15.0,
        humidity=50.0,
        source_location=Location(51.5, -0.12),
        terrain="suburban",
    )


@pytest.fixture
def two_ammonia_sources(ammonia_release):
    """Two identical ammonia releases 1 km apart on the same latitude."""
    return MultipleSourceParameters(
        base=ammonia_release,
        sources=(
            Source(id="T1", location=Location(40.0, -75.0), chemical="ammonia", release_rate=10.0),
            Source(id="T2", location=Location(40.0, -74.988), chemical="ammonia", release_rate=10.0),
        ),
    )
