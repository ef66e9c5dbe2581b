"""
Weather abstraction for the meteorological inputs of a dispersion run.

Provides a pluggable interface for live weather integration.  Providers
return already-parsed ``WeatherObservation`` values; ``apply_weather``
merges one into ``ModelParameters``.  The StubWeatherProvider returns
configurable hardcoded values for development and testing.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import List, Optional

from config import STABILITY_FACTORS
from models.parameters import ModelParameters


@dataclass
class WeatherObservation:
    """A single weather observation at a point in time."""

    wind_speed: float               # m/s
    wind_direction: float           # Meteorological degrees (0-360)
    stability_class: str            # Pasquill-Gifford class A-F
    temperature: Optional[float] = None    # C
    humidity: Optional[float] = None       # % RH
    pressure: Optional[float] = None       # hPa
    timestamp: Optional[datetime] = None
    station_id: Optional[str] = None

    def __post_init__(self):
        if not math.isfinite(self.wind_speed) or self.wind_speed < 0:
            raise ValueError("Wind speed must be a finite value >= 0")
        if not math.isfinite(self.wind_direction):
            raise ValueError("Wind direction must be finite")
        self.wind_direction = self.wind_direction % 360.0
        self.stability_class = self.stability_class.strip().upper()
        if self.stability_class not in STABILITY_FACTORS:
            raise ValueError(f"Invalid stability class: {self.stability_class}")
        if self.humidity is not None and not 0.0 <= self.humidity <= 100.0:
            raise ValueError(f"Relative humidity must be in [0, 100], got {self.humidity}")
        if self.pressure is not None and not self.pressure > 0:
            raise ValueError(f"Pressure must be > 0, got {self.pressure}")


class WeatherProvider(ABC):
    """Abstract base class for weather data sources."""

    @abstractmethod
    def get_current_weather(self) -> WeatherObservation:
        """Return the most recent observation."""
        ...

    @abstractmethod
    def get_forecast(self, hours_ahead: int = 6) -> List[WeatherObservation]:
        """Return the forecast for the next N hours.

        Args:
            hours_ahead: Number of hours to forecast.

        Returns:
            List of WeatherObservation, one per hour.
        """
        ...


class StubWeatherProvider(WeatherProvider):
    """Configurable stub that returns hardcoded weather.

    Args:
        wind_speed: Wind speed (m/s).
        wind_direction: Wind direction (meteorological degrees).
        stability_class: Pasquill-Gifford class.
        temperature: Air temperature (C).
        humidity: Relative humidity (%).
        pressure: Station pressure (hPa).
        station_id: Optional station identifier.
    """

    def __init__(
        self,
        wind_speed: float = 3.0,
        wind_direction: float = 270.0,
        stability_class: str = "D",
        temperature: float = 20.0,
        humidity: float = 50.0,
        pressure: float = 1013.25,
        station_id: str = "STUB-001",
    ):
        self.wind_speed = wind_speed
        self.wind_direction = wind_direction
        self.stability_class = stability_class
        self.temperature = temperature
        self.humidity = humidity
        self.pressure = pressure
        self.station_id = station_id

    def _observation(self, timestamp: datetime) -> WeatherObservation:
        return WeatherObservation(
            wind_speed=self.wind_speed,
            wind_direction=self.wind_direction,
            stability_class=self.stability_class,
            temperature=self.temperature,
            humidity=self.humidity,
            pressure=self.pressure,
            timestamp=timestamp,
            station_id=self.station_id,
        )

    def get_current_weather(self) -> WeatherObservation:
        return self._observation(datetime.now())

    def get_forecast(self, hours_ahead: int = 6) -> List[WeatherObservation]:
        base_time = datetime.now()
        return [self._observation(base_time + timedelta(hours=h)) for h in range(hours_ahead)]


def apply_weather(params: ModelParameters, observation: WeatherObservation) -> ModelParameters:
    """
    Return *params* with the observed weather filled in.

    Wind and stability always come from the observation; temperature,
    humidity and pressure only when observed.
    """
    updates = {
        "wind_speed": observation.wind_speed,
        "wind_direction": observation.wind_direction,
        "stability_class": observation.stability_class,
    }
    if observation.temperature is not None:
        updates["temperature"] = observation.temperature
    if observation.humidity is not None:
        updates["humidity"] = observation.humidity
    if observation.pressure is not None:
        updates["ambient_pressure"] = observation.pressure
    return replace(params, **updates)
