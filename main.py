"""
Chemical release hazard engine - command line.

Runs the dispersion engine for one release (or several) and prints the
result as JSON.

Usage:
    python main.py zones --chemical chlorine --release-rate 25 --wind-speed 3
    python main.py detailed --chemical ammonia --stability F --terrain urban
    python main.py sensors --chemical ammonia --count 8
    python main.py health --chemical ammonia --concentration 150 --minutes 30
    python main.py protect --chemical chlorine --shelter indoor
    python main.py multi --source T1,40.0,-75.0,chlorine,20 --source T2,40.01,-75.0,ammonia,10
"""

import argparse
import json
import logging
from dataclasses import asdict

from config import (
    DEFAULT_CHEMICAL,
    DEFAULT_RELEASE_RATE,
    DEFAULT_WIND_SPEED,
    DEFAULT_WIND_DIRECTION,
    DEFAULT_STABILITY_CLASS,
    DEFAULT_TEMPERATURE_C,
    DEFAULT_HUMIDITY,
    DEFAULT_RECOMMENDATION_COUNT,
    DEFAULT_MULTI_SOURCE_SENSOR_COUNT,
)
from data.chemicals import FileChemicalLookup
from models.dispersion import calculate_dispersion, calculate_detailed_dispersion
from models.environment import describe_stability_class
from models.health_impact import SHELTER_TYPES, calculate_health_impact, evaluate_protective_actions
from models.parameters import Location, ModelParameters, MultipleSourceParameters, Source
from optimization.multi_source import (
    calculate_multiple_source_dispersion,
    optimize_sensor_placement_multiple_sources,
)
from optimization.sensor_placement import generate_sensor_recommendations


logger = logging.getLogger(__name__)


def _add_release_arguments(parser):
    parser.add_argument("--chemical", default=DEFAULT_CHEMICAL, help="Chemical name")
    parser.add_argument("--release-rate", type=float, default=DEFAULT_RELEASE_RATE,
                        help="Release rate (kg/min)")
    parser.add_argument("--wind-speed", type=float, default=DEFAULT_WIND_SPEED, help="Wind speed (m/s)")
    parser.add_argument("--wind-direction", type=float, default=DEFAULT_WIND_DIRECTION,
                        help="Wind direction, degrees the wind blows FROM")
    parser.add_argument("--stability", default=DEFAULT_STABILITY_CLASS, help="Pasquill-Gifford class A-F")
    parser.add_argument("--temperature", type=float, default=DEFAULT_TEMPERATURE_C,
                        help="Ambient temperature (C)")
    parser.add_argument("--humidity", type=float, default=DEFAULT_HUMIDITY, help="Relative humidity (%%)")
    parser.add_argument("--release-temperature", type=float, default=None, help="Release temperature (C)")
    parser.add_argument("--source-height", type=float, default=0.0, help="Release height (m)")
    parser.add_argument("--lat", type=float, default=0.0, help="Source latitude")
    parser.add_argument("--lng", type=float, default=0.0, help="Source longitude")
    parser.add_argument("--pressure", type=float, default=None, help="Ambient pressure (hPa)")
    parser.add_argument("--terrain", default=None, help="urban, suburban, rural, water or forest")
    parser.add_argument("--indoor", action="store_true", help="Release inside a building")
    parser.add_argument("--leak-duration", type=float, default=None, help="Release duration (min)")
    parser.add_argument("--sensor-threshold", type=float, default=None, help="Sensor threshold (mg/m^3)")
    parser.add_argument("--sensor-count", type=int, default=None, help="Deployed sensors")
    parser.add_argument("--monitoring-mode", choices=("continuous", "batch"), default="continuous")


def _params_from_args(args) -> ModelParameters:
    return ModelParameters(
        chemical=args.chemical,
        release_rate=args.release_rate,
        wind_speed=args.wind_speed,
        wind_direction=args.wind_direction,
        stability_class=args.stability,
        temperature=args.temperature,
        humidity=args.humidity,
        release_temperature=args.release_temperature,
        source_height=args.source_height,
        source_location=Location(args.lat, args.lng),
        ambient_pressure=args.pressure,
        terrain=args.terrain,
        is_indoor=args.indoor,
        leak_duration=args.leak_duration,
        sensor_threshold=args.sensor_threshold,
        sensor_count=args.sensor_count,
        monitoring_mode=args.monitoring_mode,
    )


def _parse_source(text: str) -> Source:
    """Parse ``id,lat,lng,chemical,rate``."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 5:
        raise argparse.ArgumentTypeError(f"Expected id,lat,lng,chemical,rate but got {text!r}")
    source_id, lat, lng, chemical, rate = parts
    try:
        return Source(id=source_id, location=Location(float(lat), float(lng)),
                      chemical=chemical, release_rate=float(rate))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid source {text!r}: {exc}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chemical release dispersion and hazard zones")
    parser.add_argument("--log-level", default="WARNING",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"), help="Logging level")
    parser.add_argument("--chemical-file", default=None,
                        help="JSON chemical table used before the built-in one")
    sub = parser.add_subparsers(dest="command", required=True)

    _add_release_arguments(sub.add_parser("zones", help="Red/orange/yellow hazard zones"))
    _add_release_arguments(sub.add_parser("detailed", help="Zones with areas, population and detection"))

    sensors = sub.add_parser("sensors", help="Sensor placement recommendations")
    _add_release_arguments(sensors)
    sensors.add_argument("--count", type=int, default=DEFAULT_RECOMMENDATION_COUNT, help="Sensor budget")

    health = sub.add_parser("health", help="Health impact of an exposure")
    health.add_argument("--chemical", default=DEFAULT_CHEMICAL, help="Chemical name")
    health.add_argument("--concentration", type=float, required=True, help="Concentration (mg/m^3)")
    health.add_argument("--minutes", type=float, default=60.0, help="Exposure duration (min)")

    protect = sub.add_parser("protect", help="Effectiveness of a protective action")
    _add_release_arguments(protect)
    protect.add_argument("--shelter", choices=SHELTER_TYPES, default="fullEvacuation")
    protect.add_argument("--evacuation-time", type=float, default=30.0, help="Minutes to evacuate")

    multi = sub.add_parser("multi", help="Several simultaneous releases")
    _add_release_arguments(multi)
    multi.add_argument("--source", type=_parse_source, action="append", required=True,
                       help="Release point as id,lat,lng,chemical,rate (repeatable)")
    multi.add_argument("--count", type=int, default=DEFAULT_MULTI_SOURCE_SENSOR_COUNT,
                       help="Sensor budget for the network plan")
    return parser


def run(args) -> dict:
    """Execute the selected command and return a JSON-serializable result."""
    lookup = FileChemicalLookup(args.chemical_file) if args.chemical_file else None

    if args.command == "health":
        return asdict(calculate_health_impact(args.concentration, args.minutes, args.chemical, lookup))

    params = _params_from_args(args)
    if args.command == "zones":
        return asdict(calculate_dispersion(params, lookup))
    if args.command == "detailed":
        result = asdict(calculate_detailed_dispersion(params, lookup))
        result["stability_description"] = describe_stability_class(args.stability)
        return result
    if args.command == "sensors":
        zones = calculate_dispersion(params, lookup)
        sensors = generate_sensor_recommendations(params, zones, args.count)
        return {"sensors": [asdict(s) for s in sensors]}
    if args.command == "protect":
        return asdict(evaluate_protective_actions(params, args.evacuation_time, args.shelter, lookup))

    multi = MultipleSourceParameters(base=params, sources=tuple(args.source))
    return {
        "results": asdict(calculate_multiple_source_dispersion(multi, lookup)),
        "sensors": [asdict(s) for s in optimize_sensor_placement_multiple_sources(multi, args.count, lookup)],
    }


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Running %s", args.command)
    print(json.dumps(run(args), indent=2))


if __name__ == "__main__":
    main()
