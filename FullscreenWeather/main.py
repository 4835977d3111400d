"""Command line front end: fetch weather for a ZIP code or coordinates."""
import argparse
import json
import logging
import sys
import time
from dataclasses import replace
from typing import List, Optional

from config import Settings, load_config
from fallback import FallbackCoordinator, WeatherRequest, build_default_coordinator
from weather_data import WeatherSnapshot
from weather_provider import WeatherProviderError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Fullscreen weather lookup")
    where = parser.add_mutually_exclusive_group(required=True)
    where.add_argument("--zip", dest="postal_code", help="US ZIP or ZIP+4 code")
    where.add_argument("--coords", nargs=2, metavar=("LAT", "LON"))
    parser.add_argument("--json", action="store_true", help="Print the full snapshot as JSON")
    parser.add_argument("--units", choices=["metric", "imperial", "standard"])
    parser.add_argument("--cache-ttl", type=int)
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    parser.add_argument("--repeat", type=int, default=1, help="Number of lookups to run")
    parser.add_argument("--refresh", type=float, default=30.0, help="Seconds between repeated lookups")
    parser.add_argument("--log-file")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.units:
        overrides["units"] = args.units
    if args.cache_ttl is not None:
        overrides["cache_ttl_seconds"] = args.cache_ttl
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    return replace(settings, **overrides)


def build_request(args: argparse.Namespace) -> WeatherRequest:
    if args.postal_code is not None:
        return WeatherRequest.for_postal_code(args.postal_code)
    return WeatherRequest.for_coordinates(*args.coords)


def format_summary(weather: WeatherSnapshot) -> str:
    current = weather.current
    lines = [
        f"{weather.location.name}, {weather.location.country}".rstrip(", "),
        f"{round(current.temperature):+d}° {current.description} "
        f"(feels {round(current.feels_like):+d}°, hum {int(current.humidity)}%, wind {current.wind_speed:.1f})",
    ]
    for day in weather.daily:
        date_text = time.strftime("%a %d %b", time.gmtime(day.date_epoch_ms / 1000 + weather.location.timezone_offset_seconds))
        lines.append(
            f"  {date_text}  {round(day.temperature_min):+d}°/{round(day.temperature_max):+d}°  "
            f"{day.condition:<12} {round(day.precipitation_probability_pct)}%"
        )
    return "\n".join(lines)


def run(coordinator: FallbackCoordinator, request: WeatherRequest, args: argparse.Namespace) -> int:
    exit_code = 0
    for frame in range(1, max(args.repeat, 1) + 1):
        logging.info("Lookup %s: %s", frame, request.describe())
        try:
            weather = coordinator.fetch_with_fallback(request)
            print(json.dumps(weather.to_dict(), indent=2) if args.json else format_summary(weather))
            exit_code = 0
        except WeatherProviderError as err:
            logging.error("Weather fetch failed: %s", err)
            for source, error in getattr(err, "attempts", []):
                logging.debug("  %s: %r", source, error)
            print(err.user_message, file=sys.stderr)
            exit_code = 1

        if frame < args.repeat:
            time.sleep(max(args.refresh, 1.0))
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    settings = apply_overrides(load_config(), args)

    coordinator = build_default_coordinator(settings)
    try:
        return run(coordinator, build_request(args), args)
    except KeyboardInterrupt:
        logging.info("Stopping")
        return 130


if __name__ == "__main__":
    sys.exit(main())
