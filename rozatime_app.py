#!/usr/bin/env python3
"""
Ramadan prompt segment
Prints a single line for shell prompts and status bars showing:
  - Today's roza number
  - The next event (Sehar or Iftar)
  - A countdown to that event
Prints nothing outside Ramadan (unless hide_outside_ramadan is false) or on error.
"""

import argparse
import logging
import sys

from rozatime.config import (
    CITY,
    COUNTRY,
    LATITUDE,
    LONGITUDE,
    TEMPLATE,
    Options,
    clear_options,
    load_options,
    save_options,
)
from rozatime.segment import evaluate

DEFAULT_TEMPLATE = " \U0001F319 Roza {RozaNumber} · {NextEvent} in {TimeRemaining} "

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def render(fields: dict, template: str = DEFAULT_TEMPLATE) -> str:
    """Fill a str.format template with the segment fields."""
    return template.format(**fields)


def set_location(options: dict, city: str = None, country: str = None, lat: float = None, lng: float = None) -> dict:
    """Return options with the location replaced by a city+country or lat/lng pair."""
    updated = {k: v for k, v in options.items() if k not in (CITY, COUNTRY, LATITUDE, LONGITUDE)}
    if city is not None:
        updated[CITY] = city
        updated[COUNTRY] = country
    else:
        updated[LATITUDE] = lat
        updated[LONGITUDE] = lng
    return updated


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────
def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Ramadan Sehar/Iftar countdown segment")
    parser.add_argument("--config", help="Path to the JSON options file (default ~/.rozatime/config.json)")
    parser.add_argument("--template", help="Display template, e.g. '{NextEvent} {TimeRemaining}'")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
    location = parser.add_mutually_exclusive_group()
    location.add_argument("--set-city", nargs=2, metavar=("CITY", "COUNTRY"), help="Save a city+country location")
    location.add_argument("--set-coords", nargs=2, type=float, metavar=("LAT", "LNG"), help="Save a latitude+longitude location")
    location.add_argument("--clear-config", action="store_true", help="Remove the saved options file")
    args = parser.parse_args(argv)

    # stdout belongs to the prompt, so logs go to stderr
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    if args.clear_config:
        clear_options(args.config)
        return 0
    if args.set_city or args.set_coords:
        saved = load_options(args.config)
        if args.set_city:
            saved = set_location(saved, city=args.set_city[0], country=args.set_city[1])
        else:
            saved = set_location(saved, lat=args.set_coords[0], lng=args.set_coords[1])
        save_options(saved, args.config)
        return 0

    options = Options(load_options(args.config))
    result = evaluate(options)
    if not result.enabled:
        return 0

    template = args.template or options.get_str(TEMPLATE) or DEFAULT_TEMPLATE
    try:
        line = render(result.fields.as_dict(), template)
    except (KeyError, IndexError, ValueError) as exc:
        logger.error(f"Invalid template {template!r}: {exc}")
        return 0
    print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
