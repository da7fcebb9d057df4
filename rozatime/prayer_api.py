"""Fetch Fajr, Imsak and Maghrib times plus the Hijri date from the Aladhan API."""

import datetime
import re
from dataclasses import dataclass
from urllib.parse import quote_plus

import requests

from rozatime.config import (
    CITY,
    COUNTRY,
    DEFAULT_METHOD,
    DEFAULT_SCHOOL,
    LATITUDE,
    LONGITUDE,
    METHOD,
    SCHOOL,
    Options,
)
from rozatime.errors import DecodeError, LocationNotConfigured, TimeParseError, TransportError

ALADHAN_BASE = "https://api.aladhan.com/v1"

RAMADAN_MONTH = 9

# HH:MM, minutes always two digits
HHMM_RE = re.compile(r"\d{1,2}:\d{2}")


@dataclass(frozen=True)
class PrayerTimings:
    """Raw "HH:MM" or "HH:MM (TZ)" strings as returned by the API."""

    fajr: str
    imsak: str
    maghrib: str


@dataclass(frozen=True)
class HijriDate:
    day: str
    month: int

    @property
    def is_ramadan(self) -> bool:
        return self.month == RAMADAN_MONTH


@dataclass(frozen=True)
class DayTimings:
    timings: PrayerTimings
    hijri: HijriDate


def build_request_url(options: Options, date: datetime.date) -> str:
    """
    Build the Aladhan timings URL for a calendar date.

    City+country takes precedence over latitude+longitude when both are set.
    Raises LocationNotConfigured when neither pair is complete.
    """
    date_str = date.strftime("%d-%m-%Y")
    method = options.get_int(METHOD, DEFAULT_METHOD)
    school = options.get_int(SCHOOL, DEFAULT_SCHOOL)

    city = options.get_str(CITY)
    country = options.get_str(COUNTRY)
    if city and country:
        return (
            f"{ALADHAN_BASE}/timingsByCity/{date_str}"
            f"?city={quote_plus(city)}&country={quote_plus(country)}"
            f"&method={method}&school={school}"
        )

    lat = options.get_float(LATITUDE, None)
    lng = options.get_float(LONGITUDE, None)
    if lat is None or lng is None:
        raise LocationNotConfigured()

    # repr keeps every significant digit of the configured coordinates
    return (
        f"{ALADHAN_BASE}/timings/{date_str}"
        f"?latitude={lat!r}&longitude={lng!r}&method={method}&school={school}"
    )


def decode_timings(body) -> DayTimings:
    """
    Decode an Aladhan timings payload.

    Raises TransportError when the service reports a failure code and
    DecodeError when the payload does not have the expected shape.
    """
    if not isinstance(body, dict):
        raise DecodeError("unexpected Aladhan response: not a JSON object")
    code = body.get("code")
    if code is not None and code != 200:
        raise TransportError(f"Aladhan API error: {body.get('status')}")

    try:
        data = body["data"]
        raw_timings = data["timings"]
        hijri_data = data["date"]["hijri"]
        timings = PrayerTimings(
            fajr=raw_timings["Fajr"],
            imsak=raw_timings["Imsak"],
            maghrib=raw_timings["Maghrib"],
        )
        hijri = HijriDate(day=hijri_data["day"], month=hijri_data["month"]["number"])
    except (KeyError, TypeError) as exc:
        raise DecodeError(f"unexpected Aladhan response: missing {exc}") from exc

    for value in (timings.fajr, timings.imsak, timings.maghrib, hijri.day):
        if not isinstance(value, str):
            raise DecodeError(f"unexpected Aladhan response: {value!r} is not a string")
    if isinstance(hijri.month, bool) or not isinstance(hijri.month, int):
        raise DecodeError(f"unexpected Aladhan response: month {hijri.month!r} is not a number")

    return DayTimings(timings=timings, hijri=hijri)


def fetch_timings(url: str, timeout: float) -> DayTimings:
    """Fetch and decode one day of timings. No retries are attempted."""
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise TransportError(str(exc)) from exc
    try:
        body = resp.json()
    except ValueError as exc:
        raise DecodeError(f"invalid JSON from Aladhan API: {exc}") from exc
    return decode_timings(body)


def fetch_fajr_time(options: Options, day: datetime.datetime, timeout: float) -> datetime.datetime:
    """Fetch the Fajr time for day's calendar date, anchored to day's time zone."""
    url = build_request_url(options, day.date())
    result = fetch_timings(url, timeout)
    try:
        return parse_event_time(day, result.timings.fajr)
    except TimeParseError as exc:
        raise TimeParseError(exc.value, "Fajr") from exc


def localize(tzinfo, naive: datetime.datetime) -> datetime.datetime:
    """Attach tzinfo to a naive wall-clock time (pytz zones need localize)."""
    if tzinfo is None:
        return naive
    if hasattr(tzinfo, "localize"):
        return tzinfo.localize(naive)
    return naive.replace(tzinfo=tzinfo)


def parse_event_time(reference: datetime.datetime, time_str: str) -> datetime.datetime:
    """
    Combine reference's calendar date with an "HH:MM" time from the API.

    Only the first five characters are read; suffixes like " (PKT)" are
    dropped. The result is in reference's time zone.
    """
    hhmm = time_str[:5]
    if not HHMM_RE.fullmatch(hhmm):
        raise TimeParseError(time_str)
    try:
        parsed = datetime.datetime.strptime(hhmm, "%H:%M")
    except ValueError as exc:
        raise TimeParseError(time_str) from exc
    naive = datetime.datetime.combine(reference.date(), parsed.time())
    return localize(reference.tzinfo, naive)


def next_day(reference: datetime.datetime) -> datetime.datetime:
    """Same wall-clock time on the following calendar date."""
    naive = reference.replace(tzinfo=None) + datetime.timedelta(days=1)
    return localize(reference.tzinfo, naive)
