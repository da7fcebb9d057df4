"""Evaluate the Ramadan segment for one prompt render."""

import datetime
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Union

import pytz
from tzlocal import get_localzone_name

from rozatime.config import (
    DEFAULT_HTTP_TIMEOUT,
    FIRST_ROZA_DATE,
    HIDE_OUTSIDE_RAMADAN,
    HTTP_TIMEOUT,
    TIMEZONE,
    Options,
)
from rozatime.errors import SegmentError, TimeParseError
from rozatime.prayer_api import (
    build_request_url,
    fetch_fajr_time,
    fetch_timings,
    localize,
    next_day,
    parse_event_time,
)
from rozatime.ramadan import compute_next_event, format_duration, resolve_ramadan_day

logger = logging.getLogger(__name__)


class DisabledReason(enum.Enum):
    NOT_APPLICABLE = "not_applicable"
    ERROR = "error"


@dataclass(frozen=True)
class SegmentFields:
    fajr: str
    iftar: str
    imsak: str
    roza_number: int
    next_event: str
    time_remaining: str
    fasting: bool

    def as_dict(self) -> dict:
        """Field names as exposed to display templates."""
        return {
            "Fajr": self.fajr,
            "Iftar": self.iftar,
            "Imsak": self.imsak,
            "RozaNumber": self.roza_number,
            "NextEvent": self.next_event,
            "TimeRemaining": self.time_remaining,
            "Fasting": self.fasting,
        }


@dataclass(frozen=True)
class Enabled:
    fields: SegmentFields

    @property
    def enabled(self) -> bool:
        return True


@dataclass(frozen=True)
class Disabled:
    reason: DisabledReason
    error: Optional[Exception] = None

    @property
    def enabled(self) -> bool:
        return False


SegmentResult = Union[Enabled, Disabled]


def local_zone(options: Options):
    """The configured pytz zone, or the system zone when none is set."""
    tz_name = options.get_str(TIMEZONE)
    if not tz_name:
        try:
            tz_name = get_localzone_name()
        except (LookupError, ValueError) as exc:
            logger.warning(f"Could not determine the system timezone, using UTC: {exc}")
            return pytz.utc
        if not tz_name:
            return pytz.utc
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {tz_name!r}, using UTC")
        return pytz.utc


def current_time(options: Options) -> datetime.datetime:
    """Now in the configured time zone, or the system zone when none is set."""
    return datetime.datetime.now(local_zone(options))


def evaluate(options, now: datetime.datetime = None) -> SegmentResult:
    """
    Fetch today's timings and build the segment fields.

    Returns Disabled(NOT_APPLICABLE) outside Ramadan when hide_outside_ramadan
    is on (the default); that case is expected and is not logged as an error.
    Any SegmentError is logged once and returned as Disabled(ERROR).
    """
    if not isinstance(options, Options):
        options = Options(options)
    if now is None:
        now = current_time(options)

    try:
        fields = _build_fields(options, now)
    except SegmentError as exc:
        logger.error(f"Ramadan segment disabled: {exc}")
        return Disabled(reason=DisabledReason.ERROR, error=exc)

    if fields is None:
        logger.debug("Not in Ramadan, hiding segment")
        return Disabled(reason=DisabledReason.NOT_APPLICABLE)
    return Enabled(fields=fields)


def _build_fields(options: Options, now: datetime.datetime) -> Optional[SegmentFields]:
    timeout = options.get_float(HTTP_TIMEOUT, DEFAULT_HTTP_TIMEOUT)

    today = fetch_timings(build_request_url(options, now.date()), timeout)

    status = resolve_ramadan_day(now, today.hijri, options.get_str(FIRST_ROZA_DATE))
    if not status.in_ramadan and options.get_bool(HIDE_OUTSIDE_RAMADAN, True):
        return None

    fajr = _parse_field(now, today.timings.fajr, "Fajr")
    iftar = _parse_field(now, today.timings.maghrib, "Iftar")
    imsak = _parse_field(now, today.timings.imsak, "Imsak")

    tomorrow_fajr = None
    if now.astimezone(pytz.utc) >= iftar.astimezone(pytz.utc):
        tomorrow_fajr = _tomorrow_fajr(options, now, fajr, timeout)

    state = compute_next_event(now, fajr, iftar, tomorrow_fajr)

    return SegmentFields(
        fajr=fajr.strftime("%H:%M"),
        iftar=iftar.strftime("%H:%M"),
        imsak=imsak.strftime("%H:%M"),
        roza_number=status.roza_number,
        next_event=state.next_event,
        time_remaining=format_duration(state.time_remaining),
        fasting=state.fasting,
    )


def _parse_field(now: datetime.datetime, value: str, field: str) -> datetime.datetime:
    try:
        return parse_event_time(now, value)
    except TimeParseError as exc:
        raise TimeParseError(value, field) from exc


def _tomorrow_fajr(
    options: Options,
    now: datetime.datetime,
    fajr: datetime.datetime,
    timeout: float,
) -> datetime.datetime:
    """Tomorrow's Fajr from the API, or today's Fajr wall-clock time tomorrow."""
    tomorrow = next_day(now)
    try:
        return fetch_fajr_time(options, tomorrow, timeout)
    except SegmentError as exc:
        logger.warning(f"Could not fetch tomorrow's Fajr, reusing today's time: {exc}")
        naive = datetime.datetime.combine(tomorrow.date(), fajr.time())
        return localize(tomorrow.tzinfo, naive)
