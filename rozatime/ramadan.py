"""Roza numbering, the Sehar/Iftar state machine and countdown formatting."""

import datetime
import logging
from dataclasses import dataclass
from typing import Optional

from rozatime.prayer_api import HijriDate

logger = logging.getLogger(__name__)

RAMADAN_DAYS = 30

SEHAR = "Sehar"
IFTAR = "Iftar"


@dataclass(frozen=True)
class RamadanStatus:
    in_ramadan: bool
    roza_number: int = 0


NOT_RAMADAN = RamadanStatus(in_ramadan=False, roza_number=0)


@dataclass(frozen=True)
class EventState:
    fasting: bool
    next_event: str
    time_remaining: datetime.timedelta


def _noon_utc(day: datetime.date) -> datetime.datetime:
    return datetime.datetime(day.year, day.month, day.day, 12, tzinfo=datetime.timezone.utc)


def _as_utc(t: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    if t is None or t.tzinfo is None:
        return t
    return t.astimezone(datetime.timezone.utc)


def resolve_ramadan_day(
    now: datetime.datetime,
    hijri: HijriDate,
    first_roza: str = "",
) -> RamadanStatus:
    """
    Return whether now falls in Ramadan and which roza it is.

    A parseable first_roza date (YYYY-MM-DD) overrides the Hijri month from
    the API completely. An unparseable one is ignored with a warning.
    """
    if first_roza:
        try:
            first_day = datetime.datetime.strptime(first_roza.strip(), "%Y-%m-%d").date()
        except ValueError:
            logger.warning(
                f"Ignoring first_roza_date {first_roza!r}: expected YYYY-MM-DD, "
                "falling back to the Hijri month from the API"
            )
        else:
            # Compare noon UTC anchors so a DST change can't shave an hour off a day.
            elapsed = _noon_utc(now.date()) - _noon_utc(first_day)
            days_since = elapsed // datetime.timedelta(days=1)
            if 0 <= days_since < RAMADAN_DAYS:
                return RamadanStatus(in_ramadan=True, roza_number=days_since + 1)
            return NOT_RAMADAN

    if not hijri.is_ramadan:
        return NOT_RAMADAN

    try:
        roza_number = int(hijri.day)
    except ValueError:
        logger.debug(f"Hijri day {hijri.day!r} is not a number")
        return NOT_RAMADAN

    return RamadanStatus(in_ramadan=True, roza_number=roza_number)


def compute_next_event(
    now: datetime.datetime,
    fajr: datetime.datetime,
    iftar: datetime.datetime,
    tomorrow_fajr: Optional[datetime.datetime] = None,
) -> EventState:
    """
    Work out the next event relative to today's Fajr and Iftar.

    tomorrow_fajr is required once now has reached Iftar and ignored before.
    """
    # Same-tzinfo aware datetimes compare by wall clock, so go through UTC.
    now, fajr, iftar, tomorrow_fajr = (_as_utc(t) for t in (now, fajr, iftar, tomorrow_fajr))

    if now < fajr:
        return EventState(fasting=False, next_event=SEHAR, time_remaining=fajr - now)

    if now < iftar:
        return EventState(fasting=True, next_event=IFTAR, time_remaining=iftar - now)

    if tomorrow_fajr is None:
        raise ValueError("tomorrow_fajr is required after Iftar")
    return EventState(fasting=False, next_event=SEHAR, time_remaining=tomorrow_fajr - now)


def format_duration(delta: datetime.timedelta) -> str:
    """Format a duration as "3h 42m", or "25m" when under an hour."""
    if delta < datetime.timedelta(0):
        delta = datetime.timedelta(0)

    total_minutes = int(delta.total_seconds() // 60)
    h, m = divmod(total_minutes, 60)
    if h > 0:
        return f"{h}h {m}m"
    return f"{m}m"
