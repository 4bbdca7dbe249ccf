"""Cron schedules: five-field specs, descriptors and ``@every`` intervals."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_MONTHS = {n: i for i, n in enumerate("jan feb mar apr may jun jul aug sep oct nov dec".split(), 1)}
_WEEKDAYS = {n: i for i, n in enumerate("sun mon tue wed thu fri sat".split())}
_FIELDS = ((0, 59, {}), (0, 23, {}), (1, 31, {}), (1, 12, _MONTHS), (0, 6, _WEEKDAYS))

_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

_UNITS = {"ns": 1e-9, "us": 1e-6, "µs": 1e-6, "μs": 1e-6, "ms": 1e-3, "s": 1.0, "m": 60.0, "h": 3600.0}
_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION = re.compile(r"([+-]?)(0|(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|μs|ms|s|m|h))+)")


@dataclass(frozen=True)
class CronSchedule:
    """A five-field cron schedule."""

    minutes: frozenset[int]
    hours: frozenset[int]
    days: frozenset[int]
    months: frozenset[int]
    weekdays: frozenset[int]
    dom_star: bool = False
    dow_star: bool = False
    location: tzinfo | None = None

    def _day_matches(self, moment: datetime) -> bool:
        dom = moment.day in self.days
        dow = (moment.weekday() + 1) % 7 in self.weekdays
        return (dom and dow) if (self.dom_star or self.dow_star) else (dom or dow)

    def next_after(self, moment: datetime) -> datetime | None:
        """Return the first activation strictly after ``moment``, or None within five years."""
        if self.location is not None:
            moment = moment.astimezone(self.location)
        current = moment.replace(second=0, microsecond=0) + timedelta(minutes=1)
        limit = current.year + 5
        while current.year <= limit:
            if current.month not in self.months:
                year, month = divmod(current.year * 12 + current.month, 12)
                current = current.replace(year=year, month=month + 1, day=1, hour=0, minute=0)
            elif not self._day_matches(current):
                current = current.replace(hour=0, minute=0) + timedelta(days=1)
            elif current.hour not in self.hours:
                current = current.replace(minute=0) + timedelta(hours=1)
            elif current.minute not in self.minutes:
                current += timedelta(minutes=1)
            else:
                return current
        return None


@dataclass(frozen=True)
class _EverySchedule:
    delay: timedelta
    location: tzinfo | None = None

    def next_after(self, moment: datetime) -> datetime:
        if self.location is not None:
            moment = moment.astimezone(self.location)
        return moment.replace(microsecond=0) + self.delay


Schedule = Union[CronSchedule, _EverySchedule]


def _parse_int(text: str) -> int:
    if not re.fullmatch(r"[+-]?\d+", text):
        raise ValueError(f"failed to parse int from {text}")
    value = int(text)
    if value < 0:
        raise ValueError(f"negative number ({value}) not allowed: {text}")
    return value


def _parse_range(expr: str, low: int, high: int, names: dict[str, int]) -> tuple[set[int], bool]:
    range_and_step = expr.split("/")
    low_high = range_and_step[0].split("-")
    star = low_high[0] in ("*", "?")
    if star:
        start, end = low, high
    elif len(low_high) > 2:
        raise ValueError(f"too many hyphens: {expr}")
    else:
        start, end = (names.get(part.lower()) or _parse_int(part) for part in (low_high[0], low_high[-1]))

    step = 1
    if len(range_and_step) > 2:
        raise ValueError(f"too many slashes: {expr}")
    if len(range_and_step) == 2:
        step = _parse_int(range_and_step[1])
        if len(low_high) == 1:
            end = high
        star = star and step <= 1

    if start < low:
        raise ValueError(f"beginning of range ({start}) below minimum ({low}): {expr}")
    if end > high:
        raise ValueError(f"end of range ({end}) above maximum ({high}): {expr}")
    if start > end:
        raise ValueError(f"beginning of range ({start}) beyond end of range ({end}): {expr}")
    if step == 0:
        raise ValueError(f"step of range should be a positive number: {expr}")
    return set(range(start, end + 1, step)), star


def _parse_field(field: str, low: int, high: int, names: dict[str, int]) -> tuple[frozenset[int], bool]:
    parts = [_parse_range(expr, low, high, names) for expr in field.split(",")]
    return frozenset().union(*(values for values, _ in parts)), any(star for _, star in parts)


def _parse_duration(text: str) -> float:
    match = _DURATION.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid duration {text!r}")
    total = sum(float(n) * _UNITS[unit] for n, unit in _PART.findall(match.group(2)))
    return -total if match.group(1) == "-" else total


def parse_cron(spec: str) -> Schedule:
    """Parse a cron spec: five fields, a descriptor such as ``@daily``, or ``@every <duration>``.

    A leading ``TZ=<zone>`` or ``CRON_TZ=<zone>`` sets the schedule's time zone.
    """
    if not spec:
        raise ValueError("empty spec string")

    location: tzinfo | None = None
    if spec.startswith(("TZ=", "CRON_TZ=")):
        head, _, rest = spec.partition(" ")
        zone_name = head.split("=", 1)[1]
        try:
            location = ZoneInfo(zone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"provided bad location {zone_name}: {exc}") from exc
        spec = rest.strip()

    if spec.startswith("@every "):
        try:
            seconds = _parse_duration(spec[len("@every "):])
        except ValueError as exc:
            raise ValueError(f"failed to parse duration {spec}: {exc}") from exc
        return _EverySchedule(timedelta(seconds=max(int(seconds), 1)), location)
    if spec.startswith("@"):
        if spec not in _DESCRIPTORS:
            raise ValueError(f"unrecognized descriptor: {spec}")
        spec = _DESCRIPTORS[spec]

    fields = spec.split()
    if len(fields) != 5:
        raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {spec}")
    (minutes, _), (hours, _), (days, dom_star), (months, _), (weekdays, dow_star) = (
        _parse_field(field, *bounds) for field, bounds in zip(fields, _FIELDS)
    )
    return CronSchedule(minutes, hours, days, months, weekdays, dom_star, dow_star, location)


def run_cron(spec: str, job: Callable[[], object]) -> None:
    """Run ``job`` at every activation of ``spec``; returns only if it never fires again."""
    schedule = parse_cron(spec)
    while True:
        now = datetime.now().astimezone()
        upcoming = schedule.next_after(now)
        if upcoming is None:
            return
        time.sleep(max((upcoming - now).total_seconds(), 0.0))
        job()