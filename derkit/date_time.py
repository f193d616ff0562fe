"""UTC calendar date-and-time values shared by the ASN.1 time types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from derkit.errors import DerError, ErrorKind
from derkit.tag import Tag
from derkit.writer import Writer

MIN_YEAR = 1970

# 9999-12-31T23:59:59Z; the largest representable instant.
MAX_UNIX_DURATION = timedelta(seconds=253_402_300_799)

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Cumulative days before each month and the month's length in a common year.
_MONTHS = {
    1: (0, 31),
    2: (31, 28),
    3: (59, 31),
    4: (90, 30),
    5: (120, 31),
    6: (151, 30),
    7: (181, 31),
    8: (212, 31),
    9: (243, 30),
    10: (273, 31),
    11: (304, 30),
    12: (334, 31),
}

# Month lengths counted from March, so that the leap day comes last.
_MARCH_MONTHS = (31, 30, 31, 30, 31, 31, 30, 31, 30, 31, 31, 29)

_LEAPOCH = 11017  # 2000-03-01, just after a 400-year-cycle leap day
_DAYS_PER_400Y = 365 * 400 + 97
_DAYS_PER_100Y = 365 * 100 + 24
_DAYS_PER_4Y = 365 * 4 + 1


def _date_time_error() -> DerError:
    return DerError(ErrorKind.DATE_TIME)


def _is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _as_duration(unix_duration: Any) -> timedelta:
    if isinstance(unix_duration, timedelta):
        duration = unix_duration
    else:
        if isinstance(unix_duration, bool):
            raise _date_time_error()
        try:
            duration = timedelta(seconds=unix_duration)
        except (TypeError, OverflowError, ValueError) as exc:
            raise _date_time_error() from exc
    if duration < timedelta(0):
        raise _date_time_error()
    return duration


@dataclass(frozen=True, order=True)
class DateTime:
    """A Z-normalised calendar date and time between 1970 and 9999."""

    year: int
    month: int
    day: int
    hour: int
    minutes: int
    seconds: int
    _unix_seconds: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        parts = (self.year, self.month, self.day, self.hour, self.minutes, self.seconds)
        if any(isinstance(part, bool) or not isinstance(part, int) for part in parts):
            raise _date_time_error()
        year, month, day, hour, minutes, seconds = parts
        if (
            year < MIN_YEAR
            or not 1 <= month <= 12
            or not 1 <= day <= 31
            or not 0 <= hour <= 23
            or not 0 <= minutes <= 59
            or not 0 <= seconds <= 59
        ):
            raise _date_time_error()

        leap = _is_leap_year(year)
        ydays, mdays = _MONTHS[month]
        if month == 2 and leap:
            mdays = 29
        if day > mdays:
            raise _date_time_error()

        ydays += day - 1
        if leap and month > 2:
            ydays += 1

        prior = year - 1
        leap_years = (prior - 1968) // 4 - (prior - 1900) // 100 + (prior - 1600) // 400
        days = (year - 1970) * 365 + leap_years + ydays
        total = days * 86400 + hour * 3600 + minutes * 60 + seconds
        if timedelta(seconds=total) > MAX_UNIX_DURATION:
            raise _date_time_error()
        object.__setattr__(self, "_unix_seconds", total)

    @classmethod
    def from_unix_duration(cls, unix_duration: Any) -> DateTime:
        """Build from a time since the Unix epoch (a ``timedelta`` or seconds).

        Fractions of a second are discarded.
        """
        duration = _as_duration(unix_duration)
        if duration > MAX_UNIX_DURATION:
            raise _date_time_error()

        secs_since_epoch = duration.days * 86400 + duration.seconds
        days = secs_since_epoch // 86400 - _LEAPOCH
        secs_of_day = secs_since_epoch % 86400

        qc_cycles, remdays = divmod(days, _DAYS_PER_400Y)

        c_cycles = min(remdays // _DAYS_PER_100Y, 3)
        remdays -= c_cycles * _DAYS_PER_100Y

        q_cycles = min(remdays // _DAYS_PER_4Y, 24)
        remdays -= q_cycles * _DAYS_PER_4Y

        remyears = min(remdays // 365, 3)
        remdays -= remyears * 365

        year = 2000 + remyears + 4 * q_cycles + 100 * c_cycles + 400 * qc_cycles

        month = 0
        for month, month_len in enumerate(_MARCH_MONTHS, start=1):
            if remdays < month_len:
                break
            remdays -= month_len
        day = remdays + 1
        if month + 2 > 12:
            year += 1
            month -= 10
        else:
            month += 2

        minutes_of_day, second = divmod(secs_of_day, 60)
        hour, minute = divmod(minutes_of_day, 60)
        return cls(year, month, day, hour, minute, second)

    def unix_duration(self) -> timedelta:
        """Time elapsed since the Unix epoch."""
        return timedelta(seconds=self._unix_seconds)

    @classmethod
    def from_system_time(cls, time: datetime) -> DateTime:
        """Build from a ``datetime``; a naive value is taken to be UTC."""
        if not isinstance(time, datetime):
            raise _date_time_error()
        if time.tzinfo is None:
            time = time.replace(tzinfo=timezone.utc)
        delta = time - _UNIX_EPOCH
        if delta < timedelta(0):
            raise _date_time_error()
        return cls.from_unix_duration(delta)

    def to_system_time(self) -> datetime:
        """The same instant as an aware UTC ``datetime``."""
        return _UNIX_EPOCH + self.unix_duration()

    @classmethod
    def parse(cls, text: str) -> DateTime:
        """Parse ``YYYY-MM-DDTHH:MM:SSZ``."""
        data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        if (
            len(data) != 20
            or data[4] != ord("-")
            or data[7] != ord("-")
            or data[10] != ord("T")
            or data[13] != ord(":")
            or data[16] != ord(":")
            or data[19] != ord("Z")
        ):
            raise _date_time_error()
        tag = Tag.GENERALIZED_TIME
        try:
            century = decode_decimal(tag, data[0], data[1])
            year = century * 100 + decode_decimal(tag, data[2], data[3])
            month = decode_decimal(tag, data[5], data[6])
            day = decode_decimal(tag, data[8], data[9])
            hour = decode_decimal(tag, data[11], data[12])
            minutes = decode_decimal(tag, data[14], data[15])
            seconds = decode_decimal(tag, data[17], data[18])
        except DerError as exc:
            raise _date_time_error() from exc
        return cls(year, month, day, hour, minutes, seconds)

    def __str__(self) -> str:
        return (
            f"{self.year:02}-{self.month:02}-{self.day:02}"
            f"T{self.hour:02}:{self.minutes:02}:{self.seconds:02}Z"
        )


def decode_decimal(tag: Tag, hi: int, lo: int) -> int:
    """Decode two ASCII digit bytes as a number from 0 to 99."""
    zero, nine = ord("0"), ord("9")
    if zero <= hi <= nine and zero <= lo <= nine:
        return (hi - zero) * 10 + (lo - zero)
    raise tag.value_error()


def encode_decimal(writer: Writer, tag: Tag, value: int) -> None:
    """Write ``value`` (0 to 99) as two ASCII digits."""
    if value < 0:
        raise tag.value_error()
    hi, lo = divmod(value, 10)
    if hi >= 10:
        raise tag.value_error()
    writer.write_byte(ord("0") + hi)
    writer.write_byte(ord("0") + lo)