"""Sexagesimal angle types: hour angles for right ascension, DMS for declination."""

import math
from dataclasses import dataclass

_SECONDS_PER_DAY = 24 * 3600


@dataclass(frozen=True)
class HourAngle:
    """Right ascension as hours/minutes/seconds of time. Components are trusted."""

    hours: int  # 0–23
    minutes: int  # 0–59
    seconds: float  # 0.0–59.999…

    @staticmethod
    def max_seconds() -> float:
        """Seconds in one full turn (24h)."""
        return float(_SECONDS_PER_DAY)

    def to_seconds(self) -> float:
        return float(self.hours * 3600 + self.minutes * 60) + self.seconds

    def to_radians(self) -> float:
        return self.to_seconds() * math.pi / 43200.0

    def to_degrees(self) -> float:
        return self.to_seconds() / 240.0


@dataclass(frozen=True)
class Degree:
    """Degrees/arcminutes/arcseconds. Only ``base`` carries a sign."""

    base: int  # Signed whole degrees
    arc_mins: int  # 0–59, magnitude
    arc_secs: float  # 0.0–59.999…, magnitude

    def to_decimal(self) -> float:
        """Decimal degrees: ``base + arc_mins/60 + arc_secs/3600``.

        The sign of the overall angle is applied by the caller; a negative
        ``base`` does not negate the minute/second terms.
        """
        return self.base + self.arc_mins / 60.0 + self.arc_secs / 3600.0
