"""Equatorial coordinates and the reduction of several catalog readings to one."""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from simbadstars.angles import HourAngle

FloatDType = type[np.floating]

DEFAULT_DTYPE: FloatDType = np.float64


@dataclass(frozen=True)
class EquatorialCoordinate:
    """Right ascension and declination in radians, stored as numpy scalars.

    Build instances with :meth:`new`; it is the only place angles are
    normalized.
    """

    right_ascension: np.floating
    declination: np.floating

    @classmethod
    def new(
        cls,
        right_ascension: float,
        declination: float,
        dtype: FloatDType = DEFAULT_DTYPE,
    ) -> "EquatorialCoordinate":
        """Normalize and wrap a (ra, dec) pair.

        Right ascension is reduced with a truncating remainder (``fmod``), so a
        negative input stays negative: ``-0.5`` comes back as ``-0.5``, not
        ``2π - 0.5``. Declination saturates at the poles instead of wrapping.

        Args:
            right_ascension: Right ascension in radians.
            declination: Declination in radians.
            dtype: numpy floating type the components are stored as.

        Returns:
            EquatorialCoordinate with components of ``dtype``.
        """
        full_turn = dtype(2.0 * np.pi)
        half_pi = dtype(np.pi / 2.0)
        ra = np.fmod(dtype(right_ascension), full_turn)
        dec = np.clip(dtype(declination), -half_pi, half_pi)
        return cls(right_ascension=dtype(ra), declination=dtype(dec))

    @classmethod
    def from_hour_angle(
        cls,
        hour_angle: HourAngle,
        declination: float,
        dtype: FloatDType = DEFAULT_DTYPE,
    ) -> "EquatorialCoordinate":
        return cls.new(hour_angle.to_radians(), declination, dtype=dtype)

    @property
    def dtype(self) -> FloatDType:
        return type(self.right_ascension)

    def to_degrees(self) -> tuple[float, float]:
        """(ra, dec) in degrees, as plain floats."""
        return float(np.degrees(self.right_ascension)), float(
            np.degrees(self.declination)
        )


def average_coords(
    coords: Sequence[EquatorialCoordinate],
    dtype: FloatDType | None = None,
) -> EquatorialCoordinate:
    """Arithmetic mean of several readings of the same star.

    Right ascension and declination are averaged independently and linearly.
    There is no handling of the 0/2π seam: readings that straddle it average
    to the wrong side of the sky. Catalog readings of one star agree to
    within arcseconds and sit away from the seam, so this is a constraint on
    valid input.

    Args:
        coords: One or more readings.
        dtype: Result precision. Defaults to the first reading's dtype.

    Returns:
        Averaged coordinate, re-normalized through ``EquatorialCoordinate.new``.

    Raises:
        ValueError: If ``coords`` is empty.
    """
    if not coords:
        raise ValueError("cannot average an empty set of coordinates")
    if dtype is None:
        dtype = coords[0].dtype

    ras = np.array([c.right_ascension for c in coords], dtype=dtype)
    decs = np.array([c.declination for c in coords], dtype=dtype)
    # Offset from the first reading keeps identical readings exact
    ra = ras[0] + np.mean(ras - ras[0], dtype=dtype)
    dec = decs[0] + np.mean(decs - decs[0], dtype=dtype)
    return EquatorialCoordinate.new(ra, dec, dtype=dtype)
