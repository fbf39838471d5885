"""Stellar position (distance + equatorial coordinate) and its Cartesian form.

Axes: x points at (ra=0, dec=0), y at (ra=90°, dec=0), z at the north
celestial pole. Units of the vector are those of ``distance``.
"""

from dataclasses import dataclass

import numpy as np

from simbadstars.coordinates import DEFAULT_DTYPE, EquatorialCoordinate, FloatDType


@dataclass(frozen=True)
class StellarPosition:
    """A distance along a direction on the sky."""

    distance: np.floating
    coord: EquatorialCoordinate

    @classmethod
    def new(
        cls,
        distance: float,
        right_ascension: float,
        declination: float,
        dtype: FloatDType = DEFAULT_DTYPE,
    ) -> "StellarPosition":
        return cls(
            distance=dtype(distance),
            coord=EquatorialCoordinate.new(right_ascension, declination, dtype=dtype),
        )

    @property
    def dtype(self) -> FloatDType:
        return self.coord.dtype

    def to_cartesian(self) -> np.ndarray:
        """Project onto the equatorial plane, then split by right ascension.

        Returns:
            Array ``[x, y, z]`` of the position's dtype.
        """
        dtype = self.dtype
        ra = self.coord.right_ascension
        dec = self.coord.declination
        distance = dtype(self.distance)

        adjacent = distance * np.cos(dec)
        opposite = distance * np.sin(dec)
        return np.array(
            [adjacent * np.cos(ra), adjacent * np.sin(ra), opposite], dtype=dtype
        )

    @classmethod
    def from_cartesian(cls, vector: np.ndarray) -> "StellarPosition":
        """Inverse of :meth:`to_cartesian`, computed in the vector's dtype.

        At the origin the declination is 0 and the right ascension is whatever
        ``atan2(0, 0)`` gives (0); no attempt is made to recover a direction.
        Vectors on the z axis likewise come back with right ascension 0.

        Args:
            vector: Array-like ``[x, y, z]``.

        Returns:
            StellarPosition with distance equal to the vector's length.
        """
        vector = np.asarray(vector)
        if not np.issubdtype(vector.dtype, np.floating):
            vector = vector.astype(DEFAULT_DTYPE)
        dtype = vector.dtype.type
        x, y, z = vector

        hyp = np.sqrt(x * x + y * y + z * z)
        planar = np.sqrt(x * x + y * y)
        if hyp == 0:
            dec = dtype(0.0)
        else:
            # planar/hyp can land a hair above 1 after rounding
            dec = np.copysign(np.arccos(np.clip(planar / hyp, -1, 1)), z)

        base_ra = np.arctan2(np.abs(y), np.abs(x))
        if x >= 0 and y >= 0:
            ra = base_ra
        elif x < 0 and y >= 0:
            ra = np.pi - base_ra
        elif x < 0 and y < 0:
            ra = np.pi + base_ra
        else:
            ra = 2.0 * np.pi - base_ra

        return cls.new(hyp, ra, dec, dtype=dtype)

    def __str__(self) -> str:
        ra_deg, dec_deg = self.coord.to_degrees()
        sign = "+" if dec_deg >= 0 else ""
        return (
            f"dist: {float(self.distance):.2f}, "
            f"ra: {ra_deg:.2f}°, dec: {sign}{dec_deg:.2f}°"
        )
