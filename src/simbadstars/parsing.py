"""Coordinate string parsers for the SIMBAD ``coordN`` columns.

Two dialects are supported:

``parse_coord``
    Sexagesimal, six whitespace-separated tokens (extra tokens ignored)::

        05 55 10.30536 +07 24 25.4304

``parse_coord4``
    Two decimal-degree tokens, as in the Galactic column::

        199.7872 -08.9586

Both return ``None`` on anything they cannot read; they never raise.
"""

import math

from simbadstars.angles import Degree, HourAngle
from simbadstars.coordinates import DEFAULT_DTYPE, EquatorialCoordinate, FloatDType

_SIGNS = ("+", "-")


def _parse_unsigned(token: str) -> int | None:
    # int() also takes "1_0", signs and non-ASCII digits
    if not (token.isascii() and token.isdigit()):
        return None
    return int(token)


def _parse_float(token: str) -> float | None:
    if not token.isascii() or "_" in token:
        return None
    try:
        return float(token)
    except ValueError:
        return None


def parse_coord(
    text: str, dtype: FloatDType = DEFAULT_DTYPE
) -> EquatorialCoordinate | None:
    """Parse ``"HH MM SS.s ±DD MM SS.s"`` into an EquatorialCoordinate.

    The fourth token carries the declination sign as its first character.
    A token without a leading ``+``/``-`` is read whole and taken as positive.

    Args:
        text: Raw column value.
        dtype: numpy floating type of the result.

    Returns:
        Normalized coordinate, or None if fewer than six tokens are present
        or any numeric token fails to parse.
    """
    tokens = text.split()
    if len(tokens) < 6:
        return None

    hours = _parse_unsigned(tokens[0])
    minutes = _parse_unsigned(tokens[1])
    seconds = _parse_float(tokens[2])

    degree_token = tokens[3]
    negative = degree_token[0] == "-"
    if degree_token[0] in _SIGNS:
        degree_token = degree_token[1:]
    degrees = _parse_unsigned(degree_token)
    arc_mins = _parse_unsigned(tokens[4])
    arc_secs = _parse_float(tokens[5])

    parts = (hours, minutes, seconds, degrees, arc_mins, arc_secs)
    if any(part is None for part in parts):
        return None

    ra = HourAngle(hours=hours, minutes=minutes, seconds=seconds).to_radians()
    dec_deg = Degree(base=degrees, arc_mins=arc_mins, arc_secs=arc_secs).to_decimal()
    if negative:
        dec_deg = -dec_deg
    return EquatorialCoordinate.new(ra, math.radians(dec_deg), dtype=dtype)


def parse_coord4(
    text: str, dtype: FloatDType = DEFAULT_DTYPE
) -> EquatorialCoordinate | None:
    """Parse two decimal-degree tokens into an EquatorialCoordinate.

    The pair is taken as (ra, dec) without any frame rotation, so Galactic
    (l, b) values come back as-is in radians.

    Returns:
        Normalized coordinate, or None unless exactly two numeric tokens
        are present.
    """
    tokens = text.split()
    if len(tokens) != 2:
        return None
    ra_deg = _parse_float(tokens[0])
    dec_deg = _parse_float(tokens[1])
    if ra_deg is None or dec_deg is None:
        return None
    return EquatorialCoordinate.new(
        math.radians(ra_deg), math.radians(dec_deg), dtype=dtype
    )
