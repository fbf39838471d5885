"""Catalog import: SIMBAD export reading, row filtering, and star assembly."""

import logging
import warnings
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from simbadstars.coordinates import (
    DEFAULT_DTYPE,
    EquatorialCoordinate,
    FloatDType,
    average_coords,
)
from simbadstars.models import (
    ImportReport,
    OutcomeReason,
    OutcomeStatus,
    Record,
    RowOutcome,
    RowResult,
    Star,
    UNKNOWN_CONSTELLATION,
)
from simbadstars.parsing import parse_coord
from simbadstars.position import StellarPosition

logger = logging.getLogger(__name__)

# Parallax in mas -> distance; 3.26 is light-years per parsec
LIGHT_YEARS_PER_PARSEC = 3.26
MAS_PER_ARCSEC = 1000.0

# Trailing "B" marks the secondary of a binary ("alf Cen B")
COMPANION_SUFFIX = "B"

# SIMBAD export header -> Record field
COLUMN_ALIASES: dict[str, str] = {
    "#": "id",
    "coord1 (ICRS,J2000/2000)": "coord1",
    "coord2 (FK5,J2000/2000)": "coord2",
    "coord3 (FK4,B1950/1950)": "coord3",
    "coord4 (Gal,J2000/2000)": "coord4",
    "Mag U": "mag_u",
    "Mag B": "mag_b",
    "Mag V": "mag_v",
    "Mag R": "mag_r",
    "Mag I": "mag_i",
    "spec. type": "spec_type",
    "morph. type": "morph_type",
    "ang. size": "ang_size",
    "pretty name": "pretty_name",
}

PRIMARY_COORD_FIELDS = ("coord1", "coord2", "coord3")

_REQUIRED_FIELDS = ("id", "identifier", "typ")
_TEXT_FIELDS = (
    "coord1",
    "coord2",
    "coord3",
    "coord4",
    "pm",
    "spec_type",
    "morph_type",
    "ang_size",
    "pretty_name",
)
_FLOAT_FIELDS = (
    "plx",
    "radvel",
    "redshift",
    "cz",
    "mag_u",
    "mag_b",
    "mag_v",
    "mag_r",
    "mag_i",
)
_ABSENT = ("", "~")


class SimbadError(Exception):
    """Base class for import failures that abort the whole pass."""


class CoordNotFoundError(SimbadError):
    """A required coordinate column was absent from a record."""


class UnspecifiedError(SimbadError):
    """Unexpected failure while resolving a record."""


class CatalogFormatError(SimbadError):
    """The catalog file cannot be read as a SIMBAD export."""


@dataclass(frozen=True)
class ImportOptions:
    """Knobs for a single import pass."""

    dtype: FloatDType = DEFAULT_DTYPE
    strict_coordinates: bool = False  # Missing coordinate column aborts the import
    name_fallback: bool = False  # Use identifier when "pretty name" is absent


def _text(value: object) -> str | None:
    """Stripped cell text, or None for cells pandas padded with NaN."""
    if not isinstance(value, str):
        return None
    return value.strip()


def _optional(value: object) -> str | None:
    text = _text(value)
    if text is None or text in _ABSENT:
        return None
    return text


def record_from_row(row: dict[str, object]) -> Record:
    """Build a Record from one row keyed by Record field names.

    Args:
        row: Mapping of field name to raw cell value.

    Returns:
        Record with optional fields set to None where absent.

    Raises:
        ValueError: If a required field is missing or a numeric field does not parse.
    """
    for name in _REQUIRED_FIELDS:
        if _text(row.get(name)) is None:
            raise ValueError(f"missing required field '{name}'")

    raw_id = _text(row["id"])
    if not raw_id.isdigit():
        raise ValueError(f"invalid row number {raw_id!r}")

    values: dict[str, object] = {
        "id": int(raw_id),
        "identifier": _text(row["identifier"]),
        "typ": _text(row["typ"]),
    }
    for name in _TEXT_FIELDS:
        values[name] = _optional(row.get(name))
    for name in _FLOAT_FIELDS:
        text = _optional(row.get(name))
        if text is None:
            values[name] = None
            continue
        try:
            values[name] = float(text)
        except ValueError:
            raise ValueError(f"field '{name}' is not a number: {text!r}") from None
    return Record(**values)


def _field_count_error(count: int, width: int) -> str | None:
    """Describe a row whose field count differs from the header's, else None."""
    if count == width:
        return None
    if count > width + 1:
        return f"row has more than {width + 1} fields, header has {width}"
    return f"row has {count} fields, header has {width}"


def read_catalog(path: str | Path) -> list[RowResult]:
    """Read a ``;``-delimited SIMBAD export into one RowResult per data row.

    Rows that cannot be turned into a Record (wrong field count, bad numbers,
    missing required cells) are kept as RowResults carrying an error, in file
    order, so callers can count them. Every row must have as many fields as
    the header; a trailing ``;`` is fine when the header carries one too.

    Args:
        path: Path to the export.

    Returns:
        List of RowResult in file order.

    Raises:
        CatalogFormatError: If the file is unreadable or lacks a required column.
    """
    path = Path(path)
    try:
        header = pd.read_csv(
            path,
            sep=";",
            header=None,
            nrows=1,
            dtype=str,
            keep_default_na=False,
            engine="python",
        )
    except (OSError, pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise CatalogFormatError(f"Cannot read catalog {path}: {e}") from e

    names = [str(c).strip() for c in header.iloc[0]]
    width = len(names)
    if width > 1 and not names[-1]:
        names.pop()
    columns = [COLUMN_ALIASES.get(name, name) for name in names]
    missing = [name for name in _REQUIRED_FIELDS if name not in columns]
    if missing:
        raise CatalogFormatError(f"Catalog {path} is missing columns: {missing}")

    # Two spare columns: real cells are strings (possibly empty) and only the
    # padding of short rows is NaN, so counting strings gives the field count.
    # Rows longer than the spare width are cut, which still counts as too long.
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            frame = pd.read_csv(
                path,
                sep=";",
                header=None,
                skiprows=1,
                names=list(range(width + 2)),
                dtype=str,
                keep_default_na=False,
                index_col=False,
                engine="python",
            )
    except pd.errors.EmptyDataError:
        frame = pd.DataFrame()
    except pd.errors.ParserError as e:
        raise CatalogFormatError(f"Cannot parse catalog {path}: {e}") from e

    results: list[RowResult] = []
    for index, cells in enumerate(frame.itertuples(index=False, name=None)):
        fields = [cell for cell in cells if isinstance(cell, str)]
        error = _field_count_error(len(fields), width)
        if error is None:
            try:
                record = record_from_row(dict(zip(columns, fields)))
            except ValueError as e:
                error = str(e)
        if error is not None:
            results.append(RowResult(index=index, record=None, error=error))
            continue
        results.append(RowResult(index=index, record=record))

    logger.debug(f"Read {len(results)} rows from {path}")
    return results


def distance_from_parallax(
    parallax_mas: float, dtype: FloatDType = DEFAULT_DTYPE
) -> np.floating:
    """Distance in light-years for a parallax in milliarcseconds.

    A parallax of zero (or one small enough to overflow) gives distance 0
    rather than inf/nan.
    """
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        distance = dtype(LIGHT_YEARS_PER_PARSEC) / (
            dtype(parallax_mas) / dtype(MAS_PER_ARCSEC)
        )
    if not np.isfinite(distance):
        return dtype(0.0)
    return distance


def _coordinate_failure(
    record: Record, index: int, reason: OutcomeReason, detail: str, strict: bool
) -> RowOutcome:
    if strict:
        logger.error(f"Aborting import at record {record.id}: {detail}")
        raise CoordNotFoundError(f"record {record.id} ({record.identifier}): {detail}")
    return RowOutcome(index=index, record_id=record.id, reason=reason, detail=detail)


def resolve_record(
    record: Record, index: int, options: ImportOptions | None = None
) -> RowOutcome:
    """Turn one Record into a RowOutcome.

    Steps, in order: parallax check, distance, coordinate parsing and
    averaging, spectral type check, companion check, display name, Star.

    Args:
        record: Raw catalog row.
        index: Position of the row in the input.
        options: Import knobs. Defaults to ``ImportOptions()``.

    Returns:
        RowOutcome; ``star`` is set only for imported rows.

    Raises:
        CoordNotFoundError: In strict mode, when coordinates are missing or unreadable.
    """
    options = options or ImportOptions()
    dtype = options.dtype

    if record.plx is None:
        return RowOutcome(index, record.id, OutcomeReason.MISSING_PARALLAX)

    distance = distance_from_parallax(record.plx, dtype)

    raw_coords = [getattr(record, name) for name in PRIMARY_COORD_FIELDS]
    absent = [
        name for name, raw in zip(PRIMARY_COORD_FIELDS, raw_coords) if raw is None
    ]
    if absent:
        return _coordinate_failure(
            record,
            index,
            OutcomeReason.MISSING_COORDINATE,
            f"missing coordinate columns {absent}",
            options.strict_coordinates,
        )

    readings: list[EquatorialCoordinate] = []
    for raw in raw_coords:
        coord = parse_coord(raw, dtype=dtype)
        if coord is not None:
            readings.append(coord)
    if not readings:
        return _coordinate_failure(
            record,
            index,
            OutcomeReason.UNPARSABLE_COORDINATES,
            "no coordinate column could be parsed",
            options.strict_coordinates,
        )

    coord = average_coords(readings, dtype=dtype)
    position = StellarPosition(distance=distance, coord=coord)

    if record.spec_type is None:
        return RowOutcome(index, record.id, OutcomeReason.MISSING_SPECTRAL_TYPE)
    if record.identifier.endswith(COMPANION_SUFFIX):
        return RowOutcome(index, record.id, OutcomeReason.COMPANION_STAR)

    if record.pretty_name is not None:
        name = record.pretty_name
    elif options.name_fallback:
        name = record.identifier
    else:
        name = ""

    star = Star(
        id=record.id,
        position=position.to_cartesian(),
        name=name,
        spectral_class=record.spec_type,
        constellation=UNKNOWN_CONSTELLATION,
    )
    return RowOutcome(index, record.id, OutcomeReason.OK, star=star)


def _as_row_results(rows: Iterable[RowResult | Record]) -> Iterator[RowResult]:
    for index, row in enumerate(rows):
        if isinstance(row, Record):
            yield RowResult(index=index, record=row)
        else:
            yield row


def import_catalog(
    rows: Iterable[RowResult | Record], options: ImportOptions | None = None
) -> ImportReport:
    """Resolve every row into an outcome, preserving input order.

    Args:
        rows: RowResults from ``read_catalog``, or bare Records.
        options: Import knobs. Defaults to ``ImportOptions()``.

    Returns:
        ImportReport with one outcome per input row.

    Raises:
        CoordNotFoundError: In strict mode; no partial report is returned.
        UnspecifiedError: If resolving a row fails unexpectedly.
    """
    options = options or ImportOptions()
    outcomes: list[RowOutcome] = []

    for row in _as_row_results(rows):
        if row.record is None:
            outcome = RowOutcome(
                index=row.index,
                record_id=None,
                reason=OutcomeReason.MALFORMED_ROW,
                detail=row.error or "",
            )
        else:
            try:
                outcome = resolve_record(row.record, row.index, options)
            except SimbadError:
                raise
            except (ArithmeticError, ValueError, TypeError) as e:
                raise UnspecifiedError(
                    f"record {row.record.id} ({row.record.identifier}): {e}"
                ) from e

        if outcome.star is None:
            logger.debug(
                f"Row {outcome.index} {outcome.status.value}: "
                f"{outcome.reason.value} {outcome.detail}".rstrip()
            )
        outcomes.append(outcome)

    report = ImportReport(outcomes=tuple(outcomes))
    logger.info(
        f"Imported {len(report.stars)}/{len(outcomes)} rows "
        f"({len(report.by_status(OutcomeStatus.SKIPPED))} skipped, "
        f"{len(report.by_status(OutcomeStatus.FAILED))} failed)"
    )
    return report


def import_stars(
    path: str | Path, options: ImportOptions | None = None
) -> ImportReport:
    """Read a SIMBAD export and import it in one call."""
    return import_catalog(read_catalog(path), options)
