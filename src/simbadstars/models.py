"""Data model definitions: explicit boundaries between raw rows, import outcomes, and stars."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

UNKNOWN_CONSTELLATION = "?"


@dataclass(frozen=True)
class Record:
    """One raw catalog row. Not yet validated beyond field types."""

    id: int  # "#" column, row number in the export
    identifier: str  # Main SIMBAD identifier ("HD 39801")
    typ: str  # Object type ("*", "SB*", ...)
    coord1: str | None = None  # ICRS, J2000 sexagesimal
    coord2: str | None = None  # FK5, J2000 sexagesimal
    coord3: str | None = None  # FK4, B1950 sexagesimal
    coord4: str | None = None  # Galactic, decimal degrees
    pm: str | None = None  # Proper motion, raw "pmra pmdec"
    plx: float | None = None  # Parallax (mas)
    radvel: float | None = None  # Radial velocity (km/s)
    redshift: float | None = None
    cz: float | None = None
    mag_u: float | None = None
    mag_b: float | None = None
    mag_v: float | None = None
    mag_r: float | None = None
    mag_i: float | None = None
    spec_type: str | None = None  # Spectral type ("M1-M2Ia-Iab")
    morph_type: str | None = None
    ang_size: str | None = None
    pretty_name: str | None = None  # Display name ("Betelgeuse")


@dataclass(frozen=True)
class RowResult:
    """A row read from the catalog file: a Record, or why it could not be built."""

    index: int  # 0-based data row position in the file
    record: Record | None
    error: str | None = None


@dataclass(frozen=True, eq=False)
class Star:
    """Resolved star. Position is Cartesian, in the distance unit (light-years)."""

    id: int
    position: np.ndarray  # shape (3,)
    name: str
    spectral_class: str
    constellation: str = UNKNOWN_CONSTELLATION

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(self.position))


class OutcomeStatus(Enum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    FAILED = "failed"


class OutcomeReason(Enum):
    """Why a row ended up the way it did. Each reason belongs to one status."""

    OK = "ok"
    MISSING_PARALLAX = "missing_parallax"
    MISSING_SPECTRAL_TYPE = "missing_spectral_type"
    COMPANION_STAR = "companion_star"
    MALFORMED_ROW = "malformed_row"
    MISSING_COORDINATE = "missing_coordinate"
    UNPARSABLE_COORDINATES = "unparsable_coordinates"

    @property
    def status(self) -> OutcomeStatus:
        if self is OutcomeReason.OK:
            return OutcomeStatus.IMPORTED
        if self in _SKIP_REASONS:
            return OutcomeStatus.SKIPPED
        return OutcomeStatus.FAILED


_SKIP_REASONS = frozenset(
    {
        OutcomeReason.MISSING_PARALLAX,
        OutcomeReason.MISSING_SPECTRAL_TYPE,
        OutcomeReason.COMPANION_STAR,
    }
)


@dataclass(frozen=True)
class RowOutcome:
    """What happened to a single row during import."""

    index: int
    record_id: int | None  # None when the row never became a Record
    reason: OutcomeReason
    star: Star | None = None
    detail: str = ""

    @property
    def status(self) -> OutcomeStatus:
        return self.reason.status


@dataclass(frozen=True)
class ImportReport:
    """The sole output of an import pass. Outcomes are in input order."""

    outcomes: tuple[RowOutcome, ...] = field(default_factory=tuple)

    @property
    def stars(self) -> tuple[Star, ...]:
        return tuple(o.star for o in self.outcomes if o.star is not None)

    def counts(self) -> Counter[OutcomeReason]:
        return Counter(o.reason for o in self.outcomes)

    def by_status(self, status: OutcomeStatus) -> tuple[RowOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status is status)
