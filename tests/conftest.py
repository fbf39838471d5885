from pathlib import Path

import matplotlib
import numpy as np
import pytest

from simbadstars.models import Star

matplotlib.use("Agg")

HEADER = [
    "#",
    "identifier",
    "typ",
    "coord1 (ICRS,J2000/2000)",
    "coord2 (FK5,J2000/2000)",
    "coord3 (FK4,B1950/1950)",
    "coord4 (Gal,J2000/2000)",
    "pm",
    "plx",
    "radvel",
    "redshift",
    "cz",
    "Mag U",
    "Mag B",
    "Mag V",
    "Mag R",
    "Mag I",
    "spec. type",
    "morph. type",
    "ang. size",
    "pretty name",
]

BETELGEUSE_ICRS = "05 55 10.30536 +07 24 25.4304"
BETELGEUSE_FK4 = "05 52 27.81 +07 23 57.9"

_FIELD_FOR_HEADER = {
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

CLEARED_ENV = (
    "SIMBADSTARS_CATALOG",
    "SIMBADSTARS_PRECISION",
    "SIMBADSTARS_STRICT",
    "SIMBADSTARS_NAME_FALLBACK",
    "SIMBADSTARS_RESULTS_DIR",
)


def catalog_row(row_id: int, identifier: str, **fields: str) -> dict[str, str]:
    """A catalog row with every coordinate column filled and a valid parallax."""
    row = {
        "id": str(row_id),
        "identifier": identifier,
        "typ": "*",
        "coord1": BETELGEUSE_ICRS,
        "coord2": BETELGEUSE_ICRS,
        "coord3": BETELGEUSE_FK4,
        "coord4": "199.7872 -08.9586",
        "pm": "27.54 11.30",
        "plx": "100",
        "mag_v": "0.42",
        "spec_type": "G2V",
        "pretty_name": "",
    }
    row.update(fields)
    return row


def write_catalog(tmp_path: Path, rows: list[dict[str, str]], name: str = "simbad.csv") -> Path:
    lines = [";".join(HEADER)]
    for row in rows:
        cells = [row.get(_FIELD_FOR_HEADER.get(h, h), "") for h in HEADER]
        lines.append(";".join(cells))
    path = tmp_path / name
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def three_row_catalog(tmp_path: Path) -> Path:
    """One importable star, one without parallax, one binary companion."""
    return write_catalog(
        tmp_path,
        [
            catalog_row(1, "HD1", pretty_name="Betelgeuse"),
            catalog_row(2, "HD2", plx=""),
            catalog_row(3, "HD3B"),
        ],
    )


def make_star(star_id: int, position: tuple[float, float, float], name: str = "") -> Star:
    return Star(
        id=star_id,
        position=np.array(position, dtype=np.float64),
        name=name,
        spectral_class="G2V",
    )


@pytest.fixture
def clean_env(monkeypatch):
    for name in CLEARED_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
