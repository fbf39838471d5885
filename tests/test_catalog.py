import math

import numpy as np
import pytest

from simbadstars.catalog import (
    CatalogFormatError,
    CoordNotFoundError,
    ImportOptions,
    distance_from_parallax,
    import_catalog,
    import_stars,
    read_catalog,
    record_from_row,
    resolve_record,
)
from simbadstars.models import OutcomeReason, OutcomeStatus, Record
from simbadstars.parsing import parse_coord
from tests.conftest import (
    BETELGEUSE_FK4,
    BETELGEUSE_ICRS,
    catalog_row,
    three_row_catalog,
    write_catalog,
)


def _record(**fields) -> Record:
    base = dict(
        id=1,
        identifier="HD 39801",
        typ="*",
        coord1=BETELGEUSE_ICRS,
        coord2=BETELGEUSE_ICRS,
        coord3=BETELGEUSE_FK4,
        plx=100.0,
        spec_type="M1-M2Ia-Iab",
        pretty_name="Betelgeuse",
    )
    base.update(fields)
    return Record(**base)


def test_end_to_end_three_rows(tmp_path):
    report = import_stars(three_row_catalog(tmp_path))

    assert len(report.stars) == 1
    star = report.stars[0]
    assert star.id == 1
    assert star.name == "Betelgeuse"
    assert star.spectral_class == "G2V"
    assert star.constellation == "?"
    assert star.distance == pytest.approx(32.6)
    assert math.sqrt(float(np.sum(star.position**2))) == pytest.approx(32.6)

    assert [o.reason for o in report.outcomes] == [
        OutcomeReason.OK,
        OutcomeReason.MISSING_PARALLAX,
        OutcomeReason.COMPANION_STAR,
    ]
    assert [o.status for o in report.outcomes] == [
        OutcomeStatus.IMPORTED,
        OutcomeStatus.SKIPPED,
        OutcomeStatus.SKIPPED,
    ]


def test_star_direction_matches_averaged_coordinates(tmp_path):
    report = import_stars(three_row_catalog(tmp_path))
    x, y, z = report.stars[0].position

    icrs = parse_coord(BETELGEUSE_ICRS)
    fk4 = parse_coord(BETELGEUSE_FK4)
    expected_ra = (2 * icrs.right_ascension + fk4.right_ascension) / 3
    expected_dec = (2 * icrs.declination + fk4.declination) / 3

    assert math.atan2(y, x) == pytest.approx(expected_ra)
    assert math.asin(z / 32.6) == pytest.approx(expected_dec, abs=1e-9)


def test_read_catalog_maps_aliases(tmp_path):
    path = write_catalog(
        tmp_path,
        [
            catalog_row(
                7,
                "HD 39801",
                plx="6.55",
                mag_v="0.42",
                radvel="21.91",
                pretty_name="Betelgeuse",
            )
        ],
    )
    [row] = read_catalog(path)

    assert row.index == 0
    assert row.error is None
    record = row.record
    assert record.id == 7
    assert record.identifier == "HD 39801"
    assert record.coord1 == BETELGEUSE_ICRS
    assert record.coord3 == BETELGEUSE_FK4
    assert record.coord4 == "199.7872 -08.9586"
    assert record.plx == 6.55
    assert record.mag_v == 0.42
    assert record.radvel == 21.91
    assert record.mag_u is None
    assert record.spec_type == "G2V"
    assert record.pretty_name == "Betelgeuse"


def test_read_catalog_strips_padding_and_tilde(tmp_path):
    path = write_catalog(
        tmp_path,
        [catalog_row(1, "  HD 1  ", plx=" 12.5 ", radvel="~", spec_type=" K0III ")],
    )
    record = read_catalog(path)[0].record
    assert record.identifier == "HD 1"
    assert record.plx == 12.5
    assert record.radvel is None
    assert record.spec_type == "K0III"


def test_malformed_rows_are_reported_in_order(tmp_path):
    path = write_catalog(
        tmp_path,
        [
            catalog_row(1, "HD1"),
            catalog_row(2, "HD2", plx="abc"),
            catalog_row(3, "HD3"),
            catalog_row("x", "HD4"),
        ],
    )
    rows = read_catalog(path)
    assert [r.record is None for r in rows] == [False, True, False, True]
    assert "plx" in rows[1].error

    report = import_catalog(rows)
    assert [o.reason for o in report.outcomes] == [
        OutcomeReason.OK,
        OutcomeReason.MALFORMED_ROW,
        OutcomeReason.OK,
        OutcomeReason.MALFORMED_ROW,
    ]
    assert [s.id for s in report.stars] == [1, 3]
    assert report.outcomes[1].record_id is None


def _edit_line(path, line_no, edit):
    lines = path.read_text(encoding="utf-8").splitlines()
    lines[line_no] = edit(lines[line_no])
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_row_with_extra_fields_is_malformed(tmp_path):
    path = write_catalog(
        tmp_path, [catalog_row(1, "HD1"), catalog_row(2, "HD2"), catalog_row(3, "HD3")]
    )
    _edit_line(path, 2, lambda line: line + ";extra;more")

    rows = read_catalog(path)
    assert [r.record is None for r in rows] == [False, True, False]
    assert "fields" in rows[1].error

    report = import_stars(path)
    assert [s.id for s in report.stars] == [1, 3]
    assert report.outcomes[1].reason is OutcomeReason.MALFORMED_ROW
    assert "header has 21" in report.outcomes[1].detail


def test_stray_separator_in_identifier_is_malformed(tmp_path):
    path = write_catalog(tmp_path, [catalog_row(1, "HD;1"), catalog_row(2, "HD2")])
    rows = read_catalog(path)
    assert rows[0].record is None
    assert rows[0].error == "row has 22 fields, header has 21"
    assert rows[1].record.identifier == "HD2"


def test_short_row_is_malformed(tmp_path):
    path = write_catalog(tmp_path, [catalog_row(1, "HD1"), catalog_row(2, "HD2")])
    _edit_line(path, 1, lambda line: line.rsplit(";", 3)[0])

    rows = read_catalog(path)
    assert rows[0].record is None
    assert rows[0].error == "row has 18 fields, header has 21"
    assert rows[1].record is not None


def test_trailing_separator_needs_matching_header(tmp_path):
    path = write_catalog(
        tmp_path,
        [catalog_row(1, "HD1", pretty_name="Betelgeuse"), catalog_row(2, "HD2")],
    )
    _edit_line(path, 1, lambda line: line + ";")
    rows = read_catalog(path)
    assert rows[0].error == "row has 22 fields, header has 21"
    assert rows[1].error is None

    _edit_line(path, 0, lambda line: line + ";")
    _edit_line(path, 2, lambda line: line + ";")
    rows = read_catalog(path)
    assert [r.error for r in rows] == [None, None]
    assert rows[0].record.pretty_name == "Betelgeuse"


def test_header_only_catalog_has_no_rows(tmp_path):
    path = write_catalog(tmp_path, [])
    assert read_catalog(path) == []


def test_missing_header_column(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("identifier;typ\nHD1;*\n", encoding="utf-8")
    with pytest.raises(CatalogFormatError, match="id"):
        read_catalog(path)


def test_missing_file(tmp_path):
    with pytest.raises(CatalogFormatError):
        read_catalog(tmp_path / "nope.csv")


def test_record_from_row_requires_identifier():
    with pytest.raises(ValueError, match="identifier"):
        record_from_row({"id": "1", "typ": "*"})


@pytest.mark.parametrize(
    "parallax, distance",
    [(100.0, 32.6), (1000.0, 3.26), (6.55, 497.7099236641221), (-50.0, -65.2)],
)
def test_distance_from_parallax(parallax, distance):
    assert distance_from_parallax(parallax) == pytest.approx(distance)


@pytest.mark.parametrize("parallax", [0.0, -0.0, 1e-320])
def test_degenerate_parallax_gives_zero_distance(parallax):
    distance = distance_from_parallax(parallax)
    assert distance == 0.0
    assert np.isfinite(distance)


def test_zero_parallax_star_sits_at_origin():
    outcome = resolve_record(_record(plx=0.0), 0)
    assert outcome.reason is OutcomeReason.OK
    np.testing.assert_array_equal(outcome.star.position, np.zeros(3))


def test_missing_coordinate_is_a_row_failure_by_default():
    report = import_catalog([_record(id=1, coord2=None), _record(id=2)])
    first, second = report.outcomes
    assert first.reason is OutcomeReason.MISSING_COORDINATE
    assert first.status is OutcomeStatus.FAILED
    assert "coord2" in first.detail
    assert second.reason is OutcomeReason.OK
    assert [s.id for s in report.stars] == [2]


def test_missing_coordinate_aborts_in_strict_mode():
    options = ImportOptions(strict_coordinates=True)
    with pytest.raises(CoordNotFoundError):
        import_catalog([_record(id=1), _record(id=2, coord1=None)], options)


def test_unparsable_coordinates_are_excluded_from_average():
    good = resolve_record(_record(coord3=BETELGEUSE_ICRS), 0).star
    partial = resolve_record(_record(coord3="not a coordinate"), 0).star
    np.testing.assert_allclose(partial.position, good.position)


def test_all_unparsable_coordinates():
    record = _record(coord1="x", coord2="12 30", coord3="a b c d e f")
    outcome = resolve_record(record, 0)
    assert outcome.reason is OutcomeReason.UNPARSABLE_COORDINATES
    assert outcome.star is None

    with pytest.raises(CoordNotFoundError):
        resolve_record(record, 0, ImportOptions(strict_coordinates=True))


def test_coordinates_checked_before_spectral_type():
    # Order of checks decides the reason when a row has several problems
    assert resolve_record(_record(plx=None, coord1=None), 0).reason is (
        OutcomeReason.MISSING_PARALLAX
    )
    assert resolve_record(_record(spec_type=None, coord1=None), 0).reason is (
        OutcomeReason.MISSING_COORDINATE
    )
    assert resolve_record(_record(spec_type=None, identifier="HD 1B"), 0).reason is (
        OutcomeReason.MISSING_SPECTRAL_TYPE
    )


@pytest.mark.parametrize(
    "identifier, skipped",
    [("alf Cen B", True), ("HD1B", True), ("HD 1b", False), ("B Cen", False)],
)
def test_companion_suffix(identifier, skipped):
    outcome = resolve_record(_record(identifier=identifier), 0)
    assert (outcome.reason is OutcomeReason.COMPANION_STAR) == skipped


def test_display_name_defaults_to_empty():
    outcome = resolve_record(_record(pretty_name=None), 0)
    assert outcome.star.name == ""


def test_display_name_fallback_to_identifier():
    options = ImportOptions(name_fallback=True)
    assert resolve_record(_record(pretty_name=None), 0, options).star.name == "HD 39801"
    assert resolve_record(_record(), 0, options).star.name == "Betelgeuse"


def test_single_precision_import(tmp_path):
    report = import_stars(three_row_catalog(tmp_path), ImportOptions(dtype=np.float32))
    star = report.stars[0]
    assert star.position.dtype == np.float32
    assert star.distance == pytest.approx(32.6, rel=1e-5)


def test_bare_records_are_indexed_in_order():
    report = import_catalog([_record(id=10), _record(id=11, plx=None), _record(id=12)])
    assert [o.index for o in report.outcomes] == [0, 1, 2]
    assert [s.id for s in report.stars] == [10, 12]
    counts = report.counts()
    assert counts[OutcomeReason.OK] == 2
    assert counts[OutcomeReason.MISSING_PARALLAX] == 1
    assert len(report.by_status(OutcomeStatus.SKIPPED)) == 1
