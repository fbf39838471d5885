from pathlib import Path

import numpy as np
import pytest

from simbadstars.config import load_settings


def test_defaults(clean_env):
    settings = load_settings()
    assert settings.catalog_path is None
    assert settings.precision == "float64"
    assert settings.dtype is np.float64
    assert settings.strict_coordinates is False
    assert settings.name_fallback is False
    assert settings.results_dir == Path("results")


def test_environment_overrides(clean_env, tmp_path):
    clean_env.setenv("SIMBADSTARS_CATALOG", str(tmp_path / "simbad.csv"))
    clean_env.setenv("SIMBADSTARS_PRECISION", "Float32")
    clean_env.setenv("SIMBADSTARS_STRICT", "yes")
    clean_env.setenv("SIMBADSTARS_NAME_FALLBACK", "1")
    clean_env.setenv("SIMBADSTARS_RESULTS_DIR", str(tmp_path / "out"))

    settings = load_settings()
    assert settings.catalog_path == tmp_path / "simbad.csv"
    assert settings.dtype is np.float32
    assert settings.results_dir == tmp_path / "out"

    options = settings.import_options()
    assert options.dtype is np.float32
    assert options.strict_coordinates is True
    assert options.name_fallback is True


@pytest.mark.parametrize(
    "name, value",
    [("SIMBADSTARS_PRECISION", "float16"), ("SIMBADSTARS_STRICT", "maybe")],
)
def test_invalid_values(clean_env, name, value):
    clean_env.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        load_settings()
