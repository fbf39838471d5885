"""Environment-driven settings. Entry points call ``load_dotenv()`` before ``load_settings()``."""

import os
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from simbadstars.catalog import ImportOptions
from simbadstars.coordinates import FloatDType

PRECISIONS: dict[str, FloatDType] = {
    "float32": np.float32,
    "float64": np.float64,
}

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("", "0", "false", "no", "off")


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for the CLI and renderers."""

    catalog_path: Path | None  # SIMBADSTARS_CATALOG
    precision: str  # SIMBADSTARS_PRECISION, key of PRECISIONS
    strict_coordinates: bool  # SIMBADSTARS_STRICT
    name_fallback: bool  # SIMBADSTARS_NAME_FALLBACK
    results_dir: Path  # SIMBADSTARS_RESULTS_DIR

    @property
    def dtype(self) -> FloatDType:
        return PRECISIONS[self.precision]

    def import_options(self) -> ImportOptions:
        return ImportOptions(
            dtype=self.dtype,
            strict_coordinates=self.strict_coordinates,
            name_fallback=self.name_fallback,
        )


def _flag(name: str) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def load_settings() -> Settings:
    """Build Settings from ``SIMBADSTARS_*`` environment variables.

    Returns:
        Settings with defaults for anything unset.

    Raises:
        ValueError: If a variable holds an unusable value.
    """
    precision = os.environ.get("SIMBADSTARS_PRECISION", "float64").strip().lower()
    if precision not in PRECISIONS:
        raise ValueError(
            f"SIMBADSTARS_PRECISION must be one of {sorted(PRECISIONS)}, got {precision!r}"
        )

    catalog = os.environ.get("SIMBADSTARS_CATALOG", "").strip()
    results_dir = os.environ.get("SIMBADSTARS_RESULTS_DIR", "").strip() or "results"

    return Settings(
        catalog_path=Path(catalog) if catalog else None,
        precision=precision,
        strict_coordinates=_flag("SIMBADSTARS_STRICT"),
        name_fallback=_flag("SIMBADSTARS_NAME_FALLBACK"),
        results_dir=Path(results_dir),
    )
