"""Matplotlib static PNG renderer."""

from collections.abc import Sequence
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from simbadstars.models import Star

_DEFAULT_RESULTS_DIR = Path("results")


def _marker_sizes(stars: Sequence[Star], max_star_size: float = 60.0) -> np.ndarray:
    """Closer stars get larger markers; the origin star gets the maximum."""
    distances = np.array([s.distance for s in stars], dtype=np.float64)
    return max_star_size / (1.0 + distances / 10.0)


def render_static_chart(stars: Sequence[Star], chart_size: int = 10) -> Figure:
    """Render imported stars as a static 3D scatter around the Sun.

    Args:
        stars: Imported stars, Cartesian positions in light-years.
        chart_size: Output image size in inches.

    Returns:
        matplotlib Figure object.
    """
    fig = plt.figure(figsize=(chart_size, chart_size))
    ax = fig.add_subplot(projection="3d")
    fig.patch.set_facecolor("black")
    ax.set_facecolor("black")

    positions = np.array([s.position for s in stars], dtype=np.float64).reshape(-1, 3)

    ax.scatter(
        positions[:, 0],
        positions[:, 1],
        positions[:, 2],
        s=_marker_sizes(stars),
        color="white",
        marker=".",
        linewidths=0,
        depthshade=False,
    )
    ax.scatter([0.0], [0.0], [0.0], s=40, color="#ffd54f", marker="*", linewidths=0)

    for star, (x, y, z) in zip(stars, positions):
        if star.name:
            ax.text(x, y, z, star.name, color="#7ec8e3", fontsize=6)

    limit = float(np.abs(positions).max()) if len(positions) else 1.0
    limit = limit or 1.0
    ax.set_xlim(-limit, limit)
    ax.set_ylim(-limit, limit)
    ax.set_zlim(-limit, limit)
    ax.axis("off")

    return fig


def save_static_chart(
    stars: Sequence[Star],
    output_path: Path | None = None,
    results_dir: Path = _DEFAULT_RESULTS_DIR,
) -> Path:
    """Save imported stars as a PNG file.

    Args:
        stars: Imported stars.
        output_path: Destination path. Auto-generated under ``results_dir`` if None.
        results_dir: Directory for auto-generated file names.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        output_path = results_dir / f"stars__{len(stars)}.png"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_chart(stars)
    fig.savefig(output_path, facecolor="black")
    plt.close(fig)
    return output_path
