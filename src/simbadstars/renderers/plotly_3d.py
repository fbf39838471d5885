"""Plotly 3D interactive star map renderer.

Plots Cartesian star positions directly, Sun at the origin.
Supports drag rotation and wheel zoom; hover shows name, class and distance.
"""

from collections.abc import Sequence

import numpy as np
import plotly.graph_objects as go

from simbadstars.models import Star

_BG = "#050a1a"
_STAR_COLOR = "#ffffff"
_SUN_COLOR = "#ffd54f"


def render_plotly_chart(stars: Sequence[Star]) -> go.Figure:
    """Render imported stars as an interactive 3D scatter.

    Args:
        stars: Imported stars, Cartesian positions in light-years.

    Returns:
        Plotly Figure object.
    """
    positions = np.array([s.position for s in stars], dtype=np.float64).reshape(-1, 3)
    distances = np.array([s.distance for s in stars], dtype=np.float64)

    # Nearer stars larger, clipped so distant ones stay visible
    sizes = np.clip(8 - np.log1p(distances), 2, 8)

    hover = [
        f"{s.name or '#' + str(s.id)}<br>{s.spectral_class}<br>{s.distance:.2f} ly"
        for s in stars
    ]

    star_trace = go.Scatter3d(
        x=positions[:, 0],
        y=positions[:, 1],
        z=positions[:, 2],
        mode="markers",
        marker=dict(
            size=list(sizes),
            color=_STAR_COLOR,
            opacity=0.9,
            line=dict(width=0),
        ),
        text=hover,
        hoverinfo="text",
        name="stars",
    )

    sun_trace = go.Scatter3d(
        x=[0.0],
        y=[0.0],
        z=[0.0],
        mode="markers",
        marker=dict(size=6, color=_SUN_COLOR, symbol="diamond"),
        hoverinfo="text",
        text=["Sun"],
        name="sun",
    )

    fig = go.Figure(data=[sun_trace, star_trace])

    hidden_axis = dict(visible=False, showbackground=False)
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=800,
        height=800,
        scene=dict(
            xaxis=hidden_axis,
            yaxis=hidden_axis,
            zaxis=hidden_axis,
            aspectmode="data",
            bgcolor=_BG,
        ),
    )

    return fig
