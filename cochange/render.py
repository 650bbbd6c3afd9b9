"""Render a partition as a strip of colored blocks.

One vertical block per group, left to right in partition order, each
labeled "Group N". Drawn on a Matplotlib Agg canvas so no display is
needed.
"""

from collections.abc import Sequence
from pathlib import Path

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from cochange.errors import RenderFailure
from cochange.logging import logger

# red, green, blue, orange, purple; reused cyclically
PALETTE = ("#ff0000", "#00ff00", "#0000ff", "#ff8000", "#800080")

BACKGROUND = "#ffffff"
LABEL_COLOR = "#000000"
LABEL_FONT_SIZE = 14
DPI = 100


def group_color(index: int) -> str:
    """Palette color for the group at a 0-based index."""
    return PALETTE[index % len(PALETTE)]


def _build_figure(group_count: int, width: int, height: int, margin: int) -> Figure:
    fig = Figure(figsize=(width / DPI, height / DPI), dpi=DPI, facecolor=BACKGROUND)
    FigureCanvasAgg(fig)

    # One axes covering the whole figure, in pixel coordinates
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_xlim(0, width)
    ax.set_ylim(0, height)
    ax.set_axis_off()

    if group_count == 0:
        return fig

    block_width = (width - 2 * margin) / group_count
    block_height = height - 2 * margin

    for i in range(group_count):
        x = margin + i * block_width
        ax.add_patch(
            Rectangle(
                (x, margin),
                block_width,
                block_height,
                facecolor=group_color(i),
                edgecolor="none",
            )
        )
        ax.text(
            x + block_width / 2,
            margin + block_height,
            f"Group {i + 1}",
            color=LABEL_COLOR,
            fontsize=LABEL_FONT_SIZE,
            ha="center",
            va="top",
        )

    return fig


def render_partition(
    groups: Sequence[set[str]],
    output_path: str | Path,
    *,
    width: int = 800,
    height: int = 600,
    margin: int = 20,
) -> Path:
    """Write a PNG with one colored block per group.

    Args:
        groups: Partition in display order.
        output_path: PNG file to write. Its directory must exist.
        width: Image width in pixels.
        height: Image height in pixels.
        margin: Blank border in pixels.

    Returns:
        Path of the written image.

    Raises:
        ValueError: If the margin leaves no drawing area.
        RenderFailure: If the image cannot be written.
    """
    if width <= 2 * margin or height <= 2 * margin:
        raise ValueError(f"margin {margin} leaves no drawing area in {width}x{height}")

    output_path = Path(output_path)
    fig = _build_figure(len(groups), width, height, margin)

    try:
        fig.savefig(output_path, format="png", dpi=DPI, facecolor=BACKGROUND)
    except OSError as e:
        raise RenderFailure(output_path, str(e)) from e

    logger.info("Saved group image to %s", output_path)
    return output_path
