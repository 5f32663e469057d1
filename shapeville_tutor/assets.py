"""Display keys handed from the engine to the renderer.

The engine never loads images. It labels each problem with a key such as
``"shape2D/circle"`` or ``"sector/3"``; the renderer decides how to draw it
and falls back to plain text when it has nothing for a key.
"""

from __future__ import annotations


def shape_key(dimension: int, name: str) -> str:
    return f"shape{int(dimension)}D/{name}"


def angle_key(degrees: int) -> str:
    return f"angle/{int(degrees)}"


def polygon_key(family: str) -> str:
    return f"polygon/{family.lower()}"


def circle_key(mode: str) -> str:
    return f"circle/{mode}"


def composite_key(figure_id: int) -> str:
    return f"composite/{int(figure_id)}"


def sector_key(sector_id: int) -> str:
    return f"sector/{int(sector_id)}"


def split_key(key: str) -> tuple[str, str]:
    """Split ``"family/name"``. Keys without a slash map to an empty name."""

    family, _, name = key.partition("/")
    return family, name
