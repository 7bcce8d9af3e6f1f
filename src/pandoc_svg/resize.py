"""Resolve the final ``width``/``height`` of the SVG root element."""
from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional

from .dimensions import (
    ROOT_FONT_SIZE_PX,
    format_number,
    parse_dimension,
    parse_target_dimension,
)


@dataclass
class ResizeOptions:
    scale_factor: Optional[float] = None
    width: Optional[str] = None
    height: Optional[str] = None


def _finite(*values: float) -> bool:
    return all(math.isfinite(value) for value in values)


def _apply(root: ET.Element, width: str, height: str) -> None:
    root.set("width", width)
    root.set("height", height)


def resize(
    tree: ET.ElementTree,
    scale_factor: Optional[float] = None,
    width: Optional[str] = None,
    height: Optional[str] = None,
) -> None:
    """Resize the SVG root in place.

    Without a requested ``width``/``height`` absolute sizes are converted to
    ``em`` (16px root font size) and multiplied by ``scale_factor``. With one
    of them, the other follows from the aspect ratio. With both, both are
    applied as given. SVGs already sized in relative units only get
    ``scale_factor`` applied. Invalid sizes leave the SVG untouched.
    """
    if scale_factor is None:
        scale_factor = 1.0
    root = tree.getroot()

    svg_width = parse_dimension(root.get("width"))
    svg_height = parse_dimension(root.get("height"))
    if svg_width is None or svg_height is None:
        return

    if svg_width.is_relative or svg_height.is_relative:
        new_width = svg_width.scaled(scale_factor)
        new_height = svg_height.scaled(scale_factor)
        if _finite(new_width.value, new_height.value):
            _apply(root, str(new_width), str(new_height))
        return

    width_px = svg_width.to_pixels()
    height_px = svg_height.to_pixels()
    if not _finite(width_px, height_px):
        return

    if width is None and height is None:
        width_em = scale_factor * width_px / ROOT_FONT_SIZE_PX
        height_em = scale_factor * height_px / ROOT_FONT_SIZE_PX
        if _finite(width_em, height_em):
            _apply(root, format_number(width_em) + "em", format_number(height_em) + "em")
        return

    if width is not None and height is not None:
        target_width = parse_target_dimension(width)
        target_height = parse_target_dimension(height)
        if target_width is None or target_height is None:
            return
        _apply(root, _requested(width), _requested(height))
        return

    if height_px == 0:
        return
    aspect_ratio = width_px / height_px

    if width is None:
        target_height = parse_target_dimension(height)
        if target_height is None:
            return
        new_width = target_height.value * aspect_ratio
        if _finite(new_width):
            _apply(root, format_number(new_width) + target_height.unit, _requested(height))
        return

    target_width = parse_target_dimension(width)
    if target_width is None or aspect_ratio == 0:
        return
    new_height = target_width.value / aspect_ratio
    if _finite(new_height):
        _apply(root, _requested(width), format_number(new_height) + target_width.unit)


def _requested(text: str) -> str:
    # Written through verbatim apart from the one unit CSS doesn't know.
    return text.strip().replace("inch", "in")
