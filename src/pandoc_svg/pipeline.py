"""Run the SVG passes in their required order."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Optional, Union

from .context import PipelineContext
from .optimize import optimize
from .resize import ResizeOptions, resize
from .svgdom import parse_svg, serialize
from .text import text_to_foreign_object


def process_svg(
    tree: ET.ElementTree,
    context: PipelineContext,
    *,
    resize_options: Optional[ResizeOptions] = None,
) -> None:
    """Resize, optimize and convert text of ``tree`` in place.

    Resizing comes first since SVGO may rewrite ``width``/``height``. SVGO must
    see the tree before text is converted to ``<foreignObject>``.
    """
    if resize_options is not None:
        resize(
            tree,
            scale_factor=resize_options.scale_factor,
            width=resize_options.width,
            height=resize_options.height,
        )
    optimize(tree, context)
    text_to_foreign_object(tree, context)


def convert_svg(
    svg_text: Union[str, bytes],
    context: Optional[PipelineContext] = None,
    *,
    resize_options: Optional[ResizeOptions] = None,
) -> str:
    context = context or PipelineContext.create()
    tree = parse_svg(svg_text)
    process_svg(tree, context, resize_options=resize_options)
    return serialize(tree)
