"""Replace SVG ``<text>`` elements with ``<foreignObject>`` elements holding HTML.

The text is treated as markdown and may contain ``$...$`` math, which ends up
in the MathJax ``\\(...\\)`` form.
"""
from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

from .dimensions import parse_dimension, round_significant
from .errors import PipelineError
from .style import StyleDeclaration
from .svgdom import (
    HTML_VOID_ELEMENTS,
    XHTML_NS,
    child_elements,
    iter_local,
    local_name,
    namespace_of,
    parent_map,
    prepend,
    qual,
    remove,
    replace,
    replace_with_text,
    text_content,
    xhtml,
)

if TYPE_CHECKING:
    from .context import PipelineContext

DEFAULT_FONT_SIZE = "16px"
# SVG text has no wrapping width; wide enough that anchored text isn't clipped.
FALLBACK_WIDTH = "1000"
# Baseline marker height in multiples of the font size. Large enough for the
# tallest inline math.
BASELINE_FACTOR = 20

_EQUATION_RE = re.compile(r"\$[^$]+\$")
_MATH_RE = re.compile(r"\$(.+?)\$")

_ANCHOR_SHIFTS = {
    "middle": ("-50%", "center"),
    "end": ("-100%", "end"),
}


def convert_mathjax_delimiters(text: str) -> str:
    """``$...$`` -> ``\\(...\\)``, the delimiters MathJax expects by default."""
    return _MATH_RE.sub(r"\\(\1\\)", text)


def markdown_to_html(markdown: str, context: "PipelineContext") -> str:
    # A lone equation is common enough to skip running pandoc for it.
    if _EQUATION_RE.fullmatch(markdown):
        return '<p><span class="math inline">' + convert_mathjax_delimiters(markdown) + "</span></p>"
    if context.pandoc.available(context.diagnostics):
        html = context.pandoc.run(["--from=markdown", "--to=html", "--mathjax"], markdown)
        return html.rstrip("\n")
    return "<p>" + _MATH_RE.sub(r'<span class="math inline">\\(\1\\)</span>', markdown) + "</p>"


def flatten_text_children(text_elt: ET.Element) -> None:
    """Replace all children of ``text_elt`` by their text content."""
    style = StyleDeclaration.of(text_elt)
    promoted = False
    for child in list(text_elt):
        # Inkscape sometimes sets font-size on a <tspan> but not on its <text>.
        if "font-size" not in style:
            font_size = StyleDeclaration.of(child).get("font-size")
            if font_size:
                style.set("font-size", font_size)
                promoted = True
        replace_with_text(text_elt, child, text_content(child))
    if promoted:
        style.apply(text_elt)


def _parse_fragment(html: str) -> ET.Element:
    try:
        return ET.fromstring(f'<div xmlns="{XHTML_NS}">{html}</div>')
    except ET.ParseError as exc:
        raise PipelineError(
            "E_TEXT_CONVERSION", f"could not parse HTML converted from SVG text: {exc}"
        ) from exc


def _baseline_height(font_size: str) -> str:
    dim = parse_dimension(font_size)
    if dim is not None and dim.is_absolute:
        return f"{math.ceil(round_significant(BASELINE_FACTOR * dim.to_pixels()))}px"
    # em inside the block resolves against the same font size.
    return f"{BASELINE_FACTOR}em"


def build_foreign_object(text_elt: ET.Element, html: str) -> ET.Element:
    style = StyleDeclaration.of(text_elt)
    block = ET.Element(qual(namespace_of(text_elt.tag), "foreignObject"))
    for attr in ("x", "y"):
        value = text_elt.get(attr)
        if value is not None:
            block.set(attr, value)
    # Inkscape keeps the wrapping width of flowed text in `inline-size`.
    block.set("width", style.get("inline-size") or FALLBACK_WIDTH)
    block.set("height", "1")
    block.set("overflow", "visible")
    transform = text_elt.get("transform")
    if transform:
        block.set("transform", transform)

    font_size = style.get("font-size") or DEFAULT_FONT_SIZE
    block_style = StyleDeclaration()
    block_style.set("font-size", font_size)
    for source, target in (("font-family", "font-family"), ("fill", "color"), ("opacity", "opacity")):
        value = style.get(source)
        if value:
            block_style.set(target, value)

    content = _parse_fragment(html)
    block.text = content.text
    block.extend(list(content))
    elements = child_elements(block)

    # <text> is positioned by its baseline. Inline-blocks align by baseline,
    # so an empty inline-block span taller than any line, pulled up by the
    # same amount, puts the first line's baseline at y.
    if elements and local_name(elements[0].tag) not in HTML_VOID_ELEMENTS:
        height = _baseline_height(font_size)
        first = elements[0]
        prepend(first, ET.Element(xhtml("span"), {"style": f"height:{height};display:inline-block"}))
        first_style = StyleDeclaration.of(first)
        first_style.set("margin-top", f"-{height}")
        first_style.apply(first)

    # The shift goes on the children: the block's own width rarely matches its content.
    anchor = style.get("text-anchor") or "start"
    if anchor in _ANCHOR_SHIFTS:
        shift, align = _ANCHOR_SHIFTS[anchor]
        for child in elements:
            child_style = StyleDeclaration.of(child)
            child_style.set("transform", f"translateX({shift})")
            child_style.apply(child)
        block_style.set("text-align", align)

    block_style.apply(block)
    return block


def text_to_foreign_object(tree: ET.ElementTree, context: "PipelineContext") -> None:
    root = tree.getroot()
    parents = parent_map(root)
    for text_elt in iter_local(root, "text"):
        parent = parents.get(text_elt)
        if parent is None:
            continue
        flatten_text_children(text_elt)
        content = text_elt.text or ""
        if not content.strip():
            remove(parent, text_elt)
            continue
        html = markdown_to_html(escape(content), context)
        replace(parent, text_elt, build_foreign_object(text_elt, html))
