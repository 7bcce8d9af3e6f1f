"""Pandoc filter action: inline SVG images into HTML output."""
from __future__ import annotations

import json
import math
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple
from xml.sax.saxutils import escape, quoteattr

import pandocfilters

from .attributes import to_html5_keyvals
from .context import PipelineContext
from .diagnostics import Diagnostics
from .errors import PipelineError
from .pandoc_ast import FigureElement, ImageElement, decode
from .pipeline import process_svg
from .resize import ResizeOptions
from .svgdom import parse_svg, serialize

SUPPORTED_FORMATS = ("html",)
DEFAULT_PANDOC_API_VERSION = [1, 23, 1]

IGNORE_CLASS = "ignore"
KEEP_SIZE_CLASS = "keep-size"
DIMENSION_KEYS = ("width", "height")
SCALE_FACTOR_KEY = "scale-factor"

_SVG_PATH_RE = re.compile(r".*\.(?:svg|SVG)$")
_PARAGRAPH_RE = re.compile(r"<p>(?P<content>.*)</p>\n?", re.DOTALL)


def compatible_output_format(fmt: str, diagnostics: Diagnostics) -> bool:
    if fmt in SUPPORTED_FORMATS:
        return True
    diagnostics.warn_once(
        "output-format",
        f"Output format must be {', '.join(SUPPORTED_FORMATS)}. "
        f"Format '{fmt}' is not supported. Aborting.",
    )
    return False


def is_svg(path: str) -> bool:
    return bool(_SVG_PATH_RE.match(path))


def load_svg(path: str) -> ET.ElementTree:
    try:
        svg_data = Path(path).read_bytes()
    except FileNotFoundError as exc:
        raise PipelineError("E_MISSING_FILE", f"File {path} could not be found!") from exc
    except OSError as exc:
        raise PipelineError("E_READ_FILE", f"File {path} could not be read: {exc}") from exc
    try:
        return parse_svg(svg_data)
    except ET.ParseError as exc:
        raise PipelineError("E_PARSE_SVG", f"File {path} is not a well-formed SVG: {exc}") from exc


def _scale_factor(raw: Optional[str], diagnostics: Diagnostics) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value) or value <= 0:
        diagnostics.warn_once(
            f"scale-factor:{raw}", f"Invalid scale-factor '{raw}' is ignored."
        )
        return None
    return value


def caption_to_html(caption: list, context: PipelineContext) -> str:
    if not caption:
        return ""
    if not context.pandoc.available(context.diagnostics):
        return escape(pandocfilters.stringify(caption))
    doc = {
        "pandoc-api-version": context.pandoc_api_version or DEFAULT_PANDOC_API_VERSION,
        "meta": {},
        "blocks": [pandocfilters.Para(caption)],
    }
    html = context.pandoc.run(["--from=json", "--to=html", "--mathjax"], json.dumps(doc))
    match = _PARAGRAPH_RE.fullmatch(html)
    return match.group("content") if match else html.strip()


def _split_keyvals(
    keyvals: List[Tuple[str, str]]
) -> Tuple[dict, Optional[str], List[Tuple[str, str]]]:
    dimensions = {}
    scale_factor = None
    rest = []
    for key, value in keyvals:
        if key in DIMENSION_KEYS:
            dimensions[key] = value
        elif key == SCALE_FACTOR_KEY:
            scale_factor = value
        else:
            rest.append((key, value))
    return dimensions, scale_factor, rest


def _render_figure(image: ImageElement, svg: str, caption_html: str, keyvals: List[Tuple[str, str]]) -> str:
    attrs = []
    if image.attr.identifier:
        attrs.append(f"id={quoteattr(image.attr.identifier)}")
    if image.attr.classes:
        attrs.append(f"class={quoteattr(' '.join(image.attr.classes))}")
    attrs.extend(f"{key}={quoteattr(value)}" for key, value in keyvals)
    open_tag = "<figure" + "".join(f" {attr}" for attr in attrs) + ">"
    return (
        f"{open_tag}\n"
        f"  {svg}\n"
        f'  <figcaption aria-hidden="true">{caption_html}</figcaption>\n'
        "</figure>"
    )


def _apply_image_attributes(root: ET.Element, image: ImageElement, keyvals: List[Tuple[str, str]]) -> None:
    if image.attr.identifier:
        root.set("id", image.attr.identifier)
    if image.attr.classes:
        existing = root.get("class", "").split()
        root.set("class", " ".join(existing + image.attr.classes))
    for key, value in keyvals:
        root.set(key, value)


def _inline_svg(element: Any, image: ImageElement, context: PipelineContext) -> dict:
    tree = load_svg(image.url)
    classes = image.attr.classes
    dimensions, raw_scale_factor, keyvals = _split_keyvals(image.attr.keyvals)

    resize_options: Optional[ResizeOptions] = None
    if KEEP_SIZE_CLASS in classes:
        classes.remove(KEEP_SIZE_CLASS)
    else:
        resize_options = ResizeOptions(
            scale_factor=_scale_factor(raw_scale_factor, context.diagnostics),
            width=dimensions.get("width"),
            height=dimensions.get("height"),
        )

    process_svg(tree, context, resize_options=resize_options)
    html_keyvals = to_html5_keyvals(keyvals)

    if isinstance(element, FigureElement):
        caption_html = caption_to_html(image.caption, context)
        markup = _render_figure(image, serialize(tree), caption_html, html_keyvals)
        context.diagnostics.debug(f"inlined figure {image.url}")
        return pandocfilters.RawBlock("html", markup)

    _apply_image_attributes(tree.getroot(), image, html_keyvals)
    context.diagnostics.debug(f"inlined {image.url}")
    return pandocfilters.RawInline("html", serialize(tree))


def filter_element(key: str, value: Any, fmt: str, context: PipelineContext) -> Optional[dict]:
    """Return the replacement for ``{t: key, c: value}``, or ``None`` to keep it."""
    if not compatible_output_format(fmt, context.diagnostics):
        return None
    element = decode(key, value)
    if element is None:
        return None
    image = element.image if isinstance(element, FigureElement) else element
    if not is_svg(image.url):
        return None

    if key == "Image" and id(value) in context.passed_through:
        return None

    if IGNORE_CLASS in image.attr.classes:
        image.attr.classes.remove(IGNORE_CLASS)
        result = element.to_pandoc()
        # pandocfilters.walk descends into the returned Para and would offer
        # the image to this action again.
        if isinstance(element, FigureElement):
            context.passed_through.add(id(result["c"][0]["c"]))
        return result

    context.current_path = image.url
    try:
        return _inline_svg(element, image, context)
    except PipelineError as exc:
        message = str(exc)
        if image.url not in message:
            message = f"{message} ({image.url})"
        context.diagnostics.warn_once(f"{exc.code}:{image.url}", message)
        context.diagnostics.debug_exception(exc)
        if isinstance(element, FigureElement):
            context.passed_through.add(id(value[0]["c"]))
        return None


def make_action(context: PipelineContext) -> Callable[[str, Any, str, Any], Optional[dict]]:
    def action(key: str, value: Any, fmt: str, meta: Any) -> Optional[dict]:
        return filter_element(key, value, fmt, context)

    return action
