"""Shrink the SVG: SVGO first, then folding passes SVGO doesn't do."""
from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Optional, Tuple

from .dimensions import format_number, parse_number
from .errors import PipelineError
from .resources import svgo_config_path
from .style import StyleDeclaration
from .svgdom import child_elements, iter_local, parent_map, serialize, unwrap
from .transforms import find_translate, parse_transform, serialize_transform

if TYPE_CHECKING:
    from .context import PipelineContext

SVGO_INDENT = 2


def minify(tree: ET.ElementTree, context: "PipelineContext") -> None:
    """Run SVGO over the tree and install its output as the new root.

    Must run before any ``<foreignObject>`` is inserted:
    https://github.com/svg/svgo/issues/1728
    """
    if not context.svgo.available(context.diagnostics):
        return
    args = ["--input", "-", "--output", "-", "--indent", str(SVGO_INDENT)]
    if context.config.pretty:
        args.append("--pretty")
    with svgo_config_path() as config_path:
        output = context.svgo.run([*args, "--config", str(config_path)], serialize(tree))
    try:
        root = ET.fromstring(output)
    except ET.ParseError as exc:
        raise PipelineError("E_TOOL_FAILED", f"SVGO produced unparseable output: {exc}") from exc
    tree._setroot(root)


def _position(elem: ET.Element) -> Optional[Tuple[float, float]]:
    x = parse_number(elem.get("x"))
    y = parse_number(elem.get("y"))
    if x is None or y is None:
        return None
    return x, y


def fold_translations(tree: ET.ElementTree) -> None:
    """Move ``translate(...)`` into ``x``/``y`` of an element and its children.

    SVGO sometimes removes layers and repeats the layer transform on every
    member, which compresses badly. Only elements whose children all carry
    ``x`` and ``y`` themselves are folded.
    """
    for elem in list(tree.getroot().iter()):
        transform = elem.get("transform")
        if transform is None:
            continue
        terms = parse_transform(transform)
        if terms is None:
            continue
        found = find_translate(terms)
        if found is None:
            continue
        index, dx, dy = found
        targets = [elem, *child_elements(elem)]
        positions = [_position(target) for target in targets]
        if any(position is None for position in positions):
            continue
        shifted = [(x + dx, y + dy) for x, y in positions]
        if not all(math.isfinite(x) and math.isfinite(y) for x, y in shifted):
            continue
        for target, (x, y) in zip(targets, shifted):
            target.set("x", format_number(x))
            target.set("y", format_number(y))
        del terms[index]
        if terms:
            elem.set("transform", serialize_transform(terms))
        else:
            del elem.attrib["transform"]


def fold_text_runs(tree: ET.ElementTree) -> None:
    """Drop ``<tspan>`` attributes that repeat the parent's, then empty ``<tspan>``s."""
    root = tree.getroot()
    parents = parent_map(root)
    # Innermost runs first, so unwrapping never detaches a run still to be visited.
    for run in reversed(iter_local(root, "tspan")):
        parent = parents.get(run)
        if parent is None:
            continue
        if run.get("x") == parent.get("x") and run.get("y") == parent.get("y"):
            run.attrib.pop("x", None)
            run.attrib.pop("y", None)
        if "style" in run.attrib:
            style = StyleDeclaration.of(run)
            parent_style = StyleDeclaration.of(parent)
            redundant = [
                name
                for name in style
                if name in parent_style
                and style.get(name) == parent_style.get(name)
                and style.priority(name) == parent_style.priority(name)
            ]
            for name in redundant:
                style.remove(name)
            if redundant or not style:
                style.apply(run)
        if not run.attrib:
            unwrap(parent, run)


def rewrite_context_paint(tree: ET.ElementTree) -> None:
    """Replace SVG 2 ``context-stroke`` paint inside markers with black."""
    for marker in iter_local(tree.getroot(), "marker"):
        for elem in marker.iter():
            if elem is marker or "style" not in elem.attrib:
                continue
            style = StyleDeclaration.of(elem)
            changed = False
            for prop in ("fill", "stroke"):
                if style.get(prop) == "context-stroke":
                    style.set(prop, "#000", style.priority(prop))
                    changed = True
            if changed:
                style.apply(elem)


def optimize(tree: ET.ElementTree, context: "PipelineContext") -> None:
    try:
        minify(tree, context)
    except PipelineError as exc:
        context.diagnostics.warn_once(
            f"svgo:{context.current_path}",
            f"{exc} ({context.current_path}). The SVG is inlined unminified.",
        )
        context.diagnostics.debug_exception(exc)
    fold_translations(tree)
    fold_text_runs(tree)
    rewrite_context_paint(tree)
