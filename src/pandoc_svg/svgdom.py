"""ElementTree helpers shared by the SVG passes."""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Union

SVG_NS = "http://www.w3.org/2000/svg"
XHTML_NS = "http://www.w3.org/1999/xhtml"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xhtml", XHTML_NS)
ET.register_namespace("xlink", "http://www.w3.org/1999/xlink")
ET.register_namespace("inkscape", "http://www.inkscape.org/namespaces/inkscape")
ET.register_namespace("sodipodi", "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd")
ET.register_namespace("rdf", "http://www.w3.org/1999/02/22-rdf-syntax-ns#")
ET.register_namespace("cc", "http://creativecommons.org/ns#")
ET.register_namespace("dc", "http://purl.org/dc/elements/1.1/")

HTML_VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

_XHTML_XMLNS_RE = re.compile(r' xmlns:xhtml="http://www\.w3\.org/1999/xhtml"')
_XHTML_EMPTY_RE = re.compile(r"<xhtml:([A-Za-z][\w-]*)([^<>]*?) ?/>")


def parse_svg(svg_text: Union[str, bytes]) -> ET.ElementTree:
    return ET.ElementTree(ET.fromstring(svg_text))


def serialize(tree: ET.ElementTree) -> str:
    """Serialize the SVG, emitting embedded XHTML the way an HTML parser expects it.

    SVG elements keep XML self-closing tags. Elements inside ``<foreignObject>``
    lose their namespace prefix, and only HTML void elements stay self-closing
    (``<span />`` would swallow its following siblings in HTML).
    """
    text = ET.tostring(tree.getroot(), encoding="unicode")
    text = _XHTML_XMLNS_RE.sub("", text)

    def expand(match: "re.Match[str]") -> str:
        tag, attrs = match.group(1), match.group(2)
        if tag in HTML_VOID_ELEMENTS:
            return f"<{tag}{attrs} />"
        return f"<{tag}{attrs}></{tag}>"

    text = _XHTML_EMPTY_RE.sub(expand, text)
    return text.replace("<xhtml:", "<").replace("</xhtml:", "</")


def namespace_of(tag: str) -> Optional[str]:
    if tag is None:
        return None
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def local_name(tag: str) -> str:
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def qual(ns: Optional[str], local: str) -> str:
    if not ns:
        return local
    return f"{{{ns}}}{local}"


def xhtml(local: str) -> str:
    return qual(XHTML_NS, local)


def iter_local(root: ET.Element, name: str) -> List[ET.Element]:
    """All elements named ``name`` (any namespace), in document order."""
    return [elem for elem in root.iter() if local_name(elem.tag) == name]


def child_elements(elem: ET.Element) -> List[ET.Element]:
    return [child for child in elem if isinstance(child.tag, str)]


def parent_map(root: ET.Element) -> Dict[ET.Element, ET.Element]:
    parents: Dict[ET.Element, ET.Element] = {}
    for parent in root.iter():
        for child in list(parent):
            parents[child] = parent
    return parents


def _attach_text(parent: ET.Element, index: int, text: Optional[str]) -> None:
    # Append text at the position just before parent[index].
    if not text:
        return
    if index == 0:
        parent.text = (parent.text or "") + text
    else:
        previous = parent[index - 1]
        previous.tail = (previous.tail or "") + text


def remove(parent: ET.Element, node: ET.Element) -> None:
    """Detach ``node``, keeping the text that followed it."""
    index = list(parent).index(node)
    parent.remove(node)
    _attach_text(parent, index, node.tail)


def unwrap(parent: ET.Element, node: ET.Element) -> None:
    """Replace ``node`` with its own content (text and children)."""
    index = list(parent).index(node)
    parent.remove(node)
    _attach_text(parent, index, node.text)
    children = list(node)
    for offset, child in enumerate(children):
        parent.insert(index + offset, child)
    _attach_text(parent, index + len(children), node.tail)


def replace_with_text(parent: ET.Element, node: ET.Element, text: str) -> None:
    index = list(parent).index(node)
    parent.remove(node)
    _attach_text(parent, index, text + (node.tail or ""))


def replace(parent: ET.Element, node: ET.Element, replacement: ET.Element) -> None:
    index = list(parent).index(node)
    parent.remove(node)
    replacement.tail = node.tail
    parent.insert(index, replacement)


def prepend(parent: ET.Element, child: ET.Element) -> None:
    child.tail = parent.text
    parent.text = None
    parent.insert(0, child)


def text_content(elem: ET.Element) -> str:
    return "".join(elem.itertext())
