"""The pandoc AST elements the filter acts on, decoded from their JSON form."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

import pandocfilters

FIGURE_TITLE_PREFIX = "fig:"


@dataclass
class Attr:
    identifier: str = ""
    classes: List[str] = field(default_factory=list)
    keyvals: List[Tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_pandoc(cls, value: Any) -> "Attr":
        identifier, classes, keyvals = value
        return cls(identifier, list(classes), [(k, v) for k, v in keyvals])

    def to_pandoc(self) -> list:
        return [self.identifier, list(self.classes), [[k, v] for k, v in self.keyvals]]


@dataclass
class ImageElement:
    attr: Attr
    caption: list
    url: str
    title: str

    @classmethod
    def from_pandoc(cls, value: Any) -> "ImageElement":
        attr, caption, (url, title) = value
        return cls(Attr.from_pandoc(attr), caption, url, title)

    def to_pandoc(self) -> dict:
        return pandocfilters.Image(self.attr.to_pandoc(), self.caption, [self.url, self.title])


@dataclass
class FigureElement:
    """A paragraph whose only child is an image titled ``fig:...``."""

    image: ImageElement

    def to_pandoc(self) -> dict:
        return pandocfilters.Para([self.image.to_pandoc()])


Element = Union[ImageElement, FigureElement]


def _is_figure(value: Any) -> bool:
    if not isinstance(value, list) or len(value) != 1:
        return False
    child = value[0]
    if not isinstance(child, dict) or child.get("t") != "Image":
        return False
    target = child["c"][2]
    return len(target) > 1 and target[1].startswith(FIGURE_TITLE_PREFIX)


def decode(key: str, value: Any) -> Optional[Element]:
    """Decode ``{t: key, c: value}``; ``None`` for elements the filter ignores."""
    if key == "Image":
        return ImageElement.from_pandoc(value)
    if key == "Para" and _is_figure(value):
        return FigureElement(ImageElement.from_pandoc(value[0]["c"]))
    return None
