"""Inline ``style`` attribute handling."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Dict, Iterator, Optional, Tuple

import tinycss2


class StyleDeclaration:
    """Ordered CSS declarations of one element: property -> (value, priority).

    Mirrors the subset of CSSStyleDeclaration the pipeline needs. Changes are
    not live; call :meth:`apply` to write them back to the element.
    """

    def __init__(self, css_text: Optional[str] = None) -> None:
        self._properties: Dict[str, Tuple[str, str]] = {}
        if css_text:
            self._parse(css_text)

    @classmethod
    def of(cls, elem: ET.Element) -> "StyleDeclaration":
        return cls(elem.get("style"))

    def _parse(self, css_text: str) -> None:
        declarations = tinycss2.parse_declaration_list(
            css_text, skip_comments=True, skip_whitespace=True
        )
        for decl in declarations:
            if decl.type != "declaration":
                continue
            value = tinycss2.serialize(decl.value).strip()
            if not value:
                continue
            self._properties[decl.lower_name] = (value, "important" if decl.important else "")

    def get(self, name: str) -> Optional[str]:
        entry = self._properties.get(name)
        return entry[0] if entry else None

    def priority(self, name: str) -> str:
        entry = self._properties.get(name)
        return entry[1] if entry else ""

    def set(self, name: str, value: str, priority: str = "") -> None:
        self._properties[name] = (value, priority)

    def remove(self, name: str) -> None:
        self._properties.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._properties

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._properties))

    def __len__(self) -> int:
        return len(self._properties)

    def serialize(self) -> str:
        parts = []
        for name, (value, priority) in self._properties.items():
            suffix = "!important" if priority else ""
            parts.append(f"{name}:{value}{suffix}")
        return ";".join(parts)

    def apply(self, elem: ET.Element) -> None:
        if self._properties:
            elem.set("style", self.serialize())
        elif "style" in elem.attrib:
            del elem.attrib["style"]
