"""Parsing of SVG ``transform`` attribute values into ordered terms."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

_TERM_RE = re.compile(r"([A-Za-z]+)\s*\(([^()]*)\)")
_SEPARATOR_RE = re.compile(r"^[\s,]*$")
_ARG_SPLIT_RE = re.compile(r"[\s,]+")


@dataclass
class TransformTerm:
    name: str
    args: str
    source: str

    def numbers(self) -> Optional[List[float]]:
        text = self.args.strip()
        if not text:
            return []
        try:
            numbers = [float(part) for part in _ARG_SPLIT_RE.split(text)]
        except ValueError:
            return None
        if not all(math.isfinite(number) for number in numbers):
            return None
        return numbers


def parse_transform(text: str) -> Optional[List[TransformTerm]]:
    """Split a transform list into terms; ``None`` when the value is malformed."""
    terms: List[TransformTerm] = []
    cursor = 0
    for match in _TERM_RE.finditer(text):
        if not _SEPARATOR_RE.match(text[cursor : match.start()]):
            return None
        terms.append(TransformTerm(match.group(1), match.group(2), match.group(0)))
        cursor = match.end()
    if not _SEPARATOR_RE.match(text[cursor:]):
        return None
    return terms


def serialize_transform(terms: List[TransformTerm]) -> str:
    return " ".join(term.source for term in terms)


def find_translate(terms: List[TransformTerm]) -> Optional[Tuple[int, float, float]]:
    """Return ``(index, dx, dy)`` of the first ``translate`` term, if any."""
    for index, term in enumerate(terms):
        if term.name != "translate":
            continue
        numbers = term.numbers()
        if numbers is None or len(numbers) not in (1, 2):
            return None
        dx = numbers[0]
        dy = numbers[1] if len(numbers) == 2 else 0.0
        return index, dx, dy
    return None
