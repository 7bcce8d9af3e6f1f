"""Length values with units, as found in SVG ``width``/``height`` attributes."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import FrozenSet, Optional

# See https://developer.mozilla.org/en-US/docs/Learn/CSS/Building_blocks/Values_and_units
ABSOLUTE_UNITS = {
    "": 1.0,
    "px": 1.0,
    "cm": 37.8,
    "mm": 3.78,
    "in": 96.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "Q": 37.8 / 40.0,
}

RELATIVE_UNITS: FrozenSet[str] = frozenset(
    {
        "em",
        "ex",
        "ch",
        "rem",
        "lh",
        "rlh",
        "vw",
        "vh",
        "vmin",
        "vmax",
        "vb",
        "vi",
        "svw",
        "svh",
        "lvw",
        "lvh",
        "dvw",
        "dvh",
    }
)

# Units pandoc accepts in link attributes. Only `inch` is not valid CSS.
# See https://pandoc.org/MANUAL.html#extension-link_attributes
TARGET_UNITS: FrozenSet[str] = frozenset({"px", "cm", "mm", "in", "inch", "%"})

ROOT_FONT_SIZE_PX = 16.0

_DIMENSION_RE = re.compile(r"^(\d+(?:\.\d+)?)([a-zA-Z%]*)$")


@dataclass(frozen=True)
class Dimension:
    value: float
    unit: str

    @property
    def is_absolute(self) -> bool:
        return self.unit in ABSOLUTE_UNITS

    @property
    def is_relative(self) -> bool:
        return self.unit in RELATIVE_UNITS

    def to_pixels(self) -> float:
        if not self.is_absolute:
            raise ValueError(f"cannot convert relative unit {self.unit!r} to pixels")
        return round_significant(self.value * ABSOLUTE_UNITS[self.unit])

    def scaled(self, factor: float) -> "Dimension":
        return Dimension(round_significant(self.value * factor), self.unit)

    def __str__(self) -> str:
        return format_number(self.value) + self.unit


def _match(text: Optional[str]) -> Optional[Dimension]:
    if text is None:
        return None
    match = _DIMENSION_RE.match(text.strip())
    if not match:
        return None
    value = float(match.group(1))
    if not math.isfinite(value):
        return None
    return Dimension(value, match.group(2))


def parse_dimension(text: Optional[str]) -> Optional[Dimension]:
    """Parse a source dimension; ``None`` unless the unit is absolute or relative."""
    dim = _match(text)
    if dim is None or not (dim.is_absolute or dim.is_relative):
        return None
    return dim


def parse_target_dimension(text: Optional[str]) -> Optional[Dimension]:
    """Parse a dimension requested by the document author (``inch`` becomes ``in``)."""
    dim = _match(text)
    if dim is None or dim.unit not in TARGET_UNITS:
        return None
    if dim.unit == "inch":
        return Dimension(dim.value, "in")
    return dim


def round_significant(value: float) -> float:
    """Reduce precision to 10 significant digits to drop floating point noise."""
    return float(f"{value:.10g}")


def format_number(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite number {value!r}")
    value = round_significant(value)
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    # Python switches to exponent notation below 1e-4, JavaScript below 1e-6.
    if 1e-6 <= abs(value) < 1e-4:
        return f"{value:.16f}".rstrip("0")
    return repr(value)


def parse_number(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None
