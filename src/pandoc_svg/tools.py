"""External command-line collaborators (svgo, pandoc)."""
from __future__ import annotations

import re
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .diagnostics import Diagnostics
from .errors import PipelineError

SVGO_MINIMUM_VERSION = (3, 0, 0)
# Optimized output is compared byte-for-byte against this release.
SVGO_PINNED_VERSION = (3, 0, 2)
PANDOC_MINIMUM_VERSION = (2, 0)

_VERSION_RE = re.compile(r"(\d+(?:\.\d+)+)")


def parse_version(text: str) -> Optional[Tuple[int, ...]]:
    match = _VERSION_RE.search(text)
    if not match:
        return None
    return tuple(int(part) for part in match.group(1).split("."))


def _version_str(version: Sequence[int]) -> str:
    return ".".join(str(part) for part in version)


@dataclass
class ExternalTool:
    name: str
    command: str
    minimum_version: Tuple[int, ...]
    purpose: str
    timeout: float = 30.0
    pinned_version: Optional[Tuple[int, ...]] = None
    version: Optional[Tuple[int, ...]] = field(default=None, init=False)
    _path: Optional[str] = field(default=None, init=False, repr=False)
    _checked: bool = field(default=False, init=False, repr=False)

    def available(self, diagnostics: Diagnostics) -> bool:
        """Locate the tool and check its version; problems are reported once."""
        if self._checked:
            return self._path is not None
        self._checked = True
        path = shutil.which(self.command) if self.command else None
        if not path:
            diagnostics.warn_once(
                f"tool-missing:{self.name}",
                f"No {self.name} installation was found! The command `{self.command}` "
                f"must be available in the shell. {self.purpose}",
            )
            return False
        try:
            proc = subprocess.run(
                [path, "--version"],
                text=True,
                capture_output=True,
                check=False,
                timeout=self.timeout,
            )
            version = parse_version(proc.stdout or "")
        except (OSError, subprocess.TimeoutExpired):
            version = None
        if version is None or version < self.minimum_version:
            found = _version_str(version) if version else "unknown"
            diagnostics.warn_once(
                f"tool-version:{self.name}",
                f"{self.name} version must be at least {_version_str(self.minimum_version)}. "
                f"The installed version is {found}. {self.purpose}",
            )
            return False
        if self.pinned_version is not None and version != self.pinned_version:
            diagnostics.warn_once(
                f"tool-pinned:{self.name}",
                f"{self.name} {_version_str(version)} is installed, output is only "
                f"verified against {_version_str(self.pinned_version)} and may differ.",
            )
        self.version = version
        self._path = path
        diagnostics.debug(f"using {self.name} {_version_str(version)} at {path}")
        return True

    def run(self, args: List[str], input_text: str) -> str:
        if self._path is None:
            raise PipelineError("E_TOOL_MISSING", f"{self.name} is not available")
        try:
            proc = subprocess.run(
                [self._path, *args],
                input=input_text,
                text=True,
                capture_output=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise PipelineError("E_TOOL_FAILED", f"{self.name} timed out") from exc
        except OSError as exc:
            raise PipelineError("E_TOOL_FAILED", f"failed to execute {self.name}: {exc}") from exc
        if proc.returncode != 0:
            detail = (proc.stderr or "").strip()
            if len(detail) > 240:
                detail = detail[:240] + "..."
            raise PipelineError(
                "E_TOOL_FAILED", f"{self.name} failed: {detail or 'unknown error'}"
            )
        return proc.stdout


def svgo_tool(command: str = "svgo", timeout: float = 30.0) -> ExternalTool:
    return ExternalTool(
        name="SVGO",
        command=command,
        minimum_version=SVGO_MINIMUM_VERSION,
        pinned_version=SVGO_PINNED_VERSION,
        purpose="SVGO is needed to minify SVGs; they will be inlined unminified.",
        timeout=timeout,
    )


def pandoc_tool(command: str = "pandoc", timeout: float = 30.0) -> ExternalTool:
    return ExternalTool(
        name="pandoc",
        command=command,
        minimum_version=PANDOC_MINIMUM_VERSION,
        purpose="pandoc is needed to convert markdown inside SVG text elements.",
        timeout=timeout,
    )
