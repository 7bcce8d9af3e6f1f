"""Filter configuration, read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_TOOL_TIMEOUT = 30.0


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class FilterConfig:
    svgo_command: str = "svgo"
    pandoc_command: str = "pandoc"
    pretty: bool = False
    debug: bool = False
    tool_timeout: float = DEFAULT_TOOL_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FilterConfig":
        env = os.environ if environ is None else environ
        timeout = DEFAULT_TOOL_TIMEOUT
        raw_timeout = env.get("PANDOC_SVG_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                timeout = DEFAULT_TOOL_TIMEOUT
            if timeout <= 0:
                timeout = DEFAULT_TOOL_TIMEOUT
        return cls(
            svgo_command=env.get("PANDOC_SVG_SVGO") or "svgo",
            pandoc_command=env.get("PANDOC_SVG_PANDOC") or "pandoc",
            pretty=_env_flag(env, "PANDOC_SVG_PRETTY"),
            debug=_env_flag(env, "PANDOC_SVG_DEBUG"),
            tool_timeout=timeout,
        )
