from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set, TextIO

from .config import FilterConfig
from .diagnostics import Diagnostics
from .tools import ExternalTool, pandoc_tool, svgo_tool


@dataclass
class PipelineContext:
    """State shared by all images of one filter run."""

    config: FilterConfig
    diagnostics: Diagnostics
    svgo: ExternalTool
    pandoc: ExternalTool
    pandoc_api_version: Optional[List[int]] = None
    # Used to key per-image warnings.
    current_path: str = field(default="<string>")
    # id() of Image contents that must not be processed again.
    passed_through: Set[int] = field(default_factory=set)

    @classmethod
    def create(
        cls, config: Optional[FilterConfig] = None, *, stream: Optional[TextIO] = None
    ) -> "PipelineContext":
        config = config or FilterConfig.from_env()
        return cls(
            config=config,
            diagnostics=Diagnostics(stream, debug=config.debug),
            svgo=svgo_tool(config.svgo_command, config.tool_timeout),
            pandoc=pandoc_tool(config.pandoc_command, config.tool_timeout),
        )
