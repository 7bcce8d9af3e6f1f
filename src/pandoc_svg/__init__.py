"""Public API for pandoc-svg."""
from .context import PipelineContext
from .errors import PipelineError
from .pipeline import convert_svg, process_svg
from .resize import ResizeOptions, resize

__all__ = [
    "PipelineContext",
    "PipelineError",
    "ResizeOptions",
    "convert_svg",
    "process_svg",
    "resize",
]
