"""Exceptions raised while processing a single SVG image."""
from __future__ import annotations


class PipelineError(Exception):
    """Structured failure scoped to one image, with a stable code for diagnostics."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message
