"""User-facing warnings, each distinct cause reported once."""
from __future__ import annotations

import sys
import threading
import traceback
from typing import Optional, Set, TextIO


class Diagnostics:
    def __init__(self, stream: Optional[TextIO] = None, *, debug: bool = False) -> None:
        self._stream = stream
        self._seen: Set[str] = set()
        self._lock = threading.Lock()
        self.debug_enabled = debug

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def warn_once(self, key: str, message: str) -> bool:
        """Write ``message`` unless ``key`` has been reported before."""
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
        self.stream.write(f"pandoc-svg: {message}\n")
        return True

    def debug(self, message: str) -> None:
        if self.debug_enabled:
            self.stream.write(f"pandoc-svg [debug]: {message}\n")

    def debug_exception(self, exc: BaseException) -> None:
        if self.debug_enabled:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=self.stream)
