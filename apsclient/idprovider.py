"""Process-wide source of sequential packet ids."""

from __future__ import annotations

import itertools
import threading
from typing import ClassVar, Optional


class SequentialIdProvider:
    """Thread-safe counter handing out 0, 1, 2, ..."""

    _instance: ClassVar[Optional["SequentialIdProvider"]] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self._counter = itertools.count()
        self._lock = threading.Lock()

    @classmethod
    def get(cls) -> "SequentialIdProvider":
        """Return the shared provider."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def next(self) -> int:
        """Return the next id."""
        with self._lock:
            return next(self._counter)