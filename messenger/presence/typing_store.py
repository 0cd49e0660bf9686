"""
In-memory typing indicators.

State lives only in this process and is lost on restart. One lock guards the
whole map; every public method takes it for the duration of the call.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from messenger.core.utils import canonical_pair

logger = logging.getLogger(__name__)

PairKey = Tuple[int, int]


@dataclass
class TypingEntry:
    is_typing: bool
    updated_at: float


class TypingStore:
    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl if ttl else None
        self.clock = clock
        self._lock = threading.Lock()
        self._states: Dict[PairKey, Dict[int, TypingEntry]] = {}

    def set_typing(self, user_id: int, counterpart_id: int, is_typing: bool):
        key = canonical_pair(user_id, counterpart_id)
        with self._lock:
            self._sweep()
            if is_typing:
                self._states.setdefault(key, {})[user_id] = TypingEntry(True, self.clock())
                return

            entries = self._states.get(key)
            if entries is None:
                return
            entries.pop(user_id, None)
            if not entries:
                del self._states[key]

    def is_typing(self, user_id: int, counterpart_id: int) -> bool:
        """Whether the counterpart is typing to the user."""
        key = canonical_pair(user_id, counterpart_id)
        with self._lock:
            entries = self._states.get(key)
            if not entries:
                return False
            entry = entries.get(counterpart_id)
            if entry is None:
                return False
            if self._expired(entry):
                del entries[counterpart_id]
                if not entries:
                    del self._states[key]
                return False
            return entry.is_typing

    def clear(self):
        with self._lock:
            self._states.clear()
        logger.debug("Typing store cleared")

    def _sweep(self):
        """Drops expired entries from every pair. Caller holds the lock."""
        if self.ttl is None:
            return
        for key in list(self._states):
            entries = self._states[key]
            for user_id in [u for u, e in entries.items() if self._expired(e)]:
                del entries[user_id]
            if not entries:
                del self._states[key]

    def _expired(self, entry: TypingEntry) -> bool:
        return self.ttl is not None and self.clock() - entry.updated_at > self.ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
