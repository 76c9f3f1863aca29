"""
Pending splat requests accumulated between ticks.
"""
import threading
from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class SplatRequest:
    """A localized force + dye injection at a UV coordinate."""
    uv: Tuple[float, float]
    force: Tuple[float, float]
    color: Tuple[float, float, float]

    @classmethod
    def create(cls, uv, force, color) -> 'SplatRequest':
        uv = tuple(float(c) for c in uv)
        force = tuple(float(c) for c in force)
        color = tuple(float(c) for c in color)
        if len(uv) != 2 or len(force) != 2 or len(color) != 3:
            raise ValueError(
                f"splat expects uv (2), force (2) and color (3) components, got {len(uv)}, {len(force)}, {len(color)}"
            )
        return cls(uv, force, color)


class SplatQueue:
    """
    Multi-producer, single-consumer list of SplatRequests.

    `flush_all` swaps the pending list out under the lock, so requests
    enqueued while a flush is in progress land in the next tick's batch.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: List[SplatRequest] = []

    def enqueue(self, request: SplatRequest):
        with self._lock:
            self._pending.append(request)

    def flush_all(self) -> List[SplatRequest]:
        with self._lock:
            drained, self._pending = self._pending, []
        return drained

    def __len__(self):
        with self._lock:
            return len(self._pending)
