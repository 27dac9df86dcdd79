"""
Callback registry for the frame timeline.
Maps absolute frame indices to the callbacks run when the playhead visits them.
"""

import logging
from typing import Any, Callable, Dict, List

from .models import Direction
from .resolver import FrameIndexResolver, FrameRef
from .scheduler import Scheduler

logger = logging.getLogger('callback_registry')

FrameCallback = Callable[[int], Any]
CallbackFactory = Callable[[int, int], FrameCallback]


class CallbackRegistry:
    """
    Owns the frame -> callbacks mapping and fires them through a scheduler.

    References are resolved before anything is stored, so every key lies in
    [1, num_frames].
    """

    def __init__(self, resolver: FrameIndexResolver, scheduler: Scheduler):
        self._resolver = resolver
        self._scheduler = scheduler
        self._callbacks: Dict[int, List[FrameCallback]] = {}

    def attach(self, ref: FrameRef, callback: FrameCallback) -> int:
        """Append a callback to a frame. Registration order is firing order."""
        frame = self._resolver.resolve(ref)
        if not callable(callback):
            raise TypeError(f"Callback for frame {frame} must be callable, got {callback!r}")
        self._callbacks.setdefault(frame, []).append(callback)
        return frame

    def attach_range(self, from_ref: FrameRef, to_ref: FrameRef, factory: CallbackFactory) -> List[int]:
        """
        Attach one callback per frame after ``from_ref`` through ``to_ref``.

        ``factory(frame, offset)`` runs immediately for each frame, in
        ascending order, and must return the callback to attach.
        """
        start = self._resolver.resolve(from_ref)
        end = self._resolver.resolve(to_ref)
        frames = []
        for offset, frame in enumerate(range(start + 1, end + 1)):
            frames.append(self.attach(frame, factory(frame, offset)))
        return frames

    def callbacks_at(self, frame: int) -> List[FrameCallback]:
        return list(self._callbacks.get(frame, ()))

    def frames(self) -> List[int]:
        return sorted(self._callbacks)

    def count(self) -> int:
        return sum(len(callbacks) for callbacks in self._callbacks.values())

    def fire(self, frame: int, direction: Direction):
        """
        Schedule every callback at ``frame`` with zero delay.

        Each callback is scheduled on its own, in registration order, so
        they run after the caller returns but never out of order.
        """
        for callback in self._callbacks.get(frame, ()):
            self._scheduler.schedule(self._make_runner(callback, frame, direction), 0)

    def _make_runner(self, callback: FrameCallback, frame: int, direction: Direction):
        def run():
            try:
                callback(int(direction))
            except Exception:
                logger.exception(f"Error in callback at frame {frame} (direction {int(direction):+d})")

        return run
