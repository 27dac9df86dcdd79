"""
Timeline Engine for frame-based animation sequencing.
Handles playhead state, forward/backward stepping and mid-flight redirects.
"""

import logging
from typing import Any, Dict, Optional

from .config import Settings, get_settings
from .errors import LockedError
from .events import ENTER_FRAME, SETUP, TEARDOWN, EventChannel, Handler
from .models import Cursor, Direction, PlaybackState, Reservation
from .registry import CallbackFactory, CallbackRegistry, FrameCallback
from .resolver import FrameIndexResolver, FrameRef
from .scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger('timeline')


class Timeline:
    """
    Core playhead engine.

    Owns the current frame, the lock and the single reservation slot. A
    navigation call made while a loop is running never starts a second loop:
    it overwrites the reservation, which the running loop picks up at its
    next step.

    Intervals are in milliseconds. Lifecycle events (setup, enterframe,
    teardown) are emitted with ``(frame, direction)`` where direction is
    +1 or -1.
    """

    def __init__(
        self,
        num_frames: int,
        scheduler: Optional[Scheduler] = None,
        events: Optional[EventChannel] = None,
        settings: Optional[Settings] = None,
    ):
        if isinstance(num_frames, bool) or not isinstance(num_frames, int) or num_frames < 1:
            raise ValueError(f"num_frames must be a positive integer, got {num_frames!r}")

        self._settings = settings or get_settings()
        self._scheduler = scheduler or AsyncioScheduler()
        self.events = events or EventChannel()
        self.resolver = FrameIndexResolver(num_frames)
        self.registry = CallbackRegistry(self.resolver, self._scheduler)

        # Playhead
        self._current_frame: int = 1
        self._state: PlaybackState = PlaybackState.IDLE

        # Loop ownership
        self._locked: bool = False
        self._reserved: Optional[Reservation] = None
        self._cursor: Optional[Cursor] = None
        self._handle: Any = None

    def __repr__(self) -> str:
        return (
            f"Timeline(num_frames={self.num_frames}, current_frame={self._current_frame}, "
            f"state={self._state.value})"
        )

    @property
    def num_frames(self) -> int:
        return self.resolver.num_frames

    @property
    def current_frame(self) -> int:
        return self._current_frame

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def reserved(self) -> Optional[Reservation]:
        return self._reserved

    # === Events ===

    def on(self, event: str, handler: Handler) -> "Timeline":
        self.events.on(event, handler)
        return self

    def once(self, event: str, handler: Handler) -> "Timeline":
        self.events.once(event, handler)
        return self

    def off(self, event: str, handler: Optional[Handler] = None) -> "Timeline":
        self.events.off(event, handler)
        return self

    def emit(self, event: str, *args) -> bool:
        return self.events.emit(event, *args)

    # === Registration ===

    def at(self, ref: FrameRef, callback: FrameCallback) -> "Timeline":
        """Register a callback run when the playhead visits a frame."""
        self.registry.attach(ref, callback)
        return self

    def each_frame(self, from_ref: FrameRef, to_ref: FrameRef, factory: CallbackFactory) -> "Timeline":
        """
        Register one callback for every frame after ``from_ref`` up to ``to_ref``.

        ``factory(frame, offset)`` is called right away for each frame and
        must return the callback to register. ``offset`` counts from 0.
        """
        self.registry.attach_range(from_ref, to_ref, factory)
        return self

    def alias(self, ref: FrameRef, name: str) -> "Timeline":
        """Create a named alias for a frame."""
        self.resolver.register_alias(ref, name)
        return self

    def nth_frame(self, ref: FrameRef) -> int:
        """Resolve a number, percentage or alias to an absolute frame."""
        return self.resolver.resolve(ref)

    def distance_between(self, a: FrameRef, b: FrameRef) -> int:
        return self.resolver.distance_between(a, b)

    # === Playback control ===

    def set(self, ref: FrameRef):
        """Move the playhead directly. Not allowed during playback."""
        if self._locked:
            raise LockedError()
        self._current_frame = self.nth_frame(ref)

    def stop(self):
        """Cancel the scheduled tick and release the playhead."""
        self._scheduler.cancel(self._handle)
        was_running = self._locked
        cursor = self._cursor
        if self._reserved is not None:
            logger.debug(f"Dropping pending reservation on stop: {self._reserved}")
        self._release()
        if was_running:
            logger.info(
                f"Stopped at frame {self._current_frame}",
                extra=self._log_context(
                    cursor.direction if cursor else None,
                    cursor.destination if cursor else None,
                ),
            )

    def goto_and_stop(self, ref: FrameRef, interval: Optional[float] = None):
        """Play forward up to a frame, one frame every ``interval`` ms."""
        target = self.nth_frame(ref)
        self._check_interval(interval)
        if not self._current_frame < target:
            return

        if self._locked:
            self._reserve(Reservation(Direction.FORWARD, target, interval))
            return

        self._locked = True
        self._state = PlaybackState.FORWARD
        logger.info(
            f"Playing forward {self._current_frame} -> {target}",
            extra=self._log_context(Direction.FORWARD, target),
        )
        if self._current_frame == 1 and not self._emit_setup(1, Direction.FORWARD):
            return
        self._cursor = Cursor(Direction.FORWARD, self._current_frame + 1, target, interval)
        self._step()

    def back_to_and_stop(self, ref: FrameRef, interval: Optional[float] = None):
        """Play backward down to a frame, one frame every ``interval`` ms."""
        target = self.nth_frame(ref)
        self._check_interval(interval)
        if not target < self._current_frame:
            return

        if self._locked:
            self._reserve(Reservation(Direction.BACKWARD, target, interval))
            return

        self._locked = True
        self._state = PlaybackState.BACKWARD
        logger.info(
            f"Playing backward {self._current_frame} -> {target}",
            extra=self._log_context(Direction.BACKWARD, target),
        )
        if self._current_frame == self.num_frames and not self._emit_setup(self.num_frames, Direction.BACKWARD):
            return
        self._cursor = Cursor(Direction.BACKWARD, self._current_frame, target, interval)
        self._step()

    def get_status(self) -> Dict[str, Any]:
        """Get current timeline status for display or logging."""
        return {
            "state": self._state.value,
            "current_frame": self._current_frame,
            "num_frames": self.num_frames,
            "locked": self._locked,
            "reserved": self._reserved.to_dict() if self._reserved else None,
            "destination": self._cursor.destination if self._cursor else None,
            "aliases": self.resolver.aliases,
            "callbacks": self.registry.count(),
        }

    # === Private Methods ===

    def _check_interval(self, interval: Optional[float]):
        if interval is not None and interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval}")

    def _emit_setup(self, frame: int, direction: Direction) -> bool:
        """Emit setup before the first tick. Returns False if a handler stopped playback."""
        try:
            self.events.emit(SETUP, frame, int(direction))
        except Exception:
            logger.exception(f"Setup handler failed; releasing playhead at frame {self._current_frame}")
            self._release()
            raise
        return self._locked

    def _log_context(self, direction: Optional[Direction], destination: Optional[int]) -> Dict[str, Any]:
        return {
            "frame": self._current_frame,
            "direction": int(direction) if direction is not None else None,
            "destination": destination,
            "state": self._state.value,
        }

    def _reserve(self, reservation: Reservation):
        if self._reserved is not None:
            logger.debug(f"Overwriting reservation {self._reserved} with {reservation}")
        self._reserved = reservation
        logger.debug(f"Reserved {reservation.direction.name.lower()} to frame {reservation.target}")

    def _finished(self, cursor: Cursor) -> bool:
        if cursor.direction is Direction.FORWARD:
            return cursor.next_frame > self.num_frames or cursor.next_frame > cursor.destination
        return cursor.next_frame < 1 or cursor.next_frame <= cursor.destination

    def _step(self):
        """
        Run one loop step: stop at the boundary, apply a pending reservation,
        then schedule the next tick.
        """
        cursor = self._cursor
        while True:
            if self._finished(cursor):
                if self._reserved is not None:
                    logger.debug(f"Loop finished with unconsumed reservation {self._reserved}")
                self._release()
                logger.info(
                    f"Playback finished at frame {self._current_frame}",
                    extra=self._log_context(cursor.direction, cursor.destination),
                )
                return

            reservation = self._reserved
            if reservation is None:
                break
            self._reserved = None

            if reservation.direction is cursor.direction:
                cursor.destination = reservation.target
                logger.debug(f"Redirected to frame {reservation.target}")
                break

            # Live reversal; re-check the boundary for the new direction
            cursor = Cursor(reservation.direction, cursor.next_frame, reservation.target, reservation.interval)
            self._cursor = cursor
            self._state = (
                PlaybackState.FORWARD if cursor.direction is Direction.FORWARD else PlaybackState.BACKWARD
            )
            logger.info(
                f"Reversing {cursor.direction.name.lower()} at frame {cursor.next_frame} "
                f"toward {cursor.destination}",
                extra=self._log_context(cursor.direction, cursor.destination),
            )

        if cursor.direction is Direction.BACKWARD:
            self.registry.fire(cursor.next_frame, Direction.BACKWARD)

        interval = cursor.interval if cursor.interval is not None else self._settings.default_interval_ms
        self._handle = self._scheduler.schedule(self._tick, interval)

    def _tick(self):
        self._handle = None
        cursor = self._cursor
        if cursor is None:
            return

        try:
            if cursor.direction is Direction.FORWARD:
                frame = cursor.next_frame
                self.events.emit(ENTER_FRAME, frame, int(Direction.FORWARD))
                self.registry.fire(frame, Direction.FORWARD)
                self._current_frame = frame
                if frame == self.num_frames:
                    self.events.emit(TEARDOWN, self.num_frames, int(Direction.FORWARD))
                cursor.next_frame = frame + 1
            else:
                frame = cursor.next_frame - 1
                self.events.emit(ENTER_FRAME, frame, int(Direction.BACKWARD))
                self._current_frame = frame
                if frame == 1:
                    self.events.emit(TEARDOWN, 1, int(Direction.BACKWARD))
                cursor.next_frame = frame
        except Exception:
            logger.exception(f"Event handler failed during tick; stopping at frame {self._current_frame}")
            self._release()
            raise

        # stop() was called from a handler
        if self._cursor is not cursor:
            return
        self._step()

    def _release(self):
        self._locked = False
        self._reserved = None
        self._cursor = None
        self._handle = None
        self._state = PlaybackState.IDLE
