"""
Publish/subscribe channel used to deliver timeline lifecycle events.
"""

from typing import Any, Callable, Dict, List, Optional

Handler = Callable[..., Any]

SETUP = "setup"
ENTER_FRAME = "enterframe"
TEARDOWN = "teardown"


class EventChannel:
    """
    Synchronous event emitter.

    Usage:
        channel = EventChannel()
        channel.on("enterframe", lambda frame, direction: ...)
        channel.emit("enterframe", 2, 1)

    Handlers run in registration order on the emitting thread. Exceptions
    raised by a handler propagate to the caller of emit().
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def on(self, event: str, handler: Handler) -> "EventChannel":
        """Register a handler for an event name."""
        if not callable(handler):
            raise TypeError(f"Handler for {event!r} must be callable")
        self._handlers.setdefault(event, []).append(handler)
        return self

    def once(self, event: str, handler: Handler) -> "EventChannel":
        """Register a handler that is removed after its first call."""
        def wrapper(*args):
            self.off(event, wrapper)
            return handler(*args)

        return self.on(event, wrapper)

    def off(self, event: str, handler: Optional[Handler] = None) -> "EventChannel":
        """Remove a handler, or every handler for the event when none is given."""
        if handler is None:
            self._handlers.pop(event, None)
            return self

        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._handlers.pop(event, None)
        return self

    def emit(self, event: str, *args) -> bool:
        """Call every handler for the event. Returns False if there were none."""
        handlers = list(self._handlers.get(event, ()))
        if not handlers:
            return False

        for handler in handlers:
            handler(*args)
        return True

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))
