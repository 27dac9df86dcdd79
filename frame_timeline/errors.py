"""
Error types raised by the frame timeline.
All of them are raised synchronously by the public call that triggered them.
"""


class TimelineError(Exception):
    """Base class for timeline errors."""


class OutOfRangeError(TimelineError, ValueError):
    """A numeric or percentage reference resolved outside [1, num_frames]."""

    def __init__(self, frame, num_frames: int):
        self.frame = frame
        self.num_frames = num_frames
        super().__init__(f"Frame must be 1 <= n <= {num_frames}, got {frame}")


class UnresolvedAliasError(TimelineError, LookupError):
    """No alias has been registered under the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown frame alias: {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidReferenceError(TimelineError, TypeError):
    """The reference is neither a number nor a string."""

    def __init__(self, ref, reason: str = ""):
        self.ref = ref
        message = f"Cannot find frame for reference {ref!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LockedError(TimelineError, RuntimeError):
    """The playhead was set directly while a playback loop owns it."""

    def __init__(self):
        super().__init__("Cannot set the current frame during playback")
