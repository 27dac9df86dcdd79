"""
Value types shared by the timeline engine.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class Direction(IntEnum):
    FORWARD = 1
    BACKWARD = -1


class PlaybackState(Enum):
    IDLE = "idle"
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True)
class Reservation:
    """A redirect request deposited while a loop owns the playhead."""
    direction: Direction
    target: int
    interval: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "direction": int(self.direction),
            "target": self.target,
            "interval": self.interval,
        }


@dataclass
class Cursor:
    """Persistent state of the running stepping loop."""
    direction: Direction
    next_frame: int
    destination: int
    interval: Optional[float] = None  # ms
