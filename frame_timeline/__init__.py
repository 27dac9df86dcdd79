"""
Frame timeline: frame-based animation sequencing.
Provides frame resolution, per-frame callbacks and a reservable playhead.
"""

from .errors import (
    InvalidReferenceError,
    LockedError,
    OutOfRangeError,
    TimelineError,
    UnresolvedAliasError,
)
from .events import EventChannel
from .models import Direction, PlaybackState, Reservation
from .resolver import FrameIndexResolver
from .registry import CallbackRegistry
from .scheduler import AsyncioScheduler, ManualScheduler
from .timeline_engine import Timeline

__all__ = [
    'Timeline',
    'FrameIndexResolver',
    'CallbackRegistry',
    'EventChannel',
    'AsyncioScheduler',
    'ManualScheduler',
    'Direction',
    'PlaybackState',
    'Reservation',
    'TimelineError',
    'OutOfRangeError',
    'UnresolvedAliasError',
    'InvalidReferenceError',
    'LockedError',
]
