"""
Frame reference resolution.

A reference is an absolute frame number, a percentage string ("50%") or the
name of a registered alias. Numbers are floored, percentages are rounded.
"""

import logging
import math
from typing import Dict, Union

from .errors import InvalidReferenceError, OutOfRangeError, UnresolvedAliasError

logger = logging.getLogger('resolver')

FrameRef = Union[int, float, str]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class FrameIndexResolver:
    """
    Resolves frame references to validated absolute frame indices.

    Holds the alias table and the frame count; nothing else.
    """

    def __init__(self, num_frames: int):
        self.num_frames = num_frames
        self._aliases: Dict[str, int] = {}

    @property
    def aliases(self) -> Dict[str, int]:
        return dict(self._aliases)

    def resolve(self, ref: FrameRef) -> int:
        """
        Resolve a reference to an absolute frame index.

        Raises:
            OutOfRangeError: number or percentage outside [1, num_frames]
            UnresolvedAliasError: unknown alias name
            InvalidReferenceError: anything that is not a number or string
        """
        if isinstance(ref, str):
            if ref.endswith('%'):
                return self._resolve_number(self._percentage_to_frame(ref))
            if ref not in self._aliases:
                raise UnresolvedAliasError(ref)
            return self._resolve_number(self._aliases[ref])

        if isinstance(ref, bool) or not isinstance(ref, (int, float)):
            raise InvalidReferenceError(ref)

        return self._resolve_number(ref)

    def distance_between(self, a: FrameRef, b: FrameRef) -> int:
        """Number of frames between two references."""
        return abs(self.resolve(a) - self.resolve(b))

    def register_alias(self, ref: FrameRef, name: str) -> int:
        """Bind ``name`` to the frame ``ref`` resolves to. Returns that frame."""
        if not isinstance(name, str):
            raise InvalidReferenceError(name, "alias name must be a string")
        frame = self.resolve(ref)
        previous = self._aliases.get(name)
        self._aliases[name] = frame
        if previous is not None and previous != frame:
            logger.debug(f"Alias {name!r} moved from frame {previous} to {frame}")
        return frame

    # === Private Methods ===

    def _resolve_number(self, n) -> int:
        if isinstance(n, float) and not math.isfinite(n):
            raise OutOfRangeError(n, self.num_frames)
        frame = math.floor(n)
        if not 1 <= frame <= self.num_frames:
            raise OutOfRangeError(n, self.num_frames)
        return frame

    def _percentage_to_frame(self, ref: str) -> int:
        try:
            percent = float(ref[:-1])
        except ValueError:
            raise InvalidReferenceError(ref, "percentage must be numeric")
        frame = self.num_frames * percent / 100
        if not math.isfinite(frame):
            raise OutOfRangeError(ref, self.num_frames)
        return _round_half_up(frame)
