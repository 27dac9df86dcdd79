"""
Frame Timeline CLI - play a timeline from the command line and print its events.

Entry point:
    frame-timeline   - play forward (and optionally back) over N frames
"""

import argparse
import asyncio
import sys
from typing import List, Optional, Union

from .config import get_settings
from .errors import TimelineError
from .events import ENTER_FRAME, SETUP, TEARDOWN
from .logging_config import configure_logging
from .scheduler import AsyncioScheduler, ManualScheduler
from .timeline_engine import Timeline

# Fix Windows console encoding for unicode characters
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

POLL_INTERVAL = 0.005  # seconds


def parse_ref(value: str) -> Union[int, float, str]:
    """Turn a command-line frame reference into a number when it looks like one."""
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


def validate_frames(value: str) -> int:
    """Validate the frame count is a positive integer."""
    try:
        frames = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid frame count: {value}")

    if frames < 1:
        raise argparse.ArgumentTypeError(f"Frame count must be at least 1, got: {frames}")
    return frames


def validate_interval(value: str) -> float:
    """Validate the interval is a non-negative number of milliseconds."""
    try:
        interval = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid interval: {value}")

    if interval < 0:
        raise argparse.ArgumentTypeError(f"Interval must be >= 0, got: {interval}")
    return interval


def validate_alias(value: str):
    """Validate a NAME=REF alias definition."""
    name, sep, ref = value.partition("=")
    if not sep or not name or not ref:
        raise argparse.ArgumentTypeError(f"Alias must look like NAME=REF, got: {value}")
    return name, parse_ref(ref)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frame-timeline",
        description="Frame Timeline - drive a playhead over N frames and print lifecycle events",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  frame-timeline --frames 10 --to 10                 # Play frames 2..10
  frame-timeline --frames 24 --to 100% --back-to 1   # Forward, then back
  frame-timeline --frames 24 --to end --alias end=24 --interval 40
  frame-timeline --frames 10 --to 10 --back-to 1 --reverse-at 5 --dry-run
        """,
    )

    parser.add_argument("--frames", "-n", type=validate_frames, required=True,
                        help="Number of frames in the timeline")
    parser.add_argument("--to", type=parse_ref, required=True,
                        help="Frame to play forward to (number, percentage or alias)")
    parser.add_argument("--back-to", type=parse_ref, default=None,
                        help="Frame to play backward to once the forward leg is done")
    parser.add_argument("--reverse-at", type=parse_ref, default=None,
                        help="Reserve the backward leg when the playhead enters this frame")
    parser.add_argument("--interval", "-i", type=validate_interval, default=None,
                        help="Milliseconds between frames (default: $FRAME_TIMELINE_DEFAULT_INTERVAL_MS)")
    parser.add_argument("--alias", "-a", type=validate_alias, action="append", default=[],
                        metavar="NAME=REF", help="Register a frame alias (repeatable)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Use a virtual clock instead of real time")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser


def print_event(name: str):
    def handler(frame: int, direction: int):
        print(f"{name:<10} frame={frame:>4} direction={direction:+d}", flush=True)

    return handler


def _wire(timeline: Timeline, args: argparse.Namespace):
    for event in (SETUP, ENTER_FRAME, TEARDOWN):
        timeline.on(event, print_event(event))

    for name, ref in args.alias:
        timeline.alias(ref, name)

    if args.back_to is not None and args.reverse_at is not None:
        reverse_frame = timeline.nth_frame(args.reverse_at)
        back_to = timeline.nth_frame(args.back_to)

        def reverse(frame: int, direction: int):
            if frame == reverse_frame and direction > 0:
                timeline.back_to_and_stop(back_to, args.interval)

        timeline.on(ENTER_FRAME, reverse)


def _run_dry(args: argparse.Namespace, settings) -> Timeline:
    scheduler = ManualScheduler()
    timeline = Timeline(args.frames, scheduler=scheduler, settings=settings)
    _wire(timeline, args)

    timeline.goto_and_stop(args.to, args.interval)
    scheduler.run_until_idle(settings.max_idle_steps)
    if args.back_to is not None and args.reverse_at is None:
        timeline.back_to_and_stop(args.back_to, args.interval)
        scheduler.run_until_idle(settings.max_idle_steps)
    return timeline


async def _wait_idle(timeline: Timeline):
    while timeline.locked:
        await asyncio.sleep(POLL_INTERVAL)
    # let zero-delay frame callbacks drain
    await asyncio.sleep(0)


async def _run_live(args: argparse.Namespace, settings) -> Timeline:
    timeline = Timeline(args.frames, scheduler=AsyncioScheduler(), settings=settings)
    _wire(timeline, args)

    try:
        timeline.goto_and_stop(args.to, args.interval)
        await _wait_idle(timeline)
        if args.back_to is not None and args.reverse_at is None:
            timeline.back_to_and_stop(args.back_to, args.interval)
            await _wait_idle(timeline)
    finally:
        timeline.stop()
    return timeline


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.reverse_at is not None and args.back_to is None:
        parser.error("--reverse-at requires --back-to")

    settings = get_settings()
    if args.verbose:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    configure_logging(settings)

    try:
        if args.dry_run:
            timeline = _run_dry(args, settings)
        else:
            timeline = asyncio.run(_run_live(args, settings))
    except TimelineError as e:
        parser.error(str(e))
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    print(f"Finished at frame {timeline.current_frame}/{timeline.num_frames}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
