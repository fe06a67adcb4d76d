"""
stepper.py — Step-by-Step Playback Controller
==============================================
The Stepper is the ONLY object a presentation layer interacts with
during a session.  It owns a frozen StepTrace plus a cursor and exposes
next / previous / seek / reset / current.  It never mutates the trace
and never reaches into engine internals.

Cursor:
    position == -1          → not started, current() is EMPTY_STEP
    0 ≤ position < len      → current() is trace[position]

State machine (autoplay only, the cursor rules above always hold):
    IDLE     →  next()/seek()  →  PAUSED
    PAUSED   →  play()          →  PLAYING
    PLAYING  →  pause()         →  PAUSED
    PLAYING  →  (last step)     →  FINISHED
    any      →  reset()         →  IDLE

Thread safety:
  This class is NOT thread-safe.  Use one Stepper per session and call
  it from a single thread; there is no shared cursor across sessions.
"""

import time
from enum import Enum
from typing import Callable, Optional

from algorithms.step  import EMPTY_STEP, Step, StepKind
from algorithms.trace import StepTrace


class OutOfRangeError(IndexError):
    """seek() was given an index outside [0, len(trace) - 1]."""

    def __init__(self, index: int, length: int):
        self.index  = index
        self.length = length
        super().__init__(f"Step index {index} outside [0, {length - 1}]")


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class StepperState(Enum):
    IDLE     = "idle"
    PAUSED   = "paused"
    PLAYING  = "playing"
    FINISHED = "finished"


# ---------------------------------------------------------------------------
# Speed presets (seconds per step)
# ---------------------------------------------------------------------------
SPEED_PRESETS = {
    "slow":   1.0,    # teaching mode
    "medium": 0.4,
    "fast":   0.15,   # demo mode
    "turbo":  0.05,
}


def is_significant(step: Step) -> bool:
    """Steps forward() stops on: a node finalised, an improvement, a cycle."""
    if step.kind in (StepKind.VISIT, StepKind.NEGATIVE_CYCLE):
        return True
    return step.relaxation is not None and step.relaxation.improved


# ---------------------------------------------------------------------------
# Stepper
# ---------------------------------------------------------------------------
class Stepper:
    """
    Attributes:
        trace    : The frozen StepTrace being replayed.
        position : Cursor, -1 until the first step is shown.
        state    : Current StepperState.
        speed    : Seconds between auto-advance ticks.
        on_step  : Optional callback(Step) fired every time the cursor moves.
    """

    def __init__(
        self,
        trace: StepTrace,
        on_step: Optional[Callable[[Step], None]] = None,
        speed: str = "medium",
    ):
        self._trace:     StepTrace    = trace
        self._position:  int          = -1
        self.state:      StepperState = StepperState.IDLE
        self.speed:      float        = SPEED_PRESETS.get(speed, SPEED_PRESETS["medium"])
        self.on_step:    Optional[Callable[[Step], None]] = on_step

        # for auto-play timing
        self._last_tick: float = 0.0

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def trace(self) -> StepTrace:
        return self._trace

    @property
    def position(self) -> int:
        return self._position

    @property
    def length(self) -> int:
        return len(self._trace)

    @property
    def at_end(self) -> bool:
        return self._position == len(self._trace) - 1

    def current(self) -> Step:
        if self._position == -1:
            return EMPTY_STEP
        return self._trace[self._position]

    # ------------------------------------------------------------------
    # Navigation  (next / previous / reset never raise)
    # ------------------------------------------------------------------
    def next(self) -> bool:
        """Advance one step.  Returns False (no-op) if already at the end."""
        if self._position >= len(self._trace) - 1:
            return False
        self._goto(self._position + 1)
        return True

    def previous(self) -> bool:
        """Rewind one step.  Returns False (no-op) at the start or before it."""
        if self._position <= 0:
            return False
        self._goto(self._position - 1)
        return True

    def seek(self, index: int) -> Step:
        """Jump to an arbitrary step index."""
        if not 0 <= index < len(self._trace):
            raise OutOfRangeError(index, len(self._trace))
        self._goto(index)
        return self._trace[index]

    def reset(self) -> None:
        """Back to 'not started'.  The trace is kept."""
        self._position = -1
        self.state     = StepperState.IDLE

    def forward(self) -> bool:
        """Skip to the next significant step (or the last one)."""
        if self.at_end:
            return False
        idx = self._position + 1
        while idx < len(self._trace) - 1 and not is_significant(self._trace[idx]):
            idx += 1
        self._goto(idx)
        return True

    def jump_to_end(self) -> None:
        self._goto(len(self._trace) - 1)

    # ------------------------------------------------------------------
    # Play / Pause
    # ------------------------------------------------------------------
    def play(self, now: Optional[float] = None) -> None:
        if self.state == StepperState.FINISHED:
            return
        self.state      = StepperState.PLAYING
        self._last_tick = time.monotonic() if now is None else now

    def pause(self) -> None:
        if self.state == StepperState.PLAYING:
            self.state = StepperState.PAUSED

    def toggle_play(self, now: Optional[float] = None) -> None:
        if self.state == StepperState.PLAYING:
            self.pause()
        else:
            self.play(now)

    @property
    def is_playing(self) -> bool:
        return self.state == StepperState.PLAYING

    # ------------------------------------------------------------------
    # Tick  (call this from your event loop / timer)
    # ------------------------------------------------------------------
    def tick(self, now: Optional[float] = None) -> bool:
        """
        Call periodically (e.g. every 50 ms).  If playing and enough
        time has elapsed, advances one step.  Returns True if a step
        was taken.
        """
        if self.state != StepperState.PLAYING:
            return False
        now = time.monotonic() if now is None else now
        if now - self._last_tick < self.speed:
            return False
        self._last_tick = now
        return self.next()

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------
    def set_speed(self, preset: str) -> None:
        self.speed = SPEED_PRESETS.get(preset, SPEED_PRESETS["medium"])

    def set_speed_value(self, seconds: float) -> None:
        self.speed = max(0.02, seconds)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _goto(self, idx: int) -> None:
        self._position = idx
        if idx == len(self._trace) - 1:
            self.state = StepperState.FINISHED
        elif self.state in (StepperState.IDLE, StepperState.FINISHED):
            self.state = StepperState.PAUSED
        if self.on_step:
            self.on_step(self._trace[idx])

    def __repr__(self) -> str:
        return f"Stepper(position={self._position}, length={len(self._trace)}, state={self.state.value})"
