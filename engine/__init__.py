"""
engine/
-------
Playback & recording layer.

    from engine import Stepper, Recorder, record, compare
"""

from engine.stepper  import Stepper, StepperState, SPEED_PRESETS, OutOfRangeError
from engine.recorder import Recorder, RunMetrics, ComparisonResult, Cancelled, record, compare

__all__ = [
    "Stepper",
    "StepperState",
    "SPEED_PRESETS",
    "OutOfRangeError",
    "Recorder",
    "RunMetrics",
    "ComparisonResult",
    "Cancelled",
    "record",
    "compare",
]
