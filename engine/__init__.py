"""
engine/
-------
Playback & recording layer.

    from engine import PlaybackController, Recorder, ManualScheduler
"""

from engine.config     import SPEED_PRESETS, StepperConfig
from engine.consumer   import CallbackConsumer, RecordingConsumer, StepConsumer
from engine.controller import ControllerState, PlaybackController, PlaybackState
from engine.errors     import AlreadyRunning, InvalidConfig, ProducerExhausted
from engine.recorder   import Recorder, RunMetrics
from engine.scheduler  import ManualScheduler, ScheduledCall, Scheduler, ThreadingScheduler

__all__ = [
    "PlaybackController",
    "PlaybackState",
    "ControllerState",
    "SPEED_PRESETS",
    "StepperConfig",
    "StepConsumer",
    "CallbackConsumer",
    "RecordingConsumer",
    "Scheduler",
    "ScheduledCall",
    "ThreadingScheduler",
    "ManualScheduler",
    "Recorder",
    "RunMetrics",
    "AlreadyRunning",
    "InvalidConfig",
    "ProducerExhausted",
]
