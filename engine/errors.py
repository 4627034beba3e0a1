"""
errors.py — Playback Errors
============================
Controller-side members of the StepperError taxonomy.
"""

from algorithms.errors import StepperError


class InvalidConfig(StepperError, ValueError):
    """A pacing / configuration value is unusable (negative delay, unknown preset, …)."""


class AlreadyRunning(StepperError):
    """start() was called while a run is still RUNNING or PAUSED."""


class ProducerExhausted(StepperError):
    """
    Advancement was requested after the terminal Step was delivered.
    The controller turns this into a no-op so repeated clicks stay harmless.
    """
