"""
errors.py — Producer-side Errors
=================================
Root of the error taxonomy plus the one error a Step producer can raise.

    StepperError
      ├── InvalidInput        (here — malformed algorithm input)
      ├── InvalidConfig       (engine.errors)
      ├── AlreadyRunning      (engine.errors)
      └── ProducerExhausted   (engine.errors)

Producers validate eagerly, so InvalidInput always surfaces before a
single Step exists.
"""


class StepperError(Exception):
    """Base class for every error the stepper raises on purpose."""


class InvalidInput(StepperError, ValueError):
    """Algorithm input is malformed (non-square matrix, unknown node, n < 0, …)."""
