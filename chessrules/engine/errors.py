from __future__ import annotations


class EngineError(Exception):
    """Base class for all rules-engine errors."""


class InvariantViolation(EngineError):
    """The board is corrupted and cannot be reasoned about.

    Raised for an occupied square holding something that is not a known
    piece kind, or for more than one king of the same side. Distinct from an
    illegal move, which is reported as a status value and never raised.
    """


class IllegalMoveError(EngineError, ValueError):
    """A move was submitted for commit but is not legal in the current state."""


class LayoutError(EngineError, ValueError):
    """A custom layout string does not describe a structurally valid board."""
