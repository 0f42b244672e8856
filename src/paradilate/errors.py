"""
Exception types raised by paradilate filters.
"""

from __future__ import annotations


class StageError(RuntimeError):
    """
    Raised when an internal filter stage fails while computing its output.

    The original exception is chained as ``__cause__``; ``stage`` names the
    failing stage, e.g. ``"proximity[circular]"`` or ``"threshold[rectangular]"``.
    """

    def __init__(self, stage: str, message: str):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
