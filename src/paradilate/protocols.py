"""
Protocol definitions for paradilate stage interfaces.

Defines the common interface that the internal proximity and threshold
stages implement.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class ImageStage(Protocol):
    """
    Protocol for internal filter stages (ProximityStage, ThresholdStage).

    A stage is a reconfigurable, side-effect-free array operation with a
    modification counter so the owning filter can tell when its cached
    output is out of date.
    """

    name: str

    def apply(self, array: np.ndarray) -> np.ndarray:
        """
        Run the stage on a fully materialized array.

        Args:
            array: Input grid

        Returns:
            New output grid of the same shape
        """
        ...

    def modified(self) -> None:
        """Bump the stage's modification counter."""
        ...

    @property
    def mtime(self) -> int:
        """Modification counter, increases on every effective reconfiguration."""
        ...

    def __call__(self, array: np.ndarray) -> np.ndarray:
        """Apply the stage (callable interface)."""
        ...
