"""
Execution mode of a module tree.

Layers whose forward behavior differs between training and inference (e.g.,
Dropout) read the mode of the module they belong to. The mode is propagated
top-down by `Module.set_mode`.
"""

from __future__ import annotations

from enum import Enum


class Mode(str, Enum):
    """
    Training vs evaluation flag.
    """

    TRAINING = "training"
    EVALUATION = "evaluation"

    @classmethod
    def from_flag(cls, training: bool) -> "Mode":
        """Map a boolean training flag to a `Mode`."""
        return cls.TRAINING if training else cls.EVALUATION

    @property
    def is_training(self) -> bool:
        return self is Mode.TRAINING
