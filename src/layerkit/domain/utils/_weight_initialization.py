"""
Abstract interfaces and shape helpers for weight initialization.

The registry and the concrete initialization policies live in the
infrastructure layer. This module only fixes the dispatcher contract and the
fan-in / fan-out arithmetic, so it does not depend on any numeric backend.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from .._tensor import ITensor


class _WeightInitializer(ABC):
    """
    Abstract base class for named weight-initializer dispatchers.

    Contract
    --------
    - Initializers are identified by string names.
    - An initializer mutates a tensor in place and returns it.
    - Initializers accept an optional `generator` keyword so randomness can be
      injected by the caller instead of read from global state.
    """

    INITIALIZERS: Dict[str, Callable[..., ITensor]] = {}

    @classmethod
    @abstractmethod
    def available(cls) -> tuple[str, ...]:
        """
        Return the names of all registered initializers, sorted.
        """

    @abstractmethod
    def __call__(
        self, tensor: ITensor, *, generator: Optional[Any] = None
    ) -> ITensor:
        """
        Apply the selected initializer to `tensor` in place.

        Parameters
        ----------
        tensor:
            Tensor to initialize.
        generator:
            Optional random source forwarded to the initializer.

        Returns
        -------
        ITensor
            The same tensor object.
        """


def _calculate_fan_in_and_fan_out(shape: tuple[int, ...]) -> tuple[int, int]:
    """
    Compute fan-in and fan-out for a parameter shape.

    Linear weights are laid out as `(out_size, in_size)`; trailing axes beyond
    the second are treated as a receptive field multiplier.

    Parameters
    ----------
    shape:
        Shape of the parameter tensor.

    Returns
    -------
    tuple[int, int]
        `(fan_in, fan_out)`, each at least 1.
    """
    if len(shape) == 0:
        return 1, 1
    if len(shape) == 1:
        # bias-like vector
        return max(1, int(shape[0])), max(1, int(shape[0]))

    receptive_field = 1
    for d in shape[2:]:
        receptive_field *= int(d)

    fan_out = int(shape[0]) * receptive_field
    fan_in = int(shape[1]) * receptive_field
    return max(1, fan_in), max(1, fan_out)
