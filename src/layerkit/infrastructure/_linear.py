"""
Linear (fully-connected) layer implementation.

This module provides the infrastructure-level `Linear` layer. It is a leaf
`Layer` (registered for serialization via `register_module`) that performs an
affine projection over the last input dimension:

    y = x @ W^T + b

Shape conventions
-----------------
- x : (..., in_size)   (1-D inputs are treated as a single sample)
- W : (out_size, in_size)
- b : (out_size,)      (omitted if bias=False)
- y : (..., out_size)

Leading dimensions are broadcast through unchanged.

Initialization
--------------
Parameters are filled by a registered weight initializer. The default,
``"uniform_fan_in"``, draws both weight and bias from ``U(-k, k)`` with
``k = 1 / sqrt(in_size)``. Randomness comes from the injected
`numpy.random.Generator`, so a seeded generator makes construction
reproducible.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from ..domain._errors import InvalidArgumentError, ShapeMismatchError
from ._module import Layer
from ._parameter import Parameter
from .module._serialization_core import register_module
from .tensor._tensor import Tensor, as_tensor
from .utils.weight_initializer import WeightInitializer

DEFAULT_INITIALIZER = "uniform_fan_in"


def _check_size(argument: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise InvalidArgumentError(argument, value, "must be a positive integer")
    return int(value)


@register_module()
class Linear(Layer):
    """
    Fully-connected (dense) layer.

    Parameters
    ----------
    in_size : int
        Number of input features (size of the last input dimension).
    out_size : int
        Number of output features.
    bias : bool, optional
        If True, includes a learnable bias term. Defaults to True.
    initializer : str, optional
        Registered weight initializer applied to `weight`. The bias always
        uses the fan-in uniform policy so it shares the weight's bound.
    generator : Optional[numpy.random.Generator]
        Random source used for initialization.

    Raises
    ------
    InvalidArgumentError
        If `in_size` or `out_size` is not a positive integer, or
        `initializer` is not registered.
    """

    def __init__(
        self,
        in_size: int,
        out_size: int,
        bias: bool = True,
        *,
        initializer: str = DEFAULT_INITIALIZER,
        generator: Optional[np.random.Generator] = None,
    ) -> None:
        super().__init__()
        self.in_size = _check_size("in_size", in_size)
        self.out_size = _check_size("out_size", out_size)
        self.initializer = initializer

        self.register_parameter("weight", Parameter((self.out_size, self.in_size)))
        if bias:
            self.register_parameter("bias", Parameter((self.out_size,)))
        else:
            self.bias = None

        self.reset_parameters(generator=generator)

    def reset_parameters(
        self, *, generator: Optional[np.random.Generator] = None
    ) -> None:
        """
        Re-draw weight and bias from the configured initializer.
        """
        rng = generator if generator is not None else np.random.default_rng()
        WeightInitializer(self.initializer)(self.weight, generator=rng)
        if self.bias is not None:
            WeightInitializer(DEFAULT_INITIALIZER)(
                self.bias, generator=rng, fan_in=self.in_size
            )

    def forward(self, x: Tensor) -> Tensor:
        """
        Compute ``x @ W^T + b`` over the last dimension of `x`.

        Raises
        ------
        ShapeMismatchError
            If the last dimension of `x` is not `in_size`.
        """
        x = as_tensor(x)
        if x.ndim == 0 or x.shape[-1] != self.in_size:
            raise ShapeMismatchError(
                f"Linear expected input with last dimension {self.in_size}, "
                f"got shape {x.shape}",
                expected=(self.in_size,),
                actual=x.shape,
            )

        out = x @ self.weight.T
        if self.bias is not None:
            out = out + self.bias
        return out

    def extra_repr(self) -> str:
        return (
            f"in_size={self.in_size}, out_size={self.out_size}, "
            f"bias={self.bias is not None}"
        )

    def get_config(self) -> Dict[str, Any]:
        return {
            "in_size": self.in_size,
            "out_size": self.out_size,
            "bias": self.bias is not None,
            "initializer": self.initializer,
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Linear":
        return cls(
            in_size=int(cfg["in_size"]),
            out_size=int(cfg["out_size"]),
            bias=bool(cfg.get("bias", True)),
            initializer=str(cfg.get("initializer", DEFAULT_INITIALIZER)),
        )
