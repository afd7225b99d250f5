"""
Module-based activation layers.

Activations are parameter-free `Layer`s. They behave identically in training
and evaluation mode and compute their output with `Tensor` operations only.

- `ReLU` is stateless and takes its config hooks from `StatelessConfigMixin`.
- `Softmax` stores the `axis` hyperparameter.
"""

from typing import Any, Dict

from ..domain.model._stateless_mixin import StatelessConfigMixin
from ._module import Layer
from .module._serialization_core import register_module
from .tensor._tensor import Tensor, as_tensor


@register_module()
class ReLU(StatelessConfigMixin, Layer):
    """
    Rectified Linear Unit (ReLU) activation module.

    This layer applies the ReLU function elementwise:

        relu(x) = max(0, x)

    The output has the same shape as the input, and applying it twice gives
    the same result as applying it once.
    """

    def forward(self, x: Tensor) -> Tensor:
        return as_tensor(x).maximum(0.0)


@register_module()
class Softmax(Layer):
    """
    Softmax activation module.

    This module applies the softmax function to its input tensor along a
    specified axis, producing a normalized probability distribution.

    By default, softmax is applied over the last dimension, which is the
    standard convention for classification outputs.
    """

    def __init__(self, *, axis: int = -1) -> None:
        """
        Construct a Softmax activation module.

        Parameters
        ----------
        axis : int, optional
            Dimension along which the softmax operation is applied.
            Defaults to the last dimension (`-1`).
        """
        super().__init__()
        self.axis = int(axis)

    def forward(self, x: Tensor) -> Tensor:
        """
        Apply the softmax activation to the input tensor.

        The per-slice maximum is subtracted before exponentiation, so large
        logits do not overflow.

        Returns
        -------
        Tensor
            A tensor of the same shape as `x` whose values along `axis` sum
            to 1.
        """
        x = as_tensor(x)
        shifted = x - x.max(axis=self.axis, keepdims=True)
        e = shifted.exp()
        return e / e.sum(axis=self.axis, keepdims=True)

    def extra_repr(self) -> str:
        return f"axis={self.axis}"

    def get_config(self) -> Dict[str, Any]:
        return {"axis": self.axis}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Softmax":
        return cls(axis=int(cfg.get("axis", -1)))
