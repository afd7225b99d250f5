"""
Dropout regularization layer.

This module implements an inverted Dropout layer. During training,
activations are randomly masked with probability `p` and scaled by
`1 / (1 - p)` to preserve the expected value of activations. During
evaluation, the layer is the identity and returns its input object as is.

Design notes
------------
- This implementation follows *inverted dropout*, so no scaling is
  required at inference time.
- Randomness is drawn from a `numpy.random.Generator` injected at
  construction, overridable per call. Seeding it makes the mask
  reproducible.
- The layer reads its behavior from the mode set by its parent; it never
  switches mode on its own.
"""

from __future__ import annotations

from numbers import Real
from typing import Any, Dict, Optional

import numpy as np

from ...domain._errors import InvalidArgumentError
from .._module import Layer
from ..module._serialization_core import register_module
from ..tensor._tensor import Tensor, as_tensor


@register_module()
class Dropout(Layer):
    """
    Dropout regularization layer (inverted dropout).

    Behavior
    --------
    - Training mode:
        y = x * mask / (1 - p), where mask ~ Bernoulli(1 - p)
    - Evaluation mode, or p == 0:
        y = x (identity, same object)

    Parameters
    ----------
    p : float, optional
        Probability of dropping (zeroing) an element. Must satisfy
        0.0 <= p < 1.0. Default is 0.5.
    generator : Optional[numpy.random.Generator]
        Default random source for masks. A fresh `default_rng()` is created
        if omitted.

    Raises
    ------
    InvalidArgumentError
        If `p` is not a real number in [0, 1).
    """

    def __init__(
        self,
        p: float = 0.5,
        *,
        generator: Optional[np.random.Generator] = None,
    ) -> None:
        super().__init__()
        if isinstance(p, bool) or not isinstance(p, Real) or not 0.0 <= p < 1.0:
            raise InvalidArgumentError("p", p, "must be a number in [0, 1)")
        self.p = float(p)
        self.generator = generator if generator is not None else np.random.default_rng()

    def forward(
        self, x: Tensor, *, generator: Optional[np.random.Generator] = None
    ) -> Tensor:
        """
        Apply dropout to the input tensor.

        Parameters
        ----------
        x : Tensor
            Input tensor.
        generator : Optional[numpy.random.Generator]
            Overrides the layer's generator for this call only.

        Returns
        -------
        Tensor
            The input as a `Tensor` in evaluation mode or when `p == 0` (a
            `Tensor` input is returned as is); otherwise a new tensor with
            dropped elements zeroed and survivors rescaled.
        """
        x = as_tensor(x)
        if not self.training or self.p == 0.0:
            return x

        rng = generator if generator is not None else self.generator
        keep_prob = 1.0 - self.p

        mask = Tensor.rand(x.shape, generator=rng) < keep_prob
        return x * mask / keep_prob

    def extra_repr(self) -> str:
        return f"p={self.p}"

    def get_config(self) -> Dict[str, Any]:
        """
        Return a serializable configuration for this module.

        The generator is runtime state and is not serialized.
        """
        return {"p": self.p}

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Dropout":
        return cls(p=float(config["p"]))
