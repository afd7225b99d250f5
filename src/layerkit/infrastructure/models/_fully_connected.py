"""
Fully-connected block.

`FullyConnected` is the reference composite of the library: two projections
around a ReLU, followed by dropout. Its children are registered in the order
they run, and its `forward` spells the route out by hand:

    l1 -> relu -> l2 -> dropout
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from .._activations import ReLU
from .._linear import Linear
from .._module import Module
from ..layers._dropout import Dropout
from ..module._serialization_core import register_module
from ..tensor._tensor import Tensor


@register_module()
class FullyConnected(Module):
    """
    Two-layer perceptron block with dropout.

    Parameters
    ----------
    in_size : int
        Number of input features.
    out_size : int
        Number of output features.
    dropout_prob : float, optional
        Dropout probability applied to the output. Defaults to 0.0.
    hidden_size : Optional[int]
        Width of the hidden projection. Defaults to ``2 * in_size``.
    generator : Optional[numpy.random.Generator]
        Shared random source for initialization and dropout masks.
    """

    def __init__(
        self,
        in_size: int,
        out_size: int,
        dropout_prob: float = 0.0,
        *,
        hidden_size: Optional[int] = None,
        generator: Optional[np.random.Generator] = None,
    ) -> None:
        super().__init__()
        hidden = hidden_size if hidden_size is not None else 2 * in_size
        rng = generator if generator is not None else np.random.default_rng()

        self.register("l1", Linear(in_size, hidden, generator=rng))
        self.register("relu", ReLU())
        self.register("l2", Linear(hidden, out_size, generator=rng))
        self.register("dropout", Dropout(dropout_prob, generator=rng))

    def forward(self, x: Tensor) -> Tensor:
        z = self.l1(x)
        z = self.relu(z)
        z = self.l2(z)
        return self.dropout(z)

    def extra_repr(self) -> str:
        return (
            f"in_size={self.l1.in_size}, out_size={self.l2.out_size}, "
            f"hidden_size={self.l1.out_size}"
        )

    def get_config(self) -> Dict[str, Any]:
        return {
            "in_size": self.l1.in_size,
            "out_size": self.l2.out_size,
            "dropout_prob": self.dropout.p,
            "hidden_size": self.l1.out_size,
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "FullyConnected":
        return cls(
            int(cfg["in_size"]),
            int(cfg["out_size"]),
            float(cfg.get("dropout_prob", 0.0)),
            hidden_size=cfg.get("hidden_size"),
        )
