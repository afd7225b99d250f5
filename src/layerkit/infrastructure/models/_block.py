"""
Transformer decoder block.

Pre-norm residual layout, written out in `forward`:

    z = x + att(ln1(x))
    y = z + fcc(ln2(z))

Both residual sums keep the feature size, so the block maps
`(B, T, in_size)` to `(B, T, in_size)`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from ...domain._errors import InvalidArgumentError
from .._module import Module
from ..layers._layernorm import LayerNorm
from ..module._serialization_core import register_module
from ..tensor._tensor import Tensor, as_tensor
from ._attention import MultiHeadSelfAttention
from ._fully_connected import FullyConnected


@register_module()
class Block(Module):
    """
    Self-attention followed by a fully-connected block, each with a residual
    connection and a preceding layer norm.

    Parameters
    ----------
    in_size : int
        Feature size of the input.
    out_size : int
        Feature size of the output. Must equal `in_size`, since the
        residual sums add the input to each sub-layer's output.
    n_heads : int
        Number of attention heads.
    n_timesteps : int
        Longest sequence the block accepts.
    dropout_prob : float, optional
        Dropout probability shared by attention and the fully-connected part.
    generator : Optional[numpy.random.Generator]
        Shared random source.
    """

    def __init__(
        self,
        in_size: int,
        out_size: int,
        n_heads: int,
        n_timesteps: int,
        dropout_prob: float = 0.0,
        *,
        generator: Optional[np.random.Generator] = None,
    ) -> None:
        super().__init__()
        if out_size != in_size:
            raise InvalidArgumentError(
                "out_size", out_size, f"must equal in_size={in_size} (residual block)"
            )
        rng = generator if generator is not None else np.random.default_rng()

        self.register(
            "att",
            MultiHeadSelfAttention(
                in_size, in_size, n_heads, n_timesteps, dropout_prob, generator=rng
            ),
        )
        self.register("ln1", LayerNorm(in_size))
        self.register("fcc", FullyConnected(in_size, out_size, dropout_prob, generator=rng))
        self.register("ln2", LayerNorm(in_size))

    def forward(self, x: Tensor) -> Tensor:
        x = as_tensor(x)
        z = x + self.att(self.ln1(x))
        return z + self.fcc(self.ln2(z))

    def get_config(self) -> Dict[str, Any]:
        return {
            "in_size": self.att.wk.in_size,
            "out_size": self.fcc.l2.out_size,
            "n_heads": self.att.n_heads,
            "n_timesteps": self.att.n_timesteps,
            "dropout_prob": self.att.att_dropout.p,
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Block":
        return cls(
            int(cfg["in_size"]),
            int(cfg["out_size"]),
            int(cfg["n_heads"]),
            int(cfg["n_timesteps"]),
            float(cfg.get("dropout_prob", 0.0)),
        )
