"""
Causal multi-head self-attention.

For an input of shape `(B, T, D)` with `n_heads` heads of size
`H = D / n_heads`:

    q, k, v = x @ Wq^T, x @ Wk^T, x @ Wv^T          (B, T, D) each
    split into heads                                 (B, n_heads, T, H)
    att = softmax(mask(q @ k^T / sqrt(H)))           (B, n_heads, T, T)
    out = merge_heads(dropout(att) @ v)              (B, T, D)
    y   = dropout(out @ Wo^T)                        (B, T, out_size)

The mask hides future positions: timestep `t` only attends to `0 .. t`.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

import numpy as np

from ...domain._errors import InvalidArgumentError, ShapeMismatchError
from .._activations import Softmax
from .._linear import Linear
from .._module import Module
from ..layers._dropout import Dropout
from ..module._serialization_core import register_module
from ..tensor._tensor import Tensor, as_tensor


@register_module()
class MultiHeadSelfAttention(Module):
    """
    Multi-head self-attention with a causal mask.

    Parameters
    ----------
    in_size : int
        Size of the last input dimension. Must be divisible by `n_heads`.
    out_size : int
        Size of the last output dimension.
    n_heads : int
        Number of attention heads.
    n_timesteps : int
        Longest sequence the layer accepts.
    dropout_prob : float, optional
        Dropout applied to attention weights and to the output projection.
    generator : Optional[numpy.random.Generator]
        Shared random source for projections and dropout masks.

    Raises
    ------
    InvalidArgumentError
        If `n_heads` or `n_timesteps` is not a positive integer, or
        `in_size` is not divisible by `n_heads`.
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
        for argument, value in (("n_heads", n_heads), ("n_timesteps", n_timesteps)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidArgumentError(argument, value, "must be a positive integer")
        if isinstance(in_size, int) and in_size % n_heads != 0:
            raise InvalidArgumentError(
                "in_size", in_size, f"must be divisible by n_heads={n_heads}"
            )

        rng = generator if generator is not None else np.random.default_rng()
        self.n_heads = n_heads
        self.n_timesteps = n_timesteps
        self.head_size = in_size // n_heads

        self.register("wk", Linear(in_size, in_size, False, initializer="xavier", generator=rng))
        self.register("wq", Linear(in_size, in_size, False, initializer="xavier", generator=rng))
        self.register("wv", Linear(in_size, in_size, False, initializer="xavier", generator=rng))
        self.register(
            "residual_proj",
            Linear(in_size, out_size, False, initializer="xavier", generator=rng),
        )
        self.register("att_dropout", Dropout(dropout_prob, generator=rng))
        self.register("residual_dropout", Dropout(dropout_prob, generator=rng))
        self.register("softmax", Softmax(axis=-1))

    def _split_heads(self, t: Tensor, batch: int, steps: int) -> Tensor:
        # (B, T, D) -> (B, nh, T, H)
        return t.reshape((batch, steps, self.n_heads, self.head_size)).transpose(1, 2)

    def forward(self, x: Tensor) -> Tensor:
        """
        Attend over the timesteps of `x`.

        Raises
        ------
        ShapeMismatchError
            If `x` is not `(B, T, in_size)` or `T > n_timesteps`.
        """
        x = as_tensor(x)
        if x.ndim != 3:
            raise ShapeMismatchError(
                f"MultiHeadSelfAttention expects (batch, timesteps, features), got {x.shape}",
                actual=x.shape,
            )
        batch, steps, features = x.shape
        if steps > self.n_timesteps:
            raise ShapeMismatchError(
                f"MultiHeadSelfAttention covers {self.n_timesteps} timesteps, got {steps}",
                expected=(self.n_timesteps,),
                actual=x.shape,
            )

        k = self._split_heads(self.wk(x), batch, steps)
        q = self._split_heads(self.wq(x), batch, steps)
        v = self._split_heads(self.wv(x), batch, steps)

        att = (q @ k.transpose(-2, -1)) / math.sqrt(self.head_size)

        future = (Tensor.tril(steps) < 0.5).broadcast_to(att.shape)
        att = att.masked_fill(future, -np.inf)
        att = self.att_dropout(self.softmax(att))

        out = (att @ v).transpose(1, 2).reshape((batch, steps, features))
        return self.residual_dropout(self.residual_proj(out))

    def extra_repr(self) -> str:
        return f"n_heads={self.n_heads}, n_timesteps={self.n_timesteps}"

    def get_config(self) -> Dict[str, Any]:
        return {
            "in_size": self.wk.in_size,
            "out_size": self.residual_proj.out_size,
            "n_heads": self.n_heads,
            "n_timesteps": self.n_timesteps,
            "dropout_prob": self.att_dropout.p,
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "MultiHeadSelfAttention":
        return cls(
            int(cfg["in_size"]),
            int(cfg["out_size"]),
            int(cfg["n_heads"]),
            int(cfg["n_timesteps"]),
            float(cfg.get("dropout_prob", 0.0)),
        )
