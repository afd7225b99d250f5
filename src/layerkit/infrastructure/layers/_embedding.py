"""
Lookup-table embedding layers.

- `Embedding` maps integer token ids to learned vectors.
- `PositionalEmbedding` returns one learned vector per timestep position,
  to be added to token embeddings by broadcasting over the batch.

Both tables are drawn from a standard normal distribution using the injected
`numpy.random.Generator`.

Shape conventions
-----------------
- Embedding:            ids (...,)    -> (..., embed_size)
- PositionalEmbedding:  ids (..., T)  -> (T, embed_size)
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from ...domain._errors import InvalidArgumentError, ShapeMismatchError
from .._module import Layer
from .._parameter import Parameter
from ..module._serialization_core import register_module
from ..tensor._tensor import Tensor, as_tensor


def _check_size(argument: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise InvalidArgumentError(argument, value, "must be a positive integer")
    return int(value)


@register_module()
class Embedding(Layer):
    """
    Token embedding table.

    Parameters
    ----------
    num_embeddings : int
        Vocabulary size (number of distinct ids).
    embed_size : int
        Length of each embedding vector.
    generator : Optional[numpy.random.Generator]
        Random source for the initial table.

    Raises
    ------
    InvalidArgumentError
        If either size is not a positive integer.
    """

    def __init__(
        self,
        num_embeddings: int,
        embed_size: int,
        *,
        generator: Optional[np.random.Generator] = None,
    ) -> None:
        super().__init__()
        self.num_embeddings = _check_size("num_embeddings", num_embeddings)
        self.embed_size = _check_size("embed_size", embed_size)

        self.register_parameter(
            "weight", Parameter((self.num_embeddings, self.embed_size))
        )
        self.weight.copy_from(Tensor.randn(self.weight.shape, generator=generator))

    def forward(self, ids: Tensor) -> Tensor:
        """
        Look up the rows of the table selected by `ids`.

        Raises
        ------
        IndexError
            If an id is not a whole number in ``[0, num_embeddings)``.
        """
        return self.weight.take(as_tensor(ids), axis=0)

    def extra_repr(self) -> str:
        return f"num_embeddings={self.num_embeddings}, embed_size={self.embed_size}"

    def get_config(self) -> Dict[str, Any]:
        return {"num_embeddings": self.num_embeddings, "embed_size": self.embed_size}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Embedding":
        return cls(int(cfg["num_embeddings"]), int(cfg["embed_size"]))


@register_module()
class PositionalEmbedding(Layer):
    """
    Learned absolute position embeddings.

    Only the length of the last input dimension is read; the id values
    themselves are ignored.

    Parameters
    ----------
    n_timesteps : int
        Longest sequence the table covers.
    embed_size : int
        Length of each embedding vector.
    generator : Optional[numpy.random.Generator]
        Random source for the initial table.
    """

    def __init__(
        self,
        n_timesteps: int,
        embed_size: int,
        *,
        generator: Optional[np.random.Generator] = None,
    ) -> None:
        super().__init__()
        self.n_timesteps = _check_size("n_timesteps", n_timesteps)
        self.embed_size = _check_size("embed_size", embed_size)

        self.register_parameter("weight", Parameter((self.n_timesteps, self.embed_size)))
        self.weight.copy_from(Tensor.randn(self.weight.shape, generator=generator))

    def forward(self, ids: Tensor) -> Tensor:
        """
        Return the embeddings of positions ``0 .. T-1``, shape `(T, embed_size)`.

        Raises
        ------
        ShapeMismatchError
            If the sequence is longer than `n_timesteps`.
        """
        ids = as_tensor(ids)
        steps = ids.shape[-1] if ids.ndim else 1
        if steps > self.n_timesteps:
            raise ShapeMismatchError(
                f"PositionalEmbedding covers {self.n_timesteps} timesteps, got {steps}",
                expected=(self.n_timesteps,),
                actual=ids.shape,
            )
        return self.weight.take(range(steps), axis=0)

    def extra_repr(self) -> str:
        return f"n_timesteps={self.n_timesteps}, embed_size={self.embed_size}"

    def get_config(self) -> Dict[str, Any]:
        return {"n_timesteps": self.n_timesteps, "embed_size": self.embed_size}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "PositionalEmbedding":
        return cls(int(cfg["n_timesteps"]), int(cfg["embed_size"]))
