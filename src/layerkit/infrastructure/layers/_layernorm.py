"""
Layer normalization over the last dimension.

For an input of shape (..., normalized_size):

    y = gamma * (x - mean) / sqrt(var + eps) + beta

with the mean and (biased) variance taken over the last dimension.
`gamma` starts at ones and `beta` at zeros.
"""

from __future__ import annotations

from typing import Any, Dict

from ...domain._errors import InvalidArgumentError, ShapeMismatchError
from .._module import Layer
from .._parameter import Parameter
from ..module._serialization_core import register_module
from ..tensor._tensor import Tensor, as_tensor
from ..utils.weight_initializer import WeightInitializer


@register_module()
class LayerNorm(Layer):
    """
    Layer normalization with a learnable scale (`gamma`) and shift (`beta`).

    Parameters
    ----------
    normalized_size : int
        Size of the last input dimension.
    eps : float, optional
        Added to the variance for numerical stability. Defaults to 1e-5.
    """

    def __init__(self, normalized_size: int, eps: float = 1e-5) -> None:
        super().__init__()
        if (
            isinstance(normalized_size, bool)
            or not isinstance(normalized_size, int)
            or normalized_size <= 0
        ):
            raise InvalidArgumentError(
                "normalized_size", normalized_size, "must be a positive integer"
            )
        if not eps > 0:
            raise InvalidArgumentError("eps", eps, "must be > 0")

        self.normalized_size = normalized_size
        self.eps = float(eps)

        self.register_parameter("gamma", Parameter((normalized_size,)))
        self.register_parameter("beta", Parameter((normalized_size,)))
        WeightInitializer("ones")(self.gamma)
        WeightInitializer("zeros")(self.beta)

    def forward(self, x: Tensor) -> Tensor:
        x = as_tensor(x)
        if x.ndim == 0 or x.shape[-1] != self.normalized_size:
            raise ShapeMismatchError(
                f"LayerNorm expected last dimension {self.normalized_size}, "
                f"got shape {x.shape}",
                expected=(self.normalized_size,),
                actual=x.shape,
            )

        mean = x.mean(axis=-1, keepdims=True)
        centered = x - mean
        var = (centered * centered).mean(axis=-1, keepdims=True)
        x_hat = centered / (var + self.eps).sqrt()
        return x_hat * self.gamma + self.beta

    def extra_repr(self) -> str:
        return f"normalized_size={self.normalized_size}, eps={self.eps}"

    def get_config(self) -> Dict[str, Any]:
        return {"normalized_size": self.normalized_size, "eps": self.eps}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "LayerNorm":
        return cls(int(cfg["normalized_size"]), eps=float(cfg.get("eps", 1e-5)))
