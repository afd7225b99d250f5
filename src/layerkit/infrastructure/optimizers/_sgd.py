"""
Stochastic gradient descent with optional momentum and L2 weight decay.

Velocity buffers are stored under the parameter's dotted name, so
``opt.state["l1.weight"]["velocity"]`` is the buffer for `model.l1.weight`.
"""

from __future__ import annotations

from ...domain._errors import InvalidArgumentError
from ..tensor._tensor import Tensor
from ._base import Optimizer, ParamSource


class SGD(Optimizer):
    """
    Stochastic gradient descent.

    Update rule
    -----------
    For each parameter ``p`` with gradient ``g``:

        g <- g + weight_decay * p           (if weight_decay > 0)
        v <- momentum * v + g               (if momentum > 0; v starts at g)
        p <- p - lr * v                     (p - lr * g without momentum)

    Parameters
    ----------
    params : Module or iterable
        A module, its `named_parameters()`, or bare parameters.
    lr : float, optional
        Learning rate. Must be positive. Defaults to 1e-3.
    momentum : float, optional
        Momentum factor in ``[0, 1)``. Defaults to 0.0.
    weight_decay : float, optional
        Classical L2 coefficient. Must be non-negative. Defaults to 0.0.

    Raises
    ------
    InvalidArgumentError
        If a hyperparameter is outside its valid range.
    """

    def __init__(
        self,
        params: ParamSource,
        *,
        lr: float = 1e-3,
        momentum: float = 0.0,
        weight_decay: float = 0.0,
    ) -> None:
        self.lr = float(lr)
        self.momentum = float(momentum)
        self.weight_decay = float(weight_decay)

        if self.lr <= 0.0:
            raise InvalidArgumentError("lr", self.lr, "must be > 0")
        if not 0.0 <= self.momentum < 1.0:
            raise InvalidArgumentError("momentum", self.momentum, "must be in [0, 1)")
        if self.weight_decay < 0.0:
            raise InvalidArgumentError("weight_decay", self.weight_decay, "must be >= 0")

        super().__init__(params)

    def step(self) -> None:
        for name, p, g in self._trainable():
            if self.weight_decay != 0.0:
                g = g + (self.weight_decay * p)

            if self.momentum != 0.0:
                st = self._state_for(name)
                velocity = st.get("velocity")
                if velocity is None:
                    velocity = st["velocity"] = Tensor.zeros(p.shape)
                    velocity.copy_from(g)
                else:
                    velocity.copy_from(self.momentum * velocity + g)
                g = velocity

            p -= self.lr * g

    def extra_repr(self) -> str:
        return f"lr={self.lr}, momentum={self.momentum}, weight_decay={self.weight_decay}"
