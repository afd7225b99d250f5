"""
Adam optimizer implementation.

The optimizer updates `Parameter` instances in place using their stored
gradients and keeps per-parameter first and second moment estimates.

Design notes
------------
- Parameters with `grad is None` or `requires_grad is False` are skipped and
  their state is left untouched.
- Optimizer math is expressed with `Tensor` operations.
- State is created lazily on a parameter's first update and keyed by the
  parameter's dotted name (`opt.state["l1.weight"]`).
"""

from __future__ import annotations

from typing import Tuple

from ...domain._errors import InvalidArgumentError
from ..tensor._tensor import Tensor
from ._base import Optimizer, ParamSource


class Adam(Optimizer):
    """
    Adam optimizer.

    Update rule
    -----------
    Let ``g_t`` be the gradient at step ``t``:

        m_t = beta1 * m_{t-1} + (1 - beta1) * g_t
        v_t = beta2 * v_{t-1} + (1 - beta2) * (g_t ** 2)
        m_hat = m_t / (1 - beta1^t)
        v_hat = v_t / (1 - beta2^t)
        p <- p - lr * m_hat / (sqrt(v_hat) + eps)

    If ``weight_decay > 0`` (classical L2 regularization, not AdamW):

        g_t <- g_t + weight_decay * p

    Parameters
    ----------
    params : Module or iterable
        A module, its `named_parameters()`, or bare parameters.
    lr : float, optional
        Learning rate. Must be positive. Defaults to 1e-3.
    betas : tuple[float, float], optional
        Decay rates for the moment estimates, each in [0, 1).
        Defaults to (0.9, 0.999).
    eps : float, optional
        Denominator stabilizer. Must be positive. Defaults to 1e-8.
    weight_decay : float, optional
        Classical L2 coefficient. Must be non-negative. Defaults to 0.0.
    """

    def __init__(
        self,
        params: ParamSource,
        *,
        lr: float = 1e-3,
        betas: Tuple[float, float] = (0.9, 0.999),
        eps: float = 1e-8,
        weight_decay: float = 0.0,
    ) -> None:
        """
        Construct an Adam optimizer.

        Raises
        ------
        InvalidArgumentError
            If any hyperparameter is outside its valid range.
        """
        self.lr = float(lr)
        self.betas = (float(betas[0]), float(betas[1]))
        self.eps = float(eps)
        self.weight_decay = float(weight_decay)

        b1, b2 = self.betas
        if self.lr <= 0.0:
            raise InvalidArgumentError("lr", self.lr, "must be > 0")
        if not (0.0 <= b1 < 1.0) or not (0.0 <= b2 < 1.0):
            raise InvalidArgumentError("betas", self.betas, "must each be in [0, 1)")
        if self.eps <= 0.0:
            raise InvalidArgumentError("eps", self.eps, "must be > 0")
        if self.weight_decay < 0.0:
            raise InvalidArgumentError("weight_decay", self.weight_decay, "must be >= 0")

        super().__init__(params)

    def step(self) -> None:
        """
        Apply one Adam update step to all managed parameters.
        """
        b1, b2 = self.betas

        for name, p, g in self._trainable():
            st = self._state_for(name)
            if not st:
                st.update(t=0, m=Tensor.zeros(p.shape), v=Tensor.zeros(p.shape))

            st["t"] = int(st["t"]) + 1
            t = int(st["t"])
            m: Tensor = st["m"]  # type: ignore[assignment]
            v: Tensor = st["v"]  # type: ignore[assignment]

            g_eff = g + (self.weight_decay * p) if self.weight_decay != 0.0 else g

            m.copy_from((b1 * m) + ((1.0 - b1) * g_eff))
            v.copy_from((b2 * v) + ((1.0 - b2) * (g_eff * g_eff)))

            m_hat = m / (1.0 - (b1**t))
            v_hat = v / (1.0 - (b2**t))
            p.copy_from(p - self.lr * (m_hat / (v_hat.sqrt() + self.eps)))

    def extra_repr(self) -> str:
        return (
            f"lr={self.lr}, betas={self.betas}, eps={self.eps}, "
            f"weight_decay={self.weight_decay}"
        )
