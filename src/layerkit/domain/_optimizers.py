"""
Domain-level optimizer contract.

An optimizer owns neither parameters nor gradients. It holds references to
the parameters of a module tree, addressed by the same dotted names
`Module.named_parameters()` yields, and keeps any per-parameter state
(velocity, moment estimates) under those names. Computing gradients is the
job of whoever fills `Parameter.grad` before `step()` runs.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, Tuple, runtime_checkable


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    Required members
    ----------------
    - `named_params`: ordered `(dotted_name, parameter)` pairs being updated.
    - `params`: the same parameters without names.
    - `state`: per-parameter buffers keyed by dotted name.
    - `step()`: apply one update.
    - `zero_grad()`: clear gradients of the managed parameters.
    """

    @property
    def named_params(self) -> Sequence[Tuple[str, Any]]:
        ...

    @property
    def params(self) -> Sequence[Any]:
        ...

    @property
    def state(self) -> Mapping[str, Mapping[str, Any]]:
        ...

    def step(self) -> None:
        """
        Apply one optimization step.

        Parameters without a gradient (`grad is None`) or frozen ones
        (`requires_grad is False`) are skipped, and their state is untouched.
        """
        ...

    def zero_grad(self) -> None:
        ...
