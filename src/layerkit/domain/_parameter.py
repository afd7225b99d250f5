"""
Trainable parameter interface definitions.

This module defines the domain-level interface for trainable parameters used
by optimizers and serializers. A parameter is a tensor tagged as trainable,
named, and owned by exactly one module.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IParameter(Protocol):
    """
    Domain-level interface for trainable parameters.

    Notes
    -----
    - `name` and `owner` are assigned when a module registers the parameter;
      before that both are None.
    - Optimizers rely on `requires_grad`, `grad`, and `zero_grad` to decide
      what to update.
    """

    @property
    def name(self) -> Optional[str]:
        """
        Return the name under which the owning module registered this
        parameter, or None if unregistered.
        """
        ...

    @property
    def owner(self) -> Optional[Any]:
        """
        Return the module that declared this parameter, or None if
        unregistered.
        """
        ...

    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether this parameter should be updated by optimizers.
        """
        ...

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None: ...

    @property
    def grad(self) -> Optional[ITensor]:
        """
        Return the gradient populated by an external backward pass, or None.
        """
        ...

    def zero_grad(self) -> None:
        """
        Clear the stored gradient.
        """
        ...
