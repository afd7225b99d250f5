"""
Module (layer) interface definitions.

This module defines the domain-level interface for neural network modules
using structural subtyping via `typing.Protocol`.

Any object that implements the required methods is considered a valid module,
independent of inheritance. `Module.register` uses this protocol as its
run-time capability check, so third-party components can be nested into a
module tree as long as they honor the contract.
"""

from __future__ import annotations

from typing import Any, Iterator, Protocol, runtime_checkable

from ._parameter import IParameter


@runtime_checkable
class IModule(Protocol):
    """
    Domain-level module (layer) interface.

    A module represents a composable unit of computation (a layer, an
    activation, or a container of other modules). This interface defines the
    minimal contract required to participate in forward execution, parameter
    collection, and mode propagation.

    Notes
    -----
    - `children` must yield `(name, component)` pairs in registration order.
    - `parameters` must be restartable: every call returns a fresh iterator
      over the same sequence for an unmodified tree.
    """

    def forward(self, x: Any) -> Any:
        """
        Execute the forward computation of the module.

        Parameters
        ----------
        x : ITensor
            Input tensor to the module.

        Returns
        -------
        ITensor
            Output tensor produced by the module.
        """
        ...

    def parameters(self) -> Iterator[IParameter]:
        """
        Return the trainable parameters of the module and its descendants.

        Returns
        -------
        Iterator[IParameter]
            Depth-first, registration-ordered iterator over parameters.
        """
        ...

    def children(self) -> Iterator[tuple[str, "IModule"]]:
        """
        Return the direct sub-components as `(name, component)` pairs.
        """
        ...

    def set_mode(self, training: bool) -> Any:
        """
        Set the training/evaluation mode on the module and all descendants.

        Parameters
        ----------
        training : bool
            True for training mode, False for evaluation mode.
        """
        ...
