"""
Concrete trainable parameter implementation.

This module defines `Parameter`, an infrastructure-level implementation of the
domain contract `IParameter`. A `Parameter` is a `Tensor` intended to be
optimized by training algorithms (e.g., SGD, Adam).

Design notes
------------
- `Parameter` subclasses `Tensor` to reuse storage and tensor operations.
- A parameter is owned by exactly one module. `Module.register_parameter`
  binds the owner and the name; a second binding to a different module is
  refused with `SharedOwnershipError`.
- The gradient buffer is populated by an external backward pass and read by
  optimizers. `requires_grad` freezes/unfreezes the parameter without
  changing module structure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

import numpy as np

from ..domain._errors import SharedOwnershipError
from ..domain._parameter import IParameter
from .tensor._tensor import Tensor

if TYPE_CHECKING:
    from ._module import Module


class Parameter(Tensor, IParameter):
    """
    Trainable tensor with an ownership tag.

    Parameters
    ----------
    shape : tuple[int, ...]
        Parameter shape. Storage is zero-initialized; layers fill it through a
        weight initializer.
    requires_grad : bool, optional
        Whether optimizers should update this parameter. Defaults to True.

    Notes
    -----
    - `name` and `owner` stay None until a module registers the parameter.
    - Operations on a parameter return plain `Tensor`s; only in-place updates
      (`-=`, `copy_from_numpy`) mutate the parameter itself.
    """

    def __init__(
        self,
        shape: Union[int, Sequence[int]],
        *,
        requires_grad: bool = True,
    ) -> None:
        super().__init__(shape, requires_grad=requires_grad)
        self._name: Optional[str] = None
        self._owner: Optional["Module"] = None

    @classmethod
    def from_numpy(cls, arr: Any, *, requires_grad: bool = True) -> "Parameter":
        """
        Create an unowned parameter holding a float32 copy of `arr`.
        """
        src = np.asarray(arr)
        p = cls(src.shape, requires_grad=requires_grad)
        p.copy_from_numpy(src)
        return p

    @property
    def name(self) -> Optional[str]:
        """
        Name under which the owning module registered this parameter.
        """
        return self._name

    @property
    def owner(self) -> Optional["Module"]:
        """
        Module that declared this parameter, or None if unregistered.
        """
        return self._owner

    def _bind(self, owner: "Module", name: str) -> None:
        """
        Attach this parameter to its owning module.

        Raises
        ------
        SharedOwnershipError
            If the parameter is already owned, by this module or another one.
        """
        if self._owner is not None:
            raise SharedOwnershipError(
                name,
                f"Parameter(shape={self.shape})",
                f"{type(self._owner).__name__}.{self._name}",
            )
        self._owner = owner
        self._name = name

    def set_grad(self, grad: Optional[Tensor]) -> None:
        """
        Overwrite the stored gradient (used by an external backward pass).
        """
        self.grad = grad

    def accumulate_grad(self, grad: Tensor) -> None:
        """
        Add an incoming gradient contribution to the stored gradient.

        Frozen parameters (`requires_grad=False`) ignore incoming gradients.
        """
        if not self.requires_grad:
            return
        if self._grad is None:
            self.grad = grad
        else:
            self.grad = self._grad + grad

    def __repr__(self) -> str:
        return (
            f"Parameter(name={self._name!r}, shape={self.shape}, "
            f"requires_grad={self.requires_grad})"
        )

    def __deepcopy__(self, memo: dict) -> "Parameter":
        # Owner links are rebuilt by the module being copied.
        p = Parameter(self.shape, requires_grad=self.requires_grad)
        p.copy_from_numpy(self._data)
        p._name = self._name
        memo[id(self)] = p
        owner = memo.get(id(self._owner)) if self._owner is not None else None
        p._owner = owner
        return p
