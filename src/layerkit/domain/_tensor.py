"""
Tensor interface definitions.

This module defines the domain-level interface for tensor-like objects using
structural typing. The interface captures the contract that layers and modules
need from the tensor capability: shape introspection, host interop, and the
forward-pass operations used by the built-in layers.

Notes
-----
- Gradient computation is not part of this contract. The `grad` slot exists so
  an external backward engine has a place to store results, and so optimizers
  can read them.
- Shape incompatibilities must surface as `ShapeMismatchError` so callers can
  tell them apart from other failures.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Union, runtime_checkable

Number = Union[int, float]


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` represents a multi-dimensional array participating in a
    forward computation. Structural typing lets any backend satisfy the same
    contract without inheriting from a framework class.
    """

    # ---------------------------------------------------------------------
    # Identity / storage
    # ---------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape.
        """
        ...

    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether an external backward pass should produce a gradient
        for this tensor.
        """
        ...

    @property
    def grad(self) -> Optional["ITensor"]:
        """
        Return the gradient stored on this tensor, or None.
        """
        ...

    def zero_grad(self) -> None:
        """
        Clear the stored gradient.
        """
        ...

    def to_numpy(self) -> Any:
        """
        Return the backing array (a NumPy ndarray in the bundled backend).
        """
        ...

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Copy array-like data into this tensor in place.

        Raises
        ------
        ShapeMismatchError
            If the array shape does not match this tensor's shape.
        """
        ...

    def numel(self) -> int:
        """
        Return the number of elements.
        """
        ...

    # ---------------------------------------------------------------------
    # Forward-pass operations
    # ---------------------------------------------------------------------
    def matmul(self, other: "ITensor") -> "ITensor":
        """
        Matrix product over the last two axes, broadcasting leading axes.

        Raises
        ------
        ShapeMismatchError
            If the contracted dimensions disagree.
        """
        ...

    def __matmul__(self, other: "ITensor") -> "ITensor": ...

    @property
    def T(self) -> "ITensor":
        """
        Transpose of the last two axes.
        """
        ...

    def __add__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __sub__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __mul__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __truediv__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __neg__(self) -> "ITensor": ...

    def maximum(self, other: Union["ITensor", Number]) -> "ITensor":
        """
        Elementwise maximum with a tensor or scalar.
        """
        ...

    def sum(self, axis: Optional[int] = None, keepdims: bool = False) -> "ITensor":
        ...

    def mean(self, axis: Optional[int] = None, keepdims: bool = False) -> "ITensor":
        ...

    def exp(self) -> "ITensor": ...

    def sqrt(self) -> "ITensor": ...

    def reshape(self, new_shape: tuple[int, ...]) -> "ITensor": ...
