"""
Concrete Tensor implementation (NumPy backend).

This module provides the `Tensor` used by layerkit layers. It satisfies the
domain-level `ITensor` protocol and stores data in a NumPy ndarray.

Design notes
------------
- This file sits in the infrastructure layer; it is the only place (along with
  initializers and checkpoint payloads) that touches NumPy directly. Layers
  express their math in terms of `Tensor` operations.
- Binary elementwise operations follow NumPy broadcasting rules. Incompatible
  shapes raise `ShapeMismatchError` rather than NumPy's bare `ValueError`, so
  callers can distinguish shape problems from other failures.
- Automatic differentiation is not implemented here. Each tensor carries a
  `grad` slot and a `requires_grad` flag for an external backward engine and
  for optimizers.
- Random factories take an explicit `numpy.random.Generator`; when none is
  given a fresh `default_rng()` is used, never the legacy global state.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain._tensor import ITensor

Number = Union[int, float]

DEFAULT_DTYPE = np.float32


def _as_shape(shape: Union[int, Sequence[int]]) -> tuple[int, ...]:
    if isinstance(shape, (int, np.integer)):
        return (int(shape),)
    return tuple(int(d) for d in shape)


class Tensor(ITensor):
    """
    Concrete tensor implementation (NumPy CPU backend).

    Parameters
    ----------
    shape : tuple[int, ...]
        Tensor shape. Storage is zero-initialized.
    requires_grad : bool, optional
        Whether an external backward pass should produce a gradient for this
        tensor. Defaults to False.
    dtype : optional
        NumPy dtype of the storage. Defaults to float32.

    Notes
    -----
    - Use `Tensor.from_numpy` to wrap existing data.
    - Gradients (if any) are stored as another `Tensor` in `grad`.
    """

    def __init__(
        self,
        shape: Union[int, Sequence[int]],
        *,
        requires_grad: bool = False,
        dtype: Any = DEFAULT_DTYPE,
    ) -> None:
        self._data: np.ndarray = np.zeros(_as_shape(shape), dtype=dtype)
        self._requires_grad: bool = bool(requires_grad)
        self._grad: Optional["Tensor"] = None

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "Tensor":
        """
        Wrap an ndarray produced by an operation without copying it.

        Results of operations are always plain `Tensor`s, even when the
        operands are subclasses such as `Parameter`.
        """
        t = Tensor.__new__(Tensor)
        t._data = arr
        t._requires_grad = False
        t._grad = None
        return t

    # ----------------------------
    # Factories
    # ----------------------------
    @staticmethod
    def from_numpy(arr: Any, *, requires_grad: bool = False) -> "Tensor":
        """
        Create a tensor holding a float32 copy of array-like `arr`.

        Parameters
        ----------
        arr : array-like
            Source data.
        requires_grad : bool, optional
            Gradient flag for the new tensor.

        Returns
        -------
        Tensor
            A new tensor that does not alias `arr`.
        """
        data = np.array(arr, dtype=DEFAULT_DTYPE, copy=True)
        t = Tensor._wrap(data)
        t._requires_grad = bool(requires_grad)
        return t

    @staticmethod
    def full(
        shape: Union[int, Sequence[int]],
        fill_value: float,
        *,
        requires_grad: bool = False,
    ) -> "Tensor":
        """
        Create a tensor filled with a constant value.
        """
        t = Tensor(shape, requires_grad=requires_grad)
        t.fill(fill_value)
        return t

    @staticmethod
    def zeros(
        shape: Union[int, Sequence[int]], *, requires_grad: bool = False
    ) -> "Tensor":
        return Tensor(shape, requires_grad=requires_grad)

    @staticmethod
    def ones(
        shape: Union[int, Sequence[int]], *, requires_grad: bool = False
    ) -> "Tensor":
        return Tensor.full(shape, 1.0, requires_grad=requires_grad)

    @staticmethod
    def tril(n: int, *, requires_grad: bool = False) -> "Tensor":
        """
        Create an `(n, n)` tensor with ones on and below the diagonal.
        """
        t = Tensor._wrap(np.tril(np.ones((int(n), int(n)), dtype=DEFAULT_DTYPE)))
        t._requires_grad = bool(requires_grad)
        return t

    @staticmethod
    def rand(
        shape: Union[int, Sequence[int]],
        *,
        generator: Optional[np.random.Generator] = None,
        requires_grad: bool = False,
    ) -> "Tensor":
        """
        Create a tensor of uniform random values in [0, 1).

        Parameters
        ----------
        shape : tuple[int, ...]
            Desired shape.
        generator : Optional[numpy.random.Generator]
            Random source. A fresh `default_rng()` is used if omitted.
        requires_grad : bool, optional
            Gradient flag for the new tensor.
        """
        rng = generator if generator is not None else np.random.default_rng()
        arr = rng.random(_as_shape(shape), dtype=np.float64).astype(
            DEFAULT_DTYPE, copy=False
        )
        t = Tensor._wrap(arr)
        t._requires_grad = bool(requires_grad)
        return t

    @staticmethod
    def randn(
        shape: Union[int, Sequence[int]],
        *,
        generator: Optional[np.random.Generator] = None,
        requires_grad: bool = False,
    ) -> "Tensor":
        """
        Create a tensor of standard-normal random values.
        """
        rng = generator if generator is not None else np.random.default_rng()
        arr = rng.standard_normal(_as_shape(shape)).astype(DEFAULT_DTYPE, copy=False)
        t = Tensor._wrap(arr)
        t._requires_grad = bool(requires_grad)
        return t

    # ----------------------------
    # Properties
    # ----------------------------
    @property
    def data(self) -> np.ndarray:
        """
        Return the underlying NumPy storage (no copy).
        """
        return self._data

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self._data.shape)

    @property
    def ndim(self) -> int:
        return int(self._data.ndim)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def requires_grad(self) -> bool:
        return self._requires_grad

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None:
        self._requires_grad = bool(value)

    @property
    def grad(self) -> Optional["Tensor"]:
        """
        Return the gradient tensor associated with this tensor (if any).
        """
        return self._grad

    @grad.setter
    def grad(self, value: Optional["Tensor"]) -> None:
        if value is not None and tuple(value.shape) != self.shape:
            raise ShapeMismatchError(
                f"Gradient shape {tuple(value.shape)} does not match tensor shape {self.shape}",
                expected=self.shape,
                actual=tuple(value.shape),
            )
        self._grad = value

    def zero_grad(self) -> None:
        self._grad = None

    # ----------------------------
    # Host interop
    # ----------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Return the underlying ndarray (a view, not a copy).
        """
        return self._data

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Copy array-like data into this tensor in place.

        Raises
        ------
        ShapeMismatchError
            If the array shape does not match this tensor's shape.
        """
        src = np.asarray(arr, dtype=self._data.dtype)
        if src.shape != self._data.shape:
            raise ShapeMismatchError(
                f"Shape mismatch: tensor {self.shape} vs array {src.shape}",
                expected=self.shape,
                actual=tuple(src.shape),
            )
        self._data[...] = src

    def copy_from(self, other: "Tensor") -> None:
        """
        Copy data from another tensor into this tensor (in place).
        """
        self.copy_from_numpy(other.to_numpy())

    def fill(self, value: float) -> None:
        self._data.fill(value)

    def numel(self) -> int:
        return int(self._data.size)

    def item(self) -> float:
        """
        Return the single element of a one-element tensor as a Python float.
        """
        if self._data.size != 1:
            raise ShapeMismatchError(
                f"item() requires a one-element tensor, got shape {self.shape}",
                actual=self.shape,
            )
        return float(self._data.reshape(-1)[0])

    def clone(self) -> "Tensor":
        t = Tensor._wrap(self._data.copy())
        t._requires_grad = self._requires_grad
        return t

    def __repr__(self) -> str:
        return f"Tensor(shape={self.shape}, dtype={self._data.dtype})"

    def __len__(self) -> int:
        return len(self._data)

    # ----------------------------
    # Internal helpers
    # ----------------------------
    @staticmethod
    def _unwrap(x: Union["Tensor", Number]) -> Union[np.ndarray, float]:
        if isinstance(x, Tensor):
            return x._data
        if isinstance(x, (int, float, np.integer, np.floating)):
            return float(x)
        raise TypeError(f"Unsupported operand type: {type(x)!r}")

    def _binary(self, other: Union["Tensor", Number], op, name: str) -> "Tensor":
        b = self._unwrap(other)
        try:
            out = op(self._data, b)
        except ValueError as e:
            other_shape = tuple(np.shape(b))
            raise ShapeMismatchError(
                f"{name}: shapes {self.shape} and {other_shape} are not broadcastable",
                expected=self.shape,
                actual=other_shape,
            ) from e
        return Tensor._wrap(np.asarray(out, dtype=self._data.dtype))

    # ----------------------------
    # Elementwise ops
    # ----------------------------
    def __neg__(self) -> "Tensor":
        return Tensor._wrap(-self._data)

    def __add__(self, other: Union["Tensor", Number]) -> "Tensor":
        return self._binary(other, np.add, "add")

    def __radd__(self, other: Number) -> "Tensor":
        return self._binary(other, np.add, "add")

    def __sub__(self, other: Union["Tensor", Number]) -> "Tensor":
        return self._binary(other, np.subtract, "sub")

    def __rsub__(self, other: Number) -> "Tensor":
        return Tensor._wrap(self._unwrap(other) - self._data)

    def __mul__(self, other: Union["Tensor", Number]) -> "Tensor":
        return self._binary(other, np.multiply, "mul")

    def __rmul__(self, other: Number) -> "Tensor":
        return self._binary(other, np.multiply, "mul")

    def __truediv__(self, other: Union["Tensor", Number]) -> "Tensor":
        return self._binary(other, np.divide, "div")

    def __rtruediv__(self, other: Number) -> "Tensor":
        return Tensor._wrap(
            np.asarray(self._unwrap(other) / self._data, dtype=self._data.dtype)
        )

    def __pow__(self, exponent: Number) -> "Tensor":
        return Tensor._wrap(np.power(self._data, float(exponent)).astype(self._data.dtype))

    def __gt__(self, other: Union["Tensor", Number]) -> "Tensor":
        """
        Elementwise `>` returning a float mask (1.0 where true, 0.0 elsewhere).
        """
        return self._binary(other, lambda a, b: (a > b), "gt")

    def __lt__(self, other: Union["Tensor", Number]) -> "Tensor":
        """
        Elementwise `<` returning a float mask (1.0 where true, 0.0 elsewhere).
        """
        return self._binary(other, lambda a, b: (a < b), "lt")

    def maximum(self, other: Union["Tensor", Number]) -> "Tensor":
        return self._binary(other, np.maximum, "maximum")

    def exp(self) -> "Tensor":
        return Tensor._wrap(np.exp(self._data))

    def sqrt(self) -> "Tensor":
        return Tensor._wrap(np.sqrt(self._data))

    def abs(self) -> "Tensor":
        return Tensor._wrap(np.abs(self._data))

    # ----------------------------
    # In-place ops (used by optimizers)
    # ----------------------------
    def __iadd__(self, other: Union["Tensor", Number]) -> "Tensor":
        self.copy_from_numpy(self._data + self._unwrap(other))
        return self

    def __isub__(self, other: Union["Tensor", Number]) -> "Tensor":
        self.copy_from_numpy(self._data - self._unwrap(other))
        return self

    def __imul__(self, other: Union["Tensor", Number]) -> "Tensor":
        self.copy_from_numpy(self._data * self._unwrap(other))
        return self

    # ----------------------------
    # Reductions
    # ----------------------------
    def sum(self, axis: Optional[int] = None, keepdims: bool = False) -> "Tensor":
        return Tensor._wrap(
            np.asarray(self._data.sum(axis=axis, keepdims=keepdims), dtype=self._data.dtype)
        )

    def mean(self, axis: Optional[int] = None, keepdims: bool = False) -> "Tensor":
        return Tensor._wrap(
            np.asarray(self._data.mean(axis=axis, keepdims=keepdims), dtype=self._data.dtype)
        )

    def max(self, axis: Optional[int] = None, keepdims: bool = False) -> "Tensor":
        return Tensor._wrap(
            np.asarray(self._data.max(axis=axis, keepdims=keepdims), dtype=self._data.dtype)
        )

    # ----------------------------
    # Linear algebra / shape
    # ----------------------------
    def matmul(self, other: "Tensor") -> "Tensor":
        """
        Matrix product over the last two axes, broadcasting leading axes.

        Raises
        ------
        ShapeMismatchError
            If the contracted dimensions disagree or the leading axes are not
            broadcastable.
        """
        if not isinstance(other, Tensor):
            raise TypeError(f"matmul expects a Tensor, got {type(other)!r}")
        try:
            out = np.matmul(self._data, other._data)
        except ValueError as e:
            raise ShapeMismatchError(
                f"matmul: incompatible shapes {self.shape} @ {other.shape}",
                expected=self.shape,
                actual=other.shape,
            ) from e
        return Tensor._wrap(np.asarray(out, dtype=self._data.dtype))

    def __matmul__(self, other: "Tensor") -> "Tensor":
        return self.matmul(other)

    def transpose(self, axis0: int = -2, axis1: int = -1) -> "Tensor":
        """
        Swap two axes (the last two by default).

        Tensors with fewer than two axes are returned as is.
        """
        if self._data.ndim < 2:
            return Tensor._wrap(self._data)
        return Tensor._wrap(np.swapaxes(self._data, axis0, axis1))

    @property
    def T(self) -> "Tensor":
        return self.transpose()

    def reshape(self, new_shape: Union[int, Sequence[int]]) -> "Tensor":
        try:
            out = self._data.reshape(_as_shape(new_shape))
        except ValueError as e:
            raise ShapeMismatchError(
                f"Cannot reshape tensor of shape {self.shape} into {new_shape}",
                expected=self.shape,
                actual=_as_shape(new_shape),
            ) from e
        return Tensor._wrap(out)

    def broadcast_to(self, shape: Sequence[int]) -> "Tensor":
        try:
            out = np.broadcast_to(self._data, _as_shape(shape))
        except ValueError as e:
            raise ShapeMismatchError(
                f"Cannot broadcast tensor of shape {self.shape} to {tuple(shape)}",
                expected=_as_shape(shape),
                actual=self.shape,
            ) from e
        return Tensor._wrap(np.array(out, copy=True))

    def masked_fill(self, mask: "Tensor", value: float) -> "Tensor":
        """
        Return a copy with `value` written wherever `mask` is non-zero.

        Raises
        ------
        ShapeMismatchError
            If `mask` does not have this tensor's shape.
        """
        if tuple(mask.shape) != self.shape:
            raise ShapeMismatchError(
                f"masked_fill: mask shape {tuple(mask.shape)} does not match {self.shape}",
                expected=self.shape,
                actual=tuple(mask.shape),
            )
        out = np.where(mask.to_numpy() != 0, float(value), self._data)
        return Tensor._wrap(np.asarray(out, dtype=self._data.dtype))

    def take(self, indices: Any, axis: int = 0) -> "Tensor":
        """
        Gather slices along `axis` at integer positions.

        `indices` may be a `Tensor` (its float values must be whole numbers)
        or any integer array-like. The result has shape
        ``shape[:axis] + indices.shape + shape[axis + 1:]``.

        Raises
        ------
        IndexError
            If an index is not a whole number or falls outside
            ``[0, shape[axis])``.
        """
        raw = np.asarray(indices.to_numpy() if isinstance(indices, Tensor) else indices)
        idx = raw.astype(np.int64)
        if raw.size and (np.any(idx != raw) or idx.min() < 0 or idx.max() >= self.shape[axis]):
            raise IndexError(
                f"take: indices must be whole numbers in [0, {self.shape[axis]}) "
                f"along axis {axis}"
            )
        return Tensor._wrap(np.take(self._data, idx, axis=axis))


def as_tensor(x: Any) -> Tensor:
    """
    Return `x` unchanged if it is a `Tensor`, else wrap it with `from_numpy`.
    """
    if isinstance(x, Tensor):
        return x
    return Tensor.from_numpy(x)
