"""
Constant and fan-in uniform initializers.

Provided initializers
---------------------
- ``zeros`` / ``ones``:
    Fill the tensor with a constant. Used for normalization offsets/scales.
- ``uniform_fan_in``:
    ``U(-k, k)`` with ``k = 1 / sqrt(fan_in)``. This is the default policy of
    `Linear` for both weight and bias; the bias passes the weight's fan-in
    explicitly so both share the same bound.
"""

import math
from typing import Optional

import numpy as np

from ._base import WeightInitializer, _rng
from ...tensor._tensor import Tensor
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


@WeightInitializer.register_initializer("zeros")
def zeros(tensor: Tensor, *, generator: Optional[np.random.Generator] = None) -> Tensor:
    """Fill `tensor` with zeros in place."""
    tensor.fill(0.0)
    return tensor


@WeightInitializer.register_initializer("ones")
def ones(tensor: Tensor, *, generator: Optional[np.random.Generator] = None) -> Tensor:
    """Fill `tensor` with ones in place."""
    tensor.fill(1.0)
    return tensor


@WeightInitializer.register_initializer("uniform_fan_in")
def uniform_fan_in(
    tensor: Tensor,
    *,
    generator: Optional[np.random.Generator] = None,
    fan_in: Optional[int] = None,
) -> Tensor:
    """
    Apply ``U(-1/sqrt(fan_in), 1/sqrt(fan_in))`` initialization.

    Parameters
    ----------
    tensor:
        The tensor to initialize in-place.
    generator:
        Random source; a fresh `default_rng()` if omitted.
    fan_in:
        Overrides the fan-in derived from the tensor shape (used for biases).

    Returns
    -------
    Tensor
        The initialized tensor (same object).
    """
    if fan_in is None:
        fan_in, _ = _calculate_fan_in_and_fan_out(tuple(tensor.shape))
    k = 1.0 / math.sqrt(float(max(1, int(fan_in))))

    w = _rng(generator).uniform(-k, k, size=tensor.shape)
    tensor.copy_from_numpy(w)
    return tensor
