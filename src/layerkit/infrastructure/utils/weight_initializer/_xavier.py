"""
Xavier/Glorot weight initializers.

Implemented variants
--------------------
- ``xavier``:
    Normal with ``std = sqrt(2 / (fan_in + fan_out))``.
- ``xavier_uniform``:
    ``U(-b, b)`` with ``b = sqrt(6 / (fan_in + fan_out))``.

Fan-in and fan-out come from the weight shape via
``_calculate_fan_in_and_fan_out``.
"""

import math
from typing import Optional

import numpy as np

from ._base import WeightInitializer, _rng
from ...tensor._tensor import Tensor
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


@WeightInitializer.register_initializer("xavier")
def xavier(tensor: Tensor, *, generator: Optional[np.random.Generator] = None) -> Tensor:
    """
    Apply Xavier (Glorot) normal initialization in place.
    """
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tuple(tensor.shape))
    std = math.sqrt(2.0 / float(fan_in + fan_out))

    w = _rng(generator).standard_normal(tensor.shape) * std
    tensor.copy_from_numpy(w)
    return tensor


@WeightInitializer.register_initializer("xavier_uniform")
def xavier_uniform(
    tensor: Tensor, *, generator: Optional[np.random.Generator] = None
) -> Tensor:
    """
    Apply Xavier (Glorot) uniform initialization in place.
    """
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tuple(tensor.shape))
    bound = math.sqrt(6.0 / float(fan_in + fan_out))

    w = _rng(generator).uniform(-bound, bound, size=tensor.shape)
    tensor.copy_from_numpy(w)
    return tensor
