"""
NumPy-backed tensor capability used by layerkit layers.
"""

from ._tensor import Tensor, as_tensor

__all__ = [Tensor.__name__, as_tensor.__name__]
