from ._models import Model
from ._sequential import Sequential
from ._fully_connected import FullyConnected
from ._attention import MultiHeadSelfAttention
from ._block import Block

__all__ = [
    Model.__name__,
    Sequential.__name__,
    FullyConnected.__name__,
    MultiHeadSelfAttention.__name__,
    Block.__name__,
]
