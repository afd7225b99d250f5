from ._dropout import Dropout
from ._embedding import Embedding, PositionalEmbedding
from ._layernorm import LayerNorm

__all__ = [
    Dropout.__name__,
    Embedding.__name__,
    PositionalEmbedding.__name__,
    LayerNorm.__name__,
]
