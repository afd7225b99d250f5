"""
layerkit: composable neural-network modules.

Networks are trees of `Module`s. Composites attach children explicitly with
`register(name, component)` and spell out their routing in `forward`; leaf
`Layer`s (`Linear`, `ReLU`, `Dropout`, ...) compute with `Tensor` operations.
`parameters()` flattens every trainable `Parameter` in a fixed depth-first
order for optimizers, and `set_mode` / `train` / `eval` propagate the
training/evaluation mode from the root down.

The library logs through the standard `logging` module under the
``layerkit`` logger and installs only a `NullHandler`.
"""

import logging

from .domain._errors import (
    CheckpointFormatError,
    CycleError,
    DuplicateNameError,
    InvalidArgumentError,
    LayerKitError,
    ModuleTypeError,
    OwnershipInvariantViolation,
    ShapeMismatchError,
    SharedOwnershipError,
)
from .domain._mode import Mode
from .domain._module import IModule
from .domain._optimizers import IOptimizer
from .domain._parameter import IParameter
from .domain._tensor import ITensor
from .infrastructure._activations import ReLU, Softmax
from .infrastructure._linear import Linear
from .infrastructure._module import Layer, Module
from .infrastructure._parameter import Parameter
from .infrastructure.layers import Dropout, Embedding, LayerNorm, PositionalEmbedding
from .infrastructure.models import (
    Block,
    FullyConnected,
    Model,
    MultiHeadSelfAttention,
    Sequential,
)
from .infrastructure.module import (
    load_json,
    module_from_config,
    module_to_config,
    register_module,
    save_json,
)
from .infrastructure.optimizers import SGD, Adam, Optimizer
from .infrastructure.tensor import Tensor, as_tensor
from .infrastructure.utils.weight_initializer import WeightInitializer

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # errors
    "LayerKitError",
    "DuplicateNameError",
    "CycleError",
    "SharedOwnershipError",
    "ModuleTypeError",
    "InvalidArgumentError",
    "ShapeMismatchError",
    "OwnershipInvariantViolation",
    "CheckpointFormatError",
    # contracts
    "IModule",
    "IParameter",
    "ITensor",
    "IOptimizer",
    "Mode",
    # core
    "Tensor",
    "as_tensor",
    "Parameter",
    "Module",
    "Layer",
    # layers
    "Linear",
    "ReLU",
    "Softmax",
    "Dropout",
    "LayerNorm",
    "Embedding",
    "PositionalEmbedding",
    # composites
    "Model",
    "Sequential",
    "FullyConnected",
    "MultiHeadSelfAttention",
    "Block",
    # serialization
    "register_module",
    "module_to_config",
    "module_from_config",
    "save_json",
    "load_json",
    # training
    "Optimizer",
    "SGD",
    "Adam",
    "WeightInitializer",
]
