"""
Weight initialization public API.

Importing this package registers every built-in initializer (constants,
fan-in uniform, Xavier, Kaiming) into the `WeightInitializer` registry via
import side effects.

Exports
-------
- WeightInitializer:
    The registry-backed dispatcher; concrete initializer functions are
    reached through registry names.
"""

from ._constants import *
from ._xavier import *
from ._kaiming import *
from ._base import WeightInitializer

__all__ = [
    WeightInitializer.__name__,
]
