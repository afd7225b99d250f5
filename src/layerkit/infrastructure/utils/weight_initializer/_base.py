"""
Weight initializer registry and dispatch utilities.

This module defines the concrete `WeightInitializer` used by layers to apply
registered initialization policies (uniform fan-in, Xavier, Kaiming,
constants) to parameter tensors.

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each initializer mutates a tensor *in place* and returns it.
- Every initializer accepts a keyword-only `generator`
  (`numpy.random.Generator`). Passing a seeded generator makes layer
  construction reproducible; omitting it draws from a fresh `default_rng()`.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("my_init")
    def my_init(tensor: Tensor, *, generator=None) -> Tensor:
        ...

Applying an initializer:

    init = WeightInitializer("xavier_uniform")
    init(weight, generator=np.random.default_rng(0))
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Optional, TypeVar

import numpy as np

from ....domain._errors import InvalidArgumentError
from ....domain.utils._weight_initialization import _WeightInitializer
from ...tensor._tensor import Tensor

T = TypeVar("T", bound=Callable[..., Tensor])


def _rng(generator: Optional[np.random.Generator]) -> np.random.Generator:
    return generator if generator is not None else np.random.default_rng()


class WeightInitializer(_WeightInitializer):
    """
    Registry-backed weight initializer dispatcher.

    Parameters
    ----------
    initializer_name : str
        Registry key of the initializer to dispatch to.

    Raises
    ------
    InvalidArgumentError
        If no initializer is registered under `initializer_name`.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., Tensor]]] = {}

    def __init__(self, initializer_name: str) -> None:
        try:
            self._initializer: Callable[..., Tensor] = self.INITIALIZERS[
                initializer_name
            ]
        except KeyError:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise InvalidArgumentError(
                "initializer", initializer_name, f"is not registered (available: {available})"
            ) from None
        self.name = initializer_name

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register a weight initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ValueError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    def __call__(
        self,
        tensor: Tensor,
        *,
        generator: Optional[np.random.Generator] = None,
        **kwargs: Any,
    ) -> Tensor:
        return self._initializer(tensor, generator=generator, **kwargs)

    def __repr__(self) -> str:
        return f"WeightInitializer({self.name!r})"
