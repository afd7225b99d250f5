"""
Structural and runtime exceptions for layerkit.

This module defines the error taxonomy used by module composition, layer
construction, forward execution, parameter traversal, and checkpoint loading.

All errors derive from `LayerKitError` so callers can catch every framework
failure at once, and each one also derives from the closest built-in exception
(`ValueError`, `TypeError`, `RuntimeError`) so generic handlers keep working.

Error families
--------------
- Registration-time: `DuplicateNameError`, `CycleError`,
  `SharedOwnershipError`, `ModuleTypeError`
- Construction-time: `InvalidArgumentError`
- Forward-time: `ShapeMismatchError`
- Traversal-time: `OwnershipInvariantViolation`
- Persistence: `CheckpointFormatError`

None of these errors are retried or recovered inside the framework.
"""

from __future__ import annotations

from typing import Optional


class LayerKitError(Exception):
    """
    Base class for every error raised by layerkit.
    """


class DuplicateNameError(LayerKitError, ValueError):
    """
    Raised when a name is registered twice within the same module.

    Re-registration is refused so that traversal order stays stable and a
    previously owned component is never silently orphaned.

    Attributes
    ----------
    name : str
        The conflicting name.
    owner : str
        Class name of the module in which the conflict occurred.
    """

    def __init__(self, name: str, owner: str) -> None:
        """
        Initialize the DuplicateNameError.

        Parameters
        ----------
        name : str
            The name that is already taken.
        owner : str
            Class name of the registering module.
        """
        super().__init__(f"Name {name!r} is already registered in {owner}.")
        self.name = name
        self.owner = owner


class CycleError(LayerKitError, ValueError):
    """
    Raised when registering a module would create an ownership cycle.

    This happens when a module is registered into itself or into one of its
    own descendants.
    """

    def __init__(self, name: str, component: str) -> None:
        super().__init__(
            f"Cannot register {component} as {name!r}: "
            "it is the registering module or one of its ancestors."
        )
        self.name = name
        self.component = component


class SharedOwnershipError(LayerKitError, ValueError):
    """
    Raised when a module or parameter already owned elsewhere is registered.

    Ownership in a module tree is exclusive: a component has exactly one
    owning module.
    """

    def __init__(self, name: str, component: str, current_owner: str) -> None:
        super().__init__(
            f"Cannot register {component} as {name!r}: "
            f"it is already owned by {current_owner}."
        )
        self.name = name
        self.component = component
        self.current_owner = current_owner


class ModuleTypeError(LayerKitError, TypeError):
    """
    Raised when an object does not satisfy the module capability, or when a
    module/parameter is attached without explicit registration.
    """


class InvalidArgumentError(LayerKitError, ValueError):
    """
    Raised at construction time when a hyperparameter is out of range.

    Attributes
    ----------
    argument : str
        Name of the offending argument.
    value : object
        The rejected value.
    """

    def __init__(self, argument: str, value: object, requirement: str) -> None:
        """
        Initialize the InvalidArgumentError.

        Parameters
        ----------
        argument : str
            Name of the offending argument (e.g., "p").
        value : object
            The value that was rejected.
        requirement : str
            Human-readable constraint (e.g., "must be in [0, 1)").
        """
        super().__init__(f"{argument}={value!r} {requirement}.")
        self.argument = argument
        self.value = value


class ShapeMismatchError(LayerKitError, ValueError):
    """
    Raised when tensor shapes violate an operation's or a layer's contract.

    Attributes
    ----------
    expected : Optional[tuple]
        Expected shape (or partial shape), if known.
    actual : Optional[tuple]
        Offending shape, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        expected: Optional[tuple] = None,
        actual: Optional[tuple] = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class OwnershipInvariantViolation(LayerKitError, RuntimeError):
    """
    Raised when parameter traversal discovers a broken ownership tree.

    This indicates a bug in registration logic (a parameter reachable twice,
    or listed by a module that does not own it) and is not recoverable.
    """


class CheckpointFormatError(LayerKitError, ValueError):
    """
    Raised when a checkpoint payload has an unsupported format tag.
    """

    def __init__(self, fmt: object, expected: str) -> None:
        super().__init__(
            f"Unsupported checkpoint format: {fmt!r} (expected {expected!r})."
        )
        self.fmt = fmt
        self.expected = expected
