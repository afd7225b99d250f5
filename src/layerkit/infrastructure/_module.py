"""
Infrastructure module base classes.

This module provides the concrete `Module` implementation that satisfies the
domain-level `IModule` protocol, and `Layer`, its leaf specialization.

`Module` implements the composition machinery every layer and every training
loop relies on:

- explicit sub-component registration (`register`) with duplicate-name,
  cycle, and shared-ownership checks
- explicit parameter registration (`register_parameter`)
- ordered traversal of children (`children`, `modules`, `named_modules`)
- deterministic, depth-first parameter flattening (`parameters`,
  `named_parameters`) with ownership verification
- top-down training/evaluation mode propagation (`set_mode`, `train`, `eval`)
- `__call__` forwarding to `forward`

Registration is always explicit. Assigning a `Module` or `Parameter` to an
attribute without registering it first raises `ModuleTypeError`, so a
component can never end up half-attached (visible as an attribute but missing
from traversal).

Parameter order
---------------
`parameters()` visits a module's own directly registered parameters first, in
registration order, then descends into children in registration order.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterator, Optional

import numpy as np

from ..domain._errors import (
    CycleError,
    DuplicateNameError,
    ModuleTypeError,
    OwnershipInvariantViolation,
    SharedOwnershipError,
)
from ..domain._mode import Mode
from ..domain._module import IModule
from ._parameter import Parameter

logger = logging.getLogger(__name__)

_INTERNAL_ATTRS = frozenset({"_components", "_parameters", "_parent", "_mode"})


def _component_label(component: Any) -> str:
    return type(component).__name__


def _subtree_contains(root: Any, target: Any) -> bool:
    """
    Return True if `target` is `root` or reachable from it through `children()`.
    """
    stack = [root]
    visited: set[int] = set()
    while stack:
        node = stack.pop()
        if node is target:
            return True
        if id(node) in visited:
            continue
        visited.add(id(node))
        children = getattr(node, "children", None)
        if callable(children):
            stack.extend(child for _, child in children())
    return False


class Module(IModule):
    """
    Infrastructure base class for modules.

    Subclasses typically:
    - call `super().__init__()` first,
    - declare parameters via `register_parameter` (layers) or sub-modules via
      `register` (composites),
    - implement `forward` to define how input is routed.

    The base class never decides how children are wired together; each
    composite spells out the order in its own `forward`.

    Attributes
    ----------
    _components : Dict[str, IModule]
        Ordered mapping from child name to child module.
    _parameters : Dict[str, Parameter]
        Ordered mapping from parameter name to directly owned parameter.
    _parent : Optional[Module]
        Owning module, or None for a root.
    _mode : Mode
        Current training/evaluation mode.

    Notes
    -----
    The mode flag is plain mutable state and is not thread-safe. Concurrent
    forward passes that need different modes must use separate trees (see
    `clone`) or be serialized by the caller.
    """

    def __init__(self) -> None:
        """
        Initialize an empty module in training mode with no parent.
        """
        object.__setattr__(self, "_components", {})
        object.__setattr__(self, "_parameters", {})
        object.__setattr__(self, "_parent", None)
        object.__setattr__(self, "_mode", Mode.TRAINING)

    # ------------------------------------------------------------------
    # Attribute guards
    # ------------------------------------------------------------------
    def __setattr__(self, name: str, value: Any) -> None:
        """
        Refuse implicit attachment of modules and parameters.

        Plain attributes pass through. A `Module` or `Parameter` may only be
        bound to the attribute it was registered under.
        """
        if name in _INTERNAL_ATTRS:
            object.__setattr__(self, name, value)
            return

        components = self.__dict__.get("_components", {})
        parameters = self.__dict__.get("_parameters", {})

        if name in components or name in parameters:
            registered = components.get(name, parameters.get(name))
            if value is not registered:
                raise ModuleTypeError(
                    f"{type(self).__name__}.{name} is a registered component "
                    "and cannot be reassigned."
                )
        elif isinstance(value, Module):
            raise ModuleTypeError(
                f"Assigning a {type(value).__name__} to {type(self).__name__}.{name} "
                f"does not attach it. Use self.register({name!r}, ...) instead."
            )
        elif isinstance(value, Parameter):
            raise ModuleTypeError(
                f"Assigning a Parameter to {type(self).__name__}.{name} does not "
                f"attach it. Use self.register_parameter({name!r}, ...) instead."
            )

        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if name in self.__dict__.get("_components", {}) or name in self.__dict__.get(
            "_parameters", {}
        ):
            raise ModuleTypeError(
                f"{type(self).__name__}.{name} is a registered component "
                "and cannot be deleted."
            )
        object.__delattr__(self, name)

    def _check_name(self, name: str) -> None:
        if not isinstance(name, str) or not name or "." in name:
            raise ModuleTypeError(
                f"Component names must be non-empty strings without '.', got {name!r}."
            )
        if name in self._components or name in self._parameters:
            raise DuplicateNameError(name, type(self).__name__)
        if name in self.__dict__ or hasattr(type(self), name):
            # would shadow a plain attribute or a method
            raise DuplicateNameError(name, type(self).__name__)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, name: str, component: IModule) -> Any:
        """
        Attach `component` under `name` and return it.

        The component becomes visible to `children()`, `parameters()`, and
        mode propagation immediately, is bound as `self.<name>`, and adopts
        this module's current mode.

        Parameters
        ----------
        name : str
            Name of the child within this module.
        component : IModule
            A layer or module implementing `forward`, `parameters`,
            `children`, and `set_mode`.

        Returns
        -------
        IModule
            `component`, so registration can be written inline:
            `self.l1 = self.register("l1", Linear(4, 8))` is unnecessary;
            `self.register("l1", Linear(4, 8))` already binds `self.l1`.

        Raises
        ------
        ModuleTypeError
            If `component` does not implement the module capability or
            `name` is not a valid component name.
        DuplicateNameError
            If `name` is already used in this module.
        CycleError
            If `component` is this module or one of its ancestors.
        SharedOwnershipError
            If `component` is already owned by a module.
        """
        if not isinstance(component, IModule):
            raise ModuleTypeError(
                f"Cannot register {_component_label(component)} as {name!r}: "
                "it does not implement forward/parameters/children/set_mode."
            )
        self._check_name(name)

        if _subtree_contains(component, self):
            raise CycleError(name, _component_label(component))

        if isinstance(component, Module) and component._parent is not None:
            raise SharedOwnershipError(
                name,
                _component_label(component),
                _component_label(component._parent),
            )

        if isinstance(component, Module):
            object.__setattr__(component, "_parent", self)
        component.set_mode(self.training)

        self._components[name] = component
        object.__setattr__(self, name, component)

        logger.debug(
            "Registered %s as %r in %s",
            _component_label(component),
            name,
            type(self).__name__,
        )
        return component

    def register_parameter(self, name: str, param: Parameter) -> Parameter:
        """
        Declare `param` as directly owned by this module and return it.

        Parameters
        ----------
        name : str
            Parameter name (e.g., "weight", "bias").
        param : Parameter
            An unowned parameter.

        Returns
        -------
        Parameter
            `param`, now named and tagged with this module as owner.

        Raises
        ------
        ModuleTypeError
            If `param` is not a `Parameter` or `name` is invalid.
        DuplicateNameError
            If `name` is already used in this module.
        SharedOwnershipError
            If `param` is already owned.
        """
        if not isinstance(param, Parameter):
            raise ModuleTypeError(
                f"register_parameter expects a Parameter, got {type(param).__name__}."
            )
        self._check_name(name)
        param._bind(self, name)

        self._parameters[name] = param
        object.__setattr__(self, name, param)
        return param

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------
    @property
    def parent(self) -> Optional["Module"]:
        """
        Owning module, or None for a root.
        """
        return self._parent

    def children(self) -> Iterator[tuple[str, IModule]]:
        """
        Iterate over direct sub-components as `(name, component)` pairs.

        Every call returns a fresh iterator. Order is registration order,
        which is the order consumers (flattening, printing, serialization)
        rely on for determinism.
        """
        for name, component in self._components.items():
            yield name, component

    def named_children(self) -> Iterator[tuple[str, IModule]]:
        return self.children()

    def named_modules(self, prefix: str = "") -> Iterator[tuple[str, IModule]]:
        """
        Depth-first pre-order walk over this module and all descendants.

        Yields
        ------
        tuple[str, IModule]
            `(dotted_name, module)`; the root is yielded as `(prefix, self)`.
        """
        yield prefix, self
        for name, child in self.children():
            child_prefix = f"{prefix}.{name}" if prefix else name
            if isinstance(child, Module):
                yield from child.named_modules(child_prefix)
            else:
                yield child_prefix, child

    def modules(self) -> Iterator[IModule]:
        for _, m in self.named_modules():
            yield m

    def get_submodule(self, target: str) -> IModule:
        """
        Return the descendant addressed by a dotted path such as "block.l1".

        Raises
        ------
        KeyError
            If any path segment is not a registered child.
        """
        if target == "":
            return self
        node: Any = self
        for part in target.split("."):
            found = dict(node.children()).get(part)
            if found is None:
                raise KeyError(
                    f"{type(node).__name__} has no registered child {part!r} "
                    f"(while resolving {target!r})."
                )
            node = found
        return node

    # ------------------------------------------------------------------
    # Parameter traversal
    # ------------------------------------------------------------------
    def named_parameters(self, prefix: str = "") -> Iterator[tuple[str, Parameter]]:
        """
        Iterate over `(dotted_name, parameter)` pairs for the whole subtree.

        Own parameters come first, then each child's in registration order.

        Raises
        ------
        OwnershipInvariantViolation
            If a parameter or module is reached twice, or a parameter is
            listed by a module that does not own it.
        """
        yield from self._walk_parameters(prefix, set(), set())

    def _walk_parameters(
        self, prefix: str, seen_params: set[int], seen_modules: set[int]
    ) -> Iterator[tuple[str, Parameter]]:
        if id(self) in seen_modules:
            raise OwnershipInvariantViolation(
                f"{type(self).__name__} at {prefix!r} is reachable through more than one path."
            )
        seen_modules.add(id(self))

        base = f"{prefix}." if prefix else ""
        for name, p in self._parameters.items():
            if p.owner is not self:
                raise OwnershipInvariantViolation(
                    f"Parameter {base}{name} is listed by {type(self).__name__} "
                    f"but owned by {_component_label(p.owner)}."
                )
            if id(p) in seen_params:
                raise OwnershipInvariantViolation(
                    f"Parameter {base}{name} is reachable through more than one path."
                )
            seen_params.add(id(p))
            yield f"{base}{name}", p

        for child_name, child in self.children():
            child_prefix = f"{base}{child_name}"
            if isinstance(child, Module):
                yield from child._walk_parameters(
                    child_prefix, seen_params, seen_modules
                )
                continue
            for i, p in enumerate(child.parameters()):
                if id(p) in seen_params:
                    raise OwnershipInvariantViolation(
                        f"Parameter {child_prefix}.{i} is reachable through more than one path."
                    )
                seen_params.add(id(p))
                p_name = getattr(p, "name", None) or str(i)
                yield f"{child_prefix}.{p_name}", p

    def parameters(self) -> Iterator[Parameter]:
        """
        Iterate over every parameter owned anywhere in the subtree.

        The sequence is lazy, restartable, and identical across calls for an
        unmodified tree. See `named_parameters` for ordering and errors.
        """
        for _, p in self.named_parameters():
            yield p

    def num_parameters(self) -> int:
        """
        Total number of scalar elements across all parameters.
        """
        return sum(p.numel() for p in self.parameters())

    def zero_grad(self) -> None:
        """
        Clear the gradient of every parameter in the subtree.
        """
        for p in self.parameters():
            p.zero_grad()

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------
    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def training(self) -> bool:
        """
        True when this module is in training mode.

        Assigning to `training` propagates to all descendants, like
        `set_mode`.
        """
        return self._mode.is_training

    @training.setter
    def training(self, value: bool) -> None:
        self.set_mode(bool(value))

    def set_mode(self, training: bool) -> "Module":
        """
        Set the mode on this module and every descendant.

        Parameters
        ----------
        training : bool
            True for training mode, False for evaluation mode.

        Returns
        -------
        Module
            `self`.
        """
        mode = Mode.from_flag(bool(training))
        if self._parent is None and mode is not self._mode:
            logger.debug("Switching %s tree to %s mode", type(self).__name__, mode.value)
        object.__setattr__(self, "_mode", mode)
        for _, child in self.children():
            child.set_mode(training)
        return self

    def train(self, mode: bool = True) -> "Module":
        return self.set_mode(mode)

    def eval(self) -> "Module":
        return self.set_mode(False)

    # ------------------------------------------------------------------
    # Forward
    # ------------------------------------------------------------------
    def forward(self, x):
        """
        Execute the forward computation of the module.

        Subclasses must implement this.
        """
        raise NotImplementedError(
            f"{type(self).__name__} does not implement forward()."
        )

    def __call__(self, *args, **kwargs):
        """
        Call the module as a function, delegating to `forward`.
        """
        return self.forward(*args, **kwargs)

    # ------------------------------------------------------------------
    # Copying / printing
    # ------------------------------------------------------------------
    def clone(self) -> "Module":
        """
        Return an independent deep copy of this subtree as a new root.

        Parameter values are copied; the clone shares no state with the
        original, so each thread can run its own forward passes and hold its
        own mode.

        Every `numpy.random.Generator` held by a module in the subtree is
        replaced by a child spawned from it (`Generator.spawn`), so the clone
        draws different dropout masks than the original. Modules that share a
        generator keep sharing one in the clone.
        """
        memo: Dict[int, Any] = {}
        if self._parent is not None:
            memo[id(self._parent)] = None
        for m in self.modules():
            for value in getattr(m, "__dict__", {}).values():
                if isinstance(value, np.random.Generator) and id(value) not in memo:
                    memo[id(value)] = value.spawn(1)[0]
        return copy.deepcopy(self, memo)

    def extra_repr(self) -> str:
        """
        Return the hyperparameter summary shown inside `repr()`.
        """
        return ""

    def __repr__(self) -> str:
        head = f"{type(self).__name__}({self.extra_repr()}"
        lines = []
        for name, child in self.children():
            child_repr = repr(child).replace("\n", "\n  ")
            lines.append(f"  ({name}): {child_repr}")
        if not lines:
            return head + ")"
        return head + "\n" + "\n".join(lines) + "\n)"

    # ------------------------------------------------------------------
    # Serialization hooks (opt-in contract)
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration for this module.

        Raises
        ------
        NotImplementedError
            If the module does not support JSON serialization.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} does not implement get_config(). "
            "This module cannot be serialized to JSON."
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Module":
        """
        Reconstruct a module from a JSON configuration.

        Raises
        ------
        NotImplementedError
            If the module does not support JSON deserialization.
        """
        raise NotImplementedError(
            f"{cls.__name__} does not implement from_config(). "
            "This module cannot be deserialized from JSON."
        )


class Layer(Module):
    """
    Leaf module: owns parameters directly and never holds sub-components.

    Concrete layers (Linear, ReLU, Dropout, ...) derive from `Layer` and
    terminate forward routing by invoking tensor operations.
    """

    def register(self, name: str, component: IModule) -> Any:
        raise ModuleTypeError(
            f"{type(self).__name__} is a layer and cannot hold sub-components "
            f"(tried to register {name!r})."
        )
