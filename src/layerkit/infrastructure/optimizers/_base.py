"""
Shared plumbing for optimizers.

`Optimizer` resolves what it is given into an ordered list of
`(dotted_name, Parameter)` pairs:

- a module (anything with `named_parameters()`): its own dotted names,
  e.g. ``"l1.weight"``
- an iterable of `(name, Parameter)` pairs, such as the output of
  `named_parameters()` filtered by the caller
- an iterable of bare `Parameter`s: named by position, ``"0"``, ``"1"``, ...

Per-parameter state lives in `self._state[name]`. The optimizer never
binds, renames, or re-owns parameters; ownership stays with the module tree.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple, Union

from ...domain._errors import DuplicateNameError, ModuleTypeError
from .._parameter import Parameter

ParamSource = Union[Any, Iterable[Parameter], Iterable[Tuple[str, Parameter]]]


def resolve_named_parameters(
    source: ParamSource, owner: str = "optimizer"
) -> List[Tuple[str, Parameter]]:
    """
    Turn a module or an iterable of parameters into `(name, Parameter)` pairs.

    Raises
    ------
    ModuleTypeError
        If an item is neither a `Parameter` nor a `(str, Parameter)` pair.
    DuplicateNameError
        If two pairs carry the same name, or one parameter appears twice.
    """
    named_parameters = getattr(source, "named_parameters", None)
    items = named_parameters() if callable(named_parameters) else source

    pairs: List[Tuple[str, Parameter]] = []
    for i, item in enumerate(items):
        if isinstance(item, Parameter):
            pairs.append((str(i), item))
        elif (
            isinstance(item, tuple)
            and len(item) == 2
            and isinstance(item[0], str)
            and isinstance(item[1], Parameter)
        ):
            pairs.append(item)
        else:
            raise ModuleTypeError(
                f"Optimizers take Parameters or (name, Parameter) pairs, got {type(item).__name__}"
            )

    seen_names = set()
    seen_ids = set()
    for name, p in pairs:
        if name in seen_names or id(p) in seen_ids:
            raise DuplicateNameError(name, owner)
        seen_names.add(name)
        seen_ids.add(id(p))
    return pairs


class Optimizer:
    """
    Base class holding the parameter list and per-name state.

    Subclasses implement `step()` and read or create their buffers through
    `_state_for(name)`.
    """

    def __init__(self, params: ParamSource) -> None:
        self._named_params = resolve_named_parameters(params, type(self).__name__)
        self._state: Dict[str, Dict[str, Any]] = {}

    @property
    def named_params(self) -> List[Tuple[str, Parameter]]:
        return list(self._named_params)

    @property
    def params(self) -> List[Parameter]:
        return [p for _, p in self._named_params]

    @property
    def state(self) -> Dict[str, Dict[str, Any]]:
        """
        Per-parameter buffers keyed by dotted name. Entries appear on a
        parameter's first update.
        """
        return self._state

    def _state_for(self, name: str) -> Dict[str, Any]:
        return self._state.setdefault(name, {})

    def _trainable(self) -> Iterable[Tuple[str, Parameter, Any]]:
        """
        Yield `(name, parameter, grad)` for parameters that take an update.
        """
        for name, p in self._named_params:
            g = p.grad
            if g is None or not p.requires_grad:
                continue
            yield name, p, g

    def zero_grad(self) -> None:
        for _, p in self._named_params:
            p.zero_grad()

    def step(self) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement step().")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.extra_repr()}, params={len(self._named_params)})"

    def extra_repr(self) -> str:
        return ""
