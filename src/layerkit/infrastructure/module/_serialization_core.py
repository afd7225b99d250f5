"""
Architecture (de)serialization for module trees.

Modules opt in with the `@register_module()` decorator and by implementing
`get_config()` / `from_config(cfg)`. A tree is exported as nested nodes:

    {
      "type": "FullyConnected",
      "config": {...},
      "children": {"l1": <node>, "relu": <node>, ...}
    }

Children are listed in registration order (`children()`), so exporting the
same tree twice yields identical JSON. Checkpoint files keep this key order, and
deserialization re-registers children in the same order.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type

from ...domain._errors import ModuleTypeError

_MODULE_REGISTRY: dict[str, Type[Any]] = {}


def register_module(name: Optional[str] = None) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register a Module class for JSON deserialization.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        _MODULE_REGISTRY[key] = cls
        return cls

    return deco


def registered_modules() -> tuple[str, ...]:
    """Return the registered module type names (sorted)."""
    return tuple(sorted(_MODULE_REGISTRY))


def module_to_config(m: Any) -> dict[str, Any]:
    """
    Convert a module into a JSON-serializable configuration tree.

    Raises
    ------
    NotImplementedError
        If a module in the tree does not implement `get_config()`.
    """
    children: dict[str, Any] = {}
    for name, child in m.children():
        children[name] = module_to_config(child)

    return {"type": type(m).__name__, "config": m.get_config(), "children": children}


def module_from_config(node: Dict[str, Any]) -> Any:
    """
    Rebuild a module from a configuration tree.

    Children the constructor already created (structural children of a
    composite such as `FullyConnected`) are kept as built; every other child
    node is rebuilt recursively and attached with `register`.

    Raises
    ------
    ValueError
        If a node names an unregistered module type.
    ModuleTypeError
        If a structural child does not match the type recorded in the node.
    """
    type_name = str(node["type"])
    if type_name not in _MODULE_REGISTRY:
        raise ValueError(
            f"Unknown module type '{type_name}'. Register it via @register_module."
        )

    cls = _MODULE_REGISTRY[type_name]
    cfg = node.get("config", {}) or {}
    m = cls.from_config(cfg)

    built = dict(m.children())
    for name, child_node in (node.get("children", {}) or {}).items():
        name = str(name)
        if name in built:
            if type(built[name]).__name__ != child_node["type"]:
                raise ModuleTypeError(
                    f"{type_name}.{name} was built as {type(built[name]).__name__}, "
                    f"but the configuration records {child_node['type']}."
                )
            continue
        m.register(name, module_from_config(child_node))

    return m
