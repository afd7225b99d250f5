"""
Sequential container module.

This module defines `Sequential`, a container that applies its children in
registration order:

    y = L_n(...L_2(L_1(x)))

The ordering lives in the module's component registry itself, so the order
used by `forward()`, `parameters()`, printing, and serialization is always the
same. `Sequential` writes its own `forward`; the `Module` base never chains
children implicitly.
"""

from typing import Any, Iterator, Optional, Tuple

from ...domain._module import IModule
from ..module._serialization_core import register_module
from ._models import Model


@register_module()
class Sequential(Model):
    """
    Sequential container model.

    Parameters
    ----------
    *layers : IModule
        Zero or more child modules, registered as "0", "1", ... in order.
    """

    def __init__(self, *layers: IModule) -> None:
        super().__init__()
        for layer in layers:
            self.add(layer)

    def add(self, layer: IModule, name: Optional[str] = None) -> IModule:
        """
        Append a module to the container and register it as a child.

        Parameters
        ----------
        layer : IModule
            The module to append.
        name : Optional[str], optional
            Explicit registration name. If omitted, the smallest index that is
            at least the current length and not yet taken is used, so
            `add(a, name="1"); add(b)` names `b` "2".

        Returns
        -------
        IModule
            `layer`.

        Raises
        ------
        DuplicateNameError
            If the name is already used in this container.
        ModuleTypeError
            If `layer` is not a module.
        """
        if name is not None:
            layer_name = name
        else:
            index = len(self)
            while str(index) in self._components:
                index += 1
            layer_name = str(index)
        return self.register(layer_name, layer)

    def forward(self, x):
        out = x
        for _, layer in self.children():
            out = layer(out)
        return out

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[IModule]:
        return iter(self.layers())

    def __getitem__(self, idx: int) -> IModule:
        """
        Retrieve a layer by position.

        Raises
        ------
        IndexError
            If `idx` is out of range.
        """
        return self.layers()[idx]

    def layers(self) -> Tuple[IModule, ...]:
        """
        Return all layers as an immutable tuple in execution order.
        """
        return tuple(layer for _, layer in self.children())

    def summary(self) -> str:
        """
        Generate a lightweight textual summary of the container.

        Lists each layer's name, type, and parameter count, followed by the
        total.
        """
        lines = [f"{self.__class__.__name__}("]
        for name, layer in self.children():
            count = sum(p.numel() for p in layer.parameters())
            lines.append(f"  ({name}): {layer.__class__.__name__}  params={count}")
        lines.append(f")  total params={self.num_parameters()}")
        return "\n".join(lines)

    def get_config(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "Sequential":
        """
        Construct an empty container; the deserializer registers children.
        """
        return cls()
