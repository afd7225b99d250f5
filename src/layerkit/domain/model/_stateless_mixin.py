"""
Stateless configuration mixin.

This module defines `StatelessConfigMixin`, a helper mixin for layers whose
behavior does not depend on any constructor hyperparameters (e.g., ReLU).

It provides empty `get_config` / `from_config` hooks so stateless layers take
part in JSON architecture export and reconstruction without special cases.
"""

from typing import Any, Dict
from typing_extensions import Self


class StatelessConfigMixin:
    """
    Mixin providing configuration hooks for hyperparameter-free layers.
    """

    def get_config(self) -> Dict[str, Any]:
        """
        Return an empty configuration dictionary.

        Returns
        -------
        Dict[str, Any]
            `{}`; nothing is needed to rebuild the layer.
        """
        return {}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> Self:
        """
        Rebuild the layer, ignoring `cfg`.

        Parameters
        ----------
        cfg : Dict[str, Any]
            Configuration dictionary (unused).

        Returns
        -------
        Self
            A default-constructed instance.
        """
        return cls()
