"""
High-level model utilities.

This module defines the infrastructure-level `Model` base class, which extends
the core `Module` abstraction with conveniences typically expected at the
"top-level network" boundary:

- Inference helpers (`predict`)
- Checkpoint serialization (`save_json`, `load_json`)

`Model` stays agnostic to optimizers, losses, and training loops; those
consume `forward()` and `parameters()` from the outside.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from .._module import Module
from ..module._checkpoint import load_json, save_json


class Model(Module):
    """
    Root-level module with inference and checkpoint helpers.
    """

    def predict(self, x):
        """
        Perform an inference-style forward pass.

        The whole tree is switched to evaluation mode for the duration of the
        call. Afterwards every module gets back the mode it had before, even
        if `forward` raises, so a submodule frozen in evaluation mode inside a
        training tree stays frozen.

        Parameters
        ----------
        x : ITensor
            Input tensor.

        Returns
        -------
        ITensor
            Output produced by the model's forward computation.
        """
        previous = [(m, m.training) for m in self.modules() if hasattr(m, "training")]
        self.eval()
        try:
            return self.forward(x)
        finally:
            # pre-order: a parent is restored before its children override it
            for m, training in previous:
                m.set_mode(training)

    def save_json(self, path: Union[str, Path]) -> None:
        """
        Save model architecture and weights into a single JSON file.

        Format
        ------
        {
          "format": "layerkit.json.ckpt.v1",
          "arch": {...},
          "state": {
            "l1.weight": {"b64": "...", "dtype": "float32", "shape": [...], "order": "C"},
            ...
          }
        }
        """
        save_json(self, path)

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "Model":
        """
        Load a model from a single JSON checkpoint created by `save_json()`.

        Raises
        ------
        CheckpointFormatError
            If the checkpoint format is unsupported.
        TypeError
            If the reconstructed object is not an instance of `cls`.
        """
        model = load_json(path)
        if not isinstance(model, cls):
            raise TypeError(
                f"Checkpoint contains {type(model).__name__}, expected {cls.__name__}."
            )
        return model
