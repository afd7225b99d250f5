"""
JSON checkpoint files.

A checkpoint bundles the architecture tree and the parameter payloads:

    {
      "format": "layerkit.json.ckpt.v1",
      "arch": <module_to_config(...)>,
      "state": <extract_state_payload(...)>
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

from ...domain._errors import CheckpointFormatError
from ._serialization_core import module_from_config, module_to_config
from ._serialization_weights import extract_state_payload, load_state_payload_

logger = logging.getLogger(__name__)

CHECKPOINT_FORMAT = "layerkit.json.ckpt.v1"


def save_json(module: Any, path: Union[str, Path]) -> None:
    """
    Save architecture and weights of `module` to a single JSON file.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "format": CHECKPOINT_FORMAT,
        "arch": module_to_config(module),
        "state": extract_state_payload(module),
    }
    p.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info(
        "Saved %s checkpoint (%d parameters) to %s",
        type(module).__name__,
        len(payload["state"]),
        p,
    )


def load_json(path: Union[str, Path]) -> Any:
    """
    Rebuild a module from a JSON checkpoint written by `save_json`.

    Raises
    ------
    CheckpointFormatError
        If the file does not carry the expected format tag.
    KeyError
        If a parameter value is missing.
    ShapeMismatchError
        If a stored value does not fit its parameter.
    """
    p = Path(path)
    obj = json.loads(p.read_text(encoding="utf-8"))

    fmt = obj.get("format") if isinstance(obj, dict) else None
    if fmt != CHECKPOINT_FORMAT:
        raise CheckpointFormatError(fmt, CHECKPOINT_FORMAT)

    module = module_from_config(obj["arch"])
    load_state_payload_(module, obj["state"])
    logger.info("Loaded %s checkpoint from %s", type(module).__name__, p)
    return module
