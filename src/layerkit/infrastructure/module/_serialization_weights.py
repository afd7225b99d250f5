"""
Parameter value (de)serialization.

Parameter values are stored as base64 payloads keyed by the dotted names
produced by `named_parameters()`:

    {"l1.weight": {"b64": "...", "dtype": "float32", "shape": [8, 4], "order": "C"}}
"""

from __future__ import annotations

import base64
from typing import Any, Dict

import numpy as np

from ...domain._errors import ShapeMismatchError


def ndarray_to_payload(arr: np.ndarray) -> Dict[str, Any]:
    """
    Encode an ndarray into a JSON-safe payload dictionary.
    """
    a = np.ascontiguousarray(arr)
    return {
        "b64": base64.b64encode(a.tobytes(order="C")).decode("ascii"),
        "dtype": str(a.dtype),
        "shape": list(a.shape),
        "order": "C",
    }


def payload_to_ndarray(payload: Dict[str, Any]) -> np.ndarray:
    """
    Decode a payload produced by `ndarray_to_payload`.
    """
    raw = base64.b64decode(payload["b64"].encode("ascii"))
    dtype = np.dtype(payload["dtype"])
    shape = tuple(int(d) for d in payload["shape"])
    return np.frombuffer(raw, dtype=dtype).reshape(shape).copy()


def extract_state_payload(m: Any) -> Dict[str, Dict[str, Any]]:
    """
    Collect every parameter value in the tree, keyed by dotted name.
    """
    return {name: ndarray_to_payload(p.to_numpy()) for name, p in m.named_parameters()}


def load_state_payload_(m: Any, payloads: Dict[str, Dict[str, Any]]) -> None:
    """
    Copy stored parameter values into the tree in place.

    The whole payload is checked before any value is written, so a failed
    load leaves every parameter untouched.

    Raises
    ------
    KeyError
        If a parameter of `m` has no stored payload, or the payload holds
        names that are not parameters of `m`.
    ShapeMismatchError
        If a stored array does not match the parameter's shape.
    """
    named = list(m.named_parameters())

    missing = [name for name, _ in named if name not in payloads]
    if missing:
        raise KeyError(f"Missing parameters in checkpoint: {', '.join(missing)}")
    known = {name for name, _ in named}
    unexpected = [name for name in payloads if name not in known]
    if unexpected:
        raise KeyError(f"Unexpected parameters in checkpoint: {', '.join(unexpected)}")

    arrays = []
    for name, p in named:
        arr = payload_to_ndarray(payloads[name])
        if tuple(arr.shape) != tuple(p.shape):
            raise ShapeMismatchError(
                f"Checkpoint shape mismatch for {name}: "
                f"expected {p.shape}, got {tuple(arr.shape)}",
                expected=tuple(p.shape),
                actual=tuple(arr.shape),
            )
        arrays.append((p, arr))

    for p, arr in arrays:
        p.copy_from_numpy(arr)
