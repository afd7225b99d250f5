from ._serialization_core import (
    module_from_config,
    module_to_config,
    register_module,
    registered_modules,
)
from ._serialization_weights import extract_state_payload, load_state_payload_
from ._checkpoint import CHECKPOINT_FORMAT, load_json, save_json

__all__ = [
    "register_module",
    "registered_modules",
    "module_to_config",
    "module_from_config",
    "extract_state_payload",
    "load_state_payload_",
    "save_json",
    "load_json",
    "CHECKPOINT_FORMAT",
]
