import json
import tempfile
import unittest
from pathlib import Path
from unittest import TestCase

import numpy as np

from layerkit import (
    CheckpointFormatError,
    FullyConnected,
    Linear,
    ReLU,
    Sequential,
    ShapeMismatchError,
    Tensor,
    load_json,
    save_json,
)
from layerkit.infrastructure.module import (
    CHECKPOINT_FORMAT,
    extract_state_payload,
    load_state_payload_,
)


class TestStatePayload(TestCase):
    def test_payload_keys_are_dotted_names(self):
        fc = FullyConnected(4, 2)
        self.assertEqual(
            list(extract_state_payload(fc)),
            ["l1.weight", "l1.bias", "l2.weight", "l2.bias"],
        )

    def test_load_copies_values_in_place(self):
        src = Linear(3, 2, generator=np.random.default_rng(0))
        dst = Linear(3, 2, generator=np.random.default_rng(1))
        weight = dst.weight

        load_state_payload_(dst, extract_state_payload(src))

        self.assertIs(dst.weight, weight)
        np.testing.assert_array_equal(dst.weight.to_numpy(), src.weight.to_numpy())
        np.testing.assert_array_equal(dst.bias.to_numpy(), src.bias.to_numpy())

    def test_missing_key_raises(self):
        payload = extract_state_payload(Linear(3, 2))
        del payload["bias"]
        with self.assertRaises(KeyError):
            load_state_payload_(Linear(3, 2), payload)

    def test_shape_mismatch_raises(self):
        with self.assertRaises(ShapeMismatchError):
            load_state_payload_(Linear(3, 4), extract_state_payload(Linear(3, 2)))

    def test_unexpected_key_raises(self):
        payload = extract_state_payload(Linear(3, 2))
        payload["extra.weight"] = payload["weight"]
        with self.assertRaises(KeyError) as ctx:
            load_state_payload_(Linear(3, 2), payload)
        self.assertIn("extra.weight", str(ctx.exception))

    def test_payload_without_bias_is_rejected_by_bias_free_linear(self):
        payload = extract_state_payload(Linear(3, 2))
        with self.assertRaises(KeyError):
            load_state_payload_(Linear(3, 2, bias=False), payload)

    def test_failed_load_leaves_parameters_untouched(self):
        src = FullyConnected(4, 2, generator=np.random.default_rng(0))
        dst = FullyConnected(4, 2, generator=np.random.default_rng(1))
        before = {n: p.to_numpy().copy() for n, p in dst.named_parameters()}

        payload = extract_state_payload(src)
        payload["l2.bias"] = extract_state_payload(Linear(4, 3))["bias"]
        with self.assertRaises(ShapeMismatchError):
            load_state_payload_(dst, payload)

        for name, p in dst.named_parameters():
            np.testing.assert_array_equal(p.to_numpy(), before[name])


class TestJsonCheckpoint(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "ckpt" / "model.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_round_trip_reproduces_outputs(self):
        rng = np.random.default_rng(0)
        model = Sequential(
            FullyConnected(4, 6, 0.5, generator=rng), ReLU(), Linear(6, 2, generator=rng)
        )
        x = Tensor.from_numpy(rng.standard_normal((5, 4)))
        expected = model.predict(x).to_numpy()

        model.save_json(self.path)
        loaded = Sequential.load_json(self.path)

        self.assertIsInstance(loaded, Sequential)
        np.testing.assert_array_equal(loaded.predict(x).to_numpy(), expected)

    def test_file_carries_format_tag(self):
        save_json(Linear(2, 2), self.path)
        obj = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(obj["format"], CHECKPOINT_FORMAT)
        self.assertEqual(obj["format"], "layerkit.json.ckpt.v1")
        self.assertEqual(obj["arch"]["type"], "Linear")

    def test_module_level_load_returns_any_module(self):
        lin = Linear(2, 3, generator=np.random.default_rng(4))
        save_json(lin, self.path)
        loaded = load_json(self.path)
        self.assertIsInstance(loaded, Linear)
        np.testing.assert_array_equal(loaded.weight.to_numpy(), lin.weight.to_numpy())

    def test_unknown_format_raises(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"format": "other.v0"}), encoding="utf-8")
        with self.assertRaises(CheckpointFormatError):
            load_json(self.path)

    def test_model_load_checks_type(self):
        save_json(FullyConnected(2, 2), self.path)
        with self.assertRaises(TypeError):
            Sequential.load_json(self.path)


if __name__ == "__main__":
    unittest.main()
