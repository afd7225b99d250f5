import unittest
from unittest import TestCase

import numpy as np

from layerkit import (
    SGD,
    Adam,
    DuplicateNameError,
    FullyConnected,
    InvalidArgumentError,
    Linear,
    ModuleTypeError,
    Parameter,
    Tensor,
)


def _param(values, grad=None, requires_grad=True):
    p = Parameter.from_numpy(np.asarray(values, dtype=np.float32), requires_grad=requires_grad)
    if grad is not None:
        p.grad = Tensor.from_numpy(np.asarray(grad, dtype=np.float32))
    return p


class TestSGD(TestCase):
    def test_step_updates_in_place(self):
        p = _param([1.0, 2.0], grad=[0.5, -0.5])
        ref = p
        SGD([p], lr=0.1).step()
        self.assertIs(p, ref)
        np.testing.assert_allclose(p.to_numpy(), [0.95, 2.05], rtol=1e-6)

    def test_weight_decay(self):
        p = _param([1.0], grad=[0.0])
        SGD([p], lr=0.1, weight_decay=0.5).step()
        np.testing.assert_allclose(p.to_numpy(), [0.95], rtol=1e-6)

    def test_skips_missing_grad_and_frozen(self):
        no_grad = _param([1.0])
        frozen = _param([1.0], grad=[1.0], requires_grad=False)
        SGD([no_grad, frozen], lr=0.1).step()
        np.testing.assert_array_equal(no_grad.to_numpy(), [1.0])
        np.testing.assert_array_equal(frozen.to_numpy(), [1.0])

    def test_zero_grad(self):
        p = _param([1.0], grad=[1.0])
        opt = SGD([p])
        opt.zero_grad()
        self.assertIsNone(p.grad)

    def test_invalid_hyperparameters(self):
        with self.assertRaises(InvalidArgumentError):
            SGD([], lr=0.0)
        with self.assertRaises(InvalidArgumentError):
            SGD([], lr=0.1, weight_decay=-1.0)

    def test_consumes_module_parameters(self):
        fc = FullyConnected(2, 2, generator=np.random.default_rng(0))
        before = fc.l1.weight.to_numpy().copy()
        for p in fc.parameters():
            p.grad = Tensor.ones(p.shape)

        opt = SGD(fc.parameters(), lr=0.5)
        self.assertEqual(len(opt.params), 4)
        opt.step()

        np.testing.assert_allclose(fc.l1.weight.to_numpy(), before - 0.5, rtol=1e-6)

    def test_accepts_module_and_keeps_dotted_names(self):
        fc = FullyConnected(2, 2, generator=np.random.default_rng(0))
        opt = SGD(fc, lr=0.1)
        self.assertEqual(
            [n for n, _ in opt.named_params],
            ["l1.weight", "l1.bias", "l2.weight", "l2.bias"],
        )
        self.assertIs(opt.params[0], fc.l1.weight)

    def test_bare_parameters_are_named_by_position(self):
        a, b = _param([1.0]), _param([2.0])
        opt = SGD([a, b])
        self.assertEqual([n for n, _ in opt.named_params], ["0", "1"])

    def test_rejects_repeated_parameters_and_non_parameters(self):
        p = _param([1.0])
        with self.assertRaises(DuplicateNameError):
            SGD([p, p])
        with self.assertRaises(ModuleTypeError):
            SGD([Tensor.ones((1,))])

    def test_does_not_rebind_parameters(self):
        lin = Linear(2, 2)
        SGD(lin.named_parameters(), lr=0.1)
        self.assertIs(lin.weight.owner, lin)
        self.assertEqual(lin.weight.name, "weight")

    def test_momentum_accumulates_velocity(self):
        p = _param([0.0], grad=[1.0])
        opt = SGD([("w", p)], lr=0.1, momentum=0.9)
        opt.step()
        np.testing.assert_allclose(p.to_numpy(), [-0.1], rtol=1e-6)
        opt.step()
        # v = 0.9 * 1 + 1 = 1.9
        np.testing.assert_allclose(p.to_numpy(), [-0.29], rtol=1e-5)
        np.testing.assert_allclose(opt.state["w"]["velocity"].to_numpy(), [1.9], rtol=1e-6)

    def test_momentum_state_keyed_by_dotted_name(self):
        fc = FullyConnected(2, 2, generator=np.random.default_rng(0))
        fc.l2.bias.grad = Tensor.ones(fc.l2.bias.shape)
        opt = SGD(fc, lr=0.1, momentum=0.5)
        opt.step()
        self.assertEqual(list(opt.state), ["l2.bias"])
        self.assertEqual(opt.state["l2.bias"]["velocity"].shape, (2,))

    def test_velocity_does_not_alias_gradient(self):
        p = _param([0.0], grad=[1.0])
        opt = SGD([p], lr=0.1, momentum=0.9)
        opt.step()
        opt.step()
        np.testing.assert_array_equal(p.grad.to_numpy(), [1.0])

    def test_invalid_momentum(self):
        for momentum in (-0.1, 1.0):
            with self.subTest(momentum=momentum):
                with self.assertRaises(InvalidArgumentError):
                    SGD([], momentum=momentum)


class TestAdam(TestCase):
    def test_first_step_moves_by_lr_times_sign(self):
        p = _param([1.0, -1.0], grad=[3.0, -0.2])
        Adam([p], lr=0.1).step()
        np.testing.assert_allclose(p.to_numpy(), [0.9, -0.9], rtol=1e-5)

    def test_state_persists_across_steps(self):
        p = _param([0.0], grad=[1.0])
        opt = Adam([p], lr=0.01)
        opt.step()
        opt.step()
        np.testing.assert_allclose(p.to_numpy(), [-0.02], rtol=1e-4)

    def test_skips_missing_grad_and_frozen(self):
        no_grad = _param([1.0])
        frozen = _param([1.0], grad=[1.0], requires_grad=False)
        opt = Adam([no_grad, frozen], lr=0.1)
        opt.step()
        np.testing.assert_array_equal(no_grad.to_numpy(), [1.0])
        np.testing.assert_array_equal(frozen.to_numpy(), [1.0])

    def test_invalid_hyperparameters(self):
        for kwargs in (
            {"lr": 0.0},
            {"betas": (1.0, 0.999)},
            {"betas": (0.9, -0.1)},
            {"eps": 0.0},
            {"weight_decay": -0.1},
        ):
            with self.subTest(**kwargs):
                with self.assertRaises(InvalidArgumentError):
                    Adam([], **kwargs)

    def test_state_keyed_by_dotted_name(self):
        fc = FullyConnected(2, 2, generator=np.random.default_rng(0))
        for p in fc.parameters():
            p.grad = Tensor.ones(p.shape)
        fc.l1.bias.requires_grad = False

        opt = Adam(fc, lr=0.01)
        opt.step()
        self.assertEqual(list(opt.state), ["l1.weight", "l2.weight", "l2.bias"])
        self.assertEqual(opt.state["l1.weight"]["t"], 1)
        self.assertEqual(opt.state["l1.weight"]["m"].shape, fc.l1.weight.shape)


if __name__ == "__main__":
    unittest.main()
