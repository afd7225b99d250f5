import unittest
from unittest import TestCase

import numpy as np

from layerkit import (
    CycleError,
    Dropout,
    DuplicateNameError,
    Layer,
    Linear,
    Module,
    ModuleTypeError,
    OwnershipInvariantViolation,
    Parameter,
    ReLU,
    SharedOwnershipError,
    Tensor,
)


class _Block(Module):
    def __init__(self, seed: int = 0) -> None:
        super().__init__()
        rng = np.random.default_rng(seed)
        self.register("l1", Linear(4, 8, generator=rng))
        self.register("relu", ReLU())
        self.register("l2", Linear(8, 2, generator=rng))
        self.register("dropout", Dropout(0.5, generator=rng))

    def forward(self, x):
        return self.dropout(self.l2(self.relu(self.l1(x))))


class _WithOwnParam(Module):
    def __init__(self) -> None:
        super().__init__()
        self.register("inner", Linear(2, 2, generator=np.random.default_rng(0)))
        self.register_parameter("scale", Parameter((1,)))

    def forward(self, x):
        return self.inner(x) * self.scale


class _Duck:
    def __init__(self) -> None:
        self.training = True
        self.p = Parameter((3,))

    def forward(self, x):
        return x

    def parameters(self):
        yield self.p

    def children(self):
        return iter(())

    def set_mode(self, training):
        self.training = training
        return self


class TestModuleRegistration(TestCase):
    def test_register_returns_component_and_binds_attribute(self):
        m = Module()
        lin = Linear(2, 3)
        out = m.register("proj", lin)
        self.assertIs(out, lin)
        self.assertIs(m.proj, lin)
        self.assertIs(lin.parent, m)

    def test_children_in_registration_order(self):
        b = _Block()
        self.assertEqual([n for n, _ in b.children()], ["l1", "relu", "l2", "dropout"])

    def test_children_is_restartable(self):
        b = _Block()
        first = list(b.children())
        second = list(b.children())
        self.assertEqual([id(c) for _, c in first], [id(c) for _, c in second])

    def test_duplicate_name_raises_and_keeps_first(self):
        m = Module()
        first = m.register("x", ReLU())
        with self.assertRaises(DuplicateNameError):
            m.register("x", ReLU())
        self.assertIs(m.x, first)
        self.assertEqual(len(list(m.children())), 1)

    def test_name_shared_between_parameter_and_child_raises(self):
        m = Module()
        m.register_parameter("w", Parameter((1,)))
        with self.assertRaises(DuplicateNameError):
            m.register("w", ReLU())

    def test_name_shadowing_method_raises(self):
        m = Module()
        with self.assertRaises(DuplicateNameError):
            m.register("forward", ReLU())

    def test_invalid_names_raise(self):
        m = Module()
        for bad in ("", "a.b", 3):
            with self.subTest(name=bad):
                with self.assertRaises(ModuleTypeError):
                    m.register(bad, ReLU())

    def test_register_self_raises_cycle(self):
        m = Module()
        with self.assertRaises(CycleError):
            m.register("me", m)

    def test_register_ancestor_raises_cycle(self):
        root = Module()
        child = Module()
        root.register("child", child)
        with self.assertRaises(CycleError):
            child.register("root", root)

    def test_register_grandparent_raises_cycle(self):
        root = Module()
        mid = root.register("mid", Module())
        leaf = mid.register("leaf", Module())
        with self.assertRaises(CycleError):
            leaf.register("root", root)
        self.assertEqual(list(leaf.children()), [])
        self.assertIsNone(root.parent)

    def test_register_owned_component_raises(self):
        a, b = Module(), Module()
        relu = a.register("relu", ReLU())
        with self.assertRaises(SharedOwnershipError):
            b.register("relu", relu)
        with self.assertRaises(SharedOwnershipError):
            a.register("relu_again", relu)

    def test_register_non_module_raises(self):
        m = Module()
        with self.assertRaises(ModuleTypeError):
            m.register("x", object())

    def test_layer_cannot_hold_children(self):
        with self.assertRaises(ModuleTypeError):
            Linear(2, 2).register("relu", ReLU())
        self.assertIsInstance(Linear(2, 2), Layer)

    def test_register_parameter_requires_parameter(self):
        m = Module()
        with self.assertRaises(ModuleTypeError):
            m.register_parameter("w", Tensor((2,)))


class TestAttributeGuard(TestCase):
    def test_assigning_unregistered_module_raises(self):
        m = Module()
        with self.assertRaises(ModuleTypeError):
            m.l1 = Linear(2, 2)
        self.assertEqual(list(m.children()), [])

    def test_assigning_unregistered_parameter_raises(self):
        m = Module()
        with self.assertRaises(ModuleTypeError):
            m.w = Parameter((2,))

    def test_reassigning_registered_name_raises(self):
        m = Module()
        m.register("relu", ReLU())
        with self.assertRaises(ModuleTypeError):
            m.relu = ReLU()
        with self.assertRaises(ModuleTypeError):
            del m.relu

    def test_plain_attributes_pass_through(self):
        m = Module()
        m.width = 4
        self.assertEqual(m.width, 4)


class TestParameterFlattening(TestCase):
    def test_parameter_count_and_order(self):
        b = _Block()
        params = list(b.parameters())
        self.assertEqual(len(params), 4)
        self.assertIs(params[0], b.l1.weight)
        self.assertIs(params[1], b.l1.bias)
        self.assertIs(params[2], b.l2.weight)
        self.assertIs(params[3], b.l2.bias)

    def test_parameters_is_deterministic(self):
        b = _Block()
        self.assertEqual(
            [id(p) for p in b.parameters()], [id(p) for p in b.parameters()]
        )

    def test_named_parameters_are_dotted(self):
        b = _Block()
        self.assertEqual(
            [n for n, _ in b.named_parameters()],
            ["l1.weight", "l1.bias", "l2.weight", "l2.bias"],
        )

    def test_named_parameters_prefix(self):
        b = _Block()
        names = [n for n, _ in b.named_parameters("block")]
        self.assertEqual(names[0], "block.l1.weight")

    def test_own_parameters_come_before_children(self):
        m = _WithOwnParam()
        self.assertEqual(
            [n for n, _ in m.named_parameters()],
            ["scale", "inner.weight", "inner.bias"],
        )

    def test_nested_modules_flatten_depth_first(self):
        root = Module()
        root.register("a", _Block(seed=1))
        root.register("b", _Block(seed=2))
        names = [n for n, _ in root.named_parameters()]
        self.assertEqual(
            names,
            [
                "a.l1.weight",
                "a.l1.bias",
                "a.l2.weight",
                "a.l2.bias",
                "b.l1.weight",
                "b.l1.bias",
                "b.l2.weight",
                "b.l2.bias",
            ],
        )

    def test_num_parameters(self):
        self.assertEqual(_Block().num_parameters(), 4 * 8 + 8 + 8 * 2 + 2)

    def test_parameterless_module_yields_nothing(self):
        self.assertEqual(list(Module().parameters()), [])
        self.assertEqual(list(ReLU().parameters()), [])

    def test_parameter_listed_by_non_owner_raises(self):
        owner = Module()
        p = owner.register_parameter("w", Parameter((2,)))
        impostor = Module()
        impostor._parameters["w"] = p
        root = Module()
        root.register("owner", owner)
        root.register("impostor", impostor)
        with self.assertRaises(OwnershipInvariantViolation):
            list(root.parameters())

    def test_module_reachable_twice_raises(self):
        root = Module()
        shared = root.register("a", Linear(2, 2))
        root._components["b"] = shared
        with self.assertRaises(OwnershipInvariantViolation):
            list(root.parameters())

    def test_zero_grad_clears_every_parameter(self):
        b = _Block()
        for p in b.parameters():
            p.grad = Tensor.ones(p.shape)
        b.zero_grad()
        self.assertTrue(all(p.grad is None for p in b.parameters()))

    def test_foreign_component_parameters_are_included(self):
        root = Module()
        duck = _Duck()
        root.register("duck", duck)
        self.assertEqual([n for n, _ in root.named_parameters()], ["duck.0"])


class TestModeAndForward(TestCase):
    def test_new_module_is_training(self):
        self.assertTrue(Module().training)

    def test_eval_propagates_to_all_descendants(self):
        root = Module()
        root.register("block", _Block())
        root.eval()
        for m in root.modules():
            self.assertFalse(m.training)
        root.train()
        for m in root.modules():
            self.assertTrue(m.training)

    def test_set_mode_returns_self(self):
        m = Module()
        self.assertIs(m.set_mode(False), m)

    def test_training_property_setter_propagates(self):
        b = _Block()
        b.training = False
        self.assertFalse(b.dropout.training)

    def test_register_adopts_parent_mode(self):
        root = Module().eval()
        d = root.register("dropout", Dropout(0.5))
        self.assertFalse(d.training)

    def test_mode_reaches_foreign_components(self):
        root = Module()
        duck = root.register("duck", _Duck())
        root.eval()
        self.assertFalse(duck.training)

    def test_base_forward_is_not_implemented(self):
        with self.assertRaises(NotImplementedError):
            Module()(Tensor.ones((1,)))

    def test_call_delegates_to_forward(self):
        b = _Block().eval()
        x = Tensor.ones((1, 4))
        np.testing.assert_array_equal(b(x).to_numpy(), b.forward(x).to_numpy())

    def test_get_submodule(self):
        root = Module()
        block = root.register("block", _Block())
        self.assertIs(root.get_submodule("block.l1"), block.l1)
        self.assertIs(root.get_submodule(""), root)
        with self.assertRaises(KeyError):
            root.get_submodule("block.missing")

    def test_named_children_matches_children(self):
        b = _Block()
        named = list(b.named_children())
        self.assertEqual([n for n, _ in named], ["l1", "relu", "l2", "dropout"])
        self.assertEqual([id(c) for _, c in named], [id(c) for _, c in b.children()])
        self.assertIs(named[0][1], b.l1)
        self.assertEqual(list(Linear(2, 2).named_children()), [])

    def test_named_modules_pre_order(self):
        b = _Block()
        self.assertEqual(
            [n for n, _ in b.named_modules()], ["", "l1", "relu", "l2", "dropout"]
        )


class TestCloneAndRepr(TestCase):
    def test_clone_is_independent(self):
        root = Module()
        block = root.register("block", _Block())
        copy_ = block.clone()

        self.assertIsNone(copy_.parent)
        self.assertIsNot(copy_.l1.weight, block.l1.weight)
        self.assertIs(copy_.l1.weight.owner, copy_.l1)
        np.testing.assert_array_equal(
            copy_.l1.weight.to_numpy(), block.l1.weight.to_numpy()
        )

        copy_.eval()
        self.assertTrue(block.training)
        copy_.l1.weight.fill(0.0)
        self.assertFalse(np.all(block.l1.weight.to_numpy() == 0.0))

    def test_clone_draws_different_dropout_masks(self):
        b = _Block(seed=7)
        copy_ = b.clone()
        self.assertIsNot(copy_.dropout.generator, b.dropout.generator)

        x = Tensor.ones((64, 64))
        a = b.dropout(x).to_numpy()
        c = copy_.dropout(x).to_numpy()
        self.assertFalse(np.array_equal(a, c))

    def test_clone_keeps_shared_generators_shared(self):
        rng = np.random.default_rng(0)
        root = Module()
        root.register("d1", Dropout(0.5, generator=rng))
        root.register("d2", Dropout(0.5, generator=rng))

        copy_ = root.clone()
        self.assertIs(copy_.d1.generator, copy_.d2.generator)
        self.assertIsNot(copy_.d1.generator, rng)

    def test_clone_keeps_parameter_order(self):
        b = _Block()
        self.assertEqual(
            [n for n, _ in b.clone().named_parameters()],
            [n for n, _ in b.named_parameters()],
        )

    def test_repr_lists_children(self):
        text = repr(_Block())
        self.assertTrue(text.startswith("_Block("))
        self.assertIn("(l1): Linear(in_size=4, out_size=8, bias=True)", text)
        self.assertIn("(dropout): Dropout(p=0.5)", text)


if __name__ == "__main__":
    unittest.main()
