import math
import unittest
from unittest import TestCase

import numpy as np

from layerkit import Tensor, WeightInitializer


def _init(name, shape, seed=0, **kwargs):
    t = Tensor(shape)
    WeightInitializer(name)(t, generator=np.random.default_rng(seed), **kwargs)
    return t.to_numpy()


class TestConstantInitializers(TestCase):
    def test_zeros_and_ones(self):
        np.testing.assert_array_equal(_init("zeros", (3, 2)), np.zeros((3, 2)))
        np.testing.assert_array_equal(_init("ones", (4,)), np.ones(4))


class TestUniformFanIn(TestCase):
    def test_bound_from_shape(self):
        w = _init("uniform_fan_in", (64, 25))
        self.assertLessEqual(float(np.abs(w).max()), 1.0 / math.sqrt(25))

    def test_explicit_fan_in(self):
        b = _init("uniform_fan_in", (1000,), fan_in=100)
        self.assertLessEqual(float(np.abs(b).max()), 0.1)
        self.assertGreater(float(np.abs(b).max()), 0.05)


class TestXavierInitializers(TestCase):
    def test_xavier_uniform_bound(self):
        w = _init("xavier_uniform", (30, 20))
        self.assertLessEqual(float(np.abs(w).max()), math.sqrt(6.0 / 50.0))

    def test_xavier_normal_std(self):
        w = _init("xavier", (200, 300))
        self.assertAlmostEqual(float(w.std()), math.sqrt(2.0 / 500.0), delta=0.005)


class TestKaimingInitializers(TestCase):
    def test_kaiming_uniform_bound(self):
        w = _init("kaiming_uniform", (30, 24))
        self.assertLessEqual(float(np.abs(w).max()), math.sqrt(6.0 / 24.0))

    def test_kaiming_normal_std(self):
        w = _init("kaiming", (300, 200))
        self.assertAlmostEqual(float(w.std()), math.sqrt(2.0 / 200.0), delta=0.005)


class TestReproducibility(TestCase):
    def test_same_seed_same_values(self):
        for name in ("uniform_fan_in", "xavier", "xavier_uniform", "kaiming", "kaiming_uniform"):
            with self.subTest(name=name):
                np.testing.assert_array_equal(_init(name, (5, 4), seed=9), _init(name, (5, 4), seed=9))


if __name__ == "__main__":
    unittest.main()
