import unittest
from unittest import TestCase

import numpy as np

from layerkit import (
    Embedding,
    InvalidArgumentError,
    PositionalEmbedding,
    ShapeMismatchError,
    Tensor,
    module_from_config,
    module_to_config,
)


class TestEmbedding(TestCase):
    def test_lookup_returns_table_rows(self):
        emb = Embedding(10, 4, generator=np.random.default_rng(0))
        ids = Tensor.from_numpy([[1, 5, 1], [0, 9, 2]])
        out = emb(ids)

        self.assertEqual(out.shape, (2, 3, 4))
        table = emb.weight.to_numpy()
        np.testing.assert_array_equal(out.to_numpy()[0, 1], table[5])
        np.testing.assert_array_equal(out.to_numpy()[0, 0], out.to_numpy()[0, 2])

    def test_accepts_plain_integer_arrays(self):
        emb = Embedding(3, 2, generator=np.random.default_rng(0))
        out = emb(np.array([2, 0]))
        np.testing.assert_array_equal(out.to_numpy(), emb.weight.to_numpy()[[2, 0]])

    def test_out_of_vocabulary_raises(self):
        emb = Embedding(3, 2)
        with self.assertRaises(IndexError):
            emb(Tensor.from_numpy([3]))

    def test_single_weight_parameter(self):
        emb = Embedding(7, 5)
        self.assertEqual([n for n, _ in emb.named_parameters()], ["weight"])
        self.assertEqual(emb.num_parameters(), 35)

    def test_seeded_tables_are_reproducible(self):
        a = Embedding(6, 3, generator=np.random.default_rng(11))
        b = Embedding(6, 3, generator=np.random.default_rng(11))
        np.testing.assert_array_equal(a.weight.to_numpy(), b.weight.to_numpy())

    def test_invalid_sizes_raise(self):
        for args in ((0, 4), (4, 0), (True, 4), (2.5, 4)):
            with self.subTest(args=args):
                with self.assertRaises(InvalidArgumentError):
                    Embedding(*args)

    def test_config_round_trip(self):
        cfg = module_to_config(Embedding(12, 6))
        rebuilt = module_from_config(cfg)
        self.assertIsInstance(rebuilt, Embedding)
        self.assertEqual(rebuilt.get_config(), {"num_embeddings": 12, "embed_size": 6})


class TestPositionalEmbedding(TestCase):
    def test_returns_one_row_per_timestep(self):
        pos = PositionalEmbedding(8, 4, generator=np.random.default_rng(0))
        ids = Tensor.from_numpy(np.zeros((2, 5)))
        out = pos(ids)

        self.assertEqual(out.shape, (5, 4))
        np.testing.assert_array_equal(out.to_numpy(), pos.weight.to_numpy()[:5])

    def test_broadcasts_against_token_embeddings(self):
        rng = np.random.default_rng(1)
        tok = Embedding(10, 4, generator=rng)
        pos = PositionalEmbedding(6, 4, generator=rng)
        ids = Tensor.from_numpy([[1, 2, 3], [4, 5, 6]])

        out = tok(ids) + pos(ids)
        self.assertEqual(out.shape, (2, 3, 4))

    def test_sequence_longer_than_table_raises(self):
        pos = PositionalEmbedding(4, 2)
        with self.assertRaises(ShapeMismatchError):
            pos(Tensor.zeros((1, 5)))

    def test_config(self):
        self.assertEqual(
            PositionalEmbedding(16, 8).get_config(), {"n_timesteps": 16, "embed_size": 8}
        )


if __name__ == "__main__":
    unittest.main()
