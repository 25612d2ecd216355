#!/usr/bin/env python
"""
Test code for parameter ranges and artifact naming
"""


import os
import sys
import unittest

sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../"))
)

from jobsweep.ranges import ArtifactNaming, ParameterRange, split_range  # noqa


class TestParameterRange(unittest.TestCase):
    def test_range(self):
        r = ParameterRange(3, 7)
        self.assertEqual(r.low, 3)
        self.assertEqual(r.high, 7)
        self.assertEqual(r.size, 5)
        self.assertEqual(list(r.keys()), [3, 4, 5, 6, 7])
        self.assertTrue(r.contains(3) and r.contains(7))
        self.assertFalse(r.contains(8))
        self.assertEqual(str(r), "[3, 7]")
        self.assertEqual(ParameterRange(low=3, high=7), r)

        single = ParameterRange(4, 4)
        self.assertEqual(list(single.keys()), [4])

    def test_invalid(self):
        with self.assertRaises(ValueError):
            ParameterRange(5, 4)

    def test_frozen(self):
        r = ParameterRange(1, 2)
        with self.assertRaises(Exception):
            r.low = 0
        # Hashable, so it can be used in sets
        self.assertEqual(len({r, ParameterRange(1, 2)}), 1)

    def test_overlaps(self):
        self.assertTrue(ParameterRange(1, 5).overlaps(ParameterRange(5, 9)))
        self.assertFalse(ParameterRange(1, 5).overlaps(ParameterRange(6, 9)))

    def test_split(self):
        chunks = list(split_range(1, 10, 4))
        self.assertEqual([c.as_tuple() for c in chunks],
                         [(1, 4), (5, 8), (9, 10)])

        # Chunks cover the whole range exactly once
        keys = [k for c in split_range(-7, 23, 5) for k in c.keys()]
        self.assertEqual(keys, list(range(-7, 24)))

        self.assertEqual([c.as_tuple() for c in split_range(2, 6)], [(2, 6)])
        self.assertEqual([c.as_tuple() for c in split_range(2, 6, 100)],
                         [(2, 6)])

        with self.assertRaises(ValueError):
            list(split_range(1, 10, 0))
        with self.assertRaises(ValueError):
            list(split_range(10, 1, 2))


class TestArtifactNaming(unittest.TestCase):
    def test_encode_decode(self):
        naming = ArtifactNaming()
        for low, high in [(1, 5), (0, 0), (-10, -3), (-2, 7), (100, 100000)]:
            r = ParameterRange(low, high)
            name = naming.encode(r)
            self.assertEqual(naming.decode(name), r)
        self.assertEqual(naming.encode(ParameterRange(6, 10)),
                         "result_6_10.csv")
        self.assertEqual(naming.encode(ParameterRange(-3, 2)),
                         "result_-3_2.csv")

    def test_decode_rejects(self):
        naming = ArtifactNaming(prefix="fit_glm", ext=".npz")
        self.assertEqual(naming.decode("fit_glm_1_5.npz"),
                         ParameterRange(1, 5))
        for bad in ["fit_glm_1_5.csv", "fit_glm_01_5.npz", "fit_glm_-0_5.npz",
                    "fit_glm_5_1.npz", "fit_glm_1.npz", "fit_glm_1_5.npz.tmp",
                    ".fit_glm_1_5.npz.abc.tmp", "other_1_5.npz",
                    "fit_glm_a_5.npz", "fit_glmx_1_5.npz", "consolidated.csv"]:
            self.assertIsNone(naming.decode(bad), bad)
            self.assertFalse(naming.matches(bad))

    def test_prefix_with_separators(self):
        # Underscores in the prefix do not confuse the decoder
        naming = ArtifactNaming(prefix="a_1_2")
        r = ParameterRange(3, 4)
        self.assertEqual(naming.encode(r), "a_1_2_3_4.csv")
        self.assertEqual(naming.decode("a_1_2_3_4.csv"), r)
        self.assertIsNone(ArtifactNaming(prefix="a").decode("a_1_2_3_4.csv"))

    def test_invalid_naming(self):
        for prefix in ["", "a/b", "_a", "a b", "a:b"]:
            with self.assertRaises(ValueError):
                ArtifactNaming(prefix=prefix)
        with self.assertRaises(ValueError):
            ArtifactNaming(ext=".pkl")


if __name__ == "__main__":
    unittest.main()
