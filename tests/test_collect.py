#!/usr/bin/env python
"""
Test code for the collection of sweep artifacts
"""


import os
import sys
import unittest
from tempfile import TemporaryDirectory

import numpy as np
import pandas as pd

sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../"))
)

from jobsweep.collect import ResultCollector, collect, persist  # noqa
from jobsweep.errors import (ArtifactFormatError, DuplicateKeyError,  # noqa
                             IncompleteSweepError, NoArtifactsFoundError)
from jobsweep.ranges import ArtifactNaming, ParameterRange  # noqa
from jobsweep.store import DirectoryArtifactStore, MemoryArtifactStore  # noqa


def _artifact(low, high, offset=0.0):
    keys = np.arange(low, high + 1)
    return pd.DataFrame({"K": keys, "metric": keys*0.1 + offset})


def _store(ranges, naming=None, store=None):
    naming = naming or ArtifactNaming()
    store = store if store is not None else MemoryArtifactStore()
    for low, high in ranges:
        store.write(naming.encode(ParameterRange(low, high)),
                    _artifact(low, high))
    return store


class TestCollect(unittest.TestCase):
    def test_union_sorted(self):
        # Written out of order on purpose
        store = _store([(11, 15), (1, 5), (6, 10)])
        df = collect(store)

        self.assertEqual(list(df.columns), ["K", "metric"])
        self.assertEqual(list(df["K"]), list(range(1, 16)))
        self.assertTrue(np.allclose(df["metric"], df["K"]*0.1))
        self.assertFalse(df["K"].duplicated().any())

    def test_sorted_across_interleaved_rows(self):
        store = MemoryArtifactStore()
        naming = ArtifactNaming()
        # Rows inside an artifact need not be sorted
        store.write(naming.encode(ParameterRange(1, 3)),
                    pd.DataFrame({"K": [3, 1, 2], "metric": [3.0, 1.0, 2.0]}))
        store.write(naming.encode(ParameterRange(4, 5)),
                    pd.DataFrame({"K": [5, 4], "metric": [5.0, 4.0]}))
        df = collect(store)
        self.assertEqual(list(df["K"]), [1, 2, 3, 4, 5])
        self.assertEqual(list(df["metric"]), [1.0, 2.0, 3.0, 4.0, 5.0])

    def test_empty(self):
        with self.assertRaises(NoArtifactsFoundError):
            collect(MemoryArtifactStore())

        # Files not following the convention don't count
        store = MemoryArtifactStore()
        store.write("notes.csv", _artifact(1, 2))
        store.write("other_1_2.csv", _artifact(1, 2))
        with self.assertRaises(NoArtifactsFoundError):
            collect(store)

    def test_complete(self):
        store = _store([(1, 5), (6, 10)])
        df = collect(store, expected=(1, 10))
        self.assertEqual(len(df), 10)
        df = collect(store, expected=ParameterRange(1, 10))
        self.assertEqual(len(df), 10)

    def test_incomplete(self):
        store = _store([(1, 5), (7, 10)])
        # Without an expected range, gaps pass through
        self.assertEqual(len(collect(store)), 9)

        with self.assertRaises(IncompleteSweepError) as cm:
            collect(store, expected=(1, 10))
        self.assertEqual(cm.exception.missing, [6])
        self.assertEqual(cm.exception.exit_code, 7)

        with self.assertRaises(IncompleteSweepError) as cm:
            collect(store, expected=(0, 12))
        self.assertEqual(cm.exception.missing, [0, 6, 11, 12])

    def test_duplicates(self):
        store = _store([(1, 5), (4, 8)])
        with self.assertRaises(DuplicateKeyError) as cm:
            collect(store)
        self.assertEqual(sorted(cm.exception.duplicates), [4, 5])
        self.assertEqual(cm.exception.duplicates[4],
                         ["result_1_5.csv", "result_4_8.csv"])

    def test_duplicates_allowed(self):
        naming = ArtifactNaming()
        store = MemoryArtifactStore()
        store.write(naming.encode(ParameterRange(1, 5)), _artifact(1, 5))
        store.write(naming.encode(ParameterRange(4, 8)),
                    _artifact(4, 8, offset=100.0))

        df = collect(store, allow_duplicates=True)
        self.assertEqual(list(df["K"]), list(range(1, 9)))
        # The artifact with the highest range wins
        row = df.set_index("K").loc[4]
        self.assertAlmostEqual(row["metric"], 100.4)
        row = df.set_index("K").loc[3]
        self.assertAlmostEqual(row["metric"], 0.3)

    def test_keys_outside_range(self):
        store = MemoryArtifactStore()
        store.write("result_1_3.csv", _artifact(1, 4))
        with self.assertRaises(ArtifactFormatError):
            collect(store)

    def test_bad_artifacts(self):
        store = _store([(1, 5)])
        store.write("result_6_7.csv", pd.DataFrame({"k": [6, 7],
                                                    "metric": [0.6, 0.7]}))
        with self.assertRaises(ArtifactFormatError):
            collect(store)

        store = _store([(1, 5)])
        store.write("result_6_7.csv", pd.DataFrame({"K": [6, 7],
                                                    "other": [0.6, 0.7]}))
        with self.assertRaises(ArtifactFormatError):
            collect(store)

        store = _store([(1, 5)])
        store.write_bytes("result_6_7.csv", b"")
        with self.assertRaises(ArtifactFormatError):
            collect(store)

    def test_custom_naming(self):
        naming = ArtifactNaming(prefix="glm_fit", ext=".npz")
        store = _store([(-4, -1), (0, 3)], naming=naming)
        # Default naming sees nothing
        with self.assertRaises(NoArtifactsFoundError):
            collect(store)
        df = collect(store, naming=naming, expected=(-4, 3))
        self.assertEqual(list(df["K"]), list(range(-4, 4)))

    def test_find_artifacts(self):
        store = _store([(10, 12), (2, 9), (-1, 1)])
        coll = ResultCollector(store)
        self.assertEqual([r.as_tuple() for _, r in coll.find_artifacts()],
                         [(-1, 1), (2, 9), (10, 12)])


class TestPersist(unittest.TestCase):
    def test_run_directory(self):
        with TemporaryDirectory() as tmpd:
            store = _store([(6, 10), (1, 5)],
                           store=DirectoryArtifactStore(tmpd))
            output = os.path.join(tmpd, "consolidated.csv")
            coll = ResultCollector(tmpd)
            df = coll.run(output, expected=(1, 10))

            saved = pd.read_csv(output)
            self.assertEqual(list(saved.columns), ["K", "metric"])
            self.assertEqual(list(saved["K"]), list(range(1, 11)))
            self.assertTrue(np.allclose(saved["metric"], df["metric"]))
            # Artifacts are left alone by default
            self.assertEqual(len(store.list()), 3)

            # A rerun overwrites the dataset and the output itself is never
            # taken for an artifact
            coll.run(output, cleanup=True)
            self.assertEqual(store.list(), ["consolidated.csv"])
            self.assertEqual(len(pd.read_csv(output)), 10)

    def test_failed_collection_keeps_artifacts(self):
        with TemporaryDirectory() as tmpd:
            store = _store([(1, 5), (7, 10)],
                           store=DirectoryArtifactStore(tmpd))
            output = os.path.join(tmpd, "consolidated.csv")
            with self.assertRaises(IncompleteSweepError):
                ResultCollector(store).run(output, expected=(1, 10),
                                           cleanup=True)
            self.assertFalse(os.path.exists(output))
            self.assertEqual(len(store.list()), 2)

    def test_formats(self):
        df = collect(_store([(1, 3)]))
        with TemporaryDirectory() as tmpd:
            persist(df, os.path.join(tmpd, "out.tsv"))
            saved = pd.read_csv(os.path.join(tmpd, "out.tsv"), sep="\t")
            self.assertEqual(list(saved["K"]), [1, 2, 3])

            persist(df, os.path.join(tmpd, "out.json"))
            saved = pd.read_json(os.path.join(tmpd, "out.json"),
                                 orient="records")
            self.assertEqual(list(saved["K"]), [1, 2, 3])

            persist(df, os.path.join(tmpd, "out.dat"), output_format="csv")
            saved = pd.read_csv(os.path.join(tmpd, "out.dat"))
            self.assertEqual(list(saved["K"]), [1, 2, 3])

            with self.assertRaises(ValueError):
                persist(df, os.path.join(tmpd, "out.xyz"))
            self.assertEqual(sorted(os.listdir(tmpd)),
                             ["out.dat", "out.json", "out.tsv"])


if __name__ == "__main__":
    unittest.main()
