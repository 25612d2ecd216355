#!/usr/bin/env python
"""
Test code for Workers
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

from jobsweep.errors import WorkerContractError  # noqa
from jobsweep.ranges import ParameterRange  # noqa
from jobsweep.store import MemoryArtifactStore  # noqa
from jobsweep.worker import FunctionWorker, Worker, validate_rows  # noqa

_TESTDATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             "test_data")


class SquareWorker(Worker):
    def compute(self, key, data):
        return {"square": float(key**2)}


class ScaledWorker(Worker):
    def compute_range(self, prange, data):
        keys = np.array(prange.keys())
        return pd.DataFrame({"K": keys,
                             "scaled": keys*float(data["scale"][0])})


class FailingWorker(Worker):
    def compute(self, key, data):
        if key == 4:
            raise RuntimeError("numerical failure")
        return {"x": 1.0}


class TestWorker(unittest.TestCase):
    def test_one_artifact(self):
        for low, high in [(1, 5), (7, 7), (-3, 3)]:
            store = MemoryArtifactStore()
            name = SquareWorker().run(low, high, store=store)

            self.assertEqual(store.list(), [name])
            self.assertEqual(name, "result_{0}_{1}.csv".format(low, high))

            df = store.read(name)
            self.assertEqual(list(df.columns), ["K", "square"])
            self.assertEqual(list(df["K"]), list(range(low, high + 1)))
            self.assertTrue(np.allclose(df["square"], df["K"]**2))

    def test_npz(self):
        store = MemoryArtifactStore()
        worker = FunctionWorker(lambda k, data: k*0.5, name="half", ext=".npz")
        name = worker.run(2, 4, store=store)
        self.assertEqual(name, "half_2_4.npz")
        df = store.read(name)
        self.assertEqual(list(df.columns), ["K", "value"])
        self.assertTrue(np.allclose(df["value"], [1.0, 1.5, 2.0]))

    def test_directory_output(self):
        with TemporaryDirectory() as tmpd:
            outdir = os.path.join(tmpd, "out")
            name = SquareWorker(output_dir=outdir).run(1, 3)
            self.assertEqual(os.listdir(outdir), [name])

    def test_input_data(self):
        with TemporaryDirectory() as tmpd:
            inpath = os.path.join(tmpd, "input.csv")
            pd.DataFrame({"scale": [3.0]}).to_csv(inpath, index=False)
            store = MemoryArtifactStore()
            name = ScaledWorker(input_path=inpath).run(1, 4, store=store)
            df = store.read(name)
            self.assertTrue(np.allclose(df["scaled"], [3.0, 6.0, 9.0, 12.0]))

    def test_failure_writes_nothing(self):
        store = MemoryArtifactStore()
        with self.assertRaises(RuntimeError):
            FailingWorker().run(1, 10, store=store)
        self.assertEqual(store.list(), [])

    def test_invalid_range(self):
        with self.assertRaises(ValueError):
            SquareWorker().run(5, 1, store=MemoryArtifactStore())

    def test_inconsistent_metrics(self):
        worker = FunctionWorker(lambda k, data: {"a": 1.0} if k < 3
                                else {"b": 1.0})
        store = MemoryArtifactStore()
        with self.assertRaises(WorkerContractError):
            worker.run(1, 5, store=store)
        self.assertEqual(store.list(), [])

    def test_base_compute(self):
        with self.assertRaises(NotImplementedError):
            Worker().run(1, 2, store=MemoryArtifactStore())


class TestValidateRows(unittest.TestCase):
    def setUp(self):
        self.prange = ParameterRange(1, 4)

    def test_valid(self):
        df = pd.DataFrame({"m": [4.0, 3.0, 2.0, 1.0], "K": [4, 3, 2, 1]})
        out = validate_rows(df, self.prange)
        self.assertEqual(list(out.columns), ["K", "m"])
        self.assertEqual(list(out["K"]), [1, 2, 3, 4])
        self.assertEqual(list(out["m"]), [1.0, 2.0, 3.0, 4.0])

    def test_violations(self):
        bad = [
            # missing key
            pd.DataFrame({"K": [1, 2, 3], "m": [0.0]*3}),
            # key outside the range
            pd.DataFrame({"K": [1, 2, 3, 4, 5], "m": [0.0]*5}),
            # repeated key
            pd.DataFrame({"K": [1, 2, 3, 4, 4], "m": [0.0]*5}),
            # no metrics
            pd.DataFrame({"K": [1, 2, 3, 4]}),
            # non numeric metric
            pd.DataFrame({"K": [1, 2, 3, 4], "m": ["a", "b", "c", "d"]}),
            # non integer keys
            pd.DataFrame({"K": [1.0, 2.0, 3.0, 4.0], "m": [0.0]*4}),
            # no key column
            pd.DataFrame({"k": [1, 2, 3, 4], "m": [0.0]*4}),
        ]
        for df in bad:
            with self.assertRaises(WorkerContractError):
                validate_rows(df, self.prange)


if __name__ == "__main__":
    unittest.main()
