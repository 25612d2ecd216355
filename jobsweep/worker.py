# Jobsweep - split, submit and merge cluster parameter sweeps
# Copyright (C) 2026 - The Jobsweep developers

# Jobsweep is free software: you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# Jobsweep is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.

# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""
Definition of the Worker class

A worker is the unit of work executed by each job of a sweep. It is invoked
with a parameter range [low, high], computes one row of real valued metrics
for every integer key in it and writes all of them to exactly one artifact,
named after the range. Either the whole artifact is written or nothing is:
a worker that fails leaves no trace in the artifact store.

To define your own worker:

1. inherit from jobsweep.worker.Worker and override compute (and, if the
   computation can be vectorised, compute_range), or wrap a plain function
   in a FunctionWorker;
2. create an instance of it in a Python file;
3. call it from the job template with

    ``run-worker <filename> {{LOW}} {{HIGH}}``

If the file defines more than one Worker instance, use the -n option to
pick one (the name to use is the name of the *variable* holding it).
"""

import os
import logging
import numbers

import numpy as np
import pandas as pd

from jobsweep.errors import WorkerContractError
from jobsweep.ranges import ArtifactNaming, ParameterRange
from jobsweep.store import DirectoryArtifactStore

logger = logging.getLogger(__name__)


def validate_rows(df, prange, key='K'):
    """Check that the rows in df respect the worker contract for prange,
    and return them sorted by key with the key column first.

    The contract is: a key column holding integers, one row for each key in
    [low, high] and no others, at least one metric column and only numeric
    metrics.

    | Args:
    |   df (pandas.DataFrame): rows produced by a worker
    |   prange (ParameterRange): range the worker was invoked with
    |   key (Optional[str]): name of the key column. Default is 'K'
    |
    | Returns:
    |   df (pandas.DataFrame): the validated rows
    |
    | Raises:
    |   WorkerContractError: if any of the conditions above is violated

    """

    if key not in df.columns:
        raise WorkerContractError('Key column {0} missing from the worker '
                                  'output'.format(key))

    metrics = [c for c in df.columns if c != key]
    if len(metrics) == 0:
        raise WorkerContractError('Worker output contains no metric columns')

    non_numeric = [c for c in metrics
                   if not pd.api.types.is_numeric_dtype(df[c])
                   or pd.api.types.is_bool_dtype(df[c])]
    if non_numeric:
        raise WorkerContractError('Non-numeric metric column(s): '
                                  '{0}'.format(', '.join(map(str,
                                                             non_numeric))))

    keys = df[key].to_numpy()
    if not pd.api.types.is_integer_dtype(df[key]):
        raise WorkerContractError('Key column {0} does not contain '
                                  'integers'.format(key))

    if len(np.unique(keys)) != len(keys):
        raise WorkerContractError('Worker output contains repeated keys')

    expected = np.arange(prange.low, prange.high + 1)
    missing = np.setdiff1d(expected, keys)
    extra = np.setdiff1d(keys, expected)
    if len(missing) > 0 or len(extra) > 0:
        raise WorkerContractError('Worker output for range {0} does not '
                                  'match it: {1} key(s) missing, {2} '
                                  'outside the range'.format(prange,
                                                             len(missing),
                                                             len(extra)))

    df = df[[key] + metrics].sort_values(by=key)
    return df.reset_index(drop=True)


class Worker(object):

    """Worker object

    Template to derive all specialised Workers. The following methods define
    its behaviour:

    1) load_input takes no arguments and returns the shared, read-only
       input data all the keys are computed from. By default it loads
       input_path (a .csv file with pandas, a .npy/.npz file with numpy) or
       returns None if no path was given;
    2) compute takes as arguments a single integer key and the input data
       and returns the metrics for that key, either as a dict
       {metric name: value} or as a single number (stored as 'value').
       Every key must return the same metrics;
    3) compute_range takes a ParameterRange and the input data and returns a
       DataFrame with one row per key. By default it calls compute for each
       key; override it when the computation can be vectorised.
    """

    def __init__(self, name='result', key='K', ext='.csv', output_dir='.',
                 input_path=None):
        """Initialize the Worker object

        | Args:
        |   name (Optional[str]): prefix of the artifact names. Default is
        |                         'result'
        |   key (Optional[str]): name of the key column. Default is 'K'
        |   ext (Optional[str]): artifact format, .csv or .npz. Default is
        |                        .csv
        |   output_dir (Optional[str]): directory the artifacts are written
        |                               into. Default is the current one
        |   input_path (Optional[str]): path of the shared input dataset

        """

        self.name = name
        self.key = key
        self.naming = ArtifactNaming(prefix=name, ext=ext)
        self.output_dir = output_dir
        self.input_path = input_path

    def load_input(self):
        """Return the read-only input data shared by all keys"""

        if self.input_path is None:
            return None

        ext = os.path.splitext(self.input_path)[1]
        if ext == '.csv':
            return pd.read_csv(self.input_path)
        elif ext in ('.npy', '.npz'):
            return np.load(self.input_path, allow_pickle=False)
        else:
            raise ValueError('Unsupported input format: {0}'.format(ext))

    def compute(self, key, data):
        """Return the metrics for key"""
        raise NotImplementedError('Worker.compute must be overridden')

    def compute_range(self, prange, data):
        """Return a DataFrame with the metrics for all keys in prange"""

        rows = []
        metrics = None
        for k in prange.keys():
            res = self.compute(k, data)
            if isinstance(res, numbers.Number):
                res = {'value': res}
            res = dict(res)
            if metrics is None:
                metrics = list(res.keys())
            elif set(res.keys()) != set(metrics):
                raise WorkerContractError('Key {0} returned metrics {1}, '
                                          'expected {2}'.format(
                                              k, sorted(res), sorted(metrics)))
            rows.append([k] + [res[m] for m in metrics])

        return pd.DataFrame(rows, columns=[self.key] + metrics)

    def run(self, low, high, store=None):
        """Compute all rows for [low, high] and write them as a single
        artifact.

        | Args:
        |   low (int): first key of the range
        |   high (int): last key of the range
        |   store (Optional[ArtifactStore]): where to write the artifact. By
        |                                    default a DirectoryArtifactStore
        |                                    on output_dir
        |
        | Returns:
        |   name (str): name of the artifact written

        """

        prange = ParameterRange(low, high)
        if store is None:
            store = DirectoryArtifactStore(self.output_dir, create=True)

        logger.info('Computing range {0} ({1} keys)'.format(prange,
                                                            prange.size))
        data = self.load_input()
        df = self.compute_range(prange, data)
        df = validate_rows(df, prange, key=self.key)

        name = self.naming.encode(prange)
        store.write(name, df)
        logger.info('Artifact {0} written'.format(name))

        return name


class FunctionWorker(Worker):

    """FunctionWorker object

    A Worker computing its rows with a plain function func(key, data),
    which follows the same conventions as Worker.compute.
    """

    def __init__(self, func, **kwargs):
        super(FunctionWorker, self).__init__(**kwargs)
        self.func = func

    def compute(self, key, data):
        return self.func(key, data)
