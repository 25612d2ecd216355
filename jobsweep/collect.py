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
Collection of the artifacts of a sweep into a consolidated dataset.

The ResultCollector lists the artifacts of a store that follow a naming
convention, recovers each one's parameter range from its name, loads the
rows and merges them into a single DataFrame sorted by key. Anything that
would make the merged dataset silently wrong is reported as an error:
overlapping artifacts (DuplicateKeyError), rows outside the range of their
artifact (ArtifactFormatError), an empty sweep (NoArtifactsFoundError) and,
when the expected range is known, missing keys (IncompleteSweepError).
"""

import os
import logging
import tempfile
from collections import defaultdict

import numpy as np
import pandas as pd

from jobsweep.errors import (ArtifactFormatError, DuplicateKeyError,
                             IncompleteSweepError, NoArtifactsFoundError)
from jobsweep.ranges import ArtifactNaming, ParameterRange
from jobsweep.store import DirectoryArtifactStore, ArtifactStore

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ('csv', 'tsv', 'txt', 'dat', 'json')
DEFAULT_OUTPUT = 'consolidated.csv'

_SOURCE_COL = '__artifact__'


def _as_range(r):
    if r is None or isinstance(r, ParameterRange):
        return r
    return ParameterRange(*r)


class ResultCollector(object):

    """ResultCollector object

    Merges the artifacts of a sweep found in an ArtifactStore.
    """

    def __init__(self, store, naming=None, key='K', allow_duplicates=False):
        """Initialize the ResultCollector

        | Args:
        |   store (ArtifactStore or str): the store holding the artifacts. A
        |                                 string is taken as the path of a
        |                                 directory
        |   naming (Optional[ArtifactNaming]): naming convention of the
        |                                      artifacts. Default is
        |                                      ArtifactNaming()
        |   key (Optional[str]): name of the key column. Default is 'K'
        |   allow_duplicates (Optional[bool]): if True, keys present in more
        |                                      than one artifact are not an
        |                                      error; the row from the
        |                                      artifact with the highest
        |                                      range wins. Default is False

        """

        if not isinstance(store, ArtifactStore):
            store = DirectoryArtifactStore(store)

        self.store = store
        self.naming = naming if naming is not None else ArtifactNaming()
        self.key = key
        self.allow_duplicates = allow_duplicates

    def find_artifacts(self):
        """Return a list of (name, ParameterRange) for all the artifacts in
        the store, sorted by range"""

        found = []
        for name in self.store.list():
            prange = self.naming.decode(name)
            if prange is not None:
                found.append((name, prange))

        return sorted(found, key=lambda x: x[1].as_tuple())

    def load_artifact(self, name, prange):
        """Load the rows of a single artifact and check them against its
        range"""

        df = self.store.read(name)

        if self.key not in df.columns:
            raise ArtifactFormatError('Artifact {0} has no key column '
                                      '{1}'.format(name, self.key))
        if len(df) > 0 and not pd.api.types.is_integer_dtype(df[self.key]):
            raise ArtifactFormatError('Key column of artifact {0} does not '
                                      'contain integers'.format(name))

        keys = df[self.key].to_numpy()
        outside = keys[(keys < prange.low) | (keys > prange.high)]
        if len(outside) > 0:
            raise ArtifactFormatError('Artifact {0} contains keys outside its '
                                      'range {1}: {2}'.format(
                                          name, prange,
                                          ', '.join(map(str, outside[:10]))))
        if df[self.key].duplicated().any():
            raise ArtifactFormatError('Artifact {0} contains repeated '
                                      'keys'.format(name))

        return df

    def collect(self, expected=None):
        """Merge all artifacts into a single DataFrame sorted by key.

        | Args:
        |   expected (Optional[ParameterRange or (int, int)]): full range the
        |                               sweep is meant to cover. If given,
        |                               an IncompleteSweepError is raised
        |                               if any of its keys is missing
        |
        | Returns:
        |   dataset (pandas.DataFrame): the consolidated dataset

        """

        expected = _as_range(expected)
        artifacts = self.find_artifacts()
        if len(artifacts) == 0:
            raise NoArtifactsFoundError('No artifacts matching {0} found in '
                                        '{1}'.format(self.naming.pattern,
                                                     self.store))

        logger.info('Merging {0} artifacts'.format(len(artifacts)))

        frames = []
        columns = None
        for name, prange in artifacts:
            df = self.load_artifact(name, prange)
            if columns is None:
                columns = list(df.columns)
            elif set(df.columns) != set(columns):
                raise ArtifactFormatError('Artifact {0} has columns {1}, '
                                          'expected {2}'.format(
                                              name, list(df.columns),
                                              columns))
            logger.debug('Artifact {0}: {1} rows'.format(name, len(df)))
            frames.append(df[columns].assign(**{_SOURCE_COL: name}))

        merged = pd.concat(frames, ignore_index=True)

        dupl = merged[self.key].duplicated(keep=False)
        if dupl.any():
            owners = defaultdict(list)
            for k, src in merged.loc[dupl, [self.key, _SOURCE_COL]].itertuples(
                    index=False):
                owners[int(k)].append(src)
            if not self.allow_duplicates:
                raise DuplicateKeyError(dict(owners))
            logger.warning('{0} keys found in more than one artifact, keeping '
                           'the last one'.format(len(owners)))
            # Artifacts are in ascending range order, so 'last' means the one
            # with the highest range
            merged = merged.drop_duplicates(subset=self.key, keep='last')

        merged = merged.drop(columns=_SOURCE_COL)
        merged = merged.sort_values(by=self.key, kind='mergesort')
        merged = merged.reset_index(drop=True)

        if expected is not None:
            self.check_complete(merged, expected)

        return merged

    def check_complete(self, dataset, expected):
        """Raise an IncompleteSweepError if any key of expected is missing
        from dataset"""

        expected = _as_range(expected)
        keys = dataset[self.key].to_numpy()
        missing = np.setdiff1d(np.arange(expected.low, expected.high + 1),
                               keys)
        if len(missing) > 0:
            raise IncompleteSweepError([int(k) for k in missing], expected)

        n_outside = int(np.sum((keys < expected.low) | (keys > expected.high)))
        if n_outside > 0:
            logger.warning('{0} keys fall outside the expected range '
                           '{1}'.format(n_outside, expected))

    def cleanup(self, names=None):
        """Remove the given artifacts (by default all the matching ones)
        from the store"""

        if names is None:
            names = [n for n, _ in self.find_artifacts()]
        for name in names:
            self.store.remove(name)
            logger.info('Artifact {0} removed'.format(name))

    def run(self, output, expected=None, output_format=None, cleanup=False):
        """Collect, persist the consolidated dataset to output and, if
        cleanup is True, remove the merged artifacts afterwards. Returns the
        dataset."""

        artifacts = [n for n, _ in self.find_artifacts()]
        dataset = self.collect(expected=expected)
        persist(dataset, output, output_format=output_format)
        if cleanup:
            self.cleanup(artifacts)

        return dataset


def collect(directory, naming=None, key='K', expected=None,
            allow_duplicates=False):
    """Merge the artifacts found in directory (a path or an ArtifactStore).
    See ResultCollector for the meaning of the arguments."""

    collector = ResultCollector(directory, naming=naming, key=key,
                                allow_duplicates=allow_duplicates)
    return collector.collect(expected=expected)


def guess_format(path):
    """Guess the output format from the extension of path"""
    fmt = os.path.splitext(path)[1][1:].lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError('Could not guess output format from {0}; use one of '
                         '{1}'.format(path, ', '.join(OUTPUT_FORMATS)))
    return fmt


def persist(dataset, path, output_format=None):
    """Write the consolidated dataset to path, replacing any previous
    version of it at once.

    | Args:
    |   dataset (pandas.DataFrame): the dataset to write
    |   path (str): output file
    |   output_format (Optional[str]): one of csv, tsv, txt, dat (the last
    |                                  three all tab separated) or json. If
    |                                  None, it is guessed from the extension
    |                                  of path

    """

    if output_format is None:
        output_format = guess_format(path)
    elif output_format not in OUTPUT_FORMATS:
        raise ValueError('Unknown output format: {0}'.format(output_format))

    path = os.path.abspath(path)
    folder, fname = os.path.split(path)
    fd, tmpname = tempfile.mkstemp(prefix='.' + fname + '.', suffix='.tmp',
                                   dir=folder)
    os.close(fd)
    try:
        if output_format == 'csv':
            dataset.to_csv(tmpname, index=False)
        elif output_format == 'json':
            dataset.to_json(tmpname, orient='records')
        else:
            dataset.to_csv(tmpname, index=False, sep='\t')
        os.replace(tmpname, path)
    except BaseException:
        try:
            os.remove(tmpname)
        except OSError:
            pass
        raise

    logger.info('Consolidated dataset ({0} rows) written to '
                '{1}'.format(len(dataset), path))
