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
Artifact stores.

Workers and the collector never talk to each other: the only channel
between them is the set of artifacts a store holds. An ArtifactStore offers
the handful of operations they need (list, exists, read, write, remove) so
that the merging logic can be run against a real directory
(DirectoryArtifactStore) as well as against an in-memory dictionary
(MemoryArtifactStore).

Artifacts are tables stored either as CSV (.csv, written and read with
pandas) or as NumPy archives (.npz, one array per column). Writes are
atomic: the content goes to a hidden temporary file first, which is then
renamed over the final name.
"""

import io
import os
import logging
import tempfile

import numpy as np
import pandas as pd

from jobsweep.errors import ArtifactFormatError

logger = logging.getLogger(__name__)

_NPZ_COLUMNS = '__columns__'


def dataframe_to_bytes(df, ext):
    """Serialise a DataFrame to the artifact format matching ext"""

    if ext == '.csv':
        return df.to_csv(index=False).encode('utf-8')
    elif ext == '.npz':
        buf = io.BytesIO()
        columns = [str(c) for c in df.columns]
        arrays = {c: df[c].to_numpy() for c in columns}
        arrays[_NPZ_COLUMNS] = np.array(columns)
        np.savez(buf, **arrays)
        return buf.getvalue()
    else:
        raise ValueError('Unknown artifact format: {0}'.format(ext))


def dataframe_from_bytes(data, ext):
    """Load a DataFrame from the bytes of an artifact of format ext"""

    if ext == '.csv':
        return pd.read_csv(io.BytesIO(data))
    elif ext == '.npz':
        with np.load(io.BytesIO(data), allow_pickle=False) as arch:
            if _NPZ_COLUMNS in arch.files:
                columns = [str(c) for c in arch[_NPZ_COLUMNS]]
            else:
                columns = list(arch.files)
            return pd.DataFrame({c: arch[c] for c in columns},
                                columns=columns)
    else:
        raise ValueError('Unknown artifact format: {0}'.format(ext))


class ArtifactStore(object):

    """ArtifactStore object

    Base class for all artifact stores. Child classes need to implement
    list, exists, read_bytes, write_bytes and remove; read and write handle
    the conversion from and to DataFrames.
    """

    def list(self):
        """Return the sorted list of the names of all artifacts in the
        store"""
        raise NotImplementedError()

    def exists(self, name):
        raise NotImplementedError()

    def read_bytes(self, name):
        raise NotImplementedError()

    def write_bytes(self, name, data):
        """Store data under name, atomically"""
        raise NotImplementedError()

    def remove(self, name):
        raise NotImplementedError()

    def read(self, name):
        """Load the artifact name as a DataFrame. Raises an
        ArtifactFormatError if it can't be parsed."""

        ext = os.path.splitext(name)[1]
        try:
            return dataframe_from_bytes(self.read_bytes(name), ext)
        except (ValueError, OSError, KeyError,
                pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ArtifactFormatError('Could not read artifact '
                                      '{0}: {1}'.format(name, e))

    def write(self, name, df):
        """Store DataFrame df as the artifact name"""
        ext = os.path.splitext(name)[1]
        self.write_bytes(name, dataframe_to_bytes(df, ext))
        logger.debug('Artifact {0} written ({1} rows)'.format(name, len(df)))


class DirectoryArtifactStore(ArtifactStore):

    """DirectoryArtifactStore object

    Keeps artifacts as files in a directory of the filesystem.
    """

    def __init__(self, path, create=False):
        """Initialize the DirectoryArtifactStore

        | Args:
        |   path (str): directory containing the artifacts
        |   create (Optional[bool]): if True, create the directory if it does
        |                            not exist. Default is False

        """

        self.path = os.path.abspath(path)
        if create:
            os.makedirs(self.path, exist_ok=True)
        elif not os.path.isdir(self.path):
            raise ValueError('Artifact directory {0} does not '
                             'exist'.format(self.path))

    def _fullpath(self, name):
        if os.path.basename(name) != name or name in ('', '.', '..'):
            raise ValueError('Invalid artifact name {0!r}'.format(name))
        return os.path.join(self.path, name)

    def list(self):
        return sorted(f for f in os.listdir(self.path)
                      if os.path.isfile(os.path.join(self.path, f)))

    def exists(self, name):
        return os.path.isfile(self._fullpath(name))

    def read_bytes(self, name):
        with open(self._fullpath(name), 'rb') as f:
            return f.read()

    def write_bytes(self, name, data):
        target = self._fullpath(name)
        # Hidden temporary name in the same directory, so the rename is
        # atomic and partial files never match an artifact name
        fd, tmpname = tempfile.mkstemp(prefix='.' + name + '.',
                                       suffix='.tmp', dir=self.path)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmpname, target)
        except BaseException:
            try:
                os.remove(tmpname)
            except OSError:
                pass
            raise

    def remove(self, name):
        os.remove(self._fullpath(name))

    def __repr__(self):
        return 'DirectoryArtifactStore({0!r})'.format(self.path)


class MemoryArtifactStore(ArtifactStore):

    """MemoryArtifactStore object

    Keeps artifacts as bytes in a dictionary. Useful for testing and for
    small sweeps run entirely within one process.
    """

    def __init__(self):
        self._files = {}

    def list(self):
        return sorted(self._files)

    def exists(self, name):
        return name in self._files

    def read_bytes(self, name):
        try:
            return self._files[name]
        except KeyError:
            raise OSError('No artifact named {0}'.format(name))

    def write_bytes(self, name, data):
        self._files[name] = bytes(data)

    def remove(self, name):
        try:
            del self._files[name]
        except KeyError:
            raise OSError('No artifact named {0}'.format(name))
