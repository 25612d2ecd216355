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
Parameter ranges and the naming convention for the artifacts they produce.

A ParameterRange is a closed interval of integer keys [low, high], the unit
of work of a single job. Each job's worker writes a single artifact whose
file name is derived from its range by an ArtifactNaming object; the same
object decodes the range back from the name when the results are collected,
so the file name is the only link needed between a worker and the
collector.
"""

import re
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

ARTIFACT_FORMATS = ('.csv', '.npz')
_PREFIX_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*$')
# No leading zeros and no negative zero, so that every integer has exactly
# one spelling
_INT_RE = r'(0|-?[1-9][0-9]*)'


class ParameterRange(BaseModel):
    """
    A contiguous, closed range of integer keys [low, high].
    """

    low: int = Field(..., description="First key of the range (included)")
    high: int = Field(..., description="Last key of the range (included)")

    model_config = ConfigDict(frozen=True)

    def __init__(self, low, high, **kwargs):
        super(ParameterRange, self).__init__(low=low, high=high, **kwargs)

    @model_validator(mode='after')
    def check_order(self):
        if self.low > self.high:
            raise ValueError('Invalid range: low ({0}) is greater than high '
                             '({1})'.format(self.low, self.high))
        return self

    @property
    def size(self) -> int:
        """Number of keys in the range"""
        return self.high - self.low + 1

    def keys(self) -> range:
        """All integer keys in the range, ascending"""
        return range(self.low, self.high + 1)

    def contains(self, key: int) -> bool:
        return self.low <= key <= self.high

    def overlaps(self, other: 'ParameterRange') -> bool:
        return self.low <= other.high and other.low <= self.high

    def as_tuple(self):
        return (self.low, self.high)

    def __str__(self):
        return '[{0}, {1}]'.format(self.low, self.high)


def split_range(low: int, high: int,
                chunk_size: Optional[int] = None) -> Iterator[ParameterRange]:
    """Split [low, high] into consecutive, disjoint ranges of at most
    chunk_size keys each, covering the whole interval. The last range may
    be shorter. If chunk_size is None the whole range is yielded at once.
    """

    full = ParameterRange(low, high)
    if chunk_size is None:
        yield full
        return

    chunk_size = int(chunk_size)
    if chunk_size < 1:
        raise ValueError('chunk_size must be a positive integer')

    for start in range(full.low, full.high + 1, chunk_size):
        yield ParameterRange(start, min(start + chunk_size - 1, full.high))


class ArtifactNaming(object):

    """ArtifactNaming object

    Encodes a ParameterRange into an artifact file name and decodes it back.
    Names take the form

        <prefix>_<low>_<high><ext>

    with low and high written as plain decimal integers (a minus sign for
    negative values, no leading zeros). The prefix must start with a letter
    or a digit and may only contain letters, digits, dots, dashes and
    underscores, so names are always safe as a path component. For a given
    prefix and extension, decode(encode(r)) == r for every range r, and
    decode returns None for names that encode does not produce.
    """

    def __init__(self, prefix='result', ext='.csv'):
        """Initialize the ArtifactNaming

        | Args:
        |   prefix (Optional[str]): fixed first part of every artifact name.
        |                           Default is 'result'
        |   ext (Optional[str]): file extension, which also sets the file
        |                        format of the artifacts. Can be .csv or
        |                        .npz. Default is .csv

        """

        if not _PREFIX_RE.match(prefix):
            raise ValueError('Invalid artifact prefix {0!r}: only letters, '
                             'digits, ".", "-" and "_" are '
                             'allowed'.format(prefix))
        if ext not in ARTIFACT_FORMATS:
            raise ValueError('Invalid artifact extension {0!r}, must be one '
                             'of {1}'.format(ext, ', '.join(ARTIFACT_FORMATS)))

        self.prefix = prefix
        self.ext = ext
        self._re = re.compile(r'^{0}_{1}_{1}{2}$'.format(re.escape(prefix),
                                                         _INT_RE,
                                                         re.escape(ext)))

    def encode(self, prange):
        """Return the artifact file name for a ParameterRange"""
        return '{0}_{1:d}_{2:d}{3}'.format(self.prefix, prange.low,
                                           prange.high, self.ext)

    def decode(self, fname):
        """Return the ParameterRange encoded in fname, or None if fname does
        not follow this naming convention"""
        match = self._re.match(fname)
        if match is None:
            return None
        low, high = int(match.group(1)), int(match.group(2))
        if low > high:
            return None
        return ParameterRange(low, high)

    def matches(self, fname):
        return self.decode(fname) is not None

    @property
    def pattern(self):
        """Glob pattern roughly matching the artifact names (decode remains
        the exact test)"""
        return '{0}_*_*{1}'.format(self.prefix, self.ext)

    def __repr__(self):
        return 'ArtifactNaming(prefix={0!r}, ext={1!r})'.format(self.prefix,
                                                                self.ext)
