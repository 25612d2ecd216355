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
Exceptions raised by Jobsweep.

Every error carries an exit_code, used by the command line tools so that
each kind of failure can be told apart by the calling shell.
"""


class JobsweepError(Exception):

    """Base class for all errors raised by Jobsweep"""

    exit_code = 1


class MissingBindingError(JobsweepError, KeyError):

    """A template contains placeholders for which no value was given"""

    exit_code = 3

    def __init__(self, names):
        self.names = sorted(names)
        super(MissingBindingError, self).__init__(
            'No value bound for placeholder(s): '
            '{0}'.format(', '.join(self.names)))

    def __str__(self):
        # KeyError would otherwise print the repr of the message
        return self.args[0]


class UnusedBindingError(JobsweepError, KeyError):

    """Values were given for placeholders the template does not contain"""

    exit_code = 3

    def __init__(self, names):
        self.names = sorted(names)
        super(UnusedBindingError, self).__init__(
            'Binding(s) not used by the template: '
            '{0}'.format(', '.join(self.names)))

    def __str__(self):
        return self.args[0]


class SubmissionError(JobsweepError):

    """The queue could not be reached or did not acknowledge a job.

    The transient job file is kept on disk for inspection; its path is
    stored in the script_path attribute."""

    exit_code = 4

    def __init__(self, message, script_path=None, stdout='', stderr=''):
        self.script_path = script_path
        # Handles of the jobs of a sweep submitted before the failure
        self.submitted = []
        self.stdout = stdout
        self.stderr = stderr
        if script_path is not None:
            message += '\n\tJob file kept at: {0}'.format(script_path)
        super(SubmissionError, self).__init__(message)


class NoArtifactsFoundError(JobsweepError):

    """No artifact matching the naming convention was found"""

    exit_code = 5


class DuplicateKeyError(JobsweepError):

    """Two artifacts contain rows for the same key"""

    exit_code = 6

    def __init__(self, duplicates):
        # duplicates: {key: [artifact names]}
        self.duplicates = duplicates
        keys = sorted(duplicates)
        shown = ', '.join('{0} ({1})'.format(k, ', '.join(duplicates[k]))
                          for k in keys[:10])
        if len(keys) > 10:
            shown += ', ... ({0} keys in total)'.format(len(keys))
        super(DuplicateKeyError, self).__init__(
            'Keys found in more than one artifact: {0}'.format(shown))


class IncompleteSweepError(JobsweepError):

    """The merged artifacts do not cover the expected range"""

    exit_code = 7

    def __init__(self, missing, expected):
        self.missing = list(missing)
        self.expected = expected
        shown = ', '.join(str(k) for k in self.missing[:20])
        if len(self.missing) > 20:
            shown += ', ...'
        super(IncompleteSweepError, self).__init__(
            '{0} key(s) of range {1} missing from the artifacts: '
            '{2}'.format(len(self.missing), expected, shown))


class ArtifactFormatError(JobsweepError):

    """An artifact could not be read or does not respect the worker
    contract"""

    exit_code = 8


class SweepPendingError(JobsweepError):

    """Jobs belonging to the sweep are still listed in the queue"""

    exit_code = 9

    def __init__(self, tag, jobs):
        self.tag = tag
        self.jobs = jobs
        super(SweepPendingError, self).__init__(
            '{0} job(s) of sweep {1} still in the queue: '
            '{2}'.format(len(jobs), tag, ', '.join(sorted(jobs))))


class WorkerContractError(JobsweepError):

    """A worker produced rows that do not match its parameter range"""

    exit_code = 10
