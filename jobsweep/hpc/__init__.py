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

"""Classes and functions required to submit the jobs of a sweep to a
queueing system (High Performance Computation). To be used with care - these
are liable to fail if some specific architecture has quirks that are not
accounted for!

Submission is fire-and-forget: JobSubmitter returns as soon as the queue has
acknowledged a job. Whether a sweep is over can be checked afterwards with
QueueInterface.outstanding or wait_for_sweep, using the sweep's tag.
"""

from jobsweep.hpc.queues import QueueInterface
from jobsweep.hpc.local import LocalQueueInterface
from jobsweep.hpc.submit import (JobSubmitter, JobDescription, JobHandle,
                                 submit_sweep, wait_for_sweep)

QUEUES = {
    'slurm': QueueInterface.SLURM,
    'lsf': QueueInterface.LSF,
    'gridengine': QueueInterface.GridEngine,
    'pbs': QueueInterface.PBS,
    'local': LocalQueueInterface,
}


def get_queue(name):
    """Return a QueueInterface for one of the supported queue names"""
    try:
        return QUEUES[name.lower()]()
    except KeyError:
        raise ValueError('Unknown queue {0}, must be one of '
                         '{1}'.format(name, ', '.join(sorted(QUEUES))))
